import mimetypes
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class Sender(str, Enum):
    """Author of a chat message."""

    USER = "user"
    ASSISTANT = "assistant"


class SessionState(str, Enum):
    """Lifecycle states of a streaming session."""

    IDLE = "idle"
    CONNECTING = "connecting"
    OPEN = "open"
    AWAITING_REPLY = "awaiting-reply"
    CLOSED_CLEAN = "closed-clean"
    CLOSED_ERROR = "closed-error"

    @property
    def is_terminal(self) -> bool:
        return self in (SessionState.CLOSED_CLEAN, SessionState.CLOSED_ERROR)


class DocumentKind(str, Enum):
    """Recognized document kinds."""

    PDF = "pdf"
    TEXT = "text"


class ChatMessage(BaseModel):
    """A single chat turn.

    Attributes:
        text: The message text.
        sender: Who wrote it (user or assistant).
    """

    model_config = ConfigDict(frozen=True)

    text: str
    sender: Sender


class ExtractedDocument(BaseModel):
    """Sanitized text extracted from one uploaded file.

    Attributes:
        filename: Original file name.
        kind: PDF or text.
        label: Header label used in the corpus (PDF, TXT, MARKDOWN, ...).
        body: Sanitized text, or a sentinel when extraction found nothing.
        pages: Page count for PDFs (0 when parsing failed), None for text.
    """

    model_config = ConfigDict(frozen=True)

    filename: str
    kind: DocumentKind
    label: str
    body: str
    pages: int | None = Field(default=None, ge=0)


class CorpusSection(BaseModel):
    """One document block recovered from an assembled corpus."""

    model_config = ConfigDict(frozen=True)

    filename: str
    label: str
    body: str


class UploadedFile(BaseModel):
    """A user-selected file with its declared media type.

    Attributes:
        filename: File name as selected by the user.
        media_type: Declared media type (e.g. application/pdf, text/plain).
        content: Raw file bytes.
    """

    filename: str = Field(..., min_length=1)
    media_type: str = ""
    content: bytes = b""

    async def read(self) -> bytes:
        """Return the raw file bytes."""
        return self.content

    @classmethod
    def from_path(cls, path: Path, media_type: str | None = None) -> "UploadedFile":
        """Load a file from disk, guessing its media type from the extension.

        Args:
            path: Path to the file.
            media_type: Explicit media type, overrides the guess.

        Returns:
            UploadedFile with the file's bytes.
        """
        if media_type is None:
            guessed, _ = mimetypes.guess_type(path.name)
            if guessed is None and path.suffix.lower() in (".md", ".markdown"):
                guessed = "text/markdown"
            media_type = guessed or ""
        return cls(filename=path.name, media_type=media_type, content=path.read_bytes())
