"""Pydantic models shared by the extraction pipeline and the chat session.

Models:
    - ChatMessage: One turn in the chat log
    - SessionState: Lifecycle of the streaming connection
    - ExtractedDocument: Sanitized text of one uploaded file
    - CorpusSection: Document block recovered from a corpus
    - UploadedFile: User-selected file with its declared media type
"""

from doc_analysis.models.schemas import (
    ChatMessage,
    CorpusSection,
    DocumentKind,
    ExtractedDocument,
    Sender,
    SessionState,
    UploadedFile,
)

__all__ = [
    "ChatMessage",
    "CorpusSection",
    "DocumentKind",
    "ExtractedDocument",
    "Sender",
    "SessionState",
    "UploadedFile",
]
