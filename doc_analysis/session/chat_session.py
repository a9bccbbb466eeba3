"""User-facing chat session: file selection, extraction and coordinator.

The first submitted message locks the selected files, extracts them and
starts a coordinator with the resulting corpus. Later messages go straight
to the coordinator. Starting over discards the old connection and log.
"""

import logging
import uuid
from collections.abc import Callable

from doc_analysis.config import SessionConfig, get_session_config
from doc_analysis.models import ChatMessage, CorpusSection, ExtractedDocument
from doc_analysis.parsing import extract_corpus, split_corpus
from doc_analysis.session.coordinator import Listener, ReplyPendingError, SessionCoordinator
from doc_analysis.session.files import FileSelection
from doc_analysis.session.prompts import PromptSuggestions
from doc_analysis.session.transport import Connector, WebSocketConnector

logger = logging.getLogger(__name__)


class NoDocumentsError(Exception):
    """Raised when the first message is sent without any selected file."""

    pass


class ChatSession:
    """Manages chat state for a user session."""

    def __init__(
        self,
        connector: Connector | None = None,
        config: SessionConfig | None = None,
    ) -> None:
        self._config = config or get_session_config()
        self._connector = connector or WebSocketConnector(self._config)
        self._listeners: list[Listener] = []
        self.session_id: str = str(uuid.uuid4())
        self.files = FileSelection()
        self.suggestions = PromptSuggestions()
        self.documents: list[ExtractedDocument] = []
        self.coordinator: SessionCoordinator | None = None
        self._starting = False

    @property
    def corpus(self) -> str | None:
        return self.coordinator.corpus if self.coordinator else None

    @property
    def messages(self) -> tuple[ChatMessage, ...]:
        return self.coordinator.chat_log.messages if self.coordinator else ()

    @property
    def sections(self) -> list[CorpusSection]:
        """Per-document sections of the sent corpus."""
        return split_corpus(self.corpus) if self.corpus else []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener on the current and every future coordinator.

        Returns:
            A callable that removes the listener.
        """
        self._listeners.append(listener)
        if self.coordinator is not None:
            self.coordinator.subscribe(listener)
        return lambda: self.unsubscribe(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)
        if self.coordinator is not None:
            self.coordinator.unsubscribe(listener)

    async def submit(self, message: str) -> None:
        """Send a message, starting the session on the first one.

        Blank messages are ignored.

        Args:
            message: The user's message.

        Raises:
            NoDocumentsError: If the first message is sent with no files.
            ReplyPendingError: If the session is still starting.
            SessionError: If the coordinator rejects a follow-up message.
        """
        if not message.strip():
            return

        if self._starting:
            raise ReplyPendingError("Session is still starting")
        if self.coordinator is not None:
            await self.coordinator.send(message)
            return

        if not len(self.files):
            raise NoDocumentsError(
                "Please upload at least one document before sending your first message."
            )

        self._starting = True
        try:
            self.files.lock()
            corpus, self.documents = await extract_corpus(self.files.files)

            coordinator = SessionCoordinator(corpus, self._connector, self._config)
            for listener in self._listeners:
                coordinator.subscribe(listener)
            self.coordinator = coordinator

            logger.info(
                f"Starting session {self.session_id[:8]} with {len(self.documents)} document(s)"
            )
            await coordinator.start(message)
        finally:
            self._starting = False

    async def new_session(self) -> None:
        """Discard the current session and start over with no files."""
        if self.coordinator is not None:
            await self.coordinator.discard()
        self.coordinator = None
        self.documents = []
        self.files.reset()
        self.suggestions = PromptSuggestions()
        self.session_id = str(uuid.uuid4())

    async def close(self) -> None:
        if self.coordinator is not None:
            await self.coordinator.close()


def create_chat_session(config: SessionConfig | None = None) -> ChatSession:
    """Create a chat session connected over WebSocket.

    Args:
        config: Optional session configuration.
                Loads from environment if not provided.
    """
    config = config or get_session_config()
    return ChatSession(WebSocketConnector(config), config)
