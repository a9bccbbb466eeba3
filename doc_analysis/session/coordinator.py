"""Session coordinator: connection lifecycle and frame protocol.

Owns the single streaming connection of a session and drives an explicit
state machine from connection events:

    idle -> connecting -> open -> awaiting-reply <-> open
    connecting -> closed-error          (connection could not be opened)
    any -> closed-error                 (connection lost)
    any -> closed-clean                 (normal closure or local close)

Closed states are terminal. A new session needs a new coordinator.
"""

import asyncio
import logging
from collections.abc import Callable

from doc_analysis.config import SessionConfig, get_session_config
from doc_analysis.models import ChatMessage, Sender, SessionState
from doc_analysis.session.chat_log import ChatLog
from doc_analysis.session.protocol import FrameKind, InboundFrame, parse_frame
from doc_analysis.session.transport import (
    Connection,
    ConnectionFailedError,
    ConnectionLostError,
    Connector,
)

logger = logging.getLogger(__name__)

CONNECTION_FAILURE_MESSAGE = "Unable to connect to the server. Please try again later."
NOT_CONNECTED_MESSAGE = "WebSocket not connected"

Listener = Callable[["SessionCoordinator"], None]


class SessionError(Exception):
    """Base class for rejected session operations."""

    pass


class SessionStateError(SessionError):
    """Raised when an operation is not valid in the current state."""

    pass


class NotConnectedError(SessionError):
    """Raised when a message is sent without an open connection."""

    pass


class ReplyPendingError(SessionError):
    """Raised when a message is sent while a reply is still awaited."""

    pass


class EmptyMessageError(SessionError, ValueError):
    """Raised when a blank message is sent."""

    pass


class SessionCoordinator:
    """Drives one streaming session from corpus upload to close.

    The chat log, state and failure message are owned here; listeners are
    called after every change and must only read them.
    """

    def __init__(
        self,
        corpus: str,
        connector: Connector,
        config: SessionConfig | None = None,
    ) -> None:
        """Initialize an idle session.

        Args:
            corpus: Extracted document text, sent as the first frame.
            connector: Opens the streaming connection.
            config: Optional session configuration.
                    Loads from environment if not provided.
        """
        self._corpus = corpus
        self._connector = connector
        self._config = config or get_session_config()
        self._state = SessionState.IDLE
        self._chat_log = ChatLog()
        self._connection: Connection | None = None
        self._reader: asyncio.Task[None] | None = None
        self._failure_message: str | None = None
        self._is_waiting = False
        self._closing = False
        self._listeners: list[Listener] = []

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def chat_log(self) -> ChatLog:
        return self._chat_log

    @property
    def corpus(self) -> str:
        return self._corpus

    @property
    def failure_message(self) -> str | None:
        """User-facing advisory set when the connection fails."""
        return self._failure_message

    @property
    def is_waiting(self) -> bool:
        """True from a user message until the first reply token arrives."""
        return self._is_waiting

    @property
    def is_connected(self) -> bool:
        return self._connection is not None and self._state in (
            SessionState.OPEN,
            SessionState.AWAITING_REPLY,
        )

    @property
    def is_connecting(self) -> bool:
        return self._state is SessionState.CONNECTING

    @property
    def endpoint_url(self) -> str:
        return self._config.endpoint_url

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener.

        Returns:
            A callable that removes the listener.
        """
        self._listeners.append(listener)
        return lambda: self.unsubscribe(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("Session listener failed")

    def _set_state(self, state: SessionState) -> None:
        if state is not self._state:
            logger.debug(f"Session state {self._state.value} -> {state.value}")
            self._state = state
        self._notify()

    async def start(self, first_message: str) -> None:
        """Open the connection and send the corpus and first message.

        The first message is added to the chat log before connecting.
        Connection failures end the session in closed-error with
        failure_message set; they are not raised.

        Args:
            first_message: The user's opening question.

        Raises:
            SessionStateError: If the session was already started.
            EmptyMessageError: If the message is blank.
        """
        if self._state is not SessionState.IDLE:
            raise SessionStateError(f"Session already started (state: {self._state.value})")
        if not first_message.strip():
            raise EmptyMessageError("First message must not be empty")

        self._chat_log.append(ChatMessage(text=first_message, sender=Sender.USER))
        self._is_waiting = True
        self._failure_message = None
        self._set_state(SessionState.CONNECTING)

        url = self.endpoint_url
        try:
            connection = await self._connector.connect(url)
        except ConnectionFailedError as e:
            logger.warning(f"Could not open session: {e}")
            self.handle_close(clean=False)
            return

        if self._state is not SessionState.CONNECTING:
            # Closed or discarded while the handshake was in flight
            await connection.close()
            return

        self._set_state(SessionState.OPEN)
        try:
            await connection.send(self._corpus)
            await connection.send(first_message)
        except ConnectionLostError as e:
            logger.warning(f"Connection lost while sending corpus: {e}")
            self.handle_close(clean=False)
            return

        if self._state is not SessionState.OPEN:
            await connection.close()
            return

        logger.info(f"Sent corpus ({len(self._corpus)} chars) and first message")
        self._connection = connection
        self._set_state(SessionState.AWAITING_REPLY)
        self._reader = asyncio.create_task(self._read_frames(connection))

    async def send(self, message: str) -> None:
        """Send a follow-up user message.

        The message is added to the chat log before transmission and stays
        there even if it cannot be delivered.

        Args:
            message: The user's message.

        Raises:
            EmptyMessageError: If the message is blank.
            ReplyPendingError: If a reply is still awaited (log unchanged).
            NotConnectedError: If no connection is open.
        """
        if not message.strip():
            raise EmptyMessageError("Message must not be empty")
        if self._state is SessionState.AWAITING_REPLY:
            raise ReplyPendingError("Wait for the current reply before sending another message")

        self._chat_log.append(ChatMessage(text=message, sender=Sender.USER))
        connection = self._connection
        if self._state is not SessionState.OPEN or connection is None:
            logger.warning(f"Cannot send message in state {self._state.value}")
            self._notify()
            raise NotConnectedError(NOT_CONNECTED_MESSAGE)

        self._is_waiting = True
        self._set_state(SessionState.AWAITING_REPLY)
        try:
            await connection.send(message)
        except ConnectionLostError as e:
            logger.warning(f"Connection lost while sending message: {e}")
            self.handle_close(clean=False)
            raise NotConnectedError(NOT_CONNECTED_MESSAGE) from e

    def handle_frame(self, raw: str) -> None:
        """Process one inbound frame.

        Blank frames are ignored and protocol signals are logged. Anything
        else is a reply token merged into the chat log.
        """
        frame = parse_frame(raw)
        if frame.kind is FrameKind.EMPTY:
            return
        if frame.kind.is_signal:
            self._handle_signal(frame)
            return

        logger.debug(f"Token: {len(frame.text)} chars")
        self._chat_log.merge_assistant_token(frame.text)
        self._is_waiting = False
        if self._state is SessionState.AWAITING_REPLY:
            self._set_state(SessionState.OPEN)
        else:
            self._notify()

    def _handle_signal(self, frame: InboundFrame) -> None:
        if frame.kind is FrameKind.RECEIPT:
            logger.info(f"Backend acknowledged corpus: {frame.text}")
        elif frame.kind is FrameKind.VALIDATION_REJECTED:
            logger.warning(f"Backend rejected request: {frame.text}")
        else:
            logger.warning(f"Backend could not reach the model: {frame.text}")

    def handle_close(self, clean: bool) -> None:
        """Process the connection closing.

        Args:
            clean: Whether the close was a normal closure. Closes started by
                close() or discard() are always clean.
        """
        if self._state.is_terminal:
            return

        self._connection = None
        self._is_waiting = False
        if clean or self._closing:
            logger.info("Session closed")
            self._set_state(SessionState.CLOSED_CLEAN)
        else:
            logger.warning("Session closed unexpectedly")
            self._failure_message = CONNECTION_FAILURE_MESSAGE
            self._set_state(SessionState.CLOSED_ERROR)

    async def _read_frames(self, connection: Connection) -> None:
        clean = False
        try:
            async for raw in connection.frames():
                self.handle_frame(raw)
            clean = True
        except ConnectionLostError as e:
            logger.warning(f"Connection lost: {e}")
        except Exception:
            logger.exception("Inbound stream failed")
        finally:
            self.handle_close(clean)

    async def wait_closed(self) -> None:
        """Wait until the inbound stream ends."""
        if self._reader is not None:
            await self._reader

    async def close(self) -> None:
        """Close the connection normally and wait for the stream to end."""
        if self._state.is_terminal:
            return

        self._closing = True
        connection = self._connection
        if connection is not None:
            await connection.close()
            if self._reader is not None:
                await self._reader
        self.handle_close(clean=True)

    async def discard(self) -> None:
        """Drop the connection without draining pending replies.

        Used when a new session replaces this one.
        """
        self._closing = True
        reader, connection = self._reader, self._connection
        self.handle_close(clean=True)

        if reader is not None and not reader.done():
            reader.cancel()
        if connection is not None:
            await connection.close()
