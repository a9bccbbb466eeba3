"""Duplex streaming transport for the analysis backend.

The coordinator never builds connections itself; it is handed a
Connector. WebSocketConnector is the production implementation on top of
the websockets library; tests substitute an in-memory one.
"""

import logging
from collections.abc import AsyncIterator
from typing import Protocol

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosed, ConnectionClosedError, WebSocketException

from doc_analysis.config import SessionConfig, get_session_config

logger = logging.getLogger(__name__)


class TransportError(Exception):
    """Base class for connection failures."""

    pass


class ConnectionFailedError(TransportError):
    """Raised when a connection cannot be established."""

    pass


class ConnectionLostError(TransportError):
    """Raised when an open connection closes without a normal closure."""

    pass


class Connection(Protocol):
    """An open duplex text-frame connection."""

    async def send(self, frame: str) -> None:
        """Send one text frame. Raises ConnectionLostError if closed."""
        ...

    def frames(self) -> AsyncIterator[str]:
        """Yield inbound frames until the connection closes.

        Ends normally on a clean close and raises ConnectionLostError
        otherwise.
        """
        ...

    async def close(self) -> None:
        """Close the connection with a normal closure."""
        ...


class Connector(Protocol):
    """Factory for connections to a streaming endpoint."""

    async def connect(self, url: str) -> Connection:
        """Open a connection. Raises ConnectionFailedError on failure."""
        ...


class WebSocketConnection:
    """Connection backed by a websockets client connection."""

    def __init__(self, websocket: ClientConnection) -> None:
        self._websocket = websocket

    async def send(self, frame: str) -> None:
        try:
            await self._websocket.send(frame)
        except ConnectionClosed as e:
            raise ConnectionLostError(f"Connection closed while sending: {e}") from e

    async def frames(self) -> AsyncIterator[str]:
        try:
            async for message in self._websocket:
                if isinstance(message, bytes):
                    message = message.decode("utf-8", errors="replace")
                yield message
        except ConnectionClosedError as e:
            raise ConnectionLostError(f"Connection closed abnormally: {e}") from e

    async def close(self) -> None:
        await self._websocket.close()


class WebSocketConnector:
    """Opens WebSocket connections using the session configuration."""

    def __init__(self, config: SessionConfig | None = None) -> None:
        self._config = config or get_session_config()

    async def connect(self, url: str) -> WebSocketConnection:
        """Open a WebSocket connection.

        Args:
            url: ws:// or wss:// endpoint URL.

        Returns:
            The open connection.

        Raises:
            ConnectionFailedError: If the handshake fails or times out.
        """
        try:
            websocket = await connect(
                url,
                open_timeout=self._config.open_timeout,
                max_size=self._config.max_frame_size,
            )
        except (OSError, TimeoutError, WebSocketException) as e:
            raise ConnectionFailedError(f"Failed to connect to {url}: {e}") from e

        logger.info(f"Connected to {url}")
        return WebSocketConnection(websocket)
