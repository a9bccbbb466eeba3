"""Streaming chat session over a single duplex connection.

Responsibilities:
    - Connection lifecycle as an explicit state machine
    - Corpus upload followed by the first question
    - Classification of inbound frames (signals vs. reply tokens)
    - Token accumulation into the chat log

The connection is created by an injected Connector, so sessions run
against an in-memory transport in tests.
"""

from doc_analysis.session.chat_log import ChatLog
from doc_analysis.session.chat_session import ChatSession, NoDocumentsError, create_chat_session
from doc_analysis.session.coordinator import (
    CONNECTION_FAILURE_MESSAGE,
    EmptyMessageError,
    NotConnectedError,
    ReplyPendingError,
    SessionCoordinator,
    SessionError,
    SessionStateError,
)
from doc_analysis.session.files import FileSelection, FilesLockedError
from doc_analysis.session.prompts import DEFAULT_SUGGESTIONS, PromptSuggestion, PromptSuggestions
from doc_analysis.session.protocol import FrameKind, InboundFrame, parse_frame
from doc_analysis.session.transport import (
    Connection,
    ConnectionFailedError,
    ConnectionLostError,
    Connector,
    TransportError,
    WebSocketConnector,
)

__all__ = [
    "CONNECTION_FAILURE_MESSAGE",
    "DEFAULT_SUGGESTIONS",
    "ChatLog",
    "ChatSession",
    "Connection",
    "ConnectionFailedError",
    "ConnectionLostError",
    "Connector",
    "EmptyMessageError",
    "FileSelection",
    "FilesLockedError",
    "FrameKind",
    "InboundFrame",
    "NoDocumentsError",
    "NotConnectedError",
    "PromptSuggestion",
    "PromptSuggestions",
    "ReplyPendingError",
    "SessionCoordinator",
    "SessionError",
    "SessionStateError",
    "TransportError",
    "WebSocketConnector",
    "create_chat_session",
    "parse_frame",
]
