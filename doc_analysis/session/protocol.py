"""Inbound frame classification for the document analysis protocol.

Frame order on the wire:
    1. client -> server: full corpus text
    2. client -> server: first user message
    3. server -> client: protocol signals and streamed reply tokens
    4. client -> server: further user messages, one frame each

The protocol has no reply-complete marker. A reply ends implicitly when
the next user message is sent.
"""

from enum import Enum

from pydantic import BaseModel

RECEIPT_PREFIX = "Contract received:"
INVALID_REQUEST_PREFIX = "Invalid request:"
UPSTREAM_FAILURE_SENTINEL = "Error contacting LLM API."


class FrameKind(str, Enum):
    """Classification of an inbound frame."""

    EMPTY = "empty"
    RECEIPT = "receipt"
    VALIDATION_REJECTED = "validation_rejected"
    UPSTREAM_FAILURE = "upstream_failure"
    TOKEN = "token"

    @property
    def is_signal(self) -> bool:
        """Whether the frame is a protocol signal rather than chat content."""
        return self in (
            FrameKind.RECEIPT,
            FrameKind.VALIDATION_REJECTED,
            FrameKind.UPSTREAM_FAILURE,
        )


class InboundFrame(BaseModel):
    """A classified server frame.

    Attributes:
        kind: What the frame means for the session.
        text: Frame payload trimmed of surrounding whitespace.
    """

    kind: FrameKind
    text: str


def parse_frame(raw: str) -> InboundFrame:
    """Classify a raw server frame.

    Args:
        raw: Frame payload as received.

    Returns:
        InboundFrame with the trimmed text.
    """
    text = raw.strip()
    if not text:
        kind = FrameKind.EMPTY
    elif text.startswith(RECEIPT_PREFIX):
        kind = FrameKind.RECEIPT
    elif text.startswith(INVALID_REQUEST_PREFIX):
        kind = FrameKind.VALIDATION_REJECTED
    elif text == UPSTREAM_FAILURE_SENTINEL:
        kind = FrameKind.UPSTREAM_FAILURE
    else:
        kind = FrameKind.TOKEN
    return InboundFrame(kind=kind, text=text)
