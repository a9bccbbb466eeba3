"""Ordered append-and-merge store of chat turns."""

from collections.abc import Iterator

from doc_analysis.models import ChatMessage, Sender


class ChatLog:
    """Chat turns in display order.

    Only the trailing element is ever replaced, and only while it is an
    assistant message accumulating streamed tokens. Two assistant messages
    are never adjacent.
    """

    def __init__(self) -> None:
        self._messages: list[ChatMessage] = []

    @property
    def messages(self) -> tuple[ChatMessage, ...]:
        """Read-only ordered view of the log."""
        return tuple(self._messages)

    @property
    def last(self) -> ChatMessage | None:
        return self._messages[-1] if self._messages else None

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[ChatMessage]:
        return iter(tuple(self._messages))

    def append(self, message: ChatMessage) -> None:
        """Append a message.

        An assistant message directly after another assistant message is
        merged into it instead.
        """
        if message.sender is Sender.ASSISTANT:
            self.merge_assistant_token(message.text)
        else:
            self._messages.append(message)

    def merge_assistant_token(self, text: str) -> ChatMessage:
        """Extend the trailing assistant message, or start a new one.

        Args:
            text: Token text to add.

        Returns:
            The assistant message now at the end of the log.
        """
        last = self.last
        if last is not None and last.sender is Sender.ASSISTANT:
            merged = last.model_copy(update={"text": last.text + text})
            self._messages[-1] = merged
        else:
            merged = ChatMessage(text=text, sender=Sender.ASSISTANT)
            self._messages.append(merged)
        return merged

    def clear(self) -> None:
        self._messages.clear()
