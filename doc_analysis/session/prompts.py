"""Suggested prompts offered before and between questions."""

from pydantic import BaseModel


class PromptSuggestion(BaseModel):
    """A canned prompt.

    Attributes:
        label: Short name shown to the user.
        text: Text inserted into the message draft.
    """

    label: str
    text: str


DEFAULT_SUGGESTIONS = (
    PromptSuggestion(label="Analyze key clauses", text="Analyze key clauses in this document."),
    PromptSuggestion(
        label="Identify potential risks", text="Identify potential risks in this document."
    ),
    PromptSuggestion(
        label="Spot non-standard terms", text="Spot non-standard terms in this document."
    ),
)


class PromptSuggestions:
    """Suggestions still available in this session. Each can be used once."""

    def __init__(self, suggestions: tuple[PromptSuggestion, ...] = DEFAULT_SUGGESTIONS) -> None:
        self._available = list(suggestions)

    @property
    def available(self) -> tuple[PromptSuggestion, ...]:
        return tuple(self._available)

    def use(self, label: str, draft: str = "") -> str:
        """Insert a suggestion into the draft and retire it.

        Args:
            label: Label of the suggestion to use.
            draft: Current message draft.

        Returns:
            The draft with the suggestion text appended (space-separated).

        Raises:
            KeyError: If no available suggestion has that label.
        """
        for suggestion in self._available:
            if suggestion.label == label:
                self._available.remove(suggestion)
                return f"{draft} {suggestion.text}" if draft else suggestion.text
        raise KeyError(label)
