"""Text sanitization applied to every extracted document body.

Only printable ASCII, newlines and tabs survive. Text in non-Latin scripts
is removed entirely; this is a known limitation of the corpus format.
"""

import re

# Bullets, geometric shapes, stars, card suits, dingbats, replacement char,
# zero-width/formatting marks and typographic spaces.
_DECORATIVE_RE = re.compile(
    "["
    "\u2022\u2023\u25E6\u2043\u2219\u25AA\u25AB\u25A0\u25A1\u25B2\u25BC"
    "\u25C6\u25C7\u25CB\u25CF\u25D8\u25D9\u25E2\u25E3\u25E4\u25E5"
    "\u2605\u2606\u2660\u2661\u2662\u2663\u2665\u2666\u2667\u2668"
    "\u2670\u2671\u2709\u2764\u2794\u2B50\u2B55\uFFFD"
    "\u2028\u2029\u200B\u200C\u200D\uFEFF\u00A0\u202F\u205F\u3000"
    "\u2000-\u200F\u2010-\u201F\u2020-\u2027\u2030-\u203F"
    "\u2040-\u204F\u2050-\u205F\u2060-\u206F\uFFF0-\uFFFF"
    "]"
)
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_NON_PRINTABLE_RE = re.compile(r"[^\x20-\x7e\n\t]")
_MULTI_SPACE_RE = re.compile(r" {2,}")
# A run of 3+ newlines, counting newlines separated only by spaces
_MULTI_NEWLINE_RE = re.compile(r"\n(?: *\n){2,}")
_SPACE_AROUND_NEWLINE_RE = re.compile(r" *\n *")


def sanitize_text(text: str) -> str:
    """Normalize extracted text into the corpus character set.

    Steps, in order: strip decorative Unicode, strip ASCII control
    characters (except newline and tab), drop everything outside printable
    ASCII, collapse repeated spaces, collapse 3+ newlines to two, remove
    spaces around newlines, trim.

    Args:
        text: Raw extracted text.

    Returns:
        Sanitized text. Applying the function twice gives the same result.
    """
    cleaned = _DECORATIVE_RE.sub("", text)
    cleaned = _CONTROL_RE.sub("", cleaned)
    cleaned = _NON_PRINTABLE_RE.sub("", cleaned)
    cleaned = _MULTI_SPACE_RE.sub(" ", cleaned)
    cleaned = _MULTI_NEWLINE_RE.sub("\n\n", cleaned)
    cleaned = _SPACE_AROUND_NEWLINE_RE.sub("\n", cleaned)
    return cleaned.strip()
