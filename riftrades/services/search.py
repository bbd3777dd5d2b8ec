"""
Card search filtering.

Ranks catalog search options for the search box:
exact match, then prefix match, then alphabetical among the rest.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

# Upper bound on options shown before the user types anything
MAX_UNFILTERED_RESULTS = 20


@dataclass(frozen=True)
class SearchOption:
    """A selectable search result."""

    label: str
    card: Any = None


@dataclass(frozen=True, slots=True)
class HighlightSegment:
    text: str
    highlight: bool


def filter_card_options(
    options: Sequence[SearchOption],
    search_term: str | None,
    limit: int = 10,
) -> list[SearchOption]:
    """
    Filter and rank search options.

    Args:
        options: Candidate options in catalog order
        search_term: Text typed by the user
        limit: Maximum number of options to return

    Returns:
        Options whose label contains the term (case-insensitive), ranked.
        A blank term returns the first options unfiltered.
    """
    if not search_term or not search_term.strip():
        return list(options[: min(limit, MAX_UNFILTERED_RESULTS)])

    term = search_term.lower().strip()
    matching = [option for option in options if term in (option.label or "").lower()]

    def sort_key(option: SearchOption) -> tuple[bool, bool, str]:
        label = (option.label or "").lower()
        return (label != term, not label.startswith(term), label)

    return sorted(matching, key=sort_key)[:limit]


def highlight_match(text: str, search_term: str | None) -> list[HighlightSegment]:
    """
    Split text around the first case-insensitive occurrence of a term.

    Example:
        >>> highlight_match("Flame Chompers", "cho")
        [HighlightSegment(text='Flame ', highlight=False),
         HighlightSegment(text='Cho', highlight=True),
         HighlightSegment(text='mpers', highlight=False)]
    """
    if not search_term or not text:
        return [HighlightSegment(text=text, highlight=False)]

    index = text.lower().find(search_term.lower())
    if index == -1:
        return [HighlightSegment(text=text, highlight=False)]

    end = index + len(search_term)
    segments: list[HighlightSegment] = []
    if index > 0:
        segments.append(HighlightSegment(text=text[:index], highlight=False))
    segments.append(HighlightSegment(text=text[index:end], highlight=True))
    if end < len(text):
        segments.append(HighlightSegment(text=text[end:], highlight=False))
    return segments
