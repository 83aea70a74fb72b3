"""
Inline Edit Positioning - Anchors suggestions in the current document text.

Each suggestion names an exact `original` substring. Positioning finds the
first occurrence of that substring and keeps an ordered, non-overlapping
subset of suggestions:

1. Suggestions are ordered by the offset of their first occurrence.
2. Suggestions whose original span is no longer present are dropped.
3. A suggestion starting before the end of the previously kept one is dropped.

Only the first occurrence of a span is ever matched. A later duplicate of the
same substring is left unhighlighted even if it needs the same fix; this is a
known limitation kept on purpose since the intent of such duplicates is
ambiguous.
"""

from __future__ import annotations

import logging
from typing import Iterable, List

from .models import PositionedSuggestion, Suggestion

logger = logging.getLogger(__name__)


def locate_original(text: str, suggestion: Suggestion) -> int:
    """Offset of the first occurrence of the suggestion's span, -1 if absent."""
    return text.find(suggestion.original)


def position_suggestions(
    text: str, suggestions: Iterable[Suggestion]
) -> List[PositionedSuggestion]:
    """
    Compute ordered, non-overlapping placements of suggestions in text.

    Args:
        text: Current document text
        suggestions: Candidate suggestions in any order

    Returns:
        PositionedSuggestion list in ascending start order. Stale and
        overlapping suggestions are excluded silently.
    """
    located = [(locate_original(text, s), s) for s in suggestions]
    # sorted() is stable: equal offsets keep their input order
    located.sort(key=lambda item: item[0])

    positioned: List[PositionedSuggestion] = []
    last_end = 0

    for start, suggestion in located:
        if start == -1:
            logger.debug("Dropping stale suggestion %s", suggestion.id)
            continue
        if start < last_end:
            logger.debug(
                "Dropping suggestion %s overlapping previous span ending at %d",
                suggestion.id,
                last_end,
            )
            continue

        placed = PositionedSuggestion(start=start, suggestion=suggestion)
        positioned.append(placed)
        last_end = placed.end

    return positioned
