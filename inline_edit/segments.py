"""
Inline Edit Segments - Splits document text into plain and highlighted runs.

The presentation layer renders the returned segments in order. The list
always covers the whole text with no gaps and no overlaps, so joining the
segment texts gives back the document unchanged.
"""

from __future__ import annotations

from typing import Iterable, List

from .models import PositionedSuggestion, Segment, SegmentKind, Suggestion
from .positioning import position_suggestions


def render_segments(
    text: str, positioned: Iterable[PositionedSuggestion]
) -> List[Segment]:
    """
    Turn positioned suggestions into an ordered segment list.

    Args:
        text: Document text the positions were computed against
        positioned: Output of position_suggestions(), ascending and
            non-overlapping

    Returns:
        Segments covering [0, len(text)). Empty text yields no segments.
    """
    segments: List[Segment] = []
    cursor = 0

    for placed in positioned:
        if placed.start > cursor:
            segments.append(
                Segment(
                    kind=SegmentKind.PLAIN,
                    text=text[cursor:placed.start],
                    start=cursor,
                )
            )
        segments.append(
            Segment(
                kind=SegmentKind.HIGHLIGHTED,
                text=text[placed.start:placed.end],
                start=placed.start,
                suggestion=placed.suggestion,
            )
        )
        cursor = placed.end

    if cursor < len(text):
        segments.append(
            Segment(kind=SegmentKind.PLAIN, text=text[cursor:], start=cursor)
        )

    return segments


def build_segments(text: str, suggestions: Iterable[Suggestion]) -> List[Segment]:
    """Position suggestions against text and render them in one step."""
    return render_segments(text, position_suggestions(text, suggestions))


def join_segments(segments: Iterable[Segment]) -> str:
    return "".join(segment.text for segment in segments)
