"""
Inline Edit Operations - Applies accepted suggestions to the document text.

Applying a suggestion replaces the FIRST occurrence of its original span with
its correction. A suggestion whose span is no longer present leaves the text
unchanged; stale suggestions are expected and never raise.
"""

from __future__ import annotations

import difflib
import logging
from typing import List, Sequence

from .models import ChangeDetail, EditResult, Suggestion

logger = logging.getLogger(__name__)


def apply_suggestion(text: str, suggestion: Suggestion) -> str:
    """
    Replace the first occurrence of suggestion.original with its correction.

    Example:
        apply_suggestion("a cat and a cat", Suggestion(original="cat", correction="dog", ...))
        # -> "a dog and a cat"
    """
    return text.replace(suggestion.original, suggestion.correction, 1)


def apply_with_details(text: str, suggestion: Suggestion) -> EditResult:
    """
    Apply a suggestion and describe the change.

    Args:
        text: Current document text
        suggestion: Suggestion to apply

    Returns:
        EditResult; success is False and the text is untouched when the
        original span is absent.
    """
    start = text.find(suggestion.original)
    if start == -1:
        logger.debug("Suggestion %s is stale, text left unchanged", suggestion.id)
        return EditResult(
            success=False,
            content_before=text,
            content_after=text,
            errors=["Original text not found in content"],
            suggestion_id=suggestion.id,
        )

    end = start + len(suggestion.original)
    new_text = text[:start] + suggestion.correction + text[end:]

    return EditResult(
        success=True,
        content_before=text,
        content_after=new_text,
        changes=[
            ChangeDetail(
                position_start=start,
                position_end=end,
                removed_text=suggestion.original,
                inserted_text=suggestion.correction,
            )
        ],
        diff=_generate_diff(text, new_text),
        suggestion_id=suggestion.id,
    )


def remove_suggestion(
    suggestions: Sequence[Suggestion], suggestion: Suggestion
) -> List[Suggestion]:
    """Pending list without the given suggestion, matched by identifier."""
    return [s for s in suggestions if s.id != suggestion.id]


def _generate_diff(before: str, after: str) -> str:
    """Generate unified diff between two texts."""
    diff = difflib.unified_diff(
        before.splitlines(keepends=True),
        after.splitlines(keepends=True),
        fromfile="before",
        tofile="after",
        lineterm="",
    )
    return "".join(diff)
