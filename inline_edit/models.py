"""
Inline Edit Models - Data structures for suggestion reconciliation.

This module defines the core data models used throughout the inline_edit system:

Suggestion Types:
- SuggestionCategory: The six categories an analysis call may report
- Suggestion: A proposed edit naming an exact original substring

Reconciliation Types:
- PositionedSuggestion: A suggestion anchored at an offset of the current text
- SegmentKind / Segment: Plain or highlighted runs covering the whole text
- SelectionRange: Caret/selection offsets inside the editable surface

Result Types:
- ChangeDetail / EditResult: Outcome of applying a suggestion
- ChatRole / ChatMessage: Side-panel conversation entries
- EditorState: Controller state machine states
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, Field


class SuggestionCategory(str, Enum):
    """Categories reported by the suggestion-generation call."""

    GRAMMAR = "Grammar"
    CLARITY = "Clarity"
    STYLE = "Style"
    SPELLING = "Spelling"
    PUNCTUATION = "Punctuation"
    CONCISENESS = "Conciseness"

    @property
    def underline_color(self) -> str:
        """Presentation hint used to style highlighted segments."""
        return _UNDERLINE_COLORS[self]


_UNDERLINE_COLORS = {
    SuggestionCategory.GRAMMAR: "red",
    SuggestionCategory.CLARITY: "blue",
    SuggestionCategory.STYLE: "purple",
    SuggestionCategory.SPELLING: "yellow",
    SuggestionCategory.PUNCTUATION: "green",
    SuggestionCategory.CONCISENESS: "teal",
}


def _new_suggestion_id() -> str:
    return f"sug-{uuid.uuid4().hex[:8]}"


class EditBaseModel(BaseModel):
    """Base model enabling population by field name or alias."""
    model_config = {"populate_by_name": True}


class Suggestion(EditBaseModel):
    """
    A proposed edit produced by the analysis collaborator.

    `original` is expected to be an exact substring of the document at the
    time the suggestion was produced. That may stop being true once the text
    changes; every consumer tolerates it.
    """

    original: str = Field(
        ...,
        min_length=1,
        description="Exact phrase from the document that needs correction",
    )
    correction: str = Field(
        ...,
        min_length=1,
        description="Corrected version of the phrase",
    )
    explanation: str = Field(
        ...,
        min_length=1,
        description="Brief explanation of why the change is recommended",
    )
    category: SuggestionCategory = Field(
        ...,
        description="Suggestion category",
        validation_alias=AliasChoices("category", "type"),
    )
    id: str = Field(
        default_factory=_new_suggestion_id,
        description="Synthetic identifier assigned at ingestion",
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "original": self.original,
            "correction": self.correction,
            "explanation": self.explanation,
            "category": self.category.value,
        }


@dataclass(frozen=True)
class PositionedSuggestion:
    """A suggestion anchored at the first occurrence of its original span."""

    start: int
    suggestion: Suggestion

    @property
    def end(self) -> int:
        return self.start + len(self.suggestion.original)


class SegmentKind(str, Enum):
    """Kinds of rendered runs."""

    PLAIN = "plain"
    HIGHLIGHTED = "highlighted"


@dataclass(frozen=True)
class Segment:
    """
    A run of document text, either plain or highlighted.

    Concatenating the `text` of an ordered segment list reproduces the
    document exactly.
    """

    kind: SegmentKind
    text: str
    start: int
    suggestion: Optional[Suggestion] = None

    @property
    def end(self) -> int:
        return self.start + len(self.text)

    @property
    def is_highlighted(self) -> bool:
        return self.kind == SegmentKind.HIGHLIGHTED

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "kind": self.kind.value,
            "text": self.text,
            "start": self.start,
            "end": self.end,
        }
        if self.suggestion is not None:
            data["suggestion_id"] = self.suggestion.id
            data["category"] = self.suggestion.category.value
            data["underline_color"] = self.suggestion.category.underline_color
        return data


@dataclass(frozen=True)
class SelectionRange:
    """
    Caret or selection inside the editable surface, in character offsets.

    A collapsed range (start == end) is a plain caret.
    """

    start: int
    end: int

    def __post_init__(self):
        if self.start < 0 or self.end < self.start:
            raise ValueError(
                f"Invalid selection range ({self.start}, {self.end})"
            )

    @classmethod
    def caret(cls, offset: int) -> "SelectionRange":
        return cls(offset, offset)

    @property
    def collapsed(self) -> bool:
        return self.start == self.end

    def clamp(self, length: int) -> "SelectionRange":
        """Keep the range inside a text of the given length."""
        start = min(self.start, length)
        end = min(self.end, length)
        if (start, end) == (self.start, self.end):
            return self
        return SelectionRange(start, end)

    def to_dict(self) -> Dict[str, int]:
        return {"start": self.start, "end": self.end}


@dataclass
class ChangeDetail:
    """Details about a single change made to the text."""

    position_start: int
    position_end: int
    removed_text: str
    inserted_text: str

    @property
    def char_delta(self) -> int:
        """Net change in character count."""
        return len(self.inserted_text) - len(self.removed_text)


@dataclass
class EditResult:
    """
    Result of applying a suggestion.

    Attributes:
        success: Whether the original span was found and replaced
        content_before: Text before the edit
        content_after: Text after the edit (equal to before on failure)
        changes: Individual changes made
        errors: Error messages if any
        diff: Unified diff string showing changes
        suggestion_id: Identifier of the applied suggestion
    """

    success: bool
    content_before: str
    content_after: str
    changes: List[ChangeDetail] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    diff: str = ""
    suggestion_id: str = ""

    @property
    def char_delta(self) -> int:
        return len(self.content_after) - len(self.content_before)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "success": self.success,
            "content_before": self.content_before,
            "content_after": self.content_after,
            "changes": [
                {
                    "position": {
                        "start": c.position_start,
                        "end": c.position_end,
                    },
                    "removed": c.removed_text,
                    "inserted": c.inserted_text,
                }
                for c in self.changes
            ],
            "errors": self.errors,
            "diff": self.diff,
            "suggestion_id": self.suggestion_id,
            "stats": {"char_delta": self.char_delta},
        }


class ChatRole(str, Enum):
    USER = "user"
    MODEL = "model"


@dataclass(frozen=True)
class ChatMessage:
    role: ChatRole
    text: str

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role.value, "text": self.text}


class EditorState(str, Enum):
    """States of the writing-assistant controller."""

    EDITING_IDLE = "editing_idle"
    AWAITING_ANALYSIS = "awaiting_analysis"
    SUGGESTIONS_READY = "suggestions_ready"
