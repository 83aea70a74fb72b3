"""
Inline Edit - Suggestion reconciliation and text-range editing.

This package maps LLM-produced suggestions onto freeform mutable text,
renders them as highlighted segments and applies accepted edits or
externally generated insertions back into the live text:

1. **Positioning**: first-occurrence anchoring, stale and overlap exclusion
2. **Segments**: plain/highlighted runs that exactly rebuild the text
3. **Text ranges**: caret capture and insertion over an abstract surface
4. **Operations**: first-occurrence replacement of accepted suggestions

Usage:
    from inline_edit import WritingAssistantController, TextAnalyzer, AIChatClient

    controller = WritingAssistantController(
        TextAnalyzer(ai_service), AIChatClient(ai_service), text="Helo world"
    )
    await controller.check_text()
    segments = controller.segments()
"""

from .models import (
    ChangeDetail,
    ChatMessage,
    ChatRole,
    EditorState,
    EditResult,
    PositionedSuggestion,
    Segment,
    SegmentKind,
    SelectionRange,
    Suggestion,
    SuggestionCategory,
)
from .positioning import position_suggestions
from .segments import build_segments, join_segments, render_segments
from .text_range import EditableSurface, TextBufferSurface, TextRangeEditor
from .operations import apply_suggestion, apply_with_details, remove_suggestion
from .analyzer import (
    SuggestionClient,
    SuggestionServiceError,
    TextAnalyzer,
    parse_suggestions,
)
from .chat import AIChatClient, ChatClient, ChatSession
from .controller import WritingAssistantController

__all__ = [
    # Models
    "ChangeDetail",
    "ChatMessage",
    "ChatRole",
    "EditorState",
    "EditResult",
    "PositionedSuggestion",
    "Segment",
    "SegmentKind",
    "SelectionRange",
    "Suggestion",
    "SuggestionCategory",
    # Reconciliation
    "position_suggestions",
    "build_segments",
    "join_segments",
    "render_segments",
    "EditableSurface",
    "TextBufferSurface",
    "TextRangeEditor",
    "apply_suggestion",
    "apply_with_details",
    "remove_suggestion",
    # Collaborators
    "SuggestionClient",
    "SuggestionServiceError",
    "TextAnalyzer",
    "parse_suggestions",
    "AIChatClient",
    "ChatClient",
    "ChatSession",
    # Controller
    "WritingAssistantController",
]

__version__ = "1.0.0"
