"""
Inline Edit Controller - Owns the document text and the suggestion lifecycle.

State machine:

    EDITING_IDLE --check_text()--> AWAITING_ANALYSIS --success--> SUGGESTIONS_READY
         ^                              |                               |
         |<-----------failure-----------+                               |
         |<------------------- any text change --------------------------+

While AWAITING_ANALYSIS the surface is read-only: text changes, insertions
and applications are rejected and no second analysis call is issued.
Positions are never cached; segments are recomputed from the current text on
every call so a stale highlight cannot be rendered over changed text.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from config import config
from logging_utils import Phase, PhaseLogger

from .analyzer import SuggestionClient, SuggestionServiceError
from .chat import ChatClient, ChatSession
from .models import (
    ChatMessage,
    EditorState,
    EditResult,
    PositionedSuggestion,
    Segment,
    SelectionRange,
    Suggestion,
)
from .operations import apply_with_details, remove_suggestion
from .positioning import position_suggestions
from .segments import render_segments
from .text_range import EditableSurface, TextBufferSurface, TextRangeEditor

logger = logging.getLogger(__name__)


def count_words(text: str) -> int:
    return len(text.strip().split())


class WritingAssistantController:
    """
    Top-level controller of one editor view.

    Example:
        controller = WritingAssistantController(analyzer, chat_client, text="Helo world")
        await controller.check_text()
        for segment in controller.segments():
            ...
        controller.apply_suggestion(controller.suggestions[0].id)
    """

    def __init__(
        self,
        suggestion_client: SuggestionClient,
        chat_client: ChatClient,
        surface: Optional[EditableSurface] = None,
        text: Optional[str] = None,
        phase_logger: Optional[PhaseLogger] = None,
    ):
        self.suggestion_client = suggestion_client
        self.phase_logger = phase_logger
        self.chat = ChatSession(chat_client, phase_logger=phase_logger)
        self.range_editor = TextRangeEditor()

        if surface is None:
            surface = TextBufferSurface(config.EDITOR.demo_text if text is None else text)
        elif text is not None:
            surface.write_text(text)
        self.surface = surface

        self._text = surface.read_text()
        self._suggestions: List[Suggestion] = []
        self.active_suggestion: Optional[Suggestion] = None
        self.error: Optional[str] = None
        self.state = EditorState.EDITING_IDLE
        self.last_selection: Optional[SelectionRange] = None

    # =========================================================================
    # READ ACCESS
    # =========================================================================

    @property
    def text(self) -> str:
        return self._text

    @property
    def suggestions(self) -> List[Suggestion]:
        return list(self._suggestions)

    @property
    def is_busy(self) -> bool:
        return self.state == EditorState.AWAITING_ANALYSIS

    @property
    def word_count(self) -> int:
        return count_words(self._text)

    def positioned(self) -> List[PositionedSuggestion]:
        return position_suggestions(self._text, self._suggestions)

    def segments(self) -> List[Segment]:
        return render_segments(self._text, self.positioned())

    def find_suggestion(self, suggestion_id: str) -> Optional[Suggestion]:
        for suggestion in self._suggestions:
            if suggestion.id == suggestion_id:
                return suggestion
        return None

    # =========================================================================
    # TEXT CHANGES
    # =========================================================================

    def handle_text_change(self, new_text: str) -> bool:
        """
        Record a change of the document text.

        Any existing suggestion is discarded since its position can no longer
        be trusted.

        Returns:
            False when rejected because an analysis call is outstanding.
        """
        if self.is_busy:
            logger.warning("Text change rejected while analysis is in progress")
            return False

        self._text = new_text
        if self.surface.read_text() != new_text:
            self.surface.write_text(new_text)
        if self._suggestions or self.active_suggestion:
            self._suggestions = []
            self.active_suggestion = None
        self.state = EditorState.EDITING_IDLE
        return True

    # =========================================================================
    # ANALYSIS
    # =========================================================================

    async def check_text(self) -> List[Suggestion]:
        """
        Ask the suggestion collaborator to analyse the current text.

        Failures are stored in `error` for display; the busy flag is always
        cleared so the user can retry.
        """
        if not self._text.strip():
            self._suggestions = []
            self.active_suggestion = None
            return []
        if self.is_busy:
            logger.warning("Analysis already in progress, ignoring request")
            return self.suggestions

        self._suggestions = []
        self.active_suggestion = None
        self.error = None
        self.state = EditorState.AWAITING_ANALYSIS
        self.surface.read_only = True

        succeeded = False
        try:
            suggestions = await self.suggestion_client.generate_suggestions(self._text)
            succeeded = True
        except SuggestionServiceError as exc:
            self.error = str(exc)
            return []
        except Exception as exc:
            logger.error("Suggestion client failed: %s", exc)
            self.error = config.EDITOR.analysis_error_message
            return []
        finally:
            self.surface.read_only = False
            if not succeeded:
                self.state = EditorState.EDITING_IDLE

        self._suggestions = list(suggestions)
        self.state = EditorState.SUGGESTIONS_READY
        logger.info(
            "%d suggestions ready, %d placed in text",
            len(self._suggestions),
            len(self.positioned()),
        )
        return self.suggestions

    # =========================================================================
    # SUGGESTION DETAIL AND APPLICATION
    # =========================================================================

    def select_suggestion(self, suggestion_id: str) -> Optional[Suggestion]:
        """Open the detail view of a suggestion; unknown ids are ignored."""
        suggestion = self.find_suggestion(suggestion_id)
        if suggestion is not None:
            self.active_suggestion = suggestion
        return suggestion

    def dismiss_suggestion(self) -> None:
        self.active_suggestion = None

    def apply_suggestion(self, suggestion_id: str) -> EditResult:
        """
        Accept a suggestion.

        Replaces the first occurrence of its original span, removes it from
        the pending list and closes the detail view. The remaining
        suggestions are kept; those made stale by the edit are dropped at the
        next positioning pass.
        """
        suggestion = self.find_suggestion(suggestion_id)
        if suggestion is None:
            return EditResult(
                success=False,
                content_before=self._text,
                content_after=self._text,
                errors=[f"Unknown suggestion {suggestion_id}"],
                suggestion_id=suggestion_id,
            )
        if self.is_busy:
            logger.warning("Suggestion %s not applied while analysis is in progress", suggestion_id)
            return EditResult(
                success=False,
                content_before=self._text,
                content_after=self._text,
                errors=["Analysis in progress"],
                suggestion_id=suggestion_id,
            )

        if self.phase_logger:
            with self.phase_logger.phase(Phase.APPLY, sub_label=suggestion_id):
                result = apply_with_details(self._text, suggestion)
        else:
            result = apply_with_details(self._text, suggestion)

        self._text = result.content_after
        if self.surface.read_text() != self._text:
            self.surface.write_text(self._text)
        self._suggestions = remove_suggestion(self._suggestions, suggestion)
        self.active_suggestion = None
        if not self._suggestions:
            self.state = EditorState.EDITING_IDLE
        return result

    # =========================================================================
    # CARET AND INSERTION
    # =========================================================================

    def blur(self) -> Optional[SelectionRange]:
        """Remember the surface selection as it loses focus."""
        selection = self.range_editor.capture_selection(self.surface)
        if selection is not None:
            self.last_selection = selection
        self.surface.blur()
        return selection

    def insert_text(self, new_text: str) -> Optional[SelectionRange]:
        """
        Insert text where the user last was (end of document as fallback).

        Returns:
            The new remembered caret, or None when rejected while busy.
        """
        if self.is_busy:
            logger.warning("Insertion rejected while analysis is in progress")
            return None

        if self.phase_logger:
            with self.phase_logger.phase(Phase.INSERT):
                caret = self.range_editor.insert_at(self.surface, self.last_selection, new_text)
        else:
            caret = self.range_editor.insert_at(self.surface, self.last_selection, new_text)

        self.last_selection = caret
        self.handle_text_change(self.surface.read_text())
        return caret

    # =========================================================================
    # CHAT
    # =========================================================================

    async def send_chat(self, message: str) -> Optional[ChatMessage]:
        return await self.chat.send(message)

    def insert_chat_message(self, index: int) -> Optional[SelectionRange]:
        """Insert an assistant reply into the document."""
        return self.insert_text(self.chat.message_text(index))

    # =========================================================================
    # SNAPSHOT
    # =========================================================================

    def snapshot(self) -> Dict[str, Any]:
        """JSON-ready view state for the presentation layer."""
        return {
            "text": self._text,
            "state": self.state.value,
            "is_busy": self.is_busy,
            "read_only": self.surface.read_only,
            "error": self.error,
            "word_count": self.word_count,
            "segments": [segment.to_dict() for segment in self.segments()],
            "suggestions": [suggestion.to_dict() for suggestion in self._suggestions],
            "active_suggestion": self.active_suggestion.to_dict() if self.active_suggestion else None,
            "last_selection": self.last_selection.to_dict() if self.last_selection else None,
            "chat": {
                "is_busy": self.chat.is_busy,
                "messages": self.chat.to_list(),
            },
        }
