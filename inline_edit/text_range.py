"""
Inline Edit Text Ranges - Caret-preserving mutation of an editable surface.

The editor never touches a concrete widget. Hosts (browser bridge, terminal
UI, native control) implement EditableSurface; TextBufferSurface is the
in-memory implementation used by the HTTP sessions and the tests.

Insertion point priority for TextRangeEditor.insert_at():
1. The selection remembered when the surface last lost focus
2. The surface's live selection
3. End of document
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

from .models import SelectionRange

logger = logging.getLogger(__name__)


class EditableSurface(ABC):
    """Minimal capability set of a host text control."""

    read_only: bool = False

    @abstractmethod
    def read_text(self) -> str:
        """Plain-text content currently rendered by the surface."""

    @abstractmethod
    def write_text(self, text: str) -> None:
        """Replace the whole content."""

    @abstractmethod
    def get_selection(self) -> Optional[SelectionRange]:
        """Active selection, or None when the surface has none."""

    @abstractmethod
    def set_selection(self, selection: SelectionRange) -> None:
        """Move the caret/selection."""

    @abstractmethod
    def delete_range(self, start: int, end: int) -> None:
        """Remove content in [start, end)."""

    @abstractmethod
    def insert_at(self, offset: int, text: str) -> None:
        """Insert text at offset."""

    @abstractmethod
    def focus(self) -> None:
        """Give the surface input focus."""

    @property
    @abstractmethod
    def has_focus(self) -> bool:
        """Whether the surface currently holds input focus."""

    def blur(self) -> None:
        """Drop input focus. Hosts that cannot blur programmatically ignore it."""


class TextBufferSurface(EditableSurface):
    """
    In-memory editable surface.

    The selection is only observable while the surface has focus, mirroring
    how a browser reports the document selection once focus moves elsewhere.
    """

    def __init__(self, text: str = ""):
        self._text = text
        self._selection: Optional[SelectionRange] = None
        self._focused = False
        self.read_only = False

    def read_text(self) -> str:
        return self._text

    def write_text(self, text: str) -> None:
        self._text = text
        if self._selection is not None:
            self._selection = self._selection.clamp(len(text))

    def get_selection(self) -> Optional[SelectionRange]:
        if not self._focused:
            return None
        return self._selection

    def set_selection(self, selection: SelectionRange) -> None:
        self._selection = selection.clamp(len(self._text))

    def delete_range(self, start: int, end: int) -> None:
        if not 0 <= start <= end <= len(self._text):
            raise IndexError(f"Range ({start}, {end}) outside text of length {len(self._text)}")
        self._text = self._text[:start] + self._text[end:]
        self._selection = SelectionRange.caret(start)

    def insert_at(self, offset: int, text: str) -> None:
        if not 0 <= offset <= len(self._text):
            raise IndexError(f"Offset {offset} outside text of length {len(self._text)}")
        self._text = self._text[:offset] + text + self._text[offset:]

    def focus(self) -> None:
        self._focused = True

    @property
    def has_focus(self) -> bool:
        return self._focused

    def blur(self) -> None:
        self._focused = False


class TextRangeEditor:
    """
    Performs targeted insertions while keeping a sensible caret position.

    Example:
        surface = TextBufferSurface("Hello world")
        editor = TextRangeEditor()
        caret = editor.insert_at(surface, SelectionRange.caret(5), ",")
        # surface.read_text() == "Hello, world", caret == SelectionRange(6, 6)
    """

    def capture_selection(self, surface: EditableSurface) -> Optional[SelectionRange]:
        """Read the surface's active selection; None without focus or selection."""
        if not surface.has_focus:
            return None
        return surface.get_selection()

    def resolve_insertion_point(
        self,
        surface: EditableSurface,
        remembered: Optional[SelectionRange],
    ) -> SelectionRange:
        length = len(surface.read_text())

        if remembered is not None:
            return remembered.clamp(length)

        live = surface.get_selection()
        if live is not None:
            return live.clamp(length)

        logger.debug("No selection available, inserting at end of document")
        return SelectionRange.caret(length)

    def insert_at(
        self,
        surface: EditableSurface,
        remembered: Optional[SelectionRange],
        new_text: str,
    ) -> SelectionRange:
        """
        Replace the effective selection with new_text.

        Focuses the surface first, deletes any selected content, inserts the
        text and collapses the selection right after it.

        Returns:
            The collapsed selection after the inserted text, to be remembered
            for the next insertion.
        """
        surface.focus()

        target = self.resolve_insertion_point(surface, remembered)
        surface.set_selection(target)

        if not target.collapsed:
            surface.delete_range(target.start, target.end)
        surface.insert_at(target.start, new_text)

        caret = SelectionRange.caret(target.start + len(new_text))
        surface.set_selection(caret)
        return caret
