"""
Tests for the writing-assistant controller.

These tests verify:
1. The EDITING_IDLE -> AWAITING_ANALYSIS -> SUGGESTIONS_READY cycle
2. Read-only behaviour while an analysis call is outstanding
3. Suggestion selection and application
4. Caret capture on blur and insertion of chat replies
"""

import asyncio

import pytest

from conftest import FakeChatClient, FakeSuggestionClient, make_suggestion
from inline_edit import (
    EditorState,
    SelectionRange,
    TextBufferSurface,
    WritingAssistantController,
)
from inline_edit.controller import count_words


TEXT = "Their going too the park."


def build_controller(suggestions=None, text=TEXT, fail=False, chat_client=None):
    return WritingAssistantController(
        FakeSuggestionClient(suggestions, fail=fail),
        chat_client or FakeChatClient(),
        text=text,
    )


# =============================================================================
# TESTS: analysis cycle
# =============================================================================

class TestAnalysisCycle:

    def test_starts_idle(self):
        controller = build_controller()

        assert controller.state == EditorState.EDITING_IDLE
        assert controller.suggestions == []
        assert controller.segments()[0].text == TEXT

    def test_default_text_is_demo_text(self):
        from config import config

        controller = WritingAssistantController(FakeSuggestionClient(), FakeChatClient())

        assert controller.text == config.EDITOR.demo_text

    @pytest.mark.asyncio
    async def test_check_text_stores_suggestions(self):
        their = make_suggestion("Their", "They're")
        too = make_suggestion("too", "to", "Spelling")
        controller = build_controller([too, their])

        result = await controller.check_text()

        assert [s.id for s in result] == [too.id, their.id]
        assert controller.state == EditorState.SUGGESTIONS_READY
        assert [p.suggestion.id for p in controller.positioned()] == [their.id, too.id]
        assert controller.suggestion_client.calls == [TEXT]
        assert controller.surface.read_only is False

    @pytest.mark.asyncio
    async def test_blank_text_skips_call(self):
        controller = build_controller([make_suggestion("x")], text="   ")

        assert await controller.check_text() == []
        assert controller.suggestion_client.calls == []
        assert controller.state == EditorState.EDITING_IDLE

    @pytest.mark.asyncio
    async def test_failure_sets_error_and_returns_idle(self):
        controller = build_controller(fail=True)

        assert await controller.check_text() == []
        assert controller.error
        assert controller.state == EditorState.EDITING_IDLE
        assert not controller.is_busy
        assert controller.surface.read_only is False

    @pytest.mark.asyncio
    async def test_unexpected_error_is_reported(self):
        from config import config

        controller = build_controller()

        async def network_down(text):
            raise ConnectionError("network down")

        controller.suggestion_client.generate_suggestions = network_down

        assert await controller.check_text() == []
        assert controller.error == config.EDITOR.analysis_error_message
        assert not controller.is_busy
        assert controller.state == EditorState.EDITING_IDLE
        assert controller.surface.read_only is False

    @pytest.mark.asyncio
    async def test_retry_clears_previous_error(self):
        controller = build_controller([make_suggestion("Their")], fail=True)
        await controller.check_text()
        assert controller.error

        controller.suggestion_client.fail = False
        await controller.check_text()

        assert controller.error is None
        assert controller.state == EditorState.SUGGESTIONS_READY

    @pytest.mark.asyncio
    async def test_busy_controller_rejects_mutations(self):
        controller = build_controller([make_suggestion("Their")])
        controller.suggestion_client.release = asyncio.Event()

        task = asyncio.create_task(controller.check_text())
        await asyncio.sleep(0)

        assert controller.is_busy
        assert controller.state == EditorState.AWAITING_ANALYSIS
        assert controller.surface.read_only is True
        assert controller.handle_text_change("changed") is False
        assert controller.insert_text("more") is None
        assert controller.text == TEXT
        # A second request is ignored rather than issuing another call
        await controller.check_text()
        assert len(controller.suggestion_client.calls) == 1

        controller.suggestion_client.release.set()
        await task

        assert controller.state == EditorState.SUGGESTIONS_READY
        assert controller.surface.read_only is False

    @pytest.mark.asyncio
    async def test_text_change_clears_suggestions(self):
        their = make_suggestion("Their")
        controller = build_controller([their])
        await controller.check_text()
        controller.select_suggestion(their.id)

        assert controller.handle_text_change("Something else entirely.")

        assert controller.suggestions == []
        assert controller.active_suggestion is None
        assert controller.state == EditorState.EDITING_IDLE
        assert controller.surface.read_text() == "Something else entirely."


# =============================================================================
# TESTS: selection and application
# =============================================================================

class TestApplySuggestion:

    @pytest.mark.asyncio
    async def test_select_and_dismiss(self):
        their = make_suggestion("Their")
        controller = build_controller([their])
        await controller.check_text()

        assert controller.select_suggestion(their.id) is their
        assert controller.active_suggestion is their
        assert controller.select_suggestion("sug-missing") is None
        assert controller.active_suggestion is their

        controller.dismiss_suggestion()
        assert controller.active_suggestion is None

    @pytest.mark.asyncio
    async def test_apply_updates_text_and_keeps_others(self):
        their = make_suggestion("Their", "They're")
        too = make_suggestion("too", "to")
        controller = build_controller([their, too])
        await controller.check_text()
        controller.select_suggestion(their.id)

        result = controller.apply_suggestion(their.id)

        assert result.success
        assert controller.text == "They're going too the park."
        assert controller.surface.read_text() == controller.text
        assert [s.id for s in controller.suggestions] == [too.id]
        assert controller.active_suggestion is None
        assert controller.state == EditorState.SUGGESTIONS_READY

    @pytest.mark.asyncio
    async def test_applying_last_suggestion_returns_idle(self):
        their = make_suggestion("Their", "They're")
        controller = build_controller([their])
        await controller.check_text()

        controller.apply_suggestion(their.id)

        assert controller.suggestions == []
        assert controller.state == EditorState.EDITING_IDLE

    @pytest.mark.asyncio
    async def test_identical_suggestions_removed_one_at_a_time(self):
        first = make_suggestion("too", "to")
        twin = make_suggestion("too", "to")
        controller = build_controller([first, twin])
        await controller.check_text()

        controller.apply_suggestion(first.id)

        assert [s.id for s in controller.suggestions] == [twin.id]

    @pytest.mark.asyncio
    async def test_stale_suggestion_after_apply_is_not_rendered(self):
        whole = make_suggestion("going too", "going to")
        part = make_suggestion("too the", "to the")
        controller = build_controller([whole, part])
        await controller.check_text()

        controller.apply_suggestion(whole.id)

        assert controller.text == "Their going to the park."
        assert [s.id for s in controller.suggestions] == [part.id]
        assert not any(segment.is_highlighted for segment in controller.segments())

    def test_unknown_suggestion_is_rejected(self):
        controller = build_controller()

        result = controller.apply_suggestion("sug-unknown")

        assert not result.success
        assert controller.text == TEXT


# =============================================================================
# TESTS: caret and insertion
# =============================================================================

class TestInsertion:

    def test_insert_without_selection_appends(self):
        controller = build_controller(text="Hello")

        caret = controller.insert_text(" world")

        assert controller.text == "Hello world"
        assert caret == SelectionRange.caret(11)
        assert controller.last_selection == caret

    def test_blur_remembers_selection(self):
        controller = build_controller(text="Hello world")
        controller.surface.focus()
        controller.surface.set_selection(SelectionRange(0, 5))

        assert controller.blur() == SelectionRange(0, 5)
        assert not controller.surface.has_focus

        controller.insert_text("Goodbye")

        assert controller.text == "Goodbye world"
        assert controller.last_selection == SelectionRange.caret(7)

    def test_blur_without_focus_keeps_previous_selection(self):
        controller = build_controller(text="Hello world")
        controller.last_selection = SelectionRange.caret(5)

        assert controller.blur() is None
        assert controller.last_selection == SelectionRange.caret(5)

    @pytest.mark.asyncio
    async def test_insert_clears_suggestions(self):
        controller = build_controller([make_suggestion("Their")])
        await controller.check_text()

        controller.insert_text("!")

        assert controller.suggestions == []
        assert controller.state == EditorState.EDITING_IDLE

    def test_custom_surface_is_used(self):
        surface = TextBufferSurface("from surface")
        controller = WritingAssistantController(
            FakeSuggestionClient(), FakeChatClient(), surface=surface
        )

        assert controller.text == "from surface"
        controller.insert_text("!")
        assert surface.read_text() == "from surface!"


# =============================================================================
# TESTS: chat integration and snapshot
# =============================================================================

class TestChatAndSnapshot:

    @pytest.mark.asyncio
    async def test_insert_chat_reply(self):
        controller = build_controller(
            text="Intro.", chat_client=FakeChatClient(["A better ending."])
        )

        reply = await controller.send_chat("Write an ending")
        caret = controller.insert_chat_message(2)

        assert reply.text == "A better ending."
        assert controller.text == "Intro.A better ending."
        assert caret == SelectionRange.caret(len(controller.text))

    def test_greeting_cannot_be_inserted(self):
        controller = build_controller()

        with pytest.raises(IndexError):
            controller.insert_chat_message(0)

    @pytest.mark.asyncio
    async def test_snapshot(self):
        too = make_suggestion("too", "to", "Spelling")
        controller = build_controller([too])
        await controller.check_text()
        controller.select_suggestion(too.id)

        snapshot = controller.snapshot()

        assert snapshot["text"] == TEXT
        assert snapshot["state"] == "suggestions_ready"
        assert snapshot["is_busy"] is False
        assert snapshot["word_count"] == 5
        assert snapshot["active_suggestion"]["id"] == too.id
        assert "".join(s["text"] for s in snapshot["segments"]) == TEXT
        assert snapshot["chat"]["messages"][0]["insertable"] is False


@pytest.mark.parametrize(
    "text,expected",
    [("", 0), ("   ", 0), ("one", 1), ("one  two\nthree", 3)],
)
def test_count_words(text, expected):
    assert count_words(text) == expected
