"""
Tests for applying accepted suggestions to the document text.
"""

from conftest import make_suggestion
from inline_edit import apply_suggestion, apply_with_details, remove_suggestion


class TestApplySuggestion:

    def test_replaces_first_occurrence_only(self):
        cat = make_suggestion("cat", "dog")

        assert apply_suggestion("a cat and a cat", cat) == "a dog and a cat"

    def test_absent_original_leaves_text_unchanged(self):
        stale = make_suggestion("Helo", "Hello")

        assert apply_suggestion("Hello world", stale) == "Hello world"

    def test_details_on_success(self):
        their = make_suggestion("Their", "They're")

        result = apply_with_details("Their going home.", their)

        assert result.success
        assert result.content_after == "They're going home."
        assert result.suggestion_id == their.id
        assert len(result.changes) == 1
        change = result.changes[0]
        assert (change.position_start, change.position_end) == (0, 5)
        assert change.removed_text == "Their"
        assert change.inserted_text == "They're"
        assert result.char_delta == 2
        assert "-Their going home." in result.diff
        assert "+They're going home." in result.diff

    def test_details_on_stale_suggestion(self):
        stale = make_suggestion("Helo", "Hello")

        result = apply_with_details("Hello", stale)

        assert not result.success
        assert result.content_after == "Hello"
        assert result.changes == []
        assert result.errors == ["Original text not found in content"]

    def test_result_serializes(self):
        data = apply_with_details("a cat", make_suggestion("cat", "dog")).to_dict()

        assert data["success"] is True
        assert data["changes"][0]["position"] == {"start": 2, "end": 5}
        assert data["stats"]["char_delta"] == 0


class TestRemoveSuggestion:

    def test_removes_by_identifier(self):
        first = make_suggestion("cat", "dog")
        twin = make_suggestion("cat", "dog")
        assert first.id != twin.id

        remaining = remove_suggestion([first, twin], first)

        assert remaining == [twin]

    def test_unknown_suggestion_keeps_list(self):
        kept = [make_suggestion("a"), make_suggestion("b")]

        assert remove_suggestion(kept, make_suggestion("a")) == kept
