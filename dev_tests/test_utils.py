"""
Tests for json_utils.py and logging_utils.py.
"""

import logging

import pytest

import json_utils as json
from logging_utils import Phase, PhaseLogger, TimingTracker, configure_logging


class TestJsonUtils:

    @pytest.mark.parametrize(
        "raw",
        [
            '{"a": 1}',
            '```json\n{"a": 1}\n```',
            '```\n{"a": 1}\n```',
            '  ```JSON{"a": 1}```  ',
        ],
    )
    def test_loads_ai_response_strips_fences(self, raw):
        assert json.loads_ai_response(raw) == {"a": 1}

    def test_invalid_json_raises(self):
        with pytest.raises(json.JSONDecodeError):
            json.loads_ai_response("not json")


class TestPhaseLogger:

    def test_phase_tracks_nesting(self):
        phase_logger = PhaseLogger("abc123")

        with phase_logger.phase(Phase.ANALYSIS):
            assert phase_logger.current_phase == Phase.ANALYSIS
            with phase_logger.phase(Phase.APPLY, sub_label="sug-1"):
                assert phase_logger.current_phase == Phase.APPLY
            assert phase_logger.current_phase == Phase.ANALYSIS
        assert phase_logger.current_phase is None

    def test_phase_restored_on_error(self):
        phase_logger = PhaseLogger("abc123")

        with pytest.raises(RuntimeError):
            with phase_logger.phase(Phase.CHAT):
                raise RuntimeError("boom")
        assert phase_logger.current_phase is None

    def test_prompt_logging_requires_extra_verbose(self, caplog):
        logger = logging.getLogger("test.phase_logger")
        quiet = PhaseLogger("s1", logger=logger)
        loud = PhaseLogger("s2", extra_verbose=True, logger=logger)

        with caplog.at_level(logging.INFO, logger="test.phase_logger"):
            quiet.log_prompt("gemini-2.5-flash", "system", "quiet prompt")
            loud.log_prompt("gemini-2.5-flash", "system", "loud prompt")

        assert "quiet prompt" not in caplog.text
        assert "loud prompt" in caplog.text


def test_timing_tracker():
    tracker = TimingTracker()

    assert tracker.end("missing") == 0.0
    tracker.start("op")
    assert tracker.end("op") >= 0.0
    assert tracker.end("op") == 0.0


def test_configure_logging_quiets_noisy_loggers():
    configure_logging("INFO", noisy_loggers=("test.noisy",))

    assert logging.getLogger("test.noisy").level == logging.WARNING
