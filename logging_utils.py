"""
Phase Logging for the Inline Writing Assistant
==============================================

Colored, structured logging with phase tracking for the editor's external
round trips (analysis, chat) and its local mutations (apply, insert).
IMPORTANT: No emojis in console output (Windows encoding issues).
"""

import logging
import time
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterable, Optional

from colorama import Fore, Style, init

# Initialize colorama for Windows
init(autoreset=True)

NOISY_LOGGERS = (
    "httpcore",
    "httpcore.connection",
    "httpcore.http11",
    "httpx",
    "urllib3",
    "openai._base_client",
    "anthropic._base_client",
    "google_genai",
    "google.auth",
)


class Phase:
    """Phase constants for editor operations"""
    ANALYSIS = "SUGGESTION_ANALYSIS"
    CHAT = "ASSISTANT_CHAT"
    APPLY = "APPLY_SUGGESTION"
    INSERT = "INSERT_TEXT"


PHASE_COLORS = {
    Phase.ANALYSIS: Fore.CYAN,
    Phase.CHAT: Fore.MAGENTA,
    Phase.APPLY: Fore.GREEN,
    Phase.INSERT: Fore.YELLOW,
}

# Text-based icons, no emojis
PHASE_ICONS = {
    Phase.ANALYSIS: "[ANA]",
    Phase.CHAT: "[CHT]",
    Phase.APPLY: "[APL]",
    Phase.INSERT: "[INS]",
}


def configure_logging(level: str = "INFO", noisy_loggers: Iterable[str] = NOISY_LOGGERS) -> None:
    """Configure root logging once and silence chatty HTTP client loggers."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )
    for name in noisy_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)


class TimingTracker:
    """Track timing for phases and operations"""

    def __init__(self):
        self._start_times: Dict[str, float] = {}

    def start(self, key: str):
        self._start_times[key] = time.perf_counter()

    def end(self, key: str) -> float:
        """End timing and return elapsed seconds"""
        if key not in self._start_times:
            return 0.0
        return time.perf_counter() - self._start_times.pop(key)


class PhaseLogger:
    """
    Logger with phase tracking and visual formatting

    Usage:
        phase_logger = PhaseLogger(session_id="abc123", extra_verbose=True)

        with phase_logger.phase(Phase.ANALYSIS):
            phase_logger.log_prompt("gemini-2.5-flash", system_prompt, text)
            phase_logger.log_response("gemini-2.5-flash", raw_json)
    """

    def __init__(
        self,
        session_id: str,
        extra_verbose: bool = False,
        logger: Optional[logging.Logger] = None
    ):
        self.session_id = session_id
        self.extra_verbose = extra_verbose
        self.logger = logger or logging.getLogger(__name__)
        self.timing_tracker = TimingTracker()
        self._current_phase: Optional[str] = None
        self._phase_stack = []

    @property
    def current_phase(self) -> Optional[str]:
        return self._current_phase

    @contextmanager
    def phase(self, phase_name: str, sub_label: Optional[str] = None):
        """
        Context manager for phase tracking with automatic timing

        Example:
            with phase_logger.phase(Phase.APPLY, sub_label="sug-1a2b3c4d"):
                ...
        """
        self._phase_stack.append(self._current_phase)
        self._current_phase = phase_name
        timing_key = f"phase_{phase_name}_{len(self._phase_stack)}"
        self.timing_tracker.start(timing_key)

        color = PHASE_COLORS.get(phase_name, Fore.WHITE)
        icon = PHASE_ICONS.get(phase_name, "[???]")
        timestamp = datetime.now().strftime("%H:%M:%S")
        sub_str = f" - {sub_label}" if sub_label else ""
        self.logger.info(
            f"{color}{icon} {phase_name}{sub_str} [session {self.session_id}] [{timestamp}]{Style.RESET_ALL}"
        )
        try:
            yield self
        finally:
            elapsed = self.timing_tracker.end(timing_key)
            self.logger.info(
                f"{color}{icon} {phase_name} COMPLETED (Elapsed: {elapsed:.2f}s){Style.RESET_ALL}"
            )
            self._current_phase = self._phase_stack.pop() if self._phase_stack else None

    def log_prompt(
        self,
        model: str,
        system_prompt: Optional[str],
        user_prompt: str,
        **kwargs: Any
    ):
        """Log full prompt (only if extra_verbose)"""
        if not self.extra_verbose:
            return

        separator = "~" * 60
        self.logger.info(f"{Fore.CYAN}{separator}{Style.RESET_ALL}")
        self.logger.info(f"{Fore.CYAN}[EXTRA_VERBOSE] PROMPT TO {model} ({self._current_phase or 'NO PHASE'}){Style.RESET_ALL}")
        if system_prompt:
            self.logger.info(f"{Fore.CYAN}[SYSTEM PROMPT]{Style.RESET_ALL}")
            self.logger.info(system_prompt)
        self.logger.info(f"{Fore.GREEN}[USER PROMPT]{Style.RESET_ALL}")
        self.logger.info(user_prompt)
        for key, value in kwargs.items():
            self.logger.info(f"  {key}: {value}")
        self.logger.info(f"{Fore.CYAN}{separator}{Style.RESET_ALL}")

    def log_response(
        self,
        model: str,
        response: str,
        metadata: Optional[Dict[str, Any]] = None
    ):
        """Log full response (only if extra_verbose)"""
        if not self.extra_verbose:
            return

        separator = "~" * 60
        self.logger.info(f"{Fore.GREEN}{separator}{Style.RESET_ALL}")
        self.logger.info(f"{Fore.GREEN}[EXTRA_VERBOSE] RESPONSE FROM {model}{Style.RESET_ALL}")
        for key, value in (metadata or {}).items():
            self.logger.info(f"  {key}: {value}")
        self.logger.info(response)
        self.logger.info(f"{Fore.GREEN}{separator}{Style.RESET_ALL}")
