"""
Inline Edit Sessions - In-memory registry of editor views served over HTTP.
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections import OrderedDict
from typing import Callable, Optional

from config import config
from logging_utils import PhaseLogger

from .analyzer import SuggestionClient, TextAnalyzer
from .chat import AIChatClient, ChatClient
from .controller import WritingAssistantController

logger = logging.getLogger(__name__)

SuggestionClientFactory = Callable[[PhaseLogger], SuggestionClient]
ChatClientFactory = Callable[[PhaseLogger], ChatClient]


class SessionNotFoundError(KeyError):
    pass


class SessionStore:
    """
    Bounded session registry; the oldest session is evicted when full.

    Collaborators are created per session through the injected factories so
    tests can substitute fakes.
    """

    def __init__(
        self,
        suggestion_client_factory: SuggestionClientFactory,
        chat_client_factory: ChatClientFactory,
        max_sessions: Optional[int] = None,
        extra_verbose: Optional[bool] = None,
    ):
        self.suggestion_client_factory = suggestion_client_factory
        self.chat_client_factory = chat_client_factory
        self.max_sessions = max_sessions or config.MAX_ACTIVE_SESSIONS
        self.extra_verbose = config.EXTRA_VERBOSE if extra_verbose is None else extra_verbose
        self._sessions: "OrderedDict[str, WritingAssistantController]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self, text: Optional[str] = None) -> str:
        session_id = uuid.uuid4().hex[:12]
        phase_logger = PhaseLogger(session_id, extra_verbose=self.extra_verbose)
        self._sessions[session_id] = WritingAssistantController(
            suggestion_client=self.suggestion_client_factory(phase_logger),
            chat_client=self.chat_client_factory(phase_logger),
            text=text,
            phase_logger=phase_logger,
        )
        while len(self._sessions) > self.max_sessions:
            evicted, _ = self._sessions.popitem(last=False)
            logger.info("Evicted editor session %s", evicted)
        return session_id

    def get(self, session_id: str) -> WritingAssistantController:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise SessionNotFoundError(session_id) from None

    def delete(self, session_id: str) -> None:
        if self._sessions.pop(session_id, None) is None:
            raise SessionNotFoundError(session_id)


_shared_store: Optional[SessionStore] = None
_store_init_lock = threading.Lock()


def get_session_store() -> SessionStore:
    """Return the shared SessionStore backed by the AI service."""
    global _shared_store
    if _shared_store is None:
        with _store_init_lock:
            if _shared_store is None:
                from ai_service import get_ai_service

                _shared_store = SessionStore(
                    suggestion_client_factory=lambda pl: TextAnalyzer(get_ai_service(), phase_logger=pl),
                    chat_client_factory=lambda pl: AIChatClient(get_ai_service(), phase_logger=pl),
                )
    return _shared_store
