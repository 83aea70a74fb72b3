"""Shared pytest fixtures for the Inline Writing Assistant tests."""

import asyncio
import os
import sys
from typing import List, Optional, Sequence
from unittest.mock import AsyncMock, MagicMock

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from inline_edit import (  # noqa: E402
    ChatMessage,
    Suggestion,
    SuggestionServiceError,
    TextBufferSurface,
)


# ============================================================================
# Builders
# ============================================================================

def make_suggestion(
    original: str,
    correction: str = "fixed",
    category: str = "Grammar",
    explanation: str = "Needs a fix",
) -> Suggestion:
    return Suggestion(
        original=original,
        correction=correction,
        explanation=explanation,
        category=category,
    )


# ============================================================================
# Collaborator Fakes
# ============================================================================

class FakeSuggestionClient:
    """Returns canned suggestions; optionally fails or blocks until released."""

    def __init__(self, suggestions: Optional[List[Suggestion]] = None, fail: bool = False):
        self.suggestions = list(suggestions or [])
        self.fail = fail
        self.calls: List[str] = []
        self.release: Optional[asyncio.Event] = None

    async def generate_suggestions(self, text: str) -> List[Suggestion]:
        self.calls.append(text)
        if self.release is not None:
            await self.release.wait()
        if self.fail:
            raise SuggestionServiceError("Failed to get suggestions from the AI.")
        return list(self.suggestions)


class FakeChatClient:
    """Replies from a queue; raises when fail is set."""

    def __init__(self, replies: Optional[List[str]] = None, fail: bool = False):
        self.replies = list(replies or ["Here is a better sentence."])
        self.fail = fail
        self.calls: List[tuple] = []

    async def send_message(self, message: str, history: Sequence[ChatMessage]) -> str:
        self.calls.append((message, list(history)))
        if self.fail:
            raise ConnectionError("chat backend unreachable")
        return self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]


@pytest.fixture
def suggestion_client():
    return FakeSuggestionClient()


@pytest.fixture
def chat_client():
    return FakeChatClient()


@pytest.fixture
def surface():
    return TextBufferSurface()


# ============================================================================
# AI Service Mocks
# ============================================================================

@pytest.fixture
def mock_ai_service():
    """Mocked AIService for unit tests."""
    service = MagicMock()
    service.generate_content = AsyncMock(return_value='{"suggestions": []}')
    return service


# ============================================================================
# API Test Fixtures
# ============================================================================

@pytest.fixture
def session_store(suggestion_client, chat_client):
    from inline_edit.sessions import SessionStore

    return SessionStore(
        suggestion_client_factory=lambda phase_logger: suggestion_client,
        chat_client_factory=lambda phase_logger: chat_client,
        max_sessions=5,
        extra_verbose=False,
    )


@pytest.fixture
def test_client(session_store):
    """Synchronous FastAPI test client bound to an isolated session store."""
    from fastapi.testclient import TestClient
    from core import app
    from inline_edit.sessions import get_session_store

    app.dependency_overrides[get_session_store] = lambda: session_store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_session_store, None)
