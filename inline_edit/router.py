"""
Inline Edit Router - FastAPI endpoints for the writing assistant.

Session endpoints (stateful editor views):
- POST   /editor/sessions                                   - Create a session
- GET    /editor/sessions/{session_id}                      - View state snapshot
- DELETE /editor/sessions/{session_id}                      - Drop a session
- PUT    /editor/sessions/{session_id}/text                 - User edit
- PUT    /editor/sessions/{session_id}/selection            - Caret on blur
- POST   /editor/sessions/{session_id}/check                - Request suggestions
- POST   /editor/sessions/{session_id}/suggestions/{sid}/select
- DELETE /editor/sessions/{session_id}/suggestions/active
- POST   /editor/sessions/{session_id}/suggestions/{sid}/apply
- POST   /editor/sessions/{session_id}/chat                 - Chat turn
- POST   /editor/sessions/{session_id}/insert               - Insert at caret

Stateless endpoints:
- POST /editor/render - Segments for a text and suggestion list
- POST /editor/apply  - Apply one suggestion to a text
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, model_validator

from .controller import WritingAssistantController
from .models import SelectionRange, Suggestion
from .operations import apply_with_details
from .positioning import position_suggestions
from .segments import render_segments
from .sessions import SessionNotFoundError, SessionStore, get_session_store

router = APIRouter(tags=["Inline Edit"])


# =============================================================================
# REQUEST MODELS
# =============================================================================


class CreateSessionRequest(BaseModel):
    text: Optional[str] = Field(
        default=None,
        description="Initial document text (demo text when omitted)",
        max_length=50000,
    )


class TextChangeRequest(BaseModel):
    text: str = Field(description="Full document text after the edit", max_length=50000)


class SelectionRequest(BaseModel):
    start: int = Field(ge=0)
    end: int = Field(ge=0)

    @model_validator(mode="after")
    def _check_order(self):
        if self.end < self.start:
            raise ValueError("end must not precede start")
        return self


class ChatRequest(BaseModel):
    message: str = Field(min_length=1, max_length=10000)


class InsertRequest(BaseModel):
    text: Optional[str] = Field(default=None, description="Text to insert")
    message_index: Optional[int] = Field(
        default=None,
        ge=1,
        description="Index of an assistant chat message to insert instead of text",
    )

    @model_validator(mode="after")
    def _check_source(self):
        if (self.text is None) == (self.message_index is None):
            raise ValueError("Provide exactly one of 'text' or 'message_index'")
        return self


class RenderRequest(BaseModel):
    text: str = Field(max_length=50000)
    suggestions: List[Suggestion] = Field(default_factory=list)


class ApplyRequest(BaseModel):
    text: str = Field(max_length=50000)
    suggestion: Suggestion


# =============================================================================
# HELPERS
# =============================================================================


def _get_controller(store: SessionStore, session_id: str) -> WritingAssistantController:
    try:
        return store.get(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")


def _busy_conflict() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail="Analysis in progress, the editor is read-only",
    )


def _with_stable_ids(suggestions: List[Suggestion]) -> List[Suggestion]:
    """Index-based ids for suggestions posted without one, so equal input renders identically."""
    return [
        suggestion
        if "id" in suggestion.model_fields_set
        else suggestion.model_copy(update={"id": f"sug-{index:08x}"})
        for index, suggestion in enumerate(suggestions)
    ]


# =============================================================================
# SESSION ENDPOINTS
# =============================================================================


@router.post("/sessions", status_code=status.HTTP_201_CREATED)
async def create_session(
    request: CreateSessionRequest,
    store: SessionStore = Depends(get_session_store),
) -> Dict[str, Any]:
    session_id = store.create(text=request.text)
    return {"session_id": session_id, **store.get(session_id).snapshot()}


@router.get("/sessions/{session_id}")
async def get_session(session_id: str, store: SessionStore = Depends(get_session_store)) -> Dict[str, Any]:
    return _get_controller(store, session_id).snapshot()


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(session_id: str, store: SessionStore = Depends(get_session_store)) -> None:
    try:
        store.delete(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")


@router.put("/sessions/{session_id}/text")
async def change_text(
    session_id: str,
    request: TextChangeRequest,
    store: SessionStore = Depends(get_session_store),
) -> Dict[str, Any]:
    controller = _get_controller(store, session_id)
    if not controller.handle_text_change(request.text):
        raise _busy_conflict()
    return controller.snapshot()


@router.put("/sessions/{session_id}/selection")
async def set_selection(
    session_id: str,
    request: SelectionRequest,
    store: SessionStore = Depends(get_session_store),
) -> Dict[str, Any]:
    """Place the caret/selection and record it as the surface loses focus."""
    controller = _get_controller(store, session_id)
    controller.surface.focus()
    controller.surface.set_selection(SelectionRange(request.start, request.end))
    controller.blur()
    return controller.snapshot()


@router.post("/sessions/{session_id}/check")
async def check_text(session_id: str, store: SessionStore = Depends(get_session_store)) -> Dict[str, Any]:
    controller = _get_controller(store, session_id)
    if controller.is_busy:
        raise _busy_conflict()
    await controller.check_text()
    return controller.snapshot()


@router.post("/sessions/{session_id}/suggestions/{suggestion_id}/select")
async def select_suggestion(
    session_id: str,
    suggestion_id: str,
    store: SessionStore = Depends(get_session_store),
) -> Dict[str, Any]:
    controller = _get_controller(store, session_id)
    if controller.select_suggestion(suggestion_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Suggestion not found")
    return controller.snapshot()


@router.delete("/sessions/{session_id}/suggestions/active")
async def dismiss_suggestion(session_id: str, store: SessionStore = Depends(get_session_store)) -> Dict[str, Any]:
    controller = _get_controller(store, session_id)
    controller.dismiss_suggestion()
    return controller.snapshot()


@router.post("/sessions/{session_id}/suggestions/{suggestion_id}/apply")
async def apply_session_suggestion(
    session_id: str,
    suggestion_id: str,
    store: SessionStore = Depends(get_session_store),
) -> Dict[str, Any]:
    controller = _get_controller(store, session_id)
    if controller.is_busy:
        raise _busy_conflict()
    if controller.find_suggestion(suggestion_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Suggestion not found")
    result = controller.apply_suggestion(suggestion_id)
    return {"result": result.to_dict(), **controller.snapshot()}


@router.post("/sessions/{session_id}/chat")
async def send_chat(
    session_id: str,
    request: ChatRequest,
    store: SessionStore = Depends(get_session_store),
) -> Dict[str, Any]:
    controller = _get_controller(store, session_id)
    reply = await controller.send_chat(request.message)
    if reply is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Message ignored")
    return {"reply": reply.to_dict(), **controller.snapshot()}


@router.post("/sessions/{session_id}/insert")
async def insert_text(
    session_id: str,
    request: InsertRequest,
    store: SessionStore = Depends(get_session_store),
) -> Dict[str, Any]:
    controller = _get_controller(store, session_id)
    if request.message_index is not None:
        try:
            caret = controller.insert_chat_message(request.message_index)
        except IndexError:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Message cannot be inserted")
    else:
        caret = controller.insert_text(request.text)
    if caret is None:
        raise _busy_conflict()
    return {"caret": caret.to_dict(), **controller.snapshot()}


# =============================================================================
# STATELESS ENDPOINTS
# =============================================================================


@router.post("/render")
async def render(request: RenderRequest) -> Dict[str, Any]:
    positioned = position_suggestions(request.text, _with_stable_ids(request.suggestions))
    return {
        "positioned": [
            {"start": p.start, "end": p.end, "suggestion_id": p.suggestion.id}
            for p in positioned
        ],
        "segments": [segment.to_dict() for segment in render_segments(request.text, positioned)],
    }


@router.post("/apply")
async def apply(request: ApplyRequest) -> Dict[str, Any]:
    (suggestion,) = _with_stable_ids([request.suggestion])
    return apply_with_details(request.text, suggestion).to_dict()
