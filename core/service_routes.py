"""
Service information and health routes.
"""

from __future__ import annotations

from datetime import datetime

from fastapi import Depends

from inline_edit.sessions import SessionStore, get_session_store

from .app_state import app, config


@app.get("/api")
async def api_info():
    """API information endpoint"""
    return {
        "service": "Inline Writing Assistant",
        "version": "1.0.0",
        "status": "operational",
        "models": {
            "suggestions": config.SUGGESTION_MODEL,
            "chat": config.CHAT_MODEL,
        },
        "endpoints": {
            "sessions": "/editor/sessions",
            "render": "/editor/render",
            "apply": "/editor/apply",
            "docs": "/docs",
        },
    }


@app.get("/health")
async def health_check(store: SessionStore = Depends(get_session_store)):
    """Health check endpoint"""
    return {
        "status": "healthy",
        "active_sessions": len(store),
        "providers": config.validate_api_keys(),
        "timestamp": datetime.now().isoformat(),
    }
