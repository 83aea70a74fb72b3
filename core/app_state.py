"""
Inline Writing Assistant - HTTP application
===========================================

Rich-text editor backend: sends the document to an LLM for inline
suggestions, renders them as highlighted segments, applies accepted edits
and hosts the assistant chat whose replies can be inserted at the caret.
"""

import logging

from fastapi import FastAPI
from starlette.middleware.gzip import GZipMiddleware

from config import config
from logging_utils import configure_logging

configure_logging(config.LOG_LEVEL)

logger = logging.getLogger(__name__)

from inline_edit.router import router as inline_edit_router  # noqa: E402

app = FastAPI(
    title="Inline Writing Assistant",
    description="Inline LLM writing suggestions with an assistant chat",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Add GZip compression middleware (compresses responses > 1000 bytes)
app.add_middleware(GZipMiddleware, minimum_size=1000)

app.include_router(inline_edit_router, prefix="/editor")


@app.on_event("startup")
async def startup_event():
    """Report provider configuration on startup"""
    configured = [name for name, present in config.validate_api_keys().items() if present]
    if configured:
        logger.info("AI providers configured: %s", ", ".join(configured))
    else:
        logger.warning("No AI provider API key configured; suggestion and chat calls will fail")
