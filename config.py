"""
Configuration for the Inline Writing Assistant
==============================================

Central configuration management for AI models, API keys and editor
defaults. Values come from environment variables (a local .env file is
loaded first); malformed numeric overrides are ignored and the defaults kept.
"""

import logging
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

TRUTHY_ENV_VALUES = {"1", "true", "yes", "on"}


DEMO_TEXT = (
    "Artificial intelligence are transforming the way we work and live. "
    "Its important to understand both the benefits and the risks, "
    "because in the future, AI will be more powerfull then ever before. "
    "Many experts believes that we must act now in order to ensure that "
    "this technology is used in a responsible manner."
)


class EditorSettings(BaseModel):
    """Editor defaults and user-visible messages."""

    demo_text: str = Field(
        default=DEMO_TEXT,
        description="Text loaded into new editor sessions",
    )
    chat_greeting: str = Field(
        default="Hello! How can I help you improve your text today?",
        description="First assistant message of every conversation",
    )
    chat_error_message: str = Field(
        default="Sorry, I encountered an error. Please try again.",
        description="Assistant message appended when the chat call fails",
    )
    analysis_error_message: str = Field(
        default="Failed to get suggestions from the AI. Please check your API key and try again.",
        description="User-visible message when the suggestion call fails",
    )


class Config(BaseModel):
    """Configuration settings for the Inline Writing Assistant."""

    model_config = {"populate_by_name": True}

    # API Keys (loaded from environment variables)
    OPENAI_API_KEY: str = Field(default="", description="OpenAI API key")
    ANTHROPIC_API_KEY: str = Field(default="", description="Anthropic Claude API key")
    GOOGLE_API_KEY: str = Field(default="", description="Google Gemini API key")

    EDITOR: EditorSettings = Field(default_factory=EditorSettings, description="Editor defaults")

    # Models
    SUGGESTION_MODEL: str = Field(default="gemini-2.5-flash", description="Model producing inline suggestions")
    CHAT_MODEL: str = Field(default="gemini-2.5-flash", description="Model answering the side chat")
    SUGGESTION_TEMPERATURE: float = Field(default=0.3, ge=0.0, le=2.0)
    CHAT_TEMPERATURE: float = Field(default=0.7, ge=0.0, le=2.0)
    SUGGESTION_MAX_TOKENS: int = Field(default=8192, gt=0)
    CHAT_MAX_TOKENS: int = Field(default=4096, gt=0)
    MAX_ANALYSIS_CHARS: int = Field(default=15000, gt=0, description="Text sent for analysis is truncated to this length")

    # Requests
    REQUEST_TIMEOUT: float = Field(default=120.0, gt=0)
    MAX_RETRIES: int = Field(default=3, ge=1)
    RETRY_DELAY: float = Field(default=10.0, ge=0.0)

    # Sessions
    MAX_ACTIVE_SESSIONS: int = Field(default=100, ge=1)

    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    EXTRA_VERBOSE: bool = Field(default=False, description="Log full prompts and responses")

    # FastAPI
    APP_HOST: str = Field(default="0.0.0.0", description="FastAPI host")
    APP_PORT: int = Field(default=8000, description="FastAPI port")
    APP_RELOAD: bool = Field(default=False, description="FastAPI reload mode")

    def __init__(self, **data):
        super().__init__(**data)
        self.load_from_environment()

    def load_from_environment(self):
        """Load configuration from environment variables."""
        # API Keys (short names first; keep SDK names as second option)
        self.OPENAI_API_KEY = os.getenv("OPENAI_KEY", "") or os.getenv("OPENAI_API_KEY", self.OPENAI_API_KEY)
        self.ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY", self.ANTHROPIC_API_KEY)
        self.GOOGLE_API_KEY = os.getenv("GEMINI_KEY", "") or os.getenv("GOOGLE_API_KEY", self.GOOGLE_API_KEY)

        self.SUGGESTION_MODEL = os.getenv("SUGGESTION_MODEL", self.SUGGESTION_MODEL)
        self.CHAT_MODEL = os.getenv("CHAT_MODEL", self.CHAT_MODEL)

        self.SUGGESTION_TEMPERATURE = _env_float("SUGGESTION_TEMPERATURE", self.SUGGESTION_TEMPERATURE, maximum=2.0)
        self.CHAT_TEMPERATURE = _env_float("CHAT_TEMPERATURE", self.CHAT_TEMPERATURE, maximum=2.0)
        self.SUGGESTION_MAX_TOKENS = _env_int("SUGGESTION_MAX_TOKENS", self.SUGGESTION_MAX_TOKENS, minimum=1)
        self.CHAT_MAX_TOKENS = _env_int("CHAT_MAX_TOKENS", self.CHAT_MAX_TOKENS, minimum=1)
        self.MAX_ANALYSIS_CHARS = _env_int("MAX_ANALYSIS_CHARS", self.MAX_ANALYSIS_CHARS, minimum=1)

        # Request Limits
        self.REQUEST_TIMEOUT = _env_float("REQUEST_TIMEOUT", self.REQUEST_TIMEOUT, positive=True)
        self.MAX_RETRIES = _env_int("MAX_RETRIES", self.MAX_RETRIES, minimum=1)
        self.RETRY_DELAY = _env_float("RETRY_DELAY", self.RETRY_DELAY)

        self.MAX_ACTIVE_SESSIONS = _env_int("MAX_ACTIVE_SESSIONS", self.MAX_ACTIVE_SESSIONS, minimum=1)

        # Logging
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", self.LOG_LEVEL).upper()
        extra_verbose = os.getenv("EXTRA_VERBOSE")
        if extra_verbose is not None:
            self.EXTRA_VERBOSE = extra_verbose.lower() in TRUTHY_ENV_VALUES

        # FastAPI Configuration
        self.APP_HOST = os.getenv("APP_HOST", self.APP_HOST)
        self.APP_PORT = _env_int("APP_PORT", self.APP_PORT, minimum=1)
        app_reload = os.getenv("APP_RELOAD")
        if app_reload is not None:
            self.APP_RELOAD = app_reload.lower() in TRUTHY_ENV_VALUES

        demo_text = os.getenv("EDITOR_DEMO_TEXT")
        if demo_text is not None:
            self.EDITOR.demo_text = demo_text

    def validate_api_keys(self) -> dict:
        """Report which providers have an API key configured."""
        return {
            "openai": bool(self.OPENAI_API_KEY),
            "anthropic": bool(self.ANTHROPIC_API_KEY),
            "google": bool(self.GOOGLE_API_KEY),
        }


def _env_int(name: str, default: int, minimum: Optional[int] = None) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring invalid integer for %s: %r", name, raw)
        return default
    if minimum is not None and value < minimum:
        logger.warning("Ignoring %s=%d below minimum %d", name, value, minimum)
        return default
    return value


def _env_float(
    name: str,
    default: float,
    maximum: Optional[float] = None,
    positive: bool = False,
) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring invalid number for %s: %r", name, raw)
        return default
    if value < 0 or (positive and value == 0):
        logger.warning("Ignoring out-of-range %s=%s", name, raw)
        return default
    if maximum is not None and value > maximum:
        logger.warning("Ignoring %s=%s above maximum %s", name, raw, maximum)
        return default
    return value


def get_model_provider(model_name: str) -> str:
    """
    Resolve the provider serving a model from its name.

    Raises:
        ValueError: When the model family is unknown
    """
    name = model_name.lower().strip()
    if name.startswith(("gpt", "o1", "o3", "o4", "chatgpt")):
        return "openai"
    if name.startswith("claude"):
        return "anthropic"
    if name.startswith(("gemini", "models/gemini")):
        return "google"
    raise ValueError(f"Unknown model family for '{model_name}'")


# Global configuration instance
config = Config()
