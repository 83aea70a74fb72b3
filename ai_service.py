"""
AI Service Module for the Inline Writing Assistant
==================================================

Handles communication with the AI providers (OpenAI, Anthropic, Google).
Provides one interface for single-shot and multi-turn generation, with
retries for transient provider failures.
"""

import asyncio
import copy
import logging
import threading
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, List, Optional, TypeVar

import aiohttp
import anthropic
import openai
from google import genai as google_genai
from google.genai import types as genai_types

from config import config, get_model_provider

if TYPE_CHECKING:
    from logging_utils import PhaseLogger

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Roles used in conversation history passed to generate_content()
USER_ROLE = "user"
ASSISTANT_ROLE = "assistant"

JSON_ONLY_INSTRUCTION = (
    "\n\nIMPORTANT: Output valid JSON only. Do not include any text before or after the JSON."
)


class AIRequestError(RuntimeError):
    """Raised when an AI provider keeps failing after retry attempts."""

    def __init__(self, provider: str, model: str, attempts: int, max_attempts: int, cause: Exception):
        message = (
            f"AI request failed for {model} via {provider} after "
            f"{attempts}/{max_attempts} attempts: {cause}"
        )
        super().__init__(message)
        self.provider = provider
        self.model = model
        self.attempts = attempts
        self.max_attempts = max_attempts
        self.cause = cause


_shared_ai_service: Optional["AIService"] = None
_ai_service_init_lock = threading.Lock()


def get_ai_service() -> "AIService":
    """Return the shared AIService instance, creating it on first use."""
    global _shared_ai_service
    if _shared_ai_service is None:
        with _ai_service_init_lock:
            if _shared_ai_service is None:
                _shared_ai_service = AIService()
    return _shared_ai_service


class AIService:
    """Unified AI service for multiple providers"""

    def __init__(self):
        self.openai_client: Optional[openai.AsyncOpenAI] = None
        self.anthropic_client: Optional[anthropic.AsyncAnthropic] = None
        self.google_client: Optional[google_genai.Client] = None
        self._initialize_clients()

    def _initialize_clients(self):
        """Initialize API clients for each provider with a configured key"""
        if config.OPENAI_API_KEY:
            self.openai_client = openai.AsyncOpenAI(
                api_key=config.OPENAI_API_KEY,
                timeout=config.REQUEST_TIMEOUT,
                max_retries=0,  # retries handled by _execute_with_retries
            )
        else:
            logger.warning("OpenAI API key not found")

        if config.ANTHROPIC_API_KEY:
            self.anthropic_client = anthropic.AsyncAnthropic(
                api_key=config.ANTHROPIC_API_KEY,
                timeout=config.REQUEST_TIMEOUT,
                max_retries=0,
            )
        else:
            logger.warning("Anthropic API key not found")

        if config.GOOGLE_API_KEY:
            self.google_client = google_genai.Client(api_key=config.GOOGLE_API_KEY)
        else:
            logger.warning("Google API key not found")

    # =========================================================================
    # RETRIES
    # =========================================================================

    @staticmethod
    def _should_retry_exception(exc: Exception) -> bool:
        # Network and timeout errors are always retriable
        if isinstance(exc, (asyncio.TimeoutError, aiohttp.ClientError, ConnectionError)):
            return True
        if isinstance(exc, (openai.APIConnectionError, anthropic.APIConnectionError)):
            return True

        # HTTP status codes that indicate transient issues
        status = getattr(exc, "status", None) or getattr(exc, "status_code", None) or getattr(exc, "code", None)
        if status in {408, 425, 429, 500, 502, 503, 504}:
            return True

        message = str(exc).lower()
        transient_markers = [
            "timeout",
            "temporarily unavailable",
            "internal server error",
            "rate limit",
            "overloaded",
            "service unavailable",
            "connection reset",
            "connection refused",
        ]
        return any(marker in message for marker in transient_markers)

    async def _execute_with_retries(
        self,
        operation: Callable[[], Awaitable[T]],
        *,
        provider: str,
        model_id: str,
    ) -> T:
        max_attempts = max(1, config.MAX_RETRIES)
        last_exception: Optional[Exception] = None

        for attempt in range(1, max_attempts + 1):
            try:
                return await operation()
            except Exception as exc:
                last_exception = exc
                if not self._should_retry_exception(exc):
                    raise
                if attempt == max_attempts:
                    break

                logger.warning(
                    "AI generation failed for %s via %s on attempt %d/%d: %s",
                    model_id,
                    provider,
                    attempt,
                    max_attempts,
                    exc,
                )
                await asyncio.sleep(config.RETRY_DELAY)

        assert last_exception is not None
        raise AIRequestError(provider, model_id, max_attempts, max_attempts, last_exception) from last_exception

    # =========================================================================
    # GENERATION
    # =========================================================================

    async def generate_content(
        self,
        prompt: str,
        model: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 4096,
        json_output: bool = False,
        json_schema: Optional[Dict[str, Any]] = None,
        history: Optional[List[Dict[str, str]]] = None,
        phase_logger: Optional["PhaseLogger"] = None,
    ) -> str:
        """
        Generate content using the specified AI model

        Args:
            prompt: The latest user message
            model: Model name; the provider is resolved from it
            system_prompt: Optional system instruction
            temperature: Generation temperature
            max_tokens: Maximum output tokens
            json_output: Request JSON output when the provider supports it
            json_schema: Optional JSON schema for structured outputs
            history: Earlier turns as {"role": "user"|"assistant", "content": str}
            phase_logger: Optional PhaseLogger for extra-verbose prompt logging

        Returns:
            Generated text

        Raises:
            AIRequestError: When retries are exhausted on transient failures
            ValueError: When the provider is unknown or not configured
        """
        provider = get_model_provider(model)
        messages = list(history or []) + [{"role": USER_ROLE, "content": prompt}]

        if phase_logger:
            phase_logger.log_prompt(
                model=model,
                system_prompt=system_prompt,
                user_prompt=prompt,
                temperature=temperature,
                max_tokens=max_tokens,
                history_turns=len(messages) - 1,
            )

        async def _single_attempt() -> str:
            if provider == "openai":
                return await self._generate_openai(
                    messages, model, temperature, max_tokens, system_prompt, json_output, json_schema
                )
            if provider == "anthropic":
                return await self._generate_claude(
                    messages, model, temperature, max_tokens, system_prompt, json_output
                )
            return await self._generate_gemini(
                messages, model, temperature, max_tokens, system_prompt, json_output, json_schema
            )

        try:
            content = await self._execute_with_retries(
                _single_attempt, provider=provider, model_id=model
            )
        except Exception as e:
            logger.error(f"Content generation failed for {model}: {str(e)}")
            raise

        if phase_logger:
            phase_logger.log_response(model, content, {"characters": len(content)})
        return content

    async def _generate_openai(
        self,
        messages: List[Dict[str, str]],
        model_id: str,
        temperature: float,
        max_tokens: int,
        system_prompt: Optional[str],
        json_output: bool,
        json_schema: Optional[Dict[str, Any]],
    ) -> str:
        """Generate content using OpenAI Chat Completions"""
        if not self.openai_client:
            raise ValueError("OpenAI client not initialized")

        request_messages: List[Dict[str, str]] = []
        if system_prompt:
            request_messages.append({"role": "system", "content": system_prompt})
        request_messages.extend(messages)

        params: Dict[str, Any] = {
            "model": model_id,
            "messages": request_messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if json_output:
            if json_schema:
                params["response_format"] = {
                    "type": "json_schema",
                    "json_schema": {
                        "name": "structured_output",
                        "strict": True,
                        "schema": json_schema,
                    },
                }
            else:
                params["response_format"] = {"type": "json_object"}

        response = await self.openai_client.chat.completions.create(**params)
        return response.choices[0].message.content or ""

    async def _generate_claude(
        self,
        messages: List[Dict[str, str]],
        model_id: str,
        temperature: float,
        max_tokens: int,
        system_prompt: Optional[str],
        json_output: bool,
    ) -> str:
        """Generate content using the Claude Messages API"""
        if not self.anthropic_client:
            raise ValueError("Claude client not initialized")

        request_messages = copy.deepcopy(messages)
        prefill = ""
        if json_output:
            # Prefill the opening brace so the reply starts as a JSON object
            request_messages[-1]["content"] += JSON_ONLY_INSTRUCTION
            prefill = "{"
            request_messages.append({"role": ASSISTANT_ROLE, "content": prefill})

        params: Dict[str, Any] = {
            "model": model_id,
            "messages": request_messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if system_prompt:
            params["system"] = system_prompt

        response = await self.anthropic_client.messages.create(**params)
        text = "".join(
            block.text for block in response.content if getattr(block, "type", "") == "text"
        )
        return prefill + text

    async def _generate_gemini(
        self,
        messages: List[Dict[str, str]],
        model_id: str,
        temperature: float,
        max_tokens: int,
        system_prompt: Optional[str],
        json_output: bool,
        json_schema: Optional[Dict[str, Any]],
    ) -> str:
        """Generate content using the Google GenAI SDK"""
        if not self.google_client:
            raise ValueError("No Gemini client initialized")

        contents = [
            {
                "role": "model" if message["role"] == ASSISTANT_ROLE else "user",
                "parts": [{"text": message["content"]}],
            }
            for message in messages
        ]

        config_params: Dict[str, Any] = {
            "temperature": temperature,
            "max_output_tokens": max_tokens,
        }
        if system_prompt:
            config_params["system_instruction"] = system_prompt
        if json_output:
            config_params["response_mime_type"] = "application/json"
            if json_schema:
                config_params["response_schema"] = self._strip_additional_properties(json_schema)

        response = await self.google_client.aio.models.generate_content(
            model=model_id,
            contents=contents,
            config=genai_types.GenerateContentConfig(**config_params),
        )
        return response.text or ""

    @staticmethod
    def _strip_additional_properties(schema: Dict[str, Any]) -> Dict[str, Any]:
        """Gemini rejects additionalProperties; remove it recursively."""
        if isinstance(schema, dict):
            return {
                key: AIService._strip_additional_properties(value)
                for key, value in schema.items()
                if key != "additionalProperties"
            }
        if isinstance(schema, list):
            return [AIService._strip_additional_properties(item) for item in schema]
        return schema
