"""
Inline Edit Analyzer - Suggestion generation through an LLM.

The controller only depends on the SuggestionClient protocol. TextAnalyzer is
the production implementation backed by AIService; tests substitute fakes.

Ingestion rules (parse_suggestions):
- Each record must be an object with non-empty original, correction,
  explanation and type/category fields
- The category must be one of the six SuggestionCategory values
- Records breaking either rule are dropped silently
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, List, Optional, Protocol

from pydantic import ValidationError

import json_utils as json
from config import config
from logging_utils import Phase, PhaseLogger

from .models import Suggestion
from .prompts import (
    SUGGESTION_RESPONSE_SCHEMA,
    SUGGESTION_SYSTEM_INSTRUCTION,
    build_analysis_prompt,
)

if TYPE_CHECKING:
    from ai_service import AIService

logger = logging.getLogger(__name__)


class SuggestionServiceError(RuntimeError):
    """The analysis call failed; the message is safe to show to the user."""


class SuggestionClient(Protocol):
    async def generate_suggestions(self, text: str) -> List[Suggestion]:
        ...


def parse_suggestions(raw: Any) -> List[Suggestion]:
    """
    Validate raw suggestion records and assign identifiers.

    Args:
        raw: Decoded JSON, either a list of records or an object with a
            "suggestions" list

    Returns:
        Valid suggestions in input order
    """
    if isinstance(raw, dict):
        raw = raw.get("suggestions", [])
    if not isinstance(raw, list):
        raise ValueError(f"Expected a list of suggestions, got {type(raw).__name__}")

    suggestions: List[Suggestion] = []
    for record in raw:
        if not isinstance(record, dict):
            logger.debug("Dropping non-object suggestion record: %r", record)
            continue
        # Ids are always assigned locally
        record = {k: v for k, v in record.items() if k != "id"}
        try:
            suggestions.append(Suggestion.model_validate(record))
        except ValidationError as exc:
            logger.debug("Dropping malformed suggestion record %r: %s", record, exc.errors())
    return suggestions


class TextAnalyzer:
    """
    LLM-backed suggestion generator.

    Example:
        from ai_service import get_ai_service

        analyzer = TextAnalyzer(get_ai_service())
        suggestions = await analyzer.generate_suggestions("Their going to the park.")
    """

    def __init__(
        self,
        ai_service: "AIService",
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        phase_logger: Optional[PhaseLogger] = None,
    ):
        self.ai_service = ai_service
        self.model = model or config.SUGGESTION_MODEL
        self.temperature = config.SUGGESTION_TEMPERATURE if temperature is None else temperature
        self.phase_logger = phase_logger

    async def generate_suggestions(self, text: str) -> List[Suggestion]:
        """
        Request suggestions for the full document text.

        Raises:
            SuggestionServiceError: On any transport or parse failure. Partial
                results are never returned.
        """
        prompt = build_analysis_prompt(text, config.MAX_ANALYSIS_CHARS)
        try:
            if self.phase_logger:
                with self.phase_logger.phase(Phase.ANALYSIS, sub_label=self.model):
                    response = await self._call_ai(prompt)
            else:
                response = await self._call_ai(prompt)

            if not (response or "").strip():
                return []
            suggestions = parse_suggestions(json.loads_ai_response(response))
        except Exception as exc:
            logger.error("Error calling %s for suggestions: %s", self.model, exc)
            raise SuggestionServiceError(config.EDITOR.analysis_error_message) from exc

        logger.info("Received %d suggestions from %s", len(suggestions), self.model)
        return suggestions

    async def _call_ai(self, prompt: str) -> str:
        return await self.ai_service.generate_content(
            prompt=prompt,
            model=self.model,
            system_prompt=SUGGESTION_SYSTEM_INSTRUCTION,
            temperature=self.temperature,
            max_tokens=config.SUGGESTION_MAX_TOKENS,
            json_output=True,
            json_schema=SUGGESTION_RESPONSE_SCHEMA,
            phase_logger=self.phase_logger,
        )
