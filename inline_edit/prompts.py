"""
Inline Edit Prompts - Instructions and response schema for the analysis call.
"""

from .models import SuggestionCategory

SUGGESTION_SYSTEM_INSTRUCTION = """You are an expert writing assistant like Grammarly. Your task is to analyze the user's text and identify errors in grammar, spelling, punctuation, clarity, style, and conciseness. For each error you find, you must provide a correction and a clear, concise explanation.

Follow these rules strictly:
1.  Analyze the entire provided text for any issues.
2.  For each identified issue, generate a suggestion object containing the original incorrect text, the corrected text, a brief explanation, and the type of error.
3.  The 'original' field in your response must be an exact substring from the user's input text.
4.  Provide explanations that are helpful and educational for the user.
5.  If the text is perfect and has no errors, return an empty list of suggestions.
6.  Your response MUST conform to the provided JSON schema. Do not output anything other than the JSON object."""

CHAT_SYSTEM_INSTRUCTION = """You are a helpful writing assistant. Help the user improve, rewrite, or extend their text. When you produce text meant to be inserted into the user's document, reply with that text only, without commentary or quotation marks."""


SUGGESTION_ITEM_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "original": {
            "type": "string",
            "description": "The exact phrase or word from the original text that needs correction.",
        },
        "correction": {
            "type": "string",
            "description": "The corrected version of the phrase or word.",
        },
        "explanation": {
            "type": "string",
            "description": "A brief, clear explanation of why the change is recommended.",
        },
        "type": {
            "type": "string",
            "enum": [category.value for category in SuggestionCategory],
            "description": "The category of the suggestion (e.g., Grammar, Clarity, Style).",
        },
    },
    "required": ["original", "correction", "explanation", "type"],
}

SUGGESTION_RESPONSE_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "suggestions": {
            "type": "array",
            "items": SUGGESTION_ITEM_SCHEMA,
        },
    },
    "required": ["suggestions"],
}


def build_analysis_prompt(text: str, max_chars: int) -> str:
    """User prompt carrying the document, truncated to max_chars."""
    return text[:max_chars]
