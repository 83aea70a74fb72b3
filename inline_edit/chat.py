"""
Inline Edit Chat - Side-panel conversation with the assistant.

ChatSession owns the visible conversation and never lets a failed call reach
the caller: the fixed fallback message is appended instead.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Optional, Protocol, Sequence

from config import config
from logging_utils import Phase, PhaseLogger

from .models import ChatMessage, ChatRole
from .prompts import CHAT_SYSTEM_INSTRUCTION

if TYPE_CHECKING:
    from ai_service import AIService

logger = logging.getLogger(__name__)


class ChatClient(Protocol):
    async def send_message(self, message: str, history: Sequence[ChatMessage]) -> str:
        ...


class AIChatClient:
    """Chat collaborator backed by AIService."""

    def __init__(
        self,
        ai_service: "AIService",
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        phase_logger: Optional[PhaseLogger] = None,
    ):
        self.ai_service = ai_service
        self.model = model or config.CHAT_MODEL
        self.temperature = config.CHAT_TEMPERATURE if temperature is None else temperature
        self.phase_logger = phase_logger

    async def send_message(self, message: str, history: Sequence[ChatMessage]) -> str:
        turns = [
            {
                "role": "user" if entry.role == ChatRole.USER else "assistant",
                "content": entry.text,
            }
            for entry in history
        ]
        # Providers expect the conversation to open with a user turn
        while turns and turns[0]["role"] != "user":
            turns.pop(0)

        return await self.ai_service.generate_content(
            prompt=message,
            model=self.model,
            system_prompt=CHAT_SYSTEM_INSTRUCTION,
            temperature=self.temperature,
            max_tokens=config.CHAT_MAX_TOKENS,
            history=turns,
            phase_logger=self.phase_logger,
        )


class ChatSession:
    """
    Running conversation shown in the side panel.

    The first message is always the assistant greeting; model replies after
    it can be inserted into the document.
    """

    def __init__(self, client: ChatClient, phase_logger: Optional[PhaseLogger] = None):
        self.client = client
        self.phase_logger = phase_logger
        self.messages: List[ChatMessage] = [
            ChatMessage(role=ChatRole.MODEL, text=config.EDITOR.chat_greeting)
        ]
        self.is_busy = False

    async def send(self, message: str) -> Optional[ChatMessage]:
        """
        Send a user message and append the reply.

        Returns:
            The appended model message (reply or fallback), or None when the
            input is blank or a reply is already pending.
        """
        if not message.strip():
            return None
        if self.is_busy:
            logger.warning("Chat message ignored while a reply is pending")
            return None

        history = list(self.messages)
        self.messages.append(ChatMessage(role=ChatRole.USER, text=message))
        self.is_busy = True
        try:
            if self.phase_logger:
                with self.phase_logger.phase(Phase.CHAT):
                    reply_text = await self.client.send_message(message, history)
            else:
                reply_text = await self.client.send_message(message, history)
            reply = ChatMessage(role=ChatRole.MODEL, text=reply_text)
        except Exception as exc:
            logger.error("Chat error: %s", exc)
            reply = ChatMessage(role=ChatRole.MODEL, text=config.EDITOR.chat_error_message)
        finally:
            self.is_busy = False

        self.messages.append(reply)
        return reply

    def insertable_messages(self) -> List[int]:
        """Indices of model messages that may be inserted into the editor."""
        return [
            index
            for index, message in enumerate(self.messages)
            if message.role == ChatRole.MODEL and index > 0
        ]

    def message_text(self, index: int) -> str:
        """
        Text of an insertable message.

        Raises:
            IndexError: When the index does not name an insertable message
        """
        if index not in self.insertable_messages():
            raise IndexError(f"Message {index} cannot be inserted")
        return self.messages[index].text

    def to_list(self) -> List[dict]:
        insertable = set(self.insertable_messages())
        return [
            {**message.to_dict(), "index": index, "insertable": index in insertable}
            for index, message in enumerate(self.messages)
        ]
