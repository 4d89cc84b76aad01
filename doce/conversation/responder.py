"""Free-conversation responder.

With a chat provider configured the persona's system prompt and the
recent history go to the LLM. Without one, canned replies keep the chat
usable offline: Doce greets, then hands the user off to Max, Sofia or
Lucas by topic; other personas answer generically.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any

from loguru import logger

from doce.conversation.personas import DOCE, GENERIC_REPLIES, NUDGE, PERSONAS, WELCOME, Persona, handoff_for
from doce.conversation.session import ConversationSession
from doce.providers.base import LLMProvider


@dataclass(frozen=True, slots=True)
class ResponderReply:
    text: str
    new_contact: Persona | None = None
    simulated: bool = False


class FreeConversationResponder:
    def __init__(
        self,
        provider: LLMProvider | None = None,
        *,
        history_window: int = 20,
        temperature: float = 0.7,
        max_tokens: int = 1024,
        rng: random.Random | None = None,
    ):
        self.provider = provider
        self.history_window = history_window
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._rng = rng or random.Random()

    async def respond(self, session: ConversationSession) -> ResponderReply:
        """Answer the last user message of *session* (already recorded)."""
        persona = PERSONAS.get(session.contact, DOCE)
        if self.provider is None:
            return self._simulate(session, persona)

        messages: list[dict[str, Any]] = [{"role": "system", "content": persona.system_prompt}]
        messages.extend(session.get_history(self.history_window))
        response = await self.provider.chat(
            messages,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )
        if response.failed:
            logger.warning(f"Chat provider failed for {persona.id}, returning its message")
        return ResponderReply(text=response.content or "")

    def _simulate(self, session: ConversationSession, persona: Persona) -> ResponderReply:
        if persona.id != DOCE.id:
            return ResponderReply(text=self._rng.choice(GENERIC_REPLIES), simulated=True)

        if len(session.messages) <= 1:
            return ResponderReply(text=WELCOME, simulated=True)

        last = session.messages[-1]["content"] if session.messages else ""
        handoff = handoff_for(last)
        if handoff is not None:
            new_contact, line = handoff
            return ResponderReply(text=line, new_contact=new_contact, simulated=True)
        return ResponderReply(text=NUDGE, simulated=True)
