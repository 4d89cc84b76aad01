"""Per-conversation context objects."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from loguru import logger

from doce.conversation.personas import DOCE, Persona
from doce.intent.models import IntentResult
from doce.utils.helpers import generate_id


@dataclass
class ConversationSession:
    """One open conversation with a contact.

    ``pending_intent`` holds the last intent that stopped at NEEDS_INFO so
    a caller can inspect it; the orchestrator does not merge it into the
    next utterance.
    """

    contact: str = DOCE.id
    id: str = field(default_factory=generate_id)
    messages: list[dict[str, Any]] = field(default_factory=list)
    last_intent: IntentResult | None = None
    pending_intent: IntentResult | None = None
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    def add_message(self, role: str, content: str, **kwargs: Any) -> None:
        self.messages.append({
            "role": role,
            "content": content,
            "timestamp": datetime.now().isoformat(),
            **kwargs,
        })
        self.updated_at = datetime.now()

    def get_history(self, max_messages: int = 20) -> list[dict[str, str]]:
        """Last *max_messages* messages in LLM format."""
        recent = self.messages[-max_messages:] if max_messages > 0 else []
        return [{"role": m["role"], "content": m["content"]} for m in recent]

    def context(self) -> dict[str, Any]:
        """Context mapping handed to the intent classifier."""
        ctx: dict[str, Any] = {"contato": self.contact}
        if self.last_intent is not None:
            ctx["ultima_acao"] = self.last_intent.action
        return ctx


class SessionRegistry:
    """Active sessions and the contacts (personas) known so far."""

    def __init__(self) -> None:
        self._sessions: dict[str, ConversationSession] = {}
        self.contacts: dict[str, Persona] = {DOCE.id: DOCE}

    def open(self, contact: str = DOCE.id) -> ConversationSession:
        if contact not in self.contacts:
            raise KeyError(f"unknown contact: {contact}")
        session = ConversationSession(contact=contact)
        self._sessions[session.id] = session
        logger.debug(f"Session opened: {session.id} ({contact})")
        return session

    def get(self, session_id: str) -> ConversationSession | None:
        return self._sessions.get(session_id)

    def for_contact(self, contact: str) -> ConversationSession:
        """The open session with *contact*, opening one if needed."""
        for session in self._sessions.values():
            if session.contact == contact:
                return session
        return self.open(contact)

    def add_contact(self, persona: Persona) -> bool:
        """Register *persona*; False when it was already a contact."""
        if persona.id in self.contacts:
            return False
        self.contacts[persona.id] = persona
        return True

    def close(self, session_id: str) -> bool:
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        logger.debug(f"Session closed: {session_id} ({len(session.messages)} messages)")
        return True

    def close_all(self) -> None:
        for session_id in list(self._sessions):
            self.close(session_id)

    @property
    def active(self) -> list[ConversationSession]:
        return list(self._sessions.values())
