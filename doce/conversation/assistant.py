"""Outward chat facade.

``Assistant.send`` is the only entry point front-ends use. It records the
exchange on the session, routes Doce's messages through the orchestrator
and everything else to the free-conversation responder, and turns any
unexpected failure into a generic apology.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from loguru import logger

from doce.actions import ActionExecutor, Collaborators, build_registry
from doce.actions.database import DatabaseActions
from doce.actions.executor import ExecutionEnvelope
from doce.conversation.orchestrator import ConversationOrchestrator, ConversationReply, ReplyKind
from doce.conversation.personas import DOCE, Persona
from doce.conversation.responder import FreeConversationResponder
from doce.conversation.session import ConversationSession, SessionRegistry
from doce.intent import RemoteIntentClassifier
from doce.providers import LiteLLMProvider
from doce.settings import DoceSettings, get_settings

APOLOGY = "Desculpe, tive um problema de conexão. Pode tentar novamente? 🙏"


@dataclass(frozen=True, slots=True)
class AssistantReply:
    text: str
    reply: ConversationReply | None = None
    new_contact: Persona | None = None
    failed: bool = False


def render_envelope(envelope: ExecutionEnvelope, status: str | None = None) -> str:
    """Human-readable line for an executed action."""
    if not envelope.success:
        return f"Não consegui concluir a ação: {envelope.error}"

    lines = [status] if status else []
    result = envelope.result
    if isinstance(result, dict):
        if result.get("message"):
            lines.append(str(result["message"]))
        if result.get("url"):
            lines.append(str(result["url"]))
        for step in result.get("instrucoes") or []:
            lines.append(str(step))
    return "\n".join(lines) or "Pronto! ✅"


class Assistant:
    def __init__(
        self,
        orchestrator: ConversationOrchestrator,
        responder: FreeConversationResponder,
        sessions: SessionRegistry | None = None,
        database: DatabaseActions | None = None,
    ):
        self.orchestrator = orchestrator
        self.responder = responder
        self.sessions = sessions or SessionRegistry()
        self.database = database

    @classmethod
    def from_settings(cls, settings: DoceSettings | None = None, *, local_only: bool = False) -> Assistant:
        s = settings or get_settings()
        collaborators = Collaborators.from_settings(s)
        registry = build_registry(collaborators)
        classifier = RemoteIntentClassifier.from_settings(registry, s)
        if local_only:
            classifier.enabled = False
        provider = LiteLLMProvider.from_settings(s) if s.chat_api_key else None
        responder = FreeConversationResponder(
            provider,
            history_window=s.chat_history_window,
            temperature=s.chat_temperature,
            max_tokens=s.chat_max_tokens,
        )
        return cls(
            ConversationOrchestrator(classifier, ActionExecutor(registry)),
            responder,
            database=collaborators.database,
        )

    async def send(self, session: ConversationSession, text: str) -> AssistantReply:
        session.add_message("user", text)
        try:
            reply = await self._reply(session, text)
        except Exception:
            logger.exception(f"Reply failed in session {session.id}")
            reply = AssistantReply(text=APOLOGY, failed=True)
        session.add_message("assistant", reply.text)
        return reply

    async def _reply(self, session: ConversationSession, text: str) -> AssistantReply:
        if session.contact != DOCE.id:
            return await self._converse(session)

        outcome = await self.orchestrator.process_utterance(text, session.context())
        session.last_intent = outcome.intent

        if outcome.kind is ReplyKind.FREE_CONVERSATION:
            session.pending_intent = None
            free = await self._converse(session)
            return AssistantReply(text=free.text, reply=outcome, new_contact=free.new_contact)

        if outcome.kind is ReplyKind.NEEDS_INFO:
            session.pending_intent = outcome.intent
            return AssistantReply(text=outcome.question or "", reply=outcome)

        session.pending_intent = None
        await self._record(outcome)
        return AssistantReply(text=render_envelope(outcome.envelope, outcome.message), reply=outcome)

    async def _converse(self, session: ConversationSession) -> AssistantReply:
        answer = await self.responder.respond(session)
        new_contact = None
        if answer.new_contact is not None and self.sessions.add_contact(answer.new_contact):
            new_contact = answer.new_contact
            greeted = self.sessions.for_contact(new_contact.id)
            greeted.add_message("assistant", new_contact.greeting)
            logger.info(f"New contact: {new_contact.name}")
        return AssistantReply(text=answer.text, new_contact=new_contact)

    async def _record(self, outcome: ConversationReply) -> None:
        if self.database is None or outcome.envelope is None:
            return
        payload: dict[str, Any] = {
            "acao": outcome.intent.action,
            "dados": outcome.intent.params,
            "resultado": {"success": outcome.envelope.success, "error": outcome.envelope.error},
        }
        await self.database.record_history(payload)

    def close(self) -> None:
        self.sessions.close_all()
