"""Conversation orchestrator: classify one utterance and settle it.

Every utterance ends in exactly one of three terminal outcomes:

- ``FREE_CONVERSATION`` -- no action matched; the caller routes the raw
  utterance to the conversational responder.
- ``NEEDS_INFO`` -- the intent is missing parameters; a clarification
  question is returned and nothing is executed.
- ``ACTION`` -- the executor ran the action; its envelope is attached.

Nothing loops back to re-classify within the same utterance.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from loguru import logger

from doce.actions.executor import ActionExecutor, ExecutionEnvelope
from doce.intent.models import IntentResult


class IntentClassifier(Protocol):
    async def classify(self, text: str, context: dict[str, Any] | None = None) -> IntentResult: ...


class ReplyKind(str, Enum):
    FREE_CONVERSATION = "conversa"
    NEEDS_INFO = "incompleto"
    ACTION = "acao"


@dataclass(frozen=True, slots=True)
class ConversationReply:
    kind: ReplyKind
    intent: IntentResult
    envelope: ExecutionEnvelope | None = None
    question: str | None = None
    message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "tipo": self.kind.value,
            "intencao": self.intent.to_dict(),
            "resultado": self.envelope.to_dict() if self.envelope else None,
            "pergunta": self.question,
            "mensagem": self.message,
        }


def clarification_question(missing: list[str]) -> str:
    """Missing names in the order the classifier reported them, deduplicated."""
    return f"Para continuar, preciso saber: {', '.join(dict.fromkeys(missing))}"


class ConversationOrchestrator:
    def __init__(self, classifier: IntentClassifier, executor: ActionExecutor):
        self.classifier = classifier
        self.executor = executor

    async def process_utterance(self, text: str, context: dict[str, Any] | None = None) -> ConversationReply:
        intent = await self.classifier.classify(text, context or {})
        logger.debug(f"Intent resolved: {intent.action} ({intent.method}, {intent.confidence:.2f})")

        if intent.is_free_conversation:
            return ConversationReply(ReplyKind.FREE_CONVERSATION, intent)

        if intent.missing_params:
            return ConversationReply(
                ReplyKind.NEEDS_INFO,
                intent,
                question=clarification_question(intent.missing_params),
            )

        envelope = await self.executor.execute(intent.action, intent.params)
        return ConversationReply(ReplyKind.ACTION, intent, envelope=envelope, message=intent.message)
