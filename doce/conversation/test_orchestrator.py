import asyncio

from doce.actions.executor import ActionExecutor
from doce.actions.registry import ActionDescriptor, ActionRegistry
from doce.conversation.orchestrator import ConversationOrchestrator, ReplyKind, clarification_question
from doce.intent.models import IntentResult
from doce.intent.remote import RemoteIntentClassifier


class FixedClassifier:
    def __init__(self, result: IntentResult) -> None:
        self.result = result

    async def classify(self, text, context=None) -> IntentResult:
        return self.result


def _setup(classifier=None):
    calls = []

    async def generate(params: dict) -> dict:
        calls.append(params)
        return {"message": "Abrindo Local Orçamentos...", "modo": "iframe"}

    registry = ActionRegistry([ActionDescriptor("gerar_orcamento", generate, ("cliente", "itens", "imagens"))])
    classifier = classifier or RemoteIntentClassifier(registry, enabled=False)
    return ConversationOrchestrator(classifier, ActionExecutor(registry)), calls


def test_quote_request_runs_the_action_with_extracted_client() -> None:
    orchestrator, calls = _setup()

    reply = asyncio.run(orchestrator.process_utterance("Preciso de um orçamento para a empresa ABC", {}))

    assert reply.kind is ReplyKind.ACTION
    assert reply.intent.params == {"cliente": "empresa ABC"}
    assert reply.intent.missing_params == []
    assert reply.envelope.success is True
    assert reply.message == "Vou preparar o orçamento para empresa ABC..."
    assert calls == [{"cliente": "empresa ABC"}]


def test_missing_params_ask_a_question_without_executing() -> None:
    intent = IntentResult("gerar_orcamento", {"cliente": "ACME"}, ["itens", "imagens", "itens"], 0.9)
    orchestrator, calls = _setup(FixedClassifier(intent))

    reply = asyncio.run(orchestrator.process_utterance("orçamento para ACME", {}))

    assert reply.kind is ReplyKind.NEEDS_INFO
    assert reply.question == "Para continuar, preciso saber: itens, imagens"
    assert reply.envelope is None
    assert calls == []


def test_free_conversation_skips_the_executor() -> None:
    orchestrator, calls = _setup()

    reply = asyncio.run(orchestrator.process_utterance("oi, tudo bem?", {}))

    assert reply.kind is ReplyKind.FREE_CONVERSATION
    assert reply.envelope is None
    assert calls == []
    assert reply.to_dict()["tipo"] == "conversa"


def test_unknown_remote_action_ends_in_failure_envelope() -> None:
    intent = IntentResult("acao_inventada", {}, [], 0.8)
    orchestrator, _ = _setup(FixedClassifier(intent))

    reply = asyncio.run(orchestrator.process_utterance("faz algo", {}))

    assert reply.kind is ReplyKind.ACTION
    assert reply.envelope.success is False
    assert reply.envelope.available_actions == ["gerar_orcamento"]


def test_clarification_question_keeps_reported_order() -> None:
    assert clarification_question(["b", "a"]) == "Para continuar, preciso saber: b, a"
