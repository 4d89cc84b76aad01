import asyncio
import random

from doce.actions.executor import ActionExecutor, ExecutionEnvelope
from doce.actions.registry import ActionDescriptor, ActionRegistry
from doce.conversation.assistant import APOLOGY, Assistant, render_envelope
from doce.conversation.orchestrator import ConversationOrchestrator, ReplyKind
from doce.conversation.personas import GENERIC_REPLIES, MAX, WELCOME
from doce.conversation.responder import FreeConversationResponder
from doce.intent.models import IntentResult
from doce.intent.remote import RemoteIntentClassifier
from doce.providers.base import LLMProvider, LLMResponse


class BrokenClassifier:
    async def classify(self, text, context=None) -> IntentResult:
        raise RuntimeError("socket closed")


class RecordingProvider(LLMProvider):
    def __init__(self) -> None:
        super().__init__()
        self.messages = None

    async def chat(self, messages, model=None, max_tokens=1024, temperature=0.7) -> LLMResponse:
        self.messages = messages
        return LLMResponse(content="Oi! Como posso ajudar?")

    def get_default_model(self) -> str:
        return "fake"


def _assistant(classifier=None, provider=None) -> Assistant:
    registry = ActionRegistry([
        ActionDescriptor("gerar_orcamento", lambda params: {"message": "Abrindo Local Orçamentos...", "url": "https://orcamentos.example"}),
    ])
    classifier = classifier or RemoteIntentClassifier(registry, enabled=False)
    responder = FreeConversationResponder(provider, rng=random.Random(0))
    return Assistant(ConversationOrchestrator(classifier, ActionExecutor(registry)), responder)


def test_unexpected_failure_becomes_apology() -> None:
    assistant = _assistant(BrokenClassifier())
    session = assistant.sessions.open()

    reply = asyncio.run(assistant.send(session, "listar orçamentos"))

    assert reply.text == APOLOGY
    assert reply.failed is True
    assert [m["role"] for m in session.messages] == ["user", "assistant"]


def test_first_free_message_gets_the_welcome() -> None:
    assistant = _assistant()
    session = assistant.sessions.open()

    reply = asyncio.run(assistant.send(session, "oi"))

    assert reply.text == WELCOME
    assert reply.reply.kind is ReplyKind.FREE_CONVERSATION


def test_job_topic_hands_off_to_max() -> None:
    assistant = _assistant()
    session = assistant.sessions.open()

    async def run():
        await assistant.send(session, "oi")
        return await assistant.send(session, "quero uma vaga de trabalho")

    reply = asyncio.run(run())

    assert reply.new_contact == MAX
    assert "max" in assistant.sessions.contacts
    max_session = assistant.sessions.for_contact("max")
    assert max_session.messages[0]["content"] == MAX.greeting


def test_other_personas_answer_generically() -> None:
    assistant = _assistant()
    assistant.sessions.add_contact(MAX)
    session = assistant.sessions.open("max")

    reply = asyncio.run(assistant.send(session, "listar orçamentos"))

    assert reply.text in GENERIC_REPLIES
    assert reply.reply is None


def test_action_reply_uses_status_and_result_message() -> None:
    assistant = _assistant()
    session = assistant.sessions.open()

    reply = asyncio.run(assistant.send(session, "orçamento para ACME"))

    assert reply.reply.kind is ReplyKind.ACTION
    assert reply.text == "Vou preparar o orçamento para ACME...\nAbrindo Local Orçamentos...\nhttps://orcamentos.example"
    assert session.last_intent.action == "gerar_orcamento"
    assert session.pending_intent is None


def test_llm_responder_sends_persona_prompt_and_history() -> None:
    provider = RecordingProvider()
    assistant = _assistant(provider=provider)
    session = assistant.sessions.open()

    reply = asyncio.run(assistant.send(session, "bom dia"))

    assert reply.text == "Oi! Como posso ajudar?"
    assert provider.messages[0]["role"] == "system"
    assert provider.messages[0]["content"].startswith("Você é a Doce")
    assert provider.messages[-1] == {"role": "user", "content": "bom dia"}


def test_render_envelope() -> None:
    ok = ExecutionEnvelope.ok("gerar_orcamento", {"message": "Abrindo...", "url": "https://x"})
    failed = ExecutionEnvelope.failed("x", "boom")

    assert render_envelope(ok, "Vou preparar o orçamento...") == "Vou preparar o orçamento...\nAbrindo...\nhttps://x"
    assert render_envelope(failed) == "Não consegui concluir a ação: boom"
    assert render_envelope(ExecutionEnvelope.ok("x", None)) == "Pronto! ✅"
