import pytest

from doce.conversation.personas import LUCAS
from doce.conversation.session import ConversationSession, SessionRegistry
from doce.intent.models import IntentResult


def test_history_window_returns_llm_messages() -> None:
    session = ConversationSession()
    for i in range(5):
        session.add_message("user", f"m{i}")

    assert session.get_history(2) == [{"role": "user", "content": "m3"}, {"role": "user", "content": "m4"}]
    assert session.get_history(0) == []


def test_context_carries_last_action() -> None:
    session = ConversationSession()
    assert session.context() == {"contato": "doce"}

    session.last_intent = IntentResult("listar_orcamentos")
    assert session.context() == {"contato": "doce", "ultima_acao": "listar_orcamentos"}


def test_registry_opens_and_closes_sessions() -> None:
    registry = SessionRegistry()
    session = registry.open()

    assert registry.get(session.id) is session
    assert registry.for_contact("doce") is session
    assert registry.close(session.id) is True
    assert registry.close(session.id) is False
    assert registry.active == []


def test_unknown_contact_cannot_be_opened() -> None:
    registry = SessionRegistry()

    with pytest.raises(KeyError):
        registry.open("lucas")
    assert registry.add_contact(LUCAS) is True
    assert registry.add_contact(LUCAS) is False
    assert registry.open("lucas").contact == "lucas"
