import pytest

from doce.actions.catalog import Collaborators, build_registry
from doce.actions.database import DatabaseActions
from doce.actions.email_hub import EmailHubActions
from doce.actions.quotes import QuoteActions
from doce.actions.registry import ActionDescriptor, ActionRegistry, ActionSummary
from doce.actions.scraping import CatalogScraper
from doce.actions.sheets import SheetActions
from doce.storage.store import LocalStore


def _noop(params: dict) -> None:
    return None


def test_lookup_is_exact_and_case_sensitive() -> None:
    registry = ActionRegistry([ActionDescriptor("listar_orcamentos", _noop)])

    assert registry.lookup("listar_orcamentos") is not None
    assert registry.lookup("Listar_Orcamentos") is None
    assert registry.lookup("desconhecida") is None
    assert "listar_orcamentos" in registry


def test_duplicate_names_are_rejected() -> None:
    with pytest.raises(ValueError):
        ActionRegistry([ActionDescriptor("a", _noop), ActionDescriptor("a", _noop)])


def test_list_by_category_keeps_registration_order() -> None:
    registry = ActionRegistry([
        ActionDescriptor("b", _noop, description="B", category="trabalho", difficulty="facil"),
        ActionDescriptor("x", _noop, category="social"),
        ActionDescriptor("a", _noop, description="A", category="trabalho", difficulty="medio"),
    ])

    assert registry.list_by_category("trabalho") == [
        ActionSummary("b", "B", "facil"),
        ActionSummary("a", "A", "medio"),
    ]
    assert registry.list_by_category("inexistente") == []


def test_default_catalog_registers_thirteen_work_actions(tmp_path) -> None:
    collaborators = Collaborators(
        quotes=QuoteActions("https://orcamentos.example"),
        sheets=SheetActions(""),
        scraper=CatalogScraper(),
        database=DatabaseActions(LocalStore(tmp_path / "db.json")),
        email_hub=EmailHubActions(),
    )
    registry = build_registry(collaborators)

    assert len(registry) == 13
    assert len(registry.list_by_category("trabalho")) == 13
    assert registry.lookup("gerar_orcamento").declared_params == ("cliente", "itens", "imagens")
    assert registry.lookup("resumir_email").difficulty == "avancado"
    assert registry.names[0] == "gerar_orcamento"
