"""Default action catalog: wires the collaborators into an ActionRegistry."""

from __future__ import annotations

from dataclasses import dataclass

from doce.actions.database import DatabaseActions
from doce.actions.email_hub import EmailHubActions
from doce.actions.quotes import QuoteActions
from doce.actions.registry import ActionDescriptor, ActionRegistry
from doce.actions.scraping import CatalogScraper
from doce.actions.sheets import SheetActions
from doce.settings import DoceSettings, get_settings
from doce.storage.store import LocalStore

WORK = "trabalho"


@dataclass(slots=True)
class Collaborators:
    """Objects the registered handlers are bound to."""

    quotes: QuoteActions
    sheets: SheetActions
    scraper: CatalogScraper
    database: DatabaseActions
    email_hub: EmailHubActions

    @classmethod
    def from_settings(cls, settings: DoceSettings | None = None, store: LocalStore | None = None) -> Collaborators:
        settings = settings or get_settings()
        store = store or LocalStore(settings.database_path)
        return cls(
            quotes=QuoteActions(settings.local_orcamentos_url),
            sheets=SheetActions(settings.google_service_account_path),
            scraper=CatalogScraper(timeout=settings.scrape_timeout, max_results=settings.scrape_max_results),
            database=DatabaseActions(store, history_limit=settings.history_limit),
            email_hub=EmailHubActions(settings.jace_url),
        )


def build_registry(c: Collaborators) -> ActionRegistry:
    return ActionRegistry([
        # ── Quotes ──
        ActionDescriptor(
            "gerar_orcamento", c.quotes.generate, ("cliente", "itens", "imagens"),
            "Gera um novo orçamento no Local Orçamentos", WORK, "facil",
        ),
        ActionDescriptor(
            "buscar_orcamento", c.database.search_quotes, ("termo", "data", "cliente"),
            "Busca orçamento salvo no banco de dados", WORK, "facil",
        ),
        ActionDescriptor(
            "listar_orcamentos", c.database.list_quotes, ("filtro", "limite"),
            "Lista todos os orçamentos salvos", WORK, "facil",
        ),
        # ── Spreadsheets ──
        ActionDescriptor(
            "criar_planilha", c.sheets.create, ("nome", "dados"),
            "Cria nova planilha no Google Drive", WORK, "medio",
        ),
        ActionDescriptor(
            "atualizar_planilha", c.sheets.update, ("planilha_id", "dados", "aba"),
            "Atualiza planilha existente", WORK, "medio",
        ),
        ActionDescriptor(
            "ler_planilha", c.sheets.read, ("planilha_id", "range"),
            "Lê dados de uma planilha", WORK, "medio",
        ),
        # ── Catalog scraping ──
        ActionDescriptor(
            "buscar_produto_saintyco", c.scraper.search_saintyco, ("termo", "categoria"),
            "Busca produto no site Saintyco", WORK, "medio",
        ),
        ActionDescriptor(
            "buscar_produto_countec", c.scraper.search_countec, ("termo", "categoria"),
            "Busca produto no site Countec", WORK, "medio",
        ),
        ActionDescriptor(
            "baixar_arquivo_site", c.scraper.download_file, ("url", "tipo"),
            "Baixa PDF/documento de um site", WORK, "avancado",
        ),
        # ── Local database ──
        ActionDescriptor(
            "salvar_orcamento", c.database.save_quote, ("orcamento", "imagens", "specs"),
            "Salva orçamento no banco de dados local", WORK, "facil",
        ),
        ActionDescriptor(
            "buscar_specs_produto", c.database.search_specs, ("produto", "fabricante"),
            "Busca especificações técnicas de produto", WORK, "facil",
        ),
        # ── Email (Jace.AI) ──
        ActionDescriptor(
            "consultar_emails", c.email_hub.consult_emails, ("termo", "remetente", "data"),
            "Consulta emails via Jace.AI", WORK, "avancado",
        ),
        ActionDescriptor(
            "resumir_email", c.email_hub.summarize_email, ("assunto", "remetente"),
            "Pede resumo de email específico", WORK, "avancado",
        ),
    ])


def build_default_registry(settings: DoceSettings | None = None, store: LocalStore | None = None) -> ActionRegistry:
    return build_registry(Collaborators.from_settings(settings, store))
