"""Deterministic keyword classifier, the zero-dependency fallback tier.

Patterns are checked in declaration order against the lowercased
utterance and the first one with any keyword hit wins. Later patterns
whose keywords are substrings of an earlier pattern's (e.g. "orçamento
do" vs. "orçamento") are therefore shadowed; that ordering is part of the
contract and must not be turned into best-match scoring.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from doce.intent.models import FREE_CONVERSATION, METHOD_LOCAL, IntentResult

MATCH_CONFIDENCE = 0.7
FALLBACK_CONFIDENCE = 0.5

Extractor = Callable[[str], dict[str, Any]]


@dataclass(frozen=True, slots=True)
class IntentPattern:
    keywords: tuple[str, ...]
    action: str
    extractor: Extractor

    def matches(self, lowered: str) -> bool:
        return any(kw in lowered for kw in self.keywords)


# ── Extractors ──────────────────────────────────────────────────────
# Each receives the raw (not lowercased) utterance. A failed capture
# yields an empty/None field, never an exception.

_CLIENT_RE = re.compile(
    r"\b(?:para|cliente|empresa)\s+(?:(?:a|o|as|os)\s+)?(.+?)\s*(?:[,.;!?]|$)",
    re.IGNORECASE,
)
_QUOTE_TERM_RE = re.compile(r"(?:buscar|encontrar|orçamento)\s+(?:do|de|sobre)?\s*(.+)", re.IGNORECASE)
_SHEET_NAME_RE = re.compile(r"planilha\s+(?:de|para|chamada)?\s*(.+)", re.IGNORECASE)
_SEARCH_NOISE_RE = re.compile(r"\b(?:buscar|busca|pesquisar|procurar|no|na|em)\b", re.IGNORECASE)
_SENDER_RE = re.compile(r"\b(?:de|do|da)\s+(\w+)", re.IGNORECASE)
_SUBJECT_RE = re.compile(r"\bsobre\s+(.+?)(?:\?|$)", re.IGNORECASE)
_URL_RE = re.compile(r"https?://\S+")


def _extract_client(text: str) -> dict[str, Any]:
    m = _CLIENT_RE.search(text)
    return {"cliente": m.group(1).strip() if m else ""}


def _extract_quote_term(text: str) -> dict[str, Any]:
    m = _QUOTE_TERM_RE.search(text)
    return {"termo": m.group(1).strip() if m else ""}


def _extract_sheet_name(text: str) -> dict[str, Any]:
    m = _SHEET_NAME_RE.search(text)
    return {"nome": m.group(1).strip() if m else "Nova Planilha"}


def _site_term_extractor(site: str) -> Extractor:
    site_re = re.compile(re.escape(site), re.IGNORECASE)

    def extract(text: str) -> dict[str, Any]:
        term = site_re.sub(" ", text)
        term = _SEARCH_NOISE_RE.sub(" ", term)
        return {"termo": " ".join(term.split())}

    return extract


def _extract_email_query(text: str) -> dict[str, Any]:
    sender = _SENDER_RE.search(text)
    subject = _SUBJECT_RE.search(text)
    return {
        "remetente": sender.group(1) if sender else None,
        "termo": subject.group(1).strip() if subject else None,
    }


def _extract_url(text: str) -> dict[str, Any]:
    m = _URL_RE.search(text)
    return {"url": m.group(0) if m else None}


DEFAULT_PATTERNS: tuple[IntentPattern, ...] = (
    IntentPattern(("orçamento", "orcamento", "orçar", "cotar"), "gerar_orcamento", _extract_client),
    IntentPattern(
        ("buscar orçamento", "encontrar orçamento", "orçamento do", "orçamento de"),
        "buscar_orcamento",
        _extract_quote_term,
    ),
    IntentPattern(("criar planilha", "nova planilha", "planilha nova"), "criar_planilha", _extract_sheet_name),
    IntentPattern(
        ("atualizar planilha", "editar planilha", "modificar planilha"),
        "atualizar_planilha",
        lambda _text: {},
    ),
    IntentPattern(
        ("saintyco", "buscar saintyco", "pesquisar saintyco"),
        "buscar_produto_saintyco",
        _site_term_extractor("saintyco"),
    ),
    IntentPattern(
        ("countec", "buscar countec", "pesquisar countec"),
        "buscar_produto_countec",
        _site_term_extractor("countec"),
    ),
    IntentPattern(("email", "emails", "jace", "caixa de entrada"), "consultar_emails", _extract_email_query),
    IntentPattern(
        ("listar orçamentos", "meus orçamentos", "todos orçamentos", "ver orçamentos"),
        "listar_orcamentos",
        lambda _text: {"limite": 10},
    ),
    IntentPattern(("baixar", "download", "pdf", "documento"), "baixar_arquivo_site", _extract_url),
)


def build_message(action: str, params: dict[str, Any]) -> str:
    """Short status line shown while *action* runs."""
    if action == "gerar_orcamento":
        cliente = params.get("cliente")
        return f"Vou preparar o orçamento{f' para {cliente}' if cliente else ''}..."
    if action == "buscar_orcamento":
        termo = params.get("termo")
        about = f' sobre "{termo}"' if termo else ""
        return f"Buscando orçamentos{about}..."
    if action == "criar_planilha":
        return f"Criando planilha \"{params.get('nome') or 'Nova'}\"..."
    if action == "buscar_produto_saintyco":
        return f"Buscando \"{params.get('termo')}\" no Saintyco..."
    if action == "buscar_produto_countec":
        return f"Buscando \"{params.get('termo')}\" no Countec..."
    if action == "consultar_emails":
        remetente = params.get("remetente")
        return f"Verificando emails{f' de {remetente}' if remetente else ''}..."
    if action == "listar_orcamentos":
        return "Listando seus orçamentos..."
    return "Processando..."


class LocalIntentClassifier:
    """First-match keyword classifier. Never asks follow-up questions."""

    def __init__(self, patterns: tuple[IntentPattern, ...] = DEFAULT_PATTERNS):
        self.patterns = patterns

    def classify(self, text: str, context: dict[str, Any] | None = None) -> IntentResult:
        lowered = text.lower()
        for pattern in self.patterns:
            if pattern.matches(lowered):
                params = pattern.extractor(text)
                return IntentResult(
                    action=pattern.action,
                    params=params,
                    missing_params=[],
                    confidence=MATCH_CONFIDENCE,
                    message=build_message(pattern.action, params),
                    method=METHOD_LOCAL,
                )

        return IntentResult(
            action=FREE_CONVERSATION,
            params={"mensagem": text},
            missing_params=[],
            confidence=FALLBACK_CONFIDENCE,
            message=None,
            method=METHOD_LOCAL,
        )
