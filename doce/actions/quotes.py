"""Quote actions: integration with the Local Orçamentos web app.

Generation is an ordered fallback pipeline: ``api`` (POST to the app's
API) falls back to ``iframe`` (prefilled URL opened inside the chat).
``redirect`` opens the app in a new tab. Every result carries ``modo``,
the stage that produced it.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any
from urllib.parse import urlencode

import httpx
from loguru import logger

from doce.errors import QuoteServiceError
from doce.utils.helpers import now_iso

_TIMEOUT = 15.0
ORIGIN = "doce_ai"


class QuoteActions:
    def __init__(self, base_url: str, transport: httpx.AsyncBaseTransport | None = None):
        self.base_url = base_url.rstrip("/")
        self._transport = transport

    async def generate(self, params: dict[str, Any]) -> dict[str, Any]:
        quote = {
            "cliente": params.get("cliente") or "",
            "itens": params.get("itens") or [],
            "imagens": params.get("imagens") or [],
            "origem": ORIGIN,
            "timestamp": now_iso(),
        }
        mode = params.get("modo", "iframe")
        if mode == "api":
            try:
                return await self._generate_via_api(quote)
            except (httpx.HTTPError, QuoteServiceError) as exc:
                logger.warning(f"Local Orçamentos API unavailable, falling back to iframe: {exc}")
                return self._generate_via_iframe(quote)
        if mode == "redirect":
            return self._generate_via_redirect(quote)
        return self._generate_via_iframe(quote)

    async def _generate_via_api(self, quote: dict[str, Any]) -> dict[str, Any]:
        async with httpx.AsyncClient(timeout=_TIMEOUT, transport=self._transport) as client:
            resp = await client.post(f"{self.base_url}/api/orcamento", json=quote)
        if resp.status_code >= 400:
            raise QuoteServiceError("Falha ao criar orçamento via API")
        created = _quote_body(resp)
        return {
            "modo": "api",
            "message": "Orçamento criado com sucesso!",
            "orcamento": created,
            "url": f"{self.base_url}/orcamento/{created.get('id')}",
        }

    def _generate_via_iframe(self, quote: dict[str, Any]) -> dict[str, Any]:
        query = urlencode({
            "cliente": quote["cliente"],
            "origem": ORIGIN,
            "dados": _json_items(quote["itens"]),
        })
        return {
            "modo": "iframe",
            "message": "Abrindo Local Orçamentos...",
            "action": "open_iframe",
            "url": f"{self.base_url}?{query}",
            "dados": quote,
        }

    def _generate_via_redirect(self, quote: dict[str, Any]) -> dict[str, Any]:
        query = urlencode({"cliente": quote["cliente"], "origem": ORIGIN})
        return {
            "modo": "redirect",
            "message": "Redirecionando para Local Orçamentos...",
            "action": "open_tab",
            "url": f"{self.base_url}?{query}",
        }

    async def import_quote(self, params: dict[str, Any]) -> dict[str, Any]:
        """Pull a quote from the app; without an API the user gets manual steps."""
        quote_id = params.get("orcamento_id")
        try:
            async with httpx.AsyncClient(timeout=_TIMEOUT, transport=self._transport) as client:
                resp = await client.get(f"{self.base_url}/api/orcamento/{quote_id}")
            if resp.status_code < 400:
                return {"modo": "api", "message": "Orçamento importado!", "orcamento": _quote_body(resp)}
        except (httpx.HTTPError, QuoteServiceError) as exc:
            logger.info(f"Local Orçamentos API not available: {exc}")

        return {
            "modo": "manual",
            "message": "Não consegui importar automaticamente.",
            "sugestao": "Por favor, exporte o orçamento do Local Orçamentos e cole aqui os dados.",
        }


def _quote_body(resp: httpx.Response) -> dict[str, Any]:
    """The quote object in an API reply; anything else counts as a service failure."""
    try:
        body = resp.json()
    except ValueError as exc:
        raise QuoteServiceError("Resposta inválida do Local Orçamentos") from exc
    if not isinstance(body, dict):
        raise QuoteServiceError("Resposta inválida do Local Orçamentos")
    return body


def _json_items(items: list[Any]) -> str:
    return json.dumps(items, ensure_ascii=False, separators=(",", ":"))


def calculate(params: dict[str, Any]) -> dict[str, Any]:
    """Totals for a list of items; discount applies first, tax on the discounted value.

    ``desconto`` and ``imposto`` are percentages.
    """
    items = params.get("itens") or []
    discount = float(params.get("desconto") or 0)
    tax = float(params.get("imposto") or 0)

    subtotal = 0.0
    priced = []
    for item in items:
        line_total = float(item.get("preco") or 0) * float(item.get("quantidade") or 1)
        subtotal += line_total
        priced.append({**item, "valor_total": line_total})

    discount_value = subtotal * discount / 100
    discounted = subtotal - discount_value
    tax_value = discounted * tax / 100
    return {
        "itens": priced,
        "subtotal": subtotal,
        "desconto": {"percentual": discount, "valor": discount_value},
        "imposto": {"percentual": tax, "valor": tax_value},
        "total": discounted + tax_value,
    }


def format_quote(quote: dict[str, Any]) -> str:
    """Plain-text rendering for the chat window."""
    created = quote.get("criado_em")
    date = datetime.fromisoformat(created).strftime("%d/%m/%Y") if created else "-"
    lines = [
        "📋 **ORÇAMENTO**",
        "━━━━━━━━━━━━━━━━━━━━",
        f"**Cliente:** {quote.get('cliente') or 'Não informado'}",
        f"**Data:** {date}",
        "",
        "**Itens:**",
    ]
    items = quote.get("itens") or []
    if items:
        for i, item in enumerate(items, 1):
            price = float(item.get("preco") or 0)
            lines.append(f"{i}. {item.get('nome')} - {item.get('quantidade')}x - R$ {price:.2f}")
    else:
        lines.append("(Nenhum item)")
    lines.append("")
    lines.append("━━━━━━━━━━━━━━━━━━━━")
    lines.append(f"**TOTAL: R$ {float(quote.get('valor_total') or 0):.2f}**")
    return "\n".join(lines)
