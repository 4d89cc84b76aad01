import asyncio
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from doce.actions.quotes import QuoteActions, calculate, format_quote

BASE = "https://orcamentos.example"


def test_calculate_applies_discount_before_tax() -> None:
    result = calculate({
        "itens": [{"nome": "A", "preco": 100, "quantidade": 2}, {"nome": "B", "preco": 50}],
        "desconto": 10,
        "imposto": 10,
    })

    assert result["subtotal"] == 250
    assert result["desconto"]["valor"] == 25
    assert result["imposto"]["valor"] == pytest.approx(22.5)
    assert result["total"] == pytest.approx(247.5)
    assert [i["valor_total"] for i in result["itens"]] == [200, 50]


def test_default_mode_builds_iframe_url() -> None:
    result = asyncio.run(QuoteActions(BASE).generate({"cliente": "ACME", "itens": [{"nome": "x"}]}))

    assert result["modo"] == "iframe"
    query = parse_qs(urlparse(result["url"]).query)
    assert query["cliente"] == ["ACME"]
    assert query["origem"] == ["doce_ai"]
    assert query["dados"] == ['[{"nome":"x"}]']


def test_api_mode_falls_back_to_iframe_on_server_error() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(500))
    result = asyncio.run(QuoteActions(BASE, transport=transport).generate({"cliente": "ACME", "modo": "api"}))

    assert result["modo"] == "iframe"


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, text="<html>ok</html>"),
        httpx.Response(200, json=["não", "é", "objeto"]),
    ],
)
def test_api_mode_falls_back_to_iframe_on_unusable_body(response: httpx.Response) -> None:
    transport = httpx.MockTransport(lambda request: response)
    result = asyncio.run(QuoteActions(BASE, transport=transport).generate({"cliente": "ABC", "modo": "api"}))

    assert result["modo"] == "iframe"
    assert result["dados"]["cliente"] == "ABC"


def test_import_with_non_json_reply_gives_manual_instructions() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(200, text="<html></html>"))
    result = asyncio.run(QuoteActions(BASE, transport=transport).import_quote({"orcamento_id": "1"}))

    assert result["modo"] == "manual"


def test_api_mode_returns_created_quote() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/orcamento"
        return httpx.Response(201, json={"id": 42})

    quotes = QuoteActions(BASE, transport=httpx.MockTransport(handler))
    result = asyncio.run(quotes.generate({"cliente": "ACME", "modo": "api"}))

    assert result["modo"] == "api"
    assert result["url"] == f"{BASE}/orcamento/42"


def test_import_without_api_gives_manual_instructions() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("offline", request=request)

    result = asyncio.run(QuoteActions(BASE, transport=httpx.MockTransport(handler)).import_quote({"orcamento_id": "1"}))

    assert result["modo"] == "manual"


def test_format_quote_lists_items_and_total() -> None:
    text = format_quote({
        "cliente": "ACME",
        "criado_em": "2026-03-05T10:00:00",
        "itens": [{"nome": "Bomba", "quantidade": 2, "preco": 10}],
        "valor_total": 20,
    })

    assert "**Data:** 05/03/2026" in text
    assert "1. Bomba - 2x - R$ 10.00" in text
    assert "**TOTAL: R$ 20.00**" in text
