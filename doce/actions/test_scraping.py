import asyncio

import httpx
import pytest

from doce.actions.executor import ActionExecutor
from doce.actions.registry import ActionDescriptor, ActionRegistry
from doce.actions.scraping import DEFAULT_SITES, CatalogScraper, extract_products
from doce.errors import SiteNotConfiguredError, SiteUnreachableError

SAINTYCO_HTML = """
<html><body>
  <div class="product-item">
    <h2 class="product-title">Blister Packing Machine</h2>
    <span class="price">US$ 12.000</span>
    <p class="excerpt">Alta velocidade</p>
    <img data-src="/img/blister.png">
    <a href="/produto/blister">ver</a>
  </div>
  <div class="product-card">
    <span class="price">sem nome</span>
  </div>
  <div class="product-card">
    <h2>Tablet Counter</h2>
    <a href="https://www.saintyco.com/pt/produto/counter">ver</a>
  </div>
</body></html>
"""


def _scraper(handler) -> CatalogScraper:
    return CatalogScraper(transport=httpx.MockTransport(handler))


def test_extract_products_resolves_urls_and_skips_nameless_items() -> None:
    products = extract_products(SAINTYCO_HTML, DEFAULT_SITES["saintyco"])

    assert [p["nome"] for p in products] == ["Blister Packing Machine", "Tablet Counter"]
    first = products[0]
    assert first["preco"] == "US$ 12.000"
    assert first["descricao"] == "Alta velocidade"
    assert first["imagem"] == "https://www.saintyco.com/img/blister.png"
    assert first["link"] == "https://www.saintyco.com/produto/blister"
    assert products[1]["imagem"] is None


def test_extract_products_inspects_at_most_the_limit() -> None:
    html = "".join(f'<div class="product"><h3>P{i}</h3></div>' for i in range(15))

    assert len(extract_products(html, DEFAULT_SITES["countec"])) == 10


def test_search_fetches_the_site_search_page() -> None:
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200, text=SAINTYCO_HTML)

    result = asyncio.run(_scraper(handler).search_saintyco({"termo": "blister"}))

    assert seen == ["https://www.saintyco.com/pt/?s=blister"]
    assert result["site"] == "Saintyco"
    assert result["encontrados"] == 2


def test_zero_products_is_a_success_with_suggestion() -> None:
    result = asyncio.run(_scraper(lambda request: httpx.Response(200, text="<html></html>")).search_countec({"termo": "x"}))

    assert result["encontrados"] == 0
    assert result["sugestao"] == "Tente outros termos de busca"


def test_unreachable_site_raises_with_manual_link() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timeout", request=request)

    with pytest.raises(SiteUnreachableError) as info:
        asyncio.run(_scraper(handler).search_catalog("saintyco", "bomba"))

    assert info.value.manual_url == "https://www.saintyco.com/pt/?s=bomba"
    assert "https://www.saintyco.com/pt/?s=bomba" in str(info.value)


def test_unreachable_site_becomes_failure_envelope() -> None:
    scraper = _scraper(lambda request: httpx.Response(503))
    executor = ActionExecutor(ActionRegistry([ActionDescriptor("buscar_produto_saintyco", scraper.search_saintyco)]))

    envelope = asyncio.run(executor.execute("buscar_produto_saintyco", {"termo": "bomba"}))

    assert envelope.success is False
    assert "buscar manualmente" in envelope.error


def test_unknown_site_is_rejected() -> None:
    with pytest.raises(SiteNotConfiguredError):
        asyncio.run(CatalogScraper().search_catalog("amazon", "x"))


def test_download_direct_file_link_is_returned_as_is() -> None:
    result = asyncio.run(CatalogScraper().download_file({"url": "https://x.com/catalogo.PDF"}))

    assert result == {
        "message": "Arquivo encontrado!",
        "tipo": "PDF",
        "action": "download",
        "url": "https://x.com/catalogo.PDF",
    }


def test_download_scans_page_for_documents() -> None:
    html = '<a href="/docs/manual.pdf">Manual</a><a href="/sobre">Sobre</a><a href="ficha.xlsx"></a>'
    scraper = _scraper(lambda request: httpx.Response(200, text=html))

    result = asyncio.run(scraper.download_file({"url": "https://x.com/produtos/bomba"}))

    assert result["encontrados"] == 2
    assert result["arquivos"][0] == {"nome": "Manual", "tipo": "PDF", "url": "https://x.com/docs/manual.pdf"}
    assert result["arquivos"][1]["nome"] == "Arquivo"
    assert result["arquivos"][1]["url"] == "https://x.com/produtos/ficha.xlsx"


def test_search_all_reports_each_site() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if "saintyco" in request.url.host:
            return httpx.Response(200, text=SAINTYCO_HTML)
        raise httpx.ConnectError("down", request=request)

    result = asyncio.run(_scraper(handler).search_all({"termo": "tablet"}))

    assert result["totalEncontrados"] == 2
    assert result["resultados"]["countec"]["success"] is False


def test_added_site_is_listed() -> None:
    scraper = CatalogScraper()
    asyncio.run(scraper.add_site({"id": "acme", "name": "ACME", "searchUrl": "https://acme.example/?q="}))

    assert {"id": "acme", "name": "ACME", "url": "https://acme.example/?q="} in scraper.list_sites()
    assert "acme" not in DEFAULT_SITES
