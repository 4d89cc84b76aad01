"""Product catalog scraping for the supplier sites (Saintyco, Countec).

Search pages are fetched with httpx and parsed with BeautifulSoup using
the CSS selectors configured per site. When a site cannot be reached
the caller gets a :class:`SiteUnreachableError` carrying the manual
search URL.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote, urljoin

import httpx
from bs4 import BeautifulSoup, Tag
from loguru import logger

from doce.errors import DoceError, SiteNotConfiguredError, SiteUnreachableError

USER_AGENT = "Mozilla/5.0 (Macintosh; Intel Mac OS X 14_7_2) AppleWebKit/537.36"
MAX_PRODUCTS = 10

_FILE_URL_RE = re.compile(r"\.(pdf|doc|docx|xls|xlsx|zip)$", re.IGNORECASE)
_DOCUMENT_LINK_RE = re.compile(r"\.(pdf|doc|docx|xls|xlsx)$", re.IGNORECASE)

DEFAULT_SELECTORS = {
    "produtos": ".product",
    "nome": "h2, h3, .title",
    "imagem": "img",
    "link": "a",
}


@dataclass(frozen=True, slots=True)
class SiteConfig:
    name: str
    base_url: str
    search_url: str
    selectors: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_SELECTORS))

    def search_link(self, term: str) -> str:
        return f"{self.search_url}{quote(term or '')}"


DEFAULT_SITES: dict[str, SiteConfig] = {
    "saintyco": SiteConfig(
        name="Saintyco",
        base_url="https://www.saintyco.com/pt/",
        search_url="https://www.saintyco.com/pt/?s=",
        selectors={
            "produtos": ".product-item, .product-card",
            "nome": ".product-title, h2",
            "preco": ".price",
            "imagem": "img",
            "link": "a",
            "descricao": ".product-description, .excerpt",
        },
    ),
    "countec": SiteConfig(
        name="Countec Group",
        base_url="https://countec-group.com/en/sub/sub02_01.php",
        search_url="https://countec-group.com/en/sub/sub02_01.php?search=",
        selectors={
            "produtos": ".product-list-item, .product",
            "nome": ".product-name, h3",
            "imagem": "img",
            "link": "a",
            "specs": ".specifications, .spec-table",
        },
    ),
}


# ── HTML extraction ─────────────────────────────────────────────────


def _text(parent: Tag, selector: str | None) -> str | None:
    if not selector:
        return None
    el = parent.select_one(selector)
    if el is None:
        return None
    return el.get_text(strip=True) or None


def _resolve(value: str | None, base_url: str) -> str | None:
    if not value:
        return None
    if value.startswith("http"):
        return value
    return urljoin(base_url, value)


def extract_products(html: str, site: SiteConfig, limit: int = MAX_PRODUCTS) -> list[dict[str, Any]]:
    """Products found in *html*; only the first *limit* candidates are inspected."""
    soup = BeautifulSoup(html, "html.parser")
    selectors = site.selectors
    products: list[dict[str, Any]] = []

    for el in soup.select(selectors.get("produtos", ".product"))[:limit]:
        img = el.select_one(selectors["imagem"]) if selectors.get("imagem") else None
        link = el.select_one(selectors["link"]) if selectors.get("link") else None
        product = {
            "nome": _text(el, selectors.get("nome")),
            "preco": _text(el, selectors.get("preco")),
            "descricao": _text(el, selectors.get("descricao")),
            "imagem": _resolve((img.get("src") or img.get("data-src")) if img else None, site.base_url),
            "link": _resolve(link.get("href") if link else None, site.base_url),
        }
        if product["nome"]:
            products.append(product)

    return products


def extract_document_links(html: str, page_url: str) -> list[dict[str, str]]:
    soup = BeautifulSoup(html, "html.parser")
    files = []
    for a in soup.select("a[href]"):
        href = a.get("href") or ""
        if not _DOCUMENT_LINK_RE.search(href):
            continue
        files.append({
            "nome": a.get_text(strip=True) or "Arquivo",
            "tipo": href.rsplit(".", 1)[-1].upper(),
            "url": _resolve(href, page_url),
        })
    return files


# ── Scraper ─────────────────────────────────────────────────────────


class CatalogScraper:
    """Owns the site table and performs catalog searches."""

    def __init__(
        self,
        sites: dict[str, SiteConfig] | None = None,
        *,
        timeout: float = 20.0,
        max_results: int = MAX_PRODUCTS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.sites: dict[str, SiteConfig] = dict(DEFAULT_SITES if sites is None else sites)
        self.timeout = timeout
        self.max_results = max_results
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
            transport=self._transport,
        )

    async def _fetch(self, url: str) -> str:
        async with self._client() as client:
            r = await client.get(url)
            r.raise_for_status()
            return r.text

    async def search_catalog(self, site_id: str, term: str, category: str | None = None) -> dict[str, Any]:
        site = self.sites.get(site_id)
        if site is None:
            raise SiteNotConfiguredError(f'Site "{site_id}" não configurado')

        url = site.search_link(term)
        try:
            html = await self._fetch(url)
        except httpx.HTTPError as exc:
            logger.warning(f"Catalog search failed on {site_id}: {exc}")
            raise SiteUnreachableError(site.name, url, str(exc)) from exc

        products = extract_products(html, site, self.max_results)
        logger.info(f"Catalog {site_id}: {len(products)} products for '{term}'")
        if not products:
            return {
                "encontrados": 0,
                "message": f'Nenhum produto encontrado para "{term}" no {site.name}',
                "sugestao": "Tente outros termos de busca",
            }
        return {"site": site.name, "termo": term, "encontrados": len(products), "produtos": products}

    # ── Action handlers ─────────────────────────────────────────────

    async def search_saintyco(self, params: dict[str, Any]) -> dict[str, Any]:
        return await self.search_catalog("saintyco", params.get("termo") or "", params.get("categoria"))

    async def search_countec(self, params: dict[str, Any]) -> dict[str, Any]:
        return await self.search_catalog("countec", params.get("termo") or "", params.get("categoria"))

    async def download_file(self, params: dict[str, Any]) -> dict[str, Any]:
        url = params.get("url")
        if not url:
            raise ValueError("Informe a URL do arquivo ou da página")

        if _FILE_URL_RE.search(url):
            return {
                "message": "Arquivo encontrado!",
                "tipo": url.rsplit(".", 1)[-1].upper(),
                "action": "download",
                "url": url,
            }

        try:
            html = await self._fetch(url)
        except httpx.HTTPError as exc:
            logger.warning(f"File page fetch failed for {url}: {exc}")
            raise SiteUnreachableError(url, url, str(exc)) from exc

        files = extract_document_links(html, url)
        if not files:
            return {"encontrados": 0, "message": "Nenhum arquivo encontrado nesta página"}
        return {"encontrados": len(files), "arquivos": files}

    async def add_site(self, params: dict[str, Any]) -> dict[str, Any]:
        site_id = params.get("id")
        name = params.get("name") or params.get("nome") or site_id
        if not site_id or not params.get("searchUrl"):
            raise ValueError("Informe id e searchUrl do site")
        self.sites[site_id] = SiteConfig(
            name=name,
            base_url=params.get("baseUrl") or params["searchUrl"],
            search_url=params["searchUrl"],
            selectors=params.get("selectors") or dict(DEFAULT_SELECTORS),
        )
        return {"message": f'Site "{name}" adicionado!', "sites": list(self.sites)}

    def list_sites(self) -> list[dict[str, str]]:
        return [{"id": site_id, "name": site.name, "url": site.base_url} for site_id, site in self.sites.items()]

    async def search_all(self, params: dict[str, Any]) -> dict[str, Any]:
        term = params.get("termo") or ""
        results: dict[str, Any] = {}
        for site_id in list(self.sites):
            try:
                results[site_id] = await self.search_catalog(site_id, term)
            except DoceError as exc:
                results[site_id] = {"success": False, "error": str(exc)}

        total = sum(r.get("encontrados", 0) for r in results.values())
        return {"termo": term, "totalEncontrados": total, "resultados": results}
