"""Local database actions: quotes, products/specs, sites and history."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from loguru import logger

from doce.errors import InvalidDatabaseError
from doce.storage.store import LocalStore
from doce.utils.helpers import generate_id, now_iso


def _contains(value: Any, needle: str) -> bool:
    return isinstance(value, str) and needle in value.lower()


_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _created_at(quote: dict[str, Any]) -> datetime:
    """Sort key for quotes; naive stamps are read as UTC, unparseable ones sort last."""
    try:
        stamp = datetime.fromisoformat(str(quote.get("criado_em") or ""))
    except ValueError:
        return _EPOCH
    return stamp if stamp.tzinfo else stamp.replace(tzinfo=timezone.utc)


class DatabaseActions:
    """Handlers over :class:`LocalStore`. Each loads, mutates and saves the document."""

    def __init__(self, store: LocalStore, history_limit: int = 100):
        self.store = store
        self.history_limit = history_limit

    # ── Quotes ──────────────────────────────────────────────────────

    async def save_quote(self, params: dict[str, Any]) -> dict[str, Any]:
        # The remote classifier may nest the quote under "orcamento".
        source = params.get("orcamento") if isinstance(params.get("orcamento"), dict) else params
        now = now_iso()
        quote = {
            "id": generate_id(),
            "cliente": source.get("cliente"),
            "itens": source.get("itens") or [],
            "valor_total": source.get("valor_total") or 0,
            "imagens": params.get("imagens") or source.get("imagens") or [],
            "specs": params.get("specs") or source.get("specs") or [],
            "origem": source.get("origem") or "manual",
            "criado_em": now,
            "atualizado_em": now,
        }
        db = self.store.load()
        db["orcamentos"].append(quote)
        await self.store.save(db)
        logger.info(f"Quote saved: {quote['id']} ({quote['cliente']})")
        return {"message": "Orçamento salvo com sucesso!", "orcamento": quote}

    async def search_quotes(self, params: dict[str, Any]) -> dict[str, Any]:
        termo = params.get("termo")
        cliente = params.get("cliente")
        data = params.get("data")
        results = self.store.load()["orcamentos"]

        if termo:
            needle = termo.lower()
            results = [
                q for q in results
                if _contains(q.get("cliente"), needle)
                or any(_contains(item.get("nome"), needle) for item in q.get("itens") or [])
            ]
        if cliente:
            needle = cliente.lower()
            results = [q for q in results if _contains(q.get("cliente"), needle)]
        if data:
            results = [q for q in results if str(q.get("criado_em", "")).startswith(data)]

        return {"encontrados": len(results), "orcamentos": results}

    async def list_quotes(self, params: dict[str, Any] | None = None) -> dict[str, Any]:
        params = params or {}
        limit = int(params.get("limite") or 10)
        order = params.get("ordem", "recente")
        quotes = list(self.store.load()["orcamentos"])

        if order == "recente":
            quotes.sort(key=_created_at, reverse=True)
        elif order == "valor":
            quotes.sort(key=lambda q: q.get("valor_total") or 0, reverse=True)

        total = len(quotes)
        shown = quotes[:limit]
        return {"total": total, "mostrando": len(shown), "orcamentos": shown}

    # ── Products & specs ────────────────────────────────────────────

    async def save_product(self, params: dict[str, Any]) -> dict[str, Any]:
        product = {
            "id": generate_id(),
            "nome": params.get("nome"),
            "fabricante": params.get("fabricante"),
            "specs": params.get("specs") or {},
            "preco": params.get("preco"),
            "imagem": params.get("imagem"),
            "categoria": params.get("categoria") or "geral",
            "criado_em": now_iso(),
        }
        db = self.store.load()
        db["produtos"].append(product)
        await self.store.save(db)
        return {"message": f'Produto "{product["nome"]}" salvo!', "produto": product}

    async def search_specs(self, params: dict[str, Any]) -> dict[str, Any]:
        produto = params.get("produto") or ""
        fabricante = params.get("fabricante")
        needle = produto.lower()

        results = [
            p for p in self.store.load()["produtos"]
            if _contains(p.get("nome"), needle)
            and (not fabricante or _contains(p.get("fabricante"), fabricante.lower()))
        ]
        if not results:
            return {
                "encontrado": False,
                "message": f'Nenhum produto encontrado para "{produto}"',
                "sugestao": "Posso buscar nos sites Saintyco ou Countec?",
            }
        return {"encontrado": True, "produtos": results}

    # ── Scraping sites ──────────────────────────────────────────────

    async def add_site(self, params: dict[str, Any]) -> dict[str, Any]:
        nome = params.get("nome")
        if not nome:
            raise ValueError("Informe o nome do site")
        site = {
            "id": "_".join(nome.lower().split()),
            "nome": nome,
            "url": params.get("url"),
            "seletores": params.get("seletores") or {},
            "ativo": True,
            "adicionado_em": now_iso(),
        }
        db = self.store.load()
        db["sites_scraping"].append(site)
        await self.store.save(db)
        return {"message": f'Site "{nome}" adicionado para busca!', "site": site}

    async def list_sites(self, params: dict[str, Any] | None = None) -> dict[str, Any]:
        return {"sites": self.store.load()["sites_scraping"]}

    # ── History ─────────────────────────────────────────────────────

    async def record_history(self, params: dict[str, Any]) -> dict[str, Any]:
        db = self.store.load()
        db["historico"].append({
            "id": generate_id(),
            "acao": params.get("acao"),
            "dados": params.get("dados"),
            "resultado": params.get("resultado"),
            "timestamp": now_iso(),
        })
        if len(db["historico"]) > self.history_limit:
            db["historico"] = db["historico"][-self.history_limit:]
        await self.store.save(db)
        return {"registrado": True}

    # ── Maintenance ─────────────────────────────────────────────────

    async def export_db(self, params: dict[str, Any] | None = None) -> dict[str, Any]:
        return {"dados": self.store.load(), "exportado_em": now_iso()}

    async def import_db(self, params: dict[str, Any]) -> dict[str, Any]:
        data = params.get("dados")
        if not isinstance(data, dict) or "orcamentos" not in data:
            raise InvalidDatabaseError("Dados inválidos")
        await self.store.save(data)
        return {"message": "Banco de dados importado com sucesso!"}

    async def reset_db(self, params: dict[str, Any] | None = None) -> dict[str, Any]:
        await self.store.reset()
        return {"message": "Banco de dados reiniciado"}
