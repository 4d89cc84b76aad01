"""Email hub via Jace.AI.

Jace.AI only has a web interface, so queries run in manual mode: the
user gets the question to ask, pastes the answer back with
``register_reply``, and that answer is served from cache for five
minutes to repeat consultations.
"""

from __future__ import annotations

import json
import re
from typing import Any

import httpx
from loguru import logger

from doce.utils.cache import TTLCache

REPLY_TTL_SECONDS = 5 * 60

_EMAIL_RE = re.compile(r"[\w.-]+@[\w.-]+\.\w+")
_DATE_RE = re.compile(r"\d{1,2}[/-]\d{1,2}[/-]\d{2,4}")


def build_query(params: dict[str, Any]) -> str:
    query = "Encontre emails"
    if params.get("remetente"):
        query += f" de {params['remetente']}"
    if params.get("assunto"):
        query += f' sobre "{params["assunto"]}"'
    if params.get("termo"):
        query += f' que mencionam "{params["termo"]}"'
    if params.get("data"):
        query += f" de {params['data']}"
    return query


def _unique(items: list[str]) -> list[str]:
    return list(dict.fromkeys(items))


def parse_reply(text: str) -> dict[str, Any]:
    """Pull sender addresses and dates out of a pasted Jace.AI answer."""
    return {
        "emails": [],
        "resumo": text,
        "datas": _unique(_DATE_RE.findall(text)),
        "remetentes": _unique(_EMAIL_RE.findall(text)),
    }


def _cache_key(params: dict[str, Any]) -> str:
    return json.dumps(params or {}, sort_keys=True, ensure_ascii=False, default=str)


class EmailHubActions:
    def __init__(
        self,
        jace_url: str = "https://jace.ai",
        *,
        cache: TTLCache | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.jace_url = jace_url
        self.cache = cache or TTLCache(ttl_seconds=REPLY_TTL_SECONDS)
        self._transport = transport

    def _instructions(self, query: str, last_step: str) -> list[str]:
        return [
            f"1. Abra o Jace.AI: {self.jace_url}",
            f'2. Pergunte: "{query}"',
            f"3. {last_step}",
        ]

    async def consult_emails(self, params: dict[str, Any]) -> dict[str, Any]:
        cached = self.cache.get(_cache_key(params))
        if cached is not None:
            return {**cached, "fromCache": True}

        query = build_query(params)
        about = params.get("termo") or params.get("assunto") or "sua consulta"
        return {
            "modo": "manual",
            "message": f'Para buscar emails sobre "{about}":',
            "instrucoes": self._instructions(query, "Copie a resposta e cole aqui"),
            "query": query,
            "action": "jace_query",
            "buttons": [
                {"label": "Abrir Jace.AI", "action": "open_link", "url": self.jace_url},
                {"label": "Copiar pergunta", "action": "copy", "text": query},
            ],
        }

    async def summarize_email(self, params: dict[str, Any]) -> dict[str, Any]:
        parts = ["Resuma o email"]
        if params.get("remetente"):
            parts.append(f"de {params['remetente']}")
        if params.get("assunto"):
            parts.append(f'sobre "{params["assunto"]}"')
        query = " ".join(parts)
        return {
            "modo": "manual",
            "message": "Para resumir este email:",
            "instrucoes": self._instructions(query, "Cole o resumo aqui"),
            "query": query,
            "action": "jace_query",
        }

    async def register_reply(self, params: dict[str, Any]) -> dict[str, Any]:
        """Store a pasted answer for the consultation *params["consulta"]*."""
        reply = params.get("resposta") or ""
        info = parse_reply(reply)
        self.cache.set(_cache_key(params.get("consulta") or {}), {"resposta": reply, "info": info})
        logger.info(f"Jace reply registered ({len(reply)} chars)")
        return {"message": "Resposta registrada!", "info": info}

    async def check_status(self, params: dict[str, Any] | None = None) -> dict[str, Any]:
        try:
            async with httpx.AsyncClient(timeout=10.0, follow_redirects=True, transport=self._transport) as client:
                await client.get(self.jace_url)
        except httpx.HTTPError as exc:
            logger.warning(f"Jace.AI unreachable: {exc}")
            return {"online": False, "error": "Não foi possível verificar Jace.AI"}
        return {"online": True, "url": self.jace_url}

    # ── Quick actions ───────────────────────────────────────────────

    async def latest_emails(self) -> dict[str, Any]:
        return await self.consult_emails({"termo": "últimos emails de hoje"})

    async def unread_emails(self) -> dict[str, Any]:
        return await self.consult_emails({"termo": "emails não lidos"})

    async def important_emails(self) -> dict[str, Any]:
        return await self.consult_emails({"termo": "emails importantes ou urgentes"})

    def daily_summary(self) -> dict[str, Any]:
        query = "Faça um resumo dos emails que recebi hoje"
        return {"query": query, "action": "jace_query", "message": f'Pergunte ao Jace.AI: "{query}"'}
