"""Remote (Gemini) intent classifier with total fallback to the local tier.

Classification is an ordered pipeline of stages:

1. cache    -- a fresh result for the same (utterance, context) pair
2. remote   -- Gemini ``generateContent`` + JSON extraction from the reply
3. local    -- :class:`LocalIntentClassifier`, which cannot fail

A stage that cannot produce a result yields ``None`` and the next one runs;
nothing raised inside the remote stage is visible to callers.
"""

from __future__ import annotations

import json
import re
from dataclasses import replace
from typing import Any

import httpx
from loguru import logger

from doce.actions.registry import ActionRegistry
from doce.errors import RemoteClassificationError
from doce.intent.local import LocalIntentClassifier
from doce.intent.models import METHOD_REMOTE, IntentResult
from doce.intent.prompt import build_instructions, build_prompt
from doce.settings import DoceSettings, get_settings
from doce.utils.cache import TTLCache

_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")

GENERATION_CONFIG = {"temperature": 0.1, "maxOutputTokens": 500}


def extract_json_object(text: str) -> dict[str, Any]:
    """Parse the outermost ``{...}`` span of a free-text model reply."""
    match = _JSON_OBJECT_RE.search(text or "")
    if not match:
        raise RemoteClassificationError("JSON não encontrado na resposta")
    try:
        payload = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        raise RemoteClassificationError(f"JSON inválido na resposta: {exc}") from exc
    if not isinstance(payload, dict):
        raise RemoteClassificationError("a resposta não é um objeto JSON")
    return payload


def reply_text(data: Any) -> str:
    """``candidates[0].content.parts[0].text`` of a generateContent body."""
    candidates = data.get("candidates") if isinstance(data, dict) else None
    if not candidates:
        raise RemoteClassificationError("Resposta inválida do Gemini")
    try:
        return candidates[0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as exc:
        raise RemoteClassificationError(f"Resposta inválida do Gemini: {exc}") from exc


def cache_key(text: str, context: dict[str, Any]) -> str:
    return json.dumps({"mensagem": text, "contexto": context}, sort_keys=True, ensure_ascii=False, default=str)


class RemoteIntentClassifier:
    """Classifies through Gemini; degrades silently to the local classifier."""

    def __init__(
        self,
        registry: ActionRegistry,
        local: LocalIntentClassifier | None = None,
        *,
        api_key: str = "",
        model: str = "gemini-1.5-flash",
        api_base: str = "https://generativelanguage.googleapis.com/v1beta/models",
        timeout: float = 10.0,
        enabled: bool = True,
        cache: TTLCache | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.registry = registry
        self.local = local or LocalIntentClassifier()
        self.api_key = api_key
        self.model = model
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.enabled = enabled
        self.cache = cache or TTLCache(ttl_seconds=300)
        self._transport = transport
        self._instructions = build_instructions(registry)

    @classmethod
    def from_settings(
        cls,
        registry: ActionRegistry,
        settings: DoceSettings | None = None,
        **kwargs: Any,
    ) -> RemoteIntentClassifier:
        s = settings or get_settings()
        return cls(
            registry,
            api_key=s.gemini_api_key,
            model=s.gemini_model,
            api_base=s.gemini_api_base,
            timeout=s.classifier_timeout,
            enabled=s.remote_classifier_enabled,
            cache=TTLCache(ttl_seconds=s.classifier_cache_ttl),
            **kwargs,
        )

    @property
    def endpoint(self) -> str:
        return f"{self.api_base}/{self.model}:generateContent"

    @property
    def is_configured(self) -> bool:
        return self.enabled and bool(self.api_key)

    async def classify(self, text: str, context: dict[str, Any] | None = None) -> IntentResult:
        context = context or {}
        if not self.is_configured:
            return self.local.classify(text, context)

        key = cache_key(text, context)
        async with self.cache.lock(key):
            cached = self.cache.get(key)
            if cached is not None:
                logger.debug(f"Intent cache hit: {cached.action}")
                return replace(cached, params=dict(cached.params), from_cache=True)

            result = await self._remote_stage(text, context)
            if result is not None:
                self.cache.set(key, replace(result, params=dict(result.params)))
                return result

        return self.local.classify(text, context)

    async def _remote_stage(self, text: str, context: dict[str, Any]) -> IntentResult | None:
        try:
            data = await self._request(build_prompt(self._instructions, text, context))
            payload = extract_json_object(reply_text(data))
            return IntentResult.from_payload(payload, method=METHOD_REMOTE)
        except Exception as exc:
            # Any failure here, including timeouts, means "use the local tier".
            logger.warning(f"Remote classification degraded, using local: {exc}")
            return None

    async def _request(self, prompt: str) -> Any:
        body = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": GENERATION_CONFIG,
        }
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            resp = await client.post(
                self.endpoint,
                params={"key": self.api_key},
                headers={"Content-Type": "application/json"},
                json=body,
            )
            resp.raise_for_status()
            return resp.json()
