"""LiteLLM provider used by the free-conversation responder."""

from __future__ import annotations

from typing import Any

import litellm
from litellm import acompletion
from loguru import logger

from doce.providers.base import LLMProvider, LLMResponse
from doce.settings import DoceSettings, get_settings


class LiteLLMProvider(LLMProvider):
    """
    Chat completions through LiteLLM.

    The default target is the GLM endpoint, reached as an OpenAI-compatible
    API (``openai/glm-4`` with a custom ``api_base``).
    """

    def __init__(
        self,
        api_key: str | None = None,
        api_base: str | None = None,
        default_model: str = "openai/glm-4",
    ):
        super().__init__(api_key, api_base)
        self.default_model = default_model

        # Disable LiteLLM logging noise
        litellm.suppress_debug_info = True
        litellm.drop_params = True

    @classmethod
    def from_settings(cls, settings: DoceSettings | None = None) -> LiteLLMProvider:
        s = settings or get_settings()
        return cls(api_key=s.chat_api_key, api_base=s.chat_api_base or None, default_model=s.chat_model)

    async def chat(
        self,
        messages: list[dict[str, Any]],
        model: str | None = None,
        max_tokens: int = 1024,
        temperature: float = 0.7,
    ) -> LLMResponse:
        model = model or self.default_model
        kwargs: dict[str, Any] = {
            "model": model,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        if self.api_key:
            kwargs["api_key"] = self.api_key
        if self.api_base:
            kwargs["api_base"] = self.api_base

        try:
            response = await acompletion(**kwargs)
            return self._parse_response(response, resolved_model=model)
        except Exception as e:
            logger.error(f"LLM call failed ({model}): {e}")
            # Raw exception details stay in logs only.
            return LLMResponse(content=self._friendly_error(e), finish_reason="error", model=model)

    @staticmethod
    def _friendly_error(exc: Exception) -> str:
        """Map raw LLM exceptions to user-friendly messages."""
        raw = str(exc).lower()
        if "rate_limit" in raw or "429" in raw:
            return "Muitas mensagens seguidas. Espere alguns segundos e tente de novo."
        if "context_length" in raw or "context window" in raw:
            return "A conversa ficou longa demais. Pode reformular a pergunta?"
        if "timeout" in raw:
            return "A resposta demorou demais. Tente novamente em instantes."
        if "authentication" in raw or "401" in raw or "403" in raw:
            return "Problema de autenticação com o serviço de chat. Verifique a chave da API."
        return "Desculpe, tive um problema de conexão. Pode tentar novamente? 🙏"

    def _parse_response(self, response: Any, *, resolved_model: str = "") -> LLMResponse:
        choice = response.choices[0]
        usage = {}
        if getattr(response, "usage", None):
            usage = {
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            }
        return LLMResponse(
            content=choice.message.content,
            finish_reason=choice.finish_reason or "stop",
            usage=usage,
            model=resolved_model or getattr(response, "model", ""),
        )

    def get_default_model(self) -> str:
        return self.default_model
