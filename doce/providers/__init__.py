"""LLM provider abstraction module."""

from doce.providers.base import LLMProvider, LLMResponse
from doce.providers.litellm_provider import LiteLLMProvider

__all__ = ["LLMProvider", "LLMResponse", "LiteLLMProvider"]
