"""Centralised settings for Doce.AI, loaded from env / .env."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from doce.utils.helpers import ensure_dir


class DoceSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="DOCE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- general ---
    app_name: str = "Doce.AI"
    debug: bool = False

    # --- intent classification (Gemini) ---
    gemini_api_key: str = ""  # empty → local classifier only
    gemini_model: str = "gemini-1.5-flash"
    gemini_api_base: str = "https://generativelanguage.googleapis.com/v1beta/models"
    remote_classifier_enabled: bool = True
    classifier_timeout: float = 10.0
    classifier_cache_ttl: int = 300

    # --- free conversation (OpenAI-compatible GLM endpoint via LiteLLM) ---
    chat_model: str = "openai/glm-4"
    chat_api_key: str = ""  # empty → simulated replies
    chat_api_base: str = "https://open.bigmodel.cn/api/paas/v4"
    chat_temperature: float = 0.7
    chat_max_tokens: int = 1024
    chat_history_window: int = 20

    # --- collaborators ---
    local_orcamentos_url: str = "https://seu-local-orcamentos.vercel.app"
    jace_url: str = "https://jace.ai"
    google_service_account_path: str = ""
    scrape_timeout: float = 20.0
    scrape_max_results: int = 10

    # --- local storage ---
    state_dir: Path = Field(default_factory=lambda: Path.home() / ".doce")
    history_limit: int = 100

    @property
    def database_path(self) -> Path:
        return self.state_dir / "doce_database.json"


@lru_cache
def get_settings() -> DoceSettings:
    s = DoceSettings()
    ensure_dir(s.state_dir)
    return s
