"""Single-file JSON document store for quotes, products, specs and history.

Storage: ``~/.doce/doce_database.json``
Format:
    {
        "orcamentos": [...],
        "produtos": [...],
        "specs": [...],
        "historico": [...],
        "sites_scraping": [{"id": "saintyco", "url": "...", "ativo": true}, ...],
        "config": {"criado_em": "...", "versao": "1.0.0"}
    }
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from loguru import logger

from doce.utils.atomic_io import AtomicFileWriter, get_atomic_writer
from doce.utils.helpers import now_iso

SCHEMA_VERSION = "1.0.0"

COLLECTIONS = ("orcamentos", "produtos", "specs", "historico", "sites_scraping")


def initial_document() -> dict[str, Any]:
    return {
        "orcamentos": [],
        "produtos": [],
        "specs": [],
        "historico": [],
        "sites_scraping": [
            {"id": "saintyco", "url": "https://www.saintyco.com/pt/", "ativo": True},
            {"id": "countec", "url": "https://countec-group.com/en/sub/sub02_01.php", "ativo": True},
        ],
        "config": {"criado_em": now_iso(), "versao": SCHEMA_VERSION},
    }


class LocalStore:
    """Loads and saves the whole document; no partial updates."""

    def __init__(self, path: Path, writer: AtomicFileWriter | None = None):
        self.path = path
        self._writer = writer or get_atomic_writer()

    def load(self) -> dict[str, Any]:
        """Current document, or a fresh one when the file is missing/unreadable."""
        data = self._writer.read_json(self.path)
        if not isinstance(data, dict):
            if data is not None:
                logger.warning(f"Ignoring malformed database at {self.path}")
            return initial_document()
        for name in COLLECTIONS:
            data.setdefault(name, [])
        data.setdefault("config", {"criado_em": now_iso(), "versao": SCHEMA_VERSION})
        return data

    async def save(self, data: dict[str, Any]) -> bool:
        ok = await self._writer.write_json(self.path, data)
        if not ok:
            logger.error(f"Failed to save database to {self.path}")
        return ok

    async def reset(self) -> dict[str, Any]:
        data = initial_document()
        await self.save(data)
        return data
