"""Atomic JSON document I/O.

Writes go through a per-path asyncio lock and the temp-file + rename
pattern, so a crash mid-write never leaves a truncated document behind.
"""

import asyncio
import json
import os
import tempfile
from pathlib import Path
from typing import Any

from loguru import logger


class AtomicFileWriter:
    """Serialises writers per path and replaces files atomically.

    Usage::

        writer = AtomicFileWriter()
        await writer.write_json(path, {"orcamentos": []})
        data = writer.read_json(path, default={})
    """

    def __init__(self) -> None:
        self._locks: dict[Path, asyncio.Lock] = {}

    def _get_lock(self, path: Path) -> asyncio.Lock:
        resolved = path.resolve()
        if resolved not in self._locks:
            self._locks[resolved] = asyncio.Lock()
        return self._locks[resolved]

    async def write_text(self, path: Path, content: str, encoding: str = "utf-8") -> bool:
        """Atomically write *content* to *path*. Returns ``False`` on OS errors."""
        async with self._get_lock(path):
            temp_path: str | None = None
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                fd, temp_path = tempfile.mkstemp(
                    dir=path.parent,
                    prefix=f".{path.name}.",
                    suffix=".tmp",
                )
                try:
                    os.write(fd, content.encode(encoding))
                finally:
                    os.close(fd)
                Path(temp_path).replace(path)
                return True
            except OSError as exc:
                logger.error(f"Atomic write failed for {path}: {exc}")
                if temp_path:
                    Path(temp_path).unlink(missing_ok=True)
                return False

    async def write_json(self, path: Path, data: Any, indent: int = 2) -> bool:
        """Serialise *data* as UTF-8 JSON and write it atomically."""
        try:
            content = json.dumps(data, indent=indent, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            logger.error(f"JSON serialization failed for {path}: {exc}")
            return False
        return await self.write_text(path, content)

    @staticmethod
    def read_json(path: Path, default: Any = None) -> Any:
        """Read a JSON document, returning *default* when absent or corrupt."""
        if not path.exists():
            return default
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning(f"Unreadable JSON document {path}: {exc}")
            return default


_atomic_writer: AtomicFileWriter | None = None


def get_atomic_writer() -> AtomicFileWriter:
    """Return the process-wide :class:`AtomicFileWriter`."""
    global _atomic_writer
    if _atomic_writer is None:
        _atomic_writer = AtomicFileWriter()
    return _atomic_writer
