"""Small shared helpers."""

import secrets
import time
from datetime import datetime, timezone
from pathlib import Path


def ensure_dir(path: Path) -> Path:
    """Create *path* (and parents) if missing and return it."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def generate_id() -> str:
    """Short unique id: base-36 millisecond timestamp + random suffix."""
    millis = int(time.time() * 1000)
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    stamp = ""
    while millis:
        millis, rem = divmod(millis, 36)
        stamp = digits[rem] + stamp
    return stamp + secrets.token_hex(4)


def now_iso() -> str:
    """Current UTC time as an offset-aware ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


def today_br() -> str:
    """Today's date in Brazilian format (dd/mm/yyyy)."""
    return datetime.now().strftime("%d/%m/%Y")
