"""Utility functions for doce."""

from doce.utils.helpers import ensure_dir, generate_id, now_iso

__all__ = ["ensure_dir", "generate_id", "now_iso"]
