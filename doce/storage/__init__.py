"""Local JSON document storage."""

from doce.storage.store import LocalStore, initial_document

__all__ = ["LocalStore", "initial_document"]
