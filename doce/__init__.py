"""Doce.AI - chat assistant that routes messages to work actions."""

__version__ = "0.1.0"
__logo__ = "🍬"
