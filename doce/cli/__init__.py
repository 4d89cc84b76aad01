"""CLI module for Doce.AI."""
