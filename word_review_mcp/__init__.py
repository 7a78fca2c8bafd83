"""Spaced-repetition scheduling for vocabulary reviews, served over MCP."""

__version__ = "0.1.0"
