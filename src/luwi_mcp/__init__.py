"""Luwi MCP: intent-based routing across multiple LLM providers."""

__version__ = "0.1.0"
