"""MCP tool servers for an academic research pipeline."""

__version__ = "1.0.0"
