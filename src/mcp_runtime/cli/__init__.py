"""Command-line interface for mcp-runtime."""
