"""Session transports for MCP servers."""

from .connection_manager import ConnectionManager, build_stdio_parameters, uses_sse
from .oauth import FileTokenStorage, build_oauth_provider

__all__ = [
    "ConnectionManager",
    "FileTokenStorage",
    "build_oauth_provider",
    "build_stdio_parameters",
    "uses_sse",
]
