"""Configuration loading for mcp-runtime."""

from mcp_runtime.config.definitions import (
    CommandSpec,
    HttpCommand,
    ServerDefinition,
    StdioCommand,
)
from mcp_runtime.config.loader import load_server_definitions, normalize_server_entry
from mcp_runtime.config.schema import RawConfig, RawEntry

__all__ = [
    "CommandSpec",
    "HttpCommand",
    "RawConfig",
    "RawEntry",
    "ServerDefinition",
    "StdioCommand",
    "load_server_definitions",
    "normalize_server_entry",
]
