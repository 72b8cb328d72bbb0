"""Constants for the MCP runtime.

This module defines default locations, markers and message templates used by
the config loader, the session layer and the CLI.
"""

# Config file locations
DEFAULT_CONFIG_DIR = "config"
DEFAULT_CONFIG_FILENAME = "mcp-runtime.json"

# Token cache root, relative to the user's home directory
TOKEN_CACHE_ROOT = ".mcp-runtime"

# Header indirection marker resolved at connection time
ENV_REFERENCE_PREFIX = "$env:"

# Recognized auth policy
AUTH_OAUTH = "oauth"

# Client identity sent during the handshake
DEFAULT_CLIENT_NAME = "mcp-runtime"

# Grace period when tearing down sessions
SESSION_CLOSE_TIMEOUT = 1.0

# Inline invocation launchers: executable -> leading subcommand tokens
LAUNCHERS = {
    "npx": (),
    "pnpx": (),
    "bunx": (),
    "uvx": (),
    "pnpm": ("dlx",),
    "pipx": ("run",),
}

# Launcher flags that consume the following token
LAUNCHER_VALUE_FLAGS = frozenset(
    {
        "-p",
        "--package",
        "--from",
        "--with",
        "--python",
        "--spec",
        "--registry",
        "--cache",
    }
)

# Environment variables read by the CLI
ENV_CONFIG_PATH = "MCP_RUNTIME_CONFIG"
ENV_LOG_LEVEL = "MCP_RUNTIME_LOG_LEVEL"

# Log message constants
LOG_LOADED_SERVER = "Loaded MCP server '{name}' ({kind})"
LOG_OPENING_SESSION = "Opening {kind} session for MCP server '{name}'"
LOG_SESSION_EXITED = "Session for MCP server '{name}' ended: {error}"

# Error message constants
ERROR_MISSING_COMMAND = "Server '{name}' is missing a baseUrl/url or command definition in {path}"
ERROR_INVALID_URL = "Server '{name}' has an invalid URL '{url}': only absolute http(s) URLs are supported"
ERROR_MISSING_HEADER_ENV = (
    "Environment variable '{var}' referenced by header '{header}' of server '{name}' is not set"
)
ERROR_MISSING_ENV_PLACEHOLDER = "Environment variable '{var}' referenced by server '{name}' is not set"
ERROR_UNKNOWN_TARGET = "Unknown MCP server or invocation: '{target}'"
ERROR_SESSION_CLOSED = "Session for MCP server '{name}' is no longer available: {error}"
