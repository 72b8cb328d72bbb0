"""mcp-runtime - call tools on configured or ad-hoc MCP servers."""

__version__ = "0.1.0"

from mcp_runtime.config import (  # noqa: E402
    HttpCommand,
    ServerDefinition,
    StdioCommand,
    load_server_definitions,
)
from mcp_runtime.ephemeral import EphemeralTarget, prepare_ephemeral_target  # noqa: E402
from mcp_runtime.exceptions import (  # noqa: E402
    ConfigurationError,
    MCPRuntimeError,
    TargetResolutionError,
    TransportError,
)
from mcp_runtime.proxy import ServerProxy, create_server_proxy  # noqa: E402
from mcp_runtime.results import CallResult  # noqa: E402
from mcp_runtime.runtime import Runtime, create_runtime  # noqa: E402

__all__ = [
    "CallResult",
    "ConfigurationError",
    "EphemeralTarget",
    "HttpCommand",
    "MCPRuntimeError",
    "Runtime",
    "ServerDefinition",
    "ServerProxy",
    "StdioCommand",
    "TargetResolutionError",
    "TransportError",
    "create_runtime",
    "create_server_proxy",
    "load_server_definitions",
    "prepare_ephemeral_target",
]
