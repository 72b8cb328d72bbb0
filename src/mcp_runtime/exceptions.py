"""Exceptions raised by the MCP runtime.

Remote tool failures are not exceptions: they come back as a
:class:`~mcp_runtime.results.CallResult` with ``is_error`` set.
"""


class MCPRuntimeError(Exception):
    """Base class for MCP runtime errors."""

    def __init__(self, message: str, server: str | None = None) -> None:
        """Initialize the error.

        Args:
            message: The error message
            server: Name of the server the error relates to, if any
        """
        self.server = server
        super().__init__(message)


class ConfigurationError(MCPRuntimeError):
    """Raised when a server declaration cannot be turned into a usable definition."""


class TargetResolutionError(MCPRuntimeError):
    """Raised when a target matches no registered server and no invocation pattern."""


class TransportError(MCPRuntimeError):
    """Raised when a session cannot be opened or was lost."""
