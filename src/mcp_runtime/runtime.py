"""Runtime: server registry and lazily opened sessions.

A :class:`Runtime` owns the definitions it knows about and one persistent
session per server name. Sessions are opened on first use and released by
:meth:`Runtime.close`. There is no shared or global runtime; every caller
creates and closes its own.

The session map is not locked. All access must happen on the event loop
that owns the runtime.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any

import anyio
from mcp.client.session import ClientSession
from mcp.shared.exceptions import McpError
from mcp.types import CONNECTION_CLOSED, Tool

from mcp_runtime.config.definitions import ServerDefinition
from mcp_runtime.config.loader import load_server_definitions
from mcp_runtime.constants import ERROR_SESSION_CLOSED, ERROR_UNKNOWN_TARGET, SESSION_CLOSE_TIMEOUT
from mcp_runtime.exceptions import ConfigurationError, MCPRuntimeError, TargetResolutionError, TransportError
from mcp_runtime.results import CallResult
from mcp_runtime.transport.connection_manager import ConnectionManager
from mcp_runtime.transport.persistent import _PersistentClient

logger = logging.getLogger(__name__)

# Exceptions that mean the session itself is gone, not that a request failed
_TRANSPORT_FAILURES = (
    OSError,
    EOFError,
    anyio.ClosedResourceError,
    anyio.BrokenResourceError,
    anyio.EndOfStream,
)


class Runtime:
    """Registry of server definitions plus their open sessions."""

    def __init__(
        self,
        definitions: list[ServerDefinition] | None = None,
        connection_manager: ConnectionManager | None = None,
    ) -> None:
        self._definitions: dict[str, ServerDefinition] = {}
        self._clients: dict[str, _PersistentClient] = {}
        self._ephemeral_clients: dict[str, _PersistentClient] = {}
        self.connection_manager = connection_manager or ConnectionManager()
        self.closed = False
        for definition in definitions or []:
            self.register_definition(definition)

    async def __aenter__(self) -> Runtime:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def register_definition(self, definition: ServerDefinition, overwrite: bool = False) -> None:
        """Add ``definition`` to the registry.

        Raises:
            ConfigurationError: If the name is taken and ``overwrite`` is False
        """
        if definition.name in self._definitions and not overwrite:
            raise ConfigurationError(f"Server '{definition.name}' is already registered", server=definition.name)
        self._definitions[definition.name] = definition

    def get_definitions(self) -> list[ServerDefinition]:
        return list(self._definitions.values())

    def has_definition(self, name: str) -> bool:
        return name in self._definitions

    def get_definition(self, name: str) -> ServerDefinition:
        if name not in self._definitions:
            raise TargetResolutionError(ERROR_UNKNOWN_TARGET.format(target=name), server=name)
        return self._definitions[name]

    def _resolve(self, server: str | ServerDefinition) -> ServerDefinition:
        if isinstance(server, ServerDefinition):
            return server
        return self.get_definition(server)

    async def get_session(self, server: str | ServerDefinition) -> ClientSession:
        """Return the live session for ``server``, opening it on first use.

        ``server`` may be a registered name or an ephemeral definition.
        Ephemeral definitions get their own sessions even when they share a
        name with a registered server. A session that died since it was
        opened raises :class:`TransportError` once and is forgotten, so the
        next call starts a fresh one.
        """
        if self.closed:
            raise MCPRuntimeError("Runtime is closed")
        definition = self._resolve(server)
        name = definition.name
        clients = self._clients_for(definition)

        client = clients.get(name)
        if client is not None and client.definition != definition:
            raise ConfigurationError(
                f"Server '{name}' already has an open session for a different definition; close it first",
                server=name,
            )
        if client is not None and client.finished:
            clients.pop(name, None)
            error = client.error or "session ended"
            raise TransportError(ERROR_SESSION_CLOSED.format(name=name, error=error), server=name) from client.error

        if client is None:
            # registered before awaiting so concurrent first calls share it
            client = _PersistentClient(name, self.connection_manager.open_session(definition), definition)
            clients[name] = client

        try:
            return await client.start()
        except MCPRuntimeError:
            clients.pop(name, None)
            raise

    def _clients_for(self, definition: ServerDefinition) -> dict[str, _PersistentClient]:
        if self._definitions.get(definition.name) == definition:
            return self._clients
        return self._ephemeral_clients

    async def call(
        self,
        server: str | ServerDefinition,
        tool: str,
        arguments: dict[str, Any] | None = None,
    ) -> CallResult:
        """Call ``tool`` on ``server`` and wrap the response.

        A tool that reports failure, or a JSON-RPC error returned by the
        server, yields ``CallResult(is_error=True)``. Failures to reach the
        server raise :class:`TransportError`.
        """
        definition = self._resolve(server)
        session = await self.get_session(definition)
        try:
            result = await session.call_tool(tool, arguments or {})
        except McpError as exc:
            if exc.error.code == CONNECTION_CLOSED:
                await self._drop_session(definition)
                raise TransportError(
                    ERROR_SESSION_CLOSED.format(name=definition.name, error=exc), server=definition.name
                ) from exc
            logger.error("MCP server '%s' returned error for tool '%s': %s", definition.name, tool, exc.error.message)
            return CallResult.from_error(f"Server '{definition.name}' returned error: {exc.error.message}")
        except _TRANSPORT_FAILURES as exc:
            await self._drop_session(definition)
            raise TransportError(
                ERROR_SESSION_CLOSED.format(name=definition.name, error=str(exc) or type(exc).__name__),
                server=definition.name,
            ) from exc

        call_result = CallResult.from_raw(result)
        if call_result.is_error:
            logger.debug("Tool '%s' on server '%s' reported an error", tool, definition.name)
        return call_result

    async def list_tools(self, server: str | ServerDefinition) -> list[Tool]:
        """Return the tools exposed by ``server``."""
        definition = self._resolve(server)
        session = await self.get_session(definition)
        try:
            result = await session.list_tools()
        except McpError as exc:
            if exc.error.code == CONNECTION_CLOSED:
                await self._drop_session(definition)
                raise TransportError(
                    ERROR_SESSION_CLOSED.format(name=definition.name, error=exc), server=definition.name
                ) from exc
            logger.error("MCP server '%s' failed to list tools: %s", definition.name, exc.error.message)
            raise MCPRuntimeError(
                f"Server '{definition.name}' returned error: {exc.error.message}", server=definition.name
            ) from exc
        except _TRANSPORT_FAILURES as exc:
            await self._drop_session(definition)
            raise TransportError(
                f"Could not list tools of MCP server '{definition.name}': {exc}", server=definition.name
            ) from exc
        tools = result.tools or []
        logger.debug("Loaded %s tools from %s", len(tools), definition.name)
        return tools

    async def close_session(self, server: str | ServerDefinition, timeout: float = SESSION_CLOSE_TIMEOUT) -> None:
        """Close the session for ``server`` if one is open.

        A name closes the registered server's session; a definition closes
        the session opened for that definition.
        """
        if isinstance(server, ServerDefinition):
            await self._drop_session(server, timeout)
        else:
            await self._close_client(self._clients.pop(server, None), timeout)

    async def _drop_session(self, definition: ServerDefinition, timeout: float = SESSION_CLOSE_TIMEOUT) -> None:
        clients = self._clients_for(definition)
        client = clients.get(definition.name)
        if client is None or client.definition != definition:
            return
        clients.pop(definition.name, None)
        await self._close_client(client, timeout)

    async def _close_client(self, client: _PersistentClient | None, timeout: float) -> None:
        if client is None:
            return
        try:
            await client.close(timeout=timeout)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Force-closing MCP server '%s' due to shutdown error: %s", client.name, exc)

    async def close(self, client_timeout: float = SESSION_CLOSE_TIMEOUT) -> None:
        """Close every open session. Calling it again is a no-op."""
        if self.closed:
            return
        self.closed = True
        clients = [*self._clients.values(), *self._ephemeral_clients.values()]
        self._clients.clear()
        self._ephemeral_clients.clear()
        await asyncio.gather(*(self._close_client(client, client_timeout) for client in clients))


def create_runtime(
    servers: list[ServerDefinition] | None = None,
    config_path: str | Path | None = None,
    root_dir: str | Path | None = None,
    load_config: bool = True,
) -> Runtime:
    """Create a runtime from explicit definitions or the config file.

    Args:
        servers: Definitions to register. When given, no config is read.
        config_path: Explicit config file (must exist)
        root_dir: Root holding ``config/mcp-runtime.json``
        load_config: Set to False to start with an empty registry

    Raises:
        ConfigurationError: If the config cannot be loaded
    """
    if servers is not None:
        definitions = servers
    elif load_config:
        definitions = load_server_definitions(config_path=config_path, root_dir=root_dir)
    else:
        definitions = []
    return Runtime(definitions)
