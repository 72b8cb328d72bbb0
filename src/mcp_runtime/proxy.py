"""Method-style access to the tools of one server."""

from __future__ import annotations

import logging
import re
from typing import Any

from mcp_runtime.config.definitions import ServerDefinition
from mcp_runtime.exceptions import MCPRuntimeError, TransportError
from mcp_runtime.results import CallResult
from mcp_runtime.runtime import Runtime

logger = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def tool_name_candidates(name: str) -> list[str]:
    """Return the tool names a Python attribute may refer to, in order.

    >>> tool_name_candidates("resolveLibraryId")
    ['resolveLibraryId', 'resolve-library-id', 'resolve_library_id']
    """
    words = _CAMEL_BOUNDARY.sub("_", name).replace("-", "_").lower()
    candidates = [name, words.replace("_", "-"), words]
    return list(dict.fromkeys(candidates))


class ServerProxy:
    """Expose ``proxy.<tool>(args)`` as ``runtime.call(server, tool, args)``.

    Attribute names are matched against the server's advertised tools: the
    exact name first, then kebab-case, then snake_case. The tool list is
    fetched once per proxy, on the first call that needs the mapping.
    """

    def __init__(self, runtime: Runtime, server: str | ServerDefinition) -> None:
        self._runtime = runtime
        self._server = server
        self._tool_names: set[str] | None = None

    @property
    def server_name(self) -> str:
        return self._server.name if isinstance(self._server, ServerDefinition) else self._server

    async def list_tools(self):
        tools = await self._runtime.list_tools(self._server)
        self._tool_names = {tool.name for tool in tools}
        return tools

    async def resolve_tool_name(self, name: str) -> str:
        candidates = tool_name_candidates(name)
        if len(candidates) == 1:
            return name
        if self._tool_names is None:
            try:
                await self.list_tools()
            except TransportError:
                raise
            except MCPRuntimeError as exc:
                logger.warning("Could not list tools of %s, calling '%s' as is: %s", self.server_name, name, exc)
                self._tool_names = set()
        for candidate in candidates:
            if candidate in self._tool_names:
                return candidate
        return name

    async def call(self, tool: str, args: dict[str, Any] | None = None) -> CallResult:
        """Call ``tool`` by its exact remote name."""
        return await self._runtime.call(self._server, tool, args)

    async def close(self) -> None:
        """Close this server's session; the runtime stays usable."""
        await self._runtime.close_session(self._server)

    def __getattr__(self, name: str):
        if name.startswith("_"):
            raise AttributeError(name)

        async def invoke(args: dict[str, Any] | None = None, **kwargs: Any) -> CallResult:
            arguments = {**(args or {}), **kwargs}
            tool = await self.resolve_tool_name(name)
            return await self._runtime.call(self._server, tool, arguments)

        invoke.__name__ = name
        return invoke

    def __repr__(self) -> str:
        return f"<ServerProxy {self.server_name}>"


def create_server_proxy(runtime: Runtime, server: str | ServerDefinition) -> ServerProxy:
    """Return a proxy for a registered server name or an ephemeral definition."""
    if isinstance(server, str):
        runtime.get_definition(server)
    return ServerProxy(runtime, server)
