"""Open client sessions to MCP servers."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from urllib.parse import urlparse

from mcp.client.session import ClientSession
from mcp.client.sse import sse_client
from mcp.client.stdio import StdioServerParameters, get_default_environment, stdio_client
from mcp.client.streamable_http import streamablehttp_client
from mcp.types import Implementation

from mcp_runtime import __version__
from mcp_runtime.config.definitions import HttpCommand, ServerDefinition, StdioCommand
from mcp_runtime.config.utils import interpolate_env, resolve_headers
from mcp_runtime.constants import AUTH_OAUTH, DEFAULT_CLIENT_NAME, LOG_OPENING_SESSION
from mcp_runtime.transport.oauth import build_oauth_provider

logger = logging.getLogger(__name__)


def build_stdio_parameters(definition: ServerDefinition) -> StdioServerParameters:
    """Return subprocess parameters for a stdio definition.

    The definition's env overlay is applied on top of the SDK's default
    inherited environment, with ``${VAR}`` placeholders resolved now.
    """
    command = definition.command
    if not isinstance(command, StdioCommand):
        raise TypeError(f"Server '{definition.name}' is not a stdio server")
    env = get_default_environment()
    for key, value in (definition.env or {}).items():
        env[key] = interpolate_env(value, definition.name)
    return StdioServerParameters(
        command=command.command,
        args=list(command.args),
        env=env,
        cwd=command.cwd,
    )


def uses_sse(url: str) -> bool:
    """Return True when the endpoint is a legacy SSE endpoint."""
    return urlparse(url).path.rstrip("/").endswith("/sse")


def client_info_for(definition: ServerDefinition) -> Implementation:
    return Implementation(name=definition.client_name or DEFAULT_CLIENT_NAME, version=__version__)


class ConnectionManager:
    """Turn a :class:`ServerDefinition` into an initialized client session."""

    @asynccontextmanager
    async def open_session(self, definition: ServerDefinition) -> AsyncGenerator[ClientSession, None]:
        """Yield an initialized session to ``definition``.

        Headers and env placeholders are resolved here, at connection time,
        so environment changes made after the config was loaded are honoured.
        """
        command = definition.command
        logger.debug(LOG_OPENING_SESSION.format(kind=command.kind, name=definition.name))

        if isinstance(command, StdioCommand):
            params = build_stdio_parameters(definition)
            async with stdio_client(params) as (read_stream, write_stream):
                async with self._session(definition, read_stream, write_stream) as session:
                    yield session
        elif isinstance(command, HttpCommand):
            headers = resolve_headers(command.headers, definition.name)
            auth = build_oauth_provider(definition) if definition.auth == AUTH_OAUTH else None
            if uses_sse(command.url):
                async with sse_client(command.url, headers=headers, auth=auth) as (read_stream, write_stream):
                    async with self._session(definition, read_stream, write_stream) as session:
                        yield session
            else:
                async with streamablehttp_client(command.url, headers=headers, auth=auth) as (
                    read_stream,
                    write_stream,
                    _,
                ):
                    async with self._session(definition, read_stream, write_stream) as session:
                        yield session
        else:
            raise ValueError(f"Unsupported transport for server '{definition.name}': {command!r}")

    @asynccontextmanager
    async def _session(
        self, definition: ServerDefinition, read_stream, write_stream
    ) -> AsyncGenerator[ClientSession, None]:
        session = ClientSession(read_stream, write_stream, client_info=client_info_for(definition))
        async with session:
            await session.initialize()
            yield session
