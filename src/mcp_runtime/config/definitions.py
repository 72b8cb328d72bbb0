"""Normalized MCP server definitions."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class HttpCommand(BaseModel):
    """Reach a server over HTTP (streamable HTTP or SSE)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["http"] = "http"
    url: str
    headers: dict[str, str] | None = None


class StdioCommand(BaseModel):
    """Spawn a server subprocess and talk to it over stdin/stdout."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["stdio"] = "stdio"
    command: str
    args: list[str] = Field(default_factory=list)
    cwd: str


CommandSpec = Annotated[HttpCommand | StdioCommand, Field(discriminator="kind")]


class ServerDefinition(BaseModel):
    """How to reach one MCP server.

    Instances are immutable; build a new one with ``model_copy(update=...)``
    when a variant is needed.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    description: str | None = None
    command: CommandSpec
    env: dict[str, str] | None = None
    auth: Literal["oauth"] | None = None
    token_cache_dir: str | None = None
    client_name: str | None = None

    @property
    def transport(self) -> str:
        return self.command.kind
