"""Tiny stdio MCP server used by the integration tests."""

from mcp.server.fastmcp import FastMCP

server = FastMCP("memory-fixture")
_entities: dict[str, str] = {}


@server.tool()
def echo(text: str) -> str:
    """Return ``text`` unchanged."""
    return text


@server.tool()
def create_entity(name: str, kind: str = "note") -> str:
    """Store an entity; fails if the name is already taken."""
    if name in _entities:
        raise ValueError(f"Entity '{name}' already exists")
    _entities[name] = kind
    return f"created {name}"


if __name__ == "__main__":
    server.run()
