#!/usr/bin/env python3
"""Call MCP tools from a script.

Reads ``config/mcp-runtime.json`` from the current directory, calls the
memory server directly and through a proxy, then runs an ad-hoc server
that is not in the config at all.

Usage:
    python examples/mcp_runtime_example.py
"""

import asyncio

from dotenv import load_dotenv

from mcp_runtime import create_runtime, create_server_proxy, prepare_ephemeral_target


async def main():
    async with create_runtime() as runtime:
        print("Configured servers:", ", ".join(d.name for d in runtime.get_definitions()))

        result = await runtime.call(
            "memory",
            "create_entities",
            {"entities": [{"name": "mcp-runtime", "entityType": "project", "observations": ["written in Python"]}]},
        )
        print("create_entities:", result.text())

        memory = create_server_proxy(runtime, "memory")
        graph = await memory.readGraph()
        print("read_graph:", graph.json() or graph.text())

        prepared = await prepare_ephemeral_target(runtime, "uvx mcp-server-time")
        if prepared.resolution is not None:
            now = await runtime.call(prepared.resolution.definition, "get_current_time", {"timezone": "UTC"})
            print("get_current_time:", now.text())


if __name__ == "__main__":
    load_dotenv()
    asyncio.run(main())
