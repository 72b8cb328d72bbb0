"""End-to-end tests against a real stdio server subprocess."""

import sys

import pytest

from mcp_runtime import create_runtime, create_server_proxy
from mcp_runtime.config.definitions import ServerDefinition, StdioCommand
from tests.conftest import get_fixture_path, get_test_dir

pytestmark = pytest.mark.integration


def memory_definition():
    return ServerDefinition(
        name="memory",
        command=StdioCommand(
            command=sys.executable,
            args=[get_fixture_path("stdio_memory_server.py")],
            cwd=get_test_dir(),
        ),
    )


@pytest.mark.asyncio
async def test_tool_failure_is_an_error_envelope():
    async with create_runtime(servers=[memory_definition()]) as runtime:
        first = await runtime.call("memory", "create_entity", {"name": "alice"})
        second = await runtime.call("memory", "create_entity", {"name": "alice"})

    assert first.is_error is False
    assert first.text() == "created alice"
    assert second.is_error is True
    assert second.content
    assert "already exists" in second.text()


@pytest.mark.asyncio
async def test_list_and_proxy_calls():
    async with create_runtime(servers=[memory_definition()]) as runtime:
        tools = await runtime.list_tools("memory")
        proxy = create_server_proxy(runtime, "memory")
        result = await proxy.echo(text="hello")

    assert {tool.name for tool in tools} == {"echo", "create_entity"}
    assert result.text() == "hello"
