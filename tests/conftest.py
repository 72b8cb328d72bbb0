"""Pytest configuration."""

import json
import os
from contextlib import asynccontextmanager
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from mcp.types import CallToolResult, ListToolsResult, TextContent, Tool


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: mark test as spawning a real MCP server subprocess")


def get_test_dir() -> str:
    """Get the path to the tests directory."""
    return os.path.dirname(os.path.abspath(__file__))


def get_fixture_path(relative_path: str) -> str:
    """Get the absolute path to a file under tests/fixtures."""
    return os.path.join(get_test_dir(), "fixtures", relative_path)


@pytest.fixture
def temp_home(tmp_path, monkeypatch):
    """Point the home directory at a temporary folder."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    monkeypatch.setattr(Path, "home", classmethod(lambda cls: home))
    return home


@pytest.fixture
def write_config(tmp_path):
    """Return a helper that writes an mcpServers config and returns its path."""

    def _write(servers, filename="mcp-runtime.json", directory=None):
        target_dir = directory or tmp_path
        target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / filename
        path.write_text(json.dumps({"mcpServers": servers}))
        return path

    return _write


def make_tool(name: str, description: str = "") -> Tool:
    return Tool(name=name, description=description, inputSchema={"type": "object", "properties": {}})


def make_session(result=None, tools=None):
    """Create a mock ClientSession returning ``result`` from every tool call."""
    session = MagicMock()
    session.call_tool = AsyncMock(
        return_value=result or CallToolResult(content=[TextContent(type="text", text="ok")], isError=False)
    )
    session.list_tools = AsyncMock(return_value=ListToolsResult(tools=tools or []))
    return session


class FakeConnectionManager:
    """Connection manager that hands out mock sessions and records openings."""

    def __init__(self, session=None, fail_with=None):
        self.session = session or make_session()
        self.fail_with = fail_with
        self.opened: list[str] = []
        self.closed: list[str] = []
        self.definitions = []

    @asynccontextmanager
    async def open_session(self, definition):
        self.opened.append(definition.name)
        self.definitions.append(definition)
        if self.fail_with is not None:
            raise self.fail_with
        try:
            yield self.session
        finally:
            self.closed.append(definition.name)


@pytest.fixture
def fake_connections():
    return FakeConnectionManager()
