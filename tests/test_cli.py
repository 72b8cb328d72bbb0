"""Tests for the mcp-runtime command-line interface."""

import json

import click
import pytest
from click.testing import CliRunner
from mcp.types import CallToolResult, TextContent

from mcp_runtime.cli.main import EXIT_RUNTIME_ERROR, EXIT_TOOL_ERROR, main, parse_arguments
from tests.conftest import FakeConnectionManager, make_session, make_tool


@pytest.fixture
def connections(monkeypatch):
    fake = FakeConnectionManager(session=make_session(tools=[make_tool("read_graph", "Read the whole graph.\nMore.")]))
    monkeypatch.setattr("mcp_runtime.runtime.ConnectionManager", lambda: fake)
    return fake


@pytest.fixture
def config_path(write_config):
    return write_config(
        {
            "memory": {"command": "npx", "args": ["-y", "@modelcontextprotocol/server-memory"], "description": "Graph"},
            "docs": {"baseUrl": "https://docs.example.com/mcp"},
        }
    )


def run(args):
    return CliRunner().invoke(main, args, catch_exceptions=False)


def test_list_servers(config_path):
    result = run(["--config", str(config_path), "list"])
    assert result.exit_code == 0
    assert "memory (stdio) - Graph" in result.output
    assert "docs (http)" in result.output


def test_list_tools(config_path, connections):
    result = run(["--config", str(config_path), "list", "memory"])
    assert result.exit_code == 0
    assert result.output.strip() == "memory.read_graph - Read the whole graph."
    assert connections.closed == ["memory"]


def test_call_prints_text(config_path, connections):
    result = run(["--config", str(config_path), "call", "memory.search_nodes", "query=alice", "limit=3"])
    assert result.exit_code == 0
    assert result.output.strip() == "ok"
    connections.session.call_tool.assert_awaited_once_with("search_nodes", {"query": "alice", "limit": 3})


def test_call_error_envelope_exits_one(config_path, connections):
    connections.session.call_tool.return_value = CallToolResult(
        content=[TextContent(type="text", text="Entity exists")], isError=True
    )
    result = run(["--config", str(config_path), "call", "memory.create_entities", "--output", "json"])
    assert result.exit_code == EXIT_TOOL_ERROR
    assert json.loads(result.output) == {"isError": True, "content": [{"type": "text", "text": "Entity exists"}]}


def test_call_ad_hoc_command(config_path, connections):
    result = run(["--config", str(config_path), "call", "npx -y xcodebuildmcp", "--tool", "build"])
    assert result.exit_code == 0
    assert connections.opened == ["xcodebuildmcp"]


def test_call_without_tool_is_a_usage_error(config_path, connections):
    result = CliRunner().invoke(main, ["--config", str(config_path), "call", "memory"])
    assert result.exit_code == 2
    assert "No tool given" in result.output


def test_unknown_target_exits_two(config_path):
    result = CliRunner().invoke(main, ["--config", str(config_path), "call", "nowhere.tool"])
    assert result.exit_code == EXIT_RUNTIME_ERROR
    assert "Unknown MCP server" in result.output


def test_missing_explicit_config_exits_two(tmp_path):
    result = CliRunner().invoke(main, ["--config", str(tmp_path / "absent.json"), "list"])
    assert result.exit_code == EXIT_RUNTIME_ERROR
    assert "Config file not found" in result.output


def test_config_from_environment(config_path, monkeypatch):
    monkeypatch.setenv("MCP_RUNTIME_CONFIG", str(config_path))
    result = run(["list"])
    assert "memory (stdio)" in result.output


class TestParseArguments:
    def test_merges_json_and_pairs(self):
        assert parse_arguments('{"a": 1, "b": "x"}', ("b=y", "c=true", "d=[1]")) == {
            "a": 1,
            "b": "y",
            "c": True,
            "d": [1],
        }

    def test_plain_strings_are_kept(self):
        assert parse_arguments(None, ("name=alice smith", "empty=")) == {"name": "alice smith", "empty": ""}

    @pytest.mark.parametrize("args_json", ["[1, 2]", "{bad"])
    def test_rejects_bad_json(self, args_json):
        with pytest.raises(click.BadParameter):
            parse_arguments(args_json, ())

    def test_rejects_pair_without_equals(self):
        with pytest.raises(click.BadParameter):
            parse_arguments(None, ("oops",))
