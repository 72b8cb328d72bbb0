#!/usr/bin/env python3
"""Command-line interface for mcp-runtime.

``mcp-runtime list`` shows configured servers or the tools of one server;
``mcp-runtime call`` invokes a tool and prints the result envelope.
"""

import asyncio
import json
import logging
import sys
from typing import Any

import click
from dotenv import load_dotenv

from mcp_runtime.cli.log_utils import get_logger
from mcp_runtime.config.definitions import ServerDefinition
from mcp_runtime.constants import ENV_CONFIG_PATH, ENV_LOG_LEVEL
from mcp_runtime.ephemeral import require_definition
from mcp_runtime.exceptions import MCPRuntimeError
from mcp_runtime.results import CallResult
from mcp_runtime.runtime import Runtime, create_runtime

EXIT_TOOL_ERROR = 1
EXIT_RUNTIME_ERROR = 2


def parse_arguments(args_json: str | None, pairs: tuple[str, ...]) -> dict[str, Any]:
    """Merge a JSON object and ``KEY=VALUE`` pairs into tool arguments.

    Pair values are decoded as JSON when possible (``count=3`` is an int),
    otherwise kept as strings.
    """
    arguments: dict[str, Any] = {}
    if args_json:
        try:
            parsed = json.loads(args_json)
        except json.JSONDecodeError as exc:
            raise click.BadParameter(f"not valid JSON: {exc}", param_hint="--args") from exc
        if not isinstance(parsed, dict):
            raise click.BadParameter("must be a JSON object", param_hint="--args")
        arguments.update(parsed)

    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got '{pair}'", param_hint="ARGS")
        try:
            arguments[key] = json.loads(value)
        except json.JSONDecodeError:
            arguments[key] = value
    return arguments


def split_tool(definition: ServerDefinition, target: str) -> str | None:
    """Return the tool part of ``server.tool``, or None for a bare server name."""
    prefix = f"{definition.name}."
    if target.startswith(prefix):
        return target[len(prefix) :] or None
    return None


def format_result(result: CallResult, output: str) -> str:
    """Render a result for the terminal."""
    if output == "json":
        return json.dumps(result.to_dict(), ensure_ascii=False)
    if output == "markdown":
        rendered = result.markdown() or result.text()
    else:
        rendered = result.text() or result.markdown()
    if rendered is None:
        return json.dumps(result.content, ensure_ascii=False, indent=2)
    return rendered


def _make_runtime(ctx: click.Context) -> Runtime:
    return create_runtime(config_path=ctx.obj.get("config_path"), root_dir=ctx.obj.get("root_dir"))


async def _list_async(ctx: click.Context, target: str | None, logger: logging.Logger) -> None:
    runtime = _make_runtime(ctx)
    try:
        if target is None:
            for definition in runtime.get_definitions():
                suffix = f" - {definition.description}" if definition.description else ""
                click.echo(f"{definition.name} ({definition.transport}){suffix}")
            return

        definition, _ = await require_definition(runtime, target)
        logger.info("Listing tools of %s", definition.name)
        for tool in await runtime.list_tools(definition):
            description = (tool.description or "").strip().splitlines()
            click.echo(f"{definition.name}.{tool.name}" + (f" - {description[0]}" if description else ""))
    finally:
        await runtime.close()


async def _call_async(
    ctx: click.Context,
    target: str,
    tool: str | None,
    arguments: dict[str, Any],
    logger: logging.Logger,
) -> CallResult:
    runtime = _make_runtime(ctx)
    try:
        definition, resolved = await require_definition(runtime, target)
        tool_name = tool or split_tool(definition, resolved)
        if not tool_name:
            raise click.UsageError(f"No tool given for '{target}': use SERVER.TOOL or --tool NAME")
        logger.info("Calling %s.%s", definition.name, tool_name)
        return await runtime.call(definition, tool_name, arguments)
    finally:
        await runtime.close()


@click.group()
@click.option(
    "--config",
    "config_path",
    envvar=ENV_CONFIG_PATH,
    type=click.Path(dir_okay=False),
    help="Config file (default: ./config/mcp-runtime.json, optional)",
)
@click.option(
    "--root",
    "root_dir",
    type=click.Path(file_okay=False),
    help="Project root holding config/mcp-runtime.json",
)
@click.option(
    "--log-level",
    "-l",
    envvar=ENV_LOG_LEVEL,
    default="WARNING",
    show_default=True,
    help="Set logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
)
@click.pass_context
def main(ctx: click.Context, config_path: str | None, root_dir: str | None, log_level: str) -> None:
    """Call tools on MCP servers."""
    # Load environment variables from .env if present
    load_dotenv()
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["root_dir"] = root_dir
    ctx.obj["logger"] = get_logger(log_level)


@main.command("list")
@click.argument("target", required=False)
@click.pass_context
def list_command(ctx: click.Context, target: str | None) -> None:
    """List configured servers, or the tools of TARGET."""
    try:
        asyncio.run(_list_async(ctx, target, ctx.obj["logger"]))
    except MCPRuntimeError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(EXIT_RUNTIME_ERROR)


@main.command("call")
@click.argument("target")
@click.argument("pairs", nargs=-1, metavar="[KEY=VALUE]...")
@click.option("--tool", "-t", help="Tool name, for targets given as an ad-hoc command")
@click.option("--args", "args_json", help="Tool arguments as a JSON object")
@click.option(
    "--output",
    "-o",
    type=click.Choice(["text", "markdown", "json"]),
    default="text",
    show_default=True,
    help="Output format",
)
@click.pass_context
def call_command(
    ctx: click.Context,
    target: str,
    pairs: tuple[str, ...],
    tool: str | None,
    args_json: str | None,
    output: str,
) -> None:
    """Call a tool: TARGET is SERVER.TOOL or an ad-hoc command such as "npx -y pkg"."""
    arguments = parse_arguments(args_json, pairs)
    try:
        result = asyncio.run(_call_async(ctx, target, tool, arguments, ctx.obj["logger"]))
    except MCPRuntimeError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(EXIT_RUNTIME_ERROR)

    click.echo(format_result(result, output))
    if result.is_error:
        sys.exit(EXIT_TOOL_ERROR)


if __name__ == "__main__":
    main()
