"""Resolve ad-hoc targets into one-shot server definitions.

A target is one of ``server``, ``server.tool``, an inline launcher
invocation such as ``npx -y some-mcp-server``, or a bare ``http(s)://`` URL.
Synthesized definitions are handed back to the caller and are never added
to the runtime's registry.
"""

from __future__ import annotations

import logging
import os
import re
import shlex
from dataclasses import dataclass
from typing import TYPE_CHECKING
from urllib.parse import urlparse

from mcp_runtime.config.definitions import HttpCommand, ServerDefinition, StdioCommand
from mcp_runtime.constants import ERROR_UNKNOWN_TARGET, LAUNCHER_VALUE_FLAGS, LAUNCHERS
from mcp_runtime.exceptions import TargetResolutionError

if TYPE_CHECKING:
    from mcp_runtime.runtime import Runtime

logger = logging.getLogger(__name__)

_LEADING_SEGMENT = re.compile(r"^[^.\s]+")


@dataclass(frozen=True)
class EphemeralResolution:
    definition: ServerDefinition


@dataclass(frozen=True)
class EphemeralTarget:
    """Result of :func:`prepare_ephemeral_target`.

    ``target`` is what the caller should address from now on; ``resolution``
    is set only when a synthetic definition was built.
    """

    target: str
    resolution: EphemeralResolution | None = None


def leading_segment(target: str) -> str:
    """Return ``target`` up to the first ``.`` or whitespace."""
    match = _LEADING_SEGMENT.match(target.strip())
    return match.group(0) if match else ""


def derive_package_name(package: str) -> str:
    """Strip version pins and scopes from a package identifier.

    >>> derive_package_name("@scope/server-files@1.2.0")
    'server-files'
    >>> derive_package_name("mcp-server-time==0.6")
    'mcp-server-time'
    """
    name = package
    if "==" in name:
        name = name.split("==", 1)[0]
    # a version pin is an "@" past the first character (which may open a scope)
    at = name.find("@", 1)
    if at > 0:
        name = name[:at]
    if "/" in name:
        name = name.rsplit("/", 1)[1]
    name = name.lstrip("@")
    if "[" in name:
        name = name.split("[", 1)[0]
    return name


def parse_inline_invocation(target: str, cwd: str | None = None) -> ServerDefinition | None:
    """Parse a launcher command line into a stdio definition.

    Returns None when ``target`` does not start with a known launcher or
    names no package.
    """
    try:
        tokens = shlex.split(target)
    except ValueError:
        return None
    if len(tokens) < 2:
        return None

    launcher = tokens[0]
    if launcher not in LAUNCHERS:
        return None

    subcommand = LAUNCHERS[launcher]
    rest = tokens[1:]
    if subcommand:
        if tuple(rest[: len(subcommand)]) != subcommand:
            return None
        scan_from = len(subcommand)
    else:
        scan_from = 0

    package = None
    index = scan_from
    while index < len(rest):
        token = rest[index]
        if token == "--":
            index += 1
            continue
        if token.startswith("-"):
            if token in LAUNCHER_VALUE_FLAGS:
                index += 2
            else:
                index += 1
            continue
        package = token
        break

    if package is None:
        return None
    name = derive_package_name(package)
    if not name:
        return None

    return ServerDefinition(
        name=name,
        command=StdioCommand(command=launcher, args=rest, cwd=cwd or os.getcwd()),
    )


def parse_url_target(target: str) -> ServerDefinition | None:
    """Build an HTTP definition from a bare URL target."""
    stripped = target.strip()
    parsed = urlparse(stripped)
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        return None
    parts = [parsed.hostname.replace(".", "-")]
    parts.extend(segment for segment in parsed.path.split("/") if segment and segment not in ("mcp", "sse"))
    name = "-".join(parts)
    return ServerDefinition(name=name, command=HttpCommand(url=stripped))


async def prepare_ephemeral_target(runtime: Runtime, target: str) -> EphemeralTarget:
    """Resolve ``target`` against the runtime, synthesizing a definition if needed.

    Registered names always win: when the leading segment of ``target`` names
    a configured server the target is returned untouched.
    """
    registered = {definition.name for definition in runtime.get_definitions()}
    if leading_segment(target) in registered:
        return EphemeralTarget(target=target)

    definition = parse_url_target(target) or parse_inline_invocation(target)
    if definition is None:
        return EphemeralTarget(target=target)

    logger.debug("Resolved ad-hoc target %r to ephemeral server '%s'", target, definition.name)
    return EphemeralTarget(target=definition.name, resolution=EphemeralResolution(definition=definition))


async def require_definition(runtime: Runtime, target: str) -> tuple[ServerDefinition, str]:
    """Return ``(definition, target)`` for a registered or ephemeral target.

    Raises:
        TargetResolutionError: If ``target`` is neither registered nor parseable
    """
    prepared = await prepare_ephemeral_target(runtime, target)
    if prepared.resolution is not None:
        return prepared.resolution.definition, prepared.target
    name = leading_segment(prepared.target)
    if runtime.has_definition(name):
        return runtime.get_definition(name), prepared.target
    raise TargetResolutionError(ERROR_UNKNOWN_TARGET.format(target=target))
