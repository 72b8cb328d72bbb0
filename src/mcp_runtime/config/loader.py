"""Load MCP server definitions from mcp-runtime.json."""

import json
import logging
from pathlib import Path
from urllib.parse import urlparse

from pydantic import ValidationError

from mcp_runtime.config.definitions import HttpCommand, ServerDefinition, StdioCommand
from mcp_runtime.config.schema import RawConfig, RawEntry
from mcp_runtime.config.utils import (
    expand_home,
    make_env_reference,
    resolve_config_path,
    token_cache_dir_for,
)
from mcp_runtime.constants import (
    AUTH_OAUTH,
    ERROR_INVALID_URL,
    ERROR_MISSING_COMMAND,
    LOG_LOADED_SERVER,
)
from mcp_runtime.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def load_server_definitions(
    config_path: str | Path | None = None,
    root_dir: str | Path | None = None,
) -> list[ServerDefinition]:
    """Load and normalize every server declared in the config file.

    Args:
        config_path: Explicit config file. It must exist.
        root_dir: Directory holding ``config/mcp-runtime.json`` when no
            explicit path is given. Defaults to the current directory.

    Returns:
        The normalized definitions, in declaration order. Empty when the
        default config file does not exist.

    Raises:
        ConfigurationError: If the explicit file is missing, the file is not
            valid JSON, or an entry cannot be normalized
    """
    path, explicit = resolve_config_path(config_path, root_dir)
    if not path.exists():
        if explicit:
            raise ConfigurationError(f"Config file not found: {path}")
        logger.debug("No config file at %s; no servers loaded", path)
        return []

    raw = read_config_file(path)
    base_dir = path.parent

    servers = []
    for name, entry in raw.mcpServers.items():
        definition = normalize_server_entry(name, entry, base_dir, source=path)
        logger.debug(LOG_LOADED_SERVER.format(name=name, kind=definition.transport))
        servers.append(definition)
    return servers


def read_config_file(path: Path) -> RawConfig:
    """Parse and validate the raw config document at ``path``."""
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Invalid JSON in config file {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigurationError(f"Cannot read config file {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a JSON object")
    try:
        return RawConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid config file {path}: {exc}") from exc


def normalize_server_entry(
    name: str,
    raw: RawEntry,
    base_dir: Path,
    source: Path | None = None,
) -> ServerDefinition:
    """Turn one raw entry into a :class:`ServerDefinition`.

    A URL wins over a command when both are present. Stdio servers run in
    ``base_dir`` so relative script paths resolve next to the config file.
    """
    url = _first_present(raw.baseUrl, raw.base_url, raw.url, raw.serverUrl, raw.server_url)
    stdio = _get_command(raw)

    if url:
        _validate_url(name, url)
        command = HttpCommand(url=url, headers=_build_headers(raw))
    elif stdio:
        executable, args = stdio
        command = StdioCommand(command=executable, args=args, cwd=str(base_dir))
    else:
        raise ConfigurationError(
            ERROR_MISSING_COMMAND.format(name=name, path=source or "mcp-runtime.json"),
            server=name,
        )

    auth = normalize_auth(raw.auth)
    if auth == AUTH_OAUTH:
        token_cache_dir = token_cache_dir_for(name)
    else:
        configured = _first_present(raw.tokenCacheDir, raw.token_cache_dir)
        token_cache_dir = expand_home(configured) if configured else None

    return ServerDefinition(
        name=name,
        description=raw.description,
        command=command,
        env=dict(raw.env) if raw.env else None,
        auth=auth,
        token_cache_dir=token_cache_dir,
        client_name=_first_present(raw.clientName, raw.client_name),
    )


def normalize_auth(auth: str | None) -> str | None:
    """Return ``"oauth"`` for any casing of it, None for everything else."""
    if auth and auth.strip().lower() == AUTH_OAUTH:
        return AUTH_OAUTH
    return None


def _first_present(*values: str | None) -> str | None:
    for value in values:
        if value:
            return value
    return None


def _get_command(raw: RawEntry) -> tuple[str, list[str]] | None:
    value = raw.command if raw.command else raw.executable
    if isinstance(value, list):
        if not value or not value[0]:
            return None
        # args are embedded in the list form; a sibling args field is ignored
        return value[0], list(value[1:])
    if isinstance(value, str) and value:
        return value, list(raw.args or [])
    return None


def _build_headers(raw: RawEntry) -> dict[str, str] | None:
    headers: dict[str, str] = dict(raw.headers or {})

    bearer_token = _first_present(raw.bearerToken, raw.bearer_token)
    if bearer_token:
        headers["Authorization"] = f"Bearer {bearer_token}"

    # applied last, so the env form replaces a literal token
    bearer_token_env = _first_present(raw.bearerTokenEnv, raw.bearer_token_env)
    if bearer_token_env:
        headers["Authorization"] = make_env_reference(bearer_token_env)

    return headers or None


def _validate_url(name: str, url: str) -> None:
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigurationError(ERROR_INVALID_URL.format(name=name, url=url), server=name)
