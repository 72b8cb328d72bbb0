"""Path and environment helpers shared by the config loader and sessions."""

import os
import re
from pathlib import Path

from mcp_runtime.constants import (
    DEFAULT_CONFIG_DIR,
    DEFAULT_CONFIG_FILENAME,
    ENV_REFERENCE_PREFIX,
    ERROR_MISSING_ENV_PLACEHOLDER,
    ERROR_MISSING_HEADER_ENV,
    TOKEN_CACHE_ROOT,
)
from mcp_runtime.exceptions import ConfigurationError

_PLACEHOLDER_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")


def home_dir() -> Path:
    """Return the current user's home directory."""
    return Path.home()


def expand_home(path: str) -> str:
    """Expand a leading ``~`` to the user's home directory.

    Only a bare ``~`` or a ``~/`` (``~\\`` on Windows) prefix is expanded;
    ``~user`` forms and every other string are returned unchanged.
    """
    if path == "~":
        return str(home_dir())
    if path.startswith("~/") or path.startswith("~\\"):
        return str(home_dir() / path[2:])
    return path


def token_cache_dir_for(name: str) -> str:
    """Return the OAuth token cache directory for server ``name``."""
    return str(home_dir() / TOKEN_CACHE_ROOT / name)


def resolve_config_path(config_path: str | Path | None, root_dir: str | Path | None) -> tuple[Path, bool]:
    """Resolve the config file location.

    Returns:
        A ``(path, explicit)`` tuple. ``explicit`` is True when the caller
        supplied ``config_path``, in which case the file must exist.
    """
    if config_path:
        return Path(config_path).resolve(), True
    base = Path(root_dir) if root_dir else Path.cwd()
    return (base / DEFAULT_CONFIG_DIR / DEFAULT_CONFIG_FILENAME).resolve(), False


def make_env_reference(var: str) -> str:
    """Return the header marker that defers to environment variable ``var``."""
    return f"{ENV_REFERENCE_PREFIX}{var}"


def parse_env_reference(value: str) -> str | None:
    """Return the variable name of an env marker, or None for literal values."""
    if value.startswith(ENV_REFERENCE_PREFIX):
        var = value[len(ENV_REFERENCE_PREFIX) :]
        return var or None
    return None


def resolve_header_value(header: str, value: str, server: str) -> str:
    """Resolve a header value against the current environment.

    Indirect ``Authorization`` values become ``Bearer <value>``; any other
    header takes the variable value as-is.

    Raises:
        ConfigurationError: If the referenced variable is unset or empty
    """
    var = parse_env_reference(value)
    if var is None:
        return value
    resolved = os.environ.get(var)
    if not resolved:
        raise ConfigurationError(
            ERROR_MISSING_HEADER_ENV.format(var=var, header=header, name=server),
            server=server,
        )
    if header.lower() == "authorization" and not resolved.lower().startswith("bearer "):
        return f"Bearer {resolved}"
    return resolved


def resolve_headers(headers: dict[str, str] | None, server: str) -> dict[str, str] | None:
    """Return a copy of ``headers`` with every env marker resolved."""
    if not headers:
        return None
    return {key: resolve_header_value(key, value, server) for key, value in headers.items()}


def interpolate_env(value: str, server: str) -> str:
    """Replace ``${VAR}`` placeholders with values from the environment."""

    def _replace(match: re.Match) -> str:
        var = match.group(1)
        if var not in os.environ:
            raise ConfigurationError(ERROR_MISSING_ENV_PLACEHOLDER.format(var=var, name=server), server=server)
        return os.environ[var]

    return _PLACEHOLDER_PATTERN.sub(_replace, value)
