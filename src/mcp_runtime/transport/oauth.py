"""OAuth support for HTTP servers declared with ``auth: "oauth"``."""

from __future__ import annotations

import asyncio
import json
import logging
import os
import sys
import webbrowser
from pathlib import Path
from urllib.parse import parse_qs, urlparse

from mcp.client.auth import OAuthClientProvider
from mcp.shared.auth import OAuthClientInformationFull, OAuthClientMetadata, OAuthToken
from pydantic import ValidationError

from mcp_runtime.config.definitions import HttpCommand, ServerDefinition
from mcp_runtime.constants import DEFAULT_CLIENT_NAME
from mcp_runtime.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_REDIRECT_URI = "http://localhost:33418/callback"


class FileTokenStorage:
    """Persist OAuth tokens and client registration in a per-server directory."""

    def __init__(self, cache_dir: str | Path) -> None:
        self.cache_dir = Path(cache_dir)
        self.tokens_file = self.cache_dir / "tokens.json"
        self.client_file = self.cache_dir / "client.json"

    async def get_tokens(self) -> OAuthToken | None:
        data = self._load(self.tokens_file)
        if data is None:
            return None
        try:
            return OAuthToken.model_validate(data)
        except ValidationError:
            logger.warning("Ignoring unreadable token cache %s", self.tokens_file)
            return None

    async def set_tokens(self, tokens: OAuthToken) -> None:
        self._save(self.tokens_file, tokens.model_dump(mode="json", exclude_none=True))

    async def get_client_info(self) -> OAuthClientInformationFull | None:
        data = self._load(self.client_file)
        if data is None:
            return None
        try:
            return OAuthClientInformationFull.model_validate(data)
        except ValidationError:
            logger.warning("Ignoring unreadable client registration %s", self.client_file)
            return None

    async def set_client_info(self, client_info: OAuthClientInformationFull) -> None:
        self._save(self.client_file, client_info.model_dump(mode="json", exclude_none=True))

    def clear(self) -> None:
        """Delete cached tokens and client registration."""
        for path in (self.tokens_file, self.client_file):
            if path.exists():
                path.unlink()

    def _save(self, path: Path, data: dict) -> None:
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        try:
            os.chmod(self.cache_dir, 0o700)
        except OSError:
            pass
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        try:
            os.chmod(path, 0o600)
        except OSError:
            pass

    @staticmethod
    def _load(path: Path) -> dict | None:
        if not path.exists():
            return None
        try:
            with open(path, encoding="utf-8") as f:
                return json.load(f)
        except (json.JSONDecodeError, OSError):
            return None


async def _open_browser(authorization_url: str) -> None:
    logger.info("Authorize this client at: %s", authorization_url)
    print(f"Authorization URL:\n{authorization_url}", file=sys.stderr)
    try:
        webbrowser.open(authorization_url)
    except webbrowser.Error as exc:
        logger.warning("Could not open browser: %s", exc)


def parse_callback_url(value: str) -> tuple[str, str | None]:
    """Return ``(code, state)`` from a pasted redirect URL or a bare code."""
    value = value.strip()
    if "?" not in value:
        return value, None
    params = parse_qs(urlparse(value).query)
    codes = params.get("code")
    if not codes:
        raise ConfigurationError("Redirect URL does not contain an authorization code")
    states = params.get("state")
    return codes[0], states[0] if states else None


async def _prompt_for_callback() -> tuple[str, str | None]:
    print("Paste the URL you were redirected to: ", end="", file=sys.stderr, flush=True)
    pasted = await asyncio.to_thread(input)
    return parse_callback_url(pasted)


def build_oauth_provider(definition: ServerDefinition) -> OAuthClientProvider:
    """Create the httpx auth flow for an OAuth-protected HTTP server."""
    command = definition.command
    if not isinstance(command, HttpCommand):
        raise ConfigurationError(
            f"Server '{definition.name}' uses OAuth but is not an HTTP server", server=definition.name
        )
    if not definition.token_cache_dir:
        raise ConfigurationError(f"Server '{definition.name}' has no token cache directory", server=definition.name)

    metadata = OAuthClientMetadata(
        client_name=definition.client_name or DEFAULT_CLIENT_NAME,
        redirect_uris=[DEFAULT_REDIRECT_URI],
        grant_types=["authorization_code", "refresh_token"],
        response_types=["code"],
        token_endpoint_auth_method="none",
    )
    return OAuthClientProvider(
        server_url=command.url,
        client_metadata=metadata,
        storage=FileTokenStorage(definition.token_cache_dir),
        redirect_handler=_open_browser,
        callback_handler=_prompt_for_callback,
    )
