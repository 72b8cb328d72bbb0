"""Tests for OAuth token storage and the authorization helpers."""

import os
import stat
import sys

import pytest
from mcp.client.auth import OAuthClientProvider
from mcp.shared.auth import OAuthToken

from mcp_runtime import ConfigurationError
from mcp_runtime.config.definitions import HttpCommand, ServerDefinition, StdioCommand
from mcp_runtime.transport.oauth import FileTokenStorage, build_oauth_provider, parse_callback_url


@pytest.mark.asyncio
async def test_token_storage_round_trip(tmp_path):
    storage = FileTokenStorage(tmp_path / "linear")
    assert await storage.get_tokens() is None

    await storage.set_tokens(OAuthToken(access_token="abc", token_type="Bearer", refresh_token="r1"))
    tokens = await storage.get_tokens()
    assert tokens.access_token == "abc"
    assert tokens.refresh_token == "r1"

    # a second storage on the same directory sees the cached tokens
    assert (await FileTokenStorage(tmp_path / "linear").get_tokens()).access_token == "abc"


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
@pytest.mark.asyncio
async def test_token_files_are_private(tmp_path):
    storage = FileTokenStorage(tmp_path / "linear")
    await storage.set_tokens(OAuthToken(access_token="abc", token_type="Bearer"))
    assert stat.S_IMODE(os.stat(storage.tokens_file).st_mode) == 0o600
    assert stat.S_IMODE(os.stat(storage.cache_dir).st_mode) == 0o700


@pytest.mark.asyncio
async def test_unreadable_cache_is_ignored(tmp_path):
    storage = FileTokenStorage(tmp_path)
    storage.tokens_file.write_text("{not json")
    assert await storage.get_tokens() is None
    storage.client_file.write_text('{"unexpected": true}')
    assert await storage.get_client_info() is None


@pytest.mark.asyncio
async def test_clear_removes_cached_files(tmp_path):
    storage = FileTokenStorage(tmp_path)
    await storage.set_tokens(OAuthToken(access_token="abc", token_type="Bearer"))
    storage.clear()
    assert not storage.tokens_file.exists()
    assert await storage.get_tokens() is None


class TestParseCallbackUrl:
    def test_redirect_url(self):
        code, state = parse_callback_url("http://localhost:33418/callback?code=xyz&state=s1")
        assert (code, state) == ("xyz", "s1")

    def test_bare_code(self):
        assert parse_callback_url("  xyz \n") == ("xyz", None)

    def test_url_without_code(self):
        with pytest.raises(ConfigurationError, match="authorization code"):
            parse_callback_url("http://localhost:33418/callback?error=access_denied")


class TestBuildOAuthProvider:
    def test_builds_provider(self, tmp_path):
        definition = ServerDefinition(
            name="linear",
            command=HttpCommand(url="https://mcp.linear.app/mcp"),
            auth="oauth",
            token_cache_dir=str(tmp_path),
        )
        assert isinstance(build_oauth_provider(definition), OAuthClientProvider)

    def test_requires_http(self, tmp_path):
        definition = ServerDefinition(
            name="local",
            command=StdioCommand(command="node", cwd="/"),
            auth="oauth",
            token_cache_dir=str(tmp_path),
        )
        with pytest.raises(ConfigurationError, match="not an HTTP server"):
            build_oauth_provider(definition)

    def test_requires_cache_dir(self):
        definition = ServerDefinition(
            name="linear", command=HttpCommand(url="https://mcp.linear.app/mcp"), auth="oauth"
        )
        with pytest.raises(ConfigurationError, match="token cache"):
            build_oauth_provider(definition)
