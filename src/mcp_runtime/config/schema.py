"""Raw configuration schema for mcp-runtime.json using Pydantic models.

These models accept every spelling a server entry may use. They are only
used while loading; downstream code sees :class:`ServerDefinition` instead.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RawEntry(BaseModel):
    """A server entry exactly as declared in the config file."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    description: str | None = None

    # URL family, in precedence order
    baseUrl: str | None = None
    base_url: str | None = None
    url: str | None = None
    serverUrl: str | None = None
    server_url: str | None = None

    # Command family
    command: str | list[str] | None = None
    executable: str | None = None
    args: list[str] | None = None

    headers: dict[str, str] | None = None
    env: dict[str, str] | None = None
    auth: str | None = None

    tokenCacheDir: str | None = None
    token_cache_dir: str | None = None
    clientName: str | None = None
    client_name: str | None = None

    bearerToken: str | None = None
    bearer_token: str | None = None
    bearerTokenEnv: str | None = None
    bearer_token_env: str | None = None


class RawConfig(BaseModel):
    """Top-level config document."""

    model_config = ConfigDict(extra="ignore")

    mcpServers: dict[str, RawEntry] = Field(default_factory=dict)

    @field_validator("mcpServers", mode="before")
    @classmethod
    def replace_null_entries(cls, value):
        """Treat ``null`` entries and a ``null`` section as empty."""
        if value is None:
            return {}
        if isinstance(value, dict):
            return {name: entry if entry is not None else {} for name, entry in value.items()}
        return value
