"""Client configuration and its YAML file form.

String values in the file may reference environment variables as
``${ENV_VAR}`` or ``${ENV_VAR:-default}``, which keeps secrets such as a
pre-computed Authorization header out of the file:

    bucket: test
    app_id: "1253846586"
    region: ${COS_REGION:-ap-beijing}
    timeout: 10
    headers:
      Authorization: ${COS_AUTHORIZATION}
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Self

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from cos_client.errors import ConfigError
from cos_client.request import DEFAULT_SERVICE_BASE_URL, USER_AGENT, new_bucket_url

_ENV_REF = re.compile(r"\$\{(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?::-(?P<default>[^}]*))?\}")


def expand_env(value: str) -> str:
    """Replace ``${NAME}`` / ``${NAME:-default}`` references in *value*.

    Raises:
        ConfigError: A referenced variable is unset and has no default.
    """

    def lookup(match: re.Match[str]) -> str:
        name, default = match.group("name", "default")
        resolved = os.environ.get(name, default)
        if resolved is None:
            raise ConfigError(f"Environment variable '{name}' is not set")
        return resolved

    return _ENV_REF.sub(lookup, value)


class ClientConfig(BaseModel):
    """Top-level client configuration file structure.

    Either give bucket_url directly, or bucket + app_id + region to have it
    built from the standard bucket domain.
    """

    model_config = ConfigDict(extra="forbid")

    bucket_url: str | None = Field(default=None, description="Bucket base URL (no path)")
    bucket: str | None = Field(default=None, description="Bucket name")
    app_id: str | None = Field(default=None, description="Account AppID")
    region: str | None = Field(default=None, description="Region code, e.g. ap-beijing")
    secure: bool = Field(default=True, description="Use https for a built bucket_url")
    service_url: str = Field(default=DEFAULT_SERVICE_BASE_URL, description="Service API base URL")
    user_agent: str = Field(default=USER_AGENT)
    timeout: float = Field(default=30.0, gt=0, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True)
    headers: dict[str, str] = Field(
        default_factory=dict, description="Headers sent with every request"
    )

    @field_validator("*", mode="before")
    @classmethod
    def expand_env_refs(cls, v: Any) -> Any:
        if isinstance(v, str):
            return expand_env(v)
        if isinstance(v, dict):
            return {name: expand_env(item) if isinstance(item, str) else item for name, item in v.items()}
        return v

    @model_validator(mode="after")
    def build_bucket_url(self) -> Self:
        if self.bucket_url is None and self.bucket and self.app_id and self.region:
            self.bucket_url = str(
                new_bucket_url(self.bucket, self.app_id, self.region, self.secure)
            )
        return self


def load_client_config(config_path: Path) -> ClientConfig:
    """Read a YAML config file into a ClientConfig.

    Raises:
        ConfigError: Missing or unreadable file, invalid YAML, a top level
            that is not a mapping, an unset environment variable, or values
            that fail validation.
    """
    try:
        text = config_path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ConfigError(f"Config file not found: {config_path}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file {config_path}: {e}") from e

    try:
        raw = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file must be a YAML mapping, got {type(raw).__name__}")

    try:
        return ClientConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid config structure: {e}") from e
