"""Server configuration.

Loaded once at startup from ``REVIEWTHREADS_*`` environment variables and
validated with Pydantic. Zero-config works: every setting has a default.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, field_validator

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)

ENV_PREFIX = "REVIEWTHREADS_"
DEFAULT_API_URL = "https://api.github.com"


class Config(BaseModel):
    """Top-level reviewthreads configuration."""

    model_config = ConfigDict(extra="ignore")

    api_url: str = Field(
        default=DEFAULT_API_URL,
        description="GitHub REST API base URL (change for GitHub Enterprise Server)",
    )
    default_repo: str = Field(
        default="",
        description="Repository ('owner/repo') used by get_pull_request_comment when owner/repo are omitted",
    )

    @field_validator("api_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if not value.startswith(("http://", "https://")):
            msg = f"api_url must be an http(s) URL, got {value!r}"
            raise ValueError(msg)
        return value

    @field_validator("default_repo")
    @classmethod
    def _validate_default_repo(cls, value: str) -> str:
        value = value.strip()
        if value:
            owner, _, name = value.partition("/")
            if not owner or not name or "/" in name:
                msg = f"default_repo must be in 'owner/repo' format, got {value!r}"
                raise ValueError(msg)
        return value

    @property
    def graphql_url(self) -> str:
        """GraphQL endpoint matching ``api_url``.

        github.com serves GraphQL at ``/graphql``; Enterprise Server serves it
        at ``/api/graphql`` next to the ``/api/v3`` REST root.
        """
        if self.api_url.endswith("/api/v3"):
            return self.api_url.removesuffix("/v3") + "/graphql"
        return f"{self.api_url}/graphql"


KNOWN_ENV_VARS = frozenset({f"{ENV_PREFIX}{name.upper()}" for name in Config.model_fields})


def load_config(environ: Mapping[str, str] | None = None) -> Config:
    """Build a :class:`Config` from ``REVIEWTHREADS_*`` environment variables.

    Raises ``ValueError`` on invalid values so the server can refuse to
    start with a broken config.
    """
    env = os.environ if environ is None else environ
    data = {
        name: env[f"{ENV_PREFIX}{name.upper()}"] for name in Config.model_fields if f"{ENV_PREFIX}{name.upper()}" in env
    }
    try:
        config = Config.model_validate(data)
    except Exception as exc:
        msg = f"Invalid {ENV_PREFIX}* configuration: {exc}"
        raise ValueError(msg) from exc

    if data:
        logger.info("Loaded config from environment: %s", ", ".join(sorted(data)))
    else:
        logger.info("No %s* variables set, using defaults", ENV_PREFIX)
    return config


class _ConfigState:
    """Holds the active config."""

    __slots__ = ("config",)

    def __init__(self) -> None:
        self.config: Config = Config()


_state = _ConfigState()


def get_config() -> Config:
    """Return the active configuration."""
    return _state.config


def set_config(config: Config) -> None:
    """Set the active configuration (called during server startup)."""
    _state.config = config
