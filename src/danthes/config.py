"""
Danthes Configuration Management

Centralized configuration using pydantic-settings with environment variable support.
Per-environment YAML files can be loaded on top of the environment.
"""

import os
import re
from functools import lru_cache
from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from danthes.core.errors import ConfigurationError

logger = structlog.get_logger()

# Options read from a config file, anything else is ignored
ACCEPTED_KEYS = ("adapter", "server", "secret_token", "mount", "signature_expiration", "timeout")

# Options read from a redis config file
REDIS_ACCEPTED_KEYS = ("host", "port", "password", "database", "namespace", "socket")

# ${NAME} references expanded from the process environment
ENV_REFERENCE = re.compile(r"\$\{(\w+)\}")


def default_env() -> str:
    """Resolve the environment name from the process environment."""
    return os.environ.get("DANTHES_ENV") or os.environ.get("APP_ENV") or "development"


class RedisEngineConfig(BaseModel):
    """Redis engine options passed through to the pub/sub server."""

    host: str = "localhost"
    port: int = 6379
    password: str | None = None
    database: int | None = None
    namespace: str | None = None
    socket: str | None = None


class Settings(BaseSettings):
    """Danthes settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="DANTHES_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ══════════════════════════════════════════════════════════════
    # Server
    # ══════════════════════════════════════════════════════════════
    env: str = Field(default_factory=default_env)
    server: str | None = None
    mount: str = "/faye"
    adapter: str | None = None

    # ══════════════════════════════════════════════════════════════
    # Signing
    # ══════════════════════════════════════════════════════════════
    secret_token: str | None = None
    signature_expiration: int | None = None  # seconds

    # ══════════════════════════════════════════════════════════════
    # Transport
    # ══════════════════════════════════════════════════════════════
    timeout: int = 60  # server long-poll timeout, seconds
    publish_timeout: float = 30.0
    engine: RedisEngineConfig | None = None

    @field_validator("mount", mode="before")
    @classmethod
    def parse_mount(cls, v: str | None) -> str:
        return v or ""

    def require_server(self) -> str:
        """Return the configured server or fail."""
        if not self.server:
            raise ConfigurationError(
                "No server specified, ensure danthes.yml was loaded properly."
            )
        return self.server

    def server_url(self) -> str:
        """Server joined to the mount path with exactly one slash."""
        return "/".join([self.require_server().rstrip("/"), self.mount.lstrip("/")])

    def require_secret_token(self) -> str:
        """Return the configured secret token or fail."""
        if not self.secret_token:
            raise ConfigurationError(
                "No secret_token config set, ensure danthes.yml was loaded properly."
            )
        return self.secret_token


def expand_env_references(text: str) -> str:
    """Replace ${NAME} with the environment value. Unset names and bare $NAME are left as is."""
    return ENV_REFERENCE.sub(lambda m: os.environ.get(m.group(1), m.group(0)), text)


def _read_environment_section(filename: str | Path, env: str) -> dict[str, Any]:
    """Read one environment section out of a YAML config file."""
    path = Path(filename)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Unable to read {path}: {e}") from e

    document = yaml.safe_load(expand_env_references(raw)) or {}
    section = document.get(env) if isinstance(document, dict) else None
    if section is None:
        raise ConfigurationError(f"The {env} environment does not exist in {path}")
    if not isinstance(section, dict):
        raise ConfigurationError(f"The {env} environment in {path} is not a mapping")
    return section


def load_config(
    filename: str | Path,
    env: str | None = None,
    base: Settings | None = None,
) -> Settings:
    """Load settings for one environment from a YAML file.

    Only ACCEPTED_KEYS are taken from the file, other keys are ignored.
    ${NAME} references are replaced from the environment before parsing.
    Values from the file override those of ``base`` (or the environment).
    """
    base = base or Settings()
    env = env or base.env
    section = _read_environment_section(filename, env)

    updates = {key: value for key, value in section.items() if key in ACCEPTED_KEYS}
    ignored = sorted(set(section) - set(updates))
    if ignored:
        logger.debug("Ignoring unknown config keys", keys=ignored, filename=str(filename))

    logger.info("Loaded danthes config", filename=str(filename), env=env)
    return Settings.model_validate({**base.model_dump(), **updates, "env": env})


def load_redis_config(
    filename: str | Path,
    env: str | None = None,
    base: Settings | None = None,
) -> Settings:
    """Load Redis engine options for one environment from a YAML file."""
    base = base or Settings()
    env = env or base.env
    section = _read_environment_section(filename, env)

    options = {key: value for key, value in section.items() if key in REDIS_ACCEPTED_KEYS}
    engine = RedisEngineConfig(**options)

    logger.info("Loaded danthes redis config", filename=str(filename), env=env)
    return base.model_copy(update={"engine": engine})


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience export
settings = get_settings()
