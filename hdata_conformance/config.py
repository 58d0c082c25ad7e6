"""Harness configuration loaded from a JSON file."""

import logging
from pathlib import Path

from pydantic import Field, SecretStr, ValidationError, field_validator
from yarl import URL

from hdata_conformance.errors import ConfigurationError
from hdata_conformance.models.base import Model

log = logging.getLogger(__name__)


class UserCredentials(Model):
    """Credentials for one user alias."""

    email: str
    password: SecretStr


class HarnessConfig(Model):
    """Configuration for a conformance run."""

    base_url: str = Field(..., description="Base URL of the hData record under test")
    proxy: str | None = Field(default=None, description="HTTP proxy URL")
    timeout: float = Field(default=30.0, gt=0, description="Per-request timeout (s)")
    request_checker: str | None = Field(
        default=None, description="Entry point name of the request checker"
    )
    properties: dict[str, str] = Field(
        default_factory=dict, description="Named configuration strings for tests"
    )
    users: dict[str, UserCredentials] = Field(
        default_factory=dict, description="User credentials keyed by alias"
    )

    @field_validator("base_url")
    @classmethod
    def _normalize_base_url(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("base_url must be defined")
        url = URL(value)
        if not url.is_absolute():
            raise ValueError(f"base_url must be an absolute URL: {value}")
        if url.query_string:
            log.error("6.1.1 baseURL MUST NOT contain a query component, baseURL=%s", value)
        if not value.endswith("/"):
            value += "/"
        return value


def load_config(path: Path) -> HarnessConfig:
    """Load harness configuration from a JSON file.

    Raises:
        ConfigurationError: If the file is missing or its content is invalid

    """
    try:
        content = path.read_text()
    except OSError as e:
        raise ConfigurationError(f"Cannot read configuration {path}: {e}") from e

    try:
        return HarnessConfig.model_validate_json(content)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration {path}: {e}") from e
