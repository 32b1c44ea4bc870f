"""Configuration: frozen Config for the catalog client and repository."""

from __future__ import annotations

from dataclasses import dataclass, field
import math
import os
from typing import Literal, cast

import dotenv

from storefront.constants import DEFAULT_BASE_URL
from storefront.core.exceptions import (
    ConfigurationException,
    MissingConfigurationException,
)
from storefront.retry import RetryPolicy

EnvironmentName = Literal["development", "staging", "production"]

_ENVIRONMENTS: tuple[EnvironmentName, ...] = ("development", "staging", "production")
_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Config:
    """Immutable configuration for talking to the catalog API.

    Example:
        config = Config.from_env()
        # API_BASE_URL, REQUEST_TIMEOUT_SECONDS, ... are read from the
        # environment (and a local .env file, if present).
    """

    base_url: str = DEFAULT_BASE_URL
    request_timeout_s: float = 30.0
    connection_timeout_s: float = 10.0
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    enable_product_cache: bool = True
    product_cache_ttl_s: int = 30 * 60
    environment: EnvironmentName = "development"
    #: Log every catalog request and response status at INFO.
    enable_api_logging: bool = False

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not self.base_url or not self.base_url.strip():
            raise MissingConfigurationException(
                "API base URL is not configured", config_key="API_BASE_URL"
            )
        object.__setattr__(self, "base_url", self.base_url.strip().rstrip("/"))

        if not math.isfinite(self.request_timeout_s) or self.request_timeout_s <= 0:
            raise ConfigurationException(
                "request_timeout_s must be finite and > 0, "
                f"got {self.request_timeout_s}",
                code="INVALID_TIMEOUT",
            )
        if (
            not math.isfinite(self.connection_timeout_s)
            or self.connection_timeout_s <= 0
        ):
            raise ConfigurationException(
                "connection_timeout_s must be finite and > 0, "
                f"got {self.connection_timeout_s}",
                code="INVALID_TIMEOUT",
            )
        if self.product_cache_ttl_s < 0:
            raise ConfigurationException(
                f"product_cache_ttl_s must be >= 0, got {self.product_cache_ttl_s}",
                code="INVALID_TTL",
            )
        if self.environment not in _ENVIRONMENTS:
            raise ConfigurationException(
                f"Unknown environment: {self.environment!r}",
                code="INVALID_ENVIRONMENT",
            )

    @property
    def is_production(self) -> bool:
        """True when running in production."""
        return self.environment == "production"

    @property
    def is_staging(self) -> bool:
        """True when running in staging."""
        return self.environment == "staging"

    @property
    def is_development(self) -> bool:
        """True when running in development."""
        return self.environment == "development"

    @classmethod
    def from_env(cls) -> Config:
        """Build a Config from environment variables, loading ``.env`` first."""
        dotenv.load_dotenv()
        max_retries = _env_int("MAX_RETRIES", 3)
        if max_retries < 1:
            raise ConfigurationException(
                f"MAX_RETRIES must be >= 1, got {max_retries}", code="INVALID_RETRIES"
            )
        return cls(
            base_url=os.environ.get("API_BASE_URL", DEFAULT_BASE_URL),
            request_timeout_s=_env_float("REQUEST_TIMEOUT_SECONDS", 30.0),
            connection_timeout_s=_env_float("CONNECTION_TIMEOUT_SECONDS", 10.0),
            retry=RetryPolicy(max_attempts=max_retries),
            enable_product_cache=_env_bool("ENABLE_PRODUCT_CACHE", True),
            product_cache_ttl_s=_env_int("PRODUCT_CACHE_DURATION_MINUTES", 30) * 60,
            environment=cast(
                "EnvironmentName",
                os.environ.get("ENVIRONMENT", "development").strip().lower(),
            ),
            enable_api_logging=_env_bool("ENABLE_API_LOGGING", False),
        )


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationException(
            f"{name} must be an integer, got {raw!r}",
            code="INVALID_VALUE",
            original_error=e,
        ) from e


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigurationException(
            f"{name} must be a number, got {raw!r}",
            code="INVALID_VALUE",
            original_error=e,
        ) from e


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    normalized = raw.strip().lower()
    if normalized in _TRUTHY:
        return True
    if normalized in _FALSY:
        return False
    raise ConfigurationException(
        f"{name} must be one of {sorted(_TRUTHY | _FALSY)}, got {raw!r}",
        code="INVALID_VALUE",
    )
