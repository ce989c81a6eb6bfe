"""B2 client configuration.

Credentials and endpoints are supplied once, at client construction, and never
change afterwards.

Environment Variables:
    B2_KEY_ID: Application key id (required)
    B2_APPLICATION_KEY: Application key secret (required)
    B2_BUCKET_ID: Target bucket id (required)
    B2_API_BASE_URL: Account authorization base URL
        (default: https://api.backblazeb2.com/b2api/v2/)
    B2_TIMEOUT_SECONDS: Default per-request timeout in seconds (default: 30)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Final

from b2client.errors import B2ConfigError

ENV_KEY_ID: Final[str] = "B2_KEY_ID"
ENV_APPLICATION_KEY: Final[str] = "B2_APPLICATION_KEY"
ENV_BUCKET_ID: Final[str] = "B2_BUCKET_ID"
ENV_API_BASE_URL: Final[str] = "B2_API_BASE_URL"
ENV_TIMEOUT_SECONDS: Final[str] = "B2_TIMEOUT_SECONDS"

DEFAULT_API_BASE_URL: Final[str] = "https://api.backblazeb2.com/b2api/v2/"
DEFAULT_TIMEOUT_SECONDS: Final[float] = 30.0


@dataclass(frozen=True)
class B2Config:
    """Credentials and endpoints for a B2 client (immutable).

    Attributes:
        key_id: Application key id.
        application_key: Application key secret. Hidden from repr().
        api_base_url: Base URL that b2_authorize_account is appended to.
        bucket_id: Bucket that uploads target.
        timeout_seconds: Default timeout applied to every request.
    """

    key_id: str
    application_key: str = field(repr=False)
    api_base_url: str
    bucket_id: str
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    def __post_init__(self) -> None:
        if self.timeout_seconds <= 0:
            raise B2ConfigError(
                f"timeout_seconds must be positive, got {self.timeout_seconds}"
            )


def _require_env(env_var: str) -> str:
    raw = os.environ.get(env_var, "").strip()
    if not raw:
        raise B2ConfigError(f"{env_var} is required but not set")
    return raw


def _parse_timeout(env_var: str, default: float) -> float:
    """Parse a positive float from an environment variable.

    Raises:
        B2ConfigError: If the value is set but not a positive number.
    """
    raw = os.environ.get(env_var)
    if raw is None or not raw.strip():
        return default

    try:
        value = float(raw.strip())
    except ValueError as e:
        raise B2ConfigError(f"{env_var} must be a positive number, got '{raw}'") from e

    if value <= 0:
        raise B2ConfigError(f"{env_var} must be a positive number, got {value}")

    return value


def load_b2_config() -> B2Config:
    """Load client configuration from environment variables.

    Returns:
        B2Config with validated values.

    Raises:
        B2ConfigError: If a required variable is missing or a value is invalid.
    """
    return B2Config(
        key_id=_require_env(ENV_KEY_ID),
        application_key=_require_env(ENV_APPLICATION_KEY),
        api_base_url=os.environ.get(ENV_API_BASE_URL, "").strip() or DEFAULT_API_BASE_URL,
        bucket_id=_require_env(ENV_BUCKET_ID),
        timeout_seconds=_parse_timeout(ENV_TIMEOUT_SECONDS, DEFAULT_TIMEOUT_SECONDS),
    )
