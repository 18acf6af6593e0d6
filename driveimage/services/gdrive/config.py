"""Configuration loader for the Google Drive client."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from driveimage.config import load_profile_section
from driveimage.core.errors import ConfigError
from driveimage.core.logger import get_logger
from .models import DriveError

LOGGER = get_logger()

DEFAULT_BASE_URL = "https://www.googleapis.com/drive/v3"
DEFAULT_TOKEN_URL = "https://oauth2.googleapis.com/token"
DEFAULT_TIMEOUT = 20.0
DEFAULT_PAGE_SIZE = 100

ACCESS_TOKEN_ENV = "GDRIVE_ACCESS_TOKEN"
CLIENT_ID_ENV = "GDRIVE_CLIENT_ID"
CLIENT_SECRET_ENV = "GDRIVE_CLIENT_SECRET"
REFRESH_TOKEN_ENV = "GDRIVE_REFRESH_TOKEN"
TIMEOUT_ENV = "GDRIVE_TIMEOUT_SEC"
RETRY_ATTEMPTS_ENV = "GDRIVE_RETRY_ATTEMPTS"
RETRY_BACKOFF_MS_ENV = "GDRIVE_RETRY_BACKOFF_MS"
RETRY_MAX_BACKOFF_MS_ENV = "GDRIVE_RETRY_MAX_BACKOFF_MS"


@dataclass(slots=True)
class RetryConfig:
    """Retry parameters for Google Drive HTTP requests."""

    max_attempts: int = 3
    backoff_ms: int = 200
    max_backoff_ms: int = 2000

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "RetryConfig":
        if not data:
            return cls()
        defaults = cls()
        return cls(
            max_attempts=int(data.get("max_attempts", defaults.max_attempts)),
            backoff_ms=int(data.get("backoff_ms", defaults.backoff_ms)),
            max_backoff_ms=int(data.get("max_backoff_ms", defaults.max_backoff_ms)),
        )


@dataclass(slots=True)
class GoogleDriveConfig:
    """Resolved configuration for Google Drive operations.

    Either ``access_token`` or the ``client_id``/``client_secret``/``refresh_token``
    triple must be present.
    """

    access_token: str | None = None
    client_id: str | None = None
    client_secret: str | None = None
    refresh_token: str | None = None
    timeout_sec: float = DEFAULT_TIMEOUT
    retries: RetryConfig = field(default_factory=RetryConfig)
    page_size: int = DEFAULT_PAGE_SIZE
    verify_tls: bool = True
    trust_env: bool = False
    base_url: str = DEFAULT_BASE_URL
    token_url: str = DEFAULT_TOKEN_URL
    proxies: Mapping[str, str] | None = None

    @property
    def can_refresh(self) -> bool:
        return bool(self.client_id and self.client_secret and self.refresh_token)

    @classmethod
    def from_profile(cls, profile_name: str, *, config_path: str | Path | None = None) -> "GoogleDriveConfig":
        """Create a configuration instance from profiles.yaml.

        Args:
            profile_name: Logical profile name under the ``gdrive`` section.
            config_path: Optional override for the config file path.

        Returns:
            Parsed ``GoogleDriveConfig`` instance.

        Raises:
            DriveError: If the configuration cannot be loaded or is invalid.
        """

        try:
            profiles = load_profile_section("gdrive", path=config_path)
        except ConfigError as exc:
            raise DriveError(str(exc)) from exc
        raw = profiles.get(profile_name)
        if raw is None:
            raise DriveError(f"gdrive profile '{profile_name}' not found in profiles.yaml")
        return cls.from_mapping(raw)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "GoogleDriveConfig":
        """Create a configuration instance from a mapping."""

        proxies_raw = data.get("proxies")
        proxies: Mapping[str, str] | None = None
        if isinstance(proxies_raw, Mapping):
            proxies = {k: _expand_env(v) for k, v in proxies_raw.items()}

        return cls(
            access_token=_optional(data, "access_token"),
            client_id=_optional(data, "client_id"),
            client_secret=_optional(data, "client_secret"),
            refresh_token=_optional(data, "refresh_token"),
            timeout_sec=float(data.get("timeout_sec", DEFAULT_TIMEOUT)),
            retries=RetryConfig.from_mapping(_ensure_mapping(data.get("retries"))),
            page_size=int(data.get("page_size", DEFAULT_PAGE_SIZE)),
            verify_tls=bool(data.get("verify_tls", True)),
            trust_env=bool(data.get("trust_env", False)),
            base_url=_expand_env(data.get("base_url", DEFAULT_BASE_URL)),
            token_url=_expand_env(data.get("token_url", DEFAULT_TOKEN_URL)),
            proxies=proxies,
        )


def _read_env(key: str) -> str | None:
    value = os.getenv(key)
    if value is None:
        return None
    return value.strip()


def _read_env_int(key: str) -> int | None:
    value = _read_env(key)
    if value is None or value == "":
        return None
    try:
        return int(value)
    except ValueError as exc:  # noqa: BLE001 - configuration validation
        raise DriveError(f"Environment variable {key} must be an integer") from exc


def _read_env_float(key: str) -> float | None:
    value = _read_env(key)
    if value is None or value == "":
        return None
    try:
        return float(value)
    except ValueError as exc:  # noqa: BLE001 - configuration validation
        raise DriveError(f"Environment variable {key} must be a number") from exc


def load_timeout(config: GoogleDriveConfig | None = None) -> float:
    """Return the request timeout in seconds."""

    value = _read_env_float(TIMEOUT_ENV)
    if value is not None:
        return value
    if config:
        return float(config.timeout_sec)
    return DEFAULT_TIMEOUT


def load_retry_config(config: GoogleDriveConfig | None = None) -> RetryConfig:
    """Return retry configuration applying environment overrides."""

    attempts = _read_env_int(RETRY_ATTEMPTS_ENV)
    backoff = _read_env_int(RETRY_BACKOFF_MS_ENV)
    max_backoff = _read_env_int(RETRY_MAX_BACKOFF_MS_ENV)
    base = config.retries if config is not None else RetryConfig()
    return RetryConfig(
        max_attempts=attempts or base.max_attempts,
        backoff_ms=backoff or base.backoff_ms,
        max_backoff_ms=max_backoff or base.max_backoff_ms,
    )


def resolve_config(profile: str | None = None) -> GoogleDriveConfig:
    """Resolve configuration from a profile or environment variables with overrides."""

    base = GoogleDriveConfig.from_profile(profile) if profile else GoogleDriveConfig()
    resolved = GoogleDriveConfig(
        access_token=_read_env(ACCESS_TOKEN_ENV) or base.access_token,
        client_id=_read_env(CLIENT_ID_ENV) or base.client_id,
        client_secret=_read_env(CLIENT_SECRET_ENV) or base.client_secret,
        refresh_token=_read_env(REFRESH_TOKEN_ENV) or base.refresh_token,
        timeout_sec=load_timeout(base),
        retries=load_retry_config(base),
        page_size=base.page_size,
        verify_tls=base.verify_tls,
        trust_env=base.trust_env,
        base_url=base.base_url,
        token_url=base.token_url,
        proxies=base.proxies,
    )
    if not resolved.access_token and not resolved.can_refresh:
        raise DriveError(
            "Google Drive credentials not configured: set GDRIVE_ACCESS_TOKEN or "
            "GDRIVE_CLIENT_ID/GDRIVE_CLIENT_SECRET/GDRIVE_REFRESH_TOKEN"
        )
    return resolved


def _optional(data: Mapping[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    expanded = _expand_env(str(value), strict=False)
    return expanded or None


def _ensure_mapping(value: Any) -> Mapping[str, Any] | None:
    if isinstance(value, Mapping):
        return value
    return None


def _expand_env(value: Any, *, strict: bool = True) -> Any:
    if isinstance(value, str):
        expanded = os.path.expandvars(value)
        if "${" in value and "}" in value and expanded == value:
            if strict:
                raise DriveError(f"Environment variable not set for value: {value}")
            LOGGER.debug("gdrive.config unset_env value=%s", value)
            return None
        return expanded
    return value


__all__ = [
    "GoogleDriveConfig",
    "RetryConfig",
    "ACCESS_TOKEN_ENV",
    "CLIENT_ID_ENV",
    "CLIENT_SECRET_ENV",
    "REFRESH_TOKEN_ENV",
    "TIMEOUT_ENV",
    "RETRY_ATTEMPTS_ENV",
    "RETRY_BACKOFF_MS_ENV",
    "RETRY_MAX_BACKOFF_MS_ENV",
    "load_timeout",
    "load_retry_config",
    "resolve_config",
]
