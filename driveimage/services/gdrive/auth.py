"""OAuth access-token handling for the Google Drive API."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Optional

import requests
from requests import Response
from requests.exceptions import RequestException, Timeout

from driveimage.core.logger import get_logger

from .config import GoogleDriveConfig, load_retry_config, load_timeout
from .models import DriveAuthError

LOGGER = get_logger()

STATIC_TOKEN_TTL = float("inf")


@dataclass(slots=True)
class TokenState:
    """Cached authentication token details."""

    value: str
    expires_at: float


class AuthClient:
    """Return a bearer token, refreshing through the refresh-token grant when possible."""

    def __init__(
        self,
        config: GoogleDriveConfig,
        *,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._config = config
        self._session = session or requests.Session()
        self._session.verify = config.verify_tls
        self._session.trust_env = config.trust_env
        if config.proxies:
            self._session.proxies.update(config.proxies)
        self._lock = threading.RLock()
        self._token_state: TokenState | None = None
        if config.access_token:
            self._token_state = TokenState(value=config.access_token, expires_at=STATIC_TOKEN_TTL)
        self._retry_config = load_retry_config(config)
        self._timeout = load_timeout(config)

    def get_token(self, *, force_refresh: bool = False) -> str:
        """Return a cached access token, refreshing when necessary."""

        with self._lock:
            if not force_refresh and self._token_state and self._token_state.expires_at - time.monotonic() > 60:
                return self._token_state.value
            if not self._config.can_refresh:
                if self._token_state is not None and not force_refresh:
                    return self._token_state.value
                raise DriveAuthError("Access token rejected and no refresh token configured")
            return self._refresh_locked()

    def invalidate(self) -> None:
        """Invalidate the cached token forcing a refresh on next access."""

        with self._lock:
            if self._config.can_refresh:
                self._token_state = None

    # Internal helpers -------------------------------------------------

    def _refresh_locked(self) -> str:
        data = {
            "client_id": self._config.client_id,
            "client_secret": self._config.client_secret,
            "refresh_token": self._config.refresh_token,
            "grant_type": "refresh_token",
        }
        attempts = max(1, self._retry_config.max_attempts)
        backoff = max(0.05, self._retry_config.backoff_ms / 1000.0)
        max_backoff = max(backoff, self._retry_config.max_backoff_ms / 1000.0)
        last_error: DriveAuthError | None = None
        for attempt in range(1, attempts + 1):
            try:
                response = self._session.post(
                    self._config.token_url,
                    data=data,
                    timeout=self._timeout,
                )
            except Timeout as exc:  # pragma: no cover - network failure path
                LOGGER.warning(
                    "gdrive.auth token_request_timeout attempt=%d", attempt, exc_info=exc
                )
                last_error = DriveAuthError("Timeout while requesting Google access token")
            except RequestException as exc:  # pragma: no cover - network failure path
                LOGGER.warning(
                    "gdrive.auth token_request_error attempt=%d error=%s",
                    attempt,
                    type(exc).__name__,
                    exc_info=exc,
                )
                last_error = DriveAuthError("Failed to request Google access token")
            else:
                try:
                    token_state = self._parse_response(response)
                except DriveAuthError as exc:
                    last_error = exc
                    if exc.status_code in (400, 401):
                        # invalid_grant and friends will not heal on retry
                        break
                else:
                    self._token_state = token_state
                    LOGGER.info(
                        "gdrive.auth token_refreshed expires_in=%.0fs attempt=%d",
                        token_state.expires_at - time.monotonic(),
                        attempt,
                    )
                    return token_state.value

            if attempt < attempts:
                sleep_for = min(max_backoff, backoff * (2 ** (attempt - 1)))
                time.sleep(sleep_for)

        if last_error is None:  # pragma: no cover
            raise DriveAuthError("Unable to obtain Google access token")
        raise last_error

    def _parse_response(self, response: Response) -> TokenState:
        try:
            payload = response.json()
        except ValueError:
            payload = {}
        if response.status_code != 200:
            error = payload.get("error_description") or payload.get("error") or "unknown error"
            raise DriveAuthError(
                f"Google token endpoint returned HTTP {response.status_code}: {error}",
                status_code=response.status_code,
                payload=payload,
            )
        token_value = payload.get("access_token")
        if not token_value:
            raise DriveAuthError("Google token response missing access_token")
        expires_in = float(payload.get("expires_in", 3600))
        expires_at = time.monotonic() + max(60.0, expires_in)
        return TokenState(value=str(token_value), expires_at=expires_at)


__all__ = ["AuthClient", "TokenState"]
