"""HTTP utilities for Google Drive integrations."""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from typing import Iterable, Mapping, MutableMapping

import requests
from requests import Response
from requests.exceptions import ConnectionError, RequestException, Timeout

from driveimage.core.logger import get_logger

from .auth import AuthClient
from .config import GoogleDriveConfig, load_retry_config, load_timeout
from .models import DriveAuthError, DriveNotFound, DriveRequestError, DriveRetryableError

LOGGER = get_logger()

AUTHORIZATION_HEADER = "Authorization"
USER_AGENT = "DriveImage/1.0"
RETRYABLE_STATUS = {429, 500, 502, 503, 504}
RATE_LIMIT_REASONS = {"rateLimitExceeded", "userRateLimitExceeded"}


@dataclass(slots=True)
class RequestDiagnostics:
    """Captured diagnostics for troubleshooting."""

    method: str
    url: str
    status: int | None


class HttpClient:
    """Request helper wrapping retries, auth, and diagnostics."""

    def __init__(
        self,
        config: GoogleDriveConfig,
        *,
        session: requests.Session | None = None,
        auth_client: AuthClient | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._config = config
        self._session = session or requests.Session()
        self._session.verify = config.verify_tls
        self._session.trust_env = config.trust_env
        if config.proxies:
            self._session.proxies.update(config.proxies)
        self._session.headers.setdefault("User-Agent", USER_AGENT)
        self._auth = auth_client or AuthClient(config, session=self._session)
        self._logger = logger or LOGGER
        self._retry_config = load_retry_config(config)
        self._timeout = load_timeout(config)

    @property
    def session(self) -> requests.Session:
        """Expose the reusable session."""

        return self._session

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, object] | None = None,
        expected_status: Iterable[int] = (200,),
        timeout: float | None = None,
        allow_retry: bool = True,
    ) -> Response:
        """Perform a Drive API request with bearer token injection and retries."""

        url = self._compose_url(path)
        attempts = self._retry_config.max_attempts if allow_retry else 1
        base_backoff = max(0.05, self._retry_config.backoff_ms / 1000.0)
        max_backoff = max(base_backoff, self._retry_config.max_backoff_ms / 1000.0)
        timeout_value = timeout or self._timeout
        expected = tuple(expected_status)
        refresh_token_next = False
        last_error: DriveRetryableError | DriveAuthError | None = None

        for attempt in range(1, attempts + 1):
            token = self._auth.get_token(force_refresh=refresh_token_next)
            refresh_token_next = False
            request_headers: MutableMapping[str, str] = {AUTHORIZATION_HEADER: f"Bearer {token}"}
            diagnostics = RequestDiagnostics(method=method, url=url, status=None)

            try:
                response = self._session.request(
                    method,
                    url,
                    headers=request_headers,
                    params=dict(params or {}),
                    timeout=timeout_value,
                )
            except Timeout as exc:
                last_error = DriveRetryableError("Request timed out", payload={"url": url})
                self._logger.warning(
                    "gdrive.http timeout method=%s url=%s attempt=%d",
                    method,
                    url,
                    attempt,
                    exc_info=exc,
                )
            except (ConnectionError, RequestException) as exc:
                last_error = DriveRetryableError("Request failed", payload={"url": url})
                self._logger.warning(
                    "gdrive.http connection_error method=%s url=%s attempt=%d error=%s",
                    method,
                    url,
                    attempt,
                    type(exc).__name__,
                    exc_info=exc,
                )
            else:
                status = response.status_code
                diagnostics.status = status
                if status in expected:
                    return response

                payload = self._safe_json(response)
                if status == 401:
                    self._auth.invalidate()
                    self._logger.info(
                        "gdrive.http unauthorized method=%s url=%s -- refreshing token",
                        diagnostics.method,
                        diagnostics.url,
                    )
                    last_error = DriveAuthError("Unauthorized", status_code=status, payload=payload)
                    refresh_token_next = True
                elif status == 404:
                    raise DriveNotFound("Resource not found", status_code=status, payload=payload)
                elif status == 403 and self._error_reason(payload) in RATE_LIMIT_REASONS:
                    self._logger.warning(
                        "gdrive.http rate_limited method=%s url=%s attempt=%d",
                        diagnostics.method,
                        diagnostics.url,
                        attempt,
                    )
                    last_error = DriveRetryableError("Rate limited", status_code=status, payload=payload)
                elif status == 403:
                    self._logger.error(
                        "gdrive.http forbidden method=%s url=%s reason=%s",
                        diagnostics.method,
                        diagnostics.url,
                        self._error_reason(payload),
                    )
                    raise DriveAuthError("Forbidden", status_code=status, payload=payload)
                elif status in RETRYABLE_STATUS:
                    self._logger.warning(
                        "gdrive.http retryable_status method=%s url=%s status=%d",
                        diagnostics.method,
                        diagnostics.url,
                        status,
                    )
                    last_error = DriveRetryableError(
                        "Retryable response",
                        status_code=status,
                        payload=payload,
                    )
                else:
                    raise DriveRequestError(
                        f"Unexpected status {status}",
                        status_code=status,
                        payload=payload,
                    )

            if attempt < attempts:
                if not refresh_token_next:
                    self._sleep_with_backoff(base_backoff, max_backoff, attempt)
                continue

        if last_error is not None:
            raise last_error
        raise DriveRetryableError("Exhausted retries", payload={"url": url})

    # Internal helpers -------------------------------------------------

    def _compose_url(self, path: str) -> str:
        base = self._config.base_url.rstrip("/")
        if path.startswith("http://") or path.startswith("https://"):
            return path
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{base}{path}"

    def _sleep_with_backoff(self, base: float, maximum: float, attempt: int) -> None:
        delay = min(maximum, base * (2 ** (attempt - 1)))
        jitter = random.uniform(0, delay / 2)
        time.sleep(delay + jitter)

    @staticmethod
    def _error_reason(payload: Mapping[str, object]) -> str | None:
        error = payload.get("error")
        if not isinstance(error, Mapping):
            return None
        errors = error.get("errors")
        if isinstance(errors, list) and errors and isinstance(errors[0], Mapping):
            reason = errors[0].get("reason")
            return str(reason) if reason else None
        return None

    def _safe_json(self, response: Response) -> dict[str, object]:
        try:
            data = response.json()
        except ValueError:
            text = response.text
            if len(text) > 200:
                text = text[:200] + "..."
            return {"body": text}
        return data if isinstance(data, dict) else {"body": data}


__all__ = ["HttpClient", "AUTHORIZATION_HEADER"]
