"""HTTP client for the daolinet policy API."""

from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)
from tenacity.wait import wait_base

from .config import ClientConfig, build_httpx_timeout
from .constants import (
    POLICIES_PATH,
    RETRY_BACKOFF_INITIAL_SEC,
    RETRY_BACKOFF_MAX_SEC,
    USER_AGENT,
)
from .errors import ApiConnectionError, ApiError
from .logging_utils import before_sleep_log_event, log_event


def _error_message(response: httpx.Response) -> str:
    """Pick the most useful error text from an API response."""
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        for key in ("message", "error"):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    text = response.text.strip()
    return text or response.reason_phrase or "request failed"


class DaoliClient:
    """Thin wrapper around ``httpx.Client`` for policy operations.

    Transport failures are retried; HTTP error statuses are not.
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        transport: Optional[httpx.BaseTransport] = None,
        wait: Optional[wait_base] = None,
    ) -> None:
        self.config = config
        self._http = httpx.Client(
            base_url=config.base_url,
            timeout=build_httpx_timeout(config.timeout),
            headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
            transport=transport,
        )
        self._wait = wait or wait_exponential_jitter(
            initial=RETRY_BACKOFF_INITIAL_SEC,
            max=RETRY_BACKOFF_MAX_SEC,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> DaoliClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _request(self, operation: str, method: str, path: str, **kwargs: Any) -> httpx.Response:
        retrying = Retrying(
            stop=stop_after_attempt(self.config.retry_attempts),
            wait=self._wait,
            retry=retry_if_exception_type(httpx.TransportError),
            before_sleep=before_sleep_log_event(operation=operation),
            reraise=True,
        )
        try:
            response = retrying(self._http.request, method, path, **kwargs)
        except httpx.TransportError as exc:
            log_event(
                "api_request_failed",
                level=logging.WARNING,
                operation=operation,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            raise ApiConnectionError(
                f"Cannot connect to {self.config.base_url}: {exc}"
            ) from exc

        if response.is_error:
            raise ApiError(response.status_code, _error_message(response))
        return response

    def policy_list(self) -> list[str]:
        response = self._request("policy_list", "GET", POLICIES_PATH)
        try:
            payload = response.json()
        except ValueError:
            raise ApiError(response.status_code, "invalid JSON in policy list") from None
        if not isinstance(payload, list):
            raise ApiError(response.status_code, "policy list must be a JSON array")
        return [str(item) for item in payload]

    def policy_create(self, peer: str) -> None:
        self._request("policy_create", "POST", POLICIES_PATH, json={"peer": peer})

    def policy_delete(self, peer: str) -> None:
        self._request("policy_delete", "DELETE", f"{POLICIES_PATH}/{quote(peer, safe='')}")
