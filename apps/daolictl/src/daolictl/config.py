"""Client settings resolved from global flags and environment variables."""

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import httpx

from .constants import (
    DEFAULT_HOST,
    DEFAULT_RETRY_ATTEMPTS,
    DEFAULT_TIMEOUT_SEC,
    ENV_HOST,
    ENV_RETRY_ATTEMPTS,
    ENV_TIMEOUT,
    HTTP_CONNECT_TIMEOUT_SEC,
    HTTP_POOL_TIMEOUT_SEC,
    HTTP_WRITE_TIMEOUT_SEC,
)
from .errors import ConfigError


@dataclass(frozen=True)
class ClientConfig:
    host: str
    timeout: int | float = DEFAULT_TIMEOUT_SEC
    retry_attempts: int = DEFAULT_RETRY_ATTEMPTS

    @property
    def base_url(self) -> str:
        return self.host.rstrip("/")


def normalize_host(value: str) -> str:
    """Strip whitespace and default the scheme to http."""
    host = value.strip()
    if not host:
        raise ConfigError("Host must not be empty")
    if "://" not in host:
        host = f"http://{host}"
    scheme = host.split("://", 1)[0].lower()
    if scheme not in ("http", "https"):
        raise ConfigError(f"Unsupported host scheme: {scheme}")
    try:
        url = httpx.URL(host)
    except httpx.InvalidURL as exc:
        raise ConfigError(f"Invalid host {value!r}: {exc}") from None
    if not url.host:
        raise ConfigError(f"Invalid host {value!r}: missing hostname")
    return host


def normalize_timeout(value: Any) -> int | float:
    """Normalize timeout to int/float and reject invalid values."""
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            raise ConfigError(f"Timeout must be a number: {value!r}") from None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError("Timeout must be a non-negative finite number")
    numeric = float(value)
    if not math.isfinite(numeric) or numeric < 0:
        raise ConfigError("Timeout must be a non-negative finite number")
    if numeric.is_integer():
        return int(numeric)
    return numeric


def normalize_retry_attempts(value: Any) -> int:
    try:
        attempts = int(str(value).strip())
    except ValueError:
        raise ConfigError(f"Retry attempts must be an integer: {value!r}") from None
    if attempts < 1:
        raise ConfigError("Retry attempts must be at least 1")
    return attempts


def _env_or_none(env: Mapping[str, str], name: str) -> Optional[str]:
    value = (env.get(name) or "").strip()
    return value or None


def resolve_config(
    host: Optional[str] = None,
    timeout: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
) -> ClientConfig:
    """Resolve settings: explicit flag, then environment, then default."""
    env = os.environ if env is None else env

    raw_host = host if host is not None else _env_or_none(env, ENV_HOST)
    raw_timeout = timeout if timeout is not None else _env_or_none(env, ENV_TIMEOUT)
    raw_attempts = _env_or_none(env, ENV_RETRY_ATTEMPTS)

    return ClientConfig(
        host=normalize_host(raw_host if raw_host is not None else DEFAULT_HOST),
        timeout=(
            normalize_timeout(raw_timeout) if raw_timeout is not None else DEFAULT_TIMEOUT_SEC
        ),
        retry_attempts=(
            normalize_retry_attempts(raw_attempts)
            if raw_attempts is not None
            else DEFAULT_RETRY_ATTEMPTS
        ),
    )


def build_httpx_timeout(read_timeout_sec: int | float) -> httpx.Timeout | None:
    """Build httpx timeout config; 0 means wait forever."""
    if read_timeout_sec <= 0:
        return None
    return httpx.Timeout(
        connect=min(HTTP_CONNECT_TIMEOUT_SEC, float(read_timeout_sec)),
        read=float(read_timeout_sec),
        write=HTTP_WRITE_TIMEOUT_SEC,
        pool=HTTP_POOL_TIMEOUT_SEC,
    )
