# src/retry/policies.py — v1
"""Built-in retry policies and the per-domain failure classifiers.

Domains: network/HTTP, file I/O, document format (OOXML packages) and
persistence. Each classifier answers one question: is another attempt
likely to succeed?
"""

from __future__ import annotations

import sqlite3
from typing import Callable

import httpx

from linkrepair.retry.models import BackoffType, RetryPolicy

_FILE_IN_USE_MARKERS = ("being used by another process", "sharing violation")

_DNS_FAILURE_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "getaddrinfo failed",
    "temporary failure in name resolution",
    "no address associated with hostname",
    "name resolution",
)

_RETRYABLE_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})


def _is_file_in_use(error: BaseException) -> bool:
    if not isinstance(error, OSError):
        return False
    msg = str(error).lower()
    return any(marker in msg for marker in _FILE_IN_USE_MARKERS)


def is_dns_failure(error: BaseException) -> bool:
    """True if a transport error was caused by host name resolution."""
    msg = str(error).lower()
    cause = error.__cause__ or error.__context__
    if cause is not None:
        msg = f"{msg} {str(cause).lower()}"
    return any(marker in msg for marker in _DNS_FAILURE_MARKERS)


def is_retryable_status(status_code: int) -> bool:
    """HTTP statuses worth another attempt: 408, 429 and every 5xx."""
    return status_code in _RETRYABLE_STATUS_CODES or status_code >= 500


def is_retryable_http_error(error: BaseException) -> bool:
    """Network/HTTP domain.

    DNS failures are not retried immediately; every other transport error
    is. Status errors are retried for 408, 429 and 5xx only.
    """
    if isinstance(error, (httpx.TimeoutException, TimeoutError)):
        return True
    if isinstance(error, httpx.HTTPStatusError):
        return is_retryable_status(error.response.status_code)
    if isinstance(error, httpx.ConnectError):
        return not is_dns_failure(error)
    if isinstance(error, httpx.UnsupportedProtocol):
        return False
    if isinstance(error, httpx.TransportError):
        return True
    if isinstance(error, ConnectionError):
        return not is_dns_failure(error)
    return False


def is_retryable_file_error(error: BaseException) -> bool:
    """File I/O domain: only a locked file is worth waiting for."""
    if isinstance(error, (FileNotFoundError, NotADirectoryError, IsADirectoryError)):
        return False
    return _is_file_in_use(error)


def is_retryable_document_error(error: BaseException) -> bool:
    """Document-format domain: corrupt packages never heal on their own."""
    return _is_file_in_use(error)


def is_retryable_persistence_error(error: BaseException) -> bool:
    """Persistence domain: lock contention and timeouts."""
    if isinstance(error, TimeoutError):
        return True
    msg = str(error).lower()
    if isinstance(error, sqlite3.OperationalError) and (
        "locked" in msg or "busy" in msg
    ):
        return True
    return "timeout" in msg


def create_http_policy() -> RetryPolicy:
    return RetryPolicy(
        max_retries=3,
        base_delay_s=0.5,
        max_delay_s=30.0,
        backoff_type=BackoffType.EXPONENTIAL_WITH_JITTER,
        backoff_multiplier=2.0,
        jitter_max_percent=0.2,
        policy_name="HTTP",
        should_retry=is_retryable_http_error,
    )


def create_file_policy() -> RetryPolicy:
    return RetryPolicy(
        max_retries=5,
        base_delay_s=0.1,
        max_delay_s=5.0,
        backoff_type=BackoffType.EXPONENTIAL,
        backoff_multiplier=1.5,
        jitter_max_percent=0.1,
        policy_name="File",
        should_retry=is_retryable_file_error,
    )


def create_document_policy() -> RetryPolicy:
    return RetryPolicy(
        max_retries=3,
        base_delay_s=0.2,
        max_delay_s=2.0,
        backoff_type=BackoffType.LINEAR,
        backoff_multiplier=1.0,
        jitter_max_percent=0.05,
        policy_name="Document",
        should_retry=is_retryable_document_error,
    )


def create_persistence_policy() -> RetryPolicy:
    return RetryPolicy(
        max_retries=3,
        base_delay_s=0.25,
        max_delay_s=10.0,
        backoff_type=BackoffType.EXPONENTIAL_WITH_JITTER,
        backoff_multiplier=2.5,
        jitter_max_percent=0.3,
        policy_name="Persistence",
        should_retry=is_retryable_persistence_error,
    )


def create_custom_policy(
    max_retries: int,
    base_delay_s: float,
    backoff_type: BackoffType = BackoffType.EXPONENTIAL,
    should_retry: Callable[[BaseException], bool] | None = None,
    policy_name: str = "Custom",
) -> RetryPolicy:
    """Ad-hoc policy; retries every Exception unless should_retry says otherwise."""
    return RetryPolicy(
        max_retries=max_retries,
        base_delay_s=base_delay_s,
        backoff_type=backoff_type,
        policy_name=policy_name,
        should_retry=should_retry or (lambda _: True),
    )


BUILTIN_POLICIES: dict[str, Callable[[], RetryPolicy]] = {
    "http": create_http_policy,
    "file": create_file_policy,
    "document": create_document_policy,
    "persistence": create_persistence_policy,
}
