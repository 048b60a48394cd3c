# src/retry/models.py — v1
"""Retry domain models: BackoffType, RetryPolicy, RetryContext."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable


class BackoffType(str, Enum):
    """Delay growth between attempts."""

    FIXED = "fixed"
    LINEAR = "linear"
    EXPONENTIAL = "exponential"
    EXPONENTIAL_WITH_JITTER = "exponential_with_jitter"


@dataclass(frozen=True)
class RetryPolicy:
    """Retry configuration for one failure domain.

    should_retry classifies a failure; None falls back to the generic
    transient-error classifier of the engine.
    """

    max_retries: int
    base_delay_s: float
    max_delay_s: float = 30.0
    backoff_type: BackoffType = BackoffType.EXPONENTIAL
    backoff_multiplier: float = 2.0
    jitter_max_percent: float = 0.1
    policy_name: str = "Custom"
    should_retry: Callable[[BaseException], bool] | None = None

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.base_delay_s < 0 or self.max_delay_s < 0:
            raise ValueError("delays must be >= 0")

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1


@dataclass(frozen=True)
class RetryContext:
    """Snapshot handed to retry observers after a failed attempt."""

    attempt_number: int
    max_attempts: int
    elapsed_s: float
    last_error: BaseException | None
    policy_name: str

    @property
    def is_last_attempt(self) -> bool:
        return self.attempt_number >= self.max_attempts
