# src/retry/engine.py — v1
"""Policy-driven retry with fixed, linear, exponential and jittered backoff.

Each failure domain owns a RetryPolicy (see retry/policies.py). The engine
runs the operation up to max_retries + 1 times, asks the policy whether a
failure is worth another attempt, and sleeps between attempts.
asyncio.CancelledError is a BaseException and is never classified.
"""

from __future__ import annotations

import asyncio
import logging
import random
import time
from typing import Awaitable, Callable, TypeVar

from linkrepair.retry.models import BackoffType, RetryContext, RetryPolicy

logger = logging.getLogger(__name__)

T = TypeVar("T")

RetryObserver = Callable[[RetryContext], None]


class RetryExhaustedError(Exception):
    """All attempts allowed by a policy failed."""

    def __init__(self, policy_name: str, attempts: int, last_error: BaseException):
        self.policy_name = policy_name
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"Operation failed after {attempts} attempts using policy "
            f"'{policy_name}': {last_error}"
        )


def is_retryable_error(error: BaseException) -> bool:
    """Generic transient-failure classifier for policies without a predicate."""
    if isinstance(error, TimeoutError):
        return True
    if isinstance(error, (ConnectionError, BlockingIOError)):
        return True
    msg = str(error).lower()
    if isinstance(error, OSError) and (
        "being used by another process" in msg or "sharing violation" in msg
    ):
        return True
    return False


def compute_delay(
    policy: RetryPolicy, attempt_index: int, rng: random.Random | None = None,
) -> float:
    """Delay in seconds before the attempt following attempt_index (0-based)."""
    base = policy.base_delay_s
    if policy.backoff_type is BackoffType.FIXED:
        delay = base
    elif policy.backoff_type is BackoffType.LINEAR:
        delay = base * (attempt_index + 1)
    elif policy.backoff_type is BackoffType.EXPONENTIAL:
        delay = base * (policy.backoff_multiplier ** attempt_index)
    elif policy.backoff_type is BackoffType.EXPONENTIAL_WITH_JITTER:
        delay = _add_jitter(
            base * (policy.backoff_multiplier ** attempt_index),
            policy.jitter_max_percent,
            rng,
        )
    else:
        delay = base
    return min(delay, policy.max_delay_s)


def _add_jitter(
    delay: float, jitter_max_percent: float, rng: random.Random | None,
) -> float:
    if jitter_max_percent <= 0:
        return delay
    source = rng or random
    jitter = source.uniform(-jitter_max_percent, jitter_max_percent)  # noqa: S311
    return max(0.0, delay * (1 + jitter))


def _should_retry(error: BaseException, policy: RetryPolicy) -> bool:
    if policy.should_retry is not None:
        return policy.should_retry(error)
    return is_retryable_error(error)


async def execute_with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    observer: RetryObserver | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Run a zero-argument coroutine factory under a retry policy.

    Raises:
        RetryExhaustedError: If the final attempt fails with a retryable error.
        Exception: The original error when the policy rejects it.
        asyncio.CancelledError: Propagated untouched.
    """
    start = time.monotonic()
    max_attempts = policy.max_attempts
    last_error: BaseException | None = None

    for attempt in range(1, max_attempts + 1):
        _raise_if_cancelled()
        if attempt > 1:
            logger.info(
                "Retry attempt %d/%d for policy '%s'",
                attempt, max_attempts, policy.policy_name,
            )
        try:
            result = await operation()
        except Exception as e:
            last_error = e
            if not _should_retry(e, policy):
                logger.error(
                    "Operation failed with non-retryable %s using policy '%s'",
                    type(e).__name__, policy.policy_name,
                )
                raise

            context = RetryContext(
                attempt_number=attempt,
                max_attempts=max_attempts,
                elapsed_s=time.monotonic() - start,
                last_error=e,
                policy_name=policy.policy_name,
            )
            if context.is_last_attempt:
                logger.error(
                    "Operation failed after %d attempts using policy '%s'",
                    max_attempts, policy.policy_name,
                )
                raise RetryExhaustedError(policy.policy_name, max_attempts, e) from e

            _notify(observer, context)
            delay = compute_delay(policy, attempt - 1)
            logger.warning(
                "Policy '%s': attempt %d/%d failed (%s), retrying in %.3fs",
                policy.policy_name, attempt, max_attempts, e, delay,
            )
            _raise_if_cancelled()
            await sleep(delay)
        else:
            if attempt > 1:
                logger.info(
                    "Operation succeeded after %d attempts using policy '%s'",
                    attempt, policy.policy_name,
                )
            return result

    # Unreachable: the loop either returns or raises on the last attempt.
    raise RetryExhaustedError(
        policy.policy_name, max_attempts, last_error or RuntimeError("no attempts"),
    )


def _raise_if_cancelled() -> None:
    task = asyncio.current_task()
    if task is not None and task.cancelling():
        raise asyncio.CancelledError()


def _notify(observer: RetryObserver | None, context: RetryContext) -> None:
    if observer is None:
        return
    try:
        observer(context)
    except Exception:
        logger.warning("Retry observer raised, ignoring", exc_info=True)
