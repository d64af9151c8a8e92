from __future__ import annotations

import random
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Callable, Optional, TypeVar

from promptflow import config
from promptflow import logger as logger_mod

from .cancel import CancelToken
from .errors import is_retryable_llm_error

log = logger_mod.get_logger()

T = TypeVar("T")


@dataclass(frozen=True)
class RetryConfig:
    """Retry/backoff settings for chat calls.

    Notes:
    - `retries` counts additional attempts, so a call makes at most `retries + 1`.
    - Delay for attempt n is `min(max_delay_s, min_delay_s * 2**n + jitter)`.
    """

    retries: int = 2
    min_delay_s: float = 0.5
    max_delay_s: float = 8.0
    jitter_s: float = 0.25

    def __post_init__(self) -> None:
        # Clamp instead of raising to keep retry helpers low-friction.
        if self.retries < 0:
            object.__setattr__(self, "retries", 0)

        if self.min_delay_s < 0:
            object.__setattr__(self, "min_delay_s", 0.0)

        if self.jitter_s < 0:
            object.__setattr__(self, "jitter_s", 0.0)

        if self.max_delay_s < self.min_delay_s:
            object.__setattr__(self, "max_delay_s", float(self.min_delay_s))

    @classmethod
    def from_config(cls) -> "RetryConfig":
        return cls(
            retries=config.LLM_RETRIES,
            min_delay_s=config.LLM_MIN_DELAY_S,
            max_delay_s=config.LLM_MAX_DELAY_S,
        )


NO_RETRY = RetryConfig(retries=0, min_delay_s=0.0, max_delay_s=0.0, jitter_s=0.0)


def compute_backoff(attempt: int, retry: RetryConfig) -> float:
    """Exponential backoff with additive jitter, capped at `max_delay_s`."""

    exp = min(retry.max_delay_s, retry.min_delay_s * (2**attempt))
    jitter = random.random() * retry.jitter_s
    return min(retry.max_delay_s, exp + jitter)


def parse_retry_after(
    value: Optional[str],
    *,
    now: Optional[datetime] = None,
    cap_s: float = config.RETRY_AFTER_CAP_S,
) -> Optional[float]:
    """Parse a Retry-After header (delta-seconds or HTTP-date) into seconds."""

    if not value:
        return None
    value = value.strip()

    try:
        seconds = float(value)
    except ValueError:
        seconds = None

    if seconds is not None:
        if seconds < 0 or seconds != seconds:  # negative or NaN
            return None
        return min(cap_s, seconds)

    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        return None
    if when is None:
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)

    now = now or datetime.now(timezone.utc)
    delta = (when - now).total_seconds()
    if delta <= 0:
        return None
    return min(cap_s, delta)


def _sleep_with_backoff(
    *, wait: float, attempt: int, context: str, error: Exception, cancel: Optional[CancelToken]
) -> None:
    log.warning(
        f"⚠️ Retryable error while {context}; retrying in {wait:.2f}s "
        f"(attempt {attempt + 1}): {error}"
    )
    if cancel is None:
        time.sleep(wait)
        return
    if cancel.wait(wait):
        cancel.raise_if_cancelled()


def execute_with_retry(
    fn: Callable[[int], T],
    *,
    context: str,
    retry: RetryConfig | None = None,
    is_retryable: Callable[[Exception], bool] = is_retryable_llm_error,
    delay_for: Optional[Callable[[Exception, int], Optional[float]]] = None,
    cancel: Optional[CancelToken] = None,
) -> T:
    """Call ``fn(attempt)`` until it succeeds, a non-retryable error occurs,
    or ``retry.retries`` additional attempts are used up.

    ``delay_for`` may return an explicit wait (e.g. from Retry-After) that
    overrides the computed backoff; returning None keeps the backoff.
    Exhausting retries re-raises the last error unchanged.
    """

    retry = retry or RetryConfig()
    last_error: Exception | None = None

    for attempt in range(retry.retries + 1):
        if cancel is not None:
            cancel.raise_if_cancelled()

        try:
            return fn(attempt)

        except Exception as e:
            last_error = e

            if (not is_retryable(e)) or attempt == retry.retries:
                log.error(
                    f"❌ Giving up while {context} "
                    f"(attempt {attempt + 1}/{retry.retries + 1}): {e}"
                )
                raise

            wait = delay_for(e, attempt) if delay_for is not None else None
            if wait is None:
                wait = compute_backoff(attempt, retry)

            _sleep_with_backoff(
                wait=wait, attempt=attempt, context=context, error=e, cancel=cancel
            )

    # Unreachable: the loop always returns or raises
    if last_error:
        raise last_error
    raise RuntimeError(f"Unknown error while {context}")
