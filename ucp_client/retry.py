"""Bounded retry for transient failures."""

from __future__ import annotations

from typing import Tuple, Type

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from .exceptions import RateLimitError, TransportError
from .logging import logger

RETRYABLE = (TransportError, RateLimitError)
# a 429 is rejected before any write happens
REPLAY_SAFE = (RateLimitError,)
MAX_WAIT_SECONDS = 8.0


def _log_retry(state: RetryCallState) -> None:
    exc = state.outcome.exception() if state.outcome else None
    logger.warning(
        "ucp_retry",
        attempt=state.attempt_number,
        error=str(exc),
        sleep=state.next_action.sleep if state.next_action else 0,
    )


def retry_policy(
    max_retries: int,
    backoff: float = 0.5,
    retry_on: Tuple[Type[BaseException], ...] = RETRYABLE,
) -> AsyncRetrying:
    """Return a retrier allowing ``max_retries`` extra attempts.

    By default only :class:`TransportError` and :class:`RateLimitError` are
    retried; pass a narrower ``retry_on`` for requests that must not be
    replayed after a lost response. The last exception is re-raised once
    attempts run out.
    """
    return AsyncRetrying(
        retry=retry_if_exception_type(retry_on),
        stop=stop_after_attempt(max_retries + 1),
        wait=wait_exponential(multiplier=backoff, max=MAX_WAIT_SECONDS),
        before_sleep=_log_retry,
        reraise=True,
    )


__all__ = ["retry_policy", "RETRYABLE", "REPLAY_SAFE"]
