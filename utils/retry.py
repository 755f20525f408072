"""
Fixed-delay retry policy for task API lookups.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from utils.errors import InvalidInputError

logger = logging.getLogger(__name__)

_T = TypeVar("_T")


@dataclass(frozen=True)
class RetryPolicy:
    """Retry any Exception except InvalidInputError, with a fixed delay.

    Cancellation is never retried.

    `max_retries` counts attempts after the first one; 0 means fail fast.
    The last error is re-raised unchanged once retries are exhausted.
    """

    max_retries: int = 0
    delay_seconds: float = 1.0
    operation: str = "request"

    async def run(self, fn: Callable[[], Awaitable[_T]]) -> _T:
        async for attempt in self._retrying():
            with attempt:
                return await fn()
        raise AssertionError("unreachable")  # pragma: no cover

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            retry=(
                retry_if_exception_type(Exception)
                & retry_if_not_exception_type(InvalidInputError)
            ),
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_fixed(self.delay_seconds),
            before_sleep=self._log_retry,
            reraise=True,
        )

    def _log_retry(self, retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            "Request error. Retrying in %dms... (Attempts left: %d)",
            int(self.delay_seconds * 1000),
            self.max_retries + 1 - retry_state.attempt_number,
            extra={"operation": self.operation, "error": repr(exc)},
        )
