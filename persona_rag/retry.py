"""
Retry policy for transient backend failures.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

from persona_rag.config import Settings
from persona_rag.errors import TRANSIENT_ERRORS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    initial_wait: float = 1.0
    max_wait: float = 30.0
    jitter: float = 1.0

    @classmethod
    def from_settings(cls, config: Settings) -> "RetryPolicy":
        return cls(max_attempts=config.max_retries, initial_wait=config.retry_initial_wait_sec)

    @classmethod
    def immediate(cls, max_attempts: int = 3) -> "RetryPolicy":
        return cls(max_attempts=max_attempts, initial_wait=0.0, max_wait=0.0, jitter=0.0)

    def retrying(self, operation: str) -> AsyncRetrying:
        def _log_retry(retry_state: RetryCallState) -> None:
            exc = retry_state.outcome.exception() if retry_state.outcome else None
            logger.warning(
                f"{operation} - Retry {retry_state.attempt_number}/{self.max_attempts} after {type(exc).__name__}",
                extra={"operation": operation, "error": str(exc)},
            )

        return AsyncRetrying(
            retry=retry_if_exception_type(TRANSIENT_ERRORS),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.initial_wait, max=self.max_wait) + wait_random(0, self.jitter),
            before_sleep=_log_retry,
            reraise=True,
        )


__all__ = ["RetryPolicy"]
