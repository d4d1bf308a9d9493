"""
Retry policies for storage and remote API calls.

Wraps a single storage or network call in an exponential-backoff retry loop
(tenacity). Business validation never runs inside a policy, so only
infrastructure failures are retried.

Delay before retry ``n`` (counted from 1) is ``base_delay * 2 ** (n - 1)``.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception,
    stop_after_attempt,
    stop_after_delay,
    wait_exponential,
)

from ..domain.exceptions import BankingException, StorageUnavailableException
from ..metrics import storage_failures_total, storage_retries_total

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BASE_DELAY_MS = 500
DEFAULT_HTTP_TIMEOUT_SECONDS = 30

RETRYABLE_STATUS_CODES = frozenset({408, 429})


def is_transient_storage_error(exc: BaseException) -> bool:
    """Database-backed policies retry anything that is not a domain error."""
    return isinstance(exc, Exception) and not isinstance(exc, BankingException)


def is_transient_http_error(exc: BaseException) -> bool:
    """Network failures, timeouts, 408, 429 and 5xx responses are transient."""
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return status in RETRYABLE_STATUS_CODES or status >= 500
    return False


class RetryPolicy:
    """
    Exponential-backoff retry wrapper for async storage calls.

    Attributes:
        name: Policy name used in logs and metrics
        max_attempts: Total attempts including the first one
        base_delay_ms: Delay before the first retry, in milliseconds
        timeout_seconds: Optional overall time budget across attempts
    """

    def __init__(
        self,
        name: str,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        base_delay_ms: int = DEFAULT_BASE_DELAY_MS,
        timeout_seconds: Optional[float] = None,
        retry_on: Callable[[BaseException], bool] = is_transient_storage_error,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.name = name
        self.max_attempts = max_attempts
        self.base_delay_ms = base_delay_ms
        self.timeout_seconds = timeout_seconds
        self._retry_on = retry_on
        self._sleep = sleep

    @classmethod
    def for_http(cls, name: str, **kwargs: Any) -> "RetryPolicy":
        """Policy for the remote REST API: transient HTTP errors and an overall timeout."""
        kwargs.setdefault("timeout_seconds", DEFAULT_HTTP_TIMEOUT_SECONDS)
        return cls(name, retry_on=is_transient_http_error, **kwargs)

    def compute_delay(self, attempt: int) -> float:
        """Delay in seconds before retry number ``attempt`` (1-based)."""
        return (self.base_delay_ms / 1000) * 2 ** (attempt - 1)

    def _log_retry(self, operation_name: str) -> Callable[[RetryCallState], None]:
        def before_sleep(retry_state: RetryCallState) -> None:
            delay = retry_state.next_action.sleep if retry_state.next_action else 0
            error = retry_state.outcome.exception() if retry_state.outcome else None
            storage_retries_total.labels(policy=self.name).inc()
            logger.warning(
                f"[{self.name}] {operation_name} failed: {error!r}. "
                f"Retrying ({retry_state.attempt_number}/{self.max_attempts}) "
                f"after {delay * 1000:.0f}ms"
            )

        return before_sleep

    def _retrying(self, operation_name: str) -> AsyncRetrying:
        stop = stop_after_attempt(self.max_attempts)
        if self.timeout_seconds:
            stop = stop | stop_after_delay(self.timeout_seconds)
        return AsyncRetrying(
            sleep=self._sleep,
            stop=stop,
            wait=wait_exponential(multiplier=self.base_delay_ms / 1000),
            retry=retry_if_exception(self._retry_on),
            before_sleep=self._log_retry(operation_name),
        )

    async def execute(
        self, operation: Callable[[], Awaitable[T]], operation_name: str = "operation"
    ) -> T:
        """
        Run ``operation`` under the policy.

        Args:
            operation: Zero-argument coroutine function performing one storage call
            operation_name: Label for logs

        Returns:
            The operation's result

        Raises:
            StorageUnavailableException: If every attempt failed with a retryable error,
                or the overall timeout elapsed
            Exception: Non-retryable errors propagate unchanged on first occurrence
        """
        logger.debug(f"[{self.name}] Executing {operation_name}")
        attempts = 0

        async def attempt() -> T:
            nonlocal attempts
            attempts += 1
            return await operation()

        retrying = self._retrying(operation_name)(attempt)
        try:
            if self.timeout_seconds:
                # Cancels an attempt or backoff sleep still running at the deadline.
                return await asyncio.wait_for(retrying, self.timeout_seconds)
            return await retrying
        except asyncio.TimeoutError as exc:
            storage_failures_total.labels(policy=self.name).inc()
            logger.error(
                f"[{self.name}] {operation_name} timed out after {self.timeout_seconds}s "
                f"({attempts} attempt(s))"
            )
            raise StorageUnavailableException(
                operation_name, attempts, reason=f"timed out after {self.timeout_seconds}s"
            ) from exc
        except RetryError as exc:
            last_error = exc.last_attempt.exception()
            attempts = exc.last_attempt.attempt_number
            storage_failures_total.labels(policy=self.name).inc()
            logger.error(
                f"[{self.name}] {operation_name} failed after {attempts} attempt(s): "
                f"{last_error!r}"
            )
            raise StorageUnavailableException(
                operation_name, attempts, reason=str(last_error) or type(last_error).__name__
            ) from last_error
