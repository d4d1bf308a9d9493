"""
Tests for the retry policies.
"""

import asyncio

import httpx
import pytest

from bank_api.domain.exceptions import (
    BusinessValidationException,
    DataMappingException,
    StorageUnavailableException,
)
from bank_api.infrastructure.retry_policy import (
    RetryPolicy,
    is_transient_http_error,
    is_transient_storage_error,
)


class FlakyOperation:
    """Fails a fixed number of times, then returns a value."""

    def __init__(self, failures: int, error: Exception, result="ok"):
        self.failures = failures
        self.error = error
        self.result = result
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return self.result


def http_status_error(status_code: int) -> httpx.HTTPStatusError:
    request = httpx.Request("GET", "https://transactions.test/api/transactions/1")
    response = httpx.Response(status_code, request=request)
    return httpx.HTTPStatusError("error", request=request, response=response)


class TestRetryPolicy:
    """Tests for the database retry policy."""

    @pytest.mark.asyncio
    async def test_success_first_attempt(self, retry_policy, recording_sleep):
        operation = FlakyOperation(failures=0, error=ConnectionError("down"))

        result = await retry_policy.execute(operation, "load")

        assert result == "ok"
        assert operation.calls == 1
        assert recording_sleep.delays == []

    @pytest.mark.asyncio
    async def test_recovers_after_transient_failures(self, retry_policy, recording_sleep):
        operation = FlakyOperation(failures=2, error=ConnectionError("blip"))

        result = await retry_policy.execute(operation, "load")

        assert result == "ok"
        assert operation.calls == 3
        assert recording_sleep.delays == [0.5, 1.0]

    @pytest.mark.asyncio
    async def test_exhaustion_raises_storage_unavailable(self, retry_policy):
        error = ConnectionError("database unreachable")
        operation = FlakyOperation(failures=10, error=error)

        with pytest.raises(StorageUnavailableException) as exc_info:
            await retry_policy.execute(operation, "load_accounts")

        assert operation.calls == 3
        assert exc_info.value.attempts == 3
        assert exc_info.value.error_code == "DATA_ACCESS_ERROR"
        assert exc_info.value.__cause__ is error
        assert "load_accounts" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_domain_errors_are_not_retried(self, retry_policy):
        operation = FlakyOperation(
            failures=1, error=DataMappingException("type", 9, "unknown account type code")
        )

        with pytest.raises(DataMappingException):
            await retry_policy.execute(operation, "load")

        assert operation.calls == 1

    @pytest.mark.asyncio
    async def test_retry_is_logged(self, retry_policy, caplog):
        operation = FlakyOperation(failures=1, error=ConnectionError("blip"))

        with caplog.at_level("WARNING"):
            await retry_policy.execute(operation, "load")

        assert "Retrying (1/3) after 500ms" in caplog.text

    def test_compute_delay(self):
        policy = RetryPolicy("test", base_delay_ms=500)

        assert [policy.compute_delay(n) for n in (1, 2, 3)] == [0.5, 1.0, 2.0]

    def test_invalid_max_attempts(self):
        with pytest.raises(ValueError):
            RetryPolicy("test", max_attempts=0)


class TestHttpRetryPolicy:
    """Tests for the remote API retry policy."""

    @pytest.mark.parametrize("status_code", [408, 429, 500, 502, 503])
    def test_transient_statuses(self, status_code):
        assert is_transient_http_error(http_status_error(status_code)) is True

    @pytest.mark.parametrize("status_code", [400, 401, 404, 422])
    def test_non_transient_statuses(self, status_code):
        assert is_transient_http_error(http_status_error(status_code)) is False

    def test_transport_errors_are_transient(self):
        assert is_transient_http_error(httpx.ConnectTimeout("timeout")) is True
        assert is_transient_http_error(httpx.ConnectError("refused")) is True

    def test_storage_predicate_excludes_domain_errors(self):
        assert is_transient_storage_error(RuntimeError("boom")) is True
        assert is_transient_storage_error(BusinessValidationException("bad")) is False

    @pytest.mark.asyncio
    async def test_http_policy_retries_429(self, recording_sleep):
        policy = RetryPolicy.for_http("api", base_delay_ms=500, sleep=recording_sleep)
        operation = FlakyOperation(failures=2, error=http_status_error(429))

        assert await policy.execute(operation, "GET") == "ok"
        assert operation.calls == 3
        assert policy.timeout_seconds == 30

    @pytest.mark.asyncio
    async def test_http_policy_does_not_retry_client_errors(self, recording_sleep):
        policy = RetryPolicy.for_http("api", sleep=recording_sleep)
        operation = FlakyOperation(failures=5, error=http_status_error(400))

        with pytest.raises(httpx.HTTPStatusError):
            await policy.execute(operation, "GET")

        assert operation.calls == 1


class TestRetryTimeout:
    """Tests for the overall timeout of a policy."""

    @pytest.mark.asyncio
    async def test_hanging_attempt_is_cancelled(self, recording_sleep):
        policy = RetryPolicy("slow_api", timeout_seconds=0.05, sleep=recording_sleep)
        cancelled = asyncio.Event()

        async def hang():
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.set()
                raise

        with pytest.raises(StorageUnavailableException) as exc_info:
            await policy.execute(hang, "hang")

        assert cancelled.is_set()
        assert exc_info.value.attempts == 1
        assert "timed out" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_fast_operation_within_timeout(self, recording_sleep):
        policy = RetryPolicy("fast_api", timeout_seconds=5, sleep=recording_sleep)
        operation = FlakyOperation(failures=1, error=ConnectionError("blip"))

        assert await policy.execute(operation, "load") == "ok"
        assert operation.calls == 2
