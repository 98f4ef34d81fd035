"""
Resilience for remote calls.

Clients wrap every microservice request as

    circuit breaker (aiobreaker) → retry (tenacity) → timeout (httpx) → request

Breaker and retry events are logged with a `resilience_event` field so they
can be picked out of logs/system.jsonl:

    jq 'select(.resilience_event != null)' logs/system.jsonl
"""

from datetime import timedelta
from typing import Any

import aiobreaker
import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from newsdesk.backend.core.logging import get_logger

logger = get_logger(__name__)

# HTTP error statuses are answers, not outages; only these are retried
RETRYABLE_EXCEPTIONS: tuple[type[BaseException], ...] = (
    httpx.TransportError,
    ConnectionError,
    TimeoutError,
)

BREAKER_EVENTS = {
    "open": "circuit_breaker_opened",
    "half_open": "circuit_breaker_half_open",
    "closed": "circuit_breaker_closed",
}


def _state_name(state: Any) -> str:
    """Normalise aiobreaker states, enum members and plain strings to open/half_open/closed."""
    state = getattr(state, "state", state)
    return str(getattr(state, "name", state)).lower().replace("-", "_")


class ResilienceLogger(aiobreaker.CircuitBreakerListener):
    """Logs breaker transitions and recorded failures for one dependency."""

    def __init__(self, dependency: str) -> None:
        self.dependency = dependency

    def _extra(self, cb: aiobreaker.CircuitBreaker, event: str, **fields: Any) -> dict[str, Any]:
        return {
            "resilience_event": event,
            "dependency": self.dependency,
            "failure_count": cb.fail_counter,
            **fields,
        }

    def state_change(self, cb: aiobreaker.CircuitBreaker, old_state: Any, new_state: Any) -> None:
        name = _state_name(new_state)
        log = logger.error if name == "open" else logger.info
        log(
            f"Circuit breaker {self.dependency}: {name}",
            extra=self._extra(cb, BREAKER_EVENTS.get(name, f"circuit_breaker_{name}")),
        )

    def failure(self, cb: aiobreaker.CircuitBreaker, exception: Exception) -> None:
        logger.warning(
            f"Circuit breaker {self.dependency}: failure recorded",
            extra=self._extra(cb, "circuit_breaker_failure", error=str(exception)),
        )


def log_retry(retry_state: Any) -> None:
    """before_sleep hook for tenacity; retry_state is a RetryCallState."""
    duration_ms = None
    if retry_state.outcome_timestamp and retry_state.start_time:
        duration_ms = round((retry_state.outcome_timestamp - retry_state.start_time) * 1000)

    outcome = retry_state.outcome
    error = str(outcome.exception()) if outcome and outcome.failed else None
    operation = getattr(retry_state.fn, "__name__", "remote_call")

    logger.warning(
        f"Retrying {operation} (attempt {retry_state.attempt_number})",
        extra={
            "resilience_event": "retry_attempt",
            "dependency": operation,
            "attempt": retry_state.attempt_number,
            "duration_ms": duration_ms,
            "error": error,
        },
    )


def create_circuit_breaker(
    dependency: str,
    fail_max: int = 5,
    timeout_duration: int = 30,
) -> aiobreaker.CircuitBreaker:
    """
    Breaker that opens after `fail_max` consecutive failures and lets a
    trial call through after `timeout_duration` seconds.
    """
    return aiobreaker.CircuitBreaker(
        fail_max=fail_max,
        timeout_duration=timedelta(seconds=timeout_duration),
        listeners=[ResilienceLogger(dependency)],
        name=dependency,
    )


def create_retrying(
    max_attempts: int = 3,
    backoff_multiplier: int = 1,
    backoff_max: int = 10,
) -> AsyncRetrying:
    """A new controller per call; AsyncRetrying keeps per-call state."""
    return AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=backoff_multiplier, min=0, max=backoff_max),
        retry=retry_if_exception_type(RETRYABLE_EXCEPTIONS),
        before_sleep=log_retry,
        reraise=True,
    )
