"""
Resilience Infrastructure.

Circuit breaker with structured state-change logging, used by the bot
gateway around the backend link. The breaker only fails fast while the
backend is down; it never retries a call, because a retried ProcessUpdate
would persist the same update twice.

Usage:
    from modules.backend.core.resilience import create_circuit_breaker

    breaker = create_circuit_breaker("backend", fail_max=5, reset_timeout_seconds=60)
    response = await breaker.call_async(client.post, "/api/v1/bot/process-update", json=body)
"""

from datetime import timedelta
from enum import Enum
from typing import Any

import aiobreaker

from modules.backend.core.logging import get_logger

logger = get_logger(__name__)


def _state_name(state: Any) -> str:
    """aiobreaker passes state objects; their .state is a CircuitBreakerState member."""
    inner = getattr(state, "state", state)
    if isinstance(inner, Enum):
        return inner.name.lower()
    return str(inner).lower()


class ResilienceLogger(aiobreaker.CircuitBreakerListener):
    """Circuit breaker listener that emits structured resilience events.

    Every state transition is logged with a standardized set of fields
    so that resilience events can be filtered and aggregated:

        jq 'select(.resilience_event != null)' logs/system.jsonl
    """

    def __init__(self, dependency: str) -> None:
        self.dependency = dependency

    def state_change(self, cb: aiobreaker.CircuitBreaker, old_state: Any, new_state: Any) -> None:
        old_name = _state_name(old_state)
        new_name = _state_name(new_state)
        log_level = "error" if new_name == "open" else "info"

        getattr(logger, log_level)(
            f"Circuit breaker {self.dependency}: {old_name} → {new_name}",
            extra={
                "resilience_event": f"circuit_breaker_{new_name}",
                "dependency": self.dependency,
                "failure_count": cb.fail_counter,
            },
        )

    def failure(self, cb: aiobreaker.CircuitBreaker, exception: Exception) -> None:
        logger.warning(
            f"Circuit breaker {self.dependency}: failure recorded",
            extra={
                "resilience_event": "circuit_breaker_failure",
                "dependency": self.dependency,
                "failure_count": cb.fail_counter,
                "error": str(exception),
            },
        )


def create_circuit_breaker(
    dependency: str,
    fail_max: int = 5,
    reset_timeout_seconds: int = 60,
    exclude: list[type[BaseException]] | None = None,
) -> aiobreaker.CircuitBreaker:
    """Create a circuit breaker with structured logging.

    Args:
        dependency: Name of the external dependency (for logging)
        fail_max: Number of consecutive failures before opening
        reset_timeout_seconds: Seconds to wait before the half-open test call
        exclude: Exception types that do not count as failures (client errors)

    Returns:
        Configured CircuitBreaker instance
    """
    return aiobreaker.CircuitBreaker(
        fail_max=fail_max,
        timeout_duration=timedelta(seconds=reset_timeout_seconds),
        exclude=exclude or [],
        listeners=[ResilienceLogger(dependency)],
        name=dependency,
    )
