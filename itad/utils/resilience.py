"""Resilience utilities around address verification.

Provides input sanitization, retry logic and a circuit breaker for the
caller-side geocoder fetch, plus an in-memory audit log of verifications.
"""

import asyncio
import logging
import time
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


# ============================================================================
# Circuit Breaker
# ============================================================================


class CircuitState(str, Enum):
    """Circuit breaker states."""
    CLOSED = "closed"      # Normal operation
    OPEN = "open"          # Failing, rejecting calls
    HALF_OPEN = "half_open"  # Testing if service recovered


class CircuitOpenError(Exception):
    """Raised when a call is attempted while the circuit is open."""


@dataclass
class CircuitBreaker:
    """Circuit breaker for a flaky upstream such as a public geocoder.

    Usage:
        breaker = CircuitBreaker(name="nominatim", threshold=3, reset_timeout=300)

        if breaker.is_available():
            try:
                hits = await fetch_candidates(address)
                breaker.record_success()
            except Exception:
                breaker.record_failure()
                raise
    """
    name: str
    threshold: int = 3
    reset_timeout: int = 300  # seconds

    # Internal state
    _failures: int = field(default=0, init=False)
    _last_failure_time: float = field(default=0.0, init=False)
    _state: CircuitState = field(default=CircuitState.CLOSED, init=False)

    @property
    def state(self) -> CircuitState:
        return self._state

    def is_available(self) -> bool:
        """Check if circuit allows calls."""
        if self._state == CircuitState.OPEN:
            if time.monotonic() - self._last_failure_time >= self.reset_timeout:
                self._state = CircuitState.HALF_OPEN
                logger.info(f"Circuit '{self.name}' transitioning to HALF_OPEN")
                return True
            return False
        return True

    def record_success(self) -> None:
        """Record a successful call."""
        if self._state == CircuitState.HALF_OPEN:
            logger.info(f"Circuit '{self.name}' CLOSED after recovery")
        self._state = CircuitState.CLOSED
        self._failures = 0

    def record_failure(self) -> None:
        """Record a failed call."""
        self._failures += 1
        self._last_failure_time = time.monotonic()

        if self._state == CircuitState.HALF_OPEN:
            self._state = CircuitState.OPEN
            logger.warning(f"Circuit '{self.name}' back to OPEN after failed recovery")
        elif self._failures >= self.threshold and self._state != CircuitState.OPEN:
            self._state = CircuitState.OPEN
            logger.warning(f"Circuit '{self.name}' OPENED after {self._failures} failures")

    def get_state(self) -> dict[str, Any]:
        """Get circuit state for monitoring."""
        return {
            "name": self.name,
            "state": self._state.value,
            "failures": self._failures,
            "threshold": self.threshold,
        }


async def retry_with_backoff(
    func: Callable[..., T],
    *args,
    max_retries: int = 2,
    backoff_base: float = 0.5,
    retryable_exceptions: tuple = (ConnectionError, TimeoutError, asyncio.TimeoutError),
    **kwargs,
) -> T:
    """Retry an async function with linear backoff.

    Args:
        func: Async function to retry
        max_retries: Maximum retry attempts
        backoff_base: Base delay in seconds (multiplied by attempt number)
        retryable_exceptions: Tuple of exceptions that trigger retry

    Returns:
        Result from successful function call

    Raises:
        Last exception if all retries exhausted
    """
    last_exception = None
    name = getattr(func, "__name__", repr(func))

    for attempt in range(max(0, max_retries) + 1):
        try:
            return await func(*args, **kwargs)
        except retryable_exceptions as e:
            last_exception = e
            if attempt < max_retries:
                delay = backoff_base * (attempt + 1)
                logger.warning(
                    f"Retry {attempt + 1}/{max_retries} for {name} "
                    f"after {type(e).__name__}: {e}. Waiting {delay}s"
                )
                await asyncio.sleep(delay)
            else:
                logger.error(
                    f"All {max_retries} retries exhausted for {name}: {e}"
                )

    raise last_exception


# ============================================================================
# Audit Logging
# ============================================================================


@dataclass
class VerificationAuditEntry:
    """Single verification audit entry for tracking and debugging."""
    timestamp: datetime
    postcode: str
    country: str
    country_code: str | None
    blocked: bool
    errors: list[str]
    warnings: list[str]
    candidates: int
    source: str  # "api", "nominatim", "scheduler"

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "postcode": self.postcode,
            "country": self.country[:50],
            "country_code": self.country_code,
            "blocked": self.blocked,
            "errors": self.errors,
            "warnings": self.warnings,
            "candidates": self.candidates,
            "source": self.source,
        }


def _empty_stats() -> dict[str, Any]:
    return {
        "total_verifications": 0,
        "total_blocked": 0,
        "total_with_warnings": 0,
        "errors_by_field": {},
        "warnings_by_field": {},
        "by_source": {},
    }


class VerificationAuditLog:
    """Ring buffer audit log for verification results.

    Keeps the last N entries plus running counters for monitoring.
    """

    def __init__(self, max_entries: int = 1000):
        self._entries: deque[VerificationAuditEntry] = deque(maxlen=max_entries)
        self._stats = _empty_stats()

    def log(self, entry: VerificationAuditEntry) -> None:
        """Add an entry to the audit log."""
        self._entries.append(entry)
        self._update_stats(entry)

        logger.debug(
            f"AUDIT: {entry.postcode} ({entry.country_code or '?'}) "
            f"blocked={entry.blocked} errors={entry.errors} [{entry.source}]"
        )

    def _update_stats(self, entry: VerificationAuditEntry) -> None:
        self._stats["total_verifications"] += 1
        if entry.blocked:
            self._stats["total_blocked"] += 1
        if entry.warnings:
            self._stats["total_with_warnings"] += 1
        for name in entry.errors:
            self._stats["errors_by_field"][name] = self._stats["errors_by_field"].get(name, 0) + 1
        for name in entry.warnings:
            self._stats["warnings_by_field"][name] = self._stats["warnings_by_field"].get(name, 0) + 1
        self._stats["by_source"][entry.source] = self._stats["by_source"].get(entry.source, 0) + 1

    def get_recent(self, count: int = 10) -> list[dict[str, Any]]:
        """Get the most recent entries."""
        entries = list(self._entries)[-count:]
        return [e.to_dict() for e in entries]

    def get_stats(self) -> dict[str, Any]:
        """Get aggregate statistics."""
        total = self._stats["total_verifications"]
        return {
            **self._stats,
            "blocked_rate": self._stats["total_blocked"] / total if total > 0 else 0,
        }

    def clear(self) -> None:
        """Clear the audit log."""
        self._entries.clear()
        self._stats = _empty_stats()


def audit_entry(result, address, candidates: int, source: str) -> VerificationAuditEntry:
    """Build an audit entry from a VerificationResult and its AddressInput."""
    return VerificationAuditEntry(
        timestamp=datetime.now(timezone.utc),
        postcode=address.postcode,
        country=address.country,
        country_code=result.country_code.value if result.country_code else None,
        blocked=result.blocked,
        errors=[name for name, v in result.verdicts.items() if v.is_error],
        warnings=result.warnings,
        candidates=candidates,
        source=source,
    )


# ============================================================================
# Input Sanitization
# ============================================================================


def sanitize_address_input(
    value: str,
    max_length: int = 200,
    strip_control_chars: bool = True,
) -> str:
    """Sanitize one address field before verification.

    Args:
        value: Raw field input
        max_length: Maximum allowed length
        strip_control_chars: Remove control characters

    Returns:
        Sanitized string
    """
    if not value:
        return ""

    result = value[:max_length]

    # Keep printable characters (including accented and non-Latin letters)
    if strip_control_chars:
        result = "".join(
            char for char in result
            if char.isprintable() or char in (" ", "\t")
        )

    result = " ".join(result.split())

    return result.strip()
