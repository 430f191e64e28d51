"""Caller-side scheduling of address verification.

The verifier itself is pure; this module wraps it for interactive use
where the user keeps typing:

- rapid edits are debounced before any geocoder request is made;
- only the latest submission may produce an applicable result. A
  submission superseded while debouncing or fetching is reported as
  SUPERSEDED and its result discarded;
- a failing or unavailable geocoder never blocks the user: verification
  is skipped and submission allowed (fail-open).
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from enum import Enum

from itad.address_models import AddressInput, GeoCandidate, VerificationResult
from itad.address_verifier import AddressVerifier
from itad.config import cfg
from itad.postcode_validator import is_valid_postcode
from itad.utils.resilience import (
    CircuitBreaker,
    CircuitOpenError,
    retry_with_backoff,
)

logger = logging.getLogger(__name__)

CandidateFetcher = Callable[[AddressInput], Awaitable[Sequence[GeoCandidate]]]


class ScheduleOutcome(str, Enum):
    """What happened to one submission."""

    APPLIED = "applied"         # Latest submission, result may be shown
    SUPERSEDED = "superseded"   # A newer submission started; discard
    SKIPPED = "skipped"         # Geocoder unavailable; allow submission


@dataclass(slots=True, frozen=True)
class ScheduledVerification:
    """Outcome of a scheduled verification."""

    outcome: ScheduleOutcome
    result: VerificationResult | None = None
    error: str | None = None

    @property
    def blocked(self) -> bool:
        """Only an applied result can block submission."""
        return (
            self.outcome == ScheduleOutcome.APPLIED
            and self.result is not None
            and self.result.blocked
        )


class LatestRequestGate:
    """Single-slot generation counter: the newest request wins.

    Each ``begin()`` invalidates every earlier token, so a slow response
    can be recognized as stale instead of overwriting a newer one.
    """

    def __init__(self):
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    def begin(self) -> int:
        """Start a new request and return its token."""
        self._generation += 1
        return self._generation

    def is_current(self, token: int) -> bool:
        return token == self._generation

    def invalidate(self) -> None:
        """Make every outstanding token stale (e.g. the form was reset)."""
        self._generation += 1


class VerificationScheduler:
    """Debounced, latest-wins, fail-open address verification.

    Args:
        fetch: Async callable returning parsed geocoder candidates for an
            address. Network concerns (HTTP, caching) live there.
        verifier: Verifier to run; defaults to a configured AddressVerifier.
        debounce_seconds: Quiet period before fetching.
        breaker: Circuit breaker guarding ``fetch``.
        max_retries: Retries for transient fetch errors.
        backoff_base: Base delay between retries, in seconds.
    """

    def __init__(
        self,
        fetch: CandidateFetcher,
        verifier: AddressVerifier | None = None,
        debounce_seconds: float | None = None,
        breaker: CircuitBreaker | None = None,
        max_retries: int | None = None,
        backoff_base: float = 0.5,
    ):
        self._fetch = fetch
        self._verifier = verifier or AddressVerifier()
        self._debounce = cfg.verify_debounce_seconds if debounce_seconds is None else debounce_seconds
        self._breaker = breaker or CircuitBreaker(
            name="geocoder",
            threshold=cfg.geocoder_breaker_threshold,
            reset_timeout=cfg.geocoder_breaker_reset_seconds,
        )
        self._max_retries = cfg.geocoder_max_retries if max_retries is None else max_retries
        self._backoff_base = backoff_base
        self._gate = LatestRequestGate()

    @property
    def gate(self) -> LatestRequestGate:
        return self._gate

    def cancel(self) -> None:
        """Discard any in-flight submission."""
        self._gate.invalidate()

    async def submit(self, address: AddressInput) -> ScheduledVerification:
        """Schedule verification of the latest form state.

        Args:
            address: Current address as typed.

        Returns:
            ScheduledVerification; only APPLIED results should be shown.
        """
        token = self._gate.begin()

        if self._debounce > 0:
            await asyncio.sleep(self._debounce)
        if not self._gate.is_current(token):
            return ScheduledVerification(ScheduleOutcome.SUPERSEDED)

        # No point asking the geocoder about a malformed postcode
        if not is_valid_postcode(address.postcode, address.country):
            return ScheduledVerification(
                ScheduleOutcome.APPLIED,
                result=self._verifier.verify(address, []),
            )

        try:
            candidates = await self._fetch_guarded(address)
        except Exception as e:
            if not self._gate.is_current(token):
                return ScheduledVerification(ScheduleOutcome.SUPERSEDED)
            logger.warning(
                f"Geocoder unavailable for '{address.postcode}', skipping verification: "
                f"{type(e).__name__}: {e}"
            )
            return ScheduledVerification(ScheduleOutcome.SKIPPED, error=str(e))

        if not self._gate.is_current(token):
            logger.debug(f"Discarding stale verification for '{address.postcode}'")
            return ScheduledVerification(ScheduleOutcome.SUPERSEDED)

        return ScheduledVerification(
            ScheduleOutcome.APPLIED,
            result=self._verifier.verify(address, candidates),
        )

    async def _fetch_guarded(self, address: AddressInput) -> list[GeoCandidate]:
        if not self._breaker.is_available():
            raise CircuitOpenError(f"Circuit '{self._breaker.name}' is open")
        try:
            candidates = await retry_with_backoff(
                self._fetch,
                address,
                max_retries=self._max_retries,
                backoff_base=self._backoff_base,
            )
        except Exception:
            self._breaker.record_failure()
            raise
        self._breaker.record_success()
        return list(candidates)
