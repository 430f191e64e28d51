"""Narrow geocoder candidates to a single country.

The same postcode string can exist in several countries (77120 is valid
in both France and Finland), so candidates must be restricted to the
target country before any field is compared against them.
"""

import logging
from collections.abc import Sequence
from typing import Any

from itad.address_models import GeoCandidate
from itad.countries import CountryCode
from itad.country_normalizer import normalize_country

logger = logging.getLogger(__name__)


def candidate_country(candidate: GeoCandidate) -> CountryCode | None:
    """Resolve a candidate's country, preferring the display name."""
    return normalize_country(candidate.country_name) or normalize_country(candidate.country_code)


def filter_by_country(
    candidates: Sequence[GeoCandidate],
    target: CountryCode,
) -> list[GeoCandidate]:
    """Keep only candidates located in the target country.

    Args:
        candidates: Raw geocoder candidates, in provider order.
        target: Country the user entered.

    Returns:
        Matching candidates, original order preserved.
    """
    kept = [c for c in candidates if candidate_country(c) == target]
    if candidates and not kept:
        logger.info(
            f"No candidates in {target.value} out of {len(candidates)} "
            f"(first is in '{candidates[0].country_name}')"
        )
    return kept


def sample_diagnostics(candidates: Sequence[GeoCandidate]) -> dict[str, Any]:
    """Describe where the first unfiltered candidate actually is.

    Used to explain a "postcode not found in this country" error.
    """
    if not candidates:
        return {}
    sample = candidates[0]
    code = candidate_country(sample)
    return {
        "found_country": sample.country_name,
        "found_country_code": code.value if code else sample.country_code,
        "found_county": sample.county or sample.state,
    }
