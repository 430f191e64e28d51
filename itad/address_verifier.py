"""Field-by-field verification of a typed address against geocoder results.

The verifier is a pure function of its inputs: it performs no I/O, holds
no per-call state, and never raises on malformed input. Anything that
cannot be evaluated degrades to an OK verdict ("no opinion"), while
structurally wrong values and cross-country postcode collisions produce
blocking errors.

Steps, in order:
1. Postcode format check (hard prerequisite).
2. Bail out with no opinion when neither city nor country is given.
3. Resolve the country; unknown countries skip candidate comparison.
4. Filter candidates to that country and handle "not found" cases.
5. Compare county, city (county-corroborated) and street.
6. Take coordinates from the best candidate.
"""

import logging
from collections.abc import Sequence

from itad.address_models import (
    AddressInput,
    FieldKind,
    FieldVerdict,
    GeoCandidate,
    MatchThresholds,
    VerificationResult,
)
from itad.candidate_filter import (
    candidate_country,
    filter_by_country,
    sample_diagnostics,
)
from itad.config import cfg
from itad.countries import CountryCode, country_name
from itad.country_normalizer import normalize_country
from itad.postcode_validator import is_valid_postcode
from itad.text_matcher import (
    is_obviously_invalid,
    matches_any,
    street_confidence,
)

logger = logging.getLogger(__name__)

# Maximum number of expected names quoted in a diagnostic reason
_MAX_REASON_NAMES = 5


def _dedupe(values: list[str]) -> list[str]:
    seen: set[str] = set()
    result = []
    for value in values:
        key = value.strip().lower()
        if key and key not in seen:
            seen.add(key)
            result.append(value.strip())
    return result


def _quote(names: list[str]) -> str:
    return ", ".join(names[:_MAX_REASON_NAMES])


class AddressVerifier:
    """Produce per-field verdicts for one collection address.

    Instances are immutable after construction and safe to share across
    threads.
    """

    def __init__(self, thresholds: MatchThresholds | None = None):
        """Initialize the verifier.

        Args:
            thresholds: Matching thresholds; defaults to configuration.
        """
        self.thresholds = thresholds or cfg.match_thresholds()

    def verify(
        self,
        address: AddressInput,
        candidates: Sequence[GeoCandidate],
    ) -> VerificationResult:
        """Verify an address against geocoder candidates for its postcode.

        Args:
            address: Address as typed by the user.
            candidates: Parsed geocoder hits for the postcode, in provider order.

        Returns:
            VerificationResult; ``blocked`` is true iff any field is an error.
        """
        candidates = list(candidates)

        # Step 1: Postcode format is a hard prerequisite
        if not is_valid_postcode(address.postcode, address.country):
            result = VerificationResult(
                postcode=FieldVerdict.error(
                    f"postcode '{address.postcode}' has an invalid format"
                    + (f" for {address.country}" if address.country else "")
                ),
            )
            self._log(address, result)
            return result

        # Step 2: Nothing meaningful to verify yet
        if not address.city.strip() and not address.country.strip():
            return VerificationResult()

        structural = self._structural_verdicts(address)
        target = normalize_country(address.country)

        # Step 3: Unknown country - no opinion on anything we would compare
        if target is None:
            result = VerificationResult(
                **structural,
                diagnostics={"country_resolved": False, "candidates": len(candidates)},
            )
            self._log(address, result)
            return result

        # Step 4: Restrict candidates to the stated country
        filtered = filter_by_country(candidates, target)
        diagnostics = {
            "country_resolved": True,
            "candidates": len(candidates),
            "candidates_in_country": len(filtered),
        }

        if not candidates:
            # Geocoder may simply lack coverage: no data is not wrong data
            result = VerificationResult(
                **structural,
                postcode=FieldVerdict.warning("postcode not found"),
                country_code=target,
                diagnostics=diagnostics,
            )
            self._log(address, result)
            return result

        if not filtered:
            result = VerificationResult(
                **structural,
                postcode=FieldVerdict.error(
                    f"postcode not found in {country_name(target)}"
                ),
                country_code=target,
                diagnostics={**diagnostics, **sample_diagnostics(candidates)},
            )
            self._log(address, result)
            return result

        # Step 5: Compare fields against candidates in the right country
        county, county_matched = self._verify_county(address.county, filtered)
        city = self._verify_city(address.city, filtered, county_matched)
        street = self._verify_street(address.street, filtered[0])
        country = self._verify_country(filtered, target)
        diagnostics["county_matched"] = county_matched

        # Step 6: Coordinates from the best candidate
        best = filtered[0]

        result = VerificationResult(
            street=street,
            city=city,
            county=county,
            postcode=FieldVerdict.ok(),
            country=country,
            coordinates=(best.lat, best.lng),
            country_code=target,
            diagnostics=diagnostics,
        )
        self._log(address, result)
        return result

    def _structural_verdicts(self, address: AddressInput) -> dict[str, FieldVerdict]:
        """Verdicts that depend only on the typed values, not on candidates."""
        verdicts = {}
        if address.city.strip() and is_obviously_invalid(address.city, FieldKind.CITY, self.thresholds):
            verdicts["city"] = FieldVerdict.error(f"'{address.city}' is not a city name")
        if address.county.strip() and is_obviously_invalid(address.county, FieldKind.COUNTY, self.thresholds):
            verdicts["county"] = FieldVerdict.error(f"'{address.county}' is not a county name")
        if address.street.strip() and is_obviously_invalid(address.street, FieldKind.STREET, self.thresholds):
            # House and plot numbers can legitimately be numeric
            verdicts["street"] = FieldVerdict.warning(f"unusual street value '{address.street}'")
        return verdicts

    def _verify_county(
        self,
        county: str,
        candidates: list[GeoCandidate],
    ) -> tuple[FieldVerdict, bool]:
        """Check the county against every administrative area name.

        Returns:
            (verdict, matched) where matched feeds the city corroboration rule.
        """
        if not county.strip():
            return FieldVerdict.ok(), False
        if is_obviously_invalid(county, FieldKind.COUNTY, self.thresholds):
            return FieldVerdict.error(f"'{county}' is not a county name"), False

        names = _dedupe([n for c in candidates for n in c.county_names])
        if not names:
            return FieldVerdict.ok(), False
        if matches_any(county, names, self.thresholds):
            return FieldVerdict.ok(), True
        return FieldVerdict.warning(f"county '{county}' not in [{_quote(names)}]"), False

    def _verify_city(
        self,
        city: str,
        candidates: list[GeoCandidate],
        county_matched: bool,
    ) -> FieldVerdict:
        """Check the city against every settlement name for the postcode.

        A postcode area can span several settlements, so a matching county
        is enough corroboration when the city itself is not listed.
        """
        if not city.strip():
            return FieldVerdict.ok()
        if is_obviously_invalid(city, FieldKind.CITY, self.thresholds):
            return FieldVerdict.error(f"'{city}' is not a city name")

        names = _dedupe(
            [n for c in candidates for n in c.city_names]
            + [c.display_first_line for c in candidates]
        )
        if matches_any(city, names, self.thresholds):
            return FieldVerdict.ok()
        if county_matched:
            logger.debug(f"City '{city}' accepted on county match")
            return FieldVerdict.ok()
        return FieldVerdict.warning(f"city '{city}' not in [{_quote(names)}]")

    def _verify_street(self, street: str, best: GeoCandidate) -> FieldVerdict:
        """Grade the street against the best candidate's road. Never blocks."""
        if not street.strip():
            return FieldVerdict.ok()
        if is_obviously_invalid(street, FieldKind.STREET, self.thresholds):
            return FieldVerdict.warning(f"unusual street value '{street}'")

        match = street_confidence(street, best.road, self.thresholds)
        if match.match:
            return FieldVerdict.ok()
        return FieldVerdict.warning(
            f"street '{street}' vs road '{best.road or ''}': "
            f"{match.confidence.value} confidence (score {match.score})"
        )

    def _verify_country(
        self,
        candidates: list[GeoCandidate],
        target: CountryCode,
    ) -> FieldVerdict:
        """Re-check country identity after filtering."""
        mismatched = [c for c in candidates if candidate_country(c) != target]
        if mismatched:
            logger.error(
                f"{len(mismatched)} candidates outside {target.value} survived filtering"
            )
            return FieldVerdict.error(f"candidate country disagrees with {target.value}")
        return FieldVerdict.ok()

    @staticmethod
    def _log(address: AddressInput, result: VerificationResult) -> None:
        summary = " ".join(
            f"{name}={v.severity.value}" for name, v in result.verdicts.items()
        )
        logger.debug(
            f"Verified '{address.postcode}' ({address.country or '?'}): "
            f"{summary} blocked={result.blocked}"
        )


_default_verifier: AddressVerifier | None = None


def verify_address(
    address: AddressInput,
    candidates: Sequence[GeoCandidate],
) -> VerificationResult:
    """Verify with a shared default-configured verifier."""
    global _default_verifier
    if _default_verifier is None:
        _default_verifier = AddressVerifier()
    return _default_verifier.verify(address, candidates)
