"""Address verification data models and enums.

This module defines the value types passed through the verification
pipeline: the typed address, geocoder candidates, per-field verdicts and
the combined verification result. Every value is created fresh for one
verification call and never mutated afterwards.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from itad.countries import CountryCode
from itad.utils.resilience import sanitize_address_input


class VerdictSeverity(str, Enum):
    """Severity of a single field verdict."""

    OK = "ok"               # Plausible, or nothing to verify
    WARNING = "warning"     # Possibly wrong, submission still allowed
    ERROR = "error"         # Blocks submission


class FieldKind(str, Enum):
    """Address fields that are compared as free text."""

    STREET = "street"
    CITY = "city"
    COUNTY = "county"


class MatchConfidence(str, Enum):
    """Confidence level of a street name comparison."""

    STRONG = "strong"   # Enough independent word matches
    WEAK = "weak"       # Exactly one matching word
    NONE = "none"       # Nothing in common


@dataclass(slots=True, frozen=True)
class MatchThresholds:
    """Word-length thresholds used by the text matcher.

    Heuristic tuning values, read from configuration.

    Attributes:
        min_prefix_len: Minimum length of the shorter word for a prefix match.
        min_substring_len: Minimum length of the shorter word for containment.
        min_street_word_len: Street words shorter than this are ignored.
        street_min_strong_matches: Strong matches needed to accept a street.
        min_value_len: Values shorter than this are obviously invalid.
    """

    min_prefix_len: int = 4
    min_substring_len: int = 3
    min_street_word_len: int = 3
    street_min_strong_matches: int = 2
    min_value_len: int = 2


@dataclass(slots=True, frozen=True)
class StreetMatch:
    """Result of comparing an entered street with a candidate road."""

    match: bool
    score: int
    weak_matches: int = 0
    confidence: MatchConfidence = MatchConfidence.NONE


@dataclass(slots=True, frozen=True)
class AddressInput:
    """Collection address as typed by the user.

    Only ``postcode`` and ``country`` are needed for verification to say
    anything meaningful; the other fields are checked when present.
    """

    street: str = ""
    city: str = ""
    county: str = ""
    postcode: str = ""
    country: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any], max_length: int = 200) -> "AddressInput":
        """Build a sanitized address from a loosely shaped mapping.

        Args:
            data: Mapping with any of the five address keys.
            max_length: Maximum length kept per field.

        Returns:
            AddressInput with missing keys set to empty strings.
        """
        def clean(key: str) -> str:
            value = data.get(key)
            return sanitize_address_input(str(value), max_length=max_length) if value else ""

        return cls(
            street=clean("street"),
            city=clean("city"),
            county=clean("county"),
            postcode=clean("postcode"),
            country=clean("country"),
        )

    def to_dict(self) -> dict[str, str]:
        return {
            "street": self.street,
            "city": self.city,
            "county": self.county,
            "postcode": self.postcode,
            "country": self.country,
        }


@dataclass(slots=True, frozen=True)
class GeoCandidate:
    """One geocoder hit for a postcode query.

    Attributes mirror the ``address`` object of a Nominatim search result.
    ``country_name`` is the display country; ``country_code`` is the ISO
    code some providers return alongside it.
    """

    display_name: str
    lat: float
    lng: float
    road: str | None = None
    city: str | None = None
    town: str | None = None
    village: str | None = None
    municipality: str | None = None
    locality: str | None = None
    post_town: str | None = None
    suburb: str | None = None
    neighbourhood: str | None = None
    county: str | None = None
    state: str | None = None
    region: str | None = None
    province: str | None = None
    postcode: str | None = None
    country_name: str | None = None
    country_code: str | None = None

    @classmethod
    def from_nominatim(cls, item: dict[str, Any]) -> "GeoCandidate":
        """Parse one Nominatim ``search`` result.

        Args:
            item: Decoded JSON object with ``lat``, ``lon``, ``display_name``
                and an optional ``address`` object. Unknown keys are ignored.

        Returns:
            GeoCandidate built from the result.

        Raises:
            ValueError: If latitude or longitude is missing, not numeric or
                out of range.
        """
        try:
            lat = float(item["lat"])
            lng = float(item["lon"])
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Unparseable coordinates in geocoder result: {e}") from e

        if not (math.isfinite(lat) and math.isfinite(lng)) or abs(lat) > 90 or abs(lng) > 180:
            raise ValueError(f"Coordinates out of range in geocoder result: ({lat}, {lng})")

        address = item.get("address")
        if not isinstance(address, dict):
            address = {}

        def text(key: str) -> str | None:
            value = address.get(key)
            return str(value) if value else None

        return cls(
            display_name=str(item.get("display_name") or ""),
            lat=lat,
            lng=lng,
            road=text("road"),
            city=text("city"),
            town=text("town"),
            village=text("village"),
            municipality=text("municipality"),
            locality=text("locality"),
            post_town=text("post_town"),
            suburb=text("suburb"),
            neighbourhood=text("neighbourhood"),
            county=text("county"),
            state=text("state"),
            region=text("region"),
            province=text("province"),
            postcode=text("postcode"),
            country_name=text("country"),
            country_code=text("country_code"),
        )

    @property
    def city_names(self) -> list[str]:
        """City-like names, most specific settlement first."""
        names = [
            self.city, self.town, self.village,
            self.municipality, self.locality, self.post_town,
        ]
        return [n for n in names if n]

    @property
    def county_names(self) -> list[str]:
        """Administrative area names above city level."""
        names = [self.county, self.state, self.region, self.province]
        return [n for n in names if n]

    @property
    def display_first_line(self) -> str:
        """First comma-separated segment of the display name."""
        return self.display_name.split(",")[0].strip()


@dataclass(slots=True, frozen=True)
class FieldVerdict:
    """Verdict for one address field.

    ``reason`` is an internal diagnostic string, not user-facing copy.
    """

    severity: VerdictSeverity
    reason: str | None = None

    @classmethod
    def ok(cls) -> "FieldVerdict":
        return cls(VerdictSeverity.OK)

    @classmethod
    def warning(cls, reason: str) -> "FieldVerdict":
        return cls(VerdictSeverity.WARNING, reason)

    @classmethod
    def error(cls, reason: str) -> "FieldVerdict":
        return cls(VerdictSeverity.ERROR, reason)

    @property
    def is_ok(self) -> bool:
        return self.severity == VerdictSeverity.OK

    @property
    def is_error(self) -> bool:
        return self.severity == VerdictSeverity.ERROR

    def to_dict(self) -> dict[str, Any]:
        return {"status": self.severity.value, "reason": self.reason}


_OK = FieldVerdict.ok()


@dataclass(slots=True, frozen=True)
class VerificationResult:
    """Per-field verdicts for one address.

    Attributes:
        street, city, county, postcode, country: Field verdicts.
        coordinates: (lat, lng) of the best candidate, if any.
        country_code: Country the address was verified against, if resolved.
        diagnostics: Extra context such as candidate counts; compared but not hashed.
    """

    street: FieldVerdict = _OK
    city: FieldVerdict = _OK
    county: FieldVerdict = _OK
    postcode: FieldVerdict = _OK
    country: FieldVerdict = _OK
    coordinates: tuple[float, float] | None = None
    country_code: CountryCode | None = None
    diagnostics: dict[str, Any] = field(default_factory=dict, hash=False)

    @property
    def verdicts(self) -> dict[str, FieldVerdict]:
        return {
            "street": self.street,
            "city": self.city,
            "county": self.county,
            "postcode": self.postcode,
            "country": self.country,
        }

    @property
    def blocked(self) -> bool:
        """True iff at least one field verdict is an error."""
        return any(v.is_error for v in self.verdicts.values())

    @property
    def warnings(self) -> list[str]:
        """Names of fields carrying a warning."""
        return [
            name for name, v in self.verdicts.items()
            if v.severity == VerdictSeverity.WARNING
        ]

    def to_dict(self) -> dict[str, Any]:
        return {
            "fields": {name: v.to_dict() for name, v in self.verdicts.items()},
            "coordinates": (
                {"lat": self.coordinates[0], "lng": self.coordinates[1]}
                if self.coordinates else None
            ),
            "country_code": self.country_code.value if self.country_code else None,
            "blocked": self.blocked,
            "diagnostics": self.diagnostics,
        }
