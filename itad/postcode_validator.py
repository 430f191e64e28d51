"""Postcode format validation against the country registry."""

import logging
import re
from dataclasses import dataclass

from itad.countries import COUNTRY_REGISTRY, CountryCode
from itad.country_normalizer import normalize_country

logger = logging.getLogger(__name__)

# Unanchored versions of every pattern for extraction from free text.
# A postcode must not be glued to other letters or digits.
_SEARCH_PATTERNS: list[tuple[CountryCode, re.Pattern]] = [
    (
        code,
        re.compile(rf"(?<![A-Za-z0-9])(?:{info.pattern.pattern})(?![A-Za-z0-9])", re.IGNORECASE),
    )
    for code, info in COUNTRY_REGISTRY.items()
]


@dataclass(slots=True, frozen=True)
class PostcodeCheck:
    """Outcome of a postcode format check.

    Attributes:
        valid: Whether the postcode is acceptable.
        country_code: Country the check was made against, if resolved.
        lenient: True when the country was unknown and all patterns were tried.
    """

    valid: bool
    country_code: CountryCode | None
    lenient: bool

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "country_code": self.country_code.value if self.country_code else None,
            "lenient": self.lenient,
        }


def _resolve(country: CountryCode | str | None) -> CountryCode | None:
    if isinstance(country, CountryCode):
        return country
    return normalize_country(country)


def check_postcode(postcode: str | None, country: CountryCode | str | None = None) -> PostcodeCheck:
    """Validate a postcode and report how the decision was made.

    With a recognized country only that country's pattern is tried. With no
    country, or one that cannot be normalized, the postcode is accepted if
    any registered pattern matches: an ambiguous postcode is provisionally
    accepted rather than rejected.

    Args:
        postcode: Postcode as typed.
        country: CountryCode or free-text country name.

    Returns:
        PostcodeCheck describing the outcome.
    """
    code = _resolve(country)
    candidate = (postcode or "").strip()
    if not candidate:
        return PostcodeCheck(valid=False, country_code=code, lenient=code is None)

    if code is not None:
        valid = COUNTRY_REGISTRY[code].pattern.fullmatch(candidate) is not None
        return PostcodeCheck(valid=valid, country_code=code, lenient=False)

    valid = any(info.pattern.fullmatch(candidate) for info in COUNTRY_REGISTRY.values())
    if valid and country:
        logger.debug(f"Postcode '{candidate}' accepted leniently for unknown country '{country}'")
    return PostcodeCheck(valid=valid, country_code=None, lenient=True)


def is_valid_postcode(postcode: str | None, country: CountryCode | str | None = None) -> bool:
    """Check if a postcode is well-formed for the given (or any) country."""
    return check_postcode(postcode, country).valid


def extract_postcode(text: str | None) -> str | None:
    """Find the first European-format postcode in free text.

    Args:
        text: Any text, e.g. a full single-line address.

    Returns:
        The earliest matching postcode (longest on ties), or None.
    """
    if not text:
        return None

    best: re.Match | None = None
    for _, pattern in _SEARCH_PATTERNS:
        match = pattern.search(text)
        if match is None:
            continue
        if (
            best is None
            or match.start() < best.start()
            or (match.start() == best.start() and match.end() > best.end())
        ):
            best = match

    return best.group(0).strip() if best else None
