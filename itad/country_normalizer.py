"""Country name normalization.

Maps whatever a user (or a geocoder) wrote in a country field to a
registered CountryCode. An unrecognized country is a normal outcome: the
caller treats it as "cannot verify", never as invalid input.
"""

from itad.countries import VARIANT_INDEX, CountryCode


def _clean(text: str) -> str:
    return " ".join(text.lower().split())


def normalize_country(text: str | None) -> CountryCode | None:
    """Resolve free-text country to a code.

    Matches exactly against the registered variants, optionally prefixed
    with "the " ("The Netherlands").

    Args:
        text: Country as typed, e.g. "Deutschland", "uk", "the Netherlands".

    Returns:
        CountryCode, or None if no variant matches.
    """
    if not text:
        return None

    cleaned = _clean(text)
    if not cleaned:
        return None

    code = VARIANT_INDEX.get(cleaned)
    if code is None and cleaned.startswith("the "):
        code = VARIANT_INDEX.get(cleaned[4:])
    return code


def is_european_country(text: str | None) -> bool:
    """Check if text names a supported European country."""
    return normalize_country(text) is not None


def get_country_code(text: str | None) -> str | None:
    """Get the ISO alpha-2 string for a country name."""
    code = normalize_country(text)
    return code.value if code else None
