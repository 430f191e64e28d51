"""Tests for the country registry and country name normalization.

Tests cover:
- Registry completeness
- Example postcodes against their own patterns
- Country name variants (English, native, Nominatim display forms)
"""

import re

import pytest

from itad.countries import (
    COUNTRY_REGISTRY,
    CountryCode,
    RegistryError,
    all_codes,
    country_info,
    country_name,
    name_variants_of,
    pattern_of,
)
from itad.country_normalizer import (
    get_country_code,
    is_european_country,
    normalize_country,
)
from itad.postcode_validator import is_valid_postcode


# ============================================================================
# Registry Tests
# ============================================================================


class TestRegistry:
    """Tests for registry completeness."""

    def test_every_code_registered(self):
        """Test every CountryCode has a registry entry."""
        assert set(all_codes()) == set(COUNTRY_REGISTRY)
        assert len(all_codes()) == len(CountryCode)

    def test_every_code_has_variants_and_pattern(self):
        """Test no entry is empty."""
        for code in all_codes():
            assert name_variants_of(code)
            assert pattern_of(code).pattern

    def test_code_is_its_own_variant(self):
        """Test the lower-case ISO code identifies the country."""
        for code in all_codes():
            assert code.value.lower() in name_variants_of(code)

    @pytest.mark.parametrize("code", list(CountryCode))
    def test_description_example_is_valid(self, code):
        """Test the example in each format description validates."""
        description = country_info(code).description
        match = re.search(r"\(e\.g\. ([^)]+)\)", description)

        assert match is not None
        example = match.group(1)
        assert example == country_info(code).example
        assert is_valid_postcode(example, code)

    def test_unregistered_code_raises(self):
        """Test looking up an unknown code is a registry error."""
        with pytest.raises(RegistryError):
            country_info("ZZ")

    def test_country_name(self):
        assert country_name(CountryCode.GB) == "United Kingdom"
        assert country_name(CountryCode.FI) == "Finland"

    def test_sample_patterns(self):
        """Test a few patterns against known good and bad postcodes."""
        assert pattern_of(CountryCode.GB).fullmatch("EC1A 1BB")
        assert pattern_of(CountryCode.NL).fullmatch("1012LP")
        assert pattern_of(CountryCode.PT).fullmatch("1000-001")
        assert not pattern_of(CountryCode.DE).fullmatch("1011")
        assert not pattern_of(CountryCode.PL).fullmatch("00--001")


# ============================================================================
# Normalization Tests
# ============================================================================


class TestNormalizeCountry:
    """Tests for country name normalization."""

    @pytest.mark.parametrize("text,expected", [
        ("France", CountryCode.FR),
        ("  germany  ", CountryCode.DE),
        ("Deutschland", CountryCode.DE),
        ("UK", CountryCode.GB),
        ("Scotland", CountryCode.GB),
        ("the Netherlands", CountryCode.NL),
        ("The  United   Kingdom", CountryCode.GB),
        ("Nederland", CountryCode.NL),
        ("Österreich", CountryCode.AT),
        ("Suomi / Finland", CountryCode.FI),
        ("België / Belgique / Belgien", CountryCode.BE),
        ("ie", CountryCode.IE),
        ("Éire", CountryCode.IE),
    ])
    def test_known_variants(self, text, expected):
        assert normalize_country(text) == expected

    @pytest.mark.parametrize("text", ["Narnia", "", "   ", None, "United States", "Fra"])
    def test_unknown_is_none(self, text):
        """Test unrecognized countries return None rather than raising."""
        assert normalize_country(text) is None

    def test_northern_ireland_is_uk(self):
        """Test Northern Ireland does not resolve to Ireland."""
        assert normalize_country("Northern Ireland") == CountryCode.GB
        assert normalize_country("Ireland") == CountryCode.IE

    def test_helpers(self):
        assert is_european_country("Portugal")
        assert not is_european_country("Canada")
        assert get_country_code("polska") == "PL"
        assert get_country_code("Atlantis") is None
