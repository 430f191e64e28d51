"""Tests for postcode format validation and extraction."""

import pytest

from itad.countries import CountryCode
from itad.postcode_validator import (
    check_postcode,
    extract_postcode,
    is_valid_postcode,
)


# ============================================================================
# Country-specific Validation
# ============================================================================


class TestCountryValidation:
    """Tests for validation against a known country."""

    @pytest.mark.parametrize("postcode,country", [
        ("SW1A 1AA", "United Kingdom"),
        ("sw1a1aa", "UK"),
        ("M1 1AE", "England"),
        ("10115", "Germany"),
        ("1234 AB", "Netherlands"),
        ("1234ab", "nl"),
        ("1000-001", "Portugal"),
        ("1000001", "Portugal"),
        ("D02 AF30", "Ireland"),
        ("00-001", "Poland"),
        ("00001", "Poland"),
        ("LV-1001", "Latvia"),
        ("AD100", "Andorra"),
        ("  75001 ", "France"),
    ])
    def test_valid(self, postcode, country):
        assert is_valid_postcode(postcode, country)

    @pytest.mark.parametrize("postcode,country", [
        ("SW1A 1AA", "Germany"),
        ("1011", "Germany"),
        ("123456", "France"),
        ("1234 A", "Netherlands"),
        ("1000 001", "Portugal"),
        ("ABC", "United Kingdom"),
    ])
    def test_invalid(self, postcode, country):
        assert not is_valid_postcode(postcode, country)

    def test_accepts_country_code_enum(self):
        assert is_valid_postcode("8001", CountryCode.CH)
        assert not is_valid_postcode("80010", CountryCode.CH)

    def test_patterns_are_anchored(self):
        """Test a valid postcode with trailing junk is rejected."""
        assert not is_valid_postcode("10115 Berlin", "Germany")
        assert not is_valid_postcode("x10115", "Germany")


# ============================================================================
# Lenient Fallback
# ============================================================================


class TestLenientFallback:
    """Tests for validation when the country is unknown."""

    def test_no_country_tries_all_patterns(self):
        assert is_valid_postcode("SW1A 1AA")
        assert is_valid_postcode("1234 AB")
        assert is_valid_postcode("101")

    def test_unknown_country_tries_all_patterns(self):
        """Test an unrecognized country falls back instead of rejecting."""
        check = check_postcode("10115", "Narnia")

        assert check.valid
        assert check.lenient
        assert check.country_code is None

    def test_matches_no_pattern(self):
        assert not is_valid_postcode("!!!")
        assert not is_valid_postcode("1234567890", "Narnia")

    def test_known_country_is_not_lenient(self):
        check = check_postcode("10115", "Germany")

        assert check.valid
        assert not check.lenient
        assert check.country_code == CountryCode.DE

    @pytest.mark.parametrize("postcode", ["", "   ", None])
    def test_empty_is_invalid(self, postcode):
        assert not is_valid_postcode(postcode, "France")
        assert not is_valid_postcode(postcode)

    def test_to_dict(self):
        assert check_postcode("1010", "Austria").to_dict() == {
            "valid": True,
            "country_code": "AT",
            "lenient": False,
        }


# ============================================================================
# Extraction
# ============================================================================


class TestExtractPostcode:
    """Tests for finding postcodes in free text."""

    def test_uk_postcode_in_address(self):
        text = "Buckingham Palace, London SW1A 1AA, United Kingdom"
        assert extract_postcode(text) == "SW1A 1AA"

    def test_dutch_postcode_prefers_longest(self):
        """Test '1012 LP' wins over the bare 4-digit '1012'."""
        assert extract_postcode("Damrak, 1012 LP Amsterdam") == "1012 LP"

    def test_french_postcode(self):
        assert extract_postcode("Rue de la Paix, 75002 Paris") == "75002"

    def test_digits_glued_to_letters_ignored(self):
        assert extract_postcode("Order REF75002X") is None

    @pytest.mark.parametrize("text", ["", None, "no postcode here"])
    def test_none(self, text):
        assert extract_postcode(text) is None
