"""Tests for address verification data models."""

import pytest

from itad.address_models import (
    AddressInput,
    FieldVerdict,
    GeoCandidate,
    VerdictSeverity,
    VerificationResult,
)
from itad.countries import CountryCode


NOMINATIM_COULOMMIERS = {
    "place_id": 95432581,
    "lat": "48.8146",
    "lon": "3.0837",
    "display_name": "Coulommiers, Meaux, Seine-et-Marne, Île-de-France, "
                    "France métropolitaine, 77120, France",
    "address": {
        "town": "Coulommiers",
        "municipality": "Meaux",
        "county": "Seine-et-Marne",
        "ISO3166-2-lvl6": "FR-77",
        "state": "Île-de-France",
        "region": "France métropolitaine",
        "postcode": "77120",
        "country": "France",
        "country_code": "fr",
    },
}


# ============================================================================
# GeoCandidate Tests
# ============================================================================


class TestGeoCandidate:
    """Tests for geocoder candidate parsing and name lists."""

    def test_from_nominatim(self):
        candidate = GeoCandidate.from_nominatim(NOMINATIM_COULOMMIERS)

        assert candidate.lat == pytest.approx(48.8146)
        assert candidate.lng == pytest.approx(3.0837)
        assert candidate.town == "Coulommiers"
        assert candidate.county == "Seine-et-Marne"
        assert candidate.country_name == "France"
        assert candidate.country_code == "fr"
        assert candidate.road is None

    def test_from_nominatim_without_address(self):
        candidate = GeoCandidate.from_nominatim({"lat": 51.5, "lon": -0.12, "display_name": "London"})

        assert candidate.display_first_line == "London"
        assert candidate.city_names == []

    @pytest.mark.parametrize("item", [
        {"lon": "3.0"},
        {"lat": "north", "lon": "3.0"},
        {"lat": None, "lon": "3.0"},
        {"lat": "nan", "lon": "3.0"},
        {"lat": "48.8", "lon": "inf"},
        {"lat": "948.8", "lon": "3.0"},
        {"lat": "48.8", "lon": "-181"},
    ])
    def test_from_nominatim_bad_coordinates(self, item):
        with pytest.raises(ValueError):
            GeoCandidate.from_nominatim(item)

    @pytest.mark.parametrize("address", [["Paris"], "Paris", 42, None])
    def test_from_nominatim_malformed_address(self, address):
        """Test a non-object address block is treated as absent."""
        candidate = GeoCandidate.from_nominatim(
            {"lat": "48.86", "lon": "2.33", "display_name": "Paris, France", "address": address}
        )

        assert candidate.city is None
        assert candidate.country_name is None
        assert candidate.display_first_line == "Paris"

    def test_name_lists(self):
        candidate = GeoCandidate.from_nominatim(NOMINATIM_COULOMMIERS)

        assert candidate.city_names == ["Coulommiers", "Meaux"]
        assert candidate.county_names == [
            "Seine-et-Marne", "Île-de-France", "France métropolitaine",
        ]
        assert candidate.display_first_line == "Coulommiers"


# ============================================================================
# AddressInput Tests
# ============================================================================


class TestAddressInput:
    """Tests for building addresses from loose input."""

    def test_from_dict_sanitizes(self):
        address = AddressInput.from_dict({
            "street": "  10  Rue de la Paix\x00 ",
            "city": "Paris\n",
            "postcode": 75002,
            "country": "France",
        })

        assert address.street == "10 Rue de la Paix"
        assert address.city == "Paris"
        assert address.county == ""
        assert address.postcode == "75002"

    def test_from_dict_truncates(self):
        address = AddressInput.from_dict({"city": "x" * 500}, max_length=50)
        assert len(address.city) == 50

    def test_to_dict_round_trip(self):
        address = AddressInput(city="Paris", postcode="75002", country="France")
        assert AddressInput.from_dict(address.to_dict()) == address


# ============================================================================
# VerificationResult Tests
# ============================================================================


class TestVerificationResult:
    """Tests for the combined result."""

    def test_default_is_all_ok(self):
        result = VerificationResult()

        assert all(v.is_ok for v in result.verdicts.values())
        assert not result.blocked
        assert result.warnings == []

    def test_blocked_iff_any_error(self):
        assert VerificationResult(city=FieldVerdict.error("bad")).blocked
        assert not VerificationResult(city=FieldVerdict.warning("odd")).blocked

    def test_to_dict(self):
        result = VerificationResult(
            street=FieldVerdict.warning("weak"),
            coordinates=(48.8, 3.0),
            country_code=CountryCode.FR,
        )
        data = result.to_dict()

        assert data["fields"]["street"] == {"status": "warning", "reason": "weak"}
        assert data["fields"]["city"] == {"status": "ok", "reason": None}
        assert data["coordinates"] == {"lat": 48.8, "lng": 3.0}
        assert data["country_code"] == "FR"
        assert data["blocked"] is False
        assert result.warnings == ["street"]

    def test_hashable_with_diagnostics(self):
        """Test diagnostics take part in equality but not in hashing."""
        first = VerificationResult(diagnostics={"candidates": 2})
        second = VerificationResult(diagnostics={"candidates": 3})

        assert hash(first) == hash(second)
        assert first != second
        assert len({first, VerificationResult(diagnostics={"candidates": 2})}) == 1

    def test_verdict_constructors(self):
        assert FieldVerdict.ok().severity == VerdictSeverity.OK
        assert FieldVerdict.warning("w").reason == "w"
        assert FieldVerdict.error("e").is_error
