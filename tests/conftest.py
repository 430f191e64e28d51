"""Pytest configuration and shared fixtures."""

import pytest
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from itad.address_models import GeoCandidate  # noqa: E402


@pytest.fixture
def make_candidate():
    """Factory for geocoder candidates with sensible coordinates."""
    def _make(**fields) -> GeoCandidate:
        fields.setdefault("display_name", "")
        fields.setdefault("lat", 48.8)
        fields.setdefault("lng", 3.0)
        return GeoCandidate(**fields)
    return _make


@pytest.fixture
def seine_et_marne_candidates(make_candidate):
    """Nominatim-style hits for 77120 in France (no Beautheil-Saints)."""
    return [
        make_candidate(
            display_name="Coulommiers, Meaux, Seine-et-Marne, Île-de-France, "
                         "France métropolitaine, 77120, France",
            lat=48.8146,
            lng=3.0837,
            town="Coulommiers",
            county="Seine-et-Marne",
            state="Île-de-France",
            postcode="77120",
            country_name="France",
            country_code="fr",
        ),
        make_candidate(
            display_name="Mouroux, Meaux, Seine-et-Marne, Île-de-France, "
                         "France métropolitaine, 77120, France",
            lat=48.8226,
            lng=3.0386,
            village="Mouroux",
            county="Seine-et-Marne",
            state="Île-de-France",
            postcode="77120",
            country_name="France",
            country_code="fr",
        ),
    ]


@pytest.fixture
def finnish_candidates(make_candidate):
    """The same postcode, 77120, in Finland."""
    return [
        make_candidate(
            display_name="Pieksämäki, Etelä-Savo, Manner-Suomi, 77120, Suomi / Finland",
            lat=62.3,
            lng=27.15,
            town="Pieksämäki",
            state="Etelä-Savo",
            postcode="77120",
            country_name="Finland",
            country_code="fi",
        ),
    ]
