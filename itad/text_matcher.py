"""Fuzzy text matching for address fields.

Three strategies are provided:

- ``strict_match``: word-boundary-aware comparison for city and county
  names. Geocoders report settlements at different granularities (village,
  municipality, post town), so matching is permissive at word
  level.
- ``is_obviously_invalid``: catches values that are structurally not place
  names (pure numbers, placeholders, single characters).
- ``street_confidence``: counts meaningful word matches between an entered
  street and a candidate road name.

All comparisons run on ``normalize_text`` output, so case, accents and
hyphen/space differences never matter.
"""

import re
import unicodedata
from collections.abc import Iterable
from functools import lru_cache

from itad.address_models import (
    FieldKind,
    MatchConfidence,
    MatchThresholds,
    StreetMatch,
)

DEFAULT_THRESHOLDS = MatchThresholds()

_SEPARATORS = re.compile(r"[\s\-]+")

# "Sector 7", "Zone 3", "Route 66" are real place/street names
_NUMBERED_AREA = re.compile(
    r"^(sector|zone|district|area|route|road|rd|street|st|avenue|ave|block|unit|plot)\s+\d+",
    re.IGNORECASE,
)

# Single letter + digits: "A4", "D917", "N7"
_ROUTE_CODE = re.compile(r"^[A-Z]\d+$", re.IGNORECASE)

PLACEHOLDER_VALUES: frozenset[str] = frozenset({
    "n/a", "na", "none", "null", "nil", "test", "unknown",
    "xxx", "asdf", "-", ".", "?",
})

# Road type words carry no identity: "Station Road" vs "Station Rd"
ROAD_TYPE_TOKENS: frozenset[str] = frozenset({
    "street", "st", "road", "rd", "avenue", "ave", "av", "lane", "ln",
    "drive", "dr", "close", "cl", "way", "court", "ct", "place", "pl",
    "crescent", "cres", "terrace", "ter", "boulevard", "blvd",
    "gardens", "gdns", "grove", "square", "sq", "highway", "hwy",
})


@lru_cache(maxsize=4096)
def normalize_text(value: str) -> str:
    """Normalize text for comparison.

    Lower-cases, strips diacritics (NFD + combining-mark removal) and
    collapses runs of spaces and hyphens into a single space.

    Example: "Beautheil-Saints" and "beautheil  saints" both become
    "beautheil saints".
    """
    if not value:
        return ""
    decomposed = unicodedata.normalize("NFD", value.lower())
    stripped = "".join(c for c in decomposed if not unicodedata.combining(c))
    return _SEPARATORS.sub(" ", stripped).strip()


def _words_match(a: str, b: str, thresholds: MatchThresholds) -> tuple[bool, bool]:
    """Compare two words.

    Returns:
        (matched, strong) where strong means exact or long-enough prefix.
    """
    if a == b:
        return True, True

    shorter, longer = (a, b) if len(a) <= len(b) else (b, a)
    if len(shorter) >= thresholds.min_prefix_len and longer.startswith(shorter):
        return True, True
    if len(shorter) >= thresholds.min_substring_len and shorter in longer:
        return True, False
    return False, False


def _word_in(word: str, words: list[str], thresholds: MatchThresholds) -> bool:
    return any(_words_match(word, other, thresholds)[0] for other in words)


def strict_match(
    entered: str,
    candidate: str,
    thresholds: MatchThresholds = DEFAULT_THRESHOLDS,
) -> bool:
    """Check whether an entered city/county plausibly names the candidate.

    Args:
        entered: Value typed by the user.
        candidate: Value reported by the geocoder.
        thresholds: Word-length thresholds.

    Returns:
        True if the values match exactly after normalization, one is a long
        enough prefix of the other, or their words line up.
    """
    a = normalize_text(entered)
    b = normalize_text(candidate)
    if not a or not b:
        return False
    if a == b:
        return True

    shorter, longer = (a, b) if len(a) <= len(b) else (b, a)
    if len(shorter) >= thresholds.min_prefix_len and longer.startswith(shorter):
        return True

    entered_words = a.split()
    candidate_words = b.split()

    if all(_word_in(w, candidate_words, thresholds) for w in entered_words):
        return True

    # Short compound names: "Saint-Denis" vs "Saint-Denis-de-l'Hôtel"
    if len(entered_words) <= 2 and _word_in(entered_words[0], candidate_words, thresholds):
        return True

    return any(
        len(w) >= thresholds.min_prefix_len and _word_in(w, candidate_words, thresholds)
        for w in entered_words
    )


def matches_any(
    entered: str,
    candidates: Iterable[str],
    thresholds: MatchThresholds = DEFAULT_THRESHOLDS,
) -> bool:
    """Check ``strict_match`` against every candidate value."""
    return any(strict_match(entered, c, thresholds) for c in candidates)


def is_obviously_invalid(
    value: str,
    kind: FieldKind,
    thresholds: MatchThresholds = DEFAULT_THRESHOLDS,
) -> bool:
    """Detect values that cannot be a real street, city or county.

    Args:
        value: Field value as typed.
        kind: Which field the value came from.
        thresholds: Provides the minimum value length.

    Returns:
        True for placeholders, values that are too short, and (for city or
        county) values with no letters at all.
    """
    text = (value or "").strip()
    if len(text) < thresholds.min_value_len:
        return True
    if _NUMBERED_AREA.match(text):
        return False
    if kind == FieldKind.STREET and _ROUTE_CODE.match(text):
        return False
    if text.lower() in PLACEHOLDER_VALUES:
        return True
    if kind in (FieldKind.CITY, FieldKind.COUNTY):
        return not any(c.isalpha() for c in text)
    return False


def _meaningful_words(value: str, thresholds: MatchThresholds) -> list[str]:
    return [
        w for w in normalize_text(value).split()
        if w not in ROAD_TYPE_TOKENS and len(w) >= thresholds.min_street_word_len
    ]


def street_confidence(
    entered: str,
    candidate_road: str | None,
    thresholds: MatchThresholds = DEFAULT_THRESHOLDS,
) -> StreetMatch:
    """Grade how well an entered street matches a candidate road.

    Road type words are ignored and only words of at least
    ``min_street_word_len`` characters count. Each entered word scores at
    most once: strong for exact or prefix matches, weak for containment.

    Args:
        entered: Street as typed, possibly with a house number.
        candidate_road: Road name from the geocoder.
        thresholds: Word-length and match-count thresholds.

    Returns:
        StreetMatch; ``match`` requires enough strong matches.
    """
    entered_words = _meaningful_words(entered, thresholds)
    road_words = _meaningful_words(candidate_road or "", thresholds)
    if not entered_words or not road_words:
        return StreetMatch(match=False, score=0)

    strong = 0
    weak = 0
    for word in entered_words:
        results = [_words_match(word, other, thresholds) for other in road_words]
        if any(is_strong for _, is_strong in results):
            strong += 1
        elif any(matched for matched, _ in results):
            weak += 1

    if strong >= thresholds.street_min_strong_matches:
        confidence = MatchConfidence.STRONG
    elif strong + weak >= 1:
        confidence = MatchConfidence.WEAK
    else:
        confidence = MatchConfidence.NONE

    return StreetMatch(
        match=confidence == MatchConfidence.STRONG,
        score=strong,
        weak_matches=weak,
        confidence=confidence,
    )
