"""Configuration with sensible defaults (no external services required)."""

from dataclasses import dataclass, field
from os import getenv

from itad.address_models import MatchThresholds


def _parse_bool(value: str, default: bool = True) -> bool:
    """Parse boolean from environment variable."""
    if not value:
        return default
    return value.lower() in ("true", "1", "yes", "on")


def _parse_float(value: str, default: float) -> float:
    """Parse float from environment variable."""
    try:
        return float(value) if value else default
    except ValueError:
        return default


def _parse_int(value: str, default: int) -> int:
    """Parse int from environment variable."""
    try:
        return int(value) if value else default
    except ValueError:
        return default


@dataclass(slots=True, frozen=True)
class Config:
    # ==================== Matching heuristics ====================
    # Shorter word must be at least this long for a prefix match
    min_prefix_len: int = field(
        default_factory=lambda: _parse_int(getenv("ITAD_MIN_PREFIX_LEN", ""), 4)
    )
    # Shorter word must be at least this long for a substring match
    min_substring_len: int = field(
        default_factory=lambda: _parse_int(getenv("ITAD_MIN_SUBSTRING_LEN", ""), 3)
    )
    min_street_word_len: int = field(
        default_factory=lambda: _parse_int(getenv("ITAD_MIN_STREET_WORD_LEN", ""), 3)
    )
    street_min_strong_matches: int = field(
        default_factory=lambda: _parse_int(getenv("ITAD_STREET_MIN_STRONG_MATCHES", ""), 2)
    )
    min_value_len: int = field(
        default_factory=lambda: _parse_int(getenv("ITAD_MIN_VALUE_LEN", ""), 2)
    )

    # ==================== Input limits ====================
    max_field_length: int = field(
        default_factory=lambda: _parse_int(getenv("ITAD_MAX_FIELD_LENGTH", ""), 200)
    )

    # ==================== Caller-side scheduling ====================
    verify_debounce_seconds: float = field(
        default_factory=lambda: _parse_float(getenv("VERIFY_DEBOUNCE_SECONDS", ""), 1.0)
    )
    geocoder_max_retries: int = field(
        default_factory=lambda: max(0, _parse_int(getenv("GEOCODER_MAX_RETRIES", ""), 2))
    )
    geocoder_breaker_threshold: int = field(
        default_factory=lambda: _parse_int(getenv("GEOCODER_BREAKER_THRESHOLD", ""), 3)
    )
    geocoder_breaker_reset_seconds: int = field(
        default_factory=lambda: _parse_int(getenv("GEOCODER_BREAKER_RESET_SECONDS", ""), 300)
    )

    # ==================== Routing ====================
    # Road distance is typically 1.2-1.5x the straight-line distance
    road_distance_factor: float = field(
        default_factory=lambda: _parse_float(getenv("ROAD_DISTANCE_FACTOR", ""), 1.3)
    )

    # ==================== Observability ====================
    log_level: str = field(default_factory=lambda: getenv("LOG_LEVEL", "INFO").upper())
    enable_audit_log: bool = field(
        default_factory=lambda: _parse_bool(getenv("ENABLE_AUDIT_LOG", ""), True)
    )
    audit_log_size: int = field(
        default_factory=lambda: _parse_int(getenv("AUDIT_LOG_SIZE", ""), 1000)
    )

    def match_thresholds(self) -> MatchThresholds:
        """Get the text matching thresholds as one value object."""
        return MatchThresholds(
            min_prefix_len=self.min_prefix_len,
            min_substring_len=self.min_substring_len,
            min_street_word_len=self.min_street_word_len,
            street_min_strong_matches=self.street_min_strong_matches,
            min_value_len=self.min_value_len,
        )


cfg = Config()
