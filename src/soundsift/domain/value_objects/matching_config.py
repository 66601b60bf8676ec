"""Matching configuration value object and named presets.

Hey future me - this is THE configuration every scoring step reads!

BEFORE (original desktop app): one global, mutable config object that UI
panels poked at while a scan was running, with change-listeners wired panel
to panel. A threshold could change between two pair evaluations of the same pass.

AFTER (here): MatchingConfig is a frozen dataclass passed BY VALUE into each
detection pass. Changing settings means building a new config (with_overrides)
and running a new pass. Concurrent passes with different configs are safe.

Usage:
    config = MatchPreset.BALANCED.config
    stricter = config.with_overrides(title_threshold=95.0, minimum_fields_to_match=3)
    stricter.validate()  # raises InvalidConfigurationError if broken

    data = stricter.to_dict()          # for host-side persistence
    restored = MatchingConfig.from_dict(data)
"""

from dataclasses import asdict, dataclass, fields, replace
from enum import Enum
from numbers import Real
from typing import Any

from soundsift.domain.exceptions import InvalidConfigurationError

# Original "balanced" defaults
DEFAULT_TITLE_THRESHOLD = 85.0
DEFAULT_ARTIST_THRESHOLD = 90.0
DEFAULT_ALBUM_THRESHOLD = 85.0
DEFAULT_DURATION_TOLERANCE_SECONDS = 10.0
DEFAULT_DURATION_TOLERANCE_PERCENT = 5.0
DEFAULT_MIN_FIELDS_TO_MATCH = 2

_TOGGLE_NAMES: tuple[str, ...] = (
    "ignore_case",
    "ignore_punctuation",
    "ignore_artist_prefixes",
    "ignore_featuring",
    "ignore_album_editions",
    "track_number_must_match",
    "use_fingerprints",
    "word_order_insensitive",
)


def _is_number(value: Any) -> bool:
    # bool is an int subclass, but True is not a threshold
    return isinstance(value, Real) and not isinstance(value, bool)


@dataclass(frozen=True)
class MatchingConfig:
    """Thresholds and normalization toggles for one detection pass.

    Attributes:
        name: Human-readable name (preset name or "Custom")
        title_threshold: Minimum title similarity in percent (inclusive, 0-100)
        artist_threshold: Minimum artist similarity in percent (inclusive, 0-100)
        album_threshold: Minimum album similarity in percent (inclusive, 0-100)
        duration_tolerance_seconds: Absolute duration tolerance
        duration_tolerance_percent: Relative duration tolerance (of the longer duration)
        ignore_case: Case-fold before comparing
        ignore_punctuation: Strip punctuation before comparing
        ignore_artist_prefixes: Strip leading "the"/"a"/"an" from artists
        ignore_featuring: Strip "feat."/"ft."/"featuring" clauses
        ignore_album_editions: Strip "- Deluxe Edition"/"(Remastered)" style suffixes
        track_number_must_match: Require equal track numbers when both are present
        minimum_fields_to_match: How many of title/artist/album must pass
        use_fingerprints: Exact fingerprint equality short-circuits to a match
        word_order_insensitive: Add the token-order-insensitive bonus to field scores
    """

    name: str = "Balanced"
    title_threshold: float = DEFAULT_TITLE_THRESHOLD
    artist_threshold: float = DEFAULT_ARTIST_THRESHOLD
    album_threshold: float = DEFAULT_ALBUM_THRESHOLD
    duration_tolerance_seconds: float = DEFAULT_DURATION_TOLERANCE_SECONDS
    duration_tolerance_percent: float = DEFAULT_DURATION_TOLERANCE_PERCENT
    ignore_case: bool = True
    ignore_punctuation: bool = True
    ignore_artist_prefixes: bool = True
    ignore_featuring: bool = False
    ignore_album_editions: bool = True
    track_number_must_match: bool = False
    minimum_fields_to_match: int = DEFAULT_MIN_FIELDS_TO_MATCH
    use_fingerprints: bool = False
    word_order_insensitive: bool = False

    def threshold_for(self, field_name: str) -> float:
        """Get the similarity threshold (percent) for a compared field."""
        try:
            return float(getattr(self, f"{field_name}_threshold"))
        except AttributeError:
            raise KeyError(f"No threshold configured for field '{field_name}'") from None

    def validation_errors(self) -> list[str]:
        """Collect every violated invariant (empty list means valid)."""
        errors: list[str] = []
        for field_name in ("title", "artist", "album"):
            key = f"{field_name}_threshold"
            value = getattr(self, key)
            if not _is_number(value):
                errors.append(f"{key} must be a number, got {value!r}")
            elif not 0.0 <= value <= 100.0:
                errors.append(f"{key} must be within [0, 100], got {value}")
        for key in ("duration_tolerance_seconds", "duration_tolerance_percent"):
            value = getattr(self, key)
            if not _is_number(value):
                errors.append(f"{key} must be a number, got {value!r}")
            elif value < 0:
                errors.append(f"{key} must not be negative, got {value}")
        value = self.minimum_fields_to_match
        if not isinstance(value, int) or isinstance(value, bool):
            errors.append(f"minimum_fields_to_match must be an integer, got {value!r}")
        elif value < 1:
            errors.append(f"minimum_fields_to_match must be at least 1, got {value}")
        for key in _TOGGLE_NAMES:
            value = getattr(self, key)
            if not isinstance(value, bool):
                errors.append(f"{key} must be true or false, got {value!r}")
        if not isinstance(self.name, str):
            errors.append(f"name must be a string, got {self.name!r}")
        return errors

    def validate(self) -> "MatchingConfig":
        """Raise InvalidConfigurationError if any invariant is violated.

        Returns:
            self, so calls can be chained
        """
        errors = self.validation_errors()
        if errors:
            raise InvalidConfigurationError(errors)
        return self

    def with_overrides(self, **changes: Any) -> "MatchingConfig":
        """Return a validated copy with the given fields replaced.

        Raises:
            InvalidConfigurationError: If a key is unknown or the result is invalid
        """
        unknown = sorted(set(changes) - _FIELD_NAMES)
        if unknown:
            raise InvalidConfigurationError([f"unknown configuration key: {key}" for key in unknown])
        return replace(self, **changes).validate()

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dict (host-side persistence)."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MatchingConfig":
        """Build a validated config from a dict produced by to_dict().

        Missing keys fall back to the balanced defaults.

        Raises:
            InvalidConfigurationError: On unknown keys or invalid values
        """
        return cls().with_overrides(**data)

    def summary(self) -> str:
        """Human-readable multi-line description of this configuration."""
        options = [
            label
            for enabled, label in (
                (self.ignore_case, "IgnoreCase"),
                (self.ignore_punctuation, "IgnorePunct"),
                (self.ignore_artist_prefixes, "IgnorePrefix"),
                (self.ignore_featuring, "IgnoreFeat"),
                (self.ignore_album_editions, "IgnoreEditions"),
                (self.word_order_insensitive, "WordOrderInsensitive"),
                (self.use_fingerprints, "Fingerprints"),
            )
            if enabled
        ]
        return "\n".join(
            [
                f"Matching Configuration: {self.name}",
                f"  Title Similarity: {self.title_threshold:.1f}%",
                f"  Artist Similarity: {self.artist_threshold:.1f}%",
                f"  Album Similarity: {self.album_threshold:.1f}%",
                f"  Duration Tolerance: {self.duration_tolerance_seconds:g}s / "
                f"{self.duration_tolerance_percent:.1f}%",
                f"  Track Number Match: {'Required' if self.track_number_must_match else 'Optional'}",
                f"  Min Fields Match: {self.minimum_fields_to_match}",
                f"  Options: {' '.join(options) if options else 'none'}",
            ]
        )

    def __str__(self) -> str:
        return self.name


_FIELD_NAMES: frozenset[str] = frozenset(f.name for f in fields(MatchingConfig))


class MatchPreset(Enum):
    """Named threshold bundles the host can expose to users.

    Usage:
        config = MatchPreset.from_string("lenient").config
        MatchPreset.valid_names()  # ["strict", "balanced", "lenient"]
    """

    STRICT = "strict"
    BALANCED = "balanced"
    LENIENT = "lenient"

    @property
    def config(self) -> MatchingConfig:
        """Get the configuration for this preset."""
        return _PRESET_CONFIGS[self]

    @classmethod
    def from_string(cls, value: str) -> "MatchPreset":
        """Parse a preset from its name (case-insensitive).

        Raises:
            ValueError: If value is not a valid preset name
        """
        normalized = value.lower().strip()
        try:
            return cls(normalized)
        except ValueError:
            valid = ", ".join(cls.valid_names())
            raise ValueError(f"Invalid matching preset: '{value}'. Valid options: {valid}") from None

    @classmethod
    def valid_names(cls) -> list[str]:
        """Get list of valid preset names."""
        return [p.value for p in cls]

    @classmethod
    def default(cls) -> "MatchPreset":
        """Get default preset."""
        return cls.BALANCED

    def __str__(self) -> str:
        return self.value


# Hey future me - these mirror the profiles users already know from the old app.
# "Strict" still only compares three text fields, so minimum_fields_to_match=3 is
# the all-fields-must-agree setting here.
_PRESET_CONFIGS: dict[MatchPreset, MatchingConfig] = {
    MatchPreset.STRICT: MatchingConfig(
        name="Strict",
        title_threshold=100.0,
        artist_threshold=100.0,
        album_threshold=100.0,
        duration_tolerance_seconds=0.0,
        duration_tolerance_percent=0.0,
        track_number_must_match=True,
        minimum_fields_to_match=3,
    ),
    MatchPreset.BALANCED: MatchingConfig(name="Balanced"),
    MatchPreset.LENIENT: MatchingConfig(
        name="Lenient",
        title_threshold=70.0,
        artist_threshold=75.0,
        album_threshold=70.0,
        duration_tolerance_seconds=30.0,
        duration_tolerance_percent=10.0,
        ignore_featuring=True,
        minimum_fields_to_match=2,
    ),
}


__all__ = [
    "DEFAULT_ALBUM_THRESHOLD",
    "DEFAULT_ARTIST_THRESHOLD",
    "DEFAULT_DURATION_TOLERANCE_PERCENT",
    "DEFAULT_DURATION_TOLERANCE_SECONDS",
    "DEFAULT_MIN_FIELDS_TO_MATCH",
    "DEFAULT_TITLE_THRESHOLD",
    "MatchPreset",
    "MatchingConfig",
]
