"""Host-side settings for the duplicate engine.

Hey future me - the ENGINE never reads settings on its own! MatchingConfig is passed
by value into each pass. This module is the "configuration source" a host can use:
environment variables (or a .env file) -> Settings -> MatchingConfig.

    SOUNDSIFT_LOG_LEVEL=DEBUG
    SOUNDSIFT_MATCHING__PRESET=lenient
    SOUNDSIFT_MATCHING__ARTIST_THRESHOLD=80
    SOUNDSIFT_DETECTION__MAX_WORKERS=8
    SOUNDSIFT_DETECTION__TITLE_PREFIX_LENGTH=3
    SOUNDSIFT_OBSERVABILITY__LOG_JSON_FORMAT=true

Any override on top of a preset produces a config named "Custom".
"""

from functools import lru_cache
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from soundsift import __version__
from soundsift.domain.value_objects import MatchingConfig, MatchPreset


class MatchingSettings(BaseModel):
    """Preset name plus optional per-field overrides (None = use the preset value)."""

    preset: str = Field(default=MatchPreset.default().value, description="strict, balanced or lenient")

    title_threshold: float | None = Field(default=None, ge=0.0, le=100.0)
    artist_threshold: float | None = Field(default=None, ge=0.0, le=100.0)
    album_threshold: float | None = Field(default=None, ge=0.0, le=100.0)
    duration_tolerance_seconds: float | None = Field(default=None, ge=0.0)
    duration_tolerance_percent: float | None = Field(default=None, ge=0.0)
    ignore_case: bool | None = None
    ignore_punctuation: bool | None = None
    ignore_artist_prefixes: bool | None = None
    ignore_featuring: bool | None = None
    ignore_album_editions: bool | None = None
    track_number_must_match: bool | None = None
    minimum_fields_to_match: int | None = Field(default=None, ge=1)
    use_fingerprints: bool | None = None
    word_order_insensitive: bool | None = None

    @field_validator("preset")
    @classmethod
    def validate_preset(cls, value: str) -> str:
        """Reject unknown preset names early (at settings load time)."""
        return MatchPreset.from_string(value).value

    def overrides(self) -> dict[str, Any]:
        """Fields explicitly set on top of the preset."""
        return self.model_dump(exclude_none=True, exclude={"preset"})

    def to_config(self) -> MatchingConfig:
        """Build the validated MatchingConfig for the next pass.

        Raises:
            InvalidConfigurationError: If the combination is invalid
        """
        base = MatchPreset.from_string(self.preset).config
        overrides = self.overrides()
        if not overrides:
            return base
        return base.with_overrides(name="Custom", **overrides)


class DetectionSettings(BaseModel):
    """Detection pass tuning."""

    max_workers: int | None = Field(default=None, ge=1, description="Scoring threads (None = auto)")
    title_prefix_length: int | None = Field(
        default=None,
        ge=1,
        description="Only compare records sharing this many leading title characters (None = all pairs)",
    )


class ObservabilitySettings(BaseModel):
    """Logging output settings."""

    log_json_format: bool = False


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="SOUNDSIFT_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "soundsift"
    app_version: str = __version__
    log_level: str = "INFO"

    matching: MatchingSettings = Field(default_factory=MatchingSettings)
    detection: DetectionSettings = Field(default_factory=DetectionSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Normalize and check the log level name."""
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {value}")
        return level


# Cached - environment is read once per process. Tests call get_settings.cache_clear().
@lru_cache
def get_settings() -> Settings:
    """Get the process-wide settings instance."""
    return Settings()


__all__ = [
    "DetectionSettings",
    "MatchingSettings",
    "ObservabilitySettings",
    "Settings",
    "get_settings",
]
