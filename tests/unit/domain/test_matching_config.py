"""Unit tests for MatchingConfig and MatchPreset."""

import dataclasses
from typing import Any

import pytest

from soundsift.domain.exceptions import InvalidConfigurationError, ValidationException
from soundsift.domain.value_objects.matching_config import MatchingConfig, MatchPreset


class TestMatchingConfig:
    """Tests for the MatchingConfig value object."""

    def test_defaults_are_balanced(self) -> None:
        """Test default values follow the balanced profile."""
        config = MatchingConfig()
        assert config.title_threshold == 85.0
        assert config.artist_threshold == 90.0
        assert config.album_threshold == 85.0
        assert config.duration_tolerance_seconds == 10.0
        assert config.duration_tolerance_percent == 5.0
        assert config.minimum_fields_to_match == 2
        assert config.ignore_featuring is False
        assert config.use_fingerprints is False

    def test_config_is_immutable(self) -> None:
        """Test a config can't be changed in place."""
        config = MatchingConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.title_threshold = 50.0  # type: ignore[misc]

    def test_threshold_for(self) -> None:
        """Test per-field threshold lookup."""
        config = MatchingConfig(artist_threshold=77.0)
        assert config.threshold_for("artist") == 77.0
        with pytest.raises(KeyError):
            config.threshold_for("genre")

    @pytest.mark.parametrize(
        ("changes", "fragment"),
        [
            ({"title_threshold": 101.0}, "title_threshold"),
            ({"artist_threshold": -1.0}, "artist_threshold"),
            ({"duration_tolerance_seconds": -0.5}, "duration_tolerance_seconds"),
            ({"duration_tolerance_percent": -5.0}, "duration_tolerance_percent"),
            ({"minimum_fields_to_match": 0}, "minimum_fields_to_match"),
            ({"title_threshold": None}, "title_threshold must be a number"),
            ({"title_threshold": "90"}, "title_threshold must be a number"),
            ({"album_threshold": True}, "album_threshold must be a number"),
            ({"duration_tolerance_seconds": None}, "duration_tolerance_seconds must be a number"),
            ({"minimum_fields_to_match": "2"}, "minimum_fields_to_match must be an integer"),
            ({"minimum_fields_to_match": 2.0}, "minimum_fields_to_match must be an integer"),
            ({"ignore_case": "yes"}, "ignore_case must be true or false"),
        ],
    )
    def test_validate_rejects_invalid_values(self, changes: dict[str, Any], fragment: str) -> None:
        """Test each invariant is enforced."""
        config = dataclasses.replace(MatchingConfig(), **changes)
        with pytest.raises(InvalidConfigurationError) as exc_info:
            config.validate()
        assert any(fragment in error for error in exc_info.value.errors)

    def test_validate_reports_every_error(self) -> None:
        """Test all violations are listed at once."""
        config = MatchingConfig(title_threshold=150.0, minimum_fields_to_match=0)
        errors = config.validation_errors()
        assert len(errors) == 2

    def test_boundary_values_are_valid(self) -> None:
        """Test 0 and 100 are inclusive bounds."""
        config = MatchingConfig(title_threshold=0.0, artist_threshold=100.0, duration_tolerance_seconds=0.0)
        assert config.validate() is config

    def test_invalid_configuration_is_validation_exception(self) -> None:
        """Test the error fits the exception hierarchy."""
        with pytest.raises(ValidationException):
            MatchingConfig(album_threshold=200.0).validate()

    def test_with_overrides_returns_new_config(self) -> None:
        """Test overrides never mutate the original."""
        original = MatchingConfig()
        changed = original.with_overrides(title_threshold=95.0)
        assert changed.title_threshold == 95.0
        assert original.title_threshold == 85.0

    def test_with_overrides_rejects_unknown_keys(self) -> None:
        """Test typos in override keys are reported."""
        with pytest.raises(InvalidConfigurationError, match="unknown configuration key: title_treshold"):
            MatchingConfig().with_overrides(title_treshold=95.0)

    def test_with_overrides_validates(self) -> None:
        """Test overrides producing an invalid config fail."""
        with pytest.raises(InvalidConfigurationError):
            MatchingConfig().with_overrides(minimum_fields_to_match=0)

    def test_dict_round_trip(self) -> None:
        """Test to_dict/from_dict preserve every field."""
        config = MatchingConfig(name="Mine", ignore_featuring=True, album_threshold=60.0)
        assert MatchingConfig.from_dict(config.to_dict()) == config

    def test_from_dict_missing_keys_use_defaults(self) -> None:
        """Test partial dicts fall back to defaults."""
        config = MatchingConfig.from_dict({"title_threshold": 70.0})
        assert config.title_threshold == 70.0
        assert config.artist_threshold == 90.0

    @pytest.mark.parametrize(
        "data",
        [
            {"title_threshold": None},
            {"title_threshold": "90"},
            {"minimum_fields_to_match": "2"},
            {"duration_tolerance_percent": [5]},
        ],
    )
    def test_from_dict_wrong_types(self, data: dict[str, Any]) -> None:
        """Test persisted configs with wrong value types fail with the config error."""
        with pytest.raises(InvalidConfigurationError):
            MatchingConfig.from_dict(data)

    def test_from_dict_accepts_integer_thresholds(self) -> None:
        """Test whole numbers (as JSON often stores them) are valid thresholds."""
        assert MatchingConfig.from_dict({"title_threshold": 90}).threshold_for("title") == 90.0

    def test_summary_mentions_thresholds(self) -> None:
        """Test the human-readable summary."""
        summary = MatchingConfig().summary()
        assert "Matching Configuration: Balanced" in summary
        assert "Title Similarity: 85.0%" in summary
        assert "Min Fields Match: 2" in summary
        assert "IgnoreCase" in summary


class TestMatchPreset:
    """Tests for the named presets."""

    def test_strict_preset(self) -> None:
        """Test strict values."""
        config = MatchPreset.STRICT.config
        assert config.title_threshold == 100.0
        assert config.duration_tolerance_seconds == 0.0
        assert config.track_number_must_match is True
        assert config.minimum_fields_to_match == 3

    def test_balanced_preset_is_default_config(self) -> None:
        """Test balanced equals the default config."""
        assert MatchPreset.BALANCED.config == MatchingConfig()
        assert MatchPreset.default() is MatchPreset.BALANCED

    def test_lenient_preset(self) -> None:
        """Test lenient values."""
        config = MatchPreset.LENIENT.config
        assert config.title_threshold == 70.0
        assert config.artist_threshold == 75.0
        assert config.duration_tolerance_seconds == 30.0
        assert config.ignore_featuring is True

    @pytest.mark.parametrize("preset", list(MatchPreset))
    def test_presets_are_valid(self, preset: MatchPreset) -> None:
        """Test every preset passes validation."""
        assert preset.config.validation_errors() == []

    @pytest.mark.parametrize("value", ["strict", "STRICT", " Strict "])
    def test_from_string(self, value: str) -> None:
        """Test parsing is case-insensitive and trims whitespace."""
        assert MatchPreset.from_string(value) is MatchPreset.STRICT

    def test_from_string_invalid(self) -> None:
        """Test invalid names list valid options."""
        with pytest.raises(ValueError, match="Valid options: strict, balanced, lenient"):
            MatchPreset.from_string("paranoid")

    def test_str(self) -> None:
        """Test string conversion gives the value."""
        assert str(MatchPreset.LENIENT) == "lenient"
