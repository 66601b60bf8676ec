"""Domain value objects."""

from soundsift.domain.value_objects.audio_format import AudioFormat
from soundsift.domain.value_objects.matching_config import MatchingConfig, MatchPreset
from soundsift.domain.value_objects.normalization import (
    FieldKind,
    NormalizationRules,
    normalize,
)

__all__ = [
    "AudioFormat",
    "FieldKind",
    "MatchPreset",
    "MatchingConfig",
    "NormalizationRules",
    "normalize",
]
