"""Configuration module for soundsift."""

from .settings import (
    DetectionSettings,
    MatchingSettings,
    ObservabilitySettings,
    Settings,
    get_settings,
)

__all__ = [
    "DetectionSettings",
    "MatchingSettings",
    "ObservabilitySettings",
    "Settings",
    "get_settings",
]
