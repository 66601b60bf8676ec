"""SoundSift - near-duplicate detection and resolution for music collections."""

__version__ = "0.1.0"
