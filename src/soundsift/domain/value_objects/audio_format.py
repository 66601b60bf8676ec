"""Audio format value object used by the quality ranker.

Hey future me - this is THE SINGLE SOURCE OF TRUTH for "which format is better"!
The quality ranker only needs two facts about a format tag:
    1. Is it lossless? (lossless always beats lossy at equal bitrate)
    2. Where does it sit in the fixed lossy ranking?

Usage:
    fmt = AudioFormat.from_string("FLAC")
    fmt.is_lossless          # True
    fmt.quality_rank         # higher is better, lossless > any lossy

Format tags come straight from the host (file extension or container name),
so from_string() is forgiving: case, leading dots and common aliases
("m4a" -> AAC, "vorbis" -> OGG) are handled, unknown tags map to UNKNOWN.
"""

from enum import Enum


class AudioFormat(Enum):
    """Audio container/codec tags the ranker knows about."""

    FLAC = "flac"
    ALAC = "alac"
    WAV = "wav"
    AIFF = "aiff"
    APE = "ape"
    WAVPACK = "wv"
    OPUS = "opus"
    AAC = "aac"
    OGG = "ogg"
    MP3 = "mp3"
    WMA = "wma"
    UNKNOWN = "unknown"

    @property
    def is_lossless(self) -> bool:
        """Check if the format is lossless."""
        return self in _LOSSLESS_FORMATS

    @property
    def quality_rank(self) -> int:
        """Ordinal used for ranking, higher is better.

        Every lossless format outranks every lossy one. Lossless formats are
        ranked equally among themselves (the bits are the same), lossy formats
        follow the fixed table below.
        """
        if self.is_lossless:
            return _LOSSLESS_RANK
        return _LOSSY_RANKING.get(self, 0)

    @classmethod
    def from_string(cls, value: str | None) -> "AudioFormat":
        """Parse a host format tag.

        Args:
            value: Format tag or file extension (case-insensitive, "." optional)

        Returns:
            Matching AudioFormat, or UNKNOWN when the tag is missing/unrecognised
        """
        if not value:
            return cls.UNKNOWN
        normalized = value.strip().lower().lstrip(".")
        normalized = _FORMAT_ALIASES.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError:
            return cls.UNKNOWN

    def __str__(self) -> str:
        return self.value


_LOSSLESS_FORMATS: frozenset[AudioFormat] = frozenset(
    {
        AudioFormat.FLAC,
        AudioFormat.ALAC,
        AudioFormat.WAV,
        AudioFormat.AIFF,
        AudioFormat.APE,
        AudioFormat.WAVPACK,
    }
)

# Hey future me - lossy ranking at EQUAL bitrate! Modern codecs sound better
# than MP3 at the same kbps, WMA is at the bottom. Modify here project-wide.
_LOSSY_RANKING: dict[AudioFormat, int] = {
    AudioFormat.OPUS: 5,
    AudioFormat.AAC: 4,
    AudioFormat.OGG: 3,
    AudioFormat.MP3: 2,
    AudioFormat.WMA: 1,
    AudioFormat.UNKNOWN: 0,
}

_LOSSLESS_RANK = 10

_FORMAT_ALIASES: dict[str, str] = {
    "m4a": "aac",
    "mp4": "aac",
    "vorbis": "ogg",
    "oga": "ogg",
    "wave": "wav",
    "aif": "aiff",
    "wavpack": "wv",
    "mpeg": "mp3",
}


__all__ = ["AudioFormat"]
