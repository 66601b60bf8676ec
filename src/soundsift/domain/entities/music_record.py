"""Music record entity - the engine's read-only view of one file."""

from dataclasses import dataclass
from pathlib import PurePath

from soundsift.domain.value_objects.audio_format import AudioFormat

# The textual fields the matcher compares, in report order
COMPARED_TEXT_FIELDS: tuple[str, ...] = ("title", "artist", "album")

# Fields counted by the "metadata completeness" ranking criterion
METADATA_COMPLETENESS_FIELDS: tuple[str, ...] = (
    "title",
    "artist",
    "album",
    "genre",
    "track_number",
    "year",
)


@dataclass(frozen=True)
class MusicRecord:
    """Immutable snapshot of one music file's metadata.

    Hey future me - the host builds these from its database/scanner and hands the
    FULL list to a detection pass. The engine never mutates a record (frozen=True)
    and never goes back to disk for more data. If tags change on disk, the host
    rebuilds the record and re-runs detection.

    Attributes:
        id: Stable opaque id (also the final tie-breaker everywhere)
        path: Absolute file path
        title/artist/album/genre: Raw tag text, None when the tag is missing
        track_number/year: Tag numbers, None when missing
        duration_seconds: Audio length in seconds
        bitrate: kbps
        sample_rate: Hz
        file_size: Bytes
        format: Container/codec tag as given by the host ("flac", "mp3", ".m4a")
        fingerprint: Opaque acoustic fingerprint, only compared for equality
    """

    id: str
    path: str
    title: str | None = None
    artist: str | None = None
    album: str | None = None
    genre: str | None = None
    track_number: int | None = None
    year: int | None = None
    duration_seconds: float | None = None
    bitrate: int | None = None
    sample_rate: int | None = None
    file_size: int | None = None
    format: str | None = None
    fingerprint: str | None = None

    # Catch bad host data at construction time rather than deep inside a
    # ranking comparison. ValueError means the record is rejected immediately.
    def __post_init__(self) -> None:
        """Validate record data."""
        if not self.id:
            raise ValueError("Record id cannot be empty")
        if not self.path:
            raise ValueError("Record path cannot be empty")
        for name in ("duration_seconds", "bitrate", "sample_rate", "file_size"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ValueError(f"{name} cannot be negative")

    @property
    def directory(self) -> str:
        """Parent directory of the file."""
        return str(PurePath(self.path).parent)

    @property
    def audio_format(self) -> AudioFormat:
        """Parsed format tag (falls back to the file extension)."""
        if self.format:
            return AudioFormat.from_string(self.format)
        return AudioFormat.from_string(PurePath(self.path).suffix)

    def text(self, field_name: str) -> str | None:
        """Get a textual field, treating blank strings as missing."""
        value = getattr(self, field_name)
        if value is None or not str(value).strip():
            return None
        return str(value)

    def has_text(self, field_name: str) -> bool:
        """Check if a textual field carries a non-blank value."""
        return self.text(field_name) is not None

    @property
    def is_comparable(self) -> bool:
        """True when at least one compared text field is present.

        Records with no title, artist or album can't be matched meaningfully
        and are left out of a detection pass (they are not an error).
        """
        return any(self.has_text(name) for name in COMPARED_TEXT_FIELDS)

    @property
    def has_fingerprint(self) -> bool:
        """Check if an acoustic fingerprint is attached."""
        return bool(self.fingerprint)

    @property
    def metadata_score(self) -> int:
        """Number of populated metadata fields (0-6)."""
        score = 0
        for name in METADATA_COMPLETENESS_FIELDS:
            value = getattr(self, name)
            if isinstance(value, str):
                score += 1 if value.strip() else 0
            elif value is not None:
                score += 1
        return score


__all__ = ["COMPARED_TEXT_FIELDS", "METADATA_COMPLETENESS_FIELDS", "MusicRecord"]
