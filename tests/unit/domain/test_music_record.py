"""Unit tests for MusicRecord and AudioFormat."""

import pytest

from soundsift.domain.entities import MusicRecord
from soundsift.domain.value_objects.audio_format import AudioFormat


class TestAudioFormat:
    """Tests for AudioFormat parsing and ranking."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("flac", AudioFormat.FLAC),
            ("FLAC", AudioFormat.FLAC),
            (".mp3", AudioFormat.MP3),
            ("m4a", AudioFormat.AAC),
            ("vorbis", AudioFormat.OGG),
            ("wavpack", AudioFormat.WAVPACK),
            ("xyz", AudioFormat.UNKNOWN),
            ("", AudioFormat.UNKNOWN),
            (None, AudioFormat.UNKNOWN),
        ],
    )
    def test_from_string(self, value: str | None, expected: AudioFormat) -> None:
        """Test tag parsing including aliases."""
        assert AudioFormat.from_string(value) is expected

    def test_lossless_outranks_every_lossy_format(self) -> None:
        """Test lossless formats rank above all lossy ones."""
        lossy_best = max(f.quality_rank for f in AudioFormat if not f.is_lossless)
        assert all(f.quality_rank > lossy_best for f in AudioFormat if f.is_lossless)

    def test_lossy_ranking(self) -> None:
        """Test the fixed lossy order."""
        order = [AudioFormat.OPUS, AudioFormat.AAC, AudioFormat.OGG, AudioFormat.MP3, AudioFormat.WMA, AudioFormat.UNKNOWN]
        ranks = [f.quality_rank for f in order]
        assert ranks == sorted(ranks, reverse=True)
        assert len(set(ranks)) == len(ranks)


class TestMusicRecord:
    """Tests for the MusicRecord entity."""

    def test_requires_id_and_path(self) -> None:
        """Test empty identity fields are rejected."""
        with pytest.raises(ValueError, match="id"):
            MusicRecord(id="", path="/a.mp3")
        with pytest.raises(ValueError, match="path"):
            MusicRecord(id="a", path="")

    @pytest.mark.parametrize("field_name", ["duration_seconds", "bitrate", "sample_rate", "file_size"])
    def test_rejects_negative_numbers(self, field_name: str) -> None:
        """Test negative numeric fields are rejected."""
        with pytest.raises(ValueError, match=field_name):
            MusicRecord(id="a", path="/a.mp3", **{field_name: -1})

    def test_directory(self) -> None:
        """Test the parent directory is derived from the path."""
        record = MusicRecord(id="a", path="/music/Artist/Album/01.flac")
        assert record.directory == "/music/Artist/Album"

    def test_audio_format_prefers_tag_over_extension(self) -> None:
        """Test the format tag wins, the extension is the fallback."""
        assert MusicRecord(id="a", path="/x/song.mp3", format="flac").audio_format is AudioFormat.FLAC
        assert MusicRecord(id="b", path="/x/song.m4a").audio_format is AudioFormat.AAC

    def test_blank_text_counts_as_missing(self) -> None:
        """Test whitespace-only tags are treated as absent."""
        record = MusicRecord(id="a", path="/a.mp3", title="   ", artist="Band")
        assert record.text("title") is None
        assert record.has_text("artist")

    def test_is_comparable(self) -> None:
        """Test records need one of title/artist/album."""
        assert MusicRecord(id="a", path="/a.mp3", album="X").is_comparable
        assert not MusicRecord(id="b", path="/b.mp3", genre="Rock", year=1999).is_comparable

    def test_metadata_score(self) -> None:
        """Test completeness counts populated fields."""
        full = MusicRecord(
            id="a",
            path="/a.mp3",
            title="T",
            artist="A",
            album="B",
            genre="G",
            track_number=1,
            year=2000,
        )
        assert full.metadata_score == 6
        assert MusicRecord(id="b", path="/b.mp3", title="T", genre=" ").metadata_score == 1

    def test_records_are_hashable(self) -> None:
        """Test records can be used as dict keys (frozen dataclass)."""
        record = MusicRecord(id="a", path="/a.mp3", title="T")
        assert {record: 1}[MusicRecord(id="a", path="/a.mp3", title="T")] == 1
