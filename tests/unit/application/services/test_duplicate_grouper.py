"""Unit tests for DuplicateGrouper."""

import random

import pytest

from soundsift.application.services.duplicate_grouper import (
    CancellationToken,
    DuplicateGrouper,
    title_prefix_pairs,
)
from soundsift.domain.exceptions import (
    DetectionCancelledError,
    InvalidConfigurationError,
    InvalidRecordSetError,
)
from soundsift.domain.value_objects import MatchingConfig, MatchPreset
from soundsift.infrastructure.observability.logging import get_pass_id, set_pass_id

# Title threshold 80%: each neighbour in the chain differs by 2 of 10 letters
# (80% similar), the two ends differ by 4 (60% similar).
CHAIN_CONFIG = MatchingConfig(title_threshold=80.0, artist_threshold=100.0, minimum_fields_to_match=2)


@pytest.fixture
def chain(make_record):
    """A~B and B~C match, A~C does not."""
    return [
        make_record("a", title="aaaaaaaaaa", artist="Band"),
        make_record("b", title="aaaaaaaabb", artist="Band"),
        make_record("c", title="aaaaaabbbb", artist="Band"),
    ]


@pytest.fixture
def library(make_record):
    """Two duplicate clusters, a loner and an untagged file."""
    return [
        make_record("t1", title="Hey Jude", artist="The Beatles", duration_seconds=431),
        make_record("t2", title="Hey Jude (Remastered)", artist="Beatles", duration_seconds=429),
        make_record("t3", title="hey jude", artist="the beatles", duration_seconds=430),
        make_record("s1", title="Creep", artist="Radiohead", duration_seconds=238),
        make_record("s2", title="Creep", artist="Radiohead", duration_seconds=239),
        make_record("x1", title="Paranoid Android", artist="Radiohead", duration_seconds=387),
        make_record("z9", genre="Noise", path="/music/unknown/z9.wav"),
    ]


class TestDuplicateGrouper:
    """Tests for grouping behaviour."""

    def test_connected_components(self, chain) -> None:
        """Test A~B and B~C put A, B, C in one group even though A!~C."""
        grouper = DuplicateGrouper(CHAIN_CONFIG, max_workers=1)
        assert not grouper.matcher.is_duplicate(chain[0], chain[2])

        result = grouper.group(chain)

        assert len(result.groups) == 1
        group = result.groups[0]
        assert group.record_ids == ("a", "b", "c")
        assert [m.pair for m in group.matches] == [("a", "b"), ("b", "c")]

    def test_groups_library(self, library) -> None:
        """Test clusters, singletons and excluded records."""
        result = DuplicateGrouper(MatchingConfig()).group(library)

        assert [g.record_ids for g in result.groups] == [("s1", "s2"), ("t1", "t2", "t3")]
        assert [g.group_id for g in result.groups] == [1, 2]
        assert result.excluded_ids == ("z9",)
        assert result.records_total == 7
        assert result.comparisons == 15
        assert result.group_for_record("x1") is None

    @pytest.mark.parametrize("preset", list(MatchPreset))
    def test_identical_records_always_group(self, make_record, preset: MatchPreset) -> None:
        """Test two identical records (apart from id/path) form a group under every preset."""
        fields = {
            "title": "Karma Police",
            "artist": "Radiohead",
            "album": "OK Computer",
            "track_number": 6,
            "duration_seconds": 264.0,
        }
        records = [
            make_record("one", path="/music/a/06.mp3", **fields),
            make_record("two", path="/music/b/06.flac", **fields),
        ]
        result = DuplicateGrouper(preset.config).group(records)
        assert [g.record_ids for g in result.groups] == [("one", "two")]

    def test_output_is_deterministic(self, library) -> None:
        """Test input order and worker count don't change the grouping."""
        baseline = DuplicateGrouper(MatchingConfig(), max_workers=1).group(library).groups
        shuffled = list(library)
        random.Random(7).shuffle(shuffled)
        parallel = DuplicateGrouper(MatchingConfig(), max_workers=4, chunk_size=1).group(shuffled).groups
        assert parallel == baseline

    def test_no_records(self) -> None:
        """Test an empty record set gives an empty result."""
        result = DuplicateGrouper(MatchingConfig()).group([])
        assert result.groups == ()
        assert result.comparisons == 0

    def test_repeated_ids_rejected(self, make_record) -> None:
        """Test two records with the same id are an error."""
        records = [make_record("a", title="X", artist="Y"), make_record("a", title="X", artist="Y", path="/other.mp3")]
        with pytest.raises(InvalidRecordSetError, match="a"):
            DuplicateGrouper(MatchingConfig()).group(records)

    def test_invalid_config_fails_before_scoring(self) -> None:
        """Test a broken config is rejected up front."""
        with pytest.raises(InvalidConfigurationError):
            DuplicateGrouper(MatchingConfig(minimum_fields_to_match=0))

    def test_invalid_worker_count(self) -> None:
        """Test worker count must be positive."""
        with pytest.raises(ValueError):
            DuplicateGrouper(MatchingConfig(), max_workers=0)


class TestProgressAndCancellation:
    """Tests for progress reporting and cooperative cancellation."""

    def test_progress_reaches_total(self, library) -> None:
        """Test the last progress call reports every pair done."""
        calls: list[tuple[int, int]] = []
        DuplicateGrouper(MatchingConfig(), chunk_size=2).group(library, on_progress=lambda done, total: calls.append((done, total)))
        assert calls
        assert calls[-1] == (15, 15)
        assert [done for done, _ in calls] == sorted(done for done, _ in calls)

    def test_cancelled_before_start(self, library) -> None:
        """Test an already cancelled token yields no result."""
        token = CancellationToken()
        token.cancel()
        with pytest.raises(DetectionCancelledError) as exc_info:
            DuplicateGrouper(MatchingConfig()).group(library, cancellation=token)
        assert exc_info.value.comparisons_completed == 0

    def test_cancelled_mid_pass(self, library) -> None:
        """Test cancelling from a progress callback stops the pass."""
        token = CancellationToken()

        def cancel_on_first_progress(done: int, total: int) -> None:
            token.cancel()

        grouper = DuplicateGrouper(MatchingConfig(), max_workers=1, chunk_size=1)
        with pytest.raises(DetectionCancelledError) as exc_info:
            grouper.group(library, cancellation=token, on_progress=cancel_on_first_progress)
        assert 1 <= exc_info.value.comparisons_completed < 15

    def test_token_state(self) -> None:
        """Test the token flips once cancelled."""
        token = CancellationToken()
        assert not token.is_cancelled
        token.cancel()
        assert token.is_cancelled

    def test_failing_progress_callback_propagates(self, library) -> None:
        """Test host callback errors are not swallowed."""

        def broken(done: int, total: int) -> None:
            raise RuntimeError("ui gone")

        with pytest.raises(RuntimeError, match="ui gone"):
            DuplicateGrouper(MatchingConfig()).group(library, on_progress=broken)

    def test_pass_id_scoped_to_pass(self, library) -> None:
        """Test log lines of a pass share one id and the caller's id is restored."""
        set_pass_id("host-request")
        seen: set[str] = set()
        DuplicateGrouper(MatchingConfig(), chunk_size=2).group(library, on_progress=lambda done, total: seen.add(get_pass_id()))
        assert len(seen) == 1
        assert seen != {"host-request"}
        assert get_pass_id() == "host-request"

    def test_pass_id_restored_after_cancellation(self, library) -> None:
        """Test a failed pass doesn't leak its id either."""
        set_pass_id("host-request")
        token = CancellationToken()
        token.cancel()
        with pytest.raises(DetectionCancelledError):
            DuplicateGrouper(MatchingConfig()).group(library, cancellation=token)
        assert get_pass_id() == "host-request"


class TestCandidatePairs:
    """Tests for pair pre-filtering."""

    def test_title_prefix_pairs(self, library) -> None:
        """Test only records sharing a title prefix are paired."""
        comparable = [r for r in library if r.is_comparable]
        pairs = title_prefix_pairs(comparable, MatchingConfig(), prefix_length=3)
        ids = [(a.id, b.id) for a, b in pairs]
        assert ids == [("s1", "s2"), ("t1", "t2"), ("t1", "t3"), ("t2", "t3")]

    def test_untitled_records_pair_with_everyone(self, make_record) -> None:
        """Test records without a title are never skipped by the filter."""
        records = [
            make_record("a", title="Alpha", artist="X"),
            make_record("b", title="Beta", artist="X"),
            make_record("c", artist="X", album="Y"),
        ]
        ids = [(a.id, b.id) for a, b in title_prefix_pairs(records, MatchingConfig())]
        assert ids == [("a", "c"), ("b", "c")]

    def test_grouper_uses_candidate_pairs(self, library) -> None:
        """Test a pre-filter reduces comparisons but finds the same groups here."""
        full = DuplicateGrouper(MatchingConfig()).group(library)
        filtered = DuplicateGrouper(MatchingConfig(), candidate_pairs=title_prefix_pairs).group(library)
        assert filtered.comparisons == 4
        assert filtered.groups == full.groups

    def test_invalid_prefix_length(self) -> None:
        """Test prefix length must be positive."""
        with pytest.raises(ValueError):
            title_prefix_pairs([], MatchingConfig(), prefix_length=0)
