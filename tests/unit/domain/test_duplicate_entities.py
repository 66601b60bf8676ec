"""Unit tests for duplicate detection result entities."""

import pytest

from soundsift.domain.entities import (
    AutoResolutionPreview,
    DetectionResult,
    DuplicateGroup,
    FieldScore,
    MatchResult,
    MusicRecord,
    ResolutionPlan,
)


def _record(record_id: str, title: str = "Song", artist: str = "Band") -> MusicRecord:
    return MusicRecord(id=record_id, path=f"/music/{record_id}.mp3", title=title, artist=artist)


class TestFieldScore:
    """Tests for FieldScore."""

    def test_threshold_is_inclusive(self) -> None:
        """Test a score exactly at the threshold passes."""
        assert FieldScore("title", 0.85, 85.0).passed
        assert not FieldScore("title", 0.849, 85.0).passed

    def test_float_rounding_does_not_fail_boundary(self) -> None:
        """Test 0.29 * 100 still meets a 29% threshold."""
        assert FieldScore("title", 0.29, 29.0).passed


class TestMatchResult:
    """Tests for MatchResult."""

    def test_counts_and_similarity(self) -> None:
        """Test passed/considered counts and the mean similarity."""
        result = MatchResult(
            record_a_id="a",
            record_b_id="b",
            field_scores=(FieldScore("title", 1.0, 85.0), FieldScore("artist", 0.5, 90.0)),
            minimum_fields=2,
        )
        assert result.fields_considered == 2
        assert result.fields_passed == 1
        assert result.similarity == pytest.approx(0.75)
        assert result.score_for("artist") == 0.5
        assert result.score_for("album") is None

    def test_similarity_without_fields(self) -> None:
        """Test an empty score list gives zero similarity."""
        assert MatchResult(record_a_id="a", record_b_id="b").similarity == 0.0

    def test_breakdown(self) -> None:
        """Test the human-readable report."""
        result = MatchResult(
            record_a_id="a",
            record_b_id="b",
            field_scores=(FieldScore("title", 1.0, 85.0),),
            minimum_fields=1,
            is_match=True,
        )
        text = result.breakdown()
        assert "Similarity Breakdown (a vs b):" in text
        assert "Title: 100.0% (threshold: 85.0%) PASS" in text
        assert "Track: SKIPPED" in text
        assert "Result: DUPLICATE" in text


class TestDuplicateGroup:
    """Tests for DuplicateGroup."""

    def test_needs_two_members(self) -> None:
        """Test singletons are not groups."""
        with pytest.raises(ValueError):
            DuplicateGroup(group_id=1, members=(_record("a"),))

    def test_lookups(self) -> None:
        """Test ids, membership and representative fields."""
        group = DuplicateGroup(group_id=1, members=(_record("a", title="First"), _record("b")))
        assert group.record_ids == ("a", "b")
        assert group.size == len(group) == 2
        assert group.contains("b")
        assert group.member("c") is None
        assert group.representative_title == "First"
        assert group.representative_artist == "Band"
        assert group.directories == ("/music",)


class TestResolutionPlan:
    """Tests for ResolutionPlan invariants."""

    def test_keep_must_not_be_empty(self) -> None:
        """Test a plan must keep something."""
        with pytest.raises(ValueError, match="keep at least one"):
            ResolutionPlan(group_id=1, keep=(), delete=("a", "b"))

    def test_keep_and_delete_disjoint(self) -> None:
        """Test a record can't be kept and deleted."""
        with pytest.raises(ValueError, match="both kept and deleted"):
            ResolutionPlan(group_id=1, keep=("a",), delete=("a", "b"))

    def test_record_ids(self) -> None:
        """Test record_ids covers keep and delete."""
        plan = ResolutionPlan(group_id=1, keep=("b",), delete=("a", "c"))
        assert plan.record_ids == ("a", "b", "c")


class TestAutoResolutionPreview:
    """Tests for AutoResolutionPreview."""

    def test_empty_summary(self) -> None:
        """Test the nothing-to-do message."""
        assert AutoResolutionPreview().summary() == "No duplicates found to process."

    def test_totals_and_summary(self) -> None:
        """Test totals over all plans."""
        group = DuplicateGroup(group_id=3, members=(_record("x"), _record("y")))
        preview = AutoResolutionPreview(
            plans=(
                ResolutionPlan(group_id=1, keep=("a",), delete=("b", "c")),
                ResolutionPlan(group_id=2, keep=("d",), delete=("e",)),
            ),
            review_groups=(group,),
        )
        assert preview.total_to_delete == 3
        assert preview.total_to_keep == 2
        assert preview.summary() == (
            "Auto-resolve 2 groups: delete 3 files, keep 2 files. 1 groups require manual review."
        )


class TestDetectionResult:
    """Tests for DetectionResult lookups."""

    def test_group_lookup(self) -> None:
        """Test finding groups by id and by member."""
        first = DuplicateGroup(group_id=1, members=(_record("a"), _record("b")))
        second = DuplicateGroup(group_id=2, members=(_record("c"), _record("d"), _record("e")))
        result = DetectionResult(groups=(first, second), records_total=6)
        assert result.group(2) is second
        assert result.group(9) is None
        assert result.group_for_record("e") is second
        assert result.group_for_record("f") is None
        assert result.records_in_groups == 5
