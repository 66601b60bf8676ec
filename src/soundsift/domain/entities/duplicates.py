"""Duplicate detection results: match outcomes, groups, conflicts and plans.

Hey future me - everything in here is an immutable VALUE produced by one detection
pass. Nothing is persisted by the engine. Once the host inserts, deletes or edits a
record, every group/conflict/plan from the previous pass is stale - run detection again.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field

from soundsift.domain.entities.music_record import MusicRecord

# Scores are floats in [0, 1] and thresholds are percents; rounding before the
# inclusive comparison keeps 0.29 * 100 from landing just below a 29% threshold.
_PERCENT_PRECISION = 9


@dataclass(frozen=True)
class FieldScore:
    """Similarity of one textual field between two records."""

    field_name: str
    score: float
    threshold: float

    @property
    def passed(self) -> bool:
        """Score meets the (inclusive) threshold."""
        return round(self.score * 100.0, _PERCENT_PRECISION) >= self.threshold


@dataclass(frozen=True)
class MatchResult:
    """Outcome of comparing two records.

    Only fields where BOTH records carry a value are listed in field_scores -
    a record missing an album is not penalized for it.
    """

    record_a_id: str
    record_b_id: str
    field_scores: tuple[FieldScore, ...] = ()
    duration_ok: bool = True
    track_checked: bool = False
    track_ok: bool = True
    fingerprint_match: bool = False
    minimum_fields: int = 1
    is_match: bool = False

    @property
    def pair(self) -> tuple[str, str]:
        """The compared record ids (ordered)."""
        return (self.record_a_id, self.record_b_id)

    @property
    def fields_considered(self) -> int:
        return len(self.field_scores)

    @property
    def fields_passed(self) -> int:
        return sum(1 for fs in self.field_scores if fs.passed)

    @property
    def similarity(self) -> float:
        """Mean similarity of the considered fields (0.0 when none)."""
        if not self.field_scores:
            return 0.0
        return sum(fs.score for fs in self.field_scores) / len(self.field_scores)

    def score_for(self, field_name: str) -> float | None:
        """Score of one field, None when it was not considered."""
        for fs in self.field_scores:
            if fs.field_name == field_name:
                return fs.score
        return None

    def breakdown(self) -> str:
        """Human-readable per-field report."""
        lines = [f"Similarity Breakdown ({self.record_a_id} vs {self.record_b_id}):"]
        for fs in self.field_scores:
            lines.append(
                f"  {fs.field_name.capitalize()}: {fs.score * 100:.1f}% "
                f"(threshold: {fs.threshold:.1f}%) {'PASS' if fs.passed else 'FAIL'}"
            )
        lines.append(f"  Fields: {self.fields_passed}/{self.fields_considered} passed, {self.minimum_fields} required")
        lines.append(f"  Duration: {'MATCH' if self.duration_ok else 'NO MATCH'}")
        if self.track_checked:
            lines.append(f"  Track: {'MATCH' if self.track_ok else 'NO MATCH'}")
        else:
            lines.append("  Track: SKIPPED")
        if self.fingerprint_match:
            lines.append("  Fingerprint: IDENTICAL")
        lines.append(f"  Result: {'DUPLICATE' if self.is_match else 'NOT DUPLICATE'}")
        return "\n".join(lines)


@dataclass(frozen=True)
class DuplicateGroup:
    """Connected component of matched records (always >= 2 members).

    Members are sorted by record id so output is reproducible. Membership follows
    the connected-components rule: A~B and B~C puts A, B and C in one group even if
    A and C do not match directly. `matches` lists the true verdicts that link the
    members together.
    """

    group_id: int
    members: tuple[MusicRecord, ...]
    matches: tuple[MatchResult, ...] = ()

    def __post_init__(self) -> None:
        """Validate group data."""
        if len(self.members) < 2:
            raise ValueError("A duplicate group needs at least two members")

    @property
    def record_ids(self) -> tuple[str, ...]:
        return tuple(record.id for record in self.members)

    @property
    def size(self) -> int:
        return len(self.members)

    @property
    def directories(self) -> tuple[str, ...]:
        """Distinct parent directories of the members (sorted)."""
        return tuple(sorted({record.directory for record in self.members}))

    @property
    def representative_title(self) -> str:
        return self.members[0].title or ""

    @property
    def representative_artist(self) -> str:
        return self.members[0].artist or ""

    def contains(self, record_id: str) -> bool:
        return any(record.id == record_id for record in self.members)

    def member(self, record_id: str) -> MusicRecord | None:
        for record in self.members:
            if record.id == record_id:
                return record
        return None

    def __iter__(self) -> Iterator[MusicRecord]:
        return iter(self.members)

    def __len__(self) -> int:
        return len(self.members)


@dataclass(frozen=True)
class DirectoryMembers:
    """Members of one group that live in the same directory."""

    directory: str
    record_ids: tuple[str, ...]


@dataclass(frozen=True)
class DirectoryConflict:
    """A duplicate group viewed across the directories its members occupy.

    Only exists when the group spans two or more directories.
    """

    group: DuplicateGroup
    directories: tuple[DirectoryMembers, ...]
    default_keep_directory: str

    def __post_init__(self) -> None:
        """Validate conflict data."""
        if len(self.directories) < 2:
            raise ValueError("A directory conflict needs at least two directories")

    @property
    def group_id(self) -> int:
        return self.group.group_id

    @property
    def directory_names(self) -> tuple[str, ...]:
        return tuple(entry.directory for entry in self.directories)

    def members_in(self, directory: str) -> tuple[str, ...]:
        """Record ids of this conflict located in a directory."""
        for entry in self.directories:
            if entry.directory == directory:
                return entry.record_ids
        return ()


@dataclass(frozen=True)
class DirectoryPairConflict:
    """Two directories that hold duplicates of each other, across all groups."""

    directory_a: str
    directory_b: str
    files_in_a: int
    files_in_b: int
    pairs: tuple[tuple[str, str], ...]
    group_ids: tuple[int, ...]

    @property
    def total_duplicate_pairs(self) -> int:
        return len(self.pairs)


@dataclass(frozen=True)
class ResolutionPlan:
    """Keep/delete partition of one group, pending host execution.

    Invariants (checked on construction):
        - keep is never empty
        - keep and delete are disjoint
    The planner additionally guarantees keep + delete == the group's members.
    """

    group_id: int
    keep: tuple[str, ...]
    delete: tuple[str, ...]
    reason: str = ""
    keep_directory: str | None = None
    needs_review: bool = False

    def __post_init__(self) -> None:
        """Validate plan data."""
        if not self.keep:
            raise ValueError("A resolution plan must keep at least one record")
        overlap = set(self.keep) & set(self.delete)
        if overlap:
            raise ValueError(f"Records cannot be both kept and deleted: {sorted(overlap)}")

    @property
    def record_ids(self) -> tuple[str, ...]:
        return tuple(sorted(self.keep + self.delete))


@dataclass(frozen=True)
class AutoResolutionPreview:
    """Preview of resolving many groups at once."""

    plans: tuple[ResolutionPlan, ...] = ()
    review_groups: tuple[DuplicateGroup, ...] = ()

    @property
    def total_to_delete(self) -> int:
        return sum(len(plan.delete) for plan in self.plans)

    @property
    def total_to_keep(self) -> int:
        return sum(len(plan.keep) for plan in self.plans)

    @property
    def groups_needing_review(self) -> int:
        return len(self.review_groups)

    def summary(self) -> str:
        """One-line summary for the host UI."""
        if not self.plans and not self.review_groups:
            return "No duplicates found to process."
        text = (
            f"Auto-resolve {len(self.plans)} groups: delete {self.total_to_delete} files, "
            f"keep {self.total_to_keep} files."
        )
        if self.review_groups:
            text += f" {len(self.review_groups)} groups require manual review."
        return text


@dataclass(frozen=True)
class DetectionResult:
    """Full outcome of one detection pass."""

    groups: tuple[DuplicateGroup, ...]
    records_total: int
    excluded_ids: tuple[str, ...] = ()
    comparisons: int = 0
    matches_found: int = 0
    elapsed_ms: int = 0
    config_name: str = ""
    _group_index: dict[int, DuplicateGroup] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        self._group_index.update({group.group_id: group for group in self.groups})

    @property
    def records_in_groups(self) -> int:
        return sum(group.size for group in self.groups)

    def group(self, group_id: int) -> DuplicateGroup | None:
        return self._group_index.get(group_id)

    def group_for_record(self, record_id: str) -> DuplicateGroup | None:
        for group in self.groups:
            if group.contains(record_id):
                return group
        return None


__all__ = [
    "AutoResolutionPreview",
    "DetectionResult",
    "DirectoryConflict",
    "DirectoryMembers",
    "DirectoryPairConflict",
    "DuplicateGroup",
    "FieldScore",
    "MatchResult",
    "ResolutionPlan",
]
