"""Duplicate service - the engine facade the host talks to.

Hey future me - this is the ONE object a host needs:

    service = DuplicateService(MatchPreset.BALANCED.config, record_source=my_library)
    result = service.detect()
    preview = service.preview_auto_resolution()
    for plan in preview.plans:
        service.execute(plan)          # hands off to the host's execution sink

It caches the records and the DetectionResult of the LAST pass so lookups
(get_group, compare_records, plan_group by id) don't re-run detection. The
cache is only valid while the host's record set is unchanged - after ANY
insert/delete/edit call invalidate() (execute() does it for you).

Not thread-safe: run one detect() per service instance at a time. Separate
instances with different configs can run concurrently.
"""

import logging
from collections.abc import Collection, Iterable
from dataclasses import replace
from functools import partial
from typing import TYPE_CHECKING

from soundsift.application.services.directory_conflicts import DirectoryConflictAggregator
from soundsift.application.services.duplicate_grouper import (
    CancellationToken,
    CandidatePairs,
    DuplicateGrouper,
    ProgressCallback,
    title_prefix_pairs,
)
from soundsift.application.services.quality_ranker import QualityRanker
from soundsift.application.services.record_matcher import RecordMatcher
from soundsift.application.services.resolution_planner import ResolutionPlanner
from soundsift.domain.entities import (
    AutoResolutionPreview,
    DetectionResult,
    DirectoryConflict,
    DirectoryPairConflict,
    DuplicateGroup,
    MatchResult,
    MusicRecord,
    ResolutionPlan,
)
from soundsift.domain.exceptions import EntityNotFoundException, ValidationException
from soundsift.domain.ports import IExecutionSink, IFingerprintProvider, IRecordSource
from soundsift.domain.value_objects import MatchingConfig

if TYPE_CHECKING:
    from soundsift.config import Settings

logger = logging.getLogger(__name__)


class DuplicateService:
    """Detection, inspection and planning over one host library."""

    def __init__(
        self,
        config: MatchingConfig | None = None,
        record_source: IRecordSource | None = None,
        fingerprint_provider: IFingerprintProvider | None = None,
        execution_sink: IExecutionSink | None = None,
        max_workers: int | None = None,
        candidate_pairs: CandidatePairs | None = None,
    ) -> None:
        """Initialize service.

        Args:
            config: Matching config (default: balanced)
            record_source: Where detect() loads records from when none are passed
            fingerprint_provider: Fills in missing fingerprints when fingerprints are enabled
            execution_sink: Receives plans passed to execute()
            max_workers: Scoring threads per pass
            candidate_pairs: Optional pair pre-filter (e.g. title_prefix_pairs)

        Raises:
            InvalidConfigurationError: If the config is invalid
        """
        self._config = (config or MatchingConfig()).validate()
        self._record_source = record_source
        self._fingerprint_provider = fingerprint_provider
        self._execution_sink = execution_sink
        self._max_workers = max_workers
        self._candidate_pairs = candidate_pairs
        self._ranker = QualityRanker()
        self._aggregator = DirectoryConflictAggregator(self._ranker)
        self._planner = ResolutionPlanner(self._ranker)
        self._records: dict[str, MusicRecord] = {}
        self._result: DetectionResult | None = None

    @classmethod
    def from_settings(
        cls,
        settings: "Settings",
        record_source: IRecordSource | None = None,
        fingerprint_provider: IFingerprintProvider | None = None,
        execution_sink: IExecutionSink | None = None,
    ) -> "DuplicateService":
        """Build a service from host settings (preset, overrides, detection tuning)."""
        prefix_length = settings.detection.title_prefix_length
        return cls(
            config=settings.matching.to_config(),
            record_source=record_source,
            fingerprint_provider=fingerprint_provider,
            execution_sink=execution_sink,
            max_workers=settings.detection.max_workers,
            candidate_pairs=(
                partial(title_prefix_pairs, prefix_length=prefix_length) if prefix_length else None
            ),
        )

    @property
    def config(self) -> MatchingConfig:
        return self._config

    @property
    def last_result(self) -> DetectionResult | None:
        """Result of the last pass, None if never run or invalidated."""
        return self._result

    def use_config(self, config: MatchingConfig) -> None:
        """Swap the config for the next pass (drops the cached result)."""
        self._config = config.validate()
        self.invalidate()

    def invalidate(self) -> None:
        """Forget the cached pass - call after any change to the host's records."""
        self._records = {}
        self._result = None

    # === Detection ===

    def detect(
        self,
        records: Iterable[MusicRecord] | None = None,
        cancellation: CancellationToken | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> DetectionResult:
        """Run a detection pass and cache its result.

        Args:
            records: Full record set (default: load from the record source)
            cancellation: Optional cancellation token
            on_progress: Optional progress callback(completed, total)

        Raises:
            ValidationException: If no records were given and no source is configured
            InvalidRecordSetError: If two records share an id
            DetectionCancelledError: If the pass was cancelled (cache stays empty)
        """
        self.invalidate()
        if records is None:
            if self._record_source is None:
                raise ValidationException("No records given and no record source configured")
            records = self._record_source.load_records()

        prepared = [self._with_fingerprint(record) for record in records]
        grouper = DuplicateGrouper(
            self._config,
            max_workers=self._max_workers,
            candidate_pairs=self._candidate_pairs,
        )
        result = grouper.group(prepared, cancellation=cancellation, on_progress=on_progress)

        self._records = {record.id: record for record in prepared}
        self._result = result
        return result

    def _with_fingerprint(self, record: MusicRecord) -> MusicRecord:
        if (
            self._fingerprint_provider is None
            or not self._config.use_fingerprints
            or record.has_fingerprint
        ):
            return record
        fingerprint = self._fingerprint_provider.fingerprint_for(record)
        return replace(record, fingerprint=fingerprint) if fingerprint else record

    # === Lookups ===

    def _require_result(self) -> DetectionResult:
        if self._result is None:
            raise EntityNotFoundException("DetectionResult", "current")
        return self._result

    def get_record(self, record_id: str) -> MusicRecord:
        """Record from the last pass.

        Raises:
            EntityNotFoundException: If the record wasn't part of the last pass
        """
        record = self._records.get(record_id)
        if record is None:
            raise EntityNotFoundException("MusicRecord", record_id)
        return record

    def get_group(self, group_id: int) -> DuplicateGroup:
        """Group from the last pass.

        Raises:
            EntityNotFoundException: If there is no such group (or no pass yet)
        """
        group = self._require_result().group(group_id)
        if group is None:
            raise EntityNotFoundException("DuplicateGroup", group_id)
        return group

    def compare_records(self, record_id_a: str, record_id_b: str) -> MatchResult:
        """Compare two records of the last pass, with the full field breakdown."""
        matcher = RecordMatcher(self._config)
        return matcher.compare(self.get_record(record_id_a), self.get_record(record_id_b))

    def find_similar(self, record_id: str) -> list[MatchResult]:
        """All records of the last pass that match one record, sorted by the other id."""
        target = self.get_record(record_id)
        matcher = RecordMatcher(self._config)
        results = [
            matcher.compare(target, other)
            for other_id, other in sorted(self._records.items())
            if other_id != record_id and other.is_comparable
        ]
        return [result for result in results if result.is_match]

    # === Directory view ===

    def directory_conflicts(self) -> list[DirectoryConflict]:
        """Directory conflicts of the last pass."""
        return self._aggregator.aggregate(self._require_result().groups)

    def directory_pairs(self) -> list[DirectoryPairConflict]:
        """Directory-vs-directory view of the last pass."""
        return self._aggregator.pair_directory_conflicts(self.directory_conflicts())

    # === Planning / execution ===

    def plan_group(
        self,
        group_id: int,
        exclusions: Collection[str] = (),
        keep_id: str | None = None,
    ) -> ResolutionPlan:
        """Plan one group of the last pass."""
        return self._planner.plan_group(self.get_group(group_id), exclusions, keep_id=keep_id)

    def plan_directory_conflict(
        self,
        group_id: int,
        keep_directory: str | None = None,
        exclusions: Collection[str] = (),
    ) -> ResolutionPlan:
        """Plan the directory conflict of one group of the last pass.

        Raises:
            EntityNotFoundException: If the group doesn't span several directories
        """
        conflict = self._aggregator.conflict_for(self.get_group(group_id))
        if conflict is None:
            raise EntityNotFoundException("DirectoryConflict", group_id)
        return self._planner.plan_directory_conflict(conflict, keep_directory, exclusions)

    def plan_directory_pair(
        self,
        keep_directory: str,
        delete_directory: str,
        exclusions: Collection[str] = (),
    ) -> list[ResolutionPlan]:
        """Keep one directory over another for every group of the last pass they share.

        Raises:
            EntityNotFoundException: If the two directories share no duplicates
        """
        wanted = tuple(sorted((keep_directory, delete_directory)))
        for pair in self.directory_pairs():
            if (pair.directory_a, pair.directory_b) == wanted:
                return self._planner.plan_directory_pair(
                    pair, self._require_result().groups, keep_directory, exclusions
                )
        raise EntityNotFoundException("DirectoryPairConflict", f"{keep_directory} / {delete_directory}")

    def preview_auto_resolution(self, exclusions: Collection[str] = ()) -> AutoResolutionPreview:
        """Preview resolving every group of the last pass."""
        return self._planner.preview_auto_resolution(self._require_result().groups, exclusions)

    def execute(self, plan: ResolutionPlan) -> None:
        """Hand a plan to the host's execution sink.

        The outcome is the sink's business. The cached pass is dropped because
        the record set is about to change.

        Raises:
            ValidationException: If no execution sink is configured
        """
        if self._execution_sink is None:
            raise ValidationException("No execution sink configured")
        logger.info(
            "Executing plan for group %d: keep %s, delete %s",
            plan.group_id,
            list(plan.keep),
            list(plan.delete),
        )
        self.invalidate()
        self._execution_sink.execute(plan)


__all__ = ["DuplicateService"]
