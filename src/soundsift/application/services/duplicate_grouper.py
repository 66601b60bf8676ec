"""Duplicate grouper - turns pairwise verdicts into duplicate groups.

Hey future me - this is the heavy part of a detection pass!

    records -> candidate pairs -> RecordMatcher (worker threads) -> union-find -> groups

1. Config is validated FIRST (RecordMatcher.__init__) - a broken config fails
   before a single pair is scored.
2. Records without any title/artist/album can't be compared. They are left out
   and reported in DetectionResult.excluded_ids (not an error).
3. Pairs are scored in a ThreadPoolExecutor. Workers only SCORE; they never touch
   the union-find. The calling thread is the single writer that merges results
   and reports progress, so no locks are needed.
4. Grouping follows CONNECTED COMPONENTS: A~B and B~C puts A, B, C in one group
   even when A and C do not match each other. This is intended (recall over
   precision) and covered by tests - don't "fix" it into all-pairs agreement!
5. Cancellation is cooperative: workers check the token between pairs. A cancelled
   pass raises DetectionCancelledError and returns NO groups at all.

Output is deterministic: members sorted by id, groups ordered by their smallest
member id, group ids numbered 1..n in that order.
"""

import itertools
import logging
import os
import threading
import time
from collections.abc import Callable, Iterable, Iterator, Sequence
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait

from soundsift.application.services.record_matcher import RecordMatcher
from soundsift.domain.entities import (
    DetectionResult,
    DuplicateGroup,
    MatchResult,
    MusicRecord,
)
from soundsift.domain.exceptions import DetectionCancelledError, InvalidRecordSetError
from soundsift.domain.value_objects import (
    FieldKind,
    MatchingConfig,
    NormalizationRules,
    normalize,
)
from soundsift.infrastructure.observability.log_messages import LogMessages
from soundsift.infrastructure.observability.logging import pass_id_scope

logger = logging.getLogger(__name__)

# Host hook: pick which record pairs are worth scoring (blocking / pre-filtering)
CandidatePairs = Callable[[Sequence[MusicRecord], MatchingConfig], Iterable[tuple[MusicRecord, MusicRecord]]]

# Host hook: progress reporting, called as on_progress(completed, total)
ProgressCallback = Callable[[int, int], None]

DEFAULT_CHUNK_SIZE = 256
DEFAULT_PREFIX_LENGTH = 3


def default_worker_count() -> int:
    """Worker threads used when the host doesn't configure a count."""
    return min(4, max(2, os.cpu_count() or 2))


class CancellationToken:
    """Cooperative cancellation flag shared between the host and a detection pass.

    Thread-safe: the host calls cancel() from any thread (UI, signal handler),
    worker threads poll is_cancelled between pair evaluations.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        """Request cancellation of the running pass."""
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()


def title_prefix_pairs(
    records: Sequence[MusicRecord],
    config: MatchingConfig,
    prefix_length: int = DEFAULT_PREFIX_LENGTH,
) -> list[tuple[MusicRecord, MusicRecord]]:
    """Candidate pairs sharing a normalized-title prefix.

    A performance pre-filter, not a correctness rule: two records whose titles
    start differently ("the song" vs "song") are never paired, so it can lose
    matches that all-pairs would find. Records without a title are paired with
    every other record so they are never silently skipped.

    Args:
        records: Records of the pass
        config: Active config (its normalization toggles shape the prefix)
        prefix_length: Number of leading characters that must agree

    Returns:
        Unique pairs, ordered by (first id, second id)
    """
    if prefix_length < 1:
        raise ValueError("prefix_length must be at least 1")

    rules = NormalizationRules.from_config(config)
    buckets: dict[str, list[MusicRecord]] = {}
    untitled: list[MusicRecord] = []
    for record in records:
        title = normalize(record.text("title"), FieldKind.TITLE, rules)
        if title:
            buckets.setdefault(title[:prefix_length], []).append(record)
        else:
            untitled.append(record)

    pairs: dict[tuple[str, str], tuple[MusicRecord, MusicRecord]] = {}

    def add(first: MusicRecord, second: MusicRecord) -> None:
        if first.id == second.id:
            return
        if second.id < first.id:
            first, second = second, first
        pairs[(first.id, second.id)] = (first, second)

    for bucket in buckets.values():
        for first, second in itertools.combinations(bucket, 2):
            add(first, second)
    for loner in untitled:
        for other in records:
            add(loner, other)

    return [pairs[key] for key in sorted(pairs)]


class _UnionFind:
    """Disjoint sets over record indexes (single-writer, no locking)."""

    def __init__(self, size: int) -> None:
        self._parent = list(range(size))
        self._rank = [0] * size

    def find(self, item: int) -> int:
        root = item
        while self._parent[root] != root:
            root = self._parent[root]
        # path compression
        while self._parent[item] != root:
            self._parent[item], item = root, self._parent[item]
        return root

    def union(self, a: int, b: int) -> None:
        root_a, root_b = self.find(a), self.find(b)
        if root_a == root_b:
            return
        if self._rank[root_a] < self._rank[root_b]:
            root_a, root_b = root_b, root_a
        self._parent[root_b] = root_a
        if self._rank[root_a] == self._rank[root_b]:
            self._rank[root_a] += 1

    def components(self) -> dict[int, list[int]]:
        result: dict[int, list[int]] = {}
        for item in range(len(self._parent)):
            result.setdefault(self.find(item), []).append(item)
        return result


def _chunks(pairs: Iterable[tuple[int, int]], size: int) -> Iterator[list[tuple[int, int]]]:
    iterator = iter(pairs)
    while chunk := list(itertools.islice(iterator, size)):
        yield chunk


class DuplicateGrouper:
    """Runs one detection pass over a full record set."""

    def __init__(
        self,
        config: MatchingConfig,
        max_workers: int | None = None,
        candidate_pairs: CandidatePairs | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        """Initialize grouper.

        Args:
            config: Matching configuration (validated here)
            max_workers: Scoring threads (default: 2-4 depending on CPUs)
            candidate_pairs: Optional host pre-filter, default is all pairs
            chunk_size: Pairs per worker task

        Raises:
            InvalidConfigurationError: If the config is invalid
        """
        if max_workers is not None and max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        if chunk_size < 1:
            raise ValueError("chunk_size must be at least 1")
        self._matcher = RecordMatcher(config)
        self._max_workers = max_workers or default_worker_count()
        self._candidate_pairs = candidate_pairs
        self._chunk_size = chunk_size

    @property
    def config(self) -> MatchingConfig:
        return self._matcher.config

    @property
    def matcher(self) -> RecordMatcher:
        return self._matcher

    def group(
        self,
        records: Iterable[MusicRecord],
        cancellation: CancellationToken | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> DetectionResult:
        """Detect duplicate groups.

        Args:
            records: The FULL current record set
            cancellation: Optional token checked between pair evaluations
            on_progress: Optional callback(completed, total), called from this thread

        Returns:
            DetectionResult with all groups of size >= 2

        Raises:
            InvalidRecordSetError: If two records share an id
            DetectionCancelledError: If the token was cancelled mid-pass
        """
        started = time.monotonic()
        all_records = list(records)
        self._check_unique_ids(all_records)

        # The pass id only tags this pass's log lines, the host's id comes back afterwards
        with pass_id_scope():
            return self._run_pass(all_records, started, cancellation, on_progress)

    def _run_pass(
        self,
        all_records: list[MusicRecord],
        started: float,
        cancellation: CancellationToken | None,
        on_progress: ProgressCallback | None,
    ) -> DetectionResult:
        comparable = sorted((r for r in all_records if r.is_comparable), key=lambda r: r.id)
        excluded = tuple(sorted(r.id for r in all_records if not r.is_comparable))
        if excluded:
            logger.debug("Excluding %d records without title/artist/album: %s", len(excluded), excluded)

        logger.debug(self.config.summary())
        logger.info(
            LogMessages.detection_started(
                records=len(all_records),
                comparable=len(comparable),
                preset=self.config.name,
                workers=self._max_workers,
            )
        )

        self._matcher.prime(comparable)
        pairs, total = self._index_pairs(comparable)

        token = cancellation or CancellationToken()
        union_find = _UnionFind(len(comparable))
        matches: list[MatchResult] = []
        completed = self._evaluate(comparable, pairs, total, token, union_find, matches, on_progress)

        groups = self._build_groups(comparable, union_find, matches)
        elapsed_ms = int((time.monotonic() - started) * 1000)
        result = DetectionResult(
            groups=groups,
            records_total=len(all_records),
            excluded_ids=excluded,
            comparisons=completed,
            matches_found=len(matches),
            elapsed_ms=elapsed_ms,
            config_name=self.config.name,
        )
        logger.info(
            LogMessages.detection_completed(
                groups=len(groups),
                records_in_groups=result.records_in_groups,
                comparisons=completed,
                excluded=len(excluded),
                elapsed_ms=elapsed_ms,
            )
        )
        return result

    @staticmethod
    def _check_unique_ids(records: Sequence[MusicRecord]) -> None:
        seen: set[str] = set()
        repeated: set[str] = set()
        for record in records:
            if record.id in seen:
                repeated.add(record.id)
            seen.add(record.id)
        if repeated:
            raise InvalidRecordSetError(f"Duplicate record ids in record set: {sorted(repeated)}")

    def _index_pairs(self, records: Sequence[MusicRecord]) -> tuple[Iterable[tuple[int, int]], int]:
        """Candidate pairs as (index, index) into the sorted record list, plus their count."""
        count = len(records)
        if self._candidate_pairs is None:
            return itertools.combinations(range(count), 2), count * (count - 1) // 2

        position = {record.id: index for index, record in enumerate(records)}
        indexed: set[tuple[int, int]] = set()
        for first, second in self._candidate_pairs(records, self.config):
            a, b = position.get(first.id), position.get(second.id)
            # Pairs naming excluded/unknown records or a record twice are ignored
            if a is None or b is None or a == b:
                continue
            indexed.add((min(a, b), max(a, b)))
        ordered = sorted(indexed)
        return ordered, len(ordered)

    def _score_chunk(
        self,
        records: Sequence[MusicRecord],
        chunk: list[tuple[int, int]],
        token: CancellationToken,
        abort: threading.Event,
    ) -> tuple[int, list[tuple[int, int, MatchResult]]]:
        """Worker task: score a chunk of pairs, stop early on cancellation.

        Returns:
            (pairs evaluated, true verdicts with their indexes)
        """
        evaluated = 0
        found: list[tuple[int, int, MatchResult]] = []
        for a, b in chunk:
            if token.is_cancelled or abort.is_set():
                break
            result = self._matcher.compare(records[a], records[b])
            evaluated += 1
            if result.is_match:
                found.append((a, b, result))
        return evaluated, found

    def _evaluate(
        self,
        records: Sequence[MusicRecord],
        pairs: Iterable[tuple[int, int]],
        total: int,
        token: CancellationToken,
        union_find: _UnionFind,
        matches: list[MatchResult],
        on_progress: ProgressCallback | None,
    ) -> int:
        """Score all pairs in the pool and merge verdicts (single writer).

        Keeps at most a few chunks per worker in flight so all-pairs over a large
        library never materializes every pair at once.
        """
        completed = 0
        max_in_flight = self._max_workers * 4
        chunks = _chunks(pairs, self._chunk_size)
        abort = threading.Event()
        in_flight: set[Future[tuple[int, list[tuple[int, int, MatchResult]]]]] = set()

        with ThreadPoolExecutor(max_workers=self._max_workers, thread_name_prefix="soundsift-match") as executor:
            try:
                while True:
                    while len(in_flight) < max_in_flight and not token.is_cancelled:
                        chunk = next(chunks, None)
                        if chunk is None:
                            break
                        in_flight.add(executor.submit(self._score_chunk, records, chunk, token, abort))
                    if not in_flight:
                        break
                    done, in_flight = wait(in_flight, return_when=FIRST_COMPLETED)
                    for future in done:
                        evaluated, found = future.result()
                        completed += evaluated
                        for a, b, result in found:
                            union_find.union(a, b)
                            matches.append(result)
                    if on_progress is not None and not token.is_cancelled:
                        on_progress(completed, total)
            except BaseException:
                # Stop the other workers before the executor joins them
                abort.set()
                raise

        if token.is_cancelled:
            logger.warning(LogMessages.detection_cancelled(completed=completed, total=total))
            raise DetectionCancelledError(comparisons_completed=completed)
        return completed

    @staticmethod
    def _build_groups(
        records: Sequence[MusicRecord],
        union_find: _UnionFind,
        matches: list[MatchResult],
    ) -> tuple[DuplicateGroup, ...]:
        components = [
            sorted(indexes) for indexes in union_find.components().values() if len(indexes) >= 2
        ]
        # Records are sorted by id, so the smallest index is the smallest id
        components.sort(key=lambda indexes: indexes[0])

        matches_by_root: dict[int, list[MatchResult]] = {}
        position = {record.id: index for index, record in enumerate(records)}
        for result in matches:
            root = union_find.find(position[result.record_a_id])
            matches_by_root.setdefault(root, []).append(result)

        groups: list[DuplicateGroup] = []
        for group_id, indexes in enumerate(components, start=1):
            justifying = sorted(matches_by_root.get(union_find.find(indexes[0]), []), key=lambda m: m.pair)
            groups.append(
                DuplicateGroup(
                    group_id=group_id,
                    members=tuple(records[index] for index in indexes),
                    matches=tuple(justifying),
                )
            )
        return tuple(groups)


__all__ = [
    "CancellationToken",
    "CandidatePairs",
    "DuplicateGrouper",
    "ProgressCallback",
    "default_worker_count",
    "title_prefix_pairs",
]
