"""Record matcher - pairwise duplicate verdicts.

Hey future me - this is where one PAIR of records gets its verdict. The grouper
calls compare() for every candidate pair (possibly from several worker threads),
so everything in here must stay side-effect free once prime() has run.

Verdict rules:
    1. Fingerprint shortcut: use_fingerprints on + both records fingerprinted +
       fingerprints equal -> MATCH, whatever the text says.
    2. Otherwise score title/artist/album. A field only counts when BOTH records
       carry a value for it; a missing album neither helps nor hurts.
    3. MATCH iff passed fields >= minimum_fields_to_match
                AND duration within tolerance (skipped if a duration is missing)
                AND track numbers equal (only when required AND both present).
"""

import logging
from collections.abc import Iterable

from soundsift.application.services.similarity import field_similarity
from soundsift.domain.entities import (
    COMPARED_TEXT_FIELDS,
    FieldScore,
    MatchResult,
    MusicRecord,
)
from soundsift.domain.value_objects import (
    FieldKind,
    MatchingConfig,
    NormalizationRules,
    normalize,
)

logger = logging.getLogger(__name__)

# Normalized compared fields of one record, None where the raw tag is missing
NormalizedFields = tuple[str | None, ...]


class RecordMatcher:
    """Compares two records under one (validated) MatchingConfig."""

    def __init__(self, config: MatchingConfig) -> None:
        """Initialize matcher.

        Args:
            config: Matching configuration for this pass

        Raises:
            InvalidConfigurationError: If the config is invalid
        """
        self._config = config.validate()
        self._rules = NormalizationRules.from_config(config)
        self._normalized: dict[MusicRecord, NormalizedFields] = {}

    @property
    def config(self) -> MatchingConfig:
        return self._config

    def prime(self, records: Iterable[MusicRecord]) -> None:
        """Pre-normalize records so compare() doesn't redo it for every pair.

        Call this BEFORE handing the matcher to worker threads - compare() only
        reads the cache afterwards. Replaces whatever an earlier pass primed.
        """
        self._normalized = {record: self._normalize_record(record) for record in records}

    def normalized_fields(self, record: MusicRecord) -> NormalizedFields:
        """Normalized title/artist/album of a record (None for missing tags)."""
        cached = self._normalized.get(record)
        if cached is not None:
            return cached
        return self._normalize_record(record)

    def _normalize_record(self, record: MusicRecord) -> NormalizedFields:
        return tuple(
            normalize(record.text(name), FieldKind(name), self._rules)
            if record.has_text(name)
            else None
            for name in COMPARED_TEXT_FIELDS
        )

    def compare(self, record_a: MusicRecord, record_b: MusicRecord) -> MatchResult:
        """Compare two records.

        The result is symmetric: compare(a, b) == compare(b, a). Ids in the
        result are ordered so record_a_id < record_b_id.
        """
        if record_b.id < record_a.id:
            record_a, record_b = record_b, record_a

        config = self._config
        field_scores = self._score_fields(record_a, record_b)
        passed = sum(1 for fs in field_scores if fs.passed)

        duration_ok = self.durations_match(record_a.duration_seconds, record_b.duration_seconds)

        track_checked = (
            config.track_number_must_match
            and record_a.track_number is not None
            and record_b.track_number is not None
        )
        track_ok = record_a.track_number == record_b.track_number if track_checked else True

        fingerprint_match = (
            config.use_fingerprints
            and record_a.has_fingerprint
            and record_b.has_fingerprint
            and record_a.fingerprint == record_b.fingerprint
        )

        is_match = fingerprint_match or (
            passed >= config.minimum_fields_to_match and duration_ok and track_ok
        )

        return MatchResult(
            record_a_id=record_a.id,
            record_b_id=record_b.id,
            field_scores=field_scores,
            duration_ok=duration_ok,
            track_checked=track_checked,
            track_ok=track_ok,
            fingerprint_match=fingerprint_match,
            minimum_fields=config.minimum_fields_to_match,
            is_match=is_match,
        )

    def is_duplicate(self, record_a: MusicRecord, record_b: MusicRecord) -> bool:
        """Shortcut for compare(a, b).is_match."""
        return self.compare(record_a, record_b).is_match

    def _score_fields(self, record_a: MusicRecord, record_b: MusicRecord) -> tuple[FieldScore, ...]:
        normalized_a = self.normalized_fields(record_a)
        normalized_b = self.normalized_fields(record_b)
        scores: list[FieldScore] = []
        for name, value_a, value_b in zip(COMPARED_TEXT_FIELDS, normalized_a, normalized_b):
            if value_a is None or value_b is None:
                continue
            # A tag like "!!!" normalizes to "" - two such tags count as equal,
            # one against real text scores 0.
            score = field_similarity(value_a, value_b, self._config.word_order_insensitive)
            scores.append(
                FieldScore(field_name=name, score=score, threshold=self._config.threshold_for(name))
            )
        return tuple(scores)

    def durations_match(self, duration_a: float | None, duration_b: float | None) -> bool:
        """Check the duration tolerance (the more permissive of seconds/percent wins).

        Missing durations never fail the check.
        """
        if duration_a is None or duration_b is None:
            return True
        diff = abs(duration_a - duration_b)
        if diff <= self._config.duration_tolerance_seconds:
            return True
        longest = max(duration_a, duration_b)
        return diff <= longest * self._config.duration_tolerance_percent / 100.0


__all__ = ["RecordMatcher"]
