"""Quality ranker - which copy of a duplicate should we keep?

Hey future me - the ranking key, in priority order:
    1. higher bitrate (missing bitrate counts as 0)
    2. better format: any lossless > opus > aac > ogg > mp3 > wma > unknown
    3. larger file size (missing counts as 0)
    4. more complete metadata (title/artist/album/genre/track/year populated)
    5. smaller record id - only there to make the order total and deterministic

If the top two records only differ by id (step 5), the choice is arbitrary and
the group is flagged needs_review so the host can ask the user.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from soundsift.domain.entities import METADATA_COMPLETENESS_FIELDS, MusicRecord

logger = logging.getLogger(__name__)


def quality_key(record: MusicRecord) -> tuple[int, int, int, int]:
    """Quality criteria of a record, bigger is better (id excluded)."""
    return (
        record.bitrate or 0,
        record.audio_format.quality_rank,
        record.file_size or 0,
        record.metadata_score,
    )


@dataclass(frozen=True)
class RankedRecords:
    """Records of one group ordered best-first, with the reason the winner won."""

    records: tuple[MusicRecord, ...]
    reason: str
    needs_review: bool

    @property
    def best(self) -> MusicRecord:
        return self.records[0]

    @property
    def rest(self) -> tuple[MusicRecord, ...]:
        return self.records[1:]


class QualityRanker:
    """Orders duplicate records by audio quality and metadata completeness."""

    def rank(self, records: Iterable[MusicRecord]) -> list[MusicRecord]:
        """Sort records best-first (a strict total order)."""
        # Two stable sorts: id ascending first, then quality descending
        ordered = sorted(records, key=lambda r: r.id)
        ordered.sort(key=quality_key, reverse=True)
        return ordered

    def best(self, records: Iterable[MusicRecord]) -> MusicRecord:
        """The default keep candidate.

        Raises:
            ValueError: If records is empty
        """
        ordered = self.rank(records)
        if not ordered:
            raise ValueError("Cannot pick the best record of an empty collection")
        return ordered[0]

    def rank_with_reason(self, records: Iterable[MusicRecord]) -> RankedRecords:
        """Rank records and explain why the winner was picked.

        Raises:
            ValueError: If records is empty
        """
        ordered = self.rank(records)
        if not ordered:
            raise ValueError("Cannot rank an empty collection")
        runner_up = ordered[1] if len(ordered) > 1 else None
        needs_review = runner_up is not None and quality_key(ordered[0]) == quality_key(runner_up)
        reason = self.explain(ordered[0], runner_up)
        logger.debug(
            "Best copy %s of %d: %s%s",
            ordered[0].id,
            len(ordered),
            reason,
            " (needs review)" if needs_review else "",
        )
        return RankedRecords(records=tuple(ordered), reason=reason, needs_review=needs_review)

    @staticmethod
    def explain(winner: MusicRecord, runner_up: MusicRecord | None) -> str:
        """Name the first criterion where the winner beat the runner-up."""
        if runner_up is None:
            return "Only copy"
        if (winner.bitrate or 0) > (runner_up.bitrate or 0):
            return f"Highest bitrate ({winner.bitrate} kbps)"
        winner_format, runner_format = winner.audio_format, runner_up.audio_format
        if winner_format.quality_rank > runner_format.quality_rank:
            if winner_format.is_lossless:
                return f"Lossless format ({winner_format})"
            return f"Better format ({winner_format})"
        if (winner.file_size or 0) > (runner_up.file_size or 0):
            return "Larger file"
        if winner.metadata_score > runner_up.metadata_score:
            return (
                f"More complete metadata "
                f"({winner.metadata_score}/{len(METADATA_COMPLETENESS_FIELDS)} fields)"
            )
        return "Tie broken by record id"


__all__ = ["QualityRanker", "RankedRecords", "quality_key"]
