"""Directory conflict aggregator - duplicate groups seen per folder.

Hey future me - users often clean up duplicates folder by folder ("keep the
FLAC rip in /music/albums, drop the copies in /downloads"). This module
re-keys each group by the parent directories of its members:

    group {a, b, c in /lib/x ; d in /lib/y}  -> one DirectoryConflict (x vs y)
    group {a, b, c in /lib/x}                -> no conflict (single directory)

The default keep directory is the one holding the ranker's top record. The
ResolutionPlanner makes the final call with user input.
"""

import logging
from collections.abc import Iterable
from itertools import combinations

from soundsift.application.services.quality_ranker import QualityRanker
from soundsift.domain.entities import (
    DirectoryConflict,
    DirectoryMembers,
    DirectoryPairConflict,
    DuplicateGroup,
)

logger = logging.getLogger(__name__)


class DirectoryConflictAggregator:
    """Builds DirectoryConflicts from duplicate groups."""

    def __init__(self, ranker: QualityRanker | None = None) -> None:
        self._ranker = ranker or QualityRanker()

    def conflict_for(self, group: DuplicateGroup) -> DirectoryConflict | None:
        """Directory view of one group, None when all members share a directory."""
        by_directory: dict[str, list[str]] = {}
        for record in group.members:
            by_directory.setdefault(record.directory, []).append(record.id)
        if len(by_directory) < 2:
            return None

        best = self._ranker.best(group.members)
        return DirectoryConflict(
            group=group,
            directories=tuple(
                DirectoryMembers(directory=directory, record_ids=tuple(sorted(ids)))
                for directory, ids in sorted(by_directory.items())
            ),
            default_keep_directory=best.directory,
        )

    def aggregate(self, groups: Iterable[DuplicateGroup]) -> list[DirectoryConflict]:
        """Conflicts for every group spanning two or more directories (in group order)."""
        conflicts = []
        for group in groups:
            conflict = self.conflict_for(group)
            if conflict is not None:
                conflicts.append(conflict)
        logger.debug("Found %d directory conflicts", len(conflicts))
        return conflicts

    @staticmethod
    def pair_directory_conflicts(conflicts: Iterable[DirectoryConflict]) -> list[DirectoryPairConflict]:
        """Fold conflicts into directory-vs-directory pairs across all groups.

        Each pair lists the duplicate record pairs (one id from each directory)
        that link the two directories. Sorted by number of duplicate pairs
        (most first), then by directory names.
        """
        pairs: dict[tuple[str, str], list[tuple[str, str]]] = {}
        files: dict[tuple[str, str], tuple[set[str], set[str]]] = {}
        group_ids: dict[tuple[str, str], set[int]] = {}

        for conflict in conflicts:
            for first, second in combinations(conflict.directories, 2):
                key = (first.directory, second.directory)
                in_a, in_b = files.setdefault(key, (set(), set()))
                in_a.update(first.record_ids)
                in_b.update(second.record_ids)
                group_ids.setdefault(key, set()).add(conflict.group_id)
                pairs.setdefault(key, []).extend(
                    (id_a, id_b) for id_a in first.record_ids for id_b in second.record_ids
                )

        result = [
            DirectoryPairConflict(
                directory_a=key[0],
                directory_b=key[1],
                files_in_a=len(files[key][0]),
                files_in_b=len(files[key][1]),
                pairs=tuple(sorted(record_pairs)),
                group_ids=tuple(sorted(group_ids[key])),
            )
            for key, record_pairs in pairs.items()
        ]
        result.sort(key=lambda p: (-p.total_duplicate_pairs, p.directory_a, p.directory_b))
        return result


__all__ = ["DirectoryConflictAggregator"]
