"""Resolution planner - keep/delete plans for duplicate groups.

Hey future me - this module only PLANS. It never deletes, moves or renames
anything; the host hands plans to its execution sink (see domain.ports).

Plan guarantees (every entry point):
    - every member of the group is in exactly one of keep/delete
    - keep is never empty (the top-ranked record is always kept unless the
      user explicitly picked another one to keep)
    - exclusions (force-keep ids) are ADDED to keep, never replace the winner
    - ids in exclusions that aren't members are ignored

Planning is deterministic: keep/delete tuples are sorted by record id.
"""

import logging
from collections.abc import Collection, Iterable

from soundsift.application.services.quality_ranker import QualityRanker
from soundsift.domain.entities import (
    AutoResolutionPreview,
    DirectoryConflict,
    DirectoryPairConflict,
    DuplicateGroup,
    ResolutionPlan,
)
from soundsift.domain.exceptions import InvalidResolutionRequestError
from soundsift.infrastructure.observability.log_messages import LogMessages

logger = logging.getLogger(__name__)


class ResolutionPlanner:
    """Turns groups and directory conflicts into ResolutionPlans."""

    def __init__(self, ranker: QualityRanker | None = None) -> None:
        self._ranker = ranker or QualityRanker()

    def plan_group(
        self,
        group: DuplicateGroup,
        exclusions: Collection[str] = (),
        keep_id: str | None = None,
    ) -> ResolutionPlan:
        """Plan one group: keep the best (or user-chosen) record, delete the rest.

        Args:
            group: Group to resolve
            exclusions: Record ids the user wants force-kept
            keep_id: Keep this record instead of the ranker's choice

        Raises:
            InvalidResolutionRequestError: If keep_id is not a group member
        """
        ranked = self._ranker.rank_with_reason(group.members)
        if keep_id is None:
            primary = ranked.best.id
            reason = ranked.reason
        elif group.contains(keep_id):
            primary = keep_id
            reason = "Selected by user"
        else:
            raise InvalidResolutionRequestError(
                f"Record {keep_id} is not a member of duplicate group {group.group_id}"
            )

        forced = self._member_exclusions(group, exclusions)
        plan = self._partition(
            group,
            keep=forced | {primary},
            reason=reason,
            needs_review=ranked.needs_review and keep_id is None,
        )
        logger.debug(
            LogMessages.plan_built(
                group_id=group.group_id, keep=len(plan.keep), delete=len(plan.delete), reason=reason
            )
        )
        return plan

    def plan_directory_conflict(
        self,
        conflict: DirectoryConflict,
        keep_directory: str | None = None,
        exclusions: Collection[str] = (),
    ) -> ResolutionPlan:
        """Plan a directory conflict: keep one directory's copies, delete the others.

        Args:
            conflict: Conflict to resolve
            keep_directory: Directory to keep (default: the one with the best record)
            exclusions: Record ids the user wants force-kept

        Raises:
            InvalidResolutionRequestError: If keep_directory is not part of the conflict
        """
        directory = keep_directory or conflict.default_keep_directory
        if directory not in conflict.directory_names:
            raise InvalidResolutionRequestError(
                f"Directory {directory} is not part of the conflict for group {conflict.group_id}"
            )

        reason = (
            "Directory containing the best copy"
            if keep_directory is None or keep_directory == conflict.default_keep_directory
            else "Directory selected by user"
        )
        forced = self._member_exclusions(conflict.group, exclusions)
        plan = self._partition(
            conflict.group,
            keep=forced | set(conflict.members_in(directory)),
            reason=reason,
            keep_directory=directory,
        )
        logger.debug(
            LogMessages.plan_built(
                group_id=conflict.group_id, keep=len(plan.keep), delete=len(plan.delete), reason=reason
            )
        )
        return plan

    def plan_directory_pair(
        self,
        pair: DirectoryPairConflict,
        groups: Iterable[DuplicateGroup],
        keep_directory: str,
        exclusions: Collection[str] = (),
    ) -> list[ResolutionPlan]:
        """Resolve two directories against each other across all their groups.

        Every group of the pair gets one plan that deletes its members in the
        other directory. Members in the kept directory, or in directories outside
        the pair, stay untouched.

        Args:
            pair: Directory pair from DirectoryConflictAggregator.pair_directory_conflicts
            groups: Groups of the same pass (others than the pair's are skipped)
            keep_directory: directory_a or directory_b of the pair
            exclusions: Record ids the user wants force-kept

        Returns:
            One plan per group of the pair, in group id order

        Raises:
            InvalidResolutionRequestError: If keep_directory is not in the pair,
                or a group of the pair is missing from groups
        """
        if keep_directory == pair.directory_a:
            delete_directory = pair.directory_b
        elif keep_directory == pair.directory_b:
            delete_directory = pair.directory_a
        else:
            raise InvalidResolutionRequestError(
                f"Directory {keep_directory} is not part of the pair "
                f"{pair.directory_a} / {pair.directory_b}"
            )

        by_id = {group.group_id: group for group in groups if group.group_id in pair.group_ids}
        missing = sorted(set(pair.group_ids) - set(by_id))
        if missing:
            raise InvalidResolutionRequestError(f"Groups {missing} of the directory pair were not given")

        reason = f"Keep {keep_directory} over {delete_directory}"
        plans: list[ResolutionPlan] = []
        for group_id in sorted(by_id):
            group = by_id[group_id]
            doomed = {member.id for member in group if member.directory == delete_directory}
            forced = self._member_exclusions(group, exclusions)
            plan = self._partition(
                group,
                keep=(set(group.record_ids) - doomed) | forced,
                reason=reason,
                keep_directory=keep_directory,
            )
            logger.debug(
                LogMessages.plan_built(
                    group_id=group_id, keep=len(plan.keep), delete=len(plan.delete), reason=reason
                )
            )
            plans.append(plan)
        return plans

    def preview_auto_resolution(
        self,
        groups: Iterable[DuplicateGroup],
        exclusions: Collection[str] = (),
    ) -> AutoResolutionPreview:
        """Plan every group that has a clear winner; list the rest for review.

        Groups whose top two records tie on every quality criterion are NOT
        planned - picking by id alone is not something to auto-apply.
        """
        plans: list[ResolutionPlan] = []
        review: list[DuplicateGroup] = []
        for group in groups:
            plan = self.plan_group(group, exclusions)
            if plan.needs_review:
                review.append(group)
            else:
                plans.append(plan)

        preview = AutoResolutionPreview(plans=tuple(plans), review_groups=tuple(review))
        logger.info(
            LogMessages.auto_resolution_preview(
                groups=len(plans),
                delete=preview.total_to_delete,
                keep=preview.total_to_keep,
                review=len(review),
            )
        )
        return preview

    @staticmethod
    def _member_exclusions(group: DuplicateGroup, exclusions: Collection[str]) -> set[str]:
        members = set(group.record_ids)
        ignored = set(exclusions) - members
        if ignored:
            logger.debug(
                "Ignoring exclusions outside group %d: %s", group.group_id, sorted(ignored)
            )
        return set(exclusions) & members

    @staticmethod
    def _partition(
        group: DuplicateGroup,
        keep: set[str],
        reason: str,
        keep_directory: str | None = None,
        needs_review: bool = False,
    ) -> ResolutionPlan:
        return ResolutionPlan(
            group_id=group.group_id,
            keep=tuple(sorted(keep)),
            delete=tuple(sorted(set(group.record_ids) - keep)),
            reason=reason,
            keep_directory=keep_directory,
            needs_review=needs_review,
        )


__all__ = ["ResolutionPlanner"]
