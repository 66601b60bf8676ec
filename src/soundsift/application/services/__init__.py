"""Application services - the duplicate detection and resolution engine."""

from soundsift.application.services.directory_conflicts import DirectoryConflictAggregator
from soundsift.application.services.duplicate_grouper import (
    CancellationToken,
    DuplicateGrouper,
    title_prefix_pairs,
)
from soundsift.application.services.duplicate_service import DuplicateService
from soundsift.application.services.quality_ranker import QualityRanker, RankedRecords
from soundsift.application.services.record_matcher import RecordMatcher
from soundsift.application.services.resolution_planner import ResolutionPlanner
from soundsift.application.services.similarity import edit_similarity, field_similarity

__all__ = [
    "CancellationToken",
    "DirectoryConflictAggregator",
    "DuplicateGrouper",
    "DuplicateService",
    "QualityRanker",
    "RankedRecords",
    "RecordMatcher",
    "ResolutionPlanner",
    "edit_similarity",
    "field_similarity",
    "title_prefix_pairs",
]
