"""Domain entities."""

from soundsift.domain.entities.duplicates import (
    AutoResolutionPreview,
    DetectionResult,
    DirectoryConflict,
    DirectoryMembers,
    DirectoryPairConflict,
    DuplicateGroup,
    FieldScore,
    MatchResult,
    ResolutionPlan,
)
from soundsift.domain.entities.music_record import (
    COMPARED_TEXT_FIELDS,
    METADATA_COMPLETENESS_FIELDS,
    MusicRecord,
)

__all__ = [
    "COMPARED_TEXT_FIELDS",
    "METADATA_COMPLETENESS_FIELDS",
    "AutoResolutionPreview",
    "DetectionResult",
    "DirectoryConflict",
    "DirectoryMembers",
    "DirectoryPairConflict",
    "DuplicateGroup",
    "FieldScore",
    "MatchResult",
    "MusicRecord",
    "ResolutionPlan",
]
