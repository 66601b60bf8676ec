"""Domain exceptions."""

from typing import Any


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    # Hey future me, we store message as an attribute so callers can inspect it without
    # parsing str(exception). Don't raise this directly - use a specific subclass so the
    # host can catch precisely (bad config vs. cancelled pass vs. bad plan request).
    def __init__(self, message: str, *args: Any) -> None:
        super().__init__(message, *args)
        self.message = message


class EntityNotFoundException(DomainException):
    """Raised when an entity is not found."""

    # Used by the DuplicateService lookups: "Record abc not in the current pass",
    # "DuplicateGroup 7 not found". entity_type/entity_id are kept separately so
    # the host can render them without string parsing.
    def __init__(self, entity_type: str, entity_id: Any) -> None:
        super().__init__(f"{entity_type} with id {entity_id} not found")
        self.entity_type = entity_type
        self.entity_id = entity_id


class ValidationException(DomainException):
    """Raised when input to an engine operation is invalid."""

    pass


class InvalidConfigurationError(ValidationException):
    """Raised when a MatchingConfig violates its invariants.

    Detection fails fast with this error BEFORE any pair is scored, so there
    is never a partial result computed under a broken configuration.

    Example:
        raise InvalidConfigurationError(["title_threshold must be within [0, 100], got 120"])
    """

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__("Invalid matching configuration: " + "; ".join(self.errors))


class InvalidRecordSetError(ValidationException):
    """Raised when the host supplies an unusable record set (e.g. repeated ids)."""

    pass


class InvalidResolutionRequestError(ValidationException):
    """Raised when a resolution request names records/directories outside the group.

    Example:
        raise InvalidResolutionRequestError("Record x is not a member of group 3")
    """

    pass


class DetectionCancelledError(DomainException):
    """Raised when a detection pass was cancelled cooperatively.

    Hey future me - a cancelled pass NEVER returns partial groups! The grouper
    raises this instead so a half-built grouping can't be mistaken for a real one.
    """

    def __init__(
        self,
        message: str = "Duplicate detection was cancelled",
        comparisons_completed: int = 0,
    ) -> None:
        super().__init__(message)
        self.comparisons_completed = comparisons_completed


# Aliases matching the naming used elsewhere in the codebase
EntityNotFoundError = EntityNotFoundException
ValidationError = ValidationException


__all__ = [
    "DomainException",
    "EntityNotFoundException",
    "EntityNotFoundError",
    "ValidationException",
    "ValidationError",
    "InvalidConfigurationError",
    "InvalidRecordSetError",
    "InvalidResolutionRequestError",
    "DetectionCancelledError",
]
