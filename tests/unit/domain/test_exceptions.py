"""Tests for domain exceptions."""

import pytest

from soundsift.domain.exceptions import (
    DetectionCancelledError,
    DomainException,
    EntityNotFoundException,
    InvalidConfigurationError,
    InvalidRecordSetError,
    InvalidResolutionRequestError,
    ValidationException,
)


class TestExceptions:
    """Tests for the exception hierarchy."""

    def test_entity_not_found_keeps_parts(self) -> None:
        """Test type and id are available without parsing the message."""
        error = EntityNotFoundException("DuplicateGroup", 7)
        assert error.entity_type == "DuplicateGroup"
        assert error.entity_id == 7
        assert error.message == "DuplicateGroup with id 7 not found"

    def test_invalid_configuration_lists_all_errors(self) -> None:
        """Test every violation ends up in the message."""
        error = InvalidConfigurationError(["first problem", "second problem"])
        assert error.errors == ["first problem", "second problem"]
        assert "first problem; second problem" in str(error)

    @pytest.mark.parametrize(
        "exc_type",
        [InvalidConfigurationError, InvalidRecordSetError, InvalidResolutionRequestError],
    )
    def test_validation_subclasses(self, exc_type) -> None:
        """Test input errors can be caught as ValidationException."""
        assert issubclass(exc_type, ValidationException)
        assert issubclass(exc_type, DomainException)

    def test_cancelled_is_not_a_validation_error(self) -> None:
        """Test cancellation is its own branch of the hierarchy."""
        error = DetectionCancelledError(comparisons_completed=12)
        assert not isinstance(error, ValidationException)
        assert error.comparisons_completed == 12
        assert error.message == "Duplicate detection was cancelled"
