"""Shared pytest fixtures."""

from collections.abc import Callable
from typing import Any

import pytest

from soundsift.domain.entities import MusicRecord

RecordFactory = Callable[..., MusicRecord]


def build_record(record_id: str, **fields: Any) -> MusicRecord:
    """Build a MusicRecord with a default path derived from its id."""
    fields.setdefault("path", f"/music/library/{record_id}.mp3")
    return MusicRecord(id=record_id, **fields)


@pytest.fixture
def make_record() -> RecordFactory:
    """Factory fixture: make_record("a", title="Song", artist="Band")."""
    return build_record
