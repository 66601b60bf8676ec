"""Host collaborator ports (interfaces).

Following Hexagonal Architecture (Ports & Adapters), these are PORTS in the
domain layer. The engine itself never reads tags, computes fingerprints or
deletes files - the host implements these interfaces with its own database,
scanner and filesystem code and hands the results to the engine.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from soundsift.domain.entities import MusicRecord, ResolutionPlan


class IRecordSource(ABC):
    """Supplies the full list of current records for a detection pass.

    Implementations decide where records come from (library database, a scan
    result, a test fixture). The engine calls load_records() once per pass and
    never asks for more data afterwards.
    """

    @abstractmethod
    def load_records(self) -> Sequence[MusicRecord]:
        """Return every record that should take part in the next pass."""
        pass


class IFingerprintProvider(ABC):
    """Supplies optional acoustic fingerprints.

    Fingerprints are opaque strings. The engine only compares them for equality
    and never interprets their structure.
    """

    @abstractmethod
    def fingerprint_for(self, record: MusicRecord) -> str | None:
        """Return the fingerprint of a record, or None when none is available."""
        pass


class IExecutionSink(ABC):
    """Executes resolution plans (deletes/moves files, updates storage).

    Hey future me - execution is a ONE-WAY hand-off! The engine never observes the
    outcome. If a deletion fails, the sink reports it to the user/host directly
    and the host re-runs detection once the library settled.
    """

    @abstractmethod
    def execute(self, plan: ResolutionPlan) -> None:
        """Carry out a plan (delete plan.delete, keep plan.keep)."""
        pass


__all__ = ["IExecutionSink", "IFingerprintProvider", "IRecordSource"]
