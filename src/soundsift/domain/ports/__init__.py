"""Domain ports (interfaces) implemented by the host."""

from soundsift.domain.ports.host import (
    IExecutionSink,
    IFingerprintProvider,
    IRecordSource,
)

__all__ = ["IExecutionSink", "IFingerprintProvider", "IRecordSource"]
