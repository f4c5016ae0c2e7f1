"""Service layer exports."""

from .ceo_analysis import compute_ceo_analysis
from .live_snapshot import LiveSnapshotAssembler, compute_finance, summarize_attendance
from .snapshot_store import SnapshotBackend, SnapshotStore
from .source_readers import SourceReaders, fail_open

__all__ = [
    "LiveSnapshotAssembler",
    "SnapshotBackend",
    "SnapshotStore",
    "SourceReaders",
    "compute_ceo_analysis",
    "compute_finance",
    "fail_open",
    "summarize_attendance",
]
