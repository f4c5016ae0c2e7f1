"""Public schema exports."""

from .analysis import (
    ActionItem,
    Alert,
    AnalysisMetadata,
    AttendanceDay,
    AttendanceSummary,
    CEOAnalysis,
    FinanceMetrics,
    FinanceSummary,
    KeyMetrics,
    LiveSnapshot,
    PersistedSnapshot,
    Prediction,
    ProjectMetrics,
    Record,
    SnapshotMetadata,
    SnapshotStats,
    Trends,
    TrendDirection,
    WorkerMetrics,
)

__all__ = [
    "ActionItem",
    "Alert",
    "AnalysisMetadata",
    "AttendanceDay",
    "AttendanceSummary",
    "CEOAnalysis",
    "FinanceMetrics",
    "FinanceSummary",
    "KeyMetrics",
    "LiveSnapshot",
    "PersistedSnapshot",
    "Prediction",
    "ProjectMetrics",
    "Record",
    "SnapshotMetadata",
    "SnapshotStats",
    "Trends",
    "TrendDirection",
    "WorkerMetrics",
]
