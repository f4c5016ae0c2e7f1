"""
Pydantic models for live snapshots and executive analyses.

Source records stay as plain dictionaries: their schemas belong to the portal
tables, and the engine only reads a handful of known fields from them.
"""

from datetime import date, datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

Record = Dict[str, Any]
TrendDirection = Literal["improving", "declining", "stable"]


class _AliasedModel(BaseModel):
    """Models whose wire names are camelCase but are built with snake_case."""

    model_config = ConfigDict(populate_by_name=True)


class FinanceSummary(BaseModel):
    """Normalized finance figures derived from the daily aggregates."""

    cash_balance: float = 0
    total_income: float = 0
    total_expenses: float = 0
    profit: float = 0
    loss: float = 0
    net_flow: float = 0
    pending_payments: float = 0


class AttendanceDay(BaseModel):
    total: int = 0
    present: int = 0
    absent: int = 0


class AttendanceSummary(_AliasedModel):
    """Attendance rollup over the most recent distinct dates."""

    total: int = Field(0, description="Records in the whole attendance window.")
    present: int = Field(0, description="Present on the latest date only.")
    absent: int = Field(0, description="Absent on the latest date only.")
    no_record: int = Field(0, alias="noRecord")
    latest_date: Optional[str] = Field(None, alias="latestDate")
    by_date: Dict[str, AttendanceDay] = Field(default_factory=dict, alias="byDate")


class SnapshotStats(_AliasedModel):
    total_workers: int = Field(0, alias="totalWorkers")
    total_projects: int = Field(0, alias="totalProjects")
    total_materials: int = Field(0, alias="totalMaterials")
    total_suppliers: int = Field(0, alias="totalSuppliers")
    total_clients: int = Field(0, alias="totalClients")
    total_attendance: int = Field(0, alias="totalAttendance")


class SnapshotMetadata(_AliasedModel):
    fetched_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), alias="fetchedAt"
    )
    query: str = ""
    stats: SnapshotStats = Field(default_factory=SnapshotStats)


class LiveSnapshot(_AliasedModel):
    """Point-in-time merge of every source reader's result."""

    workers: List[Record] = Field(default_factory=list)
    projects: List[Record] = Field(default_factory=list)
    materials: List[Record] = Field(default_factory=list)
    suppliers: List[Record] = Field(default_factory=list)
    clients: List[Record] = Field(default_factory=list)
    finance: FinanceSummary = Field(default_factory=FinanceSummary)
    system: Optional[Record] = None
    attendance: List[Record] = Field(default_factory=list)
    attendance_by_date: AttendanceSummary = Field(
        default_factory=AttendanceSummary, alias="attendanceByDate"
    )
    leave_requests: List[Record] = Field(default_factory=list, alias="leaveRequests")
    incidents: List[Record] = Field(default_factory=list)
    daily_reports: List[Record] = Field(default_factory=list, alias="dailyReports")
    holidays: List[Record] = Field(default_factory=list)
    metadata: SnapshotMetadata = Field(default_factory=SnapshotMetadata)

    def to_payload(self) -> Dict[str, Any]:
        """Full JSON-ready payload, as returned when analytics are unavailable."""
        return self.model_dump(mode="json", by_alias=True)

    def to_snapshot_data(self) -> Dict[str, Any]:
        """Trimmed copy that is persisted alongside an analysis."""
        return self.model_dump(
            mode="json", by_alias=True, exclude={"system", "metadata"}
        )


class WorkerMetrics(_AliasedModel):
    total: int = 0
    present: int = 0
    absent: int = 0
    attendance_rate: int = Field(0, alias="attendanceRate")


class ProjectMetrics(_AliasedModel):
    total: int = 0
    on_track: int = Field(0, alias="onTrack")
    delayed: int = 0
    critical: int = 0


class FinanceMetrics(_AliasedModel):
    cash_balance: float = Field(0, alias="cashBalance")
    profit: float = 0
    income: float = 0
    expenses: float = 0
    profit_margin: int = Field(0, alias="profitMargin")


class KeyMetrics(BaseModel):
    workers: WorkerMetrics = Field(default_factory=WorkerMetrics)
    projects: ProjectMetrics = Field(default_factory=ProjectMetrics)
    finance: FinanceMetrics = Field(default_factory=FinanceMetrics)


class Trends(BaseModel):
    """Direction of change against the previous analysis.

    ``attendance`` and ``finance`` stay ``None`` when there is no comparable
    prior value and are then left out of the payload.
    """

    attendance: Optional[TrendDirection] = None
    finance: Optional[TrendDirection] = None
    projects: TrendDirection = "stable"


class Prediction(BaseModel):
    type: str
    message: str
    severity: Literal["low", "medium", "high"]


class ActionItem(BaseModel):
    priority: Literal["low", "medium", "high"]
    task: str
    category: str


class Alert(BaseModel):
    severity: Literal["high", "critical"]
    category: str
    title: str
    message: str


class AnalysisMetadata(_AliasedModel):
    total_workers: int = Field(0, alias="totalWorkers")
    total_projects: int = Field(0, alias="totalProjects")
    total_attendance: int = Field(0, alias="totalAttendance")
    generated_at: datetime = Field(..., alias="generatedAt")


class CEOAnalysis(BaseModel):
    """A freshly computed executive analysis."""

    analysis_date: date
    generated_at: datetime
    snapshot_data: Dict[str, Any]
    key_metrics: KeyMetrics
    trends: Trends
    predictions: List[Prediction] = Field(default_factory=list)
    insights: List[str] = Field(default_factory=list)
    action_items: List[ActionItem] = Field(default_factory=list)
    alerts: List[Alert] = Field(default_factory=list)
    metadata: AnalysisMetadata

    def to_record(self) -> Dict[str, Any]:
        """Columns written to the snapshot table."""
        return {
            "analysis_date": self.analysis_date.isoformat(),
            "generated_at": self.generated_at.isoformat(),
            "snapshot_data": self.snapshot_data,
            "key_metrics": self.key_metrics.model_dump(mode="json", by_alias=True),
            "alerts": [alert.model_dump(mode="json") for alert in self.alerts],
        }

    def to_payload(self) -> Dict[str, Any]:
        return {
            **self.snapshot_data,
            "key_metrics": self.key_metrics.model_dump(mode="json", by_alias=True),
            "trends": self.trends.model_dump(mode="json", exclude_none=True),
            "predictions": [item.model_dump(mode="json") for item in self.predictions],
            "insights": list(self.insights),
            "action_items": [item.model_dump(mode="json") for item in self.action_items],
            "alerts": [alert.model_dump(mode="json") for alert in self.alerts],
            "generated_at": self.generated_at.isoformat(),
            "isCached": False,
        }


class PersistedSnapshot(BaseModel):
    """A row read back from the snapshot table."""

    model_config = ConfigDict(extra="ignore")

    analysis_date: date
    generated_at: Optional[datetime] = None
    snapshot_data: Dict[str, Any] = Field(default_factory=dict)
    key_metrics: Dict[str, Any] = Field(default_factory=dict)
    alerts: List[Dict[str, Any]] = Field(default_factory=list)

    @field_validator("snapshot_data", "key_metrics", "alerts", mode="before")
    @classmethod
    def _null_to_empty(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return [] if info.field_name == "alerts" else {}
        return value

    @field_validator("generated_at")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def to_payload(self) -> Dict[str, Any]:
        return {
            **self.snapshot_data,
            "key_metrics": self.key_metrics,
            "alerts": self.alerts,
            "generated_at": self.generated_at.isoformat() if self.generated_at else None,
            "isCached": True,
        }


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
