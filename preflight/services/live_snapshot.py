"""
Concurrent assembly of the live snapshot.
"""

from __future__ import annotations

import asyncio
import logging
import math
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional

from preflight.schemas import (
    AttendanceDay,
    AttendanceSummary,
    FinanceSummary,
    LiveSnapshot,
    Record,
    SnapshotMetadata,
    SnapshotStats,
)
from preflight.services.source_readers import SourceReaders

logger = logging.getLogger(__name__)

ATTENDANCE_WINDOW_DAYS = 7


class LiveSnapshotAssembler:
    """Fan out to every source reader and merge the results."""

    def __init__(
        self,
        readers: SourceReaders,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._readers = readers
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def fetch_all_live_data(self, query: str = "") -> LiveSnapshot:
        """Read all sources concurrently; never raises."""
        readers = self._readers
        (
            workers,
            projects,
            materials,
            suppliers,
            clients,
            finance,
            system,
            attendance,
            leave_requests,
            incidents,
            daily_reports,
            holidays,
        ) = await asyncio.gather(
            readers.fetch_workers(),
            readers.fetch_projects(),
            readers.fetch_materials(),
            readers.fetch_suppliers(),
            readers.fetch_clients(),
            readers.fetch_finance(),
            readers.fetch_system_snapshot(),
            readers.fetch_attendance(),
            readers.fetch_leave_requests(),
            readers.fetch_incidents(),
            readers.fetch_daily_reports(),
            readers.fetch_holidays(),
        )

        stats = SnapshotStats(
            total_workers=len(workers),
            total_projects=len(projects),
            total_materials=len(materials),
            total_suppliers=len(suppliers),
            total_clients=len(clients),
            total_attendance=len(attendance),
        )
        logger.info(
            "Fetched live data: %d workers, %d projects, %d attendance records",
            stats.total_workers,
            stats.total_projects,
            stats.total_attendance,
        )

        return LiveSnapshot(
            workers=workers,
            projects=projects,
            materials=materials,
            suppliers=suppliers,
            clients=clients,
            finance=compute_finance(finance, system),
            system=system,
            attendance=attendance,
            attendance_by_date=summarize_attendance(attendance),
            leave_requests=leave_requests,
            incidents=incidents,
            daily_reports=daily_reports,
            holidays=holidays,
            metadata=SnapshotMetadata(fetched_at=self._clock(), query=query, stats=stats),
        )


def is_present(record: Record) -> bool:
    return bool(record.get("isPresent")) or record.get("status") == "Present"


def is_absent(record: Record) -> bool:
    # Not the complement of is_present: isPresent=True with status "Absent"
    # lands in both buckets.
    return not record.get("isPresent") or record.get("status") == "Absent"


def _tally(records: Iterable[Record]) -> AttendanceDay:
    day = list(records)
    return AttendanceDay(
        total=len(day),
        present=sum(1 for record in day if is_present(record)),
        absent=sum(1 for record in day if is_absent(record)),
    )


def summarize_attendance(attendance: List[Record]) -> AttendanceSummary:
    """Roll attendance up by date over the most recent distinct dates.

    The top-level ``present``/``absent`` describe the latest date only, while
    ``total`` counts every record in the fetched window.
    """
    if not attendance:
        return AttendanceSummary()

    dates = sorted(
        {str(record["date"]) for record in attendance if record.get("date")},
        reverse=True,
    )[:ATTENDANCE_WINDOW_DAYS]

    by_date = {
        day: _tally(record for record in attendance if str(record.get("date")) == day)
        for day in dates
    }
    latest_date: Optional[str] = dates[0] if dates else None
    latest = by_date.get(latest_date) if latest_date else None

    return AttendanceSummary(
        total=len(attendance),
        present=latest.present if latest else 0,
        absent=latest.absent if latest else 0,
        no_record=0,
        latest_date=latest_date,
        by_date=by_date,
    )


def _amount(value: object) -> float:
    """Numeric aggregate value; anything unparsable reads as 0."""
    try:
        amount = float(value or 0)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0
    return amount if math.isfinite(amount) else 0.0


def compute_finance(
    finance: Optional[Record], system: Optional[Record]
) -> FinanceSummary:
    """Prefer the system aggregate field by field, then finance, then zero."""
    system = system or {}
    finance = finance or {}

    cash_balance = _amount(system.get("cash_balance") or finance.get("cash_balance"))
    total_income = _amount(system.get("total_money_in") or finance.get("total_income"))
    total_expenses = _amount(
        system.get("total_money_out") or finance.get("total_expenses")
    )
    pending = _amount(
        system.get("pending_payments") or finance.get("pending_payments_value")
    )
    profit = total_income - total_expenses

    return FinanceSummary(
        cash_balance=cash_balance,
        total_income=total_income,
        total_expenses=total_expenses,
        profit=profit,
        loss=abs(profit) if profit < 0 else 0,
        net_flow=profit,
        pending_payments=pending,
    )


__all__ = [
    "LiveSnapshotAssembler",
    "compute_finance",
    "is_absent",
    "is_present",
    "summarize_attendance",
]
