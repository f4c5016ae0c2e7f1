try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

from datetime import datetime, timezone

import pytest

from preflight.services import LiveSnapshotAssembler, compute_finance, summarize_attendance
from preflight.services.live_snapshot import is_absent, is_present


def _attendance(day: str, present: int, absent: int) -> list[dict]:
    rows = [{"date": day, "isPresent": True, "status": "Present"} for _ in range(present)]
    rows += [{"date": day, "isPresent": False, "status": "Absent"} for _ in range(absent)]
    return rows


def test_summary_reports_latest_date_only() -> None:
    records = _attendance("2026-10-18", 9, 1) + _attendance("2026-10-19", 6, 4)

    summary = summarize_attendance(records)

    assert summary.latest_date == "2026-10-19"
    assert summary.present == 6
    assert summary.absent == 4
    assert summary.total == 20
    assert summary.no_record == 0
    assert summary.by_date["2026-10-18"].present == 9
    assert summary.by_date["2026-10-18"].total == 10


def test_summary_keeps_seven_most_recent_dates() -> None:
    records = []
    for day in range(1, 11):
        records += _attendance(f"2026-10-{day:02d}", 1, 0)

    summary = summarize_attendance(records)

    assert sorted(summary.by_date) == [f"2026-10-{day:02d}" for day in range(4, 11)]
    # Records outside the window still count towards the total.
    assert summary.total == 10


def test_empty_attendance_gives_zeroed_summary() -> None:
    summary = summarize_attendance([])

    assert summary.total == 0
    assert summary.present == 0
    assert summary.absent == 0
    assert summary.latest_date is None
    assert summary.by_date == {}


def test_records_without_date_count_in_total_only() -> None:
    records = _attendance("2026-10-19", 2, 0) + [{"isPresent": True}]

    summary = summarize_attendance(records)

    assert summary.total == 3
    assert list(summary.by_date) == ["2026-10-19"]
    assert summary.present == 2


def test_conflicting_flags_count_as_present_and_absent() -> None:
    record = {"date": "2026-10-19", "isPresent": True, "status": "Absent"}

    assert is_present(record)
    assert is_absent(record)

    summary = summarize_attendance([record])
    assert summary.present == 1
    assert summary.absent == 1
    assert summary.by_date["2026-10-19"].total == 1


def test_status_alone_marks_present() -> None:
    record = {"date": "2026-10-19", "status": "Present"}

    assert is_present(record)
    # A missing isPresent flag reads as absent as well.
    assert is_absent(record)


def test_finance_prefers_system_aggregate() -> None:
    system = {
        "cash_balance": 750_000,
        "total_money_in": 1_200_000,
        "total_money_out": 900_000,
        "pending_payments": 40_000,
    }
    finance = {
        "cash_balance": 1,
        "total_income": 2,
        "total_expenses": 3,
        "pending_payments_value": 4,
    }

    summary = compute_finance(finance, system)

    assert summary.cash_balance == 750_000
    assert summary.total_income == 1_200_000
    assert summary.total_expenses == 900_000
    assert summary.pending_payments == 40_000
    assert summary.profit == 300_000
    assert summary.net_flow == 300_000
    assert summary.loss == 0


def test_finance_falls_back_field_by_field() -> None:
    system = {"cash_balance": 10_000, "total_money_in": 0}
    finance = {"total_income": 50_000, "total_expenses": 80_000}

    summary = compute_finance(finance, system)

    assert summary.cash_balance == 10_000
    assert summary.total_income == 50_000
    assert summary.total_expenses == 80_000
    assert summary.profit == -30_000
    assert summary.loss == 30_000
    assert summary.pending_payments == 0


def test_finance_defaults_to_zero_without_sources() -> None:
    summary = compute_finance(None, None)

    assert summary.model_dump() == {
        "cash_balance": 0,
        "total_income": 0,
        "total_expenses": 0,
        "profit": 0,
        "loss": 0,
        "net_flow": 0,
        "pending_payments": 0,
    }


def test_finance_reads_unparsable_aggregates_as_zero() -> None:
    system = {
        "cash_balance": "n/a",
        "total_money_in": "125000.50",
        "total_money_out": {"amount": 10},
        "pending_payments": "NaN",
    }

    summary = compute_finance(None, system)

    assert summary.cash_balance == 0
    assert summary.total_income == 125_000.50
    assert summary.total_expenses == 0
    assert summary.pending_payments == 0
    assert summary.profit == 125_000.50


class StubReaders:
    def __init__(self, system: dict | None = None) -> None:
        self.workers = [{"id": 1}, {"id": 2}, {"id": 3}]
        self.system = system

    async def fetch_workers(self):
        return self.workers

    async def fetch_projects(self):
        return [{"id": 1, "progress": 20, "status": "Ongoing"}]

    async def fetch_materials(self):
        return []

    async def fetch_suppliers(self):
        return [{"id": 1}]

    async def fetch_clients(self):
        return [{"id": 1}, {"id": 2}]

    async def fetch_finance(self):
        return {"cash_balance": 100_000, "total_income": 10_000, "total_expenses": 4_000}

    async def fetch_system_snapshot(self):
        return self.system

    async def fetch_attendance(self):
        return _attendance("2026-10-19", 2, 1)

    async def fetch_leave_requests(self):
        return []

    async def fetch_incidents(self):
        return []

    async def fetch_daily_reports(self):
        return []

    async def fetch_holidays(self):
        return []


@pytest.mark.asyncio
async def test_assembler_builds_stats_and_payload() -> None:
    fetched_at = datetime(2026, 10, 19, 8, 30, tzinfo=timezone.utc)
    assembler = LiveSnapshotAssembler(StubReaders(), clock=lambda: fetched_at)

    snapshot = await assembler.fetch_all_live_data("morning")
    payload = snapshot.to_payload()

    assert snapshot.finance.profit == 6_000
    assert snapshot.system is None
    assert payload["metadata"]["fetchedAt"] == "2026-10-19T08:30:00Z"
    assert payload["metadata"]["query"] == "morning"
    assert payload["metadata"]["stats"] == {
        "totalWorkers": 3,
        "totalProjects": 1,
        "totalMaterials": 0,
        "totalSuppliers": 1,
        "totalClients": 2,
        "totalAttendance": 3,
    }
    assert payload["attendanceByDate"]["latestDate"] == "2026-10-19"
    assert payload["attendanceByDate"]["present"] == 2
    assert "leaveRequests" in payload
    assert "dailyReports" in payload


@pytest.mark.asyncio
async def test_snapshot_data_leaves_out_system_and_metadata() -> None:
    assembler = LiveSnapshotAssembler(StubReaders())

    snapshot = await assembler.fetch_all_live_data()
    data = snapshot.to_snapshot_data()

    assert "system" not in data
    assert "metadata" not in data
    assert data["workers"] == [{"id": 1}, {"id": 2}, {"id": 3}]
    assert data["finance"]["cash_balance"] == 100_000


@pytest.mark.asyncio
async def test_assembler_tolerates_malformed_finance_aggregate() -> None:
    system = {"cash_balance": "pending audit", "total_money_in": [1, 2]}
    assembler = LiveSnapshotAssembler(StubReaders(system=system))

    snapshot = await assembler.fetch_all_live_data()

    # Malformed system fields fall through to zero, not to the finance row.
    assert snapshot.finance.cash_balance == 0
    assert snapshot.finance.total_income == 0
    assert snapshot.finance.total_expenses == 4_000
    assert snapshot.system == system
    assert snapshot.to_payload()["finance"]["profit"] == -4_000
