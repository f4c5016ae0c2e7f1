"""
Rule-based executive analysis over a live snapshot.

Everything here is a pure function of its inputs: no I/O, no clock reads.
The caller supplies ``now`` and the previous persisted analysis, which keeps
the thresholds below directly testable.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from preflight.schemas import (
    ActionItem,
    Alert,
    AnalysisMetadata,
    CEOAnalysis,
    FinanceMetrics,
    KeyMetrics,
    LiveSnapshot,
    Prediction,
    ProjectMetrics,
    Record,
    Trends,
    TrendDirection,
    WorkerMetrics,
)

ON_TRACK_PROGRESS = 80
DELAYED_PROGRESS = 50
CRITICAL_STATUSES = frozenset({"On Hold", "Cancelled"})

ATTENDANCE_TREND_DELTA = 2
FINANCE_TREND_DELTA = 10_000
ABSENCE_RATIO = 0.2
ABSENCE_LOOKBACK_DAYS = 3
ABSENCE_DAYS_TO_FLAG = 2

EXCELLENT_ATTENDANCE = 90
LOW_ATTENDANCE_INSIGHT = 75
LOW_ATTENDANCE_ACTION = 80
CRITICAL_ATTENDANCE = 60
LOW_CASH_BALANCE = 500_000
MANY_DELAYED_PROJECTS = 3


def round_half_up(value: float) -> int:
    """Round .5 upwards, unlike Python's banker's rounding."""
    return int(math.floor(value + 0.5))


def _progress(project: Record) -> Optional[float]:
    """Explicit ``None`` reads as 0; an absent or unparsable value is no progress."""
    if "progress" not in project:
        return None
    try:
        return float(project["progress"] or 0)
    except (TypeError, ValueError):
        return None


def is_on_track(project: Record) -> bool:
    progress = _progress(project)
    return progress is not None and progress >= ON_TRACK_PROGRESS


def is_delayed(project: Record) -> bool:
    progress = _progress(project)
    return (
        progress is not None
        and progress < DELAYED_PROGRESS
        and project.get("status") != "Completed"
    )


def is_critical(project: Record) -> bool:
    return project.get("status") in CRITICAL_STATUSES


def format_amount(value: float) -> str:
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.2f}"


def compute_key_metrics(live: LiveSnapshot) -> KeyMetrics:
    attendance = live.attendance_by_date
    total_workers = len(live.workers)
    attendance_rate = (
        round_half_up(attendance.present * 100 / total_workers) if total_workers > 0 else 0
    )

    finance = live.finance
    income = finance.total_income
    profit = finance.profit

    return KeyMetrics(
        workers=WorkerMetrics(
            total=total_workers,
            present=attendance.present,
            absent=attendance.absent,
            attendance_rate=attendance_rate,
        ),
        projects=ProjectMetrics(
            total=len(live.projects),
            on_track=sum(1 for p in live.projects if is_on_track(p)),
            delayed=sum(1 for p in live.projects if is_delayed(p)),
            critical=sum(1 for p in live.projects if is_critical(p)),
        ),
        finance=FinanceMetrics(
            cash_balance=finance.cash_balance,
            profit=profit,
            income=income,
            expenses=finance.total_expenses,
            profit_margin=round_half_up(profit * 100 / income) if income > 0 else 0,
        ),
    )


def _direction(diff: float, threshold: float) -> TrendDirection:
    if diff > threshold:
        return "improving"
    if diff < -threshold:
        return "declining"
    return "stable"


def _number(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def _comparable(value: Any) -> Optional[float]:
    """Numeric value of a prior metric, or ``None`` when it cannot be compared."""
    if value is None:
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def compute_trends(
    live: LiveSnapshot, previous_metrics: Optional[Mapping[str, Any]]
) -> Trends:
    """Compare against the previous analysis' key metrics.

    Attendance and finance directions exist only when the previous value is
    truthy; the project direction is always set.
    """
    previous = previous_metrics or {}
    prev_workers = previous.get("workers") or {}
    prev_finance = previous.get("finance") or {}
    prev_projects = previous.get("projects") or {}

    trends = Trends()
    if prev_workers.get("attendanceRate"):
        prev_present = (
            _comparable(prev_workers["present"]) if "present" in prev_workers else None
        )
        if prev_present is None:
            trends.attendance = "stable"
        else:
            diff = live.attendance_by_date.present - prev_present
            trends.attendance = _direction(diff, ATTENDANCE_TREND_DELTA)

    if prev_finance.get("profit"):
        diff = live.finance.profit - _number(prev_finance.get("profit"))
        trends.finance = _direction(diff, FINANCE_TREND_DELTA)

    previous_total = _number(prev_projects.get("total"))
    trends.projects = "stable" if len(live.projects) >= previous_total else "declining"
    return trends


def generate_predictions(live: LiveSnapshot) -> List[Prediction]:
    predictions: List[Prediction] = []

    by_date = live.attendance_by_date.by_date
    recent = sorted(by_date, reverse=True)[:ABSENCE_LOOKBACK_DAYS]
    high_absence_days = sum(
        1 for day in recent if by_date[day].absent > by_date[day].present * ABSENCE_RATIO
    )
    if high_absence_days >= ABSENCE_DAYS_TO_FLAG:
        predictions.append(
            Prediction(
                type="attendance",
                message=(
                    "High absence rate detected for 2+ days - may indicate morale "
                    "issues or site problems"
                ),
                severity="medium",
            )
        )

    if live.finance.profit < 0:
        predictions.append(
            Prediction(
                type="finance",
                message=(
                    "Current month showing loss - expect cash flow pressure in the "
                    "next 2 weeks"
                ),
                severity="high",
            )
        )

    delayed = sum(1 for p in live.projects if is_delayed(p))
    if delayed > 0:
        predictions.append(
            Prediction(
                type="projects",
                message=(
                    f"{delayed} project(s) behind schedule - may impact client "
                    "satisfaction and payments"
                ),
                severity="medium",
            )
        )

    return predictions


def generate_insights(
    metrics: KeyMetrics, trends: Trends, *, currency: str = "LKR"
) -> List[str]:
    insights: List[str] = []
    rate = metrics.workers.attendance_rate
    profit = metrics.finance.profit
    delayed = metrics.projects.delayed

    if rate >= EXCELLENT_ATTENDANCE:
        insights.append("Excellent attendance this week - team engagement is strong")
    elif rate < LOW_ATTENDANCE_INSIGHT:
        insights.append(
            "Attendance below target - recommend supervisor review and worker interviews"
        )

    if profit > 0:
        insights.append(
            f"Profitable month so far with {currency} {format_amount(profit)} net profit"
        )
    else:
        insights.append(
            "Operating at a loss this month - review expense categories for cost reduction"
        )

    if delayed == 0:
        insights.append("All projects are on track - great execution by teams")
    else:
        insights.append(
            f"{delayed} project(s) need attention - schedule review with project managers"
        )

    if trends.attendance == "declining":
        insights.append("Attendance trending downward - investigate root causes immediately")
    if trends.finance == "improving":
        insights.append(
            "Financial performance improving - continue current cost management practices"
        )

    return insights


def generate_action_items(live: LiveSnapshot, metrics: KeyMetrics) -> List[ActionItem]:
    items: List[ActionItem] = []
    delayed = metrics.projects.delayed

    if metrics.workers.attendance_rate < LOW_ATTENDANCE_ACTION:
        items.append(
            ActionItem(
                priority="high",
                task="Address low attendance - schedule meeting with site supervisors",
                category="attendance",
            )
        )
    if metrics.finance.cash_balance < LOW_CASH_BALANCE:
        items.append(
            ActionItem(
                priority="high",
                task="Low cash balance - expedite pending payments from clients",
                category="finance",
            )
        )
    if metrics.finance.profit < 0:
        items.append(
            ActionItem(
                priority="high",
                task="Review and reduce non-essential expenses immediately",
                category="finance",
            )
        )
    if delayed > 0:
        items.append(
            ActionItem(
                priority="medium",
                task=f"Review {delayed} delayed project(s) timeline and resources",
                category="projects",
            )
        )

    pending_leave = sum(1 for leave in live.leave_requests if leave.get("status") == "Pending")
    if pending_leave > 0:
        items.append(
            ActionItem(
                priority="medium",
                task=f"Review {pending_leave} pending leave request(s)",
                category="hr",
            )
        )

    return items


def identify_alerts(metrics: KeyMetrics) -> List[Alert]:
    alerts: List[Alert] = []
    rate = metrics.workers.attendance_rate
    delayed = metrics.projects.delayed

    if rate < CRITICAL_ATTENDANCE:
        alerts.append(
            Alert(
                severity="critical",
                category="attendance",
                title="Critical Attendance Low",
                message=f"Only {rate}% attendance - immediate investigation required",
            )
        )
    if metrics.finance.cash_balance < 0:
        alerts.append(
            Alert(
                severity="critical",
                category="finance",
                title="Negative Cash Balance",
                message="Company is in debt - urgent financial review needed",
            )
        )
    if delayed > MANY_DELAYED_PROJECTS:
        alerts.append(
            Alert(
                severity="high",
                category="projects",
                title="Multiple Delayed Projects",
                message=f"{delayed} projects behind schedule - client satisfaction at risk",
            )
        )

    return alerts


def compute_ceo_analysis(
    live: LiveSnapshot,
    previous: Optional[Mapping[str, Any]],
    *,
    now: datetime,
    currency: str = "LKR",
) -> CEOAnalysis:
    """Build the full executive analysis for ``now``'s calendar date.

    ``previous`` is the most recent persisted record (``snapshot_data`` and
    ``key_metrics``), or ``None`` when nothing has been stored yet.
    """
    previous_metrics: Optional[Dict[str, Any]] = (previous or {}).get("key_metrics")

    metrics = compute_key_metrics(live)
    trends = compute_trends(live, previous_metrics)

    return CEOAnalysis(
        analysis_date=now.date(),
        generated_at=now,
        snapshot_data=live.to_snapshot_data(),
        key_metrics=metrics,
        trends=trends,
        predictions=generate_predictions(live),
        insights=generate_insights(metrics, trends, currency=currency),
        action_items=generate_action_items(live, metrics),
        alerts=identify_alerts(metrics),
        metadata=AnalysisMetadata(
            total_workers=metrics.workers.total,
            total_projects=metrics.projects.total,
            total_attendance=len(live.attendance),
            generated_at=now,
        ),
    )


__all__ = [
    "compute_ceo_analysis",
    "compute_key_metrics",
    "compute_trends",
    "format_amount",
    "generate_action_items",
    "generate_insights",
    "generate_predictions",
    "identify_alerts",
    "is_critical",
    "is_delayed",
    "is_on_track",
    "round_half_up",
]
