from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Iterable

from payroll_engine.core.periods import compute_effective_workdays
from payroll_engine.core.schema import AttendanceRecord, AttendanceSettings, EmployeeWorkdaysConfig

MS_PER_HOUR = Decimal("3600000")
_ONE_MS = timedelta(milliseconds=1)


@dataclass(frozen=True)
class ClippedInterval:
    start: datetime
    end: datetime
    is_overlap: bool


@dataclass(frozen=True)
class MonthlyStats:
    total_hours: Decimal
    effective_days: int
    average_hours_per_day: Decimal
    month_key: str


def get_month_range(now: datetime) -> tuple[datetime, datetime, int, int]:
    """Return ``(month_start, next_month_start, year, month)`` for ``now``."""

    month_start = datetime(now.year, now.month, 1)
    if now.month == 12:
        month_end = datetime(now.year + 1, 1, 1)
    else:
        month_end = datetime(now.year, now.month + 1, 1)
    return month_start, month_end, now.year, now.month


def _wall_clock(moment: datetime) -> datetime:
    # same convention as filter_by_range: offsets are dropped, not converted
    if moment.tzinfo is not None:
        return moment.replace(tzinfo=None)
    return moment


def clip_interval(
    interval_start: datetime,
    interval_end: datetime,
    window_start: datetime,
    window_end: datetime,
) -> ClippedInterval:
    interval_start, interval_end = _wall_clock(interval_start), _wall_clock(interval_end)
    window_start, window_end = _wall_clock(window_start), _wall_clock(window_end)
    start = max(interval_start, window_start)
    end = min(interval_end, window_end)
    is_overlap = start < end and interval_start < window_end and interval_end > window_start
    return ClippedInterval(start=start, end=end, is_overlap=is_overlap)


def sum_worked_ms_in_month(
    records: Iterable[AttendanceRecord],
    window_start: datetime,
    window_end: datetime,
) -> int:
    """Milliseconds worked inside ``[window_start, window_end)``.

    Open sessions (no check-out) are skipped; sessions straddling a
    window boundary only count the overlapping part.
    """

    total_ms = 0
    for record in records:
        if record.check_out_time is None:
            continue
        clipped = clip_interval(record.check_in_time, record.check_out_time, window_start, window_end)
        if clipped.is_overlap:
            total_ms += (clipped.end - clipped.start) // _ONE_MS
    return total_ms


def calculate_monthly_stats(
    records: Iterable[AttendanceRecord],
    settings: AttendanceSettings | None,
    employee_config: EmployeeWorkdaysConfig | None,
    approved_vacation_days: int,
    now: datetime,
) -> MonthlyStats:
    month_start, month_end, year, month = get_month_range(now)

    total_ms = sum_worked_ms_in_month(records, month_start, month_end)
    total_hours = max(Decimal("0"), Decimal(total_ms) / MS_PER_HOUR)

    effective_days = compute_effective_workdays(settings, employee_config, year, month, approved_vacation_days)

    return MonthlyStats(
        total_hours=total_hours,
        effective_days=effective_days,
        average_hours_per_day=total_hours / effective_days,
        month_key=f"{year}-{month:02d}",
    )


def collapse_attendance_by_day(records: Iterable[AttendanceRecord]) -> list[AttendanceRecord]:
    """One record per check-in date, keeping the session with the most late minutes.

    Ties on ``late_minutes`` keep the first session seen for the date.
    """

    by_day: dict[date, AttendanceRecord] = {}
    for record in records:
        day = record.check_in_time.date()
        existing = by_day.get(day)
        if existing is None or record.late_minutes > existing.late_minutes:
            by_day[day] = record
    return list(by_day.values())
