"""Calendar and date-range helpers for payroll periods.

Weekdays follow the ``weekly_off_days`` settings convention:
``0`` is Sunday and ``6`` is Saturday.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, TypeVar

from payroll_engine.core.schema import AttendanceSettings, EmployeeWorkdaysConfig, LeaveRequest

T = TypeVar("T")


@dataclass(frozen=True)
class DateRange:
    start_date: datetime
    end_date: datetime
    from_day: int
    to_day: int

    @property
    def window_end(self) -> datetime:
        """Exclusive end of the range: midnight after ``end_date``."""
        return datetime.combine(self.end_date.date() + timedelta(days=1), time.min)


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def build_date_range(year: int, month: int, from_day: int, to_day: int) -> DateRange:
    """Resolve a day sub-range of a month.

    Reversed bounds are swapped and both ends are clamped into
    ``[1, days_in_month]``; out-of-range input never raises.
    """

    first = min(from_day, to_day)
    last = max(from_day, to_day)

    total = days_in_month(year, month)
    valid_from = max(1, min(first, total))
    valid_to = max(1, min(last, total))

    return DateRange(
        start_date=datetime(year, month, valid_from, 0, 0, 0),
        end_date=datetime(year, month, valid_to, 23, 59, 59),
        from_day=valid_from,
        to_day=valid_to,
    )


def is_partial_range(date_range: DateRange) -> bool:
    total = days_in_month(date_range.start_date.year, date_range.start_date.month)
    return date_range.from_day != 1 or date_range.to_day != total


def _weekday_index(day: date) -> int:
    return day.isoweekday() % 7


def count_weekday_occurrences(year: int, month: int, weekday: int) -> int:
    total = days_in_month(year, month)
    return sum(1 for day in range(1, total + 1) if _weekday_index(date(year, month, day)) == weekday)


def compute_effective_workdays(
    settings: AttendanceSettings | None,
    employee_config: EmployeeWorkdaysConfig | None,
    year: int,
    month: int,
    approved_vacation_days: int,
) -> int:
    """Expected working days in a month, never less than 1."""

    if employee_config and employee_config.custom_working_days_enabled and employee_config.custom_working_days:
        return max(1, employee_config.custom_working_days - approved_vacation_days)

    base_days = days_in_month(year, month)
    if settings and settings.workdays_mode == "fixed" and settings.default_working_days_monthly:
        base_days = settings.default_working_days_monthly

    weekly_off_days: Iterable[int] = ()
    if employee_config and employee_config.weekly_off_days is not None:
        weekly_off_days = employee_config.weekly_off_days
    elif settings and settings.weekly_off_days is not None:
        weekly_off_days = settings.weekly_off_days

    off_count = sum(count_weekday_occurrences(year, month, weekday) for weekday in weekly_off_days)

    return max(1, base_days - off_count - approved_vacation_days)


def calculate_work_days_in_range(range_start: datetime, range_end: datetime, workdays_per_month: int) -> int:
    """Prorate a monthly workday count over a span of calendar days.

    Used by simulations; it ignores which days are weekly-off days.
    """

    span = (range_end - range_start) // timedelta(days=1) + 1
    total = days_in_month(range_start.year, range_start.month)
    expected = (Decimal(span) * Decimal(workdays_per_month) / Decimal(total)).quantize(
        Decimal("1"), rounding=ROUND_HALF_UP
    )
    return max(0, int(expected))


def _reference_moment(record: object) -> datetime | None:
    for attr in ("check_in_time", "penalty_date", "start_date"):
        value = getattr(record, attr, None)
        if value is None:
            continue
        if isinstance(value, datetime):
            return value
        if isinstance(value, date):
            return datetime.combine(value, time.min)
    return None


def filter_by_range(records: Iterable[T], range_start: datetime, range_end: datetime) -> list[T]:
    """Keep records whose reference date lies within ``[range_start, range_end]``."""

    kept: list[T] = []
    for record in records:
        moment = _reference_moment(record)
        if moment is None:
            continue
        # wall-clock comparison; timezones are resolved upstream
        if moment.tzinfo is not None:
            moment = moment.replace(tzinfo=None)
        if range_start <= moment <= range_end:
            kept.append(record)
    return kept


def count_leave_days_in_range(leaves: Iterable[LeaveRequest], range_start: datetime, range_end: datetime) -> int:
    total = 0
    for leave in leaves:
        overlap_start = max(leave.start_date, range_start.date())
        overlap_end = min(leave.end_date, range_end.date())
        total += max(0, (overlap_end - overlap_start).days + 1)
    return total
