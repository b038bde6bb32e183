"""Synthetic payroll self-test.

Two employees get attendance, penalties and bonuses deliberately placed
inside and outside the requested range. Only the in-range items are
handed to :func:`calculate_payroll`, so the report shows whether
out-of-range items leak into the payslip.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from payroll_engine.core.payroll import calculate_payroll
from payroll_engine.core.periods import (
    DateRange,
    build_date_range,
    calculate_work_days_in_range,
    days_in_month,
    is_partial_range,
)
from payroll_engine.core.schema import (
    AttendanceRecord,
    Bonus,
    DeductionSetting,
    Employee,
    PayrollAdjustment,
    PayrollCalculation,
    Penalty,
)

WORKDAYS_PER_MONTH = 26
INSURANCE = DeductionSetting(type="percentage", value=Decimal("10"))
TAX = DeductionSetting(type="percentage", value=Decimal("5"))

SIMULATION_EMPLOYEES = (
    Employee(
        id="sim-emp-001",
        full_name="Ahmed Mohamed (test)",
        employee_code="SIM001",
        salary_mode="monthly",
        monthly_salary=Decimal("5000"),
        allowances=Decimal("500"),
        social_insurance_value=Decimal("0"),
        income_tax_value=Decimal("0"),
    ),
    Employee(
        id="sim-emp-002",
        full_name="Fatma Ali (test)",
        employee_code="SIM002",
        salary_mode="monthly",
        monthly_salary=Decimal("6000"),
        allowances=Decimal("600"),
        social_insurance_value=Decimal("0"),
        income_tax_value=Decimal("0"),
    ),
)


@dataclass(frozen=True)
class SimulatedAttendance:
    record: AttendanceRecord
    is_in_range: bool

    @property
    def date_label(self) -> str:
        return self.record.check_in_time.date().isoformat()


@dataclass(frozen=True)
class SimulatedAdjustment:
    item: PayrollAdjustment
    is_in_range: bool


@dataclass
class SimulationResult:
    employee: Employee
    attendance: list[SimulatedAttendance]
    penalties: list[SimulatedAdjustment]
    bonuses: list[SimulatedAdjustment]
    calculation: PayrollCalculation
    expected_work_days_in_range: int
    present_days_in_range: int
    absence_days_in_range: int
    days_outside_range: int


@dataclass
class SimulationRun:
    year: int
    month: int
    date_range: DateRange
    is_partial_range: bool
    results: list[SimulationResult] = field(default_factory=list)


def _attendance(year: int, month: int, day: int, late_minutes: int, in_range: bool, minute: int = 0) -> SimulatedAttendance:
    record = AttendanceRecord(check_in_time=datetime(year, month, day, 9, minute), late_minutes=late_minutes)
    return SimulatedAttendance(record=record, is_in_range=in_range)


def _first_employee_items(year: int, month: int, to_day: int, last_day: int):
    attendance = [
        _attendance(year, month, 2, 0, True),
        _attendance(year, month, 5, 15, True, minute=15),
        _attendance(year, month, 8, 0, True),
    ]
    if to_day + 5 <= last_day:
        attendance.append(_attendance(year, month, to_day + 5, 0, False))

    penalties = [
        SimulatedAdjustment(
            Penalty(
                id="sim-pen-001",
                penalty_date=date(year, month, 3),
                penalty_type="fixed_amount",
                penalty_value=Decimal("100"),
                reason="Test penalty inside range",
            ),
            True,
        )
    ]
    if to_day + 3 <= last_day:
        penalties.append(
            SimulatedAdjustment(
                Penalty(
                    id="sim-pen-002",
                    penalty_date=date(year, month, to_day + 3),
                    penalty_type="fixed_amount",
                    penalty_value=Decimal("200"),
                    reason="Test penalty outside range (must be ignored)",
                ),
                False,
            )
        )

    bonuses = [
        SimulatedAdjustment(
            Bonus(
                id="sim-bon-001",
                penalty_date=date(year, month, 6),
                penalty_type="fixed_amount",
                penalty_value=Decimal("150"),
                reason="Test bonus inside range",
            ),
            True,
        )
    ]
    return attendance, penalties, bonuses


def _second_employee_items(year: int, month: int, from_day: int, to_day: int, last_day: int):
    attendance: list[SimulatedAttendance] = []
    for i in range(min(5, to_day - from_day + 1)):
        day = from_day + i * 2
        if day <= to_day:
            attendance.append(_attendance(year, month, day, 30 if i == 2 else 0, True))
    for day in (to_day + 2, to_day + 5):
        if day <= last_day:
            attendance.append(_attendance(year, month, day, 0, False))

    bonuses = [
        SimulatedAdjustment(
            Bonus(
                id="sim-bon-002",
                penalty_date=date(year, month, min(from_day + 2, to_day)),
                penalty_type="fixed_amount",
                penalty_value=Decimal("200"),
                reason="Test bonus inside range",
            ),
            True,
        )
    ]
    if to_day + 7 <= last_day:
        bonuses.append(
            SimulatedAdjustment(
                Bonus(
                    id="sim-bon-003",
                    penalty_date=date(year, month, to_day + 7),
                    penalty_type="fixed_amount",
                    penalty_value=Decimal("300"),
                    reason="Test bonus outside range (must be ignored)",
                ),
                False,
            )
        )
    return attendance, [], bonuses


def create_simulation_data(year: int, month: int, from_day: int, to_day: int) -> SimulationRun:
    date_range = build_date_range(year, month, from_day, to_day)
    expected = calculate_work_days_in_range(date_range.start_date, date_range.end_date, WORKDAYS_PER_MONTH)
    partial = is_partial_range(date_range)
    last_day = days_in_month(year, month)

    run = SimulationRun(year=year, month=month, date_range=date_range, is_partial_range=partial)

    for index, employee in enumerate(SIMULATION_EMPLOYEES):
        if index == 0:
            attendance, penalties, bonuses = _first_employee_items(year, month, date_range.to_day, last_day)
        else:
            attendance, penalties, bonuses = _second_employee_items(
                year, month, date_range.from_day, date_range.to_day, last_day
            )

        attendance_in_range = [entry.record for entry in attendance if entry.is_in_range]
        penalties_in_range = [entry.item for entry in penalties if entry.is_in_range]
        bonuses_in_range = [entry.item for entry in bonuses if entry.is_in_range]

        calculation = calculate_payroll(
            employee,
            attendance_in_range,
            penalties_in_range,
            [],
            WORKDAYS_PER_MONTH,
            expected,
            0,
            bonuses_in_range,
            INSURANCE,
            TAX,
            partial,
        )

        present = len(attendance_in_range)
        run.results.append(
            SimulationResult(
                employee=employee,
                attendance=attendance,
                penalties=penalties,
                bonuses=bonuses,
                calculation=calculation,
                expected_work_days_in_range=expected,
                present_days_in_range=present,
                absence_days_in_range=max(0, expected - present),
                days_outside_range=sum(1 for entry in attendance if not entry.is_in_range),
            )
        )
    return run


def _money(value: Decimal) -> str:
    return f"{value:.2f}"


def generate_simulation_report(run: SimulationRun) -> str:
    rule = "=" * 64
    lines = [
        rule,
        "Payroll simulation self-test",
        rule,
        "",
        f"Period: {run.month}/{run.year} (day {run.date_range.from_day} to day {run.date_range.to_day})",
        "",
    ]

    for index, result in enumerate(run.results, start=1):
        employee = result.employee
        calc = result.calculation
        lines += [
            rule,
            f"Employee {index}: {employee.full_name} ({employee.employee_code})",
            rule,
            f"Monthly salary: {_money(employee.monthly_salary)}",
            f"Allowances: {_money(employee.allowances)}",
            f"Expected work days in range: {result.expected_work_days_in_range}",
            f"Present days in range: {result.present_days_in_range}",
        ]
        for entry in result.attendance:
            if entry.is_in_range:
                late = f" (late {entry.record.late_minutes} min)" if entry.record.late_minutes > 0 else ""
                lines.append(f"  * {entry.date_label}{late}")
        outside = [entry for entry in result.attendance if not entry.is_in_range]
        if outside:
            lines.append(f"Attendance outside range (ignored): {len(outside)}")
            lines += [f"  x {entry.date_label}" for entry in outside]

        lines.append(
            f"Absence days in range: {result.absence_days_in_range} "
            f"({result.expected_work_days_in_range} expected - {result.present_days_in_range} present)"
        )

        for title, entries in (("Penalties", result.penalties), ("Bonuses", result.bonuses)):
            inside = [entry.item for entry in entries if entry.is_in_range]
            ignored = [entry.item for entry in entries if not entry.is_in_range]
            if inside:
                lines.append(f"{title} inside range:")
                lines += [f"  * {item.reason}: {_money(item.penalty_value)}" for item in inside]
            if ignored:
                lines.append(f"{title} outside range (ignored):")
                lines += [f"  x {item.reason}: {_money(item.penalty_value)}" for item in ignored]

        lines += [
            "Result:",
            f"  Period type: {'partial range' if run.is_partial_range else 'full month'}",
            f"  Monthly base salary: {_money(calc.base_salary)}",
            f"  Base pay for range: {_money(calc.base_pay_for_range)}",
            f"  Monthly allowances: {_money(calc.allowances)}",
            f"  Allowances for range: {_money(calc.allowances_for_range)}",
            f"  Gross salary: {_money(calc.gross_salary)}",
        ]
        if run.is_partial_range:
            lines.append("  Partial range: no absence deduction (paid for attendance only)")
        lines += [
            f"  Absence deduction: -{_money(calc.absence_deduction)}",
            f"  Lateness deduction: -{_money(calc.lateness_deduction)}",
            f"  Penalties: -{_money(calc.penalties_deduction)}",
            f"  Social insurance: -{_money(calc.social_insurance)}",
            f"  Income tax: -{_money(calc.income_tax)}",
            f"  Bonuses: +{_money(calc.bonuses_amount)}",
            f"  Total deductions: {_money(calc.total_deductions)}",
            f"  Net salary: {_money(calc.net_salary)}",
            "",
        ]

    lines += [
        rule,
        "Checks:",
        "  1. days outside the range are not counted as absence",
        "  2. penalties outside the range are ignored",
        "  3. bonuses outside the range are ignored",
        "  4. amounts are computed for the selected range only",
        rule,
    ]
    return "\n".join(lines) + "\n"
