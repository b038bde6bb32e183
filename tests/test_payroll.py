from datetime import date, datetime
from decimal import Decimal

import pytest

from payroll_engine.core.payroll import calculate_daily_rate, calculate_payroll
from payroll_engine.core.schema import (
    AttendanceRecord,
    Bonus,
    DeductionRule,
    DeductionSetting,
    DelayPermission,
    Employee,
    Penalty,
)


@pytest.fixture()
def monthly_employee() -> Employee:
    return Employee(id="emp-1", salary_mode="monthly", monthly_salary=5000, allowances=500)


@pytest.fixture()
def daily_employee() -> Employee:
    return Employee(id="emp-2", salary_mode="daily", daily_wage=100, allowances=50)


def _day(day: int, late: int = 0, early: int = 0, closed: bool = True) -> AttendanceRecord:
    check_in = datetime(2024, 3, day, 9, 0)
    check_out = datetime(2024, 3, day, 17, 0) if closed else None
    return AttendanceRecord(
        check_in_time=check_in,
        check_out_time=check_out,
        late_minutes=late,
        early_checkout_minutes=early,
    )


def test_daily_rate_by_salary_mode(monthly_employee, daily_employee):
    assert calculate_daily_rate(monthly_employee, 25) == Decimal("200")
    assert calculate_daily_rate(daily_employee, 25) == Decimal("100")
    assert calculate_daily_rate(monthly_employee, 0) == Decimal("0")


def test_partial_range_waives_absence(monthly_employee):
    result = calculate_payroll(monthly_employee, [_day(2), _day(3)], [], [], 25, 10, is_partial_range=True)

    assert result.absence_days == 0
    assert result.absence_deduction == Decimal("0")
    assert result.base_pay_for_range == Decimal("400.00")
    assert result.allowances_for_range == Decimal("40.00")
    assert result.gross_salary == Decimal("440.00")
    assert result.base_salary == Decimal("5000.00")


def test_full_month_monthly_gets_full_entitlement(monthly_employee):
    records = [_day(4), _day(5), _day(6)]

    result = calculate_payroll(monthly_employee, records, [], [], 25, 25, approved_leave_days=2)

    assert result.gross_salary == Decimal("5500.00")
    assert result.absence_days == 20
    assert result.absence_deduction == Decimal("4000.00")
    assert result.net_salary == Decimal("1500.00")


def test_full_month_daily_mode_is_paid_per_day_without_absence_charge(daily_employee):
    result = calculate_payroll(daily_employee, [_day(4), _day(5), _day(6)], [], [], 26, 26)

    assert result.base_salary == Decimal("2600.00")
    assert result.gross_salary == Decimal("350.00")
    assert result.allowances_for_range == Decimal("50.00")
    assert result.absence_days == 23
    assert result.absence_deduction == Decimal("0")


def test_open_session_still_counts_as_present_day(monthly_employee):
    result = calculate_payroll(monthly_employee, [_day(2), _day(3, closed=False)], [], [], 25, 25)

    assert result.present_days == 2
    assert result.absence_days == 23


def test_delay_permission_nets_lateness_before_rule_matching(monthly_employee):
    rules = [
        DeductionRule(from_minutes=10, to_minutes=20, deduction_type="fixed", value=25),
        DeductionRule(from_minutes=40, to_minutes=60, deduction_type="fixed", value=80),
    ]
    permissions = [DelayPermission(date=date(2024, 3, 5), minutes=30)]

    result = calculate_payroll(
        monthly_employee,
        [_day(5, late=45), _day(6, late=45)],
        [],
        rules,
        25,
        25,
        delay_permissions=permissions,
    )

    first, second = result.metadata.lateness_breakdown
    assert first.net_late_minutes == 15
    assert first.permission_minutes == 30
    assert first.deduction == Decimal("25.00")
    assert first.rule_applied == "Fixed 25 (10-20 min)"
    assert second.permission_minutes is None
    assert second.net_late_minutes is None
    assert second.deduction == Decimal("80.00")
    assert result.late_days == 2
    assert result.lateness_deduction == Decimal("105.00")
    assert result.metadata.total_permission_minutes == 30


def test_early_checkout_deduction_is_included_in_totals(monthly_employee):
    rules = [DeductionRule(from_minutes=1, to_minutes=60, deduction_type="fixed", value=20)]

    result = calculate_payroll(
        monthly_employee,
        [_day(5, early=10), _day(6)],
        [],
        [],
        25,
        2,
        early_checkout_rules=rules,
    )

    assert result.early_checkout_days == 1
    assert result.early_checkout_deduction == Decimal("20.00")
    assert result.total_deductions == Decimal("20.00")
    assert result.metadata.early_checkout_breakdown[0].early_minutes == 10


def test_penalties_and_bonuses_follow_impact(monthly_employee):
    penalties = [Penalty(penalty_type="days", penalty_value=1, reason="no show")]
    bonuses = [
        Bonus(penalty_type="salary_percent", penalty_value=10, reason="target"),
        Penalty(penalty_type="fixed_amount", penalty_value=30, reason="misfiled penalty"),
    ]

    result = calculate_payroll(monthly_employee, [], penalties, [], 25, 0, approved_bonuses=bonuses)

    assert result.penalties_deduction == Decimal("230.00")
    assert result.bonuses_amount == Decimal("500.00")
    assert [item.reason for item in result.metadata.penalties_breakdown] == ["no show", "misfiled penalty"]
    assert result.metadata.bonuses_breakdown[0].amount == Decimal("500.00")
    assert result.metadata.bonuses_breakdown[0].type == "salary_percent"


def test_company_insurance_and_tax_prorated_for_partial_monthly(monthly_employee):
    result = calculate_payroll(
        monthly_employee,
        [_day(2), _day(3)],
        [],
        [],
        25,
        10,
        insurance_settings=DeductionSetting(type="percentage", value=10),
        tax_settings=DeductionSetting(type="fixed", value=250),
        is_partial_range=True,
    )

    assert result.social_insurance == Decimal("40.00")
    assert result.income_tax == Decimal("20.00")


def test_company_insurance_not_prorated_for_full_month(monthly_employee):
    result = calculate_payroll(
        monthly_employee,
        [_day(2)],
        [],
        [],
        25,
        1,
        insurance_settings=DeductionSetting(type="fixed", value=300),
        tax_settings=DeductionSetting(type="percentage", value=5),
    )

    assert result.social_insurance == Decimal("300.00")
    assert result.income_tax == Decimal("250.00")


def test_daily_mode_company_insurance_never_prorated(daily_employee):
    result = calculate_payroll(
        daily_employee,
        [_day(2)],
        [],
        [],
        26,
        5,
        insurance_settings=DeductionSetting(type="percentage", value=10),
        is_partial_range=True,
    )

    assert result.social_insurance == Decimal("260.00")


def test_employee_flat_values_used_without_company_settings():
    employee = Employee(
        salary_mode="monthly",
        monthly_salary=5000,
        social_insurance_value=120,
        income_tax_value=80,
    )

    result = calculate_payroll(employee, [_day(2)], [], [], 25, 10, is_partial_range=True)

    assert result.social_insurance == Decimal("120.00")
    assert result.income_tax == Decimal("80.00")


def test_degenerate_inputs_degrade_to_zero(monthly_employee):
    result = calculate_payroll(monthly_employee, [], [], [], 0, -3)

    assert result.metadata.daily_rate == Decimal("0.00")
    assert result.absence_days == 0
    assert result.absence_deduction == Decimal("0")
    assert result.allowances_for_range == Decimal("0")
    assert result.lateness_deduction == Decimal("0")


def test_serializes_with_payslip_field_names(monthly_employee):
    result = calculate_payroll(monthly_employee, [_day(5, late=45)], [], [], 25, 25)

    data = result.model_dump(by_alias=True, mode="json")

    for key in ("baseSalary", "absenceDeduction", "latenessDeduction", "socialInsurance", "incomeTax", "netSalary"):
        assert key in data
    assert data["metadata"]["latenessBreakdown"][0]["ruleApplied"] == "No rule"
    assert data["metadata"]["workingDaysInMonth"] == 25
