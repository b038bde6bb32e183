"""Payslip assembly from attendance, rules and adjustments.

Everything here is arithmetic on the caller's records: nothing raises
for empty inputs or non-positive working-day counts, which degrade to
zero amounts instead.
"""

from __future__ import annotations

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Sequence

from payroll_engine.core.rules import (
    HUNDRED,
    calculate_early_checkout_deduction,
    calculate_lateness_deduction,
    calculate_penalty_deduction,
    net_late_minutes,
    permission_minutes_for,
    split_adjustments,
)
from payroll_engine.core.schema import (
    AttendanceRecord,
    BonusItem,
    DeductionRule,
    DeductionSetting,
    DelayPermission,
    EarlyCheckoutItem,
    Employee,
    LatenessItem,
    PayrollAdjustment,
    PayrollCalculation,
    PayrollMetadata,
    PenaltyItem,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def _quantize(value: Decimal) -> Decimal:
    return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def _per_day(amount: Decimal, days: int) -> Decimal:
    if days <= 0:
        return ZERO
    return amount / Decimal(days)


def calculate_daily_rate(employee: Employee, workdays_per_month: int) -> Decimal:
    if employee.salary_mode == "monthly":
        return _per_day(employee.monthly_salary, workdays_per_month)
    return employee.daily_wage


def _statutory_deduction(
    setting: DeductionSetting | None,
    stored_value: Decimal | None,
    employee: Employee,
    base_salary: Decimal,
    working_days_in_month: int,
    present_days: int,
    is_partial_range: bool,
) -> Decimal:
    if setting is None:
        # employee's stored flat value, never prorated
        return stored_value or ZERO

    if setting.type == "percentage":
        amount = base_salary * setting.value / HUNDRED
    else:
        amount = setting.value

    if employee.salary_mode == "monthly" and is_partial_range:
        amount = _per_day(amount, working_days_in_month) * present_days
    return amount


def _lateness_items(
    records: Sequence[AttendanceRecord],
    daily_rate: Decimal,
    rules: Sequence[DeductionRule],
    permissions: Sequence[DelayPermission],
) -> list[tuple[LatenessItem, Decimal]]:
    items: list[tuple[LatenessItem, Decimal]] = []
    for record in records:
        if record.late_minutes <= 0:
            continue
        day = record.check_in_time.date()
        permission = permission_minutes_for(day, permissions)
        net = net_late_minutes(record.late_minutes, permission)
        outcome = calculate_lateness_deduction(net, daily_rate, rules)
        item = LatenessItem(
            date=day,
            late_minutes=record.late_minutes,
            permission_minutes=permission if permission > 0 else None,
            net_late_minutes=net if permission > 0 else None,
            deduction=_quantize(outcome.deduction),
            rule_applied=outcome.rule_applied,
        )
        items.append((item, outcome.deduction))
    return items


def _early_checkout_items(
    records: Sequence[AttendanceRecord],
    daily_rate: Decimal,
    rules: Sequence[DeductionRule],
) -> list[tuple[EarlyCheckoutItem, Decimal]]:
    items: list[tuple[EarlyCheckoutItem, Decimal]] = []
    for record in records:
        if record.early_checkout_minutes <= 0:
            continue
        outcome = calculate_early_checkout_deduction(record.early_checkout_minutes, daily_rate, rules)
        item = EarlyCheckoutItem(
            date=record.check_in_time.date(),
            early_minutes=record.early_checkout_minutes,
            deduction=_quantize(outcome.deduction),
            rule_applied=outcome.rule_applied,
        )
        items.append((item, outcome.deduction))
    return items


def calculate_payroll(
    employee: Employee,
    attendance_records: Sequence[AttendanceRecord],
    approved_penalties: Sequence[PayrollAdjustment],
    late_deduction_rules: Sequence[DeductionRule],
    working_days_in_month: int,
    working_days_in_range: int,
    approved_leave_days: int = 0,
    approved_bonuses: Sequence[PayrollAdjustment] = (),
    insurance_settings: DeductionSetting | None = None,
    tax_settings: DeductionSetting | None = None,
    is_partial_range: bool = False,
    delay_permissions: Sequence[DelayPermission] = (),
    early_checkout_rules: Sequence[DeductionRule] = (),
) -> PayrollCalculation:
    """Build the payslip for one employee over a full month or a sub-range.

    A partial range pays strictly for the days present and waives the
    absence deduction. A full month pays monthly employees their whole
    entitlement and charges absences separately; daily employees are
    always paid per day present and never charged for absence.
    Adjustments are signed by their ``impact``, whichever list they
    arrive in.
    """

    monthly = employee.salary_mode == "monthly"
    daily_rate = calculate_daily_rate(employee, working_days_in_month)

    # open sessions still count as present days
    present_days = len(attendance_records)

    if monthly:
        base_salary = employee.monthly_salary
        allowances_for_range = _per_day(employee.allowances, working_days_in_month) * present_days
    else:
        base_salary = employee.daily_wage * working_days_in_month
        allowances_for_range = employee.allowances
    base_pay_for_range = daily_rate * present_days

    lateness = _lateness_items(attendance_records, daily_rate, late_deduction_rules, delay_permissions)
    lateness_deduction = sum((amount for _, amount in lateness), ZERO)

    early = _early_checkout_items(attendance_records, daily_rate, early_checkout_rules)
    early_checkout_deduction = sum((amount for _, amount in early), ZERO)

    penalties, bonuses = split_adjustments([*approved_penalties, *approved_bonuses])

    penalty_amounts = [calculate_penalty_deduction(item, daily_rate, base_salary) for item in penalties]
    penalties_deduction = sum(penalty_amounts, ZERO)

    bonus_amounts = [calculate_penalty_deduction(item, daily_rate, base_salary) for item in bonuses]
    bonuses_amount = sum(bonus_amounts, ZERO)

    if is_partial_range:
        gross_salary = base_pay_for_range + allowances_for_range
        absence_days = 0
        absence_deduction = ZERO
    else:
        if monthly:
            gross_salary = base_salary + employee.allowances
        else:
            gross_salary = base_pay_for_range + allowances_for_range
        absence_days = max(0, working_days_in_range - present_days - approved_leave_days)
        absence_deduction = daily_rate * absence_days if monthly else ZERO

    social_insurance = _statutory_deduction(
        insurance_settings,
        employee.social_insurance_value,
        employee,
        base_salary,
        working_days_in_month,
        present_days,
        is_partial_range,
    )
    income_tax = _statutory_deduction(
        tax_settings,
        employee.income_tax_value,
        employee,
        base_salary,
        working_days_in_month,
        present_days,
        is_partial_range,
    )

    other_deductions = ZERO
    overtime_hours = ZERO
    overtime_amount = ZERO

    total_deductions = (
        absence_deduction
        + lateness_deduction
        + early_checkout_deduction
        + penalties_deduction
        + social_insurance
        + income_tax
        + other_deductions
    )
    net_salary = gross_salary + overtime_amount + bonuses_amount - total_deductions

    metadata = PayrollMetadata(
        working_days_in_month=working_days_in_month,
        working_days_in_range=working_days_in_range,
        daily_rate=_quantize(daily_rate),
        lateness_breakdown=tuple(item for item, _ in lateness),
        early_checkout_breakdown=tuple(item for item, _ in early),
        penalties_breakdown=tuple(
            PenaltyItem(
                reason=item.reason,
                type=item.penalty_type,
                value=item.penalty_value,
                deduction=_quantize(amount),
            )
            for item, amount in zip(penalties, penalty_amounts)
        ),
        bonuses_breakdown=tuple(
            BonusItem(
                reason=item.reason,
                type=item.penalty_type,
                value=item.penalty_value,
                amount=_quantize(amount),
            )
            for item, amount in zip(bonuses, bonus_amounts)
        ),
        total_permission_minutes=sum(permission.minutes for permission in delay_permissions),
    )

    logger.debug(
        "payroll for %s: gross=%s deductions=%s net=%s partial=%s",
        employee.id,
        gross_salary,
        total_deductions,
        net_salary,
        is_partial_range,
    )

    return PayrollCalculation(
        base_salary=_quantize(base_salary),
        base_pay_for_range=_quantize(base_pay_for_range),
        allowances=_quantize(employee.allowances),
        allowances_for_range=_quantize(allowances_for_range),
        overtime_hours=overtime_hours,
        overtime_amount=_quantize(overtime_amount),
        present_days=present_days,
        absence_days=absence_days,
        absence_deduction=_quantize(absence_deduction),
        late_days=len(lateness),
        lateness_deduction=_quantize(lateness_deduction),
        early_checkout_days=len(early),
        early_checkout_deduction=_quantize(early_checkout_deduction),
        penalties_deduction=_quantize(penalties_deduction),
        bonuses_amount=_quantize(bonuses_amount),
        social_insurance=_quantize(social_insurance),
        income_tax=_quantize(income_tax),
        other_deductions=_quantize(other_deductions),
        gross_salary=_quantize(gross_salary),
        total_deductions=_quantize(total_deductions),
        net_salary=_quantize(net_salary),
        metadata=metadata,
    )
