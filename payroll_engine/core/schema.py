from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

SalaryMode = Literal["monthly", "daily"]
RuleDeductionType = Literal["fixed", "percent"]
AdjustmentType = Literal["fixed", "fixed_amount", "days", "fraction", "salary_percent"]
Impact = Literal["negative", "positive"]
SettingType = Literal["percentage", "fixed"]


class ValueRecord(BaseModel):
    """Immutable input record handed to the engine by the caller."""

    model_config = ConfigDict(frozen=True)


class Employee(ValueRecord):
    id: str | None = None
    full_name: str | None = None
    employee_code: str | None = None
    salary_mode: SalaryMode = "monthly"
    monthly_salary: Decimal = Decimal("0")
    daily_wage: Decimal = Decimal("0")
    allowances: Decimal = Decimal("0")
    social_insurance_value: Decimal | None = None
    income_tax_value: Decimal | None = None


class EmployeeWorkdaysConfig(ValueRecord):
    custom_working_days: int | None = None
    custom_working_days_enabled: bool = False
    weekly_off_days: tuple[int, ...] | None = None


class AttendanceSettings(ValueRecord):
    weekly_off_days: tuple[int, ...] | None = None
    default_working_days_monthly: int | None = None
    workdays_mode: str | None = None


class AttendanceRecord(ValueRecord):
    check_in_time: datetime
    check_out_time: datetime | None = None
    late_minutes: int = 0
    early_checkout_minutes: int = 0


class DeductionRule(ValueRecord):
    """Band ``[from_minutes, to_minutes)`` mapped to a deduction."""

    id: str | None = None
    from_minutes: int
    to_minutes: int
    deduction_type: RuleDeductionType = "fixed"
    value: Decimal = Decimal("0")


LateDeductionRule = DeductionRule
EarlyCheckoutDeductionRule = DeductionRule


class DelayPermission(ValueRecord):
    date: date
    minutes: int = 0
    status: str = "approved"


class PayrollAdjustment(ValueRecord):
    """Penalty or bonus line; ``impact`` carries the direction."""

    id: str | None = None
    penalty_type: AdjustmentType = "fixed_amount"
    penalty_value: Decimal = Field(
        default=Decimal("0"),
        validation_alias=AliasChoices("penalty_value", "value"),
    )
    reason: str = ""
    status: str = "approved"
    penalty_date: date | None = None
    impact: Impact = "negative"


class Penalty(PayrollAdjustment):
    impact: Impact = "negative"


class Bonus(PayrollAdjustment):
    impact: Impact = "positive"


class LeaveRequest(ValueRecord):
    start_date: date
    end_date: date
    status: str = "approved"


class DeductionSetting(ValueRecord):
    type: SettingType = "percentage"
    value: Decimal = Decimal("0")


class PayrollPolicy(ValueRecord):
    """Company-wide payroll configuration passed explicitly to the engine."""

    workdays_per_month: int = 26
    grace_minutes: int = 15  # informational
    insurance: DeductionSetting | None = None
    tax: DeductionSetting | None = None
    late_deduction_enabled: bool = False
    late_deduction_rules: tuple[DeductionRule, ...] = ()
    early_checkout_deduction_enabled: bool = False
    early_checkout_deduction_rules: tuple[DeductionRule, ...] = ()
    attendance: AttendanceSettings = Field(default_factory=AttendanceSettings)


class PayrollPeriodRequest(ValueRecord):
    employee: Employee
    employee_config: EmployeeWorkdaysConfig | None = None
    year: int
    month: int
    from_day: int = 1
    to_day: int = 31
    attendance: tuple[AttendanceRecord, ...] = ()
    penalties: tuple[Penalty, ...] = ()
    bonuses: tuple[Bonus, ...] = ()
    leaves: tuple[LeaveRequest, ...] = ()
    delay_permissions: tuple[DelayPermission, ...] = ()


class ResultModel(BaseModel):
    """Output record; serializes with the camelCase payslip field names."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class LatenessItem(ResultModel):
    date: date
    late_minutes: int
    permission_minutes: int | None = None
    net_late_minutes: int | None = None
    deduction: Decimal = Decimal("0")
    rule_applied: str = "No rule"


class EarlyCheckoutItem(ResultModel):
    date: date
    early_minutes: int
    deduction: Decimal = Decimal("0")
    rule_applied: str = "No rule"


class PenaltyItem(ResultModel):
    reason: str
    type: AdjustmentType
    value: Decimal
    deduction: Decimal


class BonusItem(ResultModel):
    reason: str
    type: AdjustmentType
    value: Decimal
    amount: Decimal


class PayrollMetadata(ResultModel):
    working_days_in_month: int
    working_days_in_range: int
    daily_rate: Decimal
    lateness_breakdown: tuple[LatenessItem, ...] = ()
    early_checkout_breakdown: tuple[EarlyCheckoutItem, ...] = ()
    penalties_breakdown: tuple[PenaltyItem, ...] = ()
    bonuses_breakdown: tuple[BonusItem, ...] = ()
    total_permission_minutes: int = 0
    worked_hours: Decimal | None = None
    from_day: int | None = None
    to_day: int | None = None
    is_partial_range: bool | None = None


class PayrollCalculation(ResultModel):
    base_salary: Decimal = Decimal("0")
    base_pay_for_range: Decimal = Decimal("0")
    allowances: Decimal = Decimal("0")
    allowances_for_range: Decimal = Decimal("0")
    overtime_hours: Decimal = Decimal("0")
    overtime_amount: Decimal = Decimal("0")
    present_days: int = 0
    absence_days: int = 0
    absence_deduction: Decimal = Decimal("0")
    late_days: int = 0
    lateness_deduction: Decimal = Decimal("0")
    early_checkout_days: int = 0
    early_checkout_deduction: Decimal = Decimal("0")
    penalties_deduction: Decimal = Decimal("0")
    bonuses_amount: Decimal = Decimal("0")
    social_insurance: Decimal = Decimal("0")
    income_tax: Decimal = Decimal("0")
    other_deductions: Decimal = Decimal("0")
    gross_salary: Decimal = Decimal("0")
    total_deductions: Decimal = Decimal("0")
    net_salary: Decimal = Decimal("0")
    metadata: PayrollMetadata
