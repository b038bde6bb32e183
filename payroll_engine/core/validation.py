from __future__ import annotations

from decimal import Decimal
from typing import Sequence

from payroll_engine.core.schema import DeductionRule, Employee, PayrollAdjustment


class ValidationError(Exception):
    """Raised when caller-supplied payroll data fails validation."""


def validate_deduction_rules(rules: Sequence[DeductionRule]) -> None:
    for i, rule in enumerate(rules):
        if rule.from_minutes < 0:
            raise ValidationError(f'Rule {i + 1}: "From" must be >= 0')
        if rule.to_minutes <= rule.from_minutes:
            raise ValidationError(f'Rule {i + 1}: "To" must be greater than "From"')
        for j in range(i + 1, len(rules)):
            other = rules[j]
            if rule.from_minutes < other.to_minutes and rule.to_minutes > other.from_minutes:
                raise ValidationError(f"Overlap: Rules {i + 1} and {j + 1} have overlapping ranges")


def validate_employee(employee: Employee) -> None:
    for field in ("monthly_salary", "daily_wage", "allowances"):
        if getattr(employee, field) < Decimal("0"):
            raise ValidationError(f"{field} cannot be negative")
    if employee.salary_mode == "monthly" and employee.monthly_salary <= 0:
        raise ValidationError("monthly employee must provide monthly_salary")
    if employee.salary_mode == "daily" and employee.daily_wage <= 0:
        raise ValidationError("daily employee must provide daily_wage")


def validate_adjustment(item: PayrollAdjustment) -> None:
    if item.penalty_value < Decimal("0"):
        raise ValidationError(f"{item.impact} adjustment value cannot be negative")
