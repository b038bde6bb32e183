"""Band-rule matching for lateness/early-checkout and adjustment pricing."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, Sequence

from payroll_engine.core.schema import DeductionRule, DelayPermission, PayrollAdjustment

HUNDRED = Decimal("100")
NO_RULE = "No rule"


@dataclass(frozen=True)
class RuleMatch:
    rule: DeductionRule | None
    deduction: Decimal


@dataclass(frozen=True)
class DeductionOutcome:
    deduction: Decimal
    rule_applied: str


def _plain(value: Decimal) -> str:
    return format(value.normalize(), "f")


def rule_deduction(rule: DeductionRule, daily_rate: Decimal) -> Decimal:
    if rule.deduction_type == "fixed":
        return rule.value
    return daily_rate * (rule.value / HUNDRED)


def find_best_deduction_rule(minutes: int, rules: Iterable[DeductionRule], daily_rate: Decimal) -> RuleMatch:
    """Pick the matching band with the highest deduction.

    Bands are half-open ``[from_minutes, to_minutes)``. When bands
    overlap the largest deduction wins; ties keep the earliest rule.
    """

    matching = [rule for rule in rules if rule.from_minutes <= minutes < rule.to_minutes]
    if not matching:
        return RuleMatch(rule=None, deduction=Decimal("0"))

    best = matching[0]
    max_deduction = Decimal("0")
    for rule in matching:
        deduction = rule_deduction(rule, daily_rate)
        if deduction > max_deduction:
            max_deduction = deduction
            best = rule
    return RuleMatch(rule=best, deduction=max_deduction)


def describe_rule(rule: DeductionRule) -> str:
    band = f"({rule.from_minutes}-{rule.to_minutes} min)"
    if rule.deduction_type == "fixed":
        return f"Fixed {_plain(rule.value)} {band}"
    return f"{_plain(rule.value)}% of daily rate {band}"


def calculate_lateness_deduction(
    late_minutes: int,
    daily_rate: Decimal,
    rules: Iterable[DeductionRule],
) -> DeductionOutcome:
    match = find_best_deduction_rule(late_minutes, rules, daily_rate)
    if match.rule is None:
        return DeductionOutcome(deduction=Decimal("0"), rule_applied=NO_RULE)
    return DeductionOutcome(deduction=match.deduction, rule_applied=describe_rule(match.rule))


def calculate_early_checkout_deduction(
    early_minutes: int,
    daily_rate: Decimal,
    rules: Iterable[DeductionRule],
) -> DeductionOutcome:
    # same band semantics, separate rule set
    return calculate_lateness_deduction(early_minutes, daily_rate, rules)


def permission_minutes_for(day: date, permissions: Sequence[DelayPermission]) -> int:
    for permission in permissions:
        if permission.date == day and permission.status == "approved":
            return permission.minutes
    return 0


def net_late_minutes(raw_late_minutes: int, permission_minutes: int) -> int:
    return max(0, raw_late_minutes - permission_minutes)


def calculate_penalty_deduction(
    item: PayrollAdjustment,
    daily_rate: Decimal,
    base_salary: Decimal | None = None,
) -> Decimal:
    """Convert a penalty or bonus into an unsigned currency amount."""

    if item.penalty_type in ("fixed", "fixed_amount"):
        return item.penalty_value
    if item.penalty_type in ("days", "fraction"):
        return item.penalty_value * daily_rate
    if item.penalty_type == "salary_percent" and base_salary:
        return item.penalty_value / HUNDRED * base_salary
    return Decimal("0")


def split_adjustments(
    items: Iterable[PayrollAdjustment],
) -> tuple[list[PayrollAdjustment], list[PayrollAdjustment]]:
    """Partition adjustments into ``(penalties, bonuses)`` by impact."""

    penalties: list[PayrollAdjustment] = []
    bonuses: list[PayrollAdjustment] = []
    for item in items:
        if item.impact == "positive":
            bonuses.append(item)
        else:
            penalties.append(item)
    return penalties, bonuses
