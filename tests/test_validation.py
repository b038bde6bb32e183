import pytest

from payroll_engine.core.schema import Bonus, DeductionRule, Employee, Penalty
from payroll_engine.core.validation import (
    ValidationError,
    validate_adjustment,
    validate_deduction_rules,
    validate_employee,
)


def _rule(start: int, end: int) -> DeductionRule:
    return DeductionRule(from_minutes=start, to_minutes=end, value=10)


def test_adjacent_bands_are_valid():
    validate_deduction_rules([_rule(0, 15), _rule(15, 30), _rule(30, 60)])
    validate_deduction_rules([])


@pytest.mark.parametrize(
    "rules, message",
    [
        ([_rule(-1, 10)], 'Rule 1: "From" must be >= 0'),
        ([_rule(0, 10), _rule(20, 20)], 'Rule 2: "To" must be greater than "From"'),
        ([_rule(0, 10), _rule(30, 60), _rule(45, 90)], "Overlap: Rules 2 and 3 have overlapping ranges"),
    ],
)
def test_invalid_rule_sets(rules, message):
    with pytest.raises(ValidationError) as excinfo:
        validate_deduction_rules(rules)
    assert str(excinfo.value) == message


def test_employee_validation():
    validate_employee(Employee(salary_mode="monthly", monthly_salary=4000))
    validate_employee(Employee(salary_mode="daily", daily_wage=150))

    with pytest.raises(ValidationError, match="allowances cannot be negative"):
        validate_employee(Employee(monthly_salary=4000, allowances=-1))
    with pytest.raises(ValidationError, match="monthly employee must provide monthly_salary"):
        validate_employee(Employee(salary_mode="monthly", daily_wage=150))
    with pytest.raises(ValidationError, match="daily employee must provide daily_wage"):
        validate_employee(Employee(salary_mode="daily", monthly_salary=4000))


def test_adjustment_validation():
    validate_adjustment(Penalty(penalty_value=0))

    with pytest.raises(ValidationError, match="positive adjustment value cannot be negative"):
        validate_adjustment(Bonus(penalty_value=-10))
