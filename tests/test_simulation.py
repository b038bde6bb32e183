import subprocess
import sys
from decimal import Decimal
from pathlib import Path

import pytest

from payroll_engine.core.simulation import create_simulation_data, generate_simulation_report


@pytest.fixture(scope="module")
def run():
    return create_simulation_data(2025, 3, 1, 10)


def test_simulation_range(run):
    assert run.is_partial_range is True
    assert (run.date_range.from_day, run.date_range.to_day) == (1, 10)
    assert [result.expected_work_days_in_range for result in run.results] == [8, 8]


def test_first_employee_ignores_out_of_range_items(run):
    result = run.results[0]
    calc = result.calculation

    assert result.present_days_in_range == 3
    assert result.absence_days_in_range == 5
    assert result.days_outside_range == 1
    assert calc.absence_deduction == Decimal("0")
    assert calc.base_pay_for_range == Decimal("576.92")
    assert calc.allowances_for_range == Decimal("57.69")
    assert calc.gross_salary == Decimal("634.62")
    assert calc.social_insurance == Decimal("57.69")
    assert calc.income_tax == Decimal("28.85")
    assert calc.penalties_deduction == Decimal("100.00")
    assert len(calc.metadata.penalties_breakdown) == 1
    assert calc.bonuses_amount == Decimal("150.00")
    assert calc.total_deductions == Decimal("186.54")
    assert calc.net_salary == Decimal("598.08")


def test_second_employee_alternating_days(run):
    result = run.results[1]
    calc = result.calculation

    assert [entry.record.check_in_time.day for entry in result.attendance if entry.is_in_range] == [1, 3, 5, 7, 9]
    assert result.days_outside_range == 2
    assert calc.present_days == 5
    assert calc.late_days == 1
    assert calc.lateness_deduction == Decimal("0")
    assert calc.gross_salary == Decimal("1269.23")
    assert calc.bonuses_amount == Decimal("200.00")
    assert calc.net_salary == Decimal("1296.15")


def test_full_month_simulation_charges_absence():
    run = create_simulation_data(2025, 3, 1, 31)

    assert run.is_partial_range is False
    assert all(result.days_outside_range == 0 for result in run.results)
    assert run.results[0].calculation.absence_days == 23


def test_report_lists_ignored_items(run):
    report = generate_simulation_report(run)

    assert "Period: 3/2025 (day 1 to day 10)" in report
    assert "Employee 1: Ahmed Mohamed (test) (SIM001)" in report
    assert "Attendance outside range (ignored): 1" in report
    assert "  x Test penalty outside range (must be ignored): 200.00" in report
    assert "  x Test bonus outside range (must be ignored): 300.00" in report
    assert "Partial range: no absence deduction" in report
    assert "Net salary: 598.08" in report
    assert "Net salary: 1296.15" in report


def test_cli_writes_report(tmp_path):
    script = Path(__file__).resolve().parents[1] / "scripts" / "run_simulation.py"
    output = tmp_path / "report.txt"

    completed = subprocess.run(
        [sys.executable, str(script), "--year", "2025", "--month", "3", "--output", str(output)],
        capture_output=True,
        text=True,
        check=True,
    )

    assert "Net salary: 598.08" in completed.stdout
    assert output.read_text(encoding="utf-8").startswith("=" * 64)
