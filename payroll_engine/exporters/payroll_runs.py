from __future__ import annotations

from decimal import Decimal
from pathlib import Path
from typing import Iterable

import pandas as pd

from payroll_engine.core.periods import DateRange
from payroll_engine.core.schema import PayrollCalculation, SalaryMode

RUN_COLUMNS = [
    "employee_id",
    "period_month",
    "period_year",
    "period_from_day",
    "period_to_day",
    "salary_mode",
    "base_salary",
    "allowances",
    "overtime_hours",
    "overtime_amount",
    "present_days",
    "absence_days",
    "absence_deduction",
    "late_days",
    "lateness_deduction",
    "penalties_deduction",
    "bonuses_amount",
    "social_insurance",
    "income_tax",
    "other_deductions",
    "gross_salary",
    "total_deductions",
    "net_salary",
]


def payroll_run_record(
    employee_id: str | None,
    year: int,
    month: int,
    date_range: DateRange,
    salary_mode: SalaryMode,
    calculation: PayrollCalculation,
) -> dict:
    """Flatten a calculation into a ``payroll_runs`` row."""

    data = calculation.model_dump()
    return {
        "employee_id": employee_id,
        "period_month": month,
        "period_year": year,
        "period_from_day": date_range.from_day,
        "period_to_day": date_range.to_day,
        "salary_mode": salary_mode,
        "base_salary": data["base_salary"],
        "allowances": data["allowances_for_range"],
        "overtime_hours": data["overtime_hours"],
        "overtime_amount": data["overtime_amount"],
        "present_days": data["present_days"],
        "absence_days": data["absence_days"],
        "absence_deduction": data["absence_deduction"],
        "late_days": data["late_days"],
        "lateness_deduction": data["lateness_deduction"],
        "penalties_deduction": data["penalties_deduction"],
        "bonuses_amount": data["bonuses_amount"],
        "social_insurance": data["social_insurance"],
        "income_tax": data["income_tax"],
        "other_deductions": data["other_deductions"],
        "gross_salary": data["gross_salary"],
        "total_deductions": data["total_deductions"],
        "net_salary": data["net_salary"],
    }


def _frame(rows: Iterable[dict]) -> pd.DataFrame:
    return pd.DataFrame(list(rows), columns=RUN_COLUMNS)


def export_payroll_runs_csv(path: Path, rows: Iterable[dict]) -> Path:
    df = _frame(rows)
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False)
    return path


def export_payroll_runs_xlsx(path: Path, rows: Iterable[dict]) -> Path:
    records = [
        {key: float(value) if isinstance(value, Decimal) else value for key, value in row.items()}
        for row in rows
    ]
    df = _frame(records)
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_excel(path, index=False, sheet_name="payroll_runs", engine="openpyxl")
    return path
