"""Payroll-run exporters."""

from .payroll_runs import RUN_COLUMNS, export_payroll_runs_csv, export_payroll_runs_xlsx, payroll_run_record

__all__ = [
    "RUN_COLUMNS",
    "export_payroll_runs_csv",
    "export_payroll_runs_xlsx",
    "payroll_run_record",
]
