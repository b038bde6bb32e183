"""Application services."""

from .payroll import PayrollService, get_payroll_service

__all__ = [
    "PayrollService",
    "get_payroll_service",
]
