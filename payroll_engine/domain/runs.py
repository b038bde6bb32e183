"""Domain entities for batch payroll runs."""
from __future__ import annotations

from dataclasses import dataclass, field

from payroll_engine.core.schema import PayrollCalculation


@dataclass(slots=True)
class BatchEntry:
    """A calculated payslip bound to its employee."""

    employee_id: str | None
    calculation: PayrollCalculation


@dataclass(slots=True)
class BatchError:
    """An employee whose calculation failed during a batch run."""

    employee_id: str | None
    message: str


@dataclass(slots=True)
class BatchResult:
    entries: list[BatchEntry] = field(default_factory=list)
    errors: list[BatchError] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return len(self.entries)

    @property
    def error_count(self) -> int:
        return len(self.errors)
