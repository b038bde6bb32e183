"""Application service that runs the payroll pipeline for a period."""
from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Sequence

from payroll_engine.core.intervals import MS_PER_HOUR, collapse_attendance_by_day, sum_worked_ms_in_month
from payroll_engine.core.payroll import calculate_payroll
from payroll_engine.core.periods import (
    build_date_range,
    count_leave_days_in_range,
    filter_by_range,
    is_partial_range,
)
from payroll_engine.core.schema import (
    PayrollAdjustment,
    PayrollCalculation,
    PayrollPeriodRequest,
    PayrollPolicy,
)
from payroll_engine.core.settings import get_policy
from payroll_engine.core.validation import validate_adjustment, validate_deduction_rules, validate_employee
from payroll_engine.domain import BatchEntry, BatchError, BatchResult

logger = logging.getLogger(__name__)


def _adjustments_in_range(
    items: Sequence[PayrollAdjustment],
    range_start: datetime,
    range_end: datetime,
) -> list[PayrollAdjustment]:
    # undated adjustments are taken as already scoped by the caller
    return [
        item
        for item in items
        if item.penalty_date is None or filter_by_range([item], range_start, range_end)
    ]


class PayrollService:
    """Coordinates range resolution, filtering and payslip assembly."""

    def __init__(self, policy: PayrollPolicy | None = None) -> None:
        self._policy = policy

    @property
    def policy(self) -> PayrollPolicy:
        return self._policy or get_policy()

    # ------------------------------------------------------------------
    # single employee
    # ------------------------------------------------------------------
    def calculate_period(
        self,
        request: PayrollPeriodRequest,
        policy: PayrollPolicy | None = None,
    ) -> PayrollCalculation:
        policy = policy or self.policy
        date_range = build_date_range(request.year, request.month, request.from_day, request.to_day)
        partial = is_partial_range(date_range)

        range_days = date_range.to_day - date_range.from_day + 1
        working_days_in_range = min(range_days, policy.workdays_per_month)

        attendance = filter_by_range(request.attendance, date_range.start_date, date_range.end_date)
        present = collapse_attendance_by_day(attendance)
        penalties = _adjustments_in_range(request.penalties, date_range.start_date, date_range.end_date)
        bonuses = _adjustments_in_range(request.bonuses, date_range.start_date, date_range.end_date)
        permissions = [
            permission
            for permission in request.delay_permissions
            if date_range.start_date.date() <= permission.date <= date_range.end_date.date()
        ]
        leaves = [leave for leave in request.leaves if leave.status == "approved"]
        leave_days = count_leave_days_in_range(leaves, date_range.start_date, date_range.end_date)

        calculation = calculate_payroll(
            request.employee,
            present,
            penalties,
            policy.late_deduction_rules if policy.late_deduction_enabled else (),
            policy.workdays_per_month,
            working_days_in_range,
            approved_leave_days=leave_days,
            approved_bonuses=bonuses,
            insurance_settings=policy.insurance,
            tax_settings=policy.tax,
            is_partial_range=partial,
            delay_permissions=permissions,
            early_checkout_rules=(
                policy.early_checkout_deduction_rules if policy.early_checkout_deduction_enabled else ()
            ),
        )

        worked_ms = sum_worked_ms_in_month(attendance, date_range.start_date, date_range.window_end)
        worked_hours = (Decimal(worked_ms) / MS_PER_HOUR).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        metadata = calculation.metadata.model_copy(
            update={
                "worked_hours": worked_hours,
                "from_day": date_range.from_day,
                "to_day": date_range.to_day,
                "is_partial_range": partial,
            }
        )
        return calculation.model_copy(update={"metadata": metadata})

    # ------------------------------------------------------------------
    # batch runs
    # ------------------------------------------------------------------
    def run_batch(
        self,
        requests: Iterable[PayrollPeriodRequest],
        policy: PayrollPolicy | None = None,
    ) -> BatchResult:
        """Calculate every request; one failing employee never aborts the run.

        An invalid policy rule set raises :class:`ValidationError` before
        any employee is processed.
        """

        policy = policy or self.policy
        if policy.late_deduction_enabled:
            validate_deduction_rules(policy.late_deduction_rules)
        if policy.early_checkout_deduction_enabled:
            validate_deduction_rules(policy.early_checkout_deduction_rules)

        result = BatchResult()
        requests = list(requests)
        logger.info("starting payroll batch for %d employees", len(requests))
        for request in requests:
            employee_id = request.employee.id
            try:
                validate_employee(request.employee)
                for item in (*request.penalties, *request.bonuses):
                    validate_adjustment(item)
                calculation = self.calculate_period(request, policy)
            except Exception as exc:
                logger.exception("payroll failed for employee %s", employee_id)
                result.errors.append(BatchError(employee_id=employee_id, message=str(exc)))
                continue
            result.entries.append(BatchEntry(employee_id=employee_id, calculation=calculation))

        logger.info(
            "payroll batch finished: %d succeeded, %d failed",
            result.success_count,
            result.error_count,
        )
        return result


_service = PayrollService()


def get_payroll_service() -> PayrollService:
    """Return the process-wide payroll service."""

    return _service
