"""
PayrollBatchGenerator -- SAVEPOINT-per-employee payroll generation.

Contract:
    ``generate()`` calculates and persists payroll for every active
    employee in scope (the whole company, or one department);
    ``reprocess()`` first deletes the scope's records, crediting their
    deductions back to the balances, and then generates.

Run sequence:
    1. Lock the pay period row (SELECT ... FOR UPDATE) and move it to
       PROCESSING.  A period already PROCESSING is refused, and so is a
       COMPLETED one.
    2. (reprocess) Delete the scope's records after restoring balances.
    3. For each employee, ordered by employee_code, inside one SAVEPOINT:
       credit back the deductions of any existing record, calculate,
       upsert the record, replace its deduction lines and take the new
       installments off the balances.  A failure rolls back only that
       employee's SAVEPOINT; the run carries on.
    4. Reset the period's approvals to PENDING and create any missing
       approvals for the given approvers.
    5. Leave the period SENT_FOR_REVIEW after a full-scope run with at
       least one success, DRAFT otherwise.

Architecture: payroll_batch.  Imports payroll_services and kernel services.
    Nothing in kernel/, engines/ or services/ imports from here.

Invariants enforced:
    - SAVEPOINT isolation per employee: a record, its lines and its
      balance updates are written together or not at all.
    - Idempotent balances: generating or reprocessing the same period any
      number of times leaves every balance where a single run would.
    - One running generation per period (row lock + PROCESSING status).
    - All timestamps from the injected Clock.
    - Flush-only: the caller owns the outer transaction.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from uuid import UUID, uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from payroll_batch.domain.types import (
    EmployeeGenerationResult,
    EmployeeResultStatus,
    GenerationProgress,
    GenerationStatus,
    PayrollGenerationResult,
)
from payroll_config.schema import PayrollEngineConfig
from payroll_kernel.domain.clock import Clock, SystemClock
from payroll_kernel.domain.dtos import (
    ApproverAssignment,
    EmployeeInfo,
    PayPeriodStatus,
)
from payroll_kernel.exceptions import (
    InvalidPayPeriodError,
    PayrollGenerationInProgressError,
    PayrollKernelError,
    PayrollPersistenceError,
)
from payroll_kernel.logging_config import LogContext, get_logger
from payroll_kernel.models.pay_period import PayPeriodModel
from payroll_kernel.selectors.payroll_input_selector import SqlPayrollDataSource
from payroll_kernel.services.approval_service import PayrollApprovalService
from payroll_kernel.services.pay_period_service import PayPeriodService
from payroll_kernel.services.payroll_record_service import PayrollRecordService
from payroll_services.calculator import EmployeePayrollCalculator
from payroll_services.data_source import PayrollDataSource

logger = get_logger("batch.generator")

ProgressCallback = Callable[[GenerationProgress], None]

UNHANDLED_EXCEPTION = "UNHANDLED_EXCEPTION"


class PayrollBatchGenerator:
    """Payroll generation for one pay period.

    Contract:
        - ``generate()`` / ``reprocess()`` return a PayrollGenerationResult
          with one EmployeeGenerationResult per employee in scope.
        - Errors resolving the period (not found, already processing,
          completed, no expected hours) are raised before anything is
          written.  Errors for one employee are reported, not raised.

    Non-goals:
        - Does NOT call ``session.commit()``; caller controls boundaries.
        - Does NOT run in the background or support cancellation.
    """

    def __init__(
        self,
        session: Session,
        calculator: EmployeePayrollCalculator | None = None,
        config: PayrollEngineConfig | None = None,
        clock: Clock | None = None,
        data_source: PayrollDataSource | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._config = config or (
            calculator.config if calculator else PayrollEngineConfig.with_defaults()
        )
        self._data = data_source or SqlPayrollDataSource(session)
        self._calculator = calculator or EmployeePayrollCalculator(self._data, self._config)
        self._periods = PayPeriodService(session, self._config.hours_per_day)
        self._records = PayrollRecordService(session)
        self._approvals = PayrollApprovalService(session, self._clock, self._periods)

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def generate(
        self,
        pay_period_id: UUID,
        actor_id: UUID,
        department_id: UUID | None = None,
        approvers: Sequence[ApproverAssignment] = (),
        progress: ProgressCallback | None = None,
    ) -> PayrollGenerationResult:
        """Generate (or regenerate in place) payroll for the period.

        Raises:
            PayPeriodNotFoundError: If the period does not exist.
            PayrollGenerationInProgressError: If the period is PROCESSING.
            InvalidPeriodStatusError: If the period is COMPLETED.
            InvalidPayPeriodError: If the period expects no working hours.
        """
        return self._run(
            pay_period_id, actor_id, department_id, approvers, progress, reprocess=False,
        )

    def reprocess(
        self,
        pay_period_id: UUID,
        actor_id: UUID,
        department_id: UUID | None = None,
        approvers: Sequence[ApproverAssignment] = (),
        progress: ProgressCallback | None = None,
    ) -> PayrollGenerationResult:
        """Delete the scope's records (restoring balances) and generate again.

        Raises the same errors as ``generate()``.
        """
        return self._run(
            pay_period_id, actor_id, department_id, approvers, progress, reprocess=True,
        )

    # -------------------------------------------------------------------------
    # Run
    # -------------------------------------------------------------------------

    def _run(
        self,
        pay_period_id: UUID,
        actor_id: UUID,
        department_id: UUID | None,
        approvers: Sequence[ApproverAssignment],
        progress: ProgressCallback | None,
        reprocess: bool,
    ) -> PayrollGenerationResult:
        run_id = uuid4()
        start_time = time.monotonic()
        started_at = self._clock.now()

        with LogContext.bind(
            pay_period_id=str(pay_period_id),
            actor_id=str(actor_id),
            batch_run_id=str(run_id),
        ):
            period = self._acquire_period(pay_period_id, actor_id)

            logger.info(
                "payroll_generation_started",
                extra={
                    "department_id": str(department_id) if department_id else None,
                    "reprocess": reprocess,
                },
            )

            records_deleted = 0
            if reprocess:
                records_deleted = self._records.delete_records(
                    pay_period_id, actor_id, department_id,
                )

            employees = self._data.list_active_employees(department_id)
            results: list[EmployeeGenerationResult] = []
            succeeded = 0
            failed = 0

            for employee in employees:
                result = self._process_employee(employee, pay_period_id, actor_id)
                results.append(result)
                if result.succeeded:
                    succeeded += 1
                else:
                    failed += 1

                if progress is not None:
                    progress(
                        GenerationProgress(
                            run_id=run_id,
                            pay_period_id=pay_period_id,
                            processed=len(results),
                            total=len(employees),
                            succeeded=succeeded,
                            failed=failed,
                            current_employee_id=employee.id,
                        )
                    )

            approvals_reset = self._approvals.reset_approvals(
                pay_period_id, actor_id, department_id,
            )
            approvals_created = len(
                self._approvals.create_approvals(pay_period_id, approvers, actor_id)
            )

            if department_id is None and succeeded > 0:
                final_status = PayPeriodStatus.SENT_FOR_REVIEW
            else:
                final_status = PayPeriodStatus.DRAFT
            self._periods.transition(period, final_status, actor_id)
            self._session.flush()

            if failed == 0:
                status = GenerationStatus.COMPLETED
            elif succeeded == 0:
                status = GenerationStatus.FAILED
            else:
                status = GenerationStatus.PARTIALLY_COMPLETED

            duration_ms = int((time.monotonic() - start_time) * 1000)
            logger.info(
                "payroll_generation_completed",
                extra={
                    "status": status.value,
                    "period_status": final_status.value,
                    "total_employees": len(employees),
                    "succeeded": succeeded,
                    "failed": failed,
                    "records_deleted": records_deleted,
                    "approvals_reset": approvals_reset,
                    "duration_ms": duration_ms,
                },
            )

        return PayrollGenerationResult(
            run_id=run_id,
            pay_period_id=pay_period_id,
            status=status,
            period_status=final_status,
            total_employees=len(employees),
            succeeded=succeeded,
            failed=failed,
            employee_results=tuple(results),
            department_id=department_id,
            reprocessed=reprocess,
            records_deleted=records_deleted,
            approvals_reset=approvals_reset,
            approvals_created=approvals_created,
            started_at=started_at,
            completed_at=self._clock.now(),
            duration_ms=duration_ms,
        )

    def _acquire_period(self, pay_period_id: UUID, actor_id: UUID) -> PayPeriodModel:
        """Lock the period row and move it to PROCESSING."""
        period = self._periods.get_period_for_update(pay_period_id)

        if period.status == PayPeriodStatus.PROCESSING.value:
            raise PayrollGenerationInProgressError(str(pay_period_id))
        if period.expected_hours <= 0:
            raise InvalidPayPeriodError(
                str(pay_period_id), "expected_hours must be greater than zero",
            )

        # Raises InvalidPeriodStatusError for COMPLETED periods
        self._periods.transition(period, PayPeriodStatus.PROCESSING, actor_id)
        # Flushed before the first SAVEPOINT so it opens inside the transaction
        self._session.flush()
        return period

    # -------------------------------------------------------------------------
    # Per employee
    # -------------------------------------------------------------------------

    def _process_employee(
        self,
        employee: EmployeeInfo,
        pay_period_id: UUID,
        actor_id: UUID,
    ) -> EmployeeGenerationResult:
        item_start = time.monotonic()

        with LogContext.bind(employee_id=str(employee.id)):
            savepoint = self._session.begin_nested()
            try:
                existing = self._records.find_record(pay_period_id, employee.id)
                if existing is not None:
                    self._records.restore_deduction_balances(existing, actor_id)

                data = self._calculator.calculate(employee.id, pay_period_id)

                record = self._records.upsert_record(
                    pay_period_id, employee.id, data.to_record_values(), actor_id,
                )
                lines = data.deduction_lines()
                self._records.replace_deduction_lines(record, lines, actor_id)
                self._records.apply_amortization(lines, actor_id)
                record_id = record.id

                savepoint.commit()
            except PayrollKernelError as exc:
                savepoint.rollback()
                return self._failed(employee, exc.code, str(exc), item_start)
            except SQLAlchemyError as exc:
                savepoint.rollback()
                return self._failed(
                    employee,
                    PayrollPersistenceError.code,
                    str(PayrollPersistenceError(str(employee.id), str(exc))),
                    item_start,
                )
            except Exception as exc:
                savepoint.rollback()
                return self._failed(employee, UNHANDLED_EXCEPTION, str(exc), item_start)

            return EmployeeGenerationResult(
                employee_id=employee.id,
                employee_code=employee.employee_code,
                status=EmployeeResultStatus.SUCCEEDED,
                record_id=record_id,
                gross_pay=data.gross_pay,
                net_pay=data.net_pay,
                duration_ms=int((time.monotonic() - item_start) * 1000),
            )

    def _failed(
        self,
        employee: EmployeeInfo,
        error_code: str,
        error_message: str,
        item_start: float,
    ) -> EmployeeGenerationResult:
        logger.warning(
            "employee_payroll_failed",
            extra={
                "employee_code": employee.employee_code,
                "error_code": error_code,
                "error_message": error_message,
            },
        )
        return EmployeeGenerationResult(
            employee_id=employee.id,
            employee_code=employee.employee_code,
            status=EmployeeResultStatus.FAILED,
            error_code=error_code,
            error_message=error_message,
            duration_ms=int((time.monotonic() - item_start) * 1000),
        )
