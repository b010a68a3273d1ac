"""
payroll_batch.domain.types -- Pure frozen dataclasses for payroll generation.

ZERO I/O.  Frozen dataclasses with enum status fields and tuples for
immutable collections.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from payroll_kernel.domain.dtos import PayPeriodStatus


# =============================================================================
# Status enums
# =============================================================================


class GenerationStatus(str, Enum):
    """Outcome of a whole generation run."""

    COMPLETED = "completed"  # Every employee succeeded (or there were none)
    PARTIALLY_COMPLETED = "partially_completed"  # Some employees failed
    FAILED = "failed"  # No employee succeeded


class EmployeeResultStatus(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"


# =============================================================================
# Result DTOs
# =============================================================================


@dataclass(frozen=True)
class EmployeeGenerationResult:
    """Outcome for one employee.

    A failed employee's SAVEPOINT was rolled back: no record, line or
    balance change of that employee survives the run.
    """

    employee_id: UUID
    employee_code: str
    status: EmployeeResultStatus
    record_id: UUID | None = None
    gross_pay: Decimal | None = None
    net_pay: Decimal | None = None
    error_code: str | None = None
    error_message: str | None = None
    duration_ms: int = 0

    @property
    def succeeded(self) -> bool:
        return self.status == EmployeeResultStatus.SUCCEEDED


@dataclass(frozen=True)
class PayrollGenerationResult:
    """Immutable result of ``PayrollBatchGenerator.generate()`` / ``reprocess()``."""

    run_id: UUID
    pay_period_id: UUID
    status: GenerationStatus
    period_status: PayPeriodStatus
    total_employees: int
    succeeded: int
    failed: int
    employee_results: tuple[EmployeeGenerationResult, ...] = ()
    department_id: UUID | None = None
    reprocessed: bool = False
    records_deleted: int = 0
    approvals_reset: int = 0
    approvals_created: int = 0
    started_at: datetime | None = None
    completed_at: datetime | None = None
    duration_ms: int = 0

    @property
    def failed_employees(self) -> tuple[EmployeeGenerationResult, ...]:
        return tuple(r for r in self.employee_results if not r.succeeded)


@dataclass(frozen=True)
class GenerationProgress:
    """Progress snapshot passed to the optional progress callback."""

    run_id: UUID
    pay_period_id: UUID
    processed: int
    total: int
    succeeded: int
    failed: int
    current_employee_id: UUID | None = None

    @property
    def percent_complete(self) -> int:
        if self.total == 0:
            return 100
        return self.processed * 100 // self.total
