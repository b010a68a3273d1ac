"""
payroll_batch -- Payroll generation runs.

Generates one pay period's payroll across every active employee with
per-employee SAVEPOINT isolation, row-locked period status, balance
write-back, approval reset and progress reporting.

Architecture:
    payroll_batch/ is the outermost package.  Nothing in kernel/,
    engines/ or services/ imports from payroll_batch.
"""

from payroll_batch.domain.types import (
    EmployeeGenerationResult,
    EmployeeResultStatus,
    GenerationProgress,
    GenerationStatus,
    PayrollGenerationResult,
)
from payroll_batch.generator import PayrollBatchGenerator

__all__ = [
    "EmployeeGenerationResult",
    "EmployeeResultStatus",
    "GenerationProgress",
    "GenerationStatus",
    "PayrollBatchGenerator",
    "PayrollGenerationResult",
]
