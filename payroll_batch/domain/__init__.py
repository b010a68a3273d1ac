"""
payroll_batch.domain -- Pure types for payroll generation runs.

ZERO I/O.  All types are frozen dataclasses.
"""

from payroll_batch.domain.types import (
    EmployeeGenerationResult,
    EmployeeResultStatus,
    GenerationProgress,
    GenerationStatus,
    PayrollGenerationResult,
)

__all__ = [
    "EmployeeGenerationResult",
    "EmployeeResultStatus",
    "GenerationProgress",
    "GenerationStatus",
    "PayrollGenerationResult",
]
