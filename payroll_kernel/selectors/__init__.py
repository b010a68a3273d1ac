"""Read-only query selectors returning frozen DTOs."""

from payroll_kernel.selectors.base import BaseSelector
from payroll_kernel.selectors.payroll_input_selector import SqlPayrollDataSource
from payroll_kernel.selectors.payroll_record_selector import (
    PayrollRecordFilter,
    PayrollRecordSelector,
    RecordFilterField,
)

__all__ = [
    "BaseSelector",
    "PayrollRecordFilter",
    "PayrollRecordSelector",
    "RecordFilterField",
    "SqlPayrollDataSource",
]
