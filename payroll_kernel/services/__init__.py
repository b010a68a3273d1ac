"""Write-side kernel services.  All of them flush, none of them commit."""

from payroll_kernel.services.approval_service import PayrollApprovalService
from payroll_kernel.services.base import BaseService
from payroll_kernel.services.pay_period_service import (
    ALLOWED_TRANSITIONS,
    PayPeriodService,
)
from payroll_kernel.services.payroll_record_service import (
    RECORD_TRANSITIONS,
    PayrollRecordService,
)

__all__ = [
    "ALLOWED_TRANSITIONS",
    "BaseService",
    "PayPeriodService",
    "PayrollApprovalService",
    "PayrollRecordService",
    "RECORD_TRANSITIONS",
]
