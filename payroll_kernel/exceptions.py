"""
Typed Exception Hierarchy for the Payroll Engine.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Batch generation reports per-employee failures back to the caller.  The
report must say WHY an employee failed in a machine-readable way, so every
error:
  1. Has a TYPED exception class (catch by type, not message)
  2. Has a CODE class attribute (API-safe, copied into batch results)
  3. Carries structured DATA (ids, statuses) as attributes

Example:
    try:
        data = calculator.calculate(employee_id, pay_period_id)
    except EmployeeNotFoundError as e:
        report(code=e.code, employee=e.employee_id)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    PayrollKernelError (base)
    |
    +-- PeriodError
    |   +-- PayPeriodNotFoundError
    |   +-- InvalidPayPeriodError
    |   +-- PeriodOverlapError
    |   +-- PeriodHasRecordsError
    |   +-- InvalidPeriodStatusError
    |
    +-- EmployeeError
    |   +-- EmployeeNotFoundError
    |
    +-- RecordError
    |   +-- PayrollRecordNotFoundError
    |   +-- InvalidRecordStatusError
    |
    +-- ApprovalError
    |   +-- ApprovalNotFoundError
    |   +-- ApprovalNotPendingError
    |   +-- ApproverMismatchError
    |
    +-- ConcurrencyError
    |   +-- PayrollGenerationInProgressError
    |
    +-- PersistenceError
    |   +-- PayrollPersistenceError
    |
    +-- ConfigurationError
        +-- InvalidPayrollConfigError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category      | Code                      | When Raised
--------------|---------------------------|-------------------------------------
Period        | PERIOD_NOT_FOUND          | Pay period id doesn't exist
              | INVALID_PERIOD            | start >= end, or expected hours 0
              | PERIOD_OVERLAP            | New period overlaps an existing one
              | PERIOD_HAS_RECORDS        | Deleting a period with records
              | INVALID_PERIOD_STATUS     | Disallowed status transition
--------------|---------------------------|-------------------------------------
Employee      | EMPLOYEE_NOT_FOUND        | Employee id doesn't exist
--------------|---------------------------|-------------------------------------
Record        | PAYROLL_RECORD_NOT_FOUND  | Record id doesn't exist
              | INVALID_RECORD_STATUS     | Disallowed record status change
--------------|---------------------------|-------------------------------------
Approval      | APPROVAL_NOT_FOUND        | Approval id doesn't exist
              | APPROVAL_NOT_PENDING      | Approval already decided
              | APPROVER_MISMATCH         | Someone else's approval
--------------|---------------------------|-------------------------------------
Concurrency   | GENERATION_IN_PROGRESS    | Period is already PROCESSING
--------------|---------------------------|-------------------------------------
Persistence   | PERSISTENCE_FAILURE       | Write failed for one employee
--------------|---------------------------|-------------------------------------
Configuration | INVALID_PAYROLL_CONFIG    | Attendance/leave config rejected

Amortization clamping (an installment larger than the remaining balance) is
NOT an error: the installment is clamped to the balance.

===============================================================================
"""


class PayrollKernelError(Exception):
    """
    Base exception for all payroll engine errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "PAYROLL_KERNEL_ERROR"


# Period-related exceptions


class PeriodError(PayrollKernelError):
    """Base exception for pay period errors."""

    code: str = "PERIOD_ERROR"


class PayPeriodNotFoundError(PeriodError):
    """Pay period id does not exist."""

    code: str = "PERIOD_NOT_FOUND"

    def __init__(self, pay_period_id: str):
        self.pay_period_id = pay_period_id
        super().__init__(f"Pay period not found: {pay_period_id}")


class InvalidPayPeriodError(PeriodError):
    """Pay period cannot be created or used for calculation."""

    code: str = "INVALID_PERIOD"

    def __init__(self, pay_period_id: str | None, reason: str):
        self.pay_period_id = pay_period_id
        self.reason = reason
        super().__init__(f"Invalid pay period {pay_period_id or '<new>'}: {reason}")


class PeriodOverlapError(PeriodError):
    """New pay period date range overlaps with an existing period."""

    code: str = "PERIOD_OVERLAP"

    def __init__(
        self,
        new_period_name: str,
        existing_period_name: str,
        overlap_start: str,
        overlap_end: str,
    ):
        self.new_period_name = new_period_name
        self.existing_period_name = existing_period_name
        self.overlap_start = overlap_start
        self.overlap_end = overlap_end
        super().__init__(
            f"Period {new_period_name} overlaps with {existing_period_name} "
            f"({overlap_start} to {overlap_end})"
        )


class PeriodHasRecordsError(PeriodError):
    """Pay period cannot be deleted while payroll records exist."""

    code: str = "PERIOD_HAS_RECORDS"

    def __init__(self, pay_period_id: str, record_count: int):
        self.pay_period_id = pay_period_id
        self.record_count = record_count
        super().__init__(
            f"Cannot delete pay period {pay_period_id}: "
            f"{record_count} payroll record(s) exist"
        )


class InvalidPeriodStatusError(PeriodError):
    """Pay period status transition is not allowed."""

    code: str = "INVALID_PERIOD_STATUS"

    def __init__(self, pay_period_id: str, current_status: str, target_status: str):
        self.pay_period_id = pay_period_id
        self.current_status = current_status
        self.target_status = target_status
        super().__init__(
            f"Pay period {pay_period_id} cannot move from "
            f"{current_status} to {target_status}"
        )


# Employee-related exceptions


class EmployeeError(PayrollKernelError):
    """Base exception for employee errors."""

    code: str = "EMPLOYEE_ERROR"


class EmployeeNotFoundError(EmployeeError):
    """Employee id does not exist."""

    code: str = "EMPLOYEE_NOT_FOUND"

    def __init__(self, employee_id: str):
        self.employee_id = employee_id
        super().__init__(f"Employee not found: {employee_id}")


# Payroll record exceptions


class RecordError(PayrollKernelError):
    """Base exception for payroll record errors."""

    code: str = "RECORD_ERROR"


class PayrollRecordNotFoundError(RecordError):
    """Payroll record id does not exist."""

    code: str = "PAYROLL_RECORD_NOT_FOUND"

    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(f"Payroll record not found: {record_id}")


class InvalidRecordStatusError(RecordError):
    """Payroll record status change is not allowed."""

    code: str = "INVALID_RECORD_STATUS"

    def __init__(self, record_id: str | None, current_status: str | None, target_status: str):
        self.record_id = record_id
        self.current_status = current_status
        self.target_status = target_status
        super().__init__(
            f"Payroll record {record_id or '<bulk>'} cannot move from "
            f"{current_status or '<any>'} to {target_status}"
        )


# Approval exceptions


class ApprovalError(PayrollKernelError):
    """Base exception for payroll approval errors."""

    code: str = "APPROVAL_ERROR"


class ApprovalNotFoundError(ApprovalError):
    """Approval id does not exist."""

    code: str = "APPROVAL_NOT_FOUND"

    def __init__(self, approval_id: str):
        self.approval_id = approval_id
        super().__init__(f"Payroll approval not found: {approval_id}")


class ApprovalNotPendingError(ApprovalError):
    """Approval has already been decided."""

    code: str = "APPROVAL_NOT_PENDING"

    def __init__(self, approval_id: str, status: str):
        self.approval_id = approval_id
        self.status = status
        super().__init__(f"Payroll approval {approval_id} is already {status}")


class ApproverMismatchError(ApprovalError):
    """Actor is not the approver assigned to this approval."""

    code: str = "APPROVER_MISMATCH"

    def __init__(self, approval_id: str, approver_id: str, actor_id: str):
        self.approval_id = approval_id
        self.approver_id = approver_id
        self.actor_id = actor_id
        super().__init__(
            f"Payroll approval {approval_id} is assigned to {approver_id}, "
            f"not {actor_id}"
        )


# Concurrency exceptions


class ConcurrencyError(PayrollKernelError):
    """Base exception for concurrency errors."""

    code: str = "CONCURRENCY_ERROR"


class PayrollGenerationInProgressError(ConcurrencyError):
    """Another generation run holds the pay period."""

    code: str = "GENERATION_IN_PROGRESS"

    def __init__(self, pay_period_id: str):
        self.pay_period_id = pay_period_id
        super().__init__(
            f"Payroll generation is already in progress for pay period {pay_period_id}"
        )


# Persistence exceptions


class PersistenceError(PayrollKernelError):
    """Base exception for persistence errors."""

    code: str = "PERSISTENCE_ERROR"


class PayrollPersistenceError(PersistenceError):
    """Writing one employee's settlement failed."""

    code: str = "PERSISTENCE_FAILURE"

    def __init__(self, employee_id: str, detail: str):
        self.employee_id = employee_id
        self.detail = detail
        super().__init__(f"Failed to persist payroll for employee {employee_id}: {detail}")


# Configuration exceptions


class ConfigurationError(PayrollKernelError):
    """Base exception for configuration errors."""

    code: str = "CONFIGURATION_ERROR"


class InvalidPayrollConfigError(ConfigurationError):
    """Attendance or leave policy configuration failed validation."""

    code: str = "INVALID_PAYROLL_CONFIG"

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("Invalid payroll configuration: " + "; ".join(self.errors))
