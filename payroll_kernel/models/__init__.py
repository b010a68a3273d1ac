"""ORM models for the payroll engine."""

from payroll_kernel.models.approval import PayrollApprovalModel
from payroll_kernel.models.attendance import AttendanceSessionModel, LeaveRequestModel
from payroll_kernel.models.benefit import BenefitTypeModel, EmployeeBenefitModel
from payroll_kernel.models.deduction import (
    DeductionTypeModel,
    EmployeeDeductionBalanceModel,
)
from payroll_kernel.models.employee import EmployeeModel
from payroll_kernel.models.pay_period import PayPeriodModel
from payroll_kernel.models.payroll_record import (
    PayrollDeductionLineModel,
    PayrollRecordModel,
)

__all__ = [
    "AttendanceSessionModel",
    "BenefitTypeModel",
    "DeductionTypeModel",
    "EmployeeBenefitModel",
    "EmployeeDeductionBalanceModel",
    "EmployeeModel",
    "LeaveRequestModel",
    "PayPeriodModel",
    "PayrollApprovalModel",
    "PayrollDeductionLineModel",
    "PayrollRecordModel",
    "import_all_models",
]


def import_all_models() -> None:
    """Ensure every model is registered on ``Base.metadata`` (idempotent).

    Importing this package already does it; the function gives
    ``create_tables()`` and the test suite an explicit call site.
    """
    import payroll_kernel.models.approval  # noqa: F401
    import payroll_kernel.models.attendance  # noqa: F401
    import payroll_kernel.models.benefit  # noqa: F401
    import payroll_kernel.models.deduction  # noqa: F401
    import payroll_kernel.models.employee  # noqa: F401
    import payroll_kernel.models.pay_period  # noqa: F401
    import payroll_kernel.models.payroll_record  # noqa: F401
