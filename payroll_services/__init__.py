"""
payroll_services -- employee payroll calculation.

Responsibility:
    Composes the pure engines (``payroll_engines``) with a data-access port
    to produce one employee's settlement for one pay period.

Architecture position:
    Services -- orchestration over engines + kernel.

    Dependency direction:
        payroll_batch    -> payroll_services  (allowed)
        payroll_services -> payroll_engines   (allowed)
        payroll_services -> payroll_kernel    (allowed)
        payroll_engines  -> payroll_services  (FORBIDDEN)
        payroll_kernel   -> payroll_services  (FORBIDDEN)
"""

from payroll_services._payroll_types import EmployeePayrollData
from payroll_services.calculator import EmployeePayrollCalculator, prorated_gross
from payroll_services.data_source import PayrollDataSource

__all__ = [
    "EmployeePayrollCalculator",
    "EmployeePayrollData",
    "PayrollDataSource",
    "prorated_gross",
]
