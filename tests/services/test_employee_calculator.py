"""
Tests for EmployeePayrollCalculator.

Covers:
- Proration of gross pay against expected hours
- Paid leave, deductions and benefits flowing into net pay
- Percentage and fixed standing deductions charged on gross pay
- Determinism
- Not-found and invalid period errors
- The SQL data source satisfying the calculator's port
"""

from datetime import date, datetime, timedelta
from decimal import Decimal
from uuid import UUID, uuid4

import pytest

from payroll_kernel.domain.dtos import (
    AttendanceDay,
    AttendanceSession,
    BenefitAssignmentInfo,
    DeductionBalanceInfo,
    DeductionTypeInfo,
    EmployeeInfo,
    LeaveGrant,
    LeaveStatus,
    PayPeriodInfo,
    SessionType,
)
from payroll_kernel.exceptions import (
    EmployeeNotFoundError,
    InvalidPayPeriodError,
    PayPeriodNotFoundError,
)
from payroll_kernel.selectors import SqlPayrollDataSource
from payroll_services import EmployeePayrollCalculator, PayrollDataSource
from payroll_services.calculator import prorated_gross

JAN_START = date(2025, 1, 1)
JAN_END = date(2025, 1, 31)


# =============================================================================
# In-memory data source
# =============================================================================


class InMemoryPayrollDataSource:
    """Dict-backed PayrollDataSource for calculator tests."""

    def __init__(self):
        self.employees: dict[UUID, EmployeeInfo] = {}
        self.periods: dict[UUID, PayPeriodInfo] = {}
        self.days: list[AttendanceDay] = []
        self.leaves: list[LeaveGrant] = []
        self.balances: list[DeductionBalanceInfo] = []
        self.benefits: list[BenefitAssignmentInfo] = []
        self.deduction_types: list[DeductionTypeInfo] = []

    def get_employee(self, employee_id):
        return self.employees.get(employee_id)

    def get_pay_period(self, pay_period_id):
        return self.periods.get(pay_period_id)

    def list_attendance_days(self, employee_id, start_date, end_date):
        return tuple(
            d for d in self.days
            if d.employee_id == employee_id and start_date <= d.work_date <= end_date
        )

    def list_approved_leaves(self, employee_id, start_date, end_date):
        return tuple(
            g for g in self.leaves
            if g.employee_id == employee_id
            and g.start_date <= end_date and g.end_date >= start_date
        )

    def list_deduction_balances(self, employee_id):
        return tuple(b for b in self.balances if b.employee_id == employee_id)

    def list_benefit_assignments(self, employee_id):
        return tuple(b for b in self.benefits if b.employee_id == employee_id)

    def list_standing_deductions(self):
        return tuple(t for t in self.deduction_types if t.is_active and t.is_standing)

    def list_active_employees(self, department_id=None):
        return tuple(
            e for e in self.employees.values()
            if department_id is None or e.department_id == department_id
        )

    # -- builders ----------------------------------------------------------

    def add_employee(self, base_salary: str = "20000") -> EmployeeInfo:
        employee = EmployeeInfo(
            id=uuid4(),
            employee_code=f"EMP-{len(self.employees) + 1:04d}",
            full_name="Test Employee",
            department_id=None,
            base_salary=Decimal(base_salary),
        )
        self.employees[employee.id] = employee
        return employee

    def add_period(self, working_days: int = 22, expected_hours: str = "176") -> PayPeriodInfo:
        period = PayPeriodInfo(
            id=uuid4(),
            name="January 2025",
            start_date=JAN_START,
            end_date=JAN_END,
            working_days=working_days,
            expected_hours=Decimal(expected_hours),
        )
        self.periods[period.id] = period
        return period

    def add_full_days(self, employee_id: UUID, count: int, first: date = date(2025, 1, 6)) -> None:
        for offset in range(count):
            work_date = first + timedelta(days=offset)

            def at(hour: int) -> datetime:
                return datetime(work_date.year, work_date.month, work_date.day, hour)

            self.days.append(AttendanceDay(
                employee_id=employee_id,
                work_date=work_date,
                sessions=(
                    AttendanceSession(SessionType.MORNING_IN, clock_in=at(8), clock_out=at(12)),
                    AttendanceSession(SessionType.AFTERNOON_IN, clock_in=at(13), clock_out=at(17)),
                ),
            ))


@pytest.fixture
def data_source():
    return InMemoryPayrollDataSource()


# =============================================================================
# Gross pay
# =============================================================================


class TestProration:
    """gross_pay = total_paid_hours x base_salary / expected_hours."""

    def test_half_attendance_pays_half_salary(self, data_source):
        employee = data_source.add_employee("20000")
        period = data_source.add_period(expected_hours="176")
        data_source.add_full_days(employee.id, 11)

        result = EmployeePayrollCalculator(data_source).calculate(employee.id, period.id)

        assert result.attendance.total_worked_hours == Decimal("88.00")
        assert result.hourly_rate == Decimal("113.636363636")
        assert result.gross_pay == Decimal("10000.00")
        assert result.net_pay == Decimal("10000.00")

    def test_full_attendance_pays_exact_salary(self, data_source):
        employee = data_source.add_employee("25000")
        period = data_source.add_period(working_days=3, expected_hours="24")
        data_source.add_full_days(employee.id, 3)

        result = EmployeePayrollCalculator(data_source).calculate(employee.id, period.id)

        assert result.gross_pay == Decimal("25000.00")

    def test_no_attendance(self, data_source):
        employee = data_source.add_employee()
        period = data_source.add_period()

        result = EmployeePayrollCalculator(data_source).calculate(employee.id, period.id)

        assert result.total_paid_hours == 0
        assert result.gross_pay == Decimal("0.00")
        assert result.net_pay == Decimal("0.00")

    def test_prorated_gross_rounds_half_up(self):
        assert prorated_gross(Decimal("1"), Decimal("100.01"), Decimal("2")) == Decimal("50.01")

    def test_paid_leave_counts_as_paid_hours(self, data_source):
        employee = data_source.add_employee("17600")
        period = data_source.add_period()
        data_source.add_full_days(employee.id, 10)
        data_source.leaves.append(LeaveGrant(
            id=uuid4(), employee_id=employee.id, leave_type="vacation",
            start_date=date(2025, 1, 20), end_date=date(2025, 1, 21),
        ))
        data_source.leaves.append(LeaveGrant(
            id=uuid4(), employee_id=employee.id, leave_type="personal",
            start_date=date(2025, 1, 22), end_date=date(2025, 1, 22),
        ))

        result = EmployeePayrollCalculator(data_source).calculate(employee.id, period.id)

        assert result.paid_leave.paid_leave_hours == Decimal("16.00")
        assert result.total_paid_hours == Decimal("96.00")
        assert result.gross_pay == Decimal("9600.00")
        assert result.to_record_values().paid_leave_hours == Decimal("16.00")


# =============================================================================
# Net pay
# =============================================================================


class TestNetPay:
    def test_deductions_and_benefits(self, data_source):
        employee = data_source.add_employee("20000")
        period = data_source.add_period()
        data_source.add_full_days(employee.id, 11)
        type_id = uuid4()
        data_source.balances.append(DeductionBalanceInfo(
            id=uuid4(), employee_id=employee.id, deduction_type_id=type_id,
            deduction_name="Salary Loan", original_amount=Decimal("5000"),
            remaining_balance=Decimal("300"), monthly_installment=Decimal("500"),
            start_date=date(2024, 1, 1),
        ))
        data_source.benefits.append(BenefitAssignmentInfo(
            id=uuid4(), employee_id=employee.id, benefit_type_id=uuid4(),
            benefit_name="Rice Allowance", amount=Decimal("1500"),
            start_date=date(2024, 1, 1),
        ))

        result = EmployeePayrollCalculator(data_source).calculate(employee.id, period.id)

        assert result.total_deductions == Decimal("300.00")
        assert result.total_benefits == Decimal("1500.00")
        assert result.late_deductions == Decimal("0.00")
        assert result.net_pay == Decimal("11200.00")
        assert result.net_pay == (
            result.gross_pay + result.total_benefits
            - result.total_deductions - result.late_deductions
        )

        lines = result.deduction_lines()
        assert len(lines) == 1
        assert lines[0].amount == Decimal("300")
        assert lines[0].deduction_type_id == type_id
        assert lines[0].deduction_balance_id == data_source.balances[0].id

    def test_standing_deductions_charged_on_gross(self, data_source):
        employee = data_source.add_employee("20000")
        period = data_source.add_period()
        data_source.add_full_days(employee.id, 11)
        sss = DeductionTypeInfo(id=uuid4(), name="SSS Contribution", percentage=Decimal("4.5"))
        union = DeductionTypeInfo(id=uuid4(), name="Union Dues", fixed_amount=Decimal("150"))
        data_source.deduction_types.extend([
            sss,
            union,
            DeductionTypeInfo(id=uuid4(), name="Salary Loan"),
            DeductionTypeInfo(
                id=uuid4(), name="Retired Levy", fixed_amount=Decimal("99"), is_active=False,
            ),
        ])

        result = EmployeePayrollCalculator(data_source).calculate(employee.id, period.id)

        # 4.5% of 10000 gross plus 150 fixed
        assert result.gross_pay == Decimal("10000.00")
        assert result.total_deductions == Decimal("600.00")
        assert result.net_pay == Decimal("9400.00")
        lines = result.deduction_lines()
        assert [(line.deduction_type_id, line.amount) for line in lines] == [
            (sss.id, Decimal("450.00")),
            (union.id, Decimal("150.00")),
        ]
        assert all(line.deduction_balance_id is None for line in lines)

    def test_installments_listed_before_standing_deductions(self, data_source):
        employee = data_source.add_employee("20000")
        period = data_source.add_period()
        data_source.add_full_days(employee.id, 22)
        balance = DeductionBalanceInfo(
            id=uuid4(), employee_id=employee.id, deduction_type_id=uuid4(),
            deduction_name="Salary Loan", original_amount=Decimal("1000"),
            remaining_balance=Decimal("1000"), monthly_installment=Decimal("250"),
            start_date=date(2024, 1, 1),
        )
        data_source.balances.append(balance)
        data_source.deduction_types.append(
            DeductionTypeInfo(id=uuid4(), name="PhilHealth", percentage=Decimal("2.5")),
        )

        result = EmployeePayrollCalculator(data_source).calculate(employee.id, period.id)

        lines = result.deduction_lines()
        assert [line.deduction_balance_id for line in lines] == [balance.id, None]
        assert result.total_deductions == Decimal("750.00")
        assert result.net_pay == Decimal("19250.00")

    def test_net_can_be_negative(self, data_source):
        employee = data_source.add_employee()
        period = data_source.add_period()
        data_source.balances.append(DeductionBalanceInfo(
            id=uuid4(), employee_id=employee.id, deduction_type_id=uuid4(),
            deduction_name="Cash Advance", original_amount=Decimal("1000"),
            remaining_balance=Decimal("1000"), monthly_installment=Decimal("250"),
            start_date=date(2024, 1, 1),
        ))

        result = EmployeePayrollCalculator(data_source).calculate(employee.id, period.id)

        assert result.net_pay == Decimal("-250.00")

    def test_deterministic(self, data_source):
        employee = data_source.add_employee("31234.56")
        period = data_source.add_period(working_days=23, expected_hours="184")
        data_source.add_full_days(employee.id, 7)
        calculator = EmployeePayrollCalculator(data_source)

        first = calculator.calculate(employee.id, period.id)
        second = calculator.calculate(employee.id, period.id)

        assert first == second


# =============================================================================
# Errors
# =============================================================================


class TestErrors:
    def test_unknown_employee(self, data_source):
        period = data_source.add_period()

        with pytest.raises(EmployeeNotFoundError) as exc_info:
            EmployeePayrollCalculator(data_source).calculate(uuid4(), period.id)
        assert exc_info.value.code == "EMPLOYEE_NOT_FOUND"

    def test_unknown_period(self, data_source):
        employee = data_source.add_employee()

        with pytest.raises(PayPeriodNotFoundError):
            EmployeePayrollCalculator(data_source).calculate(employee.id, uuid4())

    def test_zero_expected_hours(self, data_source):
        employee = data_source.add_employee()
        period = data_source.add_period(working_days=0, expected_hours="0")

        with pytest.raises(InvalidPayPeriodError):
            EmployeePayrollCalculator(data_source).calculate(employee.id, period.id)


# =============================================================================
# Logging
# =============================================================================


class TestLogging:
    def test_calculation_logged(self, data_source, captured_logs):
        employee = data_source.add_employee()
        period = data_source.add_period()

        EmployeePayrollCalculator(data_source).calculate(employee.id, period.id)

        events = [r for r in captured_logs() if r["message"] == "employee_payroll_calculated"]
        assert len(events) == 1
        assert events[0]["employee_id"] == str(employee.id)
        traces = [r for r in captured_logs() if r["message"] == "PAYROLL_ENGINE_TRACE"]
        assert {t["engine_name"] for t in traces} >= {
            "attendance_aggregation", "leave_policy", "amortization", "benefits",
            "standing_deductions",
        }


# =============================================================================
# Database-backed data source
# =============================================================================


class TestSqlDataSource:
    def test_satisfies_port(self, session):
        assert isinstance(SqlPayrollDataSource(session), PayrollDataSource)

    def test_calculates_from_database(
        self, session, make_employee, make_pay_period, add_full_day, add_leave,
        make_deduction_balance, make_benefit,
    ):
        employee = make_employee(base_salary=Decimal("20000"))
        period = make_pay_period(working_days=22, expected_hours=Decimal("176"))
        for day in range(6, 17):
            if date(2025, 1, day).weekday() < 5:
                add_full_day(employee.id, date(2025, 1, day))
        add_leave(employee.id, "sick", date(2025, 1, 20), date(2025, 1, 20))
        add_leave(
            employee.id, "vacation", date(2025, 1, 21), date(2025, 1, 21),
            status=LeaveStatus.REJECTED,
        )
        make_deduction_balance(employee.id, Decimal("1000"), Decimal("250"))
        make_benefit(employee.id, Decimal("500"))

        result = EmployeePayrollCalculator(SqlPayrollDataSource(session)).calculate(
            employee.id, period.id,
        )

        # 9 weekdays attended (Jan 6-10, 13-16) plus one paid sick day
        assert result.attendance.working_days == 9
        assert result.total_paid_hours == Decimal("80.00")
        assert result.gross_pay == Decimal("9090.91")
        assert result.net_pay == Decimal("9340.91")

    def test_other_employees_ignored(self, session, make_employee, make_pay_period, add_full_day):
        employee = make_employee()
        other = make_employee()
        period = make_pay_period()
        add_full_day(other.id, date(2025, 1, 6))

        result = EmployeePayrollCalculator(SqlPayrollDataSource(session)).calculate(
            employee.id, period.id,
        )

        assert result.total_paid_hours == 0
