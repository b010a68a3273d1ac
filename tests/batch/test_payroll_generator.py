"""
Tests for payroll_batch.generator -- PayrollBatchGenerator.

Validates generate() and reprocess(): SAVEPOINT-per-employee isolation,
record upserts, idempotent deduction balances, approval reset, period
status handling and progress reporting.

Uses in-memory SQLite unless DATABASE_URL points elsewhere.
"""

from dataclasses import replace
from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from payroll_batch import (
    EmployeeResultStatus,
    GenerationStatus,
    PayrollBatchGenerator,
)
from payroll_batch.generator import UNHANDLED_EXCEPTION
from payroll_engines.amortization import AmortizationResult, DeductionInstallment
from payroll_kernel.domain.dtos import (
    ApprovalStatus,
    ApproverAssignment,
    EmployeeStatus,
    PayPeriodStatus,
)
from payroll_kernel.exceptions import (
    EmployeeNotFoundError,
    InvalidPayPeriodError,
    InvalidPeriodStatusError,
    PayPeriodNotFoundError,
    PayrollGenerationInProgressError,
)
from payroll_kernel.models import (
    DeductionTypeModel,
    PayrollDeductionLineModel,
    PayrollRecordModel,
)
from payroll_kernel.selectors import PayrollRecordSelector, SqlPayrollDataSource
from payroll_kernel.services import PayPeriodService, PayrollApprovalService
from payroll_services import EmployeePayrollCalculator

WEEK_OF_JAN_6 = [date(2025, 1, d) for d in (6, 7, 8, 9, 10)]


# =============================================================================
# Test calculators
# =============================================================================


class FailingCalculator(EmployeePayrollCalculator):
    """Raises for the employees in ``fail_for``; calculates the rest."""

    def __init__(self, data_source, fail_for, error=None):
        super().__init__(data_source)
        self._fail_for = set(fail_for)
        self._error = error

    def calculate(self, employee_id, pay_period_id):
        if employee_id in self._fail_for:
            raise self._error or EmployeeNotFoundError(str(employee_id))
        return super().calculate(employee_id, pay_period_id)


class BrokenLineCalculator(EmployeePayrollCalculator):
    """Emits a deduction line whose deduction type does not exist."""

    def calculate(self, employee_id, pay_period_id):
        data = super().calculate(employee_id, pay_period_id)
        bogus = DeductionInstallment(
            deduction_balance_id=uuid4(),
            deduction_type_id=uuid4(),
            name="Ghost",
            amount=Decimal("10"),
            previous_balance=Decimal("10"),
            new_balance=Decimal("0"),
            becomes_inactive=True,
        )
        return replace(
            data,
            amortization=AmortizationResult(
                installments=(bogus,), total_deductions=Decimal("10.00"),
            ),
        )


@pytest.fixture
def generator(session, deterministic_clock):
    return PayrollBatchGenerator(session, clock=deterministic_clock)


@pytest.fixture
def period(make_pay_period):
    # 22 working days, 176 expected hours
    return make_pay_period(working_days=22)


def _records(session, period_id):
    return session.query(PayrollRecordModel).filter_by(pay_period_id=period_id).all()


def _status(session, period_id) -> PayPeriodStatus:
    return PayPeriodService(session).get_period(period_id).status


# =============================================================================
# Generation
# =============================================================================


class TestGenerate:
    def test_generates_record_per_active_employee(
        self, session, generator, period, make_employee, add_full_day, test_actor_id,
    ):
        first = make_employee(base_salary=Decimal("17600"))
        second = make_employee(base_salary=Decimal("35200"))
        make_employee(status=EmployeeStatus.INACTIVE)
        for day in WEEK_OF_JAN_6:
            add_full_day(first.id, day)

        result = generator.generate(period.id, test_actor_id)

        assert result.status == GenerationStatus.COMPLETED
        assert result.total_employees == 2
        assert result.succeeded == 2
        assert result.period_status == PayPeriodStatus.SENT_FOR_REVIEW
        assert [r.employee_code for r in result.employee_results] == ["EMP-0001", "EMP-0002"]
        assert result.employee_results[0].gross_pay == Decimal("4000.00")
        assert result.employee_results[1].gross_pay == Decimal("0.00")
        assert len(_records(session, period.id)) == 2
        assert _status(session, period.id) == PayPeriodStatus.SENT_FOR_REVIEW

    def test_regenerate_updates_in_place(
        self, session, generator, period, make_employee, add_full_day, test_actor_id,
    ):
        employee = make_employee(base_salary=Decimal("17600"))
        first = generator.generate(period.id, test_actor_id)

        add_full_day(employee.id, date(2025, 1, 6))
        second = generator.generate(period.id, test_actor_id)

        records = _records(session, period.id)
        assert len(records) == 1
        assert records[0].id == first.employee_results[0].record_id
        assert second.employee_results[0].gross_pay == Decimal("800.00")
        assert records[0].gross_pay == Decimal("800.00")

    def test_balances_amortized_once_across_reruns(
        self, session, generator, period, make_employee, make_deduction_balance, test_actor_id,
    ):
        employee = make_employee()
        balance = make_deduction_balance(employee.id, Decimal("1000"), Decimal("250"))

        generator.generate(period.id, test_actor_id)
        generator.generate(period.id, test_actor_id)
        generator.generate(period.id, test_actor_id)

        assert balance.remaining_balance == Decimal("750")
        lines = session.query(PayrollDeductionLineModel).all()
        assert [line.amount for line in lines] == [Decimal("250")]

    def test_final_installment_deactivates_balance(
        self, session, generator, period, make_employee, make_deduction_balance, test_actor_id,
    ):
        employee = make_employee()
        balance = make_deduction_balance(
            employee.id, Decimal("300"), Decimal("500"), original_amount=Decimal("1500"),
        )

        result = generator.generate(period.id, test_actor_id)
        generator.generate(period.id, test_actor_id)

        assert balance.remaining_balance == 0
        assert not balance.is_active
        record = PayrollRecordSelector(session).get_record(result.employee_results[0].record_id)
        assert record.total_deductions == Decimal("300")

    def test_cancelled_balance_not_charged_on_regeneration(
        self, session, generator, period, make_employee, make_deduction_balance, test_actor_id,
    ):
        employee = make_employee()
        balance = make_deduction_balance(employee.id, Decimal("1000"), Decimal("500"))
        generator.generate(period.id, test_actor_id)
        assert balance.remaining_balance == Decimal("500")

        balance.is_active = False
        session.flush()
        result = generator.generate(period.id, test_actor_id)

        assert not balance.is_active
        assert balance.remaining_balance == Decimal("1000")
        assert session.query(PayrollDeductionLineModel).count() == 0
        assert result.employee_results[0].net_pay == result.employee_results[0].gross_pay

    def test_standing_deduction_lines_survive_reruns(
        self, session, generator, period, make_employee, add_full_day, make_deduction_balance,
        test_actor_id,
    ):
        employee = make_employee(base_salary=Decimal("17600"))
        for day in WEEK_OF_JAN_6:
            add_full_day(employee.id, day)
        balance = make_deduction_balance(employee.id, Decimal("1000"), Decimal("250"))
        session.add(
            DeductionTypeModel(name="Pag-IBIG", percentage=Decimal("10"), created_by_id=test_actor_id)
        )
        session.flush()

        generator.generate(period.id, test_actor_id)
        result = generator.generate(period.id, test_actor_id)

        assert balance.remaining_balance == Decimal("750")
        lines = session.query(PayrollDeductionLineModel).order_by(PayrollDeductionLineModel.name).all()
        assert [(line.name, line.amount) for line in lines] == [
            ("Pag-IBIG", Decimal("400.00")),
            ("Salary Loan", Decimal("250.00")),
        ]
        assert [line.deduction_balance_id for line in lines] == [None, balance.id]
        assert result.employee_results[0].net_pay == Decimal("3350.00")

    def test_logs_generation_events(
        self, generator, period, make_employee, test_actor_id, captured_logs,
    ):
        make_employee()

        result = generator.generate(period.id, test_actor_id)

        logs = captured_logs()
        started = [r for r in logs if r["message"] == "payroll_generation_started"]
        completed = [r for r in logs if r["message"] == "payroll_generation_completed"]
        assert len(started) == 1
        assert completed[0]["batch_run_id"] == str(result.run_id)
        assert completed[0]["succeeded"] == 1

    def test_no_employees(self, session, generator, period, test_actor_id):
        result = generator.generate(period.id, test_actor_id)

        assert result.status == GenerationStatus.COMPLETED
        assert result.total_employees == 0
        assert result.period_status == PayPeriodStatus.DRAFT


# =============================================================================
# Failure isolation
# =============================================================================


class TestFailureIsolation:
    def test_one_failure_does_not_stop_the_run(
        self, session, period, make_employee, deterministic_clock, test_actor_id,
    ):
        good = make_employee()
        bad = make_employee()
        calculator = FailingCalculator(SqlPayrollDataSource(session), fail_for=[bad.id])
        generator = PayrollBatchGenerator(session, calculator=calculator, clock=deterministic_clock)

        result = generator.generate(period.id, test_actor_id)

        assert result.status == GenerationStatus.PARTIALLY_COMPLETED
        assert (result.succeeded, result.failed) == (1, 1)
        (failure,) = result.failed_employees
        assert failure.employee_id == bad.id
        assert failure.error_code == "EMPLOYEE_NOT_FOUND"
        assert [r.employee_id for r in _records(session, period.id)] == [good.id]
        assert result.period_status == PayPeriodStatus.SENT_FOR_REVIEW

    def test_unexpected_exception_reported(
        self, session, period, make_employee, deterministic_clock, test_actor_id,
    ):
        employee = make_employee()
        calculator = FailingCalculator(
            SqlPayrollDataSource(session), fail_for=[employee.id], error=RuntimeError("boom"),
        )
        generator = PayrollBatchGenerator(session, calculator=calculator, clock=deterministic_clock)

        result = generator.generate(period.id, test_actor_id)

        assert result.status == GenerationStatus.FAILED
        assert result.employee_results[0].status == EmployeeResultStatus.FAILED
        assert result.employee_results[0].error_code == UNHANDLED_EXCEPTION
        assert result.employee_results[0].error_message == "boom"
        assert result.period_status == PayPeriodStatus.DRAFT

    def test_persistence_failure_rolls_back_employee(
        self, session, period, make_employee, deterministic_clock, test_actor_id, captured_logs,
    ):
        make_employee()
        calculator = BrokenLineCalculator(SqlPayrollDataSource(session))
        generator = PayrollBatchGenerator(session, calculator=calculator, clock=deterministic_clock)

        result = generator.generate(period.id, test_actor_id)

        assert result.employee_results[0].error_code == "PERSISTENCE_FAILURE"
        assert _records(session, period.id) == []
        assert any(r["message"] == "employee_payroll_failed" for r in captured_logs())


# =============================================================================
# Reprocess
# =============================================================================


class TestReprocess:
    def test_reprocess_is_idempotent(
        self, session, generator, period, make_employee, make_deduction_balance, test_actor_id,
    ):
        employee = make_employee()
        balance = make_deduction_balance(employee.id, Decimal("1000"), Decimal("250"))
        first = generator.generate(period.id, test_actor_id)

        second = generator.reprocess(period.id, test_actor_id)

        assert second.reprocessed
        assert second.records_deleted == 1
        assert balance.remaining_balance == Decimal("750")
        records = _records(session, period.id)
        assert len(records) == 1
        assert records[0].id != first.employee_results[0].record_id
        assert records[0].net_pay == first.employee_results[0].net_pay

    def test_department_reprocess_leaves_other_departments(
        self, session, generator, period, make_employee, test_actor_id,
    ):
        dept_a, dept_b = uuid4(), uuid4()
        make_employee(department_id=dept_a)
        other = make_employee(department_id=dept_b)
        generator.generate(period.id, test_actor_id)
        selector = PayrollRecordSelector(session)
        other_record_id = selector.get_record_for_employee(period.id, other.id).id

        result = generator.reprocess(period.id, test_actor_id, department_id=dept_a)

        assert result.total_employees == 1
        assert result.records_deleted == 1
        assert result.period_status == PayPeriodStatus.DRAFT
        kept = selector.get_record_for_employee(period.id, other.id)
        assert kept.id == other_record_id


# =============================================================================
# Approvals
# =============================================================================


class TestApprovals:
    def test_approvers_created_once(self, generator, period, make_employee, test_actor_id):
        make_employee()
        approvers = [ApproverAssignment(uuid4()), ApproverAssignment(uuid4())]

        first = generator.generate(period.id, test_actor_id, approvers=approvers)
        second = generator.generate(period.id, test_actor_id, approvers=approvers)

        assert first.approvals_created == 2
        assert second.approvals_created == 0
        assert second.approvals_reset == 2

    def test_regeneration_resets_decisions(
        self, session, generator, period, make_employee, test_actor_id,
    ):
        make_employee()
        first_approver, second_approver = uuid4(), uuid4()
        generator.generate(
            period.id, test_actor_id,
            approvers=[ApproverAssignment(first_approver), ApproverAssignment(second_approver)],
        )
        approval_service = PayrollApprovalService(session)
        approval = next(
            a for a in approval_service.list_approvals(period.id)
            if a.approver_id == first_approver
        )
        approval_service.approve(approval.id, first_approver)

        generator.generate(period.id, test_actor_id)

        statuses = {a.status for a in approval_service.list_approvals(period.id)}
        assert statuses == {ApprovalStatus.PENDING}

    def test_completed_period_cannot_be_regenerated(
        self, session, generator, period, make_employee, test_actor_id,
    ):
        make_employee()
        approver = uuid4()
        generator.generate(period.id, test_actor_id, approvers=[ApproverAssignment(approver)])
        approval_service = PayrollApprovalService(session)
        (approval,) = approval_service.list_approvals(period.id)
        approval_service.approve(approval.id, approver)
        assert _status(session, period.id) == PayPeriodStatus.COMPLETED

        with pytest.raises(InvalidPeriodStatusError):
            generator.generate(period.id, test_actor_id)


# =============================================================================
# Period guards
# =============================================================================


class TestPeriodGuards:
    def test_period_in_progress(self, generator, make_pay_period, test_actor_id):
        period = make_pay_period(status=PayPeriodStatus.PROCESSING)

        with pytest.raises(PayrollGenerationInProgressError) as exc_info:
            generator.generate(period.id, test_actor_id)
        assert exc_info.value.code == "GENERATION_IN_PROGRESS"

    def test_unknown_period(self, generator, test_actor_id):
        with pytest.raises(PayPeriodNotFoundError):
            generator.generate(uuid4(), test_actor_id)

    def test_zero_expected_hours(self, session, generator, make_pay_period, make_employee, test_actor_id):
        period = make_pay_period(working_days=0)
        make_employee()

        with pytest.raises(InvalidPayPeriodError):
            generator.generate(period.id, test_actor_id)
        assert _status(session, period.id) == PayPeriodStatus.DRAFT
        assert _records(session, period.id) == []


# =============================================================================
# Progress
# =============================================================================


class TestProgress:
    def test_progress_reported_per_employee(self, generator, period, make_employee, test_actor_id):
        employees = [make_employee() for _ in range(3)]
        updates = []

        result = generator.generate(period.id, test_actor_id, progress=updates.append)

        assert [u.processed for u in updates] == [1, 2, 3]
        assert all(u.total == 3 and u.run_id == result.run_id for u in updates)
        assert [u.current_employee_id for u in updates] == [e.id for e in employees]
        assert updates[-1].percent_complete == 100
