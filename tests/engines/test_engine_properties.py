"""
Hypothesis property tests for the pure payroll engines.

Properties:
1. Credited session hours stay within [0, session cap]
2. A day never credits more than morning + afternoon windows (8h)
3. Amortization never drives a balance negative and never charges more
   than the monthly installment
4. Paid leave hours scale with the payment percentage
"""

from datetime import date, datetime, timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

try:
    from hypothesis import given, settings, strategies as st
    from hypothesis.strategies import composite

    HYPOTHESIS_AVAILABLE = True
except ImportError:
    HYPOTHESIS_AVAILABLE = False
    pytest.skip("hypothesis not installed", allow_module_level=True)

from payroll_config.schema import AttendanceConfig, LeavePolicyDef
from payroll_engines.amortization import compute_installment
from payroll_engines.hours_calculator import calculate_hours
from payroll_engines.leave_policy import LeavePaymentPolicy, compute_paid_leave
from payroll_kernel.domain.dtos import DeductionBalanceInfo, LeaveGrant

DAY = datetime(2025, 1, 15)
CONFIG = AttendanceConfig()


# =============================================================================
# Strategies
# =============================================================================


@composite
def punch(draw):
    """A punch anywhere on DAY (minute resolution), or no punch at all."""
    minute = draw(st.one_of(st.none(), st.integers(min_value=0, max_value=24 * 60 - 1)))
    if minute is None:
        return None
    return DAY + timedelta(minutes=minute)


@composite
def money(draw, min_value="0", max_value="100000"):
    return draw(st.decimals(
        min_value=Decimal(min_value),
        max_value=Decimal(max_value),
        places=2,
        allow_nan=False,
        allow_infinity=False,
    ))


# =============================================================================
# Hours
# =============================================================================


class TestHoursProperties:
    @given(punch(), punch(), punch(), punch())
    @settings(max_examples=300)
    def test_hours_bounded(self, morning_in, morning_out, afternoon_in, afternoon_out):
        result = calculate_hours(morning_in, morning_out, afternoon_in, afternoon_out, CONFIG)

        for session in (result.morning, result.afternoon):
            assert Decimal("0") <= session.hours <= CONFIG.session_cap_hours
        assert result.total_hours <= Decimal("8")
        assert result.total_hours == result.morning_hours + result.afternoon_hours

    @given(punch(), punch())
    def test_no_clock_in_credits_nothing(self, morning_out, afternoon_out):
        result = calculate_hours(None, morning_out, None, afternoon_out, CONFIG)

        assert result.total_hours == 0


# =============================================================================
# Amortization
# =============================================================================


class TestAmortizationProperties:
    @given(remaining=money(), installment=money(min_value="0.01"))
    def test_balance_never_negative(self, remaining, installment):
        balance = DeductionBalanceInfo(
            id=uuid4(),
            employee_id=uuid4(),
            deduction_type_id=uuid4(),
            deduction_name="Loan",
            original_amount=remaining,
            remaining_balance=remaining,
            monthly_installment=installment,
            start_date=date(2024, 1, 1),
        )

        result = compute_installment(balance)

        if remaining == 0:
            assert result is None
            return
        assert result.new_balance >= 0
        assert result.amount <= installment
        assert result.amount + result.new_balance == remaining
        assert result.becomes_inactive == (result.new_balance == 0)


# =============================================================================
# Leave
# =============================================================================


class TestLeaveProperties:
    @given(
        days=st.integers(min_value=1, max_value=31),
        percentage=st.integers(min_value=0, max_value=100),
    )
    def test_paid_hours_scale_with_percentage(self, days, percentage):
        policy = LeavePaymentPolicy([
            LeavePolicyDef("custom", percentage > 0, Decimal(percentage)),
        ])
        start = date(2025, 1, 1)
        grant = LeaveGrant(
            id=uuid4(), employee_id=uuid4(), leave_type="custom",
            start_date=start, end_date=start + timedelta(days=days - 1),
        )

        result = compute_paid_leave(
            grants=[grant],
            period_start=date(2025, 1, 1),
            period_end=date(2025, 1, 31),
            policy=policy,
        )

        expected = (Decimal(days) * Decimal("8") * Decimal(percentage) / 100).quantize(Decimal("0.01"))
        assert result.paid_leave_hours == expected
        assert result.paid_leave_hours <= Decimal(days) * Decimal("8")
