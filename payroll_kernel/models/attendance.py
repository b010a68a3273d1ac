"""
Attendance punches and leave requests (read-only to the payroll engine).

Both tables are written by the attendance and leave subsystems.  Payroll
reads sessions by (employee, work_date) and leave requests with status
``approved`` that overlap the pay period.
"""

from datetime import date, datetime
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from payroll_kernel.db.base import TrackedBase
from payroll_kernel.domain.dtos import (
    AttendanceSession,
    LeaveGrant,
    LeaveStatus,
    SessionType,
)


class AttendanceSessionModel(TrackedBase):
    """One punch row: a session type plus clock-in and/or clock-out."""

    __tablename__ = "attendance_sessions"

    __table_args__ = (
        Index("idx_attendance_employee_date", "employee_id", "work_date"),
    )

    employee_id: Mapped[UUID] = mapped_column(ForeignKey("employees.id"), nullable=False)
    work_date: Mapped[date] = mapped_column(Date, nullable=False)
    session_type: Mapped[str] = mapped_column(String(20), nullable=False)
    clock_in: Mapped[datetime | None] = mapped_column(nullable=True)
    clock_out: Mapped[datetime | None] = mapped_column(nullable=True)

    def to_dto(self) -> AttendanceSession:
        return AttendanceSession(
            session_type=SessionType(self.session_type),
            clock_in=self.clock_in,
            clock_out=self.clock_out,
        )


class LeaveRequestModel(TrackedBase):
    """Leave request; only approved rows count as leave grants."""

    __tablename__ = "leave_requests"

    __table_args__ = (
        Index("idx_leave_employee_dates", "employee_id", "start_date", "end_date"),
        Index("idx_leave_status", "status"),
    )

    employee_id: Mapped[UUID] = mapped_column(ForeignKey("employees.id"), nullable=False)
    leave_type: Mapped[str] = mapped_column(String(50), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=LeaveStatus.PENDING.value,
    )

    def to_dto(self) -> LeaveGrant:
        return LeaveGrant(
            id=self.id,
            employee_id=self.employee_id,
            leave_type=self.leave_type,
            start_date=self.start_date,
            end_date=self.end_date,
        )
