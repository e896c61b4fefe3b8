from typing import Optional
from datetime import date, time
from sqlalchemy import Boolean, Date, Enum as SQLEnum, ForeignKey, Index, Integer, String, Time, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shiftplanner.db.database import Base
from shiftplanner.services.scheduling.types import ShiftType, WorkRole


class Shifts(Base):
    __tablename__ = "shifts"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    schedule_id: Mapped[str] = mapped_column(String(32), ForeignKey("schedules.id", ondelete="CASCADE"), nullable=False)
    employee_id: Mapped[str] = mapped_column(String(32), ForeignKey("employees.id"), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    date: Mapped[date] = mapped_column(Date, nullable=False)
    type: Mapped[ShiftType] = mapped_column(SQLEnum(ShiftType, name="shift_type_enum"), nullable=False)
    start_time: Mapped[Optional[time]] = mapped_column(Time, nullable=True)
    end_time: Mapped[Optional[time]] = mapped_column(Time, nullable=True)
    morning_end_time: Mapped[Optional[time]] = mapped_column(Time, nullable=True)
    afternoon_start_time: Mapped[Optional[time]] = mapped_column(Time, nullable=True)
    role: Mapped[Optional[WorkRole]] = mapped_column(SQLEnum(WorkRole, name="work_role_enum"), nullable=True)
    is_opening: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_closing: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_individual_meeting: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    schedule: Mapped["Schedules"] = relationship(back_populates="shifts")

    __table_args__ = (
        UniqueConstraint("schedule_id", "employee_id", "date", name="uq_shifts_schedule_employee_date"),
        Index("ix_shifts_employee_date", "employee_id", "date"),
    )
