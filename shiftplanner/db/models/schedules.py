from typing import Optional
from datetime import date, datetime
from sqlalchemy import Date, DateTime, Enum as SQLEnum, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shiftplanner.db.database import Base
from shiftplanner.services.scheduling.types import ApprovalStatus, ModificationStatus, ScheduleStatus


class Schedules(Base):
    __tablename__ = "schedules"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    establishment_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    week_start: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[ScheduleStatus] = mapped_column(SQLEnum(ScheduleStatus, name="schedule_status_enum"), nullable=False)
    approval_status: Mapped[ApprovalStatus] = mapped_column(SQLEnum(ApprovalStatus, name="approval_status_enum"), nullable=False)
    modification_status: Mapped[ModificationStatus] = mapped_column(SQLEnum(ModificationStatus, name="modification_status_enum"), nullable=False)
    supervisor_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    modification_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    shifts: Mapped[list["Shifts"]] = relationship(
        back_populates="schedule",
        cascade="all, delete-orphan",
        order_by="Shifts.position",
    )

    __table_args__ = (
        UniqueConstraint("establishment_id", "week_start", name="uq_schedules_establishment_week"),
    )
