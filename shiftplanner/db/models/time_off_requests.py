from typing import Optional
from datetime import date, datetime
from sqlalchemy import Date, DateTime, Enum as SQLEnum, ForeignKey, JSON, String, func
from sqlalchemy.orm import Mapped, mapped_column

from shiftplanner.db.database import Base
from shiftplanner.services.scheduling.types import TimeOffType


class TimeOffRequests(Base):
    __tablename__ = "time_off_requests"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    employee_id: Mapped[str] = mapped_column(String(32), ForeignKey("employees.id"), nullable=False, index=True)
    type: Mapped[TimeOffType] = mapped_column(SQLEnum(TimeOffType, name="time_off_type_enum"), nullable=False)
    dates: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
