from typing import Optional
from datetime import date, datetime
from sqlalchemy import Date, DateTime, Enum as SQLEnum, ForeignKey, Integer, JSON, String, func
from sqlalchemy.orm import Mapped, mapped_column

from shiftplanner.db.database import Base
from shiftplanner.services.scheduling.types import PermanentRequestType


class PermanentRequests(Base):
    __tablename__ = "permanent_requests"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    employee_id: Mapped[str] = mapped_column(String(32), ForeignKey("employees.id"), nullable=False, index=True)
    type: Mapped[PermanentRequestType] = mapped_column(SQLEnum(PermanentRequestType, name="permanent_request_type_enum"), nullable=False)
    days: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    value: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    # [[1, 2], [3], ...] weekdays off per cycle week
    cycle_weeks: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    reference_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    exceptions: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
