from typing import Optional
from sqlalchemy import Boolean, Date, DateTime, Float, Integer, JSON, String, func, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
from datetime import date, datetime

from shiftplanner.db.database import Base
from shiftplanner.services.scheduling.types import EmployeeCategory


class Employees(Base):
    __tablename__ = "employees"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, index=True)
    establishment_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    initials: Mapped[Optional[str]] = mapped_column(String(8), nullable=True)
    category: Mapped[EmployeeCategory] = mapped_column(SQLEnum(EmployeeCategory, name="employee_category_enum"), nullable=False)
    weekly_hours: Mapped[int] = mapped_column(Integer, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    seniority_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    birth_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    hours_debt: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    # [{"id": ..., "start": "2025-01-20", "end": "2025-02-02", "hours": 32}]
    temp_hours: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    # [{"date": "2024-03-01", "event": "hired", "reason": null}]
    history: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
