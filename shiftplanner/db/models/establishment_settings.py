from typing import Optional
from datetime import datetime, time
from sqlalchemy import DateTime, JSON, String, Time, func
from sqlalchemy.orm import Mapped, mapped_column

from shiftplanner.db.database import Base


class EstablishmentSettings(Base):
    __tablename__ = "establishment_settings"

    establishment_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    # {"morning_start": "10:00", ...}
    opening_hours: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    # [{"date": "2025-12-25", "kind": "full"}, ...]
    holidays: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    open_sundays: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    # {"sales_register": {"shift_type": "morning", "start_time": "09:30", ...}}
    role_schedules: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    individual_meeting_start_time: Mapped[Optional[time]] = mapped_column(Time, nullable=True)
    early_morning_start: Mapped[time] = mapped_column(Time, nullable=False, default=time(9, 0))
    early_morning_end: Mapped[time] = mapped_column(Time, nullable=False, default=time(14, 0))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
