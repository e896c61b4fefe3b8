import logging
from typing import Generator

from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from shiftplanner.db.database import SessionLocal
from shiftplanner.services.scheduling.data_loader import SqlAlchemyRepository
from shiftplanner.services.scheduling.errors import (
    AlreadyExistsError,
    EmployeeNotFoundError,
    OverlappingRangeError,
    PublishBlockedError,
    ScheduleLockedError,
    ScheduleNotFoundError,
    ShiftNotFoundError,
)
from shiftplanner.services.scheduling.repository import ScheduleRepository
from shiftplanner.services.scheduling.service import ScheduleService


logger = logging.getLogger(__name__)

ERROR_STATUS = (
    ((ScheduleNotFoundError, ShiftNotFoundError, EmployeeNotFoundError), status.HTTP_404_NOT_FOUND),
    ((AlreadyExistsError, OverlappingRangeError, PublishBlockedError), status.HTTP_409_CONFLICT),
    ((ScheduleLockedError,), status.HTTP_423_LOCKED),
)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_repository(db: Session = Depends(get_db)) -> ScheduleRepository:
    return SqlAlchemyRepository(db)


def get_schedule_service(
    repository: ScheduleRepository = Depends(get_repository),
) -> ScheduleService:
    return ScheduleService(repository)


def http_error(exc: Exception) -> HTTPException:
    """Map an engine error (or a bad week start) to an HTTP error."""
    status_code = status.HTTP_400_BAD_REQUEST
    for error_types, code in ERROR_STATUS:
        if isinstance(exc, error_types):
            status_code = code
            break

    if isinstance(exc, PublishBlockedError):
        detail = {"message": str(exc), "warnings": exc.warnings}
    else:
        detail = str(exc)

    logger.warning(f"{type(exc).__name__}: {exc}")
    return HTTPException(status_code=status_code, detail=detail)
