from typing import List

from fastapi import APIRouter, Depends, status

from shiftplanner.api.deps import get_repository, get_schedule_service, http_error
from shiftplanner.schemas.schedules import (
    ApprovalDecision,
    ModificationDecision,
    ModificationRequest,
    PublishRequest,
    ScheduleCreate,
    ScheduleResponse,
    ScheduleResultResponse,
    ShiftUpdate,
)
from shiftplanner.services.scheduling.errors import SchedulingError
from shiftplanner.services.scheduling.repository import ScheduleRepository
from shiftplanner.services.scheduling.service import ScheduleService
from shiftplanner.services.scheduling.types import ValidationMode

router = APIRouter(prefix="/schedules", tags=["schedules"])


@router.post("", response_model=ScheduleResultResponse, status_code=status.HTTP_201_CREATED)
def create_schedule(
    payload: ScheduleCreate,
    service: ScheduleService = Depends(get_schedule_service),
):
    """Generate the schedule for a store week, returning soft warnings alongside it"""
    try:
        result = service.create_schedule(
            payload.establishment_id,
            payload.week_start,
            force=payload.force,
            seed=payload.seed,
        )
    except (SchedulingError, ValueError) as exc:
        raise http_error(exc)
    return ScheduleResultResponse.model_validate(result)


@router.get("", response_model=List[ScheduleResponse])
def list_schedules(
    establishment_id: str,
    repository: ScheduleRepository = Depends(get_repository),
):
    return [ScheduleResponse.model_validate(s) for s in repository.list_schedules(establishment_id)]


@router.get("/{schedule_id}", response_model=ScheduleResponse)
def get_schedule(
    schedule_id: str,
    service: ScheduleService = Depends(get_schedule_service),
):
    try:
        schedule = service.get_schedule(schedule_id)
    except SchedulingError as exc:
        raise http_error(exc)
    return ScheduleResponse.model_validate(schedule)


@router.get("/{schedule_id}/validation", response_model=ScheduleResultResponse)
def validate_schedule(
    schedule_id: str,
    mode: ValidationMode = ValidationMode.SOFT,
    service: ScheduleService = Depends(get_schedule_service),
):
    try:
        result = service.validate_schedule(schedule_id, mode)
    except SchedulingError as exc:
        raise http_error(exc)
    return ScheduleResultResponse.model_validate(result)


@router.patch("/{schedule_id}/shifts/{shift_id}", response_model=ScheduleResultResponse)
def update_shift(
    schedule_id: str,
    shift_id: str,
    payload: ShiftUpdate,
    service: ScheduleService = Depends(get_schedule_service),
):
    """Edit one shift; locked schedules are rejected"""
    try:
        result = service.update_shift(schedule_id, shift_id, payload.model_dump(exclude_unset=True))
    except (SchedulingError, ValueError) as exc:
        raise http_error(exc)
    return ScheduleResultResponse.model_validate(result)


@router.post("/{schedule_id}/publish", response_model=ScheduleResultResponse)
def publish_schedule(
    schedule_id: str,
    payload: PublishRequest,
    service: ScheduleService = Depends(get_schedule_service),
):
    """Publish for review. Outstanding warnings need acknowledge_warnings=true"""
    try:
        result = service.publish_schedule(schedule_id, acknowledge_warnings=payload.acknowledge_warnings)
    except SchedulingError as exc:
        raise http_error(exc)
    return ScheduleResultResponse.model_validate(result)


@router.post("/{schedule_id}/approval", response_model=ScheduleResponse)
def decide_approval(
    schedule_id: str,
    payload: ApprovalDecision,
    service: ScheduleService = Depends(get_schedule_service),
):
    try:
        schedule = service.decide_approval(schedule_id, payload.approved, payload.notes)
    except SchedulingError as exc:
        raise http_error(exc)
    return ScheduleResponse.model_validate(schedule)


@router.post("/{schedule_id}/modification-request", response_model=ScheduleResponse)
def request_modification(
    schedule_id: str,
    payload: ModificationRequest,
    service: ScheduleService = Depends(get_schedule_service),
):
    try:
        schedule = service.request_modification(schedule_id, payload.reason)
    except SchedulingError as exc:
        raise http_error(exc)
    return ScheduleResponse.model_validate(schedule)


@router.post("/{schedule_id}/modification-decision", response_model=ScheduleResponse)
def decide_modification(
    schedule_id: str,
    payload: ModificationDecision,
    service: ScheduleService = Depends(get_schedule_service),
):
    try:
        schedule = service.decide_modification(schedule_id, payload.approved, payload.notes)
    except SchedulingError as exc:
        raise http_error(exc)
    return ScheduleResponse.model_validate(schedule)
