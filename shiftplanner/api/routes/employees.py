from typing import List

from fastapi import APIRouter, Depends, status

from shiftplanner.api.deps import get_repository, get_schedule_service, http_error
from shiftplanner.schemas.employees import (
    EmployeeCreate,
    EmployeeResponse,
    PermanentRequestCreate,
    PermanentRequestResponse,
    TemporaryHoursSchema,
    TimeOffRequestResponse,
    VacationCreate,
)
from shiftplanner.services.scheduling.errors import SchedulingError
from shiftplanner.services.scheduling.repository import ScheduleRepository
from shiftplanner.services.scheduling.service import ScheduleService
from shiftplanner.services.scheduling.types import Employee, HistoryEntry, new_id

router = APIRouter(prefix="/employees", tags=["employees"])


@router.post("", response_model=EmployeeResponse, status_code=status.HTTP_201_CREATED)
def create_employee(
    payload: EmployeeCreate,
    service: ScheduleService = Depends(get_schedule_service),
):
    data = payload.model_dump(exclude={"history"})
    employee = Employee(
        id=new_id(),
        history=[HistoryEntry(date=h.date, event=h.event, reason=h.reason) for h in payload.history],
        **data,
    )
    try:
        employee = service.create_employee(employee)
    except ValueError as exc:
        raise http_error(exc)
    return EmployeeResponse.model_validate(employee)


@router.get("", response_model=List[EmployeeResponse])
def list_employees(
    establishment_id: str,
    repository: ScheduleRepository = Depends(get_repository),
):
    employees = sorted(repository.get_employees(establishment_id), key=lambda e: e.name)
    return [EmployeeResponse.model_validate(e) for e in employees]


@router.get("/{employee_id}", response_model=EmployeeResponse)
def get_employee(
    employee_id: str,
    service: ScheduleService = Depends(get_schedule_service),
):
    try:
        employee = service.get_employee(employee_id)
    except SchedulingError as exc:
        raise http_error(exc)
    return EmployeeResponse.model_validate(employee)


@router.post("/{employee_id}/temp-hours", response_model=EmployeeResponse, status_code=status.HTTP_201_CREATED)
def add_temporary_hours(
    employee_id: str,
    payload: TemporaryHoursSchema,
    service: ScheduleService = Depends(get_schedule_service),
):
    """Override contract hours for a date range"""
    try:
        employee = service.add_temporary_hours(employee_id, payload.start, payload.end, payload.hours)
    except (SchedulingError, ValueError) as exc:
        raise http_error(exc)
    return EmployeeResponse.model_validate(employee)


@router.post("/{employee_id}/vacations", response_model=TimeOffRequestResponse, status_code=status.HTTP_201_CREATED)
def add_vacation(
    employee_id: str,
    payload: VacationCreate,
    service: ScheduleService = Depends(get_schedule_service),
):
    try:
        request = service.add_vacation(employee_id, payload.start_date, payload.end_date)
    except SchedulingError as exc:
        raise http_error(exc)
    return TimeOffRequestResponse.model_validate(request)


@router.get("/{employee_id}/time-off-requests", response_model=List[TimeOffRequestResponse])
def list_time_off_requests(
    employee_id: str,
    service: ScheduleService = Depends(get_schedule_service),
):
    try:
        employee = service.get_employee(employee_id)
    except SchedulingError as exc:
        raise http_error(exc)
    requests = service.repository.get_time_off_requests(employee.establishment_id)
    return [TimeOffRequestResponse.model_validate(r) for r in requests if r.employee_id == employee_id]


@router.post(
    "/{employee_id}/permanent-requests",
    response_model=PermanentRequestResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_permanent_request(
    employee_id: str,
    payload: PermanentRequestCreate,
    service: ScheduleService = Depends(get_schedule_service),
):
    try:
        request = service.add_permanent_request(payload.to_request(employee_id))
    except SchedulingError as exc:
        raise http_error(exc)
    return PermanentRequestResponse.model_validate(request)


@router.get("/{employee_id}/permanent-requests", response_model=List[PermanentRequestResponse])
def list_permanent_requests(
    employee_id: str,
    service: ScheduleService = Depends(get_schedule_service),
):
    try:
        employee = service.get_employee(employee_id)
    except SchedulingError as exc:
        raise http_error(exc)
    requests = service.repository.get_permanent_requests(employee.establishment_id)
    return [PermanentRequestResponse.model_validate(r) for r in requests if r.employee_id == employee_id]
