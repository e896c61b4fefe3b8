from fastapi import APIRouter, Depends

from shiftplanner.api.deps import get_schedule_service
from shiftplanner.schemas.store_settings import StoreSettingsSchema
from shiftplanner.services.scheduling.service import ScheduleService

router = APIRouter(prefix="/establishments", tags=["establishments"])


@router.get("/{establishment_id}/settings", response_model=StoreSettingsSchema, response_model_by_alias=True)
def get_settings(
    establishment_id: str,
    service: ScheduleService = Depends(get_schedule_service),
):
    return StoreSettingsSchema.from_settings(service.get_settings(establishment_id))


@router.put("/{establishment_id}/settings", response_model=StoreSettingsSchema, response_model_by_alias=True)
def update_settings(
    establishment_id: str,
    payload: StoreSettingsSchema,
    service: ScheduleService = Depends(get_schedule_service),
):
    """Replace store settings; the path id wins over the body"""
    settings = payload.model_copy(update={"establishment_id": establishment_id}).to_settings()
    return StoreSettingsSchema.from_settings(service.save_settings(settings))
