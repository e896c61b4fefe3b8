import logging

from fastapi import FastAPI

from shiftplanner.api.routes import employees, establishments, schedules
from shiftplanner.core.config import settings

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Shift Planner API", version="0.1.0")

app.include_router(establishments.router, prefix="/api/v1")
app.include_router(employees.router, prefix="/api/v1")
app.include_router(schedules.router, prefix="/api/v1")


@app.get("/health")
def health_check():
    return {"status": "ok"}
