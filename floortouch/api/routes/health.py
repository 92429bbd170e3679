"""Liveness endpoint."""

from fastapi import APIRouter

from floortouch.api.schemas.models import HealthSchema
from floortouch.api.services.state import peek_engine

router = APIRouter()


@router.get("/health", response_model=HealthSchema)
def health() -> HealthSchema:
    """Report liveness and engine status without opening the depth source."""

    engine = peek_engine()
    if engine is None:
        return HealthSchema(status="ok", engine="idle")
    return HealthSchema(
        status="degraded" if engine.last_error else "ok",
        engine="running" if engine.running else "stopped",
        state=engine.pipeline_state(),
    )
