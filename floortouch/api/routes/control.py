"""Control endpoints for the running pipeline.

These act on the live engine without restarting it: `recalibrate` drops the
floor baseline, `reset` swaps the noise band. Neither is persisted.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from floortouch.api.schemas.models import BandSchema, ControlSchema
from floortouch.api.services.engine import TouchEngine
from floortouch.api.services.state import get_engine

router = APIRouter(prefix="/control", tags=["control"])


def _control_state(engine: TouchEngine) -> ControlSchema:
    cfg = engine.pipeline.config
    return ControlSchema(
        state=engine.pipeline_state(),
        lower_bound=cfg.lower_bound,
        upper_bound=cfg.upper_bound,
    )


@router.post("/recalibrate", response_model=ControlSchema)
def recalibrate(engine: TouchEngine = Depends(get_engine)) -> ControlSchema:
    """Clear the floor baseline; the next frame is captured as the new floor."""

    engine.recalibrate()
    return _control_state(engine)


@router.post("/reset", response_model=ControlSchema)
def reset(band: BandSchema, engine: TouchEngine = Depends(get_engine)) -> ControlSchema:
    """Reconfigure the noise band of the running pipeline."""

    engine.reset(band.lower, band.upper)
    return _control_state(engine)
