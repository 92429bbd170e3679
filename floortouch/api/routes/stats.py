"""Stats endpoint."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends

from floortouch.api.schemas.models import StatsSchema, TouchSchema
from floortouch.api.services.engine import TouchEngine
from floortouch.api.services.state import get_engine

router = APIRouter()


@router.get("/stats", response_model=StatsSchema)
def stats(engine: TouchEngine = Depends(get_engine)) -> StatsSchema:
    """Return the latest touch point and pipeline health."""

    cfg = engine.pipeline.config
    summary = engine.latest_summary()
    if summary is None:
        return StatsSchema(
            state=engine.pipeline_state(),
            lower_bound=cfg.lower_bound,
            upper_bound=cfg.upper_bound,
            fps=0.0,
            stream_fps=engine.stream_fps(),
            error=engine.last_error,
        )
    touch = TouchSchema(**asdict(summary.touch)) if summary.touch is not None else None
    return StatsSchema(
        state=engine.pipeline_state(),
        touch=touch,
        region_count=summary.region_count,
        lower_bound=cfg.lower_bound,
        upper_bound=cfg.upper_bound,
        fps=summary.fps,
        stream_fps=engine.stream_fps(),
        error=engine.last_error,
    )
