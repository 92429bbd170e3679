"""In-memory snapshots of the latest frame buffers.

`raw` is the sensor's colour image, `depth` the depth frame converted to
intensity, `output` the visualization frame. Images are encoded on request and
never written to disk.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from floortouch.api.services.engine import SNAPSHOT_KINDS, TouchEngine
from floortouch.api.services.state import get_engine

router = APIRouter(prefix="/snapshot", tags=["snapshot"])


@router.get("/{kind}.png")
def snapshot(kind: str, engine: TouchEngine = Depends(get_engine)) -> Response:
    if kind not in SNAPSHOT_KINDS:
        raise HTTPException(status_code=404, detail="Unknown snapshot kind")
    data = engine.snapshot_png(kind)
    if data is None:
        raise HTTPException(status_code=404, detail="No frame available yet")
    return Response(
        content=data,
        media_type="image/png",
        headers={"Cache-Control": "no-store"},
    )
