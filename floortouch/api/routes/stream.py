"""Live outputs: MJPEG of the visualization and per-frame metadata over WebSocket."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncIterator
from dataclasses import asdict

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from fastapi.responses import StreamingResponse

from floortouch.api.schemas.models import FrameSchema
from floortouch.api.services.engine import TouchEngine
from floortouch.api.services.state import get_engine
from floortouch.core.types import FrameSummary

router = APIRouter(prefix="/stream", tags=["stream"])

logger = logging.getLogger(__name__)

POLL_INTERVAL_S = 0.02
MJPEG_BOUNDARY = "frame"
_NO_CACHE = {
    "Cache-Control": "no-store, no-cache, must-revalidate, max-age=0",
    "Pragma": "no-cache",
    # Disables response buffering in nginx.
    "X-Accel-Buffering": "no",
}


async def follow_frames() -> AsyncIterator[tuple[TouchEngine, bytes | None, FrameSummary]]:
    """Yield `(engine, jpeg, summary)` once per newly published frame.

    The engine is looked up on every poll, so a settings change that replaces
    it is followed; frame ids restart from 1 with the new engine.
    """

    cursor: tuple[TouchEngine, int] | None = None
    while True:
        engine: TouchEngine = await asyncio.to_thread(get_engine)
        jpeg, summary = engine.latest_stream_packet()
        if summary is not None and cursor != (engine, summary.frame_id):
            cursor = (engine, summary.frame_id)
            yield engine, jpeg, summary
        await asyncio.sleep(POLL_INTERVAL_S)


def mjpeg_part(jpeg: bytes, frame_id: int) -> bytes:
    head = (
        f"--{MJPEG_BOUNDARY}\r\n"
        "Content-Type: image/jpeg\r\n"
        f"X-Frame-Id: {frame_id}\r\n"
        f"Content-Length: {len(jpeg)}\r\n\r\n"
    )
    return head.encode("ascii") + jpeg + b"\r\n"


@router.get("/video")
async def stream_video() -> StreamingResponse:
    async def parts() -> AsyncIterator[bytes]:
        async for _engine, jpeg, summary in follow_frames():
            if jpeg is not None:
                yield mjpeg_part(jpeg, summary.frame_id)

    return StreamingResponse(
        parts(),
        media_type=f"multipart/x-mixed-replace; boundary={MJPEG_BOUNDARY}",
        headers=_NO_CACHE,
    )


def _is_closed_send_error(exc: BaseException) -> bool:
    # Uvicorn's wording for a send after the socket closed.
    msg = str(exc)
    return isinstance(exc, RuntimeError) and (
        "Unexpected ASGI message 'websocket.send'" in msg or "response already completed" in msg
    )


async def _push_summaries(ws: WebSocket) -> None:
    async for engine, _jpeg, summary in follow_frames():
        payload = FrameSchema(**asdict(summary), stream_fps=engine.stream_fps())
        try:
            await ws.send_json(payload.model_dump(mode="json"))
        except WebSocketDisconnect:
            return
        except RuntimeError as exc:
            if _is_closed_send_error(exc):
                return
            raise


async def _answer_pings(ws: WebSocket) -> None:
    """Read client messages until disconnect, answering `{"type": "ping"}`."""

    while True:
        try:
            msg = await ws.receive_json()
        except WebSocketDisconnect:
            return
        except ValueError:
            continue
        if not isinstance(msg, dict) or msg.get("type") != "ping":
            continue
        try:
            await ws.send_json({"type": "pong", "t": msg.get("t"), "server_time": time.time()})
        except RuntimeError as exc:
            if _is_closed_send_error(exc):
                return
            raise


@router.websocket("/metadata")
async def stream_metadata(ws: WebSocket) -> None:
    await ws.accept()
    pusher = asyncio.create_task(_push_summaries(ws))
    reader = asyncio.create_task(_answer_pings(ws))
    done, pending = await asyncio.wait({pusher, reader}, return_when=asyncio.FIRST_COMPLETED)
    for task in pending:
        task.cancel()
    await asyncio.gather(*pending, return_exceptions=True)

    failures = [t.exception() for t in done if not t.cancelled() and t.exception() is not None]
    if failures:
        logger.error("Metadata websocket failed", exc_info=failures[0])
        try:
            await ws.close(code=1011)
        except RuntimeError:
            logger.debug("Websocket already closed")
