"""FastAPI application and the `floortouch-api` entrypoint."""

from __future__ import annotations

import argparse
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from floortouch.api.routes import config, control, health, snapshot, stats, stream
from floortouch.api.services.state import get_settings, stop_engine

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    # The engine starts lazily on the first request that needs frames.
    settings = get_settings()
    logger.info(
        "FloorTouch API ready (source=%s, band=(%d, %d])",
        settings.source,
        settings.lower_bound,
        settings.upper_bound,
    )
    yield
    stop_engine()


app = FastAPI(title="FloorTouch API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

for module in (health, stats, config, control, snapshot, stream):
    app.include_router(module.router)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Serve floor-touch detection over HTTP/WebSocket")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--log-level", default="info", choices=["debug", "info", "warning", "error"])
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level)


if __name__ == "__main__":
    main()
