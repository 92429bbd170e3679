from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict

from floortouch.core.analytics.pipeline import PipelineConfig, TouchPipeline
from floortouch.core.errors import SourceUnavailableError
from floortouch.core.video_sources.base import SyntheticSource

logger = logging.getLogger(__name__)


def run(args, out=None) -> int:
    """Run the pipeline over synthetic frames, writing one JSON line per frame.

    Returns the number of frames that produced a touch point.
    """

    out = out or sys.stdout
    source = SyntheticSource(
        width=args.width,
        height=args.height,
        floor_depth=args.floor_depth,
        foot_height=args.foot_height,
        foot_radius=args.foot_radius,
        noise=args.noise,
        max_frames=args.frames,
        seed=args.seed,
    )
    pipeline = TouchPipeline(
        PipelineConfig(
            lower_bound=args.lower,
            upper_bound=args.upper,
            min_points=args.min_points,
        )
    )
    touches = 0
    try:
        while True:
            try:
                pair = source.read()
            except SourceUnavailableError:
                break
            if pair is None:
                continue
            depth, _color = pair
            summary, _ = pipeline.process_frame(depth)
            if summary.touch is not None:
                touches += 1
            out.write(json.dumps(asdict(summary)) + "\n")
    finally:
        source.close()
    logger.info("Processed %d frames, %d with a touch point", pipeline.frame_id, touches)
    return touches


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run the touch pipeline on synthetic depth frames")
    parser.add_argument("--frames", type=int, default=30, help="Number of frames to generate")
    parser.add_argument("--width", type=int, default=640)
    parser.add_argument("--height", type=int, default=480)
    parser.add_argument("--floor-depth", type=int, default=1200, help="Floor distance (raw depth units)")
    parser.add_argument("--foot-height", type=int, default=60, help="Foot elevation above the floor")
    parser.add_argument("--foot-radius", type=int, default=40)
    parser.add_argument("--noise", type=float, default=0.0, help="Depth noise standard deviation")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--lower", type=int, default=10)
    parser.add_argument("--upper", type=int, default=50)
    parser.add_argument("--min-points", type=int, default=100)
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    run(args)


if __name__ == "__main__":
    main()
