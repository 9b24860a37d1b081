from __future__ import annotations

import argparse
import logging
from pathlib import Path

from floppy.app import run
from floppy.config import DEFAULT_DIFFICULTY, DEFAULT_VOLUME, DIFFICULTIES, GameConfig


def volume_arg(text):
    v = float(text)
    if not 0.0 <= v <= 1.0:
        raise argparse.ArgumentTypeError("volume must be between 0 and 1")
    return v


def build_parser():
    parser = argparse.ArgumentParser(prog="floppy", description="Flap through the gaps.")
    parser.add_argument(
        "--difficulty",
        choices=sorted(DIFFICULTIES),
        default=DEFAULT_DIFFICULTY,
        help=f"Gap size, pipe speed and spawn rate preset (default: {DEFAULT_DIFFICULTY}).",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed the pipe placement for a repeatable run.")
    parser.add_argument(
        "--state-dir",
        type=Path,
        default=None,
        help="Where best score and leaderboard are kept (default: $FLOPPY_STATE_DIR or ~/.floppy).",
    )
    parser.add_argument("--volume", type=volume_arg, default=DEFAULT_VOLUME, help="Master volume, 0..1.")
    parser.add_argument("--mute", action="store_true", help="Start with sound off.")
    parser.add_argument(
        "--smoke",
        type=int,
        default=0,
        metavar="FRAMES",
        help="Run this many frames and exit (for quick verification).",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config = GameConfig(
        difficulty=args.difficulty,
        seed=args.seed,
        state_dir=args.state_dir,
        volume=args.volume,
        muted=args.mute,
        smoke_frames=args.smoke,
    )
    return run(config)


if __name__ == "__main__":
    raise SystemExit(main())
