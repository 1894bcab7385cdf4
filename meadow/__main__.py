"""Entry point for ``python -m meadow``.

Loads the default YAML config, builds a park and a butterfly, runs the
learning and running phases (in a Pygame window unless headless) and
prints the result.
"""

from __future__ import annotations

import argparse
import logging
import pathlib
import sys

from meadow.simulation.config import SimulationConfig
from meadow.simulation.engine import SimulationEngine
from meadow.simulation.observer import HeadlessObserver, Observer
from meadow.simulation.stats import format_summary
from meadow.ui.pygame_client import PygameObserver

_DEFAULT_CONFIG = (
    pathlib.Path(__file__).resolve().parent.parent / "config" / "default.yaml"
)

logger = logging.getLogger(__name__)


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="meadow",
        description="Meadow - butterfly park simulator",
    )
    parser.add_argument(
        "agent",
        nargs="?",
        default=None,
        help="Registered butterfly to run (default: from config)",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=pathlib.Path,
        default=_DEFAULT_CONFIG,
        help="Path to YAML config file (default: config/default.yaml)",
    )
    parser.add_argument("-s", "--seed", type=int, default=None, help="RNG seed")
    parser.add_argument(
        "-f",
        "--map-file",
        type=pathlib.Path,
        default=None,
        help="Park description to load instead of generating one",
    )
    parser.add_argument(
        "--headless",
        action="store_true",
        help="Run without opening a window",
    )
    parser.add_argument(
        "-i",
        "--infinite-energy",
        action="store_true",
        help="Keep the butterfly at full power",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Log everything",
    )
    verbosity.add_argument(
        "-w",
        "--warnings",
        action="store_true",
        help="Log warnings and errors only",
    )
    parser.add_argument(
        "--cell-size",
        type=int,
        default=8,
        help="Pixel size per tile (default: 8)",
    )
    parser.add_argument(
        "--fps",
        type=float,
        default=30.0,
        help="Moves drawn per second (default: 30)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Parse CLI args, run one simulation, print the summary."""
    args = _parser().parse_args(argv)

    level = logging.INFO
    if args.debug:
        level = logging.DEBUG
    elif args.warnings:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    config = SimulationConfig.from_yaml(args.config)
    if args.seed is not None:
        config.seed = args.seed
    if args.map_file is not None:
        config.map_file = str(args.map_file)
    if args.agent is not None:
        config.agent = args.agent
    if args.infinite_energy:
        config.infinite_energy = True
    if args.headless:
        config.headless = True

    observer: Observer
    if config.headless:
        observer = HeadlessObserver()
    else:
        observer = PygameObserver(cell_size=args.cell_size, moves_per_second=args.fps)

    try:
        engine = SimulationEngine(config=config, observer=observer)
    except KeyError as exc:
        logger.error("%s", exc.args[0] if exc.args else exc)
        return 2
    summary = engine.simulate()

    print("WIN" if summary.won else "LOSE")
    print(format_summary(summary))
    return 0 if summary.won else 1


if __name__ == "__main__":
    sys.exit(main())
