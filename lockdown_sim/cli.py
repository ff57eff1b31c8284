"""Headless runner: build a population, apply lockdowns, step the clock.

Usage:
    python -m lockdown_sim --ticks 60
    python -m lockdown_sim --config configs/base.yaml --lock venue-0 --lock venue-3
    python -m lockdown_sim --lock-all --plot results/outbreak.png
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from lockdown_sim.config import SimulationConfig, load_config
from lockdown_sim.errors import InvalidConfig, NotFound
from lockdown_sim.session import Simulation

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lockdown-sim",
        description="Simulate an outbreak over households and venues "
                    "with per-venue lockdowns.",
        epilog="Example: lockdown-sim --ticks 50 --lock venue-0",
    )
    parser.add_argument(
        "--config", type=str, default=None,
        help="Base config YAML (default: built-in defaults)",
    )
    parser.add_argument(
        "--scenario", type=str, default=None,
        help="Scenario YAML merged over the base config "
             "(or over the built-in defaults)",
    )
    parser.add_argument(
        "--ticks", type=int, default=None,
        help="Number of ticks to run (default: until no agent is sick, "
             "capped by simulation.max_ticks)",
    )
    parser.add_argument(
        "--seed", type=int, default=None,
        help="Override simulation.seed",
    )
    parser.add_argument(
        "--lock", action="append", default=[], metavar="VENUE_ID",
        help="Lock a venue before the first tick (repeatable)",
    )
    parser.add_argument(
        "--lock-all", action="store_true",
        help="Lock every venue before the first tick",
    )
    parser.add_argument(
        "--plot", type=str, default=None,
        help="Save the outbreak chart to this path",
    )
    parser.add_argument(
        "--history", type=str, default=None,
        help="Save the recorded history to this .npz path",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Log every tick",
    )
    return parser


def _load(args: argparse.Namespace) -> SimulationConfig:
    overrides = None
    if args.seed is not None:
        overrides = {'simulation': {'seed': args.seed}}
    return load_config(args.config, args.scenario, overrides)


def _summary(sim: Simulation) -> str:
    c = sim.counts()
    return (f"tick {sim.state.tick:4d} | susceptible {c['susceptible']:5d} "
            f"| sick {c['sick']:5d} | recovered {c['recovered']:5d} "
            f"| dead {c['dead']:5d} | locked {c['locked_venues']}/{c['venues']}")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = _load(args)
        sim = Simulation(config)
        if args.lock_all:
            sim.lock_all()
        for vid in args.lock:
            sim.set_lock(vid, True)
    except (InvalidConfig, NotFound, FileNotFoundError) as e:
        logger.error("%s", e)
        return 2

    print(_summary(sim))
    if args.ticks is not None:
        for _ in range(args.ticks):
            sim.tick()
            print(_summary(sim))
    else:
        sim.run_until_extinct()
        print(_summary(sim))

    print(f"Peak sick: {sim.history.peak_sick()}")

    if args.history:
        path = sim.history.save(args.history)
        print(f"History saved to {path}")
    if args.plot:
        from lockdown_sim.viz import plot_history
        Path(args.plot).parent.mkdir(parents=True, exist_ok=True)
        plot_history(sim.history, save_path=args.plot)
        print(f"Chart saved to {args.plot}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
