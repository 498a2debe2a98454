"""CLI entrypoint for cozyevent."""

from __future__ import annotations

import argparse
from collections.abc import Sequence
from importlib import metadata
from pathlib import Path

from .benchmark import SCENARIOS, run_benchmarks
from .config import load_config
from .logging_utils import configure_logging


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cozyevent",
        description="cozyevent - lightweight in-process event bus",
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a config.toml (defaults to ~/.config/cozyevent/config.toml)",
    )
    subparsers = parser.add_subparsers(dest="command")

    bench = subparsers.add_parser("bench", help="Run EventBus micro-benchmarks")
    bench.add_argument(
        "--scenario",
        action="append",
        choices=sorted(SCENARIOS),
        help="Scenario to run; repeat for several (default: all)",
    )
    bench.add_argument("--listeners", type=int, default=None)
    bench.add_argument("--iterations", type=int, default=None)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Handle CLI flags and run the requested command."""

    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    if args.version:
        try:
            version = metadata.version("cozyevent")
        except metadata.PackageNotFoundError:
            version = "0.0.0"
        print(f"cozyevent {version}")
        return 0

    if args.command != "bench":
        parser.print_help()
        return 0

    config = load_config(args.config)
    configure_logging(config["logging"])

    listeners = config["benchmark"]["listeners"]
    if args.listeners is not None:
        listeners = args.listeners
    iterations = config["benchmark"]["iterations"]
    if args.iterations is not None:
        iterations = args.iterations
    if listeners < 1 or iterations < 1:
        parser.error("--listeners and --iterations must be positive")

    scenarios = args.scenario or list(SCENARIOS)
    for result in run_benchmarks(scenarios, listeners, iterations):
        print(result.format())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
