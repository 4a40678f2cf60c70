#!/usr/bin/env python3
"""
Replay CLI - run a recorded observation trace through the motion-state clusterer.

Usage:
    python scripts/replay.py run trace.yaml
    python scripts/replay.py run trace.yaml --config replay.yaml --log-dir ./logs
    python scripts/replay.py run trace.yaml --count-window 20 --delta 0.4 --epsilon 30
    python scripts/replay.py config
"""

import argparse
import sys
from pathlib import Path

import yaml

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from motionstate.config import (
    ClustererConfig,
    ConfigurationError,
    ReplayConfig,
    DEFAULT_CLUSTERER_CONFIG,
    load_replay_config,
)
from motionstate.core.window_store import TimestampOrderError
from motionstate.runner import ReplayRunner, load_trace


def build_config(args) -> ReplayConfig:
    """Config file (if any) overridden by command-line flags."""
    if args.config:
        base = load_replay_config(Path(args.config))
    else:
        base = ReplayConfig(clusterer=ClustererConfig.from_dict(DEFAULT_CLUSTERER_CONFIG))

    clusterer = base.clusterer.to_dict()
    if args.time_window is not None:
        clusterer['time_based_window'] = True
        clusterer['window_length'] = args.time_window
    if args.count_window is not None:
        clusterer['time_based_window'] = False
        clusterer['window_length'] = args.count_window
        if args.capacity is None:
            clusterer['capacity'] = args.count_window
    if args.capacity is not None:
        clusterer['capacity'] = args.capacity
    if args.delta is not None:
        clusterer['delta'] = args.delta

    return ReplayConfig(
        clusterer=ClustererConfig.from_dict(clusterer),
        observation_kind=args.kind or base.observation_kind,
        epsilon=args.epsilon if args.epsilon is not None else base.epsilon,
        place_epsilon=base.place_epsilon if args.epsilon is None else None,
        log_dir=Path(args.log_dir) if args.log_dir else base.log_dir,
        verbose=args.verbose,
    )


def cmd_run(args):
    """Replay a trace."""
    try:
        config = build_config(args)
    except ConfigurationError as e:
        print(f"Invalid configuration: {e}")
        return 1

    records = load_trace(Path(args.trace))
    print(f"Loaded {len(records)} observation(s) from {args.trace}")

    with ReplayRunner(config) as runner:
        try:
            summary = runner.run(records)
        except TimestampOrderError as e:
            print(f"Trace out of order: {e}")
            return 1

    print()
    print(f"Updates: {summary.updates}")
    print(f"Transitions: {len(summary.transitions)}")
    for t in summary.transitions:
        print(f"  t={t['t']:g} -> {t['state']}")
    print(f"Final state: {'moving' if summary.final_moving else 'stationary'} "
          f"(pool size {summary.final_pool_size})")
    print()
    print(summary.cluster_status)

    if args.summary:
        with open(args.summary, 'w') as f:
            yaml.safe_dump(summary.to_dict(), f, default_flow_style=False)
        print(f"\nSummary written to {args.summary}")

    if config.log_dir:
        print(f"Event log: {config.log_dir / 'clusterer.jsonl'}")

    return 0


def cmd_config(args):
    """Print the default replay config as YAML."""
    defaults = ReplayConfig(clusterer=ClustererConfig.from_dict(DEFAULT_CLUSTERER_CONFIG))
    print(yaml.safe_dump(defaults.to_dict(), default_flow_style=False), end="")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Replay recorded observations through the motion-state clusterer"
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # run
    p_run = subparsers.add_parser("run", help="Replay a trace")
    p_run.add_argument("trace", help="YAML trace file")
    p_run.add_argument("--config", help="YAML replay config")
    p_run.add_argument("--kind", choices=["geo", "vector"], help="Observation kind")
    p_run.add_argument("--epsilon", type=float, help="Neighbour distance threshold")
    window = p_run.add_mutually_exclusive_group()
    window.add_argument("--time-window", type=int, help="Time-based window (seconds)")
    window.add_argument("--count-window", type=int, help="Count-based window (observations)")
    p_run.add_argument("--capacity", type=int, help="Distance matrix slots")
    p_run.add_argument("--delta", type=float, help="Minimum neighbour fraction")
    p_run.add_argument("--log-dir", help="Directory for the JSONL event log")
    p_run.add_argument("--summary", help="Write summary YAML here")
    p_run.add_argument("--verbose", action="store_true", default=True)
    p_run.add_argument("--quiet", dest="verbose", action="store_false")

    # config
    subparsers.add_parser("config", help="Show default config")

    return parser


def main():
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    # Dispatch
    commands = {
        "run": cmd_run,
        "config": cmd_config,
    }
    return commands[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
