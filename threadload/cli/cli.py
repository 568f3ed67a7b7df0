#!/usr/bin/env python3
"""
Shared helpers for command-line interfaces of the thread load monitor.
"""
import argparse
from typing import List, Optional


def build_env_parser(description: Optional[str] = None) -> argparse.ArgumentParser:
    """
    Create an ArgumentParser with the common --env option.

    Args:
        description: Optional parser description shown in CLI help.

    Returns:
        argparse.ArgumentParser: parser preconfigured with the --env argument.
    """
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument(
        "--env",
        type=str,
        default=None,
        help=(
            "Environment name for configuration override (e.g., 'dev', 'prod'). "
            "Loads config_<env>.yaml in addition to the base config.yaml."
        ),
    )
    return parser


def build_monitor_parser() -> argparse.ArgumentParser:
    parser = build_env_parser("Sample per-thread user/system CPU load of a running process")
    parser.add_argument("--pid", type=int, required=True,
                        help="Process ID whose threads are monitored")
    parser.add_argument("--interval", type=float, default=None,
                        help="Sampling interval in seconds (overrides config)")
    parser.add_argument("--duration", type=float, default=None,
                        help="Seconds to monitor (overrides config; default: until the process exits)")
    parser.add_argument("--config-dir", type=str, default=None,
                        help="Directory holding config.yaml (default: bundled config_yaml)")
    parser.add_argument("--out", type=str, default="",
                        help="Output directory for summary.json and snapshots.csv (overrides config)")
    return parser


def parse_monitor_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    args = build_monitor_parser().parse_args(argv)
    if args.interval is not None and args.interval <= 0:
        build_monitor_parser().error(f"--interval must be > 0, got {args.interval}")
    if args.duration is not None and args.duration <= 0:
        build_monitor_parser().error(f"--duration must be > 0, got {args.duration}")
    return args
