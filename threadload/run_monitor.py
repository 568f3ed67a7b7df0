#!/usr/bin/env python3
"""
Thread load monitor entry point.

Samples the user/system CPU load of every thread of a process, prints a
per-thread table and exports the results.
"""
import json
from pathlib import Path
from typing import List, Optional

from tabulate import tabulate

from threadload.cli.cli import parse_monitor_args
from threadload.config.config_loader import ConfigLoader, DEFAULT_CONFIG_PATH
from threadload.service.monitor.thread_cpu_monitor import monitor_process
from threadload.service.monitor.thread_monitor_result import ThreadMonitorResult
from threadload.service.sampler.cpu_load_sampler import CpuLoadSampler
from threadload.util.log_config import setup_logger, set_package_level

SUMMARY_HEADERS = ["thread", "samples", "user avg %", "user peak %", "system avg %", "system peak %"]

logger = setup_logger(__name__)


def export_result(result: ThreadMonitorResult, out_dir: Path) -> None:
    out_dir.mkdir(parents=True, exist_ok=True)

    summary_path = out_dir / "summary.json"
    with open(summary_path, 'w') as f:
        json.dump(result.to_dict(), f, indent=2)
    logger.info(f"✓ Summary exported to: {summary_path.resolve()}")

    snapshots_path = out_dir / "snapshots.csv"
    result.to_dataframe().to_csv(snapshots_path, index=False)
    logger.info(f"✓ Snapshots exported to: {snapshots_path.resolve()}")


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_monitor_args(argv)

    config_path = Path(args.config_dir) if args.config_dir else DEFAULT_CONFIG_PATH
    config = ConfigLoader(config_path, env=args.env).config_data
    set_package_level(config.log_level)

    interval = args.interval if args.interval is not None else config.interval
    duration = args.duration if args.duration is not None else config.duration
    out_dir = Path(args.out or config.cwd)

    logger.info("=" * 60)
    logger.info(f"Monitoring threads of process {args.pid}")
    logger.info("=" * 60)
    logger.info(f"interval={interval}s, duration={duration if duration is not None else 'until exit'}, "
                f"min_resolution={config.min_resolution_nanos}ns")

    sampler = CpuLoadSampler(min_resolution_nanos=config.min_resolution_nanos)
    result = monitor_process(args.pid, interval=interval, duration=duration,
                             sampler=sampler, processor_count=config.processor_count)
    if result is None:
        logger.error("No measurable thread load collected")
        return 1

    logger.info(f"✓ {result.ticks_count} pass(es), {result.samples_count} sample(s), "
                f"{result.skipped_count} skipped")
    print(tabulate(result.summary_rows(), headers=SUMMARY_HEADERS, tablefmt="github"))

    export_result(result, out_dir)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
