from dataclasses import dataclass, field
from typing import Any, Dict, List

import pandas as pd

from threadload.models.stat_summary import StatSummary
from threadload.service.monitor.thread_load_snapshot import ThreadLoadSnapshot
from threadload.util.cal_utils import calculate_stat_summary

SNAPSHOT_COLUMNS = ["timestamp", "thread_id", "user", "system"]


@dataclass
class ThreadLoadSummary:
    """Load statistics of one thread across the monitored run"""
    thread_id: int
    user: StatSummary
    system: StatSummary
    samples_count: int

    @classmethod
    def from_snapshots(cls, thread_id: int, snapshots: List[ThreadLoadSnapshot]) -> 'ThreadLoadSummary':
        return cls(
            thread_id=thread_id,
            user=calculate_stat_summary([s.user for s in snapshots]),
            system=calculate_stat_summary([s.system for s in snapshots]),
            samples_count=len(snapshots)
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'thread_id': self.thread_id,
            'user': self.user.to_summary_dict(),
            'system': self.system.to_summary_dict(),
            'samples_count': self.samples_count,
        }


@dataclass
class ThreadMonitorResult:
    """Thread load monitoring results"""
    ticks_count: int
    skipped_count: int
    sampling_interval: float
    execution_time: float

    # All snapshots for detailed analysis
    snapshots: List[ThreadLoadSnapshot]

    threads: Dict[int, ThreadLoadSummary] = field(init=False)

    def __post_init__(self):
        by_thread: Dict[int, List[ThreadLoadSnapshot]] = {}
        for snapshot in self.snapshots:
            by_thread.setdefault(snapshot.thread_id, []).append(snapshot)
        self.threads = {
            thread_id: ThreadLoadSummary.from_snapshots(thread_id, items)
            for thread_id, items in sorted(by_thread.items())
        }

    @property
    def samples_count(self) -> int:
        return len(self.snapshots)

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization"""
        return {
            'ticks_count': self.ticks_count,
            'samples_count': self.samples_count,
            'skipped_count': self.skipped_count,
            'sampling_interval': self.sampling_interval,
            'execution_time': self.execution_time,

            'threads': [summary.to_dict() for summary in self.threads.values()],

            'snapshots': [
                {
                    'timestamp': s.timestamp,
                    'thread_id': s.thread_id,
                    'user': s.user,
                    'system': s.system,
                }
                for s in self.snapshots
            ]
        }

    def to_dataframe(self) -> pd.DataFrame:
        """One row per snapshot, for CSV export"""
        return pd.DataFrame(
            [[s.timestamp, s.thread_id, s.user, s.system] for s in self.snapshots],
            columns=SNAPSHOT_COLUMNS
        )

    def summary_rows(self) -> List[List[Any]]:
        """Rows of (thread, samples, avg/peak user %, avg/peak system %) for table output"""
        return [
            [
                summary.thread_id,
                summary.samples_count,
                round(summary.user.avg * 100, 1),
                round(summary.user.max * 100, 1),
                round(summary.system.avg * 100, 1),
                round(summary.system.max * 100, 1),
            ]
            for summary in self.threads.values()
        ]
