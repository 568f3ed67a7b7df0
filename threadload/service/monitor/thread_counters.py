"""
Thread Counter Module

Reads cumulative per-thread CPU-time counters for one process through psutil.
"""
from dataclasses import dataclass
from typing import Dict

import psutil

from threadload.consts.TimeUnit import NANOS_PER_SEC


@dataclass(frozen=True)
class ThreadCounters:
    """Cumulative CPU time of one thread, in nanoseconds"""
    user_nanos: int
    total_nanos: int


def seconds_to_nanos(seconds: float) -> int:
    return int(round(seconds * NANOS_PER_SEC))


class PsutilThreadCounters:
    """Counter source backed by psutil.Process.threads()"""

    def __init__(self, pid: int):
        self.pid = pid
        self.process = psutil.Process(pid)

    def read(self) -> Dict[int, ThreadCounters]:
        """
        Read the counters of every live thread of the process.

        Raises:
            psutil.NoSuchProcess: If the process has exited
        """
        counters = {}
        for thread in self.process.threads():
            user_nanos = seconds_to_nanos(thread.user_time)
            counters[thread.id] = ThreadCounters(
                user_nanos=user_nanos,
                total_nanos=user_nanos + seconds_to_nanos(thread.system_time)
            )
        return counters

    def is_running(self) -> bool:
        return self.process.is_running()

    @staticmethod
    def processor_count() -> int:
        return psutil.cpu_count() or 1
