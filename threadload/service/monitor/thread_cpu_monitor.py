"""
Thread CPU Monitor Module

This module drives the CPU load sampler periodically over every thread of a
process, keeping one accounting record per live thread.
"""
import threading
import time
from typing import Callable, Dict, List, Optional

import psutil

from threadload.consts.TimeUnit import NANOS_PER_SEC
from threadload.models.thread_cpu_account import ThreadCpuAccount
from threadload.service.monitor.thread_counters import PsutilThreadCounters, ThreadCounters
from threadload.service.monitor.thread_load_snapshot import ThreadLoadSnapshot
from threadload.service.monitor.thread_monitor_result import ThreadMonitorResult
from threadload.service.sampler.cpu_load_sampler import CpuLoadSampler
from threadload.util.log_config import setup_logger

logger = setup_logger(__name__)


def seed_account(thread_counters: ThreadCounters, wallclock_now: int) -> ThreadCpuAccount:
    """Account that charges everything a thread consumed before it was first observed"""
    return ThreadCpuAccount(
        last_wallclock_nanos=wallclock_now,
        charged_user_nanos=thread_counters.user_nanos,
        charged_total_nanos=max(thread_counters.total_nanos, thread_counters.user_nanos)
    )


class ThreadCpuMonitor:
    """Monitor per-thread CPU load of a process"""

    def __init__(self,
                 counter_source,
                 sampler: Optional[CpuLoadSampler] = None,
                 interval: float = 1.0,
                 processor_count: Optional[int] = None,
                 clock: Callable[[], int] = time.time_ns,
                 sink: Optional[Callable[[ThreadLoadSnapshot], None]] = None):
        """
        Initialize thread monitor.

        Args:
            counter_source: Object with read() -> {thread_id: ThreadCounters},
                is_running() and processor_count()
            sampler: Load sampler (default: CpuLoadSampler with the default threshold)
            interval: Sampling interval in seconds (default: 1s)
            processor_count: Fixed processor count, None to query the source on every pass
            clock: Wall-clock source in nanoseconds
            sink: Optional callback receiving every snapshot as it is produced
        """
        self.counter_source = counter_source
        self.sampler = sampler or CpuLoadSampler()
        self.interval = interval
        self.processor_count = processor_count
        self.clock = clock
        self.sink = sink

        self.accounts: Dict[int, ThreadCpuAccount] = {}
        self.snapshots: List[ThreadLoadSnapshot] = []
        self.ticks_count = 0
        self.skipped_count = 0
        self.running = False
        self.thread: Optional[threading.Thread] = None
        self.start_time: Optional[float] = None
        self.end_time: Optional[float] = None

    def tick(self) -> List[ThreadLoadSnapshot]:
        """
        Run one sampling pass over every live thread.

        A thread seen for the first time only records its baseline in this pass.

        Returns:
            Snapshots of the threads whose load was measurable in this pass
        """
        counters = self.counter_source.read()
        processor_count = self.processor_count or self.counter_source.processor_count()
        wallclock_now = self.clock()
        timestamp = wallclock_now / NANOS_PER_SEC

        # Accounts die with their thread
        for thread_id in [tid for tid in self.accounts if tid not in counters]:
            del self.accounts[thread_id]
            logger.debug(f"Thread {thread_id} ended, account dropped")

        produced = []
        for thread_id, thread_counters in counters.items():
            account = self.accounts.get(thread_id)
            if account is None or thread_counters.user_nanos < account.charged_user_nanos:
                # New thread, or a reused id whose counters restarted: this pass is its baseline
                if account is not None:
                    logger.debug(f"Thread {thread_id} counters went backwards, account reset")
                self.accounts[thread_id] = seed_account(thread_counters, wallclock_now)
                self.skipped_count += 1
                continue

            load = self.sampler.sample(
                account,
                thread_counters.user_nanos,
                thread_counters.total_nanos,
                wallclock_now,
                processor_count
            )
            if load is None:
                self.skipped_count += 1
                continue

            snapshot = ThreadLoadSnapshot(
                timestamp=timestamp,
                thread_id=thread_id,
                user=load.user,
                system=load.system
            )
            self.snapshots.append(snapshot)
            produced.append(snapshot)
            if self.sink is not None:
                self.sink(snapshot)

        self.ticks_count += 1
        return produced

    def start(self):
        """Start monitoring in a background thread"""
        if self.running:
            return

        self.start_time = time.perf_counter()
        self.running = True
        self.thread = threading.Thread(target=self._monitor_loop, daemon=True)
        self.thread.start()

    def wait(self, timeout: Optional[float] = None):
        """Block until the monitoring loop ends on its own or timeout elapses"""
        if self.thread:
            self.thread.join(timeout=timeout)

    def stop(self) -> Optional[ThreadMonitorResult]:
        """
        Stop monitoring and return results.

        Returns:
            ThreadMonitorResult or None if no samples collected
        """
        self.running = False
        self.end_time = time.perf_counter()

        if self.thread:
            self.thread.join(timeout=max(2.0, self.interval * 2))

        return self.get_results()

    def _monitor_loop(self):
        """Main monitoring loop (runs in background thread)"""
        while self.running:
            try:
                if not self.counter_source.is_running():
                    break

                self.tick()

                time.sleep(self.interval)

            except psutil.NoSuchProcess:
                # Process ended
                break
            except Exception as e:
                logger.warning(f"Monitor error: {e}")
                break
        self.running = False

    def get_results(self) -> Optional[ThreadMonitorResult]:
        """
        Get monitoring results.

        Returns:
            ThreadMonitorResult or None if no samples
        """
        if not self.snapshots:
            return None

        end_time = self.end_time if self.end_time is not None else time.perf_counter()
        start_time = self.start_time if self.start_time is not None else end_time

        return ThreadMonitorResult(
            ticks_count=self.ticks_count,
            skipped_count=self.skipped_count,
            sampling_interval=self.interval,
            execution_time=end_time - start_time,
            snapshots=list(self.snapshots)
        )


def monitor_process(pid: int,
                    interval: float = 1.0,
                    duration: Optional[float] = None,
                    sampler: Optional[CpuLoadSampler] = None,
                    processor_count: Optional[int] = None) -> Optional[ThreadMonitorResult]:
    """
    Monitor the threads of a running process and return their load statistics.

    Args:
        pid: Process ID to monitor
        interval: Sampling interval in seconds
        duration: Seconds to monitor, None to monitor until the process exits
        sampler: Load sampler to use
        processor_count: Fixed processor count, None to query psutil on every pass

    Every snapshot is kept in memory until the monitor stops, so with duration=None
    memory grows with the lifetime of the process.

    Returns:
        ThreadMonitorResult or None if monitoring failed
    """
    try:
        counter_source = PsutilThreadCounters(pid)
    except psutil.NoSuchProcess:
        logger.warning(f"Process {pid} not found")
        return None

    monitor = ThreadCpuMonitor(counter_source, sampler=sampler, interval=interval,
                               processor_count=processor_count)
    monitor.start()

    # Wait for the process to exit or the duration to elapse
    monitor.wait(timeout=duration)

    return monitor.stop()
