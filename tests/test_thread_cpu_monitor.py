import os
import time

import psutil
import pytest

from threadload.consts.TimeUnit import NANOS_PER_MILLISEC as MS
from threadload.service.monitor.thread_counters import PsutilThreadCounters, ThreadCounters, seconds_to_nanos
from threadload.service.monitor.thread_cpu_monitor import ThreadCpuMonitor, monitor_process, seed_account


class FakeCounterSource:
    """Replays a scripted list of {thread_id: (user_ms, total_ms)} readings"""

    def __init__(self, readings, processors=1):
        self.readings = list(readings)
        self.processors = processors
        self.reads = 0

    def read(self):
        reading = self.readings[min(self.reads, len(self.readings) - 1)]
        self.reads += 1
        return {
            tid: ThreadCounters(user_nanos=user * MS, total_nanos=total * MS)
            for tid, (user, total) in reading.items()
        }

    def is_running(self):
        return self.reads < len(self.readings)

    def processor_count(self):
        return self.processors


class BusyCounterSource(FakeCounterSource):
    """One thread that already ran for an hour and keeps one core busy with user time"""

    def __init__(self, step_ms=1000):
        super().__init__([])
        self.step_ms = step_ms

    def read(self):
        self.reads += 1
        user = 3_600_000 + self.reads * self.step_ms
        return {1: ThreadCounters(user_nanos=user * MS, total_nanos=user * MS)}

    def is_running(self):
        return True


class FakeClock:
    def __init__(self, step_ms=400, start=0):
        self.now = start
        self.step = step_ms * MS

    def __call__(self):
        self.now += self.step
        return self.now


def test_first_pass_only_records_baseline():
    source = FakeCounterSource([{1: (100, 200), 2: (200, 300)}])
    monitor = ThreadCpuMonitor(source, clock=FakeClock(400))

    assert monitor.tick() == []
    assert monitor.skipped_count == 2
    assert monitor.accounts[1].last_wallclock_nanos == 400 * MS
    assert monitor.accounts[1].charged_user_nanos == 100 * MS
    assert monitor.accounts[2].charged_total_nanos == 300 * MS


def test_tick_samples_every_thread():
    source = FakeCounterSource([{1: (0, 0), 2: (0, 0)}, {1: (100, 200), 2: (200, 300)}])
    monitor = ThreadCpuMonitor(source, clock=FakeClock(400))

    monitor.tick()
    snapshots = monitor.tick()

    assert [s.thread_id for s in snapshots] == [1, 2]
    assert (snapshots[0].user, snapshots[0].system) == pytest.approx((0.25, 0.25))
    assert (snapshots[1].user, snapshots[1].system) == pytest.approx((0.5, 0.25))
    assert snapshots[0].timestamp == pytest.approx(0.8)
    assert set(monitor.accounts) == {1, 2}


def test_epoch_clock_reports_no_startup_artifact():
    received = []
    monitor = ThreadCpuMonitor(BusyCounterSource(), clock=FakeClock(1000, start=time.time_ns()),
                               sink=received.append)

    for _ in range(4):
        monitor.tick()

    assert len(monitor.snapshots) == 3
    assert received == monitor.snapshots
    assert all(s.user == pytest.approx(1.0) for s in received)

    summary = monitor.get_results().threads[1]
    assert summary.user.min == pytest.approx(1.0)
    assert summary.user.avg == pytest.approx(1.0)


def test_processor_count_from_source_and_override():
    readings = [{1: (0, 0)}, {1: (100, 200)}]

    monitor = ThreadCpuMonitor(FakeCounterSource(readings, processors=2), clock=FakeClock(400))
    monitor.tick()
    assert monitor.tick()[0].user == pytest.approx(0.125)

    monitor = ThreadCpuMonitor(FakeCounterSource(readings, processors=2), clock=FakeClock(400),
                               processor_count=4)
    monitor.tick()
    assert monitor.tick()[0].user == pytest.approx(0.0625)


def test_accounts_follow_thread_lifetime():
    source = FakeCounterSource([
        {1: (0, 0), 2: (0, 0)},
        {1: (100, 200)},
        {1: (200, 400), 3: (100, 200)},
        {1: (300, 600), 3: (200, 400)},
    ])
    monitor = ThreadCpuMonitor(source, clock=FakeClock(400))

    monitor.tick()
    assert set(monitor.accounts) == {1, 2}
    monitor.tick()
    assert set(monitor.accounts) == {1}

    snapshots = monitor.tick()
    assert set(monitor.accounts) == {1, 3}
    # A new thread is charged its history up front
    assert monitor.accounts[3].charged_total_nanos == 200 * MS
    assert [s.thread_id for s in snapshots] == [1]

    snapshots = monitor.tick()
    assert [s.thread_id for s in snapshots] == [1, 3]
    assert (snapshots[1].user, snapshots[1].system) == pytest.approx((0.25, 0.25))


def test_reused_thread_id_starts_a_new_account():
    source = FakeCounterSource([
        {1: (0, 0)},
        {1: (500, 600)},
        {1: (50, 60)},
        {1: (150, 160)},
    ])
    monitor = ThreadCpuMonitor(source, clock=FakeClock(400))

    monitor.tick()
    assert len(monitor.tick()) == 1

    assert monitor.tick() == []
    assert monitor.accounts[1].charged_user_nanos == 50 * MS

    snapshots = monitor.tick()
    assert (snapshots[0].user, snapshots[0].system) == pytest.approx((0.25, 0.0))
    assert monitor.accounts[1].charged_user_nanos == 150 * MS


def test_seed_account_keeps_system_charge_non_negative():
    account = seed_account(ThreadCounters(user_nanos=200 * MS, total_nanos=150 * MS), 42)

    assert account.last_wallclock_nanos == 42
    assert account.charged_user_nanos == 200 * MS
    assert account.charged_system_nanos == 0


def test_not_measurable_threads_are_skipped():
    source = FakeCounterSource([
        {1: (0, 0), 2: (0, 0)},
        {1: (100, 200), 2: (0, 0)},
        {1: (100, 200), 2: (0, 0)},
    ])
    monitor = ThreadCpuMonitor(source, clock=FakeClock(400))

    assert monitor.tick() == []
    assert len(monitor.tick()) == 1
    assert monitor.tick() == []
    assert monitor.ticks_count == 3
    assert monitor.skipped_count == 5
    assert len(monitor.snapshots) == 1


def test_sink_receives_snapshots():
    received = []
    source = FakeCounterSource([{1: (0, 0)}, {1: (100, 200)}, {1: (200, 400)}])
    monitor = ThreadCpuMonitor(source, clock=FakeClock(400), sink=received.append)

    for _ in range(3):
        monitor.tick()

    assert received == monitor.snapshots
    assert len(received) == 2


def test_results_none_without_samples():
    monitor = ThreadCpuMonitor(FakeCounterSource([{1: (100, 200)}]), clock=FakeClock(400))
    monitor.tick()
    assert monitor.get_results() is None


def test_background_loop_stops_when_process_ends():
    source = FakeCounterSource([{1: (0, 0)}, {1: (100, 200)}, {1: (200, 400)}, {1: (300, 600)}])
    monitor = ThreadCpuMonitor(source, interval=0.01, clock=FakeClock(400))

    monitor.start()
    monitor.wait(timeout=5)
    result = monitor.stop()

    assert not monitor.running
    assert result.ticks_count == 4
    assert result.samples_count == 3
    assert result.sampling_interval == 0.01
    assert result.execution_time >= 0


def test_background_loop_ends_on_no_such_process():
    class VanishingSource(FakeCounterSource):
        def read(self):
            if self.reads >= 2:
                raise psutil.NoSuchProcess(pid=1)
            return super().read()

        def is_running(self):
            return True

    monitor = ThreadCpuMonitor(VanishingSource([{1: (0, 0)}, {1: (100, 200)}]), interval=0.01,
                               clock=FakeClock(400))
    monitor.start()
    monitor.wait(timeout=5)
    result = monitor.stop()

    assert result.ticks_count == 2
    assert result.samples_count == 1


def test_seconds_to_nanos():
    assert seconds_to_nanos(0.25) == 250 * MS
    assert seconds_to_nanos(0) == 0


def test_psutil_counters_for_current_process():
    source = PsutilThreadCounters(os.getpid())
    counters = source.read()

    assert counters
    for thread_counters in counters.values():
        assert thread_counters.user_nanos >= 0
        assert thread_counters.total_nanos >= thread_counters.user_nanos
    assert source.is_running()
    assert source.processor_count() >= 1


def test_monitor_process_missing_pid():
    assert monitor_process(999_999_999, interval=0.01, duration=0.05) is None
