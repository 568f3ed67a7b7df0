"""
CPU Load Sampler Module

Turns cumulative per-thread CPU-time counters into bounded user/system load
fractions. Shared by the monitor loop and by any caller that already owns
the counters.
"""
from typing import Optional

from threadload.consts.SkipReason import SkipReason
from threadload.consts.TimeUnit import NANOS_PER_MILLISEC
from threadload.models.thread_cpu_account import ThreadCpuAccount
from threadload.models.thread_cpu_load import ThreadCpuLoad
from threadload.util.log_config import setup_logger

# Smallest CPU-time delta considered significant
DEFAULT_MIN_RESOLUTION_NANOS = 1 * NANOS_PER_MILLISEC

logger = setup_logger(__name__)


class CpuLoadSampler:
    """Compute thread CPU load from OS counters and a wall clock"""

    def __init__(self, min_resolution_nanos: int = DEFAULT_MIN_RESOLUTION_NANOS):
        """
        Initialize the sampler.

        Args:
            min_resolution_nanos: Total CPU-time delta below which a sample is
                deferred instead of reported (default: 1ms)
        """
        if min_resolution_nanos < 0:
            raise ValueError(f"min_resolution_nanos must be >= 0, got {min_resolution_nanos}")
        self.min_resolution_nanos = min_resolution_nanos

    def sample(self,
               account: ThreadCpuAccount,
               user_counter_now: int,
               total_counter_now: int,
               wallclock_now: int,
               processor_count: int) -> Optional[ThreadCpuLoad]:
        """
        Charge the CPU time consumed since the last sample and report it as load.

        Args:
            account: Accounting state of the thread, updated in place on success
            user_counter_now: Cumulative user CPU time of the thread (ns)
            total_counter_now: Cumulative user+system CPU time of the thread (ns)
            wallclock_now: Current wall-clock timestamp (ns)
            processor_count: Number of processors the load is normalized against

        Returns:
            ThreadCpuLoad, or None if the interval is not measurable. The account
            is left untouched when None is returned.
        """
        reason = self._check_inputs(account, user_counter_now, total_counter_now, wallclock_now, processor_count)
        if reason is not None:
            logger.debug(f"Sample skipped: {reason.value}")
            return None

        wall_delta = wallclock_now - account.last_wallclock_nanos
        capacity = wall_delta * processor_count

        raw_user = max(0, user_counter_now - account.charged_user_nanos)
        raw_total = max(0, total_counter_now - account.charged_total_nanos)
        # Derived, so it goes negative when the total counter lags the user counter
        raw_system = raw_total - raw_user

        if raw_total < self.min_resolution_nanos:
            logger.debug(f"Sample skipped: {SkipReason.BELOW_THRESHOLD.value} "
                         f"({raw_total}ns < {self.min_resolution_nanos}ns)")
            return None

        # System time is honored first, user time absorbs any shortfall
        consumed_system = min(max(raw_system, 0), capacity)
        consumed_user = min(raw_user, capacity - consumed_system)

        account.last_wallclock_nanos = wallclock_now
        account.charged_user_nanos += consumed_user
        account.charged_total_nanos += consumed_user + consumed_system

        return ThreadCpuLoad(
            user=consumed_user / capacity,
            system=consumed_system / capacity
        )

    @staticmethod
    def _check_inputs(account: ThreadCpuAccount,
                      user_counter_now: int,
                      total_counter_now: int,
                      wallclock_now: int,
                      processor_count: int) -> Optional[SkipReason]:
        if wallclock_now - account.last_wallclock_nanos <= 0:
            return SkipReason.CLOCK_NOT_ADVANCED
        if processor_count <= 0:
            return SkipReason.NO_CAPACITY
        if user_counter_now < 0 or total_counter_now < 0:
            return SkipReason.COUNTER_REGRESSION
        # Charged user time never exceeds the user counter unless the counter went backwards
        if user_counter_now < account.charged_user_nanos:
            return SkipReason.COUNTER_REGRESSION
        return None
