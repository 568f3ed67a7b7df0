from dataclasses import dataclass


@dataclass
class ThreadCpuAccount:
    """
    Accounting state for one monitored thread.

    The charged counters hold the CPU time already attributed to a reported
    load and may lag the OS counters; whatever has not been charged yet is
    carried into the next sample.
    """
    last_wallclock_nanos: int = 0
    charged_user_nanos: int = 0
    charged_total_nanos: int = 0

    @property
    def charged_system_nanos(self) -> int:
        return self.charged_total_nanos - self.charged_user_nanos
