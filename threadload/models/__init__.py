"""Models for thread CPU accounting."""

from .stat_summary import StatSummary
from .thread_cpu_account import ThreadCpuAccount
from .thread_cpu_load import ThreadCpuLoad

__all__ = ["StatSummary", "ThreadCpuAccount", "ThreadCpuLoad"]
