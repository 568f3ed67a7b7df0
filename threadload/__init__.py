"""Per-thread CPU load sampling."""

from threadload.models import ThreadCpuAccount, ThreadCpuLoad
from threadload.service.sampler.cpu_load_sampler import CpuLoadSampler, DEFAULT_MIN_RESOLUTION_NANOS

__all__ = ["CpuLoadSampler", "DEFAULT_MIN_RESOLUTION_NANOS", "ThreadCpuAccount", "ThreadCpuLoad"]
