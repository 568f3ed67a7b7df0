from dataclasses import dataclass
from typing import Optional

from threadload.service.sampler.cpu_load_sampler import DEFAULT_MIN_RESOLUTION_NANOS


@dataclass
class MonitorConfig:
    interval: float = 1.0  # Seconds between sampling passes
    duration: Optional[float] = None  # Seconds to monitor, None = until the process exits
    min_resolution_nanos: int = DEFAULT_MIN_RESOLUTION_NANOS
    processor_count: Optional[int] = None  # None = ask the OS on every pass
    cwd: str = "./threadload_out"
    log_level: str = "INFO"
