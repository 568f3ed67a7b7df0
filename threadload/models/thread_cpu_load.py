from dataclasses import dataclass, asdict
from typing import Any, Dict


@dataclass(frozen=True)
class ThreadCpuLoad:
    """User and system load of one thread over one sampling interval, as fractions of machine capacity"""
    user: float
    system: float

    @property
    def total(self) -> float:
        return self.user + self.system

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return asdict(self)
