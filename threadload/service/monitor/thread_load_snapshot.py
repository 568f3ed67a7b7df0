from dataclasses import dataclass


@dataclass
class ThreadLoadSnapshot:
    """Load of a single thread measured in one sampling pass"""
    timestamp: float
    thread_id: int
    user: float
    system: float
