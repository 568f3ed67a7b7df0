from enum import Enum


class SkipReason(Enum):
    CLOCK_NOT_ADVANCED = "clock_not_advanced"
    NO_CAPACITY = "no_capacity"
    COUNTER_REGRESSION = "counter_regression"
    BELOW_THRESHOLD = "below_threshold"
