NANOS_PER_MILLISEC = 1_000_000
NANOS_PER_SEC = 1_000_000_000
