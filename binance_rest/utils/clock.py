"""
Wall-clock helpers for request timestamps.
"""

import time


def timestamp_ms() -> int:
    """Current wall-clock time in milliseconds since the Unix epoch."""
    return time.time_ns() // 1_000_000
