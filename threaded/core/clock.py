"""
Wall-clock helper.

All persisted timestamps are integer milliseconds since the Unix epoch (UTC).
"""

import time


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)
