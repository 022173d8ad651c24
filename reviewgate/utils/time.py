"""Unix-second clock used for every persisted timestamp."""

import time


def now_s() -> int:
    """Return the current time as integer unix seconds."""
    return int(time.time())
