from __future__ import annotations

import time
from collections.abc import Callable
from datetime import UTC, date, datetime

# Engine timestamps are integer epoch seconds.
Clock = Callable[[], int]


def epoch_now() -> int:
    return int(time.time())


def utc_date(epoch: int) -> date:
    return datetime.fromtimestamp(epoch, tz=UTC).date()
