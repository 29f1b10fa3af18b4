"""系统纳秒时钟"""

from __future__ import annotations

import time


class SystemClock:
    """默认时钟实现，满足 NanoTime 协议"""

    def now_unix_nano(self) -> int:
        return time.time_ns()
