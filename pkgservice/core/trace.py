"""执行追踪

Tracer 由调用方创建并显式传入每个操作，只用于结构化记录执行步骤，
不影响控制流。结束的区段可转换为上报用的 ResultStep 列表。

用法:
    tracer = Tracer()
    section = tracer.begin_section("download artifact")
    section.append_info("cache miss: %s", err)
    section.end()

    steps = tracer.to_result_steps()
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pkgservice.core.clock import SystemClock
from pkgservice.core.models import ResultStep

if TYPE_CHECKING:
    from pkgservice.core.protocols import NanoTime

logger = logging.getLogger(__name__)


class TraceSection:
    """单个追踪区段"""

    def __init__(self, tracer: Tracer, operation: str, start: int) -> None:
        self.tracer = tracer
        self.operation = operation
        self.start = start
        self.end_time = 0
        self._ended = False
        self.exitcode = 0
        self.info: list[str] = []
        self.error: str = ""

    @property
    def logger(self) -> logging.Logger:
        return self.tracer.logger

    @property
    def ended(self) -> bool:
        return self._ended

    def append_info(self, fmt: str, *args: object) -> TraceSection:
        message = fmt % args if args else fmt
        self.info.append(message)
        self.logger.info(
            "[%s] %s", self.operation, message, extra={"operation": self.operation},
        )
        return self

    def with_error(self, err: BaseException | str) -> TraceSection:
        self.error = str(err)
        if self.exitcode == 0:
            self.exitcode = 1
        self.logger.error(
            "[%s] %s", self.operation, self.error,
            extra={"operation": self.operation, "exitcode": self.exitcode},
        )
        return self

    def with_exitcode(self, code: int) -> TraceSection:
        self.exitcode = code
        return self

    def end(self) -> None:
        if self.ended:
            return
        self._ended = True
        self.end_time = self.tracer.clock.now_unix_nano()
        self.tracer._pop(self)
        self.logger.debug(
            "[%s] 结束 exitcode=%d 耗时=%.1fms",
            self.operation, self.exitcode, (self.end_time - self.start) / 1e6,
        )


class Tracer:
    """区段式执行追踪器"""

    def __init__(
        self,
        clock: NanoTime | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        self.clock = clock or SystemClock()
        self.logger = log or logger
        self.sections: list[TraceSection] = []
        self._stack: list[TraceSection] = []

    def begin_section(self, operation: str) -> TraceSection:
        section = TraceSection(self, operation, self.clock.now_unix_nano())
        self.sections.append(section)
        self._stack.append(section)
        self.logger.debug("[%s] 开始", operation)
        return section

    def current_trace(self) -> TraceSection | None:
        """当前未结束的最内层区段"""
        return self._stack[-1] if self._stack else None

    def _pop(self, section: TraceSection) -> None:
        if section in self._stack:
            self._stack.remove(section)

    def to_result_steps(self) -> list[ResultStep]:
        """已结束区段转为上报步骤，timing 取区段开始时间"""
        return [
            ResultStep(operation=s.operation, exitcode=s.exitcode, timing=s.start)
            for s in self.sections
            if s.ended
        ]
