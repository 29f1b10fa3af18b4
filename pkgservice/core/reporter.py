"""执行结果上报

将 安装/升级/卸载 的执行结果组装为上报载荷并提交到远端。

时间字段统一换算为相对 result.timing（开始时间）的毫秒数，
整数除法向零截断，因此早于开始时间的步骤得到负值。
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pkgservice.core.clock import SystemClock
from pkgservice.core.exceptions import ReportSubmissionError
from pkgservice.core.models import HostEnvironment, PackageResult

if TYPE_CHECKING:
    from pkgservice.core.protocols import (
        EnvironmentCollector,
        NanoTime,
        ReportTransport,
    )
    from pkgservice.core.trace import Tracer

logger = logging.getLogger(__name__)

NANOS_PER_MILLI = 1_000_000


def elapsed_millis(timestamp: int, start: int) -> int:
    """纳秒时间戳 -> 相对 start 的毫秒数（向零截断）"""
    delta = timestamp - start
    millis = abs(delta) // NANOS_PER_MILLI
    return millis if delta >= 0 else -millis


def environment_attributes(env: HostEnvironment) -> dict[str, str]:
    return {
        "platformName": env.platform,
        "platformVersion": env.platform_version,
        "architecture": env.architecture,
        "instanceID": env.instance_id,
        "instanceType": env.instance_type,
        "region": env.region,
        "availabilityZone": env.availability_zone,
    }


def build_payload(
    result: PackageResult, env: HostEnvironment, now: int,
) -> dict[str, Any]:
    """组装上报载荷，previous_version 为空时不出现在载荷中"""
    payload: dict[str, Any] = {
        "PackageName": result.package_name,
        "PackageVersion": result.version,
        "Operation": result.operation,
        "OverallTiming": elapsed_millis(now, result.timing),
        "Result": result.exitcode,
        "Attributes": environment_attributes(env),
        "Steps": [
            {
                "Action": step.operation,
                "Result": step.exitcode,
                "Timing": elapsed_millis(step.timing, result.timing),
            }
            for step in result.steps
        ],
    }
    if result.previous_version:
        payload["PreviousPackageVersion"] = result.previous_version
    return payload


class ResultReporter:
    """结果上报器"""

    def __init__(
        self,
        transport: ReportTransport,
        collector: EnvironmentCollector,
        clock: NanoTime | None = None,
    ) -> None:
        self.transport = transport
        self.collector = collector
        self.clock = clock or SystemClock()

    def _collect_environment(self) -> HostEnvironment:
        """采集失败不影响上报，属性留空"""
        try:
            return self.collector.collect()
        except Exception as e:
            logger.warning("采集主机环境失败，属性留空: %s", e)
            return HostEnvironment()

    def report(self, tracer: Tracer | None, result: PackageResult) -> None:
        """提交执行结果

        Raises:
            ReportSubmissionError: 上报通道返回错误
        """
        env = self._collect_environment()
        payload = build_payload(result, env, self.clock.now_unix_nano())

        try:
            self.transport.put_package_result(payload)
        except Exception as e:
            if tracer and tracer.current_trace():
                tracer.current_trace().append_info("结果上报失败: %s", e)
            raise ReportSubmissionError(
                f"结果上报失败: {result.package_name}@{result.version} "
                f"({result.operation}) - {e}"
            ) from e

        logger.info(
            "已上报结果: %s@%s %s exitcode=%d steps=%d",
            result.package_name, result.version, result.operation,
            result.exitcode, len(result.steps),
            extra={"package": result.package_name, "version": result.version},
        )
