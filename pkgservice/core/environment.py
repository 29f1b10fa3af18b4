"""主机环境采集

平台名称/版本/架构来自 platform 模块与 /etc/os-release，
云实例属性来自配置覆盖或 PKGSERVICE_INSTANCE_* 环境变量。
"""

from __future__ import annotations

import logging
import os
import platform
from pathlib import Path

from pkgservice.core.exceptions import EnvironmentDetectionError
from pkgservice.core.models import HostEnvironment

logger = logging.getLogger(__name__)

OS_RELEASE = Path("/etc/os-release")

_ENV_PREFIX = "PKGSERVICE_INSTANCE_"
_INSTANCE_FIELDS = ("instance_id", "instance_type", "region", "availability_zone")

# platform.machine() 的别名归一
_ARCH_ALIASES = {
    "amd64": "x86_64",
    "x64": "x86_64",
    "aarch64": "arm64",
    "i686": "386",
    "i386": "386",
}


def parse_os_release(text: str) -> dict[str, str]:
    """解析 KEY=VALUE 格式的 os-release 内容"""
    result: dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        result[key.strip()] = value.strip().strip('"').strip("'")
    return result


class HostCollector:
    """满足 EnvironmentCollector 协议的默认实现"""

    def __init__(
        self,
        overrides: dict[str, str] | None = None,
        os_release: Path = OS_RELEASE,
    ) -> None:
        self.overrides = overrides or {}
        self.os_release = os_release

    def _platform(self) -> tuple[str, str]:
        system = platform.system().lower()
        if system == "linux" and self.os_release.is_file():
            info = parse_os_release(self.os_release.read_text(encoding="utf-8"))
            return info.get("ID", system).lower(), info.get("VERSION_ID", "")
        if system == "darwin":
            return system, platform.mac_ver()[0]
        return system, platform.version() if system == "windows" else platform.release()

    def _instance_value(self, name: str) -> str:
        if name in self.overrides:
            return str(self.overrides[name])
        return os.getenv(_ENV_PREFIX + name.upper(), "")

    def collect(self) -> HostEnvironment:
        """采集主机环境

        Raises:
            EnvironmentDetectionError: 无法识别平台或架构
        """
        try:
            name, version = self._platform()
        except (OSError, ValueError) as e:
            raise EnvironmentDetectionError(f"读取平台信息失败: {e}") from e

        name = self.overrides.get("platform", name)
        version = self.overrides.get("platform_version", version)
        machine = platform.machine().lower()
        arch = self.overrides.get("architecture", _ARCH_ALIASES.get(machine, machine))
        if not name or not arch:
            raise EnvironmentDetectionError(
                f"无法识别主机平台: platform={name!r}, architecture={arch!r}"
            )

        env = HostEnvironment(
            platform=name,
            platform_version=version,
            architecture=arch,
            **{f: self._instance_value(f) for f in _INSTANCE_FIELDS},
        )
        logger.debug("主机环境: %s", env)
        return env
