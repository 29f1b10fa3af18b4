"""协作方协议定义

集中定义核心与外部协作方之间的接口契约（Protocol），
核心只依赖这些抽象：归档后端、清单缓存、环境采集、下载器、结果上报通道、时钟。

使用 typing.Protocol 而非 ABC，两种归档后端无需共同基类即可满足协议。
"""

from __future__ import annotations

from typing import Any, Protocol

from pkgservice.core.models import HostEnvironment, Manifest, ResolvedFile


# =========================================================================
# 归档后端协议
# =========================================================================

class PackageArchive(Protocol):
    """包归档后端协议

    负责获取原始清单字节、计算清单的规范资源标识、给出文件下载地址。
    """

    name: str

    def download_manifest_bytes(self, package_name: str, version: str) -> bytes:
        """下载原始清单，version 可为 LATEST_VERSION"""
        ...

    def resource_identifier(self, manifest: Manifest) -> str:
        """清单的规范资源标识（ARN），用作缓存键"""
        ...

    def resource_version(self, package_name: str, version: str) -> tuple[str, str]:
        """将包名/版本映射为 (资源名, 资源版本)"""
        ...

    def download_location(
        self, file: ResolvedFile, package_name: str, version: str,
    ) -> str:
        """返回文件的下载 URL"""
        ...


class ArchiveFacade(Protocol):
    """归档后端依赖的远端调用"""

    def get_manifest(self, package_name: str, version: str | None) -> dict[str, Any]:
        """从包元数据服务获取清单，返回 {name, version, manifest}"""
        ...

    def get_document(self, name: str, version: str | None) -> dict[str, Any]:
        """获取包文档，返回 {name, arn, version, content, attachments}"""
        ...

    def get_package_url(self, package_name: str, version: str, file_name: str) -> str:
        """获取包元数据服务中某个文件的下载地址"""
        ...


# =========================================================================
# 清单缓存协议
# =========================================================================

class ManifestCache(Protocol):
    """清单缓存，按 (资源标识, 版本) 存取原始字节"""

    def read(self, resource_arn: str, version: str) -> bytes | None:
        """读取缓存，未命中返回 None"""
        ...

    def write(self, resource_arn: str, version: str, data: bytes) -> None:
        """整体覆盖写入，失败抛出 OSError"""
        ...


# =========================================================================
# 其他协作方
# =========================================================================

class EnvironmentCollector(Protocol):
    """主机环境采集"""

    def collect(self) -> HostEnvironment:
        ...


class Downloader(Protocol):
    """带校验和验证的文件下载器"""

    def download(self, url: str, checksums: dict[str, str]) -> str:
        """下载并校验，返回本地文件路径"""
        ...


class ReportTransport(Protocol):
    """执行结果上报通道"""

    def put_package_result(self, payload: dict[str, Any]) -> Any:
        ...


class NanoTime(Protocol):
    """纳秒时钟，便于测试注入"""

    def now_unix_nano(self) -> int:
        ...
