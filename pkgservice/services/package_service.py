"""包服务: 对外统一入口

组合清单存储、选择器、制品下载和结果上报，
归档后端在构造时选定（文档归档 / 包元数据服务归档）。

用法:
    svc = PackageService(
        archive=RegistryArchive(facade), cache=FileManifestCache("data/manifests"),
        downloader=HttpDownloader("data/downloads"), collector=HostCollector(),
        transport=facade,
    )
    tracer = Tracer()
    resolution = svc.download_manifest(tracer, "my-agent", LATEST_VERSION)
    path = svc.download_artifact(tracer, resolution.resource_arn, resolution.manifest.version)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pkgservice.core.artifact import download_artifact, locate_file
from pkgservice.core.clock import SystemClock
from pkgservice.core.exceptions import (
    CacheMissError,
    DecodeError,
    EnvironmentDetectionError,
)
from pkgservice.core.manifest.store import ManifestStore
from pkgservice.core.reporter import ResultReporter
from pkgservice.core.selector import resolve_variant

if TYPE_CHECKING:
    from pkgservice.core.models import (
        HostEnvironment,
        Manifest,
        ManifestResolution,
        PackageResult,
        PackageVariant,
    )
    from pkgservice.core.protocols import (
        Downloader,
        EnvironmentCollector,
        ManifestCache,
        NanoTime,
        PackageArchive,
        ReportTransport,
    )
    from pkgservice.core.trace import Tracer

logger = logging.getLogger(__name__)


class PackageService:
    """清单 -> 选择 -> 下载 -> 上报"""

    def __init__(
        self,
        archive: PackageArchive,
        cache: ManifestCache,
        downloader: Downloader,
        collector: EnvironmentCollector,
        transport: ReportTransport,
        clock: NanoTime | None = None,
    ) -> None:
        self.archive = archive
        self.downloader = downloader
        self.collector = collector
        self.store = ManifestStore(archive, cache)
        self.reporter = ResultReporter(transport, collector, clock or SystemClock())

    def package_service_name(self) -> str:
        return self.archive.name

    def get_package_arn_and_version(
        self, package_name: str, version: str,
    ) -> tuple[str, str]:
        return self.archive.resource_version(package_name, version)

    def download_manifest(
        self, tracer: Tracer, package_name: str, version: str,
    ) -> ManifestResolution:
        """下载清单（version 可为 LATEST_VERSION），刷新缓存并返回变更标记"""
        return self.store.resolve_manifest(tracer, package_name, version)

    def download_artifact(
        self, tracer: Tracer, package_name: str, version: str,
    ) -> str:
        """下载与当前主机匹配的制品，返回本地路径

        清单优先读缓存，缓存不可用时重新下载。
        """
        section = tracer.begin_section("download artifact")
        try:
            manifest = self._load_manifest(tracer, package_name, version)
            variant = self._select_variant(manifest)
            resolved = locate_file(manifest, variant)
        except Exception as e:
            section.with_error(e).end()
            raise
        section.end()

        return download_artifact(
            self.archive, self.downloader, resolved, package_name, version, tracer,
        )

    def _load_manifest(self, tracer: Tracer, package_name: str, version: str) -> Manifest:
        try:
            return self.store.load_cached_manifest(package_name, version)
        except (CacheMissError, DecodeError) as e:
            current = tracer.current_trace()
            if current:
                current.append_info("读取缓存清单失败，重新下载: %s", e)
        return self.store.resolve_manifest(tracer, package_name, version).manifest

    def _collect_environment(self) -> HostEnvironment:
        try:
            return self.collector.collect()
        except EnvironmentDetectionError:
            raise
        except Exception as e:
            raise EnvironmentDetectionError(f"采集主机环境失败: {e}") from e

    def _select_variant(self, manifest: Manifest) -> PackageVariant:
        env = self._collect_environment()
        return resolve_variant(
            manifest, env.platform, env.platform_version, env.architecture,
        )

    def report_result(self, tracer: Tracer, result: PackageResult) -> None:
        """上报 安装/升级/卸载 的执行结果"""
        self.reporter.report(tracer, result)
