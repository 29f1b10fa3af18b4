"""清单存储

职责:
- 通过归档后端下载清单并解析
- 与此前缓存的清单做深度比较，判断是否变化
- 将新下载的原始字节写入缓存（无论是否变化都覆盖）
- 仅从缓存读取清单（下载制品时优先走缓存）
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pkgservice.core.exceptions import (
    BackendError,
    CacheMissError,
    CacheWriteError,
    PackageServiceError,
)
from pkgservice.core.manifest.parser import parse_manifest
from pkgservice.core.models import Manifest, ManifestResolution

if TYPE_CHECKING:
    from pkgservice.core.protocols import ManifestCache, PackageArchive
    from pkgservice.core.trace import Tracer

logger = logging.getLogger(__name__)


class ManifestStore:
    """清单下载 + 缓存一致性"""

    def __init__(self, archive: PackageArchive, cache: ManifestCache) -> None:
        self.archive = archive
        self.cache = cache

    def resolve_manifest(
        self, tracer: Tracer | None, package_name: str, version: str,
    ) -> ManifestResolution:
        """下载并解析清单，刷新缓存

        Raises:
            BackendError: 归档后端下载失败
            DecodeError: 清单格式错误
            CacheWriteError: 写缓存失败
        """
        section = tracer.begin_section("download manifest") if tracer else None
        try:
            resolution = self._resolve(package_name, version)
        except Exception as e:
            if section:
                section.with_error(e).end()
            raise
        if section:
            section.append_info(
                "清单 %s@%s 未变化=%s",
                resolution.resource_arn, resolution.manifest.version,
                resolution.is_same_as_cache,
            ).end()
        return resolution

    def _resolve(self, package_name: str, version: str) -> ManifestResolution:
        try:
            raw = self.archive.download_manifest_bytes(package_name, version)
        except BackendError:
            raise
        except (OSError, ValueError) as e:
            raise BackendError(
                f"下载清单失败: {package_name}@{version} - {e}"
            ) from e

        manifest = parse_manifest(raw)
        arn = self.archive.resource_identifier(manifest)

        cached = self._read_cached_quietly(arn, manifest.version)
        is_same = cached is not None and cached == manifest

        try:
            self.cache.write(arn, manifest.version, raw)
        except OSError as e:
            raise CacheWriteError(
                f"清单写入缓存失败: {arn}@{manifest.version} - {e}"
            ) from e

        logger.info(
            "已下载清单: %s@%s -> %s (与缓存一致: %s)",
            package_name, version, arn, is_same,
        )
        return ManifestResolution(
            manifest=manifest, resource_arn=arn, is_same_as_cache=is_same,
        )

    def _read_cached_quietly(self, arn: str, version: str) -> Manifest | None:
        """变更检测用的缓存读取，任何失败都视为无缓存"""
        try:
            return self.load_cached_manifest(arn, version)
        except (PackageServiceError, OSError) as e:
            logger.debug("缓存清单不可用 %s@%s: %s", arn, version, e)
            return None

    def load_cached_manifest(self, package_name: str, version: str) -> Manifest:
        """仅从缓存读取清单，键为调用方传入的 (包名, 版本)

        Raises:
            CacheMissError: 缓存不存在或读取失败
            DecodeError: 缓存内容格式错误
        """
        try:
            data = self.cache.read(package_name, version)
        except OSError as e:
            raise CacheMissError(
                f"读取缓存清单失败: {package_name}@{version} - {e}"
            ) from e
        if data is None:
            raise CacheMissError(f"缓存中没有清单: {package_name}@{version}")
        return parse_manifest(data)
