"""包元数据服务归档

清单由独立的包元数据服务提供；构造时可传入预取的清单，
此时 download_manifest_bytes 不发起远端调用。
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pkgservice.core.config import SERVICE_REGISTRY
from pkgservice.core.exceptions import BackendError
from pkgservice.core.models import LATEST_VERSION, Manifest, ResolvedFile

if TYPE_CHECKING:
    from pkgservice.core.protocols import ArchiveFacade

logger = logging.getLogger(__name__)


class RegistryArchive:
    """满足 PackageArchive 协议"""

    name = SERVICE_REGISTRY

    def __init__(self, facade: ArchiveFacade, preloaded_manifest: str = "") -> None:
        self.facade = facade
        self.preloaded_manifest = preloaded_manifest
        self._package_name = ""

    def download_manifest_bytes(self, package_name: str, version: str) -> bytes:
        self._package_name = package_name
        if self.preloaded_manifest:
            logger.debug("使用预取清单: %s", package_name)
            return self.preloaded_manifest.encode("utf-8")

        remote_version = None if version == LATEST_VERSION else version
        result = self.facade.get_manifest(package_name, remote_version)
        manifest = result.get("manifest")
        if not manifest:
            raise BackendError(f"包元数据服务未返回清单: {package_name}@{version}")
        self._package_name = str(result.get("name") or package_name)
        return manifest.encode("utf-8") if isinstance(manifest, str) else bytes(manifest)

    def resource_identifier(self, manifest: Manifest) -> str:
        return self._package_name

    def resource_version(self, package_name: str, version: str) -> tuple[str, str]:
        return package_name, version

    def download_location(
        self, file: ResolvedFile, package_name: str, version: str,
    ) -> str:
        return self.facade.get_package_url(package_name, version, file.name)
