"""服务容器: 统一依赖注入，按配置组装包服务

同一容器内的实例共享（facade 同时用于归档后端和结果上报）。
CLI 通过 get_container() 获取服务，而非直接 import 构造。

依赖关系图（→ 表示依赖）:
  package_service → archive → facade
  package_service → manifest_cache / downloader / collector / facade

用法:
    container = ServiceContainer()
    svc = container.package_service          # 懒加载

    # 显式注入配置
    cfg = Config.from_file("my_config.yml")
    container = ServiceContainer(config=cfg)
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from pkgservice.core.config import SERVICE_DOCUMENT
from pkgservice.core.exceptions import ConfigError

if TYPE_CHECKING:
    from pkgservice.archive.facade import HttpFacade
    from pkgservice.core.config import Config
    from pkgservice.core.downloader import HttpDownloader
    from pkgservice.core.environment import HostCollector
    from pkgservice.core.manifest.cache import FileManifestCache
    from pkgservice.core.protocols import PackageArchive
    from pkgservice.services.package_service import PackageService

logger = logging.getLogger(__name__)


class ServiceContainer:
    """懒加载服务容器，每个实例持有一组共享的协作方"""

    def __init__(self, config: Config | None = None) -> None:
        self._instances: dict[str, object] = {}
        if config is None:
            from pkgservice.core.config import get_config
            config = get_config()
        self._config = config

    @property
    def config(self) -> Config:
        return self._config

    # ---- 协作方 ----

    @property
    def facade(self) -> HttpFacade:
        if "facade" not in self._instances:
            if not self._config.api_url:
                raise ConfigError("未配置 api_url，无法访问归档后端")
            from pkgservice.archive.facade import HttpFacade
            self._instances["facade"] = HttpFacade(
                api_url=self._config.api_url,
                api_token=self._config.api_token,
                timeout=self._config.timeout,
            )
        return self._instances["facade"]  # type: ignore[return-value]

    @property
    def archive(self) -> PackageArchive:
        if "archive" not in self._instances:
            if self._config.service == SERVICE_DOCUMENT:
                from pkgservice.archive.document import DocumentArchive
                self._instances["archive"] = DocumentArchive(self.facade)
            else:
                from pkgservice.archive.registry import RegistryArchive
                self._instances["archive"] = RegistryArchive(
                    self.facade,
                    preloaded_manifest=self._config.preloaded_manifest,
                )
        return self._instances["archive"]  # type: ignore[return-value]

    @property
    def manifest_cache(self) -> FileManifestCache:
        if "manifest_cache" not in self._instances:
            from pkgservice.core.manifest.cache import FileManifestCache
            self._instances["manifest_cache"] = FileManifestCache(
                cache_dir=self._config.cache_dir,
            )
        return self._instances["manifest_cache"]  # type: ignore[return-value]

    @property
    def downloader(self) -> HttpDownloader:
        if "downloader" not in self._instances:
            from pkgservice.core.downloader import HttpDownloader
            self._instances["downloader"] = HttpDownloader(
                download_dir=self._config.download_dir,
                timeout=self._config.timeout,
            )
        return self._instances["downloader"]  # type: ignore[return-value]

    @property
    def collector(self) -> HostCollector:
        if "collector" not in self._instances:
            from pkgservice.core.environment import HostCollector
            self._instances["collector"] = HostCollector(
                overrides=self._config.instance,
            )
        return self._instances["collector"]  # type: ignore[return-value]

    # ---- 服务层 ----

    @property
    def package_service(self) -> PackageService:
        if "package_service" not in self._instances:
            from pkgservice.services.package_service import PackageService
            self._instances["package_service"] = PackageService(
                archive=self.archive,
                cache=self.manifest_cache,
                downloader=self.downloader,
                collector=self.collector,
                transport=self.facade,
            )
            logger.debug("包服务已创建: %s", self._config.service)
        return self._instances["package_service"]  # type: ignore[return-value]


# ---- 全局单例 ----

_global: ServiceContainer | None = None
_global_lock = threading.Lock()


def get_container() -> ServiceContainer:
    """获取全局 ServiceContainer 单例（线程安全）"""
    global _global  # noqa: PLW0603
    if _global is not None:
        return _global
    with _global_lock:
        if _global is None:
            _global = ServiceContainer()
        return _global


def reset_container() -> None:
    """重置全局容器（仅用于测试）"""
    global _global  # noqa: PLW0603
    with _global_lock:
        _global = None
