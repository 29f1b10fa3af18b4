"""ServiceContainer 单元测试"""

from __future__ import annotations

from pathlib import Path

import pytest

import pkgservice.core.config as cfgmod
from pkgservice.archive.document import DocumentArchive
from pkgservice.archive.registry import RegistryArchive
from pkgservice.core.exceptions import ConfigError
from pkgservice.services.container import (
    ServiceContainer,
    get_container,
    reset_container,
)


@pytest.fixture(autouse=True)
def _setup_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """确保测试有独立的配置和数据目录"""
    cfg = cfgmod.Config(
        api_url="https://api.example.com",
        cache_dir=str(tmp_path / "manifests"),
        download_dir=str(tmp_path / "downloads"),
    )
    monkeypatch.setattr(cfgmod, "_current", cfg)
    reset_container()
    yield
    reset_container()


class TestServiceContainer:
    def test_lazy_loading(self) -> None:
        c = ServiceContainer()
        assert len(c._instances) == 0
        _ = c.archive
        assert "archive" in c._instances
        assert "facade" in c._instances
        assert "downloader" not in c._instances

    def test_shared_instances(self) -> None:
        c = ServiceContainer()
        assert c.facade is c.facade
        assert c.package_service is c.package_service

    def test_facade_shared_with_transport(self) -> None:
        c = ServiceContainer()
        svc = c.package_service
        assert svc.archive is c.archive
        assert svc.reporter.transport is c.facade

    def test_registry_by_default(self) -> None:
        c = ServiceContainer()
        assert isinstance(c.archive, RegistryArchive)
        assert c.package_service.package_service_name() == "registry"

    def test_document_service(self, tmp_path: Path) -> None:
        cfg = cfgmod.Config(service="document", api_url="https://api.example.com")
        c = ServiceContainer(config=cfg)
        assert isinstance(c.archive, DocumentArchive)

    def test_missing_api_url(self) -> None:
        c = ServiceContainer(config=cfgmod.Config())
        with pytest.raises(ConfigError, match="api_url"):
            _ = c.archive

    def test_paths_from_config(self, tmp_path: Path) -> None:
        c = ServiceContainer()
        assert c.manifest_cache.cache_dir == tmp_path / "manifests"
        assert c.downloader.download_dir == tmp_path / "downloads"


class TestGlobalContainer:
    def test_singleton(self) -> None:
        c1 = get_container()
        c2 = get_container()
        assert c1 is c2

    def test_reset(self) -> None:
        c1 = get_container()
        reset_container()
        c2 = get_container()
        assert c1 is not c2
