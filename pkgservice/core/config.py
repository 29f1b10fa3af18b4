"""集中配置管理

提供统一的配置入口，支持从 YAML 文件加载 + 编程式覆盖。

随部署变化的字段可由环境变量覆盖文件中的值:
  PKGSERVICE_API_URL / PKGSERVICE_API_TOKEN
"""

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass, field

from pkgservice.core.exceptions import ConfigError
from pkgservice.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)

SERVICE_REGISTRY = "registry"
SERVICE_DOCUMENT = "document"
SERVICE_KINDS = (SERVICE_REGISTRY, SERVICE_DOCUMENT)

_ENV_OVERRIDES = {
    "PKGSERVICE_API_URL": "api_url",
    "PKGSERVICE_API_TOKEN": "api_token",
}


@dataclass
class Config:
    """包服务全局配置"""

    # 归档后端
    service: str = SERVICE_REGISTRY
    api_url: str = ""
    api_token: str = ""
    timeout: int = 60
    preloaded_manifest: str = ""

    # 目录
    cache_dir: str = "data/manifests"
    download_dir: str = "data/downloads"

    # 主机属性覆盖 (platform / instance_id / region ...)
    instance: dict = field(default_factory=dict)

    # 自定义扩展 (放不到字段里的配置项)
    extra: dict = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.service not in SERVICE_KINDS:
            raise ConfigError(
                f"不支持的服务类型: {self.service}，可选: {', '.join(SERVICE_KINDS)}"
            )

    @classmethod
    def from_file(cls, path: str = "configs/default.yml") -> Config:
        """从 YAML 文件加载配置，不存在则返回默认"""
        data = load_yaml(path)
        if not data:
            return cls()
        known = {f.name for f in cls.__dataclass_fields__.values()}
        matched = {k: v for k, v in data.items() if k in known}
        extra = {k: v for k, v in data.items() if k not in known}
        cfg = cls(**matched)
        cfg.extra = extra
        return cfg

    def apply_env(self) -> Config:
        """用非空的环境变量覆盖对应字段"""
        for env_name, attr in _ENV_OVERRIDES.items():
            value = os.getenv(env_name)
            if value:
                setattr(self, attr, value)
        return self

    def to_dict(self) -> dict:
        return asdict(self)


# 全局单例，首次 import 时不加载文件；由 CLI 入口显式初始化
_current: Config | None = None


def get_config() -> Config:
    """获取当前配置（未初始化则返回默认值）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Config()
    return _current


def init_config(path: str = "configs/default.yml") -> Config:
    """从文件初始化全局配置"""
    global _current  # noqa: PLW0603
    _current = Config.from_file(path).apply_env()
    logger.info("配置已加载: %s", path)
    return _current
