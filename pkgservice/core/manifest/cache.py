"""本地文件清单缓存

目录结构: <cache_dir>/<资源标识>/<版本>.json
资源标识和版本按 URL 百分号编码为单个路径段，不同的键不会映射到同一文件，
也不会穿越出缓存目录。
缓存没有过期时间，每次成功下载后整体覆盖。
"""

from __future__ import annotations

import logging
from pathlib import Path
from urllib.parse import quote

from pkgservice.utils.yaml_io import atomic_write

logger = logging.getLogger(__name__)


def _safe_key(key: str) -> str:
    encoded = quote(key, safe="")
    # "" / "." / ".." 不能直接作为路径段；quote 的输出中不会出现单独的 "%" 或 "%2E"
    if encoded.strip(".") == "":
        encoded = encoded.replace(".", "%2E") or "%"
    return encoded


class FileManifestCache:
    """满足 ManifestCache 协议的文件系统实现"""

    def __init__(self, cache_dir: str = "") -> None:
        if not cache_dir:
            from pkgservice.core.config import get_config
            cache_dir = get_config().cache_dir
        self.cache_dir = Path(cache_dir)

    def _path(self, resource_arn: str, version: str) -> Path:
        return self.cache_dir / _safe_key(resource_arn) / f"{_safe_key(version)}.json"

    def read(self, resource_arn: str, version: str) -> bytes | None:
        """读取缓存，未命中返回 None"""
        path = self._path(resource_arn, version)
        if not path.is_file():
            return None
        return path.read_bytes()

    def write(self, resource_arn: str, version: str, data: bytes) -> None:
        """整体覆盖写入"""
        path = self._path(resource_arn, version)
        atomic_write(path, data)
        logger.debug("清单已缓存: %s@%s -> %s", resource_arn, version, path)

    def delete(self, resource_arn: str, version: str) -> bool:
        """删除缓存条目"""
        path = self._path(resource_arn, version)
        if path.exists():
            path.unlink()
            return True
        return False
