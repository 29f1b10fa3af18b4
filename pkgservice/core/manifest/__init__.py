"""清单模块

- parser.py: JSON -> Manifest
- cache.py: 本地文件缓存
- store.py: 下载、变更检测与缓存刷新
"""

from pkgservice.core.manifest.cache import FileManifestCache
from pkgservice.core.manifest.parser import parse_manifest
from pkgservice.core.manifest.store import ManifestStore

__all__ = [
    "FileManifestCache",
    "ManifestStore",
    "parse_manifest",
]
