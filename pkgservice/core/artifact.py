"""制品定位与下载

职责:
- 根据包描述的 file_name 在清单 files 表中定位文件
- 通过归档后端取得下载地址，交给下载器下载并校验

不做重试，也不清理失败的下载目录，这些由下载器或上层负责。
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pkgservice.core.exceptions import (
    DownloadError,
    PackageFileNotFoundError,
)
from pkgservice.core.models import Manifest, PackageVariant, ResolvedFile

if TYPE_CHECKING:
    from pkgservice.core.protocols import Downloader, PackageArchive
    from pkgservice.core.trace import Tracer

logger = logging.getLogger(__name__)


def locate_file(manifest: Manifest, variant: PackageVariant) -> ResolvedFile:
    """返回包描述引用的文件

    Raises:
        PackageFileNotFoundError: files 表中没有该文件
    """
    info = manifest.files.get(variant.file_name)
    if info is None:
        raise PackageFileNotFoundError(
            f"清单中找不到文件 '{variant.file_name}'。"
            f"可用: {sorted(manifest.files)}"
        )
    return ResolvedFile(name=variant.file_name, info=info)


def download_artifact(
    archive: PackageArchive,
    downloader: Downloader,
    resolved_file: ResolvedFile,
    package_name: str,
    version: str,
    tracer: Tracer | None = None,
) -> str:
    """下载制品，返回本地路径

    Raises:
        BackendError: 归档后端无法给出下载地址
        DownloadError: 下载器失败或返回空路径
    """
    section = tracer.begin_section("download file") if tracer else None
    try:
        local_path = _download(archive, downloader, resolved_file, package_name, version)
    except Exception as e:
        if section:
            section.with_error(e).end()
        raise
    if section:
        section.append_info("已下载 %s -> %s", resolved_file.name, local_path).end()
    return local_path


def _download(
    archive: PackageArchive,
    downloader: Downloader,
    resolved_file: ResolvedFile,
    package_name: str,
    version: str,
) -> str:
    source_url = archive.download_location(resolved_file, package_name, version)
    logger.info("下载制品: %s@%s %s <- %s", package_name, version, resolved_file.name, source_url)

    message = f"安装包下载失败: {source_url}"
    try:
        local_path = downloader.download(source_url, dict(resolved_file.info.checksums))
    except Exception as e:
        raise DownloadError(f"{message}, {e}", url=source_url) from e

    if not local_path:
        raise DownloadError(message, url=source_url)
    return local_path
