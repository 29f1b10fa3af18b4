"""带校验和验证的 HTTP 下载器

职责:
- 下载到 <download_dir>/<url 摘要>/<文件名>
- 已存在且校验通过的文件直接复用
- 逐个验证 hashlib 支持的校验算法，失败时删除文件
"""

from __future__ import annotations

import hashlib
import logging
import shutil
import urllib.error
import urllib.request
from pathlib import Path

from pkgservice.utils.net import url_file_name, validate_url_scheme

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


def file_digest(path: Path, algorithm: str) -> str:
    digest = hashlib.new(algorithm)
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


def verify_checksums(path: Path, checksums: dict[str, str]) -> None:
    """验证文件校验和

    Raises:
        ValueError: 校验和不匹配，或没有任何可识别的算法
    """
    known = {
        algo.lower(): expected for algo, expected in checksums.items()
        if algo.lower() in hashlib.algorithms_available
    }
    if checksums and not known:
        raise ValueError(f"不支持的校验算法: {sorted(checksums)}")
    for algo, expected in known.items():
        actual = file_digest(path, algo)
        if actual.lower() != expected.lower():
            raise ValueError(
                f"校验和不匹配 {path}: {algo} 期望 {expected}, 实际 {actual}",
            )
    logger.debug("校验和通过: %s (%s)", path.name, ", ".join(known) or "无")


class HttpDownloader:
    """满足 Downloader 协议的默认实现"""

    def __init__(self, download_dir: str = "", timeout: int = 60) -> None:
        if not download_dir:
            from pkgservice.core.config import get_config
            download_dir = get_config().download_dir
        self.download_dir = Path(download_dir)
        self.timeout = timeout

    def _dest(self, url: str) -> Path:
        url_key = hashlib.sha256(url.encode("utf-8")).hexdigest()[:16]
        filename = url_file_name(url)
        if not filename:
            raise ValueError(f"无法从 URL 解析文件名: {url}")
        return self.download_dir / url_key / filename

    def download(self, url: str, checksums: dict[str, str]) -> str:
        """下载并校验，返回本地路径

        Raises:
            ValidationError: URL 协议不允许
            ConnectionError: 网络失败
            ValueError: 校验失败
        """
        validate_url_scheme(url, context="artifact download")
        if not checksums:
            logger.warning("未提供校验和，跳过完整性验证: %s", url)

        dest = self._dest(url)
        if dest.is_file():
            try:
                verify_checksums(dest, checksums)
                logger.info("缓存命中: %s", dest)
                return str(dest)
            except ValueError:
                logger.info("已有文件校验失败，重新下载: %s", dest)
                dest.unlink()

        dest.parent.mkdir(parents=True, exist_ok=True)
        logger.info("下载: %s", url)
        try:
            with urllib.request.urlopen(url, timeout=self.timeout) as resp, \
                    open(dest, "wb") as out:  # nosec B310
                shutil.copyfileobj(resp, out, CHUNK_SIZE)
        except (urllib.error.HTTPError, urllib.error.URLError, OSError) as e:
            dest.unlink(missing_ok=True)
            raise ConnectionError(f"下载失败: {url} - {e}") from e

        try:
            verify_checksums(dest, checksums)
        except ValueError:
            dest.unlink(missing_ok=True)
            raise
        logger.info("已保存: %s", dest)
        return str(dest)
