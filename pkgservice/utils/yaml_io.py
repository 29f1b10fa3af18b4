"""文件读写工具

- load_yaml: 读取配置文件 / 结果文件（JSON 是 YAML 的子集，同样适用）
- atomic_write: 清单缓存等文件的原子替换写入
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml

from pkgservice.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

# 配置 / 结果文件大小上限 (1MB)
MAX_YAML_SIZE = 1024 * 1024


def atomic_write(path: Path, content: str | bytes) -> None:
    """写入同目录临时文件并 fsync，再 os.replace 到目标路径

    读方要么看到旧内容，要么看到完整的新内容。

    Raises:
        OSError: 写入或替换失败（临时文件已清理）
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    data = content.encode("utf-8") if isinstance(content, str) else content
    fd, tmp = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


def load_yaml(path: str | Path) -> dict[str, Any]:
    """读取 YAML/JSON 文件为 dict

    文件不存在或为空时返回空 dict；顶层不是映射时记录警告并返回空 dict。

    Raises:
        ConfigError: 文件过大、无法读取或格式错误
    """
    p = Path(path)
    if not p.exists():
        return {}

    try:
        size = p.stat().st_size
        if size > MAX_YAML_SIZE:
            raise ConfigError(f"文件过大: {p} ({size} 字节，上限 {MAX_YAML_SIZE})")
        result = yaml.safe_load(p.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"YAML 格式错误: {p} - {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"读取文件失败: {p} - {e}") from e

    if result is None:
        return {}
    if not isinstance(result, dict):
        logger.warning("%s 顶层不是映射 (%s)，按空内容处理", p, type(result).__name__)
        return {}
    return result
