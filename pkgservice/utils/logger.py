"""pkgservice 日志配置

支持普通文本和结构化 JSON 两种输出格式。
级别与格式可由环境变量 PKGSERVICE_LOG_LEVEL / PKGSERVICE_LOG_JSON 控制。
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone

ENV_LOG_LEVEL = "PKGSERVICE_LOG_LEVEL"
ENV_LOG_JSON = "PKGSERVICE_LOG_JSON"

# 通过 logger.xxx(..., extra={...}) 附带、需要写入 JSON 的上下文字段
CONTEXT_FIELDS = ("operation", "package", "version", "exitcode")


class JSONFormatter(logging.Formatter):
    """结构化 JSON 日志格式器，便于日志采集端消费

    输出格式:
        {
            "timestamp": "2024-01-01T12:00:00+00:00",
            "level": "INFO",
            "logger": "pkgservice.core.trace",
            "message": "[download manifest] ...",
            "module": "trace",
            "function": "append_info",
            "line": 42,
            "operation": "download manifest" (仅在 extra 中提供时),
            "exception": "traceback..." (仅在有异常时)
        }
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            # record.created 是事件发生时间，而非格式化时间
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                log_entry[name] = value
        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", json_output: bool = False) -> None:
    """配置根日志器，输出到 stderr，已有 handlers 会被替换

    参数:
        level: 日志级别字符串（DEBUG, INFO, WARNING, ERROR, CRITICAL）
        json_output: 为 True 时使用 JSON 格式，否则使用人类可读格式
    """
    root = logging.getLogger()

    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()

    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stderr)

    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        fmt = "%(asctime)s [%(levelname)-7s] %(name)s: %(message)s"
        handler.setFormatter(logging.Formatter(fmt))

    root.addHandler(handler)


def setup_logging_from_env(default_level: str = "INFO") -> None:
    """按环境变量配置日志，PKGSERVICE_LOG_JSON 取 1/true/yes 时输出 JSON"""
    json_flag = os.getenv(ENV_LOG_JSON, "").strip().lower()
    setup_logging(
        level=os.getenv(ENV_LOG_LEVEL, default_level),
        json_output=json_flag in ("1", "true", "yes"),
    )


def reset_logging() -> None:
    """重置根日志器配置，常用于测试环境"""
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
