"""统一异常体系

所有业务异常继承 PackageServiceError，调用方可按类型区分失败阶段。
CLI 层据此输出友好提示，错误消息中携带包名/版本/平台/URL 等诊断信息。
"""

from __future__ import annotations


class PackageServiceError(Exception):
    """包服务基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConfigError(PackageServiceError):
    """配置文件缺失或内容无效"""

    code = "CONFIG_ERROR"


class ValidationError(PackageServiceError):
    """输入数据校验失败"""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, details: list[str] | None = None) -> None:
        super().__init__(message)
        self.details = details or []


class BackendError(PackageServiceError):
    """归档后端（文档服务 / 包元数据服务）调用失败"""

    code = "BACKEND_ERROR"


class DecodeError(PackageServiceError):
    """清单 JSON 格式或结构错误"""

    code = "DECODE_ERROR"


class CacheMissError(PackageServiceError):
    """本地清单缓存未命中"""

    code = "CACHE_MISS"


class CacheWriteError(PackageServiceError):
    """清单写入本地缓存失败"""

    code = "CACHE_WRITE_ERROR"


class NoMatchError(PackageServiceError):
    """清单中没有匹配当前主机 平台/版本/架构 的包"""

    code = "NO_MATCH"

    def __init__(
        self, platform: str, platform_version: str, architecture: str,
        level: str,
    ) -> None:
        super().__init__(
            f"清单中没有匹配的包: platform={platform}, "
            f"version={platform_version}, architecture={architecture} "
            f"(未匹配层级: {level})"
        )
        self.platform = platform
        self.platform_version = platform_version
        self.architecture = architecture
        self.level = level


class PackageFileNotFoundError(PackageServiceError):
    """包变体引用的文件不在清单 files 表中"""

    code = "FILE_NOT_FOUND"


class DownloadError(PackageServiceError):
    """制品下载失败"""

    code = "DOWNLOAD_ERROR"

    def __init__(self, message: str, url: str = "") -> None:
        super().__init__(message)
        self.url = url


class ReportSubmissionError(PackageServiceError):
    """执行结果上报失败"""

    code = "REPORT_ERROR"


class EnvironmentDetectionError(PackageServiceError):
    """主机环境信息采集失败"""

    code = "ENVIRONMENT_ERROR"
