"""包服务数据模型

数据类:
- Manifest / PackageVariant / FileInfo: 清单结构（由 manifest.parser 从 JSON 构造）
- ResolvedFile: 绑定文件名后的 files 表条目
- ResultStep / PackageResult: 安装/升级/卸载执行结果
- HostEnvironment: 主机环境属性
- ManifestResolution: 清单解析结果（含缓存比对标记）

dataclass 的 __eq__ 逐字段比较，嵌套 dict 同样逐层比较，
清单变更检测直接依赖这一深度相等语义。
"""

from __future__ import annotations

from dataclasses import dataclass, field

# 选择器通配键：当前层级没有精确键时回退到该键
WILDCARD_KEY = "_any"

# "最新版本" 哨兵值
LATEST_VERSION = "latest"


@dataclass
class PackageVariant:
    """某个 平台/版本/架构 对应的包描述"""

    file_name: str = ""


@dataclass
class FileInfo:
    """files 表中的单个文件信息"""

    checksums: dict[str, str] = field(default_factory=dict)  # 算法名 -> 十六进制摘要


@dataclass
class Manifest:
    """包清单

    packages 固定三层: platform -> platform_version -> architecture -> PackageVariant
    """

    version: str = ""
    packages: dict[str, dict[str, dict[str, PackageVariant]]] = field(default_factory=dict)
    files: dict[str, FileInfo] = field(default_factory=dict)


@dataclass
class ResolvedFile:
    """与文件名绑定的 FileInfo"""

    name: str
    info: FileInfo


@dataclass
class ResultStep:
    """执行过程中的单个步骤"""

    operation: str
    exitcode: int
    timing: int  # 纳秒时间戳


@dataclass
class PackageResult:
    """一次 安装/升级/卸载 的执行结果"""

    package_name: str
    version: str
    operation: str
    exitcode: int
    timing: int  # 开始时间，纳秒时间戳
    previous_version: str = ""
    steps: list[ResultStep] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> PackageResult:
        return cls(
            package_name=str(data.get("package_name", "")),
            version=str(data.get("version", "")),
            operation=str(data.get("operation", "")),
            exitcode=int(data.get("exitcode", 0)),
            timing=int(data.get("timing", 0)),
            previous_version=str(data.get("previous_version", "") or ""),
            steps=[
                ResultStep(
                    operation=str(s.get("operation", "")),
                    exitcode=int(s.get("exitcode", 0)),
                    timing=int(s.get("timing", 0)),
                )
                for s in data.get("steps") or []
            ],
        )


@dataclass
class HostEnvironment:
    """主机环境属性，采集失败时各字段保持空串"""

    platform: str = ""
    platform_version: str = ""
    architecture: str = ""
    instance_id: str = ""
    instance_type: str = ""
    region: str = ""
    availability_zone: str = ""


@dataclass
class ManifestResolution:
    """resolve_manifest 的返回值"""

    manifest: Manifest
    resource_arn: str
    is_same_as_cache: bool = False
