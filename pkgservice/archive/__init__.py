"""归档后端

- document.py: 清单嵌在包文档中，制品为文档附件
- registry.py: 清单来自包元数据服务
- facade.py: 两者共用的 HTTP 远端调用（也用于结果上报）
"""

from pkgservice.archive.document import DocumentArchive
from pkgservice.archive.facade import HttpFacade
from pkgservice.archive.registry import RegistryArchive

__all__ = [
    "DocumentArchive",
    "HttpFacade",
    "RegistryArchive",
]
