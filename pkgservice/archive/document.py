"""文档归档

清单嵌在包文档的内容中，制品作为文档附件提供。
下载清单时记住文档的 ARN、版本与附件列表，供后续计算资源标识和下载地址。
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from pkgservice.core.config import SERVICE_DOCUMENT
from pkgservice.core.exceptions import BackendError
from pkgservice.core.models import LATEST_VERSION, Manifest, ResolvedFile

if TYPE_CHECKING:
    from pkgservice.core.protocols import ArchiveFacade

logger = logging.getLogger(__name__)


class DocumentArchive:
    """满足 PackageArchive 协议"""

    name = SERVICE_DOCUMENT

    def __init__(self, facade: ArchiveFacade) -> None:
        self.facade = facade
        self._document_name = ""
        self._document_arn = ""
        self._document_version = ""
        self._attachments: dict[str, str] = {}

    def download_manifest_bytes(self, package_name: str, version: str) -> bytes:
        remote_version = None if version == LATEST_VERSION else version
        doc = self.facade.get_document(package_name, remote_version)
        content = doc.get("content")
        if not content:
            raise BackendError(f"包文档没有内容: {package_name}@{version}")

        self._document_name = package_name
        self._document_arn = str(doc.get("arn") or doc.get("name") or package_name)
        self._document_version = str(doc.get("version") or "")
        self._attachments = self._parse_attachments(doc.get("attachments"))
        logger.debug(
            "已获取包文档: %s (%s) 附件 %d 个",
            self._document_arn, self._document_version, len(self._attachments),
        )

        if isinstance(content, str):
            return content.encode("utf-8")
        return json.dumps(content).encode("utf-8")

    @staticmethod
    def _parse_attachments(value: Any) -> dict[str, str]:
        attachments: dict[str, str] = {}
        for item in value or []:
            if isinstance(item, dict) and item.get("name") and item.get("url"):
                attachments[str(item["name"])] = str(item["url"])
        return attachments

    def resource_identifier(self, manifest: Manifest) -> str:
        return self._document_arn or self._document_name

    def resource_version(self, package_name: str, version: str) -> tuple[str, str]:
        if package_name in (self._document_name, self._document_arn) and self._document_arn:
            return self._document_arn, self._document_version or version
        return package_name, version

    def download_location(
        self, file: ResolvedFile, package_name: str, version: str,
    ) -> str:
        if not self._attachments:
            self.download_manifest_bytes(package_name, version)
        url = self._attachments.get(file.name)
        if not url:
            raise BackendError(
                f"包文档 {package_name}@{version} 中没有附件 '{file.name}'"
            )
        return url
