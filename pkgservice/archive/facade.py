"""HTTP 远端调用

同时满足 ArchiveFacade 与 ReportTransport 协议：
  - GET  {api_url}/packages/{name}/manifest?version=
  - GET  {api_url}/packages/{name}/versions/{version}/files/{file}
  - GET  {api_url}/documents/{name}?version=
  - POST {api_url}/results

所有网络、HTTP 状态、响应格式错误统一抛出 BackendError。
"""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.request
from typing import Any

from pkgservice.core.exceptions import BackendError
from pkgservice.utils.net import join_api_url, validate_url_scheme

logger = logging.getLogger(__name__)


class HttpFacade:
    """基于 urllib 的 JSON API 客户端"""

    def __init__(self, api_url: str, api_token: str = "", timeout: int = 60) -> None:
        validate_url_scheme(api_url, context="facade api_url")
        self.api_url = api_url.rstrip("/")
        self.api_token = api_token
        self.timeout = timeout

    def _request(
        self, method: str, url: str, body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        data = None
        headers = {"Accept": "application/json"}
        if body is not None:
            data = json.dumps(body, ensure_ascii=False).encode("utf-8")
            headers["Content-Type"] = "application/json"
        req = urllib.request.Request(url, data=data, method=method, headers=headers)
        if self.api_token:
            req.add_header("Authorization", f"Bearer {self.api_token}")

        logger.debug("%s %s", method, url)
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:  # nosec B310
                raw = resp.read()
        except urllib.error.HTTPError as e:
            raise BackendError(f"HTTP 错误 {e.code}: {e.reason} ({method} {url})") from e
        except urllib.error.URLError as e:
            raise BackendError(f"网络错误: {e.reason} ({method} {url})") from e
        except OSError as e:
            raise BackendError(f"请求失败: {e} ({method} {url})") from e

        if not raw:
            return {}
        try:
            result = json.loads(raw.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise BackendError(f"响应格式错误: {e} ({method} {url})") from e
        if not isinstance(result, dict):
            raise BackendError(f"响应不是 JSON 对象 ({method} {url})")
        return result

    # ---- ArchiveFacade ----

    def get_manifest(self, package_name: str, version: str | None) -> dict[str, Any]:
        url = join_api_url(
            self.api_url, "packages", package_name, "manifest", query={"version": version},
        )
        return self._request("GET", url)

    def get_document(self, name: str, version: str | None) -> dict[str, Any]:
        url = join_api_url(self.api_url, "documents", name, query={"version": version})
        return self._request("GET", url)

    def get_package_url(self, package_name: str, version: str, file_name: str) -> str:
        url = join_api_url(
            self.api_url, "packages", package_name, "versions", version, "files", file_name,
        )
        result = self._request("GET", url)
        location = result.get("url", "")
        if not location:
            raise BackendError(
                f"未返回下载地址: {package_name}@{version} {file_name}"
            )
        return str(location)

    # ---- ReportTransport ----

    def put_package_result(self, payload: dict[str, Any]) -> dict[str, Any]:
        return self._request("POST", join_api_url(self.api_url, "results"), body=payload)
