"""URL 工具

- 远端地址只允许 http/https，拒绝 file:// 等协议
- API 地址按路径段逐段转义，空的查询参数直接省略
- 从制品下载地址中取出文件名
"""

from __future__ import annotations

from urllib.parse import quote, unquote, urlencode, urlparse

from pkgservice.core.exceptions import ValidationError

_ALLOWED_SCHEMES = frozenset(("http", "https"))


def validate_url_scheme(url: str, *, context: str = "") -> None:
    """校验 URL 仅使用 http/https

    Raises:
        ValidationError: URL scheme 不在白名单内
    """
    scheme = urlparse(url).scheme
    if scheme not in _ALLOWED_SCHEMES:
        label = f" ({context})" if context else ""
        raise ValidationError(
            f"不允许的 URL 协议 '{scheme}'{label}，远端地址只支持 http/https: {url}"
        )


def join_api_url(base: str, *segments: str, query: dict[str, str | None] | None = None) -> str:
    """拼接 API 地址

    join_api_url("https://h/api/", "packages", "a b", "manifest", query={"version": None})
    -> "https://h/api/packages/a%20b/manifest"
    """
    path = "/".join(quote(str(s), safe="") for s in segments)
    url = f"{base.rstrip('/')}/{path}"
    params = {k: v for k, v in (query or {}).items() if v}
    if params:
        url = f"{url}?{urlencode(params)}"
    return url


def url_file_name(url: str) -> str:
    """URL 路径最后一段（已解码），没有则返回空串"""
    return unquote(urlparse(url).path.rstrip("/").split("/")[-1])
