"""URL 工具测试"""

import pytest

from pkgservice.core.exceptions import ValidationError
from pkgservice.utils.net import join_api_url, url_file_name, validate_url_scheme


class TestValidateUrlScheme:
    @pytest.mark.parametrize("url", ["http://example.com/api", "https://example.com/api"])
    def test_http_ok(self, url: str) -> None:
        validate_url_scheme(url)

    @pytest.mark.parametrize("url", ["file:///etc/passwd", "ftp://evil.com/payload", "/local/path"])
    def test_rejected(self, url: str) -> None:
        with pytest.raises(ValidationError, match="不允许的 URL 协议"):
            validate_url_scheme(url)

    def test_context_in_error(self) -> None:
        with pytest.raises(ValidationError, match="artifact download"):
            validate_url_scheme("file:///x", context="artifact download")


class TestJoinApiUrl:
    def test_segments_quoted(self) -> None:
        url = join_api_url("https://h/api/", "packages", "a b/c", "manifest")
        assert url == "https://h/api/packages/a%20b%2Fc/manifest"

    def test_empty_query_dropped(self) -> None:
        assert join_api_url("https://h", "documents", "x", query={"version": None}) == (
            "https://h/documents/x"
        )
        assert join_api_url("https://h", "documents", "x", query={"version": "2"}) == (
            "https://h/documents/x?version=2"
        )


@pytest.mark.parametrize("url,name", [
    ("https://cdn.example.com/a/pkg.zip", "pkg.zip"),
    ("https://cdn.example.com/a/my%20pkg.zip?sig=1", "my pkg.zip"),
    ("https://cdn.example.com/", ""),
])
def test_url_file_name(url: str, name: str) -> None:
    assert url_file_name(url) == name
