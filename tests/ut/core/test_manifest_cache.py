"""本地文件清单缓存测试"""

from pathlib import Path

from pkgservice.core.manifest.cache import FileManifestCache


class TestFileManifestCache:
    def test_round_trip_bytes_identical(self, tmp_path: Path) -> None:
        cache = FileManifestCache(cache_dir=str(tmp_path / "cache"))
        data = b'{"version": "1.0", "files": {}}\n'
        cache.write("arn:pkg/agent", "1.0", data)
        assert cache.read("arn:pkg/agent", "1.0") == data

    def test_miss_returns_none(self, tmp_path: Path) -> None:
        cache = FileManifestCache(cache_dir=str(tmp_path / "cache"))
        assert cache.read("agent", "1.0") is None

    def test_overwrite_replaces(self, tmp_path: Path) -> None:
        cache = FileManifestCache(cache_dir=str(tmp_path / "cache"))
        cache.write("agent", "1.0", b"old-and-longer")
        cache.write("agent", "1.0", b"new")
        assert cache.read("agent", "1.0") == b"new"

    def test_versions_isolated(self, tmp_path: Path) -> None:
        cache = FileManifestCache(cache_dir=str(tmp_path / "cache"))
        cache.write("agent", "1.0", b"a")
        cache.write("agent", "2.0", b"b")
        assert cache.read("agent", "1.0") == b"a"
        assert cache.read("agent", "2.0") == b"b"

    def test_key_cannot_escape_cache_dir(self, tmp_path: Path) -> None:
        root = tmp_path / "cache"
        cache = FileManifestCache(cache_dir=str(root))
        cache.write("../../evil", "../1.0", b"x")
        written = [p for p in tmp_path.rglob("*.json")]
        assert len(written) == 1
        assert root in written[0].parents

    def test_delete(self, tmp_path: Path) -> None:
        cache = FileManifestCache(cache_dir=str(tmp_path / "cache"))
        cache.write("agent", "1.0", b"x")
        assert cache.delete("agent", "1.0") is True
        assert cache.read("agent", "1.0") is None
        assert cache.delete("agent", "1.0") is False

    def test_distinct_keys_do_not_collide(self, tmp_path: Path) -> None:
        cache = FileManifestCache(cache_dir=str(tmp_path / "cache"))
        cache.write("pkg:a", "1", b"colon")
        cache.write("pkg/a", "1", b"slash")
        cache.write("pkg_a", "1", b"underscore")
        assert cache.read("pkg:a", "1") == b"colon"
        assert cache.read("pkg/a", "1") == b"slash"
        assert cache.read("pkg_a", "1") == b"underscore"

    def test_dot_segments_stay_inside(self, tmp_path: Path) -> None:
        root = tmp_path / "cache"
        cache = FileManifestCache(cache_dir=str(root))
        cache.write("..", ".", b"dots")
        cache.write("", "", b"empty")
        assert cache.read("..", ".") == b"dots"
        assert cache.read("", "") == b"empty"
        written = list(tmp_path.rglob("*.json"))
        assert len(written) == 2
        assert all(root in p.parents for p in written)
