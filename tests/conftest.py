"""测试共享 fixture: 示例清单 + 固定时钟 + 内存缓存"""

from __future__ import annotations

import json

import pytest

SAMPLE_MANIFEST = {
    "version": "1.2.0",
    "packages": {
        "linux": {
            "_any": {
                "x86_64": {"fileName": "pkg.zip"},
            },
        },
    },
    "files": {
        "pkg.zip": {"checksums": {"sha256": "abc"}},
    },
}


class FakeClock:
    """满足 NanoTime 协议，按需推进"""

    def __init__(self, now: int = 0) -> None:
        self.now = now

    def now_unix_nano(self) -> int:
        return self.now


class MemoryCache:
    """满足 ManifestCache 协议的内存实现"""

    def __init__(self) -> None:
        self.entries: dict[tuple[str, str], bytes] = {}
        self.writes: list[tuple[str, str]] = []

    def read(self, resource_arn: str, version: str) -> bytes | None:
        return self.entries.get((resource_arn, version))

    def write(self, resource_arn: str, version: str, data: bytes) -> None:
        self.writes.append((resource_arn, version))
        self.entries[(resource_arn, version)] = data


@pytest.fixture()
def manifest_bytes() -> bytes:
    return json.dumps(SAMPLE_MANIFEST).encode("utf-8")


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(1_000_000_000)


@pytest.fixture()
def memory_cache() -> MemoryCache:
    return MemoryCache()
