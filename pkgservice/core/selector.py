"""平台选择器解析

在清单的 packages 三层选择树中，按 平台 -> 平台版本 -> 架构 逐层查找。
每层先查精确键，没有则回退到通配键 "_any"，仍没有则失败。

每层一旦选定键就不再回溯：例如平台精确命中但其下没有匹配的版本时，
即使 "_any" 平台下存在匹配版本，也不会改走 "_any" 分支。
"""

from __future__ import annotations

import logging
from typing import TypeVar

from pkgservice.core.exceptions import NoMatchError
from pkgservice.core.models import WILDCARD_KEY, Manifest, PackageVariant

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _match_key(key: str, table: dict[str, T]) -> str | None:
    if key in table:
        return key
    if WILDCARD_KEY in table:
        return WILDCARD_KEY
    return None


def match_platform(
    platform: str, packages: dict[str, dict[str, dict[str, PackageVariant]]],
) -> str | None:
    return _match_key(platform, packages)


def match_version(
    platform_version: str, versions: dict[str, dict[str, PackageVariant]],
) -> str | None:
    return _match_key(platform_version, versions)


def match_architecture(
    architecture: str, arches: dict[str, PackageVariant],
) -> str | None:
    return _match_key(architecture, arches)


def resolve_variant(
    manifest: Manifest,
    platform: str,
    platform_version: str,
    architecture: str,
) -> PackageVariant:
    """返回与主机 平台/版本/架构 匹配的包描述

    Raises:
        NoMatchError: 某一层既无精确键也无通配键
    """
    key_platform = match_platform(platform, manifest.packages)
    if key_platform is None:
        raise NoMatchError(platform, platform_version, architecture, "platform")

    versions = manifest.packages[key_platform]
    key_version = match_version(platform_version, versions)
    if key_version is None:
        raise NoMatchError(platform, platform_version, architecture, "version")

    arches = versions[key_version]
    key_arch = match_architecture(architecture, arches)
    if key_arch is None:
        raise NoMatchError(platform, platform_version, architecture, "architecture")

    logger.debug(
        "选择器命中: %s/%s/%s -> %s/%s/%s",
        platform, platform_version, architecture,
        key_platform, key_version, key_arch,
    )
    return arches[key_arch]
