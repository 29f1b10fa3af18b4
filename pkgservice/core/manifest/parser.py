"""清单解析

将 UTF-8 JSON 解析为 Manifest。未知字段忽略；
packages 任一层或 files 不是 JSON 对象时视为结构错误。
"""

from __future__ import annotations

import json
from typing import Any

from pkgservice.core.exceptions import DecodeError
from pkgservice.core.models import FileInfo, Manifest, PackageVariant


def _as_mapping(value: Any, where: str) -> dict[str, Any]:
    """null 视为空表，其余非对象类型报错"""
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise DecodeError(
            f"清单结构错误: {where} 应为对象，实际为 {type(value).__name__}"
        )
    return value


def _as_str(value: Any, where: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise DecodeError(
            f"清单结构错误: {where} 应为字符串，实际为 {type(value).__name__}"
        )
    return value


def _parse_variant(value: Any, where: str) -> PackageVariant:
    if not isinstance(value, dict):
        raise DecodeError(f"清单结构错误: {where} 应为包描述对象")
    return PackageVariant(file_name=_as_str(value.get("fileName"), f"{where}.fileName"))


def _parse_packages(value: Any) -> dict[str, dict[str, dict[str, PackageVariant]]]:
    packages: dict[str, dict[str, dict[str, PackageVariant]]] = {}
    for platform, versions in _as_mapping(value, "packages").items():
        by_version: dict[str, dict[str, PackageVariant]] = {}
        for version, arches in _as_mapping(versions, f"packages.{platform}").items():
            where = f"packages.{platform}.{version}"
            by_version[version] = {
                arch: _parse_variant(variant, f"{where}.{arch}")
                for arch, variant in _as_mapping(arches, where).items()
            }
        packages[platform] = by_version
    return packages


def _parse_files(value: Any) -> dict[str, FileInfo]:
    files: dict[str, FileInfo] = {}
    for name, info in _as_mapping(value, "files").items():
        info = _as_mapping(info, f"files.{name}")
        checksums = _as_mapping(info.get("checksums"), f"files.{name}.checksums")
        files[name] = FileInfo(checksums={
            algo: _as_str(digest, f"files.{name}.checksums.{algo}")
            for algo, digest in checksums.items()
        })
    return files


def parse_manifest(data: bytes | str) -> Manifest:
    """解析原始清单

    Raises:
        DecodeError: JSON 非法或结构不符
    """
    try:
        raw = json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DecodeError(f"清单解码失败: {e}") from e

    doc = _as_mapping(raw, "清单")
    return Manifest(
        version=_as_str(doc.get("version"), "version"),
        packages=_parse_packages(doc.get("packages")),
        files=_parse_files(doc.get("files")),
    )
