"""CLI: 清单、制品与结果上报命令"""

from __future__ import annotations

import click

from pkgservice.cli import _fail, _svc
from pkgservice.core.exceptions import PackageServiceError
from pkgservice.core.models import LATEST_VERSION, PackageResult
from pkgservice.core.trace import Tracer
from pkgservice.utils.yaml_io import load_yaml


def register(group: click.Group) -> None:
    group.add_command(manifest)
    group.add_command(download)
    group.add_command(arn)
    group.add_command(report)


@click.command()
@click.argument("name")
@click.option("--version", default=LATEST_VERSION, show_default=True, help="包版本")
def manifest(name: str, version: str) -> None:
    """下载清单并刷新本地缓存"""
    try:
        resolution = _svc().download_manifest(Tracer(), name, version)
    except PackageServiceError as e:
        raise _fail(e) from e
    state = "未变化" if resolution.is_same_as_cache else "已更新"
    click.echo(f"{resolution.resource_arn} {resolution.manifest.version} ({state})")


@click.command()
@click.argument("name")
@click.option("--version", default=LATEST_VERSION, show_default=True, help="包版本")
def download(name: str, version: str) -> None:
    """下载与当前主机匹配的制品"""
    try:
        path = _svc().download_artifact(Tracer(), name, version)
    except PackageServiceError as e:
        raise _fail(e) from e
    click.echo(f"就绪: {name}@{version} -> {path}")


@click.command()
@click.argument("name")
@click.option("--version", default=LATEST_VERSION, show_default=True, help="包版本")
def arn(name: str, version: str) -> None:
    """显示包的资源标识与版本"""
    try:
        resource, resource_version = _svc().get_package_arn_and_version(name, version)
    except PackageServiceError as e:
        raise _fail(e) from e
    click.echo(f"{resource} {resource_version}")


@click.command()
@click.argument("result_file", type=click.Path(exists=True, dir_okay=False))
def report(result_file: str) -> None:
    """上报执行结果（YAML/JSON 格式的 PackageResult）"""
    try:
        data = load_yaml(result_file)
    except PackageServiceError as e:
        raise _fail(e) from e
    if not data:
        raise click.ClickException(f"结果文件为空或格式无效: {result_file}")
    try:
        result = PackageResult.from_dict(data)
    except (TypeError, ValueError, AttributeError) as e:
        raise click.ClickException(f"结果文件格式无效: {e}") from e
    try:
        _svc().report_result(Tracer(), result)
    except PackageServiceError as e:
        raise _fail(e) from e
    click.echo(f"已上报: {result.package_name}@{result.version} ({result.operation})")
