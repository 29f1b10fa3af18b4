"""pkgservice 命令行接口

子模块注册自己的命令到 main group。
"""

import os
from typing import Any

import click

from pkgservice import __version__
from pkgservice.core.config import init_config
from pkgservice.core.exceptions import PackageServiceError
from pkgservice.services.container import get_container, reset_container
from pkgservice.utils.logger import setup_logging_from_env


def _svc() -> Any:
    """获取全局包服务的快捷方式"""
    return get_container().package_service


def _fail(exc: PackageServiceError) -> click.ClickException:
    return click.ClickException(f"[{exc.code}] {exc}")


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config", "config_path",
    default=lambda: os.getenv("PKGSERVICE_CONFIG", "configs/default.yml"),
    help="配置文件路径",
)
def main(config_path: str) -> None:
    """pkgservice - 包清单解析、制品下载与结果上报"""
    setup_logging_from_env()
    try:
        init_config(config_path)
    except PackageServiceError as e:
        raise _fail(e) from e
    reset_container()


# 注册子命令
from pkgservice.cli.cmd_package import register as _reg_package  # noqa: E402

_reg_package(main)
