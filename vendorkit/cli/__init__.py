"""vendorkit 命令行接口

CLI 按领域拆分为子模块，每个模块注册自己的命令到 main group。
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager

import click

from vendorkit import __version__
from vendorkit.core.config import DEFAULT_CONFIG_FILE, init_config
from vendorkit.core.exceptions import VendorKitError
from vendorkit.services.container import ServiceContainer, get_container, reset_container
from vendorkit.utils.logger import setup_logging


def _svc() -> ServiceContainer:
    """获取全局服务容器的快捷方式"""
    return get_container()


@contextmanager
def handle_errors() -> Iterator[None]:
    """把业务异常转换为 click 错误输出（退出码 1）"""
    try:
        yield
    except VendorKitError as e:
        raise click.ClickException(f"[{e.code}] {e}") from e


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config", "-c", "config_path", default=DEFAULT_CONFIG_FILE,
    help="配置文件路径（不存在时使用默认配置）",
)
def main(config_path: str) -> None:
    """vendorkit - 包清单与依赖拉取工具"""
    setup_logging(
        level=os.getenv("VENDORKIT_LOG_LEVEL", "INFO"),
        json_output=os.getenv("VENDORKIT_LOG_JSON", "") == "1",
    )
    with handle_errors():
        init_config(config_path)
    reset_container()


# 注册各领域子命令
from vendorkit.cli.cmd_deps import register as _reg_deps  # noqa: E402
from vendorkit.cli.cmd_vendor import register as _reg_vendor  # noqa: E402

_reg_deps(main)
_reg_vendor(main)
