"""pawnpkg 命令行接口

CLI 按领域拆分为子模块，每个模块注册自己的命令到 main group。
"""

from __future__ import annotations

from typing import Any

import click

from pawnpkg import __version__
from pawnpkg.core.exceptions import PawnPkgError
from pawnpkg.utils.logger import setup_logging


class _Group(click.Group):
    """把业务异常转换为 click 的友好错误输出（退出码 1）"""

    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except PawnPkgError as e:
            raise click.ClickException(f"[{e.code}] {e}") from e


@click.group(cls=_Group)
@click.version_option(version=__version__)
@click.option("--config", "config_path", default="pawnpkg.yml", help="配置文件路径")
@click.option("--verbose", "-v", is_flag=True, help="输出调试日志（覆盖 PAWNPKG_LOG_LEVEL）")
def main(config_path: str, verbose: bool) -> None:
    """pawnpkg - Pawn 包清单解析工具"""
    setup_logging(level="DEBUG" if verbose else None)
    from pawnpkg.core.config import init_settings
    init_settings(config_path)


# 注册各领域子命令
from pawnpkg.cli.cmd_package import register as _reg_package  # noqa: E402
from pawnpkg.cli.cmd_remote import register as _reg_remote  # noqa: E402

_reg_package(main)
_reg_remote(main)
