"""CLI: 本地包定义命令"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import click

from pawnpkg.core.manifest import (
    get_cached_package,
    get_codec,
    package_from_dir,
    write_definition,
)
from pawnpkg.core.models import DependencyString


def register(group: click.Group) -> None:
    group.add_command(show)
    group.add_command(validate)
    group.add_command(build_config)
    group.add_command(runtime_config)
    group.add_command(convert)


def _echo_json(data: dict[str, Any]) -> None:
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))


@click.command()
@click.argument("directory", default=".", type=click.Path(file_okay=False))
@click.option("--cached", "dependency", default=None, metavar="DEP",
              help="改为显示缓存目录中该依赖的包定义")
def show(directory: str, dependency: str | None) -> None:
    """显示目录中的包定义"""
    if dependency:
        from pawnpkg.core.config import get_settings
        meta = DependencyString(dependency).explode()
        pkg = get_cached_package(meta, get_settings().cache_path)
    else:
        pkg = package_from_dir(directory)
    if not pkg.format:
        click.echo("未找到包定义文件 (pawn.json / pawn.yaml)")
        return
    _echo_json(pkg.to_dict())


@click.command()
@click.argument("directory", default=".", type=click.Path(file_okay=False))
def validate(directory: str) -> None:
    """校验包定义"""
    pkg = package_from_dir(directory)
    pkg.validate()
    click.echo("包定义有效")


@click.command(name="build-config")
@click.argument("directory", default=".", type=click.Path(file_okay=False))
@click.option("--name", "-n", default="", help="构建配置名（默认第一个）")
def build_config(directory: str, name: str) -> None:
    """显示实际使用的构建配置"""
    pkg = package_from_dir(directory)
    _echo_json(pkg.get_build_config(name).to_dict())


@click.command(name="runtime-config")
@click.argument("directory", default=".", type=click.Path(file_okay=False))
@click.option("--name", "-n", default="", help="运行配置名（默认第一个）")
def runtime_config(directory: str, name: str) -> None:
    """显示实际使用的运行配置"""
    pkg = package_from_dir(directory)
    _echo_json(pkg.get_runtime_config(name).to_dict())


@click.command()
@click.argument("directory", default=".", type=click.Path(file_okay=False))
@click.option("--to", "fmt", required=True, type=click.Choice(["json", "yaml"]))
def convert(directory: str, fmt: str) -> None:
    """将包定义改写为另一种格式，并删除原文件"""
    pkg = package_from_dir(directory)
    if not pkg.format:
        raise click.ClickException("未找到包定义文件 (pawn.json / pawn.yaml)")
    if pkg.format == fmt:
        click.echo(f"包定义已是 {fmt} 格式")
        return
    old = Path(directory) / get_codec(pkg.format).filename
    pkg.format = fmt
    path = write_definition(pkg)
    old.unlink()
    click.echo(f"已转换: {old} -> {path}")
