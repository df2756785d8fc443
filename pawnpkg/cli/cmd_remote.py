"""CLI: 远程包定义命令"""

from __future__ import annotations

import click

from pawnpkg.core.manifest import get_codec
from pawnpkg.core.manifest.github import GitHubClient
from pawnpkg.core.manifest.remote import RemotePackageFetcher
from pawnpkg.core.models import DependencyString
from pawnpkg.utils.net import FetchContext


def register(group: click.Group) -> None:
    group.add_command(fetch)


@click.command()
@click.argument("dependency")
@click.option("--timeout", default=None, type=float, help="整条拉取链的超时（秒）")
@click.option("--format", "-f", "fmt", default="json", type=click.Choice(["json", "yaml"]))
def fetch(dependency: str, timeout: float | None, fmt: str) -> None:
    """获取依赖的远程包定义（中心仓库优先，回退到包自身仓库）"""
    from pawnpkg.core.config import get_settings
    cfg = get_settings()
    if timeout is None:
        timeout = cfg.fetch_timeout or None

    meta = DependencyString(dependency).explode()
    fetcher = RemotePackageFetcher(GitHubClient.from_settings())
    pkg = fetcher.fetch(meta, FetchContext(timeout=timeout))
    click.echo(get_codec(fmt).encode(pkg), nl=fmt == "json")
