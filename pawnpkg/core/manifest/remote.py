"""远程清单拉取

顺序固定、逐个尝试、不重试:
  1. 中心仓库 sampctl/plugins 中的 <user>-<repo>.json（可先行修正第三方插件的元数据）
  2. 包自身仓库默认分支上的 pawn.json
  3. 同一分支上的 pawn.yaml

所有请求共享一个 FetchContext，一个超时即可约束整条回退链。
"""

from __future__ import annotations

import logging

from pawnpkg.core.exceptions import ManifestDecodeError, PawnPkgError, RemoteFetchError
from pawnpkg.core.manifest.codec import PROBE_ORDER, get_codec
from pawnpkg.core.models import DependencyMeta, Package
from pawnpkg.core.protocols import RepositoryHost
from pawnpkg.utils.net import FetchContext, http_get

logger = logging.getLogger(__name__)


class RemotePackageFetcher:
    """按"中心仓库 → 包自身仓库"的顺序获取依赖的包定义"""

    def __init__(
        self,
        host: RepositoryHost,
        raw_content_url: str = "",
        central_repo: str = "",
        central_branch: str = "",
    ) -> None:
        if not (raw_content_url and central_repo and central_branch):
            from pawnpkg.core.config import get_settings
            cfg = get_settings()
            raw_content_url = raw_content_url or cfg.raw_content_url
            central_repo = central_repo or cfg.central_repo
            central_branch = central_branch or cfg.central_branch
        self.host = host
        self.raw_content_url = raw_content_url.rstrip("/")
        self.central_repo = central_repo.strip("/")
        self.central_branch = central_branch

    def central_url(self, meta: DependencyMeta) -> str:
        return (
            f"{self.raw_content_url}/{self.central_repo}/{self.central_branch}/"
            f"{meta.user}-{meta.repo}.json"
        )

    def repo_url(self, meta: DependencyMeta, branch: str, filename: str) -> str:
        return f"{self.raw_content_url}/{meta.user}/{meta.repo}/{branch}/{filename}"

    def fetch(self, meta: DependencyMeta, ctx: FetchContext | None = None) -> Package:
        """获取依赖的包定义

        中心仓库失败（任何原因）后回退到包自身仓库；
        取消或超时不触发回退，直接抛出。

        Raises:
            RemoteFetchError: 所有来源均失败、请求被取消或超时
        """
        ctx = ctx or FetchContext()
        try:
            pkg = self.from_central(meta, ctx)
        except (PawnPkgError, UnicodeDecodeError) as e:
            ctx.check(str(meta))
            logger.debug(
                "中心仓库没有 %s，回退到包自身仓库: %s", meta, e,
                extra={"dependency": meta},
            )
            pkg = self.from_repo(meta, ctx)
        return self._stamp(pkg, meta)

    def from_central(self, meta: DependencyMeta, ctx: FetchContext | None = None) -> Package:
        """从中心仓库获取（仅 JSON）"""
        url = self.central_url(meta)
        resp = http_get(url, ctx)
        if not resp.ok:
            raise RemoteFetchError(
                f"plugin '{meta}' does not exist in official repo (HTTP {resp.status})"
            )
        return get_codec("json").decode(resp.text(), source=url)

    def from_repo(self, meta: DependencyMeta, ctx: FetchContext | None = None) -> Package:
        """从包自身仓库默认分支获取，pawn.json 优先，其次 pawn.yaml"""
        ctx = ctx or FetchContext()
        branch = self.host.get_default_branch(meta.user, meta.repo, ctx)

        for fmt in PROBE_ORDER:
            codec = get_codec(fmt)
            url = self.repo_url(meta, branch, codec.filename)
            resp = http_get(url, ctx)
            if resp.ok:
                try:
                    return codec.decode(resp.text(), source=url)
                except (ManifestDecodeError, UnicodeDecodeError) as e:
                    raise RemoteFetchError(
                        f"failed to decode package '{meta}': {e}"
                    ) from e
            logger.debug("%s 不存在 (HTTP %d)", url, resp.status)

        raise RemoteFetchError(
            f"package '{meta}' does not point to a valid remote package"
        )

    @staticmethod
    def _stamp(pkg: Package, meta: DependencyMeta) -> Package:
        # 清单里可以省略 user/repo，以请求的依赖为准补齐
        if not pkg.meta.user or not pkg.meta.repo:
            pkg.meta = meta
        logger.info(
            "已获取远程包定义: %s (%s)", meta, pkg.format,
            extra={"dependency": meta},
        )
        return pkg


def get_remote_package(
    host: RepositoryHost,
    meta: DependencyMeta,
    ctx: FetchContext | None = None,
) -> Package:
    """函数式入口，等价于 RemotePackageFetcher(host).fetch(meta, ctx)"""
    return RemotePackageFetcher(host).fetch(meta, ctx)
