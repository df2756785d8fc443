"""协议定义

远程拉取器只依赖代码托管平台的抽象，测试可用任意实现替换。
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from pawnpkg.utils.net import FetchContext


class RepositoryHost(Protocol):
    """代码托管平台客户端协议"""

    def get_default_branch(
        self, user: str, repo: str, ctx: FetchContext | None = None,
    ) -> str:
        """返回仓库默认分支名

        Raises:
            RemoteFetchError: 仓库不存在或请求失败
        """
        ...
