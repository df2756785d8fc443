"""GitHub REST API 客户端（只实现拉取清单所需的默认分支查询）"""

from __future__ import annotations

import json
import logging

from pawnpkg.core.exceptions import RemoteFetchError
from pawnpkg.utils.net import FetchContext, http_get

logger = logging.getLogger(__name__)


class GitHubClient:
    """满足 RepositoryHost 协议的 GitHub 客户端"""

    def __init__(self, token: str = "", api_url: str = "https://api.github.com") -> None:
        self.token = token
        self.api_url = api_url.rstrip("/")

    @classmethod
    def from_settings(cls) -> GitHubClient:
        from pawnpkg.core.config import get_settings
        cfg = get_settings()
        return cls(token=cfg.github_token, api_url=cfg.github_api_url)

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/vnd.github+json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def get_default_branch(
        self, user: str, repo: str, ctx: FetchContext | None = None,
    ) -> str:
        url = f"{self.api_url}/repos/{user}/{repo}"
        resp = http_get(url, ctx, headers=self._headers())
        if not resp.ok:
            raise RemoteFetchError(
                f"查询仓库 {user}/{repo} 失败: HTTP {resp.status}"
            )
        try:
            branch = json.loads(resp.text()).get("default_branch")
        except (ValueError, AttributeError) as e:
            raise RemoteFetchError(f"仓库 {user}/{repo} 的 API 响应无法解析") from e
        if not branch or not isinstance(branch, str):
            raise RemoteFetchError(f"仓库 {user}/{repo} 没有默认分支")
        logger.debug("%s/%s 默认分支: %s", user, repo, branch)
        return branch
