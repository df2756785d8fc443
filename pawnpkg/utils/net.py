"""网络工具: URL 校验、共享超时/取消上下文、阻塞式 GET"""

from __future__ import annotations

import http.client
import logging
import threading
import time
import urllib.error
import urllib.request
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlparse

from pawnpkg.core.exceptions import RemoteFetchError, ValidationError

logger = logging.getLogger(__name__)

_ALLOWED_SCHEMES = frozenset(("http", "https"))

# 未指定上下文时单次请求的超时（秒）
DEFAULT_TIMEOUT = 30.0

# 响应体按块读取，单个清单不应超过 MAX_BODY_SIZE
_CHUNK_SIZE = 64 * 1024
MAX_BODY_SIZE = 10 * 1024 * 1024


def validate_url_scheme(url: str, *, context: str = "") -> None:
    """校验 URL 仅使用 http/https，防止 file:// 等非预期协议访问

    Raises:
        ValidationError: URL scheme 不在白名单内
    """
    parsed = urlparse(url)
    if parsed.scheme not in _ALLOWED_SCHEMES:
        label = f" ({context})" if context else ""
        raise ValidationError(
            f"不允许的 URL 协议 '{parsed.scheme}'{label}，仅支持 http/https: {url}"
        )


@dataclass
class FetchContext:
    """一次拉取流程共享的截止时间与取消标记

    同一个上下文依次传给中心仓库请求、默认分支查询和两次 raw 请求，
    调用方因此可以用一个超时约束整条回退链。
    """

    timeout: float | None = None
    _deadline: float | None = field(default=None, init=False, repr=False)
    _cancelled: threading.Event = field(
        default_factory=threading.Event, init=False, repr=False,
    )

    def __post_init__(self) -> None:
        if self.timeout is not None:
            self._deadline = time.monotonic() + self.timeout

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def remaining(self) -> float | None:
        """剩余秒数；无截止时间返回 None"""
        if self._deadline is None:
            return None
        return self._deadline - time.monotonic()

    def check(self, what: str = "") -> float:
        """请求前检查上下文，返回本次请求可用的 socket 超时

        Raises:
            RemoteFetchError: 已取消或已超时
        """
        label = f": {what}" if what else ""
        if self.cancelled:
            raise RemoteFetchError(f"请求已取消{label}")
        left = self.remaining()
        if left is None:
            return DEFAULT_TIMEOUT
        if left <= 0:
            raise RemoteFetchError(f"请求超时{label}")
        return left


@dataclass
class HttpResponse:
    """HTTP 响应（与 urllib 解耦）"""

    status: int
    body: bytes = b""

    @property
    def ok(self) -> bool:
        return self.status == 200

    def text(self) -> str:
        return self.body.decode("utf-8")


def http_get(
    url: str,
    ctx: FetchContext | None = None,
    headers: dict[str, str] | None = None,
) -> HttpResponse:
    """阻塞式 GET 请求

    非 2xx 状态码不抛异常，以 HttpResponse.status 返回；
    网络层失败、响应体不完整、取消或超时才抛 RemoteFetchError。
    响应体分块读取，每块之后重新检查上下文，慢速响应同样受截止时间约束。
    """
    validate_url_scheme(url, context="http get")
    ctx = ctx or FetchContext()
    timeout = ctx.check(url)

    req = urllib.request.Request(url)
    for key, value in (headers or {}).items():
        req.add_header(key, value)

    logger.debug("GET %s (timeout=%.1fs)", url, timeout)
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:  # nosec B310
            return HttpResponse(status=resp.status, body=_read_body(resp, url, ctx))
    except urllib.error.HTTPError as e:
        return HttpResponse(status=e.code)
    except (urllib.error.URLError, http.client.HTTPException, OSError) as e:
        raise RemoteFetchError(f"请求失败: {url} - {e}") from e


def _read_body(resp: Any, url: str, ctx: FetchContext) -> bytes:
    chunks: list[bytes] = []
    received = 0
    while True:
        chunk = resp.read(_CHUNK_SIZE)
        if not chunk:
            break
        chunks.append(chunk)
        received += len(chunk)
        if received > MAX_BODY_SIZE:
            raise RemoteFetchError(f"响应过大: {url} (超过 {MAX_BODY_SIZE} 字节)")
        ctx.check(url)

    # 连接提前关闭时分块读取只返回短数据，不会抛 IncompleteRead
    length = resp.headers.get("Content-Length")
    if length and length.isdigit() and received < int(length):
        raise RemoteFetchError(f"响应不完整: {url} ({received}/{length} 字节)")
    return b"".join(chunks)
