"""统一异常体系

所有业务异常继承 PawnPkgError，替代散落的 ValueError / RuntimeError。
CLI 层可据此输出友好提示。
"""

from __future__ import annotations


class PawnPkgError(Exception):
    """pawnpkg 基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConfigError(PawnPkgError):
    """配置文件缺失或内容无效"""

    code = "CONFIG_ERROR"


class ValidationError(PawnPkgError):
    """输入数据校验失败"""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, details: list[str] | None = None) -> None:
        super().__init__(message)
        self.details = details or []


class ManifestDecodeError(PawnPkgError):
    """清单文件格式错误或包含未知字段"""

    code = "MANIFEST_DECODE_ERROR"

    def __init__(self, message: str, source: str = "") -> None:
        super().__init__(f"{message} ({source})" if source else message)
        self.source = source


class RemoteFetchError(PawnPkgError):
    """远程清单拉取失败（所有回退来源均失败、网络错误、超时或被取消）"""

    code = "REMOTE_FETCH_ERROR"


class ConfigNotFoundError(PawnPkgError):
    """指定名称的运行配置不存在"""

    code = "CONFIG_NOT_FOUND"


class WriteError(PawnPkgError):
    """清单写回失败"""

    code = "WRITE_ERROR"
