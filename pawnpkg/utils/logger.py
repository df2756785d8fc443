"""pawnpkg 日志配置

普通文本与结构化 JSON 两种输出格式，CLI 入口调用 setup_logging 一次即可。
日志级别与格式优先取参数，其次取环境变量:
  - PAWNPKG_LOG_LEVEL: DEBUG / INFO / WARNING / ERROR，默认 WARNING
  - PAWNPKG_LOG_JSON: 1 / true / yes 时输出 JSON 行
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone

ENV_LEVEL = "PAWNPKG_LOG_LEVEL"
ENV_JSON = "PAWNPKG_LOG_JSON"
DEFAULT_LEVEL = "WARNING"

_TEXT_FORMAT = "%(asctime)s [%(levelname)-7s] %(name)s: %(message)s"
_TRUTHY = frozenset(("1", "true", "yes", "on"))


class JSONFormatter(logging.Formatter):
    """单行 JSON 日志格式器，便于 CI 流水线消费"""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        # 远程拉取日志常带依赖名，单独成列便于过滤
        dependency = getattr(record, "dependency", None)
        if dependency:
            entry["dependency"] = str(dependency)
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def resolve_level(level: str | None = None) -> int:
    """参数 > PAWNPKG_LOG_LEVEL > WARNING；无法识别的名称回落到 WARNING"""
    name = (level or os.getenv(ENV_LEVEL) or DEFAULT_LEVEL).upper()
    value = logging.getLevelName(name)
    return value if isinstance(value, int) else logging.WARNING


def setup_logging(level: str | None = None, json_output: bool | None = None) -> None:
    """配置根日志器，输出到 stderr（stdout 留给命令结果）

    重复调用会先清理已有 handlers，避免日志重复。
    """
    if json_output is None:
        json_output = os.getenv(ENV_JSON, "").strip().lower() in _TRUTHY

    reset_logging()
    root = logging.getLogger()
    root.setLevel(resolve_level(level))

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if json_output else logging.Formatter(_TEXT_FORMAT))
    root.addHandler(handler)


def reset_logging() -> None:
    """移除根日志器上的全部 handlers"""
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
