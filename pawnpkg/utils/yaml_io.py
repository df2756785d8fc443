"""YAML 与文件写入工具

集中管理 YAML 的读取/序列化，以及清单文件的原子写入。
统一 encoding="utf-8"、空值保护、目录自动创建。
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

# 清单/配置文件大小上限 (10MB)
MAX_YAML_SIZE = 10 * 1024 * 1024


def atomic_write(path: Path, content: str, mode: int | None = None) -> None:
    """原子写入文件：先写同目录临时文件再 rename

    参数:
        path: 目标文件路径
        content: 要写入的文本
        mode: 写入完成后设置的文件权限，None 表示保持 mkstemp 的默认值

    异常:
        OSError: 文件写入、改权限或移动失败
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=str(path.parent), suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        if mode is not None:
            os.chmod(tmp, mode)
        os.replace(tmp, str(path))
    except Exception:
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise


def load_yaml(path: str | Path) -> dict[str, Any]:
    """安全读取 YAML 配置文件

    返回:
        dict: 解析后的字典。文件不存在、为空或顶层不是映射时返回空字典

    异常:
        yaml.YAMLError: YAML 格式错误
        ValueError: 文件超过 MAX_YAML_SIZE
        OSError: 读取失败
    """
    p = Path(path)
    if not p.exists():
        return {}

    file_size = p.stat().st_size
    if file_size > MAX_YAML_SIZE:
        raise ValueError(
            f"YAML 文件过大: {p} ({file_size} 字节), 超过限制 {MAX_YAML_SIZE} 字节"
        )

    with open(p, encoding="utf-8") as f:
        result = yaml.safe_load(f)

    if result is None:
        return {}
    if not isinstance(result, dict):
        logger.warning(
            "%s 内容不是字典类型 (实际类型: %s)，返回空字典",
            path, type(result).__name__,
        )
        return {}
    return result


class ManifestLoader(yaml.SafeLoader):
    """清单专用加载器: 浮点数与日期保留原文

    清单里的 `version: 3.10`、`tag: 2020-01-01` 都是版本标记，
    按 YAML 规则解析会变成 3.1 和 date 对象，原文因此丢失。
    整数仍按整数解析，端口、人数等字段依赖它。
    """


for _tag in ("tag:yaml.org,2002:float", "tag:yaml.org,2002:timestamp"):
    ManifestLoader.add_constructor(_tag, yaml.SafeLoader.construct_scalar)


def parse_yaml(text: str) -> Any:
    """解析清单 YAML 文本，空文档返回 None"""
    return yaml.load(text, Loader=ManifestLoader)  # nosec B506


def dump_yaml(data: Any) -> str:
    """序列化为块风格 YAML，保持键顺序，允许 Unicode"""
    return yaml.safe_dump(
        data, default_flow_style=False,
        allow_unicode=True, sort_keys=False,
    )
