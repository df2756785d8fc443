"""本地清单读取与写回

读取顺序: <dir>/pawn.json → <dir>/pawn.yaml，找到第一个即停止。
目录中没有清单不算错误（纯 Pawn 库可以没有依赖），返回空 Package。
"""

from __future__ import annotations

import logging
from pathlib import Path

from pawnpkg.core.exceptions import ManifestDecodeError, WriteError
from pawnpkg.core.manifest.codec import PROBE_ORDER, get_codec
from pawnpkg.core.models import DependencyMeta, DependencyString, Package
from pawnpkg.utils.yaml_io import MAX_YAML_SIZE, atomic_write

logger = logging.getLogger(__name__)

# 写回清单的文件权限: 仅所有者读/写/执行
DEFINITION_MODE = 0o700


def find_definition(directory: str | Path) -> tuple[Path, str] | None:
    """返回 (清单路径, 格式)，目录中没有清单时返回 None"""
    base = Path(directory)
    for fmt in PROBE_ORDER:
        candidate = base / get_codec(fmt).filename
        if candidate.is_file():
            return candidate, fmt
    return None


def package_from_dir(directory: str | Path) -> Package:
    """从目录读取 pawn.json 或 pawn.yaml

    Raises:
        ManifestDecodeError: 清单存在但无法解析
    """
    found = find_definition(directory)
    if found is None:
        logger.debug("未找到包定义文件 (pawn.{json|yaml}): %s", directory)
        return Package()

    path, fmt = found
    size = path.stat().st_size
    if size > MAX_YAML_SIZE:
        raise ManifestDecodeError(f"清单文件过大 ({size} 字节)", str(path))
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestDecodeError(f"读取清单失败: {e}", str(path)) from e

    pkg = get_codec(fmt).decode(text, source=str(path))
    pkg.local_path = str(directory)
    logger.debug("已读取包定义: %s (%s)", path, fmt)
    return pkg


def package_from_dep(dep: str) -> Package:
    """由依赖字符串构造只有元信息的 Package（不含构建/运行配置）

    Raises:
        ValidationError: 依赖字符串格式不合法
    """
    return Package(meta=DependencyString(dep).explode())


def get_cached_package(meta: DependencyMeta, cache_dir: str) -> Package:
    """读取缓存目录中该依赖的清单，缓存不存在时返回空 Package"""
    return package_from_dir(meta.cache_path(cache_dir))


def write_definition(pkg: Package) -> str:
    """按 pkg.format 把包定义写回 <local_path>/pawn.<format>，返回写入路径

    Raises:
        WriteError: 没有记录格式、编码失败或写文件失败
    """
    codec = get_codec(pkg.format)
    contents = codec.encode(pkg)
    path = Path(pkg.local_path) / codec.filename
    try:
        atomic_write(path, contents, mode=DEFINITION_MODE)
    except OSError as e:
        raise WriteError(f"failed to write {codec.filename}: {e}") from e
    logger.info("已写入包定义: %s", path)
    return str(path)
