"""填补合并（fill-gaps merge）

把 src 中已设置的字段填入 dst 中未设置（None）的字段，dst 已有的值一律不覆盖。

规则:
  - 字段为 None 才视为未设置；显式的空列表/空字符串保持不变
  - 嵌套配置（如 BuildConfig.compiler）逐字段递归填补
  - 映射字段（constants / extra）只补入 dst 缺少的键
  - 列表字段不拼接，dst 已设置即保留
"""

from __future__ import annotations

import copy
from dataclasses import fields, is_dataclass
from typing import TypeVar

T = TypeVar("T")


def fill_gaps(dst: T, src: T | None) -> T:
    """原地把 src 合并进 dst 并返回 dst"""
    if src is None:
        return dst
    if type(dst) is not type(src):
        raise TypeError(
            f"无法合并不同类型的配置: {type(dst).__name__} <- {type(src).__name__}"
        )
    for f in fields(dst):  # type: ignore[arg-type]
        theirs = getattr(src, f.name)
        if theirs is None:
            continue
        ours = getattr(dst, f.name)
        if ours is None:
            setattr(dst, f.name, copy.deepcopy(theirs))
        elif is_dataclass(ours):
            fill_gaps(ours, theirs)
        elif isinstance(ours, dict):
            for key, value in theirs.items():
                ours.setdefault(key, copy.deepcopy(value))
    return dst
