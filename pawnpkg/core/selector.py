"""构建/运行配置选择与合并

包可以同时声明单个配置（build / runtime）和命名配置列表（builds / runtimes）。
按名称选出列表中的一项后，单个配置作为公共部分以填补方式合并进去：
列表项已设置的字段优先，单个配置只补未设置的字段。

两者在"名称不存在"时的行为不同:
  - 构建配置: 告警并回退到单个 build 或内置默认配置
  - 运行配置: 抛出 ConfigNotFoundError
"""

from __future__ import annotations

import copy
import logging

from pawnpkg.core.defaults import apply_runtime_defaults, default_build_config
from pawnpkg.core.exceptions import ConfigNotFoundError
from pawnpkg.core.merge import fill_gaps
from pawnpkg.core.models import BuildConfig, CompilerOverride, Package, RuntimeConfig

logger = logging.getLogger(__name__)


def get_build_config(pkg: Package, name: str = "") -> BuildConfig:
    """返回名为 name 的有效构建配置，总是返回完整配置，不会失败

    - 没有任何构建配置: 内置默认配置
    - name 为空: 优先单个 build，否则取 builds 第一项
    - name 非空: builds 中同名项合并 build；找不到时告警回退
    """
    default = default_build_config()

    if not pkg.builds and pkg.build is None:
        logger.debug("%s: 未定义构建配置，使用默认配置", pkg)
        return default

    config: BuildConfig | None
    if not name:
        config = pkg.build if pkg.build is not None else pkg.builds[0]
    else:
        config = next((c for c in pkg.builds if c.name == name), None)
        if config is not None:
            fill_gaps(config, pkg.build)

    if config is None:
        if pkg.build is not None:
            logger.warning("构建配置 '%s' 不存在，使用 build 字段的配置", name)
            config = pkg.build
        else:
            logger.warning("构建配置 '%s' 不存在，使用默认配置", name)
            config = default

    return _normalize_build(copy.deepcopy(config), default)


def _normalize_build(config: BuildConfig, default: BuildConfig) -> BuildConfig:
    """version 覆盖 compiler.version；编译器版本为空或参数未设置时取默认值"""
    if config.compiler is None:
        config.compiler = CompilerOverride()
    if config.version:
        config.compiler.version = config.version
    if not config.compiler.version:
        config.compiler.version = default.compiler.version  # type: ignore[union-attr]
    if config.args is None:
        config.args = list(default.args or [])
    return config


def get_runtime_config(pkg: Package, name: str = "") -> RuntimeConfig:
    """返回名为 name 的有效运行配置，并补齐运行默认值

    Raises:
        ConfigNotFoundError: runtimes 非空但其中没有名为 name 的配置
    """
    if pkg.runtimes:
        if not name:
            logger.debug("%s: 使用 runtimes 列表中的第一项", pkg)
            selected = pkg.runtimes[0]
        else:
            logger.debug("%s: 在 runtimes 列表中查找 '%s'", pkg, name)
            found = next((c for c in pkg.runtimes if c.name == name), None)
            if found is None:
                raise ConfigNotFoundError(f"no runtime config '{name}'")
            selected = found
        fill_gaps(selected, pkg.runtime)
        config = copy.deepcopy(selected)
    elif pkg.runtime is not None:
        logger.debug("%s: 使用 runtime 字段的配置", pkg)
        config = copy.deepcopy(pkg.runtime)
    else:
        logger.debug("%s: 使用默认运行配置", pkg)
        config = RuntimeConfig()

    return apply_runtime_defaults(config)
