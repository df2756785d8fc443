"""内置默认值

- default_build_config(): 没有任何构建配置时使用的默认构建配置
- apply_runtime_defaults(): 选出运行配置后补齐仍未设置的字段
"""

from __future__ import annotations

import sys

from pawnpkg.core.models import BuildConfig, CompilerOverride, RuntimeConfig

DEFAULT_COMPILER_VERSION = "3.10.10"
DEFAULT_BUILD_ARGS = ("-d3", "-;+", "-(+", "-Z+")
DEFAULT_RUNTIME_VERSION = "0.3.7"

_RUNTIME_DEFAULTS = {
    "version": DEFAULT_RUNTIME_VERSION,
    "mode": "server",
    "echo": "-",
    "rcon_password": "password",
    "port": 8192,
    "hostname": "SA-MP Server",
    "maxplayers": 50,
    "language": "-",
    "mapname": "San Andreas",
    "weburl": "www.sa-mp.com",
    "gamemodetext": "Unknown",
    "announce": False,
    "lanmode": False,
    "query": True,
    "rcon": False,
    "logqueries": False,
    "sleep": 5,
    "maxnpc": 0,
    "stream_rate": 1000,
    "stream_distance": 200,
    "chatlogging": True,
    "timestamp": True,
}


def default_build_config() -> BuildConfig:
    """每次返回新实例，调用方可以随意修改"""
    return BuildConfig(
        name="default",
        args=list(DEFAULT_BUILD_ARGS),
        compiler=CompilerOverride(version=DEFAULT_COMPILER_VERSION),
    )


def current_platform() -> str:
    if sys.platform.startswith("win"):
        return "windows"
    if sys.platform == "darwin":
        return "darwin"
    return "linux"


def apply_runtime_defaults(config: RuntimeConfig) -> RuntimeConfig:
    """原地补齐运行配置中仍为 None 的字段"""
    for attr, value in _RUNTIME_DEFAULTS.items():
        if getattr(config, attr) is None:
            setattr(config, attr, value)
    if config.platform is None:
        config.platform = current_platform()
    for attr in ("gamemodes", "filterscripts", "plugins"):
        if getattr(config, attr) is None:
            setattr(config, attr, [])
    if config.extra is None:
        config.extra = {}
    return config
