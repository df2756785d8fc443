"""集中配置管理

支持从 YAML 文件加载 + 环境变量覆盖 + 编程式覆盖。
"""

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass, field

import yaml

from pawnpkg.core.exceptions import ConfigError
from pawnpkg.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_FILE = "pawnpkg.yml"


@dataclass
class Settings:
    """pawnpkg 全局配置"""

    # 目录
    cache_dir: str = "~/.samp"

    # GitHub
    github_token: str = ""
    github_api_url: str = "https://api.github.com"
    raw_content_url: str = "https://raw.githubusercontent.com"

    # 中心仓库（暂存插件清单修正）
    central_repo: str = "sampctl/plugins"
    central_branch: str = "master"

    # 整条远程拉取链的超时（秒），0 表示不限制
    fetch_timeout: float = 30.0

    extra: dict = field(default_factory=dict)

    @classmethod
    def from_file(cls, path: str = DEFAULT_SETTINGS_FILE) -> Settings:
        """从 YAML 文件加载配置，不存在则使用默认值，最后叠加环境变量"""
        try:
            data = load_yaml(path)
        except (yaml.YAMLError, ValueError) as e:
            raise ConfigError(f"配置文件无效: {path} - {e}") from e

        known = {f.name for f in cls.__dataclass_fields__.values()} - {"extra"}
        matched = {k: v for k, v in data.items() if k in known}
        extra = {k: v for k, v in data.items() if k not in known}
        try:
            cfg = cls(**matched)
        except TypeError as e:
            raise ConfigError(f"配置文件无效: {path} - {e}") from e
        cfg.extra = extra
        cfg.apply_env()
        return cfg

    def apply_env(self) -> None:
        """环境变量覆盖: PAWNPKG_CACHE_DIR / PAWNPKG_GITHUB_TOKEN / PAWNPKG_FETCH_TIMEOUT"""
        if os.getenv("PAWNPKG_CACHE_DIR"):
            self.cache_dir = os.environ["PAWNPKG_CACHE_DIR"]
        token = os.getenv("PAWNPKG_GITHUB_TOKEN") or os.getenv("GITHUB_TOKEN")
        if token:
            self.github_token = token
        timeout = os.getenv("PAWNPKG_FETCH_TIMEOUT")
        if timeout:
            try:
                self.fetch_timeout = float(timeout)
            except ValueError as e:
                raise ConfigError(f"PAWNPKG_FETCH_TIMEOUT 不是数字: {timeout}") from e

    @property
    def cache_path(self) -> str:
        return os.path.expanduser(self.cache_dir)

    def to_dict(self) -> dict:
        data = asdict(self)
        if data["github_token"]:
            data["github_token"] = "***"
        return data


# 全局单例，首次 import 时不加载文件；由 CLI 入口显式初始化
_current: Settings | None = None


def get_settings() -> Settings:
    """获取当前配置（未初始化则返回默认值）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Settings()
    return _current


def init_settings(path: str = DEFAULT_SETTINGS_FILE) -> Settings:
    """从文件初始化全局配置"""
    global _current  # noqa: PLW0603
    _current = Settings.from_file(path)
    logger.debug("配置已加载: %s", path)
    return _current
