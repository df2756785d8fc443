"""清单编解码

两种格式各自一个编解码器，按格式标签（"json" / "yaml"）选择。
解码严格: 未知字段、类型不符都会抛出 ManifestDecodeError，并带上来源路径或依赖名。
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Any

import yaml

from pawnpkg.core.exceptions import ManifestDecodeError, ValidationError, WriteError
from pawnpkg.core.models import Package
from pawnpkg.utils.yaml_io import dump_yaml, parse_yaml

logger = logging.getLogger(__name__)


class ManifestCodec(ABC):
    """清单编解码器基类"""

    format: str = ""

    @property
    def filename(self) -> str:
        return f"pawn.{self.format}"

    @abstractmethod
    def parse(self, text: str) -> Any:
        """文本 → 原始映射"""

    @abstractmethod
    def dump(self, data: dict[str, Any]) -> str:
        """原始映射 → 文本"""

    def decode(self, text: str, source: str = "") -> Package:
        """解码清单文本

        Raises:
            ManifestDecodeError: 语法错误、顶层不是映射、未知字段或字段类型不符
        """
        try:
            data = self.parse(text)
        except (ValueError, yaml.YAMLError) as e:
            raise ManifestDecodeError(
                f"failed to load {self.format} manifest: {e}", source,
            ) from e
        if data is None:
            data = {}
        try:
            pkg = Package.from_dict(data)
            pkg.check_unique_names()
        except (ManifestDecodeError, ValidationError) as e:
            raise ManifestDecodeError(
                f"failed to load {self.format} manifest: {e}", source,
            ) from e
        pkg.format = self.format
        return pkg

    def encode(self, pkg: Package) -> str:
        try:
            return self.dump(pkg.to_dict())
        except (TypeError, ValueError, yaml.YAMLError) as e:
            raise WriteError(f"failed to encode package metadata: {e}") from e


class JsonCodec(ManifestCodec):
    """pawn.json，写出时使用 tab 缩进"""

    format = "json"

    def parse(self, text: str) -> Any:
        return json.loads(text)

    def dump(self, data: dict[str, Any]) -> str:
        return json.dumps(data, indent="\t", ensure_ascii=False)


class YamlCodec(ManifestCodec):
    """pawn.yaml"""

    format = "yaml"

    def parse(self, text: str) -> Any:
        return parse_yaml(text)

    def dump(self, data: dict[str, Any]) -> str:
        return dump_yaml(data)


_CODECS: dict[str, ManifestCodec] = {
    JsonCodec.format: JsonCodec(),
    YamlCodec.format: YamlCodec(),
}

# 本地目录探测顺序: 两者都存在时 JSON 优先
PROBE_ORDER = ("json", "yaml")


def get_codec(fmt: str) -> ManifestCodec:
    """按格式标签取编解码器

    Raises:
        WriteError: 格式为空或不支持
    """
    codec = _CODECS.get(fmt)
    if codec is None:
        if not fmt:
            raise WriteError("package has no format associated with it")
        raise WriteError(f"不支持的清单格式: '{fmt}'")
    return codec
