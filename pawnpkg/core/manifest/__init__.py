"""清单读写

- codec.py: JSON / YAML 编解码
- loader.py: 本地目录读取、缓存读取、写回
- remote.py: 远程拉取（中心仓库优先，包自身仓库回退）
- github.py: GitHub API 客户端
"""

from pawnpkg.core.manifest.codec import JsonCodec, ManifestCodec, YamlCodec, get_codec
from pawnpkg.core.manifest.loader import (
    get_cached_package,
    package_from_dep,
    package_from_dir,
    write_definition,
)
from pawnpkg.core.manifest.remote import RemotePackageFetcher, get_remote_package

__all__ = [
    "ManifestCodec",
    "JsonCodec",
    "YamlCodec",
    "get_codec",
    "package_from_dir",
    "package_from_dep",
    "get_cached_package",
    "write_definition",
    "RemotePackageFetcher",
    "get_remote_package",
]
