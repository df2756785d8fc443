"""核心数据模型

Package 及其依赖标识、构建配置、运行配置集中定义于此。

配置类字段统一以 None 表示"未设置"：显式写出的空列表或空字符串是有效取值，
填补合并与默认值只作用于 None 字段。
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

from pawnpkg.core.exceptions import ManifestDecodeError, ValidationError

DEFAULT_SITE = "github.com"

_NAME_RE = re.compile(r"^[\w.\-]+$")
_PIN_KINDS = {":": "tag", "@": "branch", "#": "commit"}


# =========================================================================
# 依赖标识
# =========================================================================


@dataclass(frozen=True)
class DependencyMeta:
    """远程包来源: 站点/用户/仓库/子路径 + tag|branch|commit 之一"""

    site: str = ""
    user: str = ""
    repo: str = ""
    path: str = ""
    tag: str = ""
    branch: str = ""
    commit: str = ""

    def __str__(self) -> str:
        s = f"{self.user}/{self.repo}"
        if self.site and self.site != DEFAULT_SITE:
            s = f"{self.site}/{s}"
        if self.path:
            s = f"{s}/{self.path}"
        if self.tag:
            s = f"{s}:{self.tag}"
        elif self.branch:
            s = f"{s}@{self.branch}"
        elif self.commit:
            s = f"{s}#{self.commit}"
        return s

    def cache_path(self, cache_dir: str) -> str:
        """包在缓存目录中的位置: <cache_dir>/packages/<user>/<repo>"""
        return str(Path(cache_dir) / "packages" / self.user / self.repo)


class DependencyString(str):
    """清单中的依赖描述字符串，如 `pawn-lang/samp-stdlib:0.3.7-R2-2-1`

    支持的写法:
        user/repo
        user/repo/sub/path
        github.com/user/repo 或 https://github.com/user/repo
    后缀最多一个: `:tag`、`@branch`、`#commit`
    """

    def explode(self) -> DependencyMeta:
        raw = self.strip()
        for scheme in ("https://", "http://"):
            if raw.startswith(scheme):
                raw = raw[len(scheme):]
                break

        pins: dict[str, str] = {}
        match = re.search(r"[:@#]", raw)
        if match:
            sep = match.group(0)
            body, pin = raw[:match.start()], raw[match.end():]
            if not pin or re.search(r"[:@#]", pin):
                raise ValidationError(f"依赖版本标记无效: '{self}'")
            pins[_PIN_KINDS[sep]] = pin
        else:
            body = raw

        parts = [p for p in body.split("/") if p]
        site = ""
        if len(parts) >= 3 and "." in parts[0]:
            site = parts.pop(0)
        if len(parts) < 2:
            raise ValidationError(f"依赖格式应为 user/repo: '{self}'")

        user, repo = parts[0], parts[1]
        if repo.endswith(".git"):
            repo = repo[:-4]
        for name in (user, repo):
            if not _NAME_RE.match(name):
                raise ValidationError(f"依赖名称包含非法字符: '{self}'")

        return DependencyMeta(
            site=site, user=user, repo=repo,
            path="/".join(parts[2:]), **pins,
        )


# =========================================================================
# 字段解码
# =========================================================================


def _fail(key: str, message: str) -> ManifestDecodeError:
    return ManifestDecodeError(f"字段 '{key}': {message}")


def _to_str(value: Any, key: str) -> str | None:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, bool):
        raise _fail(key, "不能将布尔值解码为字符串")
    if isinstance(value, (int, float)):
        # YAML 会把 3.10 之类的版本号解析成数字
        return str(value)
    if isinstance(value, list):
        raise _fail(key, "不能将序列解码为字符串")
    raise _fail(key, f"不能将 {type(value).__name__} 解码为字符串")


def _to_str_list(value: Any, key: str) -> list[str] | None:
    if value is None:
        return None
    if not isinstance(value, list):
        raise _fail(key, "应为字符串列表")
    return [_to_str(v, f"{key}[{i}]") or "" for i, v in enumerate(value)]


def _to_commands(value: Any, key: str) -> list[list[str]] | None:
    """命令列表: 每一项可写成单个字符串或 argv 序列，统一为 argv 列表"""
    if value is None:
        return None
    if not isinstance(value, list):
        raise _fail(key, "应为命令列表")
    commands: list[list[str]] = []
    for i, item in enumerate(value):
        if isinstance(item, list):
            commands.append(_to_str_list(item, f"{key}[{i}]") or [])
        else:
            commands.append([_to_str(item, f"{key}[{i}]") or ""])
    return commands


def _to_bool(value: Any, key: str) -> bool | None:
    if value is None or isinstance(value, bool):
        return value
    raise _fail(key, "应为布尔值")


def _to_int(value: Any, key: str) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise _fail(key, "应为整数")
    return value


def _to_str_map(value: Any, key: str) -> dict[str, str] | None:
    if value is None:
        return None
    if not isinstance(value, dict):
        raise _fail(key, "应为键值映射")
    return {str(k): _to_str(v, f"{key}.{k}") or "" for k, v in value.items()}


_DECODERS = {
    "str": _to_str,
    "str_list": _to_str_list,
    "commands": _to_commands,
    "bool": _to_bool,
    "int": _to_int,
    "str_map": _to_str_map,
}


def _opt(key: str, kind: str) -> Any:
    """声明一个可选字段: 清单键名 + 解码类型，默认 None（未设置）"""
    return field(default=None, metadata={"key": key, "kind": kind})


def _check_keys(data: Any, known: set[str], where: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ManifestDecodeError(f"'{where}' 应为映射，实际为 {type(data).__name__}")
    unknown = sorted(str(k) for k in data if k not in known)
    if unknown:
        raise ManifestDecodeError(f"'{where}' 包含未知字段: {', '.join(unknown)}")
    return data


class _Section:
    """由 _opt 字段声明驱动的严格解码/编码"""

    @classmethod
    def from_dict(cls, data: Any, where: str = "") -> Any:
        where = where or cls.__name__
        by_key = {f.metadata["key"]: f for f in fields(cls)}  # type: ignore[arg-type]
        data = _check_keys(data, set(by_key), where)
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            f = by_key[key]
            kind = f.metadata["kind"]
            if kind == "nested":
                kwargs[f.name] = (
                    None if value is None
                    else f.metadata["type"].from_dict(value, f"{where}.{key}")
                )
            else:
                kwargs[f.name] = _DECODERS[kind](value, f"{where}.{key}")
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for f in fields(self):  # type: ignore[arg-type]
            value = getattr(self, f.name)
            if value is None:
                continue
            if isinstance(value, _Section):
                value = value.to_dict()
            elif isinstance(value, list):
                value = [list(v) if isinstance(v, list) else v for v in value]
            elif isinstance(value, dict):
                value = dict(value)
            out[f.metadata["key"]] = value
        return out


# =========================================================================
# 构建/运行配置
# =========================================================================


@dataclass
class CompilerOverride(_Section):
    """编译器来源/版本覆盖"""

    site: str | None = _opt("site", "str")
    user: str | None = _opt("user", "str")
    repo: str | None = _opt("repo", "str")
    version: str | None = _opt("version", "str")
    path: str | None = _opt("path", "str")
    preset: str | None = _opt("preset", "str")


@dataclass
class BuildConfig(_Section):
    """命名构建配置

    version 为通用版本号，设置后覆盖 compiler.version。
    plugins / pre_build / post_build 为命令列表，每项是一条 argv。
    """

    name: str | None = _opt("name", "str")
    version: str | None = _opt("version", "str")
    working_dir: str | None = _opt("working_dir", "str")
    args: list[str] | None = _opt("args", "str_list")
    input: str | None = _opt("input", "str")
    output: str | None = _opt("output", "str")
    includes: list[str] | None = _opt("includes", "str_list")
    constants: dict[str, str] | None = _opt("constants", "str_map")
    plugins: list[list[str]] | None = _opt("plugins", "commands")
    compiler: CompilerOverride | None = field(
        default=None,
        metadata={"key": "compiler", "kind": "nested", "type": CompilerOverride},
    )
    pre_build: list[list[str]] | None = _opt("pre_build", "commands")
    post_build: list[list[str]] | None = _opt("post_build", "commands")


@dataclass
class RuntimeConfig(_Section):
    """命名运行配置，对应 server.cfg 的各项设置"""

    name: str | None = _opt("name", "str")
    version: str | None = _opt("version", "str")
    mode: str | None = _opt("mode", "str")
    platform: str | None = _opt("platform", "str")
    echo: str | None = _opt("echo", "str")
    gamemodes: list[str] | None = _opt("gamemodes", "str_list")
    filterscripts: list[str] | None = _opt("filterscripts", "str_list")
    plugins: list[str] | None = _opt("plugins", "str_list")
    rcon_password: str | None = _opt("rcon_password", "str")
    port: int | None = _opt("port", "int")
    hostname: str | None = _opt("hostname", "str")
    maxplayers: int | None = _opt("maxplayers", "int")
    language: str | None = _opt("language", "str")
    mapname: str | None = _opt("mapname", "str")
    weburl: str | None = _opt("weburl", "str")
    gamemodetext: str | None = _opt("gamemodetext", "str")
    bind: str | None = _opt("bind", "str")
    password: str | None = _opt("password", "str")
    announce: bool | None = _opt("announce", "bool")
    lanmode: bool | None = _opt("lanmode", "bool")
    query: bool | None = _opt("query", "bool")
    rcon: bool | None = _opt("rcon", "bool")
    logqueries: bool | None = _opt("logqueries", "bool")
    sleep: int | None = _opt("sleep", "int")
    maxnpc: int | None = _opt("maxnpc", "int")
    stream_rate: int | None = _opt("stream_rate", "int")
    stream_distance: int | None = _opt("stream_distance", "int")
    chatlogging: bool | None = _opt("chatlogging", "bool")
    timestamp: bool | None = _opt("timestamp", "bool")
    extra: dict[str, str] | None = _opt("extra", "str_map")


@dataclass
class Resource(_Section):
    """包附带的平台相关资源（插件二进制、压缩包等）"""

    name: str | None = _opt("name", "str")
    platform: str | None = _opt("platform", "str")
    archive: bool | None = _opt("archive", "bool")
    version: str | None = _opt("version", "str")
    includes: list[str] | None = _opt("includes", "str_list")
    plugins: list[str] | None = _opt("plugins", "str_list")
    files: dict[str, str] | None = _opt("files", "str_map")


def _duplicate_names(configs: list[Any]) -> list[str]:
    # 未命名的配置只能按位置选中，不参与重名检查
    seen: set[str] = set()
    dups: list[str] = []
    for cfg in configs:
        if not cfg.name:
            continue
        if cfg.name in seen and cfg.name not in dups:
            dups.append(cfg.name)
        seen.add(cfg.name)
    return dups


# =========================================================================
# Package
# =========================================================================

_META_KEYS = ("site", "user", "repo", "path", "tag", "branch", "commit")
_PACKAGE_KEYS = set(_META_KEYS) | {
    "contributors", "website", "entry", "output", "dependencies",
    "dev_dependencies", "local", "runtime", "runtimes", "build", "builds",
    "include_path", "resources",
}


@dataclass
class Package:
    """Pawn 包定义，类似 npm 的 package.json

    既可描述一个正在开发的项目（只需 dependencies 即可构建），
    也可描述仓库中的一个库（通常只有 contributors / website / include_path）。

    parent / local_path / vendor / format 为来源信息，不写入清单，也不参与相等比较。
    """

    meta: DependencyMeta = field(default_factory=DependencyMeta)

    # 来源信息
    parent: bool = field(default=False, compare=False)
    local_path: str = field(default="", compare=False)
    vendor: str = field(default="", compare=False)
    format: str = field(default="", compare=False)

    # 描述信息
    contributors: list[str] = field(default_factory=list)
    website: str = ""

    # 功能字段
    entry: str = ""
    output: str = ""
    dependencies: list[DependencyString] = field(default_factory=list)
    dev_dependencies: list[DependencyString] = field(default_factory=list)
    local: bool = False
    build: BuildConfig | None = None
    builds: list[BuildConfig] = field(default_factory=list)
    runtime: RuntimeConfig | None = None
    runtimes: list[RuntimeConfig] = field(default_factory=list)
    include_path: str = ""
    resources: list[Resource] = field(default_factory=list)

    def __str__(self) -> str:
        return str(self.meta)

    # ------------------------------------------------------------------
    # 校验
    # ------------------------------------------------------------------

    def validate(self) -> None:
        """检查入口/输出冲突以及重名配置

        Raises:
            ValidationError: entry 与 output 相同，或 builds / runtimes 中有重名
        """
        if self.entry and self.output and self.entry == self.output:
            raise ValidationError("package entry and output point to the same file")
        self.check_unique_names()

    def check_unique_names(self) -> None:
        details = [
            f"{section}: '{name}'"
            for section, configs in (("builds", self.builds), ("runtimes", self.runtimes))
            for name in _duplicate_names(configs)
        ]
        if details:
            raise ValidationError(f"配置名称重复: {', '.join(details)}", details)

    def get_all_dependencies(self) -> list[DependencyString]:
        """dependencies 与 dev_dependencies 合并为一个有序列表"""
        return [*self.dependencies, *self.dev_dependencies]

    # ------------------------------------------------------------------
    # 配置选择 / 写回（实现见 selector 与 manifest.loader）
    # ------------------------------------------------------------------

    def get_build_config(self, name: str = "") -> BuildConfig:
        from pawnpkg.core.selector import get_build_config
        return get_build_config(self, name)

    def get_runtime_config(self, name: str = "") -> RuntimeConfig:
        from pawnpkg.core.selector import get_runtime_config
        return get_runtime_config(self, name)

    def write_definition(self) -> str:
        from pawnpkg.core.manifest.loader import write_definition
        return write_definition(self)

    # ------------------------------------------------------------------
    # 序列化
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Any) -> Package:
        """严格解码清单映射，未知顶层字段报错

        Raises:
            ManifestDecodeError: 结构或字段类型不合法
        """
        data = _check_keys(data, _PACKAGE_KEYS, "package")
        meta = DependencyMeta(**{
            k: _to_str(data.get(k), k) or "" for k in _META_KEYS
        })

        def _deps(key: str) -> list[DependencyString]:
            return [DependencyString(d) for d in _to_str_list(data.get(key), key) or []]

        def _list(key: str, section: type) -> list[Any]:
            value = data.get(key)
            if value is None:
                return []
            if not isinstance(value, list):
                raise _fail(key, "应为列表")
            return [section.from_dict(v, f"{key}[{i}]") for i, v in enumerate(value)]

        build = data.get("build")
        runtime = data.get("runtime")
        return cls(
            meta=meta,
            contributors=_to_str_list(data.get("contributors"), "contributors") or [],
            website=_to_str(data.get("website"), "website") or "",
            entry=_to_str(data.get("entry"), "entry") or "",
            output=_to_str(data.get("output"), "output") or "",
            dependencies=_deps("dependencies"),
            dev_dependencies=_deps("dev_dependencies"),
            local=bool(_to_bool(data.get("local"), "local")),
            build=None if build is None else BuildConfig.from_dict(build, "build"),
            builds=_list("builds", BuildConfig),
            runtime=None if runtime is None else RuntimeConfig.from_dict(runtime, "runtime"),
            runtimes=_list("runtimes", RuntimeConfig),
            include_path=_to_str(data.get("include_path"), "include_path") or "",
            resources=_list("resources", Resource),
        )

    def to_dict(self) -> dict[str, Any]:
        """编码为清单映射，省略空值字段"""
        out: dict[str, Any] = {}
        for key in _META_KEYS:
            value = getattr(self.meta, key)
            if value:
                out[key] = value
        plain = {
            "contributors": list(self.contributors),
            "website": self.website,
            "entry": self.entry,
            "output": self.output,
            "dependencies": [str(d) for d in self.dependencies],
            "dev_dependencies": [str(d) for d in self.dev_dependencies],
            "local": self.local,
            "runtime": self.runtime.to_dict() if self.runtime else None,
            "runtimes": [r.to_dict() for r in self.runtimes],
            "build": self.build.to_dict() if self.build else None,
            "builds": [b.to_dict() for b in self.builds],
            "include_path": self.include_path,
            "resources": [r.to_dict() for r in self.resources],
        }
        for key, value in plain.items():
            if value or (key in ("build", "runtime") and value is not None):
                out[key] = value
        return out
