"""数据模型测试: 依赖字符串、严格解码、校验"""

from __future__ import annotations

import pytest

from pawnpkg.core.exceptions import ManifestDecodeError, ValidationError
from pawnpkg.core.models import (
    BuildConfig,
    DependencyMeta,
    DependencyString,
    Package,
    RuntimeConfig,
)


class TestDependencyString:
    @pytest.mark.parametrize(("raw", "expected"), [
        ("pawn-lang/samp-stdlib", DependencyMeta(user="pawn-lang", repo="samp-stdlib")),
        ("Southclaws/pawn-errors:1.2.3", DependencyMeta(user="Southclaws", repo="pawn-errors", tag="1.2.3")),
        ("Zeex/amx_assembly@dev", DependencyMeta(user="Zeex", repo="amx_assembly", branch="dev")),
        ("oscar-broman/sscanf#9a1b2c3", DependencyMeta(user="oscar-broman", repo="sscanf", commit="9a1b2c3")),
        ("pawn-lang/YSI-Includes/YSI_Core", DependencyMeta(user="pawn-lang", repo="YSI-Includes", path="YSI_Core")),
        (
            "https://gitlab.com/owner/lib.git:v1",
            DependencyMeta(site="gitlab.com", user="owner", repo="lib", tag="v1"),
        ),
    ])
    def test_explode(self, raw: str, expected: DependencyMeta) -> None:
        assert DependencyString(raw).explode() == expected

    @pytest.mark.parametrize("raw", ["", "justone", "user/repo:", "user/repo:a@b", "us er/repo"])
    def test_explode_invalid(self, raw: str) -> None:
        with pytest.raises(ValidationError):
            DependencyString(raw).explode()

    def test_meta_str(self) -> None:
        meta = DependencyMeta(user="a", repo="b", path="inc", branch="dev")
        assert str(meta) == "a/b/inc@dev"
        assert str(DependencyMeta(site="gitlab.com", user="a", repo="b")) == "gitlab.com/a/b"
        assert str(DependencyMeta(site="github.com", user="a", repo="b", tag="1")) == "a/b:1"

    def test_meta_is_hashable_key(self) -> None:
        seen = {DependencyMeta(user="a", repo="b"): 1}
        assert seen[DependencyString("a/b").explode()] == 1

    def test_cache_path(self, tmp_path) -> None:
        meta = DependencyMeta(user="a", repo="b")
        assert meta.cache_path(str(tmp_path)) == str(tmp_path / "packages" / "a" / "b")


class TestValidate:
    def test_same_entry_and_output(self) -> None:
        with pytest.raises(ValidationError, match="same file"):
            Package(entry="a.pwn", output="a.pwn").validate()

    def test_distinct_entry_and_output(self) -> None:
        Package(entry="a.pwn", output="a.amx").validate()

    def test_empty_entry_and_output_ok(self) -> None:
        Package().validate()

    def test_duplicate_build_names(self) -> None:
        pkg = Package(builds=[BuildConfig(name="x"), BuildConfig(name="x")])
        with pytest.raises(ValidationError, match="重复") as exc:
            pkg.validate()
        assert exc.value.details == ["builds: 'x'"]

    def test_duplicate_runtime_names(self) -> None:
        pkg = Package(runtimes=[RuntimeConfig(name="a"), RuntimeConfig(name="a")])
        with pytest.raises(ValidationError):
            pkg.validate()

    def test_unnamed_configs_are_not_duplicates(self) -> None:
        pkg = Package(
            builds=[BuildConfig(), BuildConfig()],
            runtimes=[RuntimeConfig(name=""), RuntimeConfig(name="")],
        )
        pkg.validate()


class TestPackage:
    def test_get_all_dependencies_order(self) -> None:
        pkg = Package(
            dependencies=[DependencyString("a/b"), DependencyString("c/d")],
            dev_dependencies=[DependencyString("e/f")],
        )
        assert pkg.get_all_dependencies() == ["a/b", "c/d", "e/f"]

    def test_str_is_meta(self) -> None:
        assert str(Package(meta=DependencyMeta(user="u", repo="r"))) == "u/r"

    def test_provenance_not_compared(self) -> None:
        a = Package(entry="x.pwn", local_path="/one", format="json", parent=True)
        b = Package(entry="x.pwn", local_path="/two", format="yaml")
        assert a == b


class TestFromDict:
    def test_full_manifest(self) -> None:
        pkg = Package.from_dict({
            "user": "Southclaws",
            "repo": "sampctl-demo",
            "entry": "gamemodes/test.pwn",
            "output": "gamemodes/test.amx",
            "dependencies": ["pawn-lang/samp-stdlib"],
            "dev_dependencies": ["Southclaws/pawn-errors"],
            "local": True,
            "build": {"args": ["-d3"], "compiler": {"version": "3.10.9"}},
            "builds": [{"name": "dev", "constants": {"DEBUG": 1}}],
            "runtime": {"port": 7777, "plugins": ["crashdetect"]},
            "resources": [{"name": "^plugin-(.*)\\.zip$", "platform": "linux", "archive": True}],
        })
        assert pkg.meta == DependencyMeta(user="Southclaws", repo="sampctl-demo")
        assert pkg.local is True
        assert pkg.build is not None and pkg.build.compiler is not None
        assert pkg.build.compiler.version == "3.10.9"
        assert pkg.builds[0].constants == {"DEBUG": "1"}
        assert pkg.runtime is not None and pkg.runtime.port == 7777
        assert pkg.resources[0].archive is True
        assert pkg.dependencies[0].explode().repo == "samp-stdlib"

    def test_unknown_top_level_key_rejected(self) -> None:
        with pytest.raises(ManifestDecodeError, match="未知字段: colour"):
            Package.from_dict({"entry": "a.pwn", "colour": "red"})

    def test_unknown_nested_key_rejected(self) -> None:
        with pytest.raises(ManifestDecodeError, match="builds\\[0\\]"):
            Package.from_dict({"builds": [{"name": "x", "optimise": True}]})

    def test_sequence_for_string_field_rejected(self) -> None:
        with pytest.raises(ManifestDecodeError, match="序列"):
            Package.from_dict({"entry": ["a.pwn"]})

    def test_plugin_commands_accept_string_or_sequence(self) -> None:
        pkg = Package.from_dict({
            "build": {"plugins": ["make all", ["cmake", "--build", "."]]},
        })
        assert pkg.build is not None
        assert pkg.build.plugins == [["make all"], ["cmake", "--build", "."]]

    def test_numeric_version_becomes_string(self) -> None:
        pkg = Package.from_dict({"build": {"version": 3}})
        assert pkg.build is not None and pkg.build.version == "3"

    def test_not_a_mapping(self) -> None:
        with pytest.raises(ManifestDecodeError, match="应为映射"):
            Package.from_dict(["entry"])

    def test_explicit_empty_args_kept(self) -> None:
        pkg = Package.from_dict({"build": {"args": []}})
        assert pkg.build is not None and pkg.build.args == []
        assert pkg.to_dict()["build"] == {"args": []}

    def test_to_dict_omits_empty(self) -> None:
        assert Package(entry="a.pwn").to_dict() == {"entry": "a.pwn"}
