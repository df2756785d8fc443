"""命令行接口测试"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
from click.testing import CliRunner

from pawnpkg.cli import main
from pawnpkg.core import config as cfgmod
from pawnpkg.core.models import DependencyMeta, Package
from pawnpkg.utils.logger import reset_logging
from pawnpkg.utils.net import HttpResponse


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(cfgmod, "_current", None)
    for var in ("PAWNPKG_CACHE_DIR", "PAWNPKG_FETCH_TIMEOUT", "PAWNPKG_LOG_LEVEL", "PAWNPKG_LOG_JSON"):
        monkeypatch.delenv(var, raising=False)
    root = logging.getLogger()
    level = root.level
    yield
    reset_logging()
    root.setLevel(level)


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def project(tmp_path: Path) -> Path:
    (tmp_path / "pawn.json").write_text(json.dumps({
        "entry": "gamemodes/main.pwn",
        "output": "gamemodes/main.amx",
        "dependencies": ["pawn-lang/samp-stdlib"],
        "build": {"args": ["-d3"]},
        "builds": [{"name": "release", "compiler": {"version": "3.10.10"}}],
        "runtimes": [{"name": "main", "port": 7777}],
    }), encoding="utf-8")
    return tmp_path


def _invoke(runner: CliRunner, tmp_path: Path, *args: str):
    return runner.invoke(main, ["--config", str(tmp_path / "pawnpkg.yml"), *args])


class TestLocalCommands:
    def test_show(self, runner, project) -> None:
        result = _invoke(runner, project, "show", str(project))
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["entry"] == "gamemodes/main.pwn"

    def test_show_without_manifest(self, runner, tmp_path) -> None:
        result = _invoke(runner, tmp_path, "show", str(tmp_path))
        assert result.exit_code == 0
        assert "未找到包定义" in result.output

    def test_show_cached_uses_cache_dir_setting(self, runner, tmp_path) -> None:
        cache = tmp_path / "cache"
        pkg_dir = cache / "packages" / "Zeex" / "amx_assembly"
        pkg_dir.mkdir(parents=True)
        (pkg_dir / "pawn.yaml").write_text("include_path: include\n", encoding="utf-8")
        (tmp_path / "pawnpkg.yml").write_text(f"cache_dir: {cache}\n", encoding="utf-8")

        result = _invoke(runner, tmp_path, "show", "--cached", "Zeex/amx_assembly:v1")
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["include_path"] == "include"

    def test_show_cached_env_override(self, runner, tmp_path, monkeypatch) -> None:
        pkg_dir = tmp_path / "env-cache" / "packages" / "a" / "b"
        pkg_dir.mkdir(parents=True)
        (pkg_dir / "pawn.json").write_text('{"entry": "x.pwn"}', encoding="utf-8")
        monkeypatch.setenv("PAWNPKG_CACHE_DIR", str(tmp_path / "env-cache"))

        result = _invoke(runner, tmp_path, "show", "--cached", "a/b")
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["entry"] == "x.pwn"

    def test_show_cached_missing(self, runner, tmp_path, monkeypatch) -> None:
        monkeypatch.setenv("PAWNPKG_CACHE_DIR", str(tmp_path))
        result = _invoke(runner, tmp_path, "show", "--cached", "a/b")
        assert result.exit_code == 0
        assert "未找到包定义" in result.output

    def test_validate(self, runner, project) -> None:
        result = _invoke(runner, project, "validate", str(project))
        assert result.exit_code == 0
        assert "有效" in result.output

    def test_validate_failure(self, runner, tmp_path) -> None:
        (tmp_path / "pawn.yaml").write_text("entry: a.pwn\noutput: a.pwn\n", encoding="utf-8")
        result = _invoke(runner, tmp_path, "validate", str(tmp_path))
        assert result.exit_code == 1
        assert "VALIDATION_ERROR" in result.output

    def test_build_config(self, runner, project) -> None:
        result = _invoke(runner, project, "build-config", str(project), "--name", "release")
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["name"] == "release"
        assert data["args"] == ["-d3"]
        assert data["compiler"] == {"version": "3.10.10"}

    def test_runtime_config_missing(self, runner, project) -> None:
        result = _invoke(runner, project, "runtime-config", str(project), "-n", "nope")
        assert result.exit_code == 1
        assert "no runtime config 'nope'" in result.output

    def test_runtime_config(self, runner, project) -> None:
        result = _invoke(runner, project, "runtime-config", str(project))
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["port"] == 7777

    def test_convert_to_yaml(self, runner, project) -> None:
        result = _invoke(runner, project, "convert", str(project), "--to", "yaml")
        assert result.exit_code == 0, result.output
        assert not (project / "pawn.json").exists()
        assert (project / "pawn.yaml").exists()


class TestFetchCommand:
    def test_fetch(self, runner, tmp_path, monkeypatch) -> None:
        seen = {}

        def fake_fetch(self, meta, ctx=None):
            seen["meta"] = meta
            seen["timeout"] = ctx.timeout
            return Package(meta=meta, entry="a.pwn", format="json")

        monkeypatch.setattr(
            "pawnpkg.core.manifest.remote.RemotePackageFetcher.fetch", fake_fetch,
        )
        result = _invoke(runner, tmp_path, "fetch", "Zeex/amx_assembly", "--timeout", "3")
        assert result.exit_code == 0, result.output
        assert seen["meta"] == DependencyMeta(user="Zeex", repo="amx_assembly")
        assert seen["timeout"] == 3
        assert json.loads(result.output)["entry"] == "a.pwn"

    def test_fetch_bad_dependency(self, runner, tmp_path) -> None:
        result = _invoke(runner, tmp_path, "fetch", "nonsense")
        assert result.exit_code == 1
        assert "VALIDATION_ERROR" in result.output

    def test_fetch_through_central_source(self, runner, tmp_path, monkeypatch) -> None:
        requested = []

        def fake_get(url, ctx=None, headers=None):
            requested.append(url)
            body = json.dumps({"include_path": "include"}).encode()
            return HttpResponse(status=200, body=body)

        monkeypatch.setattr("pawnpkg.core.manifest.remote.http_get", fake_get)
        result = _invoke(runner, tmp_path, "fetch", "Zeex/amx_assembly", "-f", "yaml")
        assert result.exit_code == 0, result.output
        assert requested == [
            "https://raw.githubusercontent.com/sampctl/plugins/master/Zeex-amx_assembly.json",
        ]
        assert "include_path: include" in result.output

    def test_fetch_failure_reports_code(self, runner, tmp_path, monkeypatch) -> None:
        monkeypatch.setattr(
            "pawnpkg.core.manifest.remote.http_get",
            lambda url, ctx=None, headers=None: HttpResponse(status=404),
        )
        monkeypatch.setattr(
            "pawnpkg.core.manifest.github.http_get",
            lambda url, ctx=None, headers=None: HttpResponse(
                status=200, body=b'{"default_branch": "main"}',
            ),
        )
        result = _invoke(runner, tmp_path, "fetch", "a/b")
        assert result.exit_code == 1
        assert "[REMOTE_FETCH_ERROR]" in result.output
        assert "does not point to a valid remote package" in result.output


def test_verbose_enables_debug(runner, tmp_path) -> None:
    result = runner.invoke(main, ["-v", "--config", str(tmp_path / "pawnpkg.yml"), "show", str(tmp_path)])
    assert result.exit_code == 0
    assert logging.getLogger().level == logging.DEBUG
