# Copyright 2025 CrownOps Engineering
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Tests for the dotnet-purge command-line entry point."""

from __future__ import annotations

import argparse
import signal
from concurrent.futures import Future
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from dotnet_purge import __version__
from dotnet_purge.cancellation import CancellationToken
from dotnet_purge.cli import main
from dotnet_purge.cli.app import build_options, cancel_on_interrupt
from dotnet_purge.config import Config, PurgeConfig
from dotnet_purge.versioning import UPDATE_COMMAND, VersionCheck
from tests.fixtures.fakes import SDK_OUTPUTS, FakeGateway, FakeProject, write_project

pytestmark = [pytest.mark.unit, pytest.mark.cli]


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    return tmp_path


@dataclass
class CliGateway(FakeGateway):
    executables: list[str] = field(default_factory=list)


@pytest.fixture
def gateway(monkeypatch: pytest.MonkeyPatch) -> CliGateway:
    fake = CliGateway()

    def _factory(executable: str) -> CliGateway:
        fake.executables.append(executable)
        return fake

    monkeypatch.setattr("dotnet_purge.cli.app.DotnetCli", _factory)
    return fake


def _namespace(**overrides: object) -> argparse.Namespace:
    values: dict[str, object] = {"recurse": None, "no_clean": None, "vs": None, "workers": None}
    values.update(overrides)
    return argparse.Namespace(**values)


def test_version_flag(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--version"]) == 0
    assert capsys.readouterr().out.strip() == __version__


def test_missing_target(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["missing", "--no-update-check"]) == 1
    assert "'missing' does not exist." in capsys.readouterr().err


def test_purges_project_and_prints_progress(
    workspace: Path,
    gateway: CliGateway,
    capsys: pytest.CaptureFixture[str],
) -> None:
    project = write_project(workspace / "App", outputs=SDK_OUTPUTS)
    assert main(["--no-update-check"]) == 0
    out = capsys.readouterr().out
    assert "Found 0 projects to purge" in out
    assert "Use --recurse to search for projects in sub-directories." in out

    assert main(["--recurse", "--no-update-check"]) == 0
    out = capsys.readouterr().out
    assert "Found 1 project to purge" in out
    assert "Running 'dotnet clean App --configuration Debug -p:BuildProjectReferences=false'... done!" in out
    assert f"Deleted '{Path('App') / 'obj'}'" in out
    assert "(1/1) Purged App" in out
    assert "Finished purging 1 project" in out
    assert not (project.parent / "bin").exists()
    assert gateway.executables == ["dotnet"]


def test_recurse_notice_for_single_project(
    workspace: Path,
    gateway: CliGateway,
    capsys: pytest.CaptureFixture[str],
) -> None:
    _ = write_project(workspace, outputs=SDK_OUTPUTS)
    assert main(["App.csproj", "-r", "-n", "--no-update-check"]) == 0
    out = capsys.readouterr().out
    assert "The --recurse option is ignored when specifying a single project or solution file." in out
    assert "Running 'dotnet clean" not in out
    assert gateway.cleans == []


def test_failed_project_sets_exit_code(
    workspace: Path,
    gateway: CliGateway,
    capsys: pytest.CaptureFixture[str],
) -> None:
    project = write_project(workspace, outputs=SDK_OUTPUTS)
    gateway.projects[project] = FakeProject(clean_exit_code=3)
    assert main(["--no-update-check"]) == 1
    out = capsys.readouterr().out
    assert " failed (exit code 3)" in out
    assert f"Failed to purge project at path: {project}" in out
    assert "Failed purging 1 project" in out


def test_invalid_solution_reports_error_code(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _ = (workspace / "All.sln").write_text("nonsense", encoding="utf-8")
    assert main(["All.sln", "--no-update-check"]) == 1
    assert "[dotnet-purge] DP212: Unable to read solution file" in capsys.readouterr().err


def test_invalid_config_reports_error_code(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _ = (workspace / "dotnet-purge.toml").write_text("[purge]\nworkers = 0\n", encoding="utf-8")
    assert main(["--no-update-check"]) == 1
    assert "[dotnet-purge] DP115:" in capsys.readouterr().err


def test_unsupported_config_version_reports_its_code(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _ = (workspace / "dotnet-purge.toml").write_text("config_version = 3\n", encoding="utf-8")
    assert main(["--no-update-check"]) == 1
    assert "[dotnet-purge] DP113: Unsupported config_version 3" in capsys.readouterr().err


def test_invalid_workers_flag_is_a_usage_error(workspace: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        _ = main(["--workers", "zero"])
    assert excinfo.value.code == 2


def test_config_supplies_defaults(workspace: Path, gateway: CliGateway) -> None:
    _ = (workspace / "dotnet-purge.toml").write_text(
        '[purge]\nrecurse = true\nno_clean = true\ndotnet = "/opt/dotnet/dotnet"\n',
        encoding="utf-8",
    )
    _ = write_project(workspace / "nested", outputs=SDK_OUTPUTS)
    assert main(["--no-update-check"]) == 0
    assert gateway.cleans == []
    assert gateway.executables == ["/opt/dotnet/dotnet"]
    assert not (workspace / "nested" / "obj").exists()


def test_cancellation_prints_notice(
    workspace: Path,
    gateway: CliGateway,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    tokens: list[CancellationToken] = []

    def _token() -> CancellationToken:
        tokens.append(CancellationToken())
        return tokens[-1]

    monkeypatch.setattr("dotnet_purge.cli.app.CancellationToken", _token)
    gateway.default = FakeProject(on_clean=lambda _path, _args: tokens[0].cancel())
    _ = write_project(workspace, outputs=SDK_OUTPUTS)
    assert main(["--no-update-check"]) == 1
    out = capsys.readouterr().out
    assert "Cancelled purging 1 project" in out
    assert out.rstrip().endswith("Operation cancelled")
    assert (workspace / "obj").is_dir()


def test_second_interrupt_exits_with_cancelled_status(
    workspace: Path,
    gateway: CliGateway,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    def _interrupted(*_args: object, **_kwargs: object) -> None:
        raise KeyboardInterrupt

    monkeypatch.setattr("dotnet_purge.cli.app.run_purge", _interrupted)
    _ = write_project(workspace, outputs=SDK_OUTPUTS)
    assert main(["--no-update-check"]) == 1
    assert capsys.readouterr().out.rstrip().endswith("Operation cancelled")
    assert gateway.cleans == []


def test_newer_version_notice(
    workspace: Path,
    gateway: CliGateway,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    future: Future[str | None] = Future()
    future.set_result("99.0.0")
    calls: list[bool] = []

    def _start(current: str, *, enabled: bool, index_url: str, timeout: float) -> VersionCheck:
        del current, index_url, timeout
        calls.append(enabled)
        return VersionCheck(future=future)

    monkeypatch.setattr("dotnet_purge.cli.app.start_version_check", _start)
    assert main([]) == 0
    out = capsys.readouterr().out
    assert calls == [True]
    assert "A newer version (99.0.0) of dotnet-purge is available!" in out
    assert f"Update by running '{UPDATE_COMMAND}'" in out


def test_update_check_disabled_by_environment(
    workspace: Path,
    gateway: CliGateway,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    calls: list[bool] = []

    def _start(current: str, *, enabled: bool, index_url: str, timeout: float) -> VersionCheck:
        del current, index_url, timeout
        calls.append(enabled)
        return VersionCheck()

    monkeypatch.setattr("dotnet_purge.cli.app.start_version_check", _start)
    monkeypatch.setenv("DOTNET_PURGE_NO_UPDATE_CHECK", "1")
    assert main([]) == 0
    assert calls == [False]


def test_build_options_precedence(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    config = Config(purge=PurgeConfig(recurse=True, vs=True, workers=2))
    options = build_options(_namespace(), config, tmp_path)
    assert (options.recurse, options.no_clean, options.vs, options.workers) == (True, False, True, 2)

    monkeypatch.setenv("DOTNET_PURGE_WORKERS", "5")
    assert build_options(_namespace(), config, tmp_path).workers == 5
    assert build_options(_namespace(workers=3, no_clean=True), config, tmp_path).workers == 3
    assert build_options(_namespace(no_clean=True), config, tmp_path).no_clean is True


def test_cancel_on_interrupt_first_signal_cancels_second_interrupts() -> None:
    token = CancellationToken()
    previous = signal.getsignal(signal.SIGINT)
    with cancel_on_interrupt(token):
        signal.raise_signal(signal.SIGINT)
        assert token.cancelled
        with pytest.raises(KeyboardInterrupt):
            signal.raise_signal(signal.SIGINT)
    assert signal.getsignal(signal.SIGINT) is previous
