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

"""Unit tests for configuration matrix resolution."""

from __future__ import annotations

from pathlib import Path

import pytest

from dotnet_purge.cancellation import CancellationToken
from dotnet_purge.core.types import ConfigurationKey, ProjectTarget
from dotnet_purge.exceptions import EvaluationFailedError, PurgeCancelledError
from dotnet_purge.matrix import effective_workers, matrix_keys, resolve_matrix
from tests.fixtures.fakes import FakeGateway, FakeProject

pytestmark = pytest.mark.unit

TARGET = ProjectTarget.from_path(Path("/work/App/App.csproj"))


def _gateway(**kwargs: object) -> FakeGateway:
    return FakeGateway(projects={TARGET.path: FakeProject(**kwargs)})  # pyright: ignore[reportArgumentType]


def test_matrix_keys_are_configuration_major() -> None:
    keys = matrix_keys(["Debug", "Release"], ["net8.0", "net6.0"])
    assert [str(key) for key in keys] == ["Debug|net8.0", "Debug|net6.0", "Release|net8.0", "Release|net6.0"]


def test_single_framework_does_not_split_matrix() -> None:
    keys = matrix_keys(["Debug", "Release"], ["net8.0"])
    assert keys == [ConfigurationKey("Debug"), ConfigurationKey("Release")]  # pyright: ignore[reportArgumentType]


def test_clean_args_scope_one_cell() -> None:
    assert ConfigurationKey("Release", "net8.0").clean_args() == [  # pyright: ignore[reportArgumentType]
        "--configuration",
        "Release",
        "-p:BuildProjectReferences=false",
        "--framework",
        "net8.0",
    ]


def test_resolve_matrix_without_frameworks() -> None:
    gateway = _gateway(configurations="Debug;Release")
    matrix = resolve_matrix(TARGET, gateway)
    assert [str(key) for key in matrix] == ["Debug", "Release"]
    assert matrix[ConfigurationKey("Debug")]["BaseOutputPath"] == "bin\\"  # pyright: ignore[reportArgumentType]
    overrides = [(configuration, framework) for _, _, configuration, framework in gateway.evaluations]
    assert overrides == [(None, None), (None, None), ("Debug", None), ("Release", None)]


def test_resolve_matrix_multi_targeted() -> None:
    gateway = _gateway(configurations="Debug;Release", target_frameworks="net8.0;net6.0")
    matrix = resolve_matrix(TARGET, gateway)
    assert len(matrix) == 4
    publish = matrix[ConfigurationKey("Release", "net6.0")]["PublishDir"]  # pyright: ignore[reportArgumentType]
    assert publish == "bin\\Release\\net6.0\\publish\\"


def test_resolve_matrix_single_framework_uses_no_override() -> None:
    gateway = _gateway(configurations="Debug", target_frameworks="net8.0")
    matrix = resolve_matrix(TARGET, gateway)
    assert list(matrix) == [ConfigurationKey("Debug")]  # pyright: ignore[reportArgumentType]
    assert gateway.evaluations[-1][3] is None


def test_resolve_matrix_without_configurations_is_empty() -> None:
    gateway = _gateway(configurations=" ; ")
    assert resolve_matrix(TARGET, gateway) == {}


def test_resolve_matrix_parallel_keeps_key_order() -> None:
    gateway = _gateway(configurations="Debug;Release;Staging", target_frameworks="net8.0;net6.0;net48")
    matrix = resolve_matrix(TARGET, gateway, workers=4)
    expected = matrix_keys(["Debug", "Release", "Staging"], ["net8.0", "net6.0", "net48"])
    assert list(matrix) == expected
    assert len(gateway.evaluations) == 2 + len(expected)


def test_resolve_matrix_propagates_evaluation_failure() -> None:
    gateway = _gateway(evaluation_exit_code=1)
    with pytest.raises(EvaluationFailedError):
        _ = resolve_matrix(TARGET, gateway)


def test_resolve_matrix_observes_cancellation() -> None:
    gateway = _gateway()
    token = CancellationToken()
    token.cancel()
    with pytest.raises(PurgeCancelledError):
        _ = resolve_matrix(TARGET, gateway, cancellation=token)


@pytest.mark.parametrize(("value", "expected"), [(None, 1), (0, 1), (-3, 1), (1, 1), (6, 6), ("bogus", 1)])
def test_effective_workers(value: int | str | None, expected: int) -> None:
    assert effective_workers(value) == expected  # pyright: ignore[reportArgumentType]


def test_effective_workers_auto(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("dotnet_purge.matrix.os.cpu_count", lambda: 12)
    assert effective_workers("auto") == 12
    monkeypatch.setattr("dotnet_purge.matrix.os.cpu_count", lambda: None)
    assert effective_workers("auto") == 1
