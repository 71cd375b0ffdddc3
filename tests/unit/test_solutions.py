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

"""Unit tests for solution file readers."""

from __future__ import annotations

from pathlib import Path

import pytest

from dotnet_purge.exceptions import SolutionReadError, UnsupportedSolutionFormatError
from dotnet_purge.solutions import SlnSerializer, SlnxSerializer, is_solution_file, read_solution_projects

pytestmark = pytest.mark.unit

SLN_TEXT = """
Microsoft Visual Studio Solution File, Format Version 12.00
# Visual Studio Version 17
Project("{FAE04EC0-301F-11D3-BF4B-00C04F79EFBC}") = "App", "src\\App\\App.csproj", "{11111111-1111-1111-1111-111111111111}"
EndProject
Project("{2150E333-8FDC-42A3-9474-1A3956D46DE8}") = "tests", "tests", "{22222222-2222-2222-2222-222222222222}"
EndProject
Project("{F2A71F9B-5D33-465A-A702-920D77279786}") = "Lib", "..\\shared\\Lib\\Lib.fsproj", "{33333333-3333-3333-3333-333333333333}"
EndProject
Global
EndGlobal
"""

SLNX_TEXT = """<Solution>
  <Folder Name="/src/">
    <Project Path="src/App/App.csproj" />
    <Folder Name="/src/nested/">
      <Project Path="src\\Nested\\Nested.vbproj" />
    </Folder>
  </Folder>
  <Project Path="tools/Build.proj" />
</Solution>
"""


def test_read_sln_skips_solution_folders(tmp_path: Path) -> None:
    solution = tmp_path / "repo" / "All.sln"
    solution.parent.mkdir()
    _ = solution.write_text(SLN_TEXT, encoding="utf-8")
    assert read_solution_projects(solution) == [
        tmp_path / "repo" / "src" / "App" / "App.csproj",
        tmp_path / "shared" / "Lib" / "Lib.fsproj",
    ]


def test_read_slnx_includes_nested_folders(tmp_path: Path) -> None:
    solution = tmp_path / "All.slnx"
    _ = solution.write_text(SLNX_TEXT, encoding="utf-8")
    assert read_solution_projects(solution) == [
        tmp_path / "src" / "App" / "App.csproj",
        tmp_path / "src" / "Nested" / "Nested.vbproj",
        tmp_path / "tools" / "Build.proj",
    ]


def test_sln_without_header_is_rejected(tmp_path: Path) -> None:
    solution = tmp_path / "Broken.sln"
    _ = solution.write_text("not a solution\n", encoding="utf-8")
    with pytest.raises(SolutionReadError, match="header"):
        _ = read_solution_projects(solution)


def test_malformed_slnx_is_rejected(tmp_path: Path) -> None:
    solution = tmp_path / "Broken.slnx"
    _ = solution.write_text("<Solution><Project Path=", encoding="utf-8")
    with pytest.raises(SolutionReadError):
        _ = read_solution_projects(solution)


def test_slnx_with_wrong_root_is_rejected(tmp_path: Path) -> None:
    solution = tmp_path / "Other.slnx"
    _ = solution.write_text("<Project />", encoding="utf-8")
    with pytest.raises(SolutionReadError, match="unexpected root"):
        _ = read_solution_projects(solution)


def test_unreadable_solution_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(SolutionReadError):
        _ = read_solution_projects(tmp_path / "Missing.sln")


def test_unsupported_extension(tmp_path: Path) -> None:
    with pytest.raises(UnsupportedSolutionFormatError, match="'.txt'"):
        _ = read_solution_projects(tmp_path / "notes.txt")


def test_serializer_matching_is_case_insensitive() -> None:
    assert SlnSerializer().is_supported(Path("A.SLN"))
    assert SlnxSerializer().is_supported(Path("a.slnx"))
    assert not SlnSerializer().is_supported(Path("a.slnx"))
    assert is_solution_file(Path("x.sln"))
    assert not is_solution_file(Path("x.csproj"))
