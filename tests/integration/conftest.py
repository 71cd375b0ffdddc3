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

"""Fixtures for multi-component integration tests."""

from __future__ import annotations

import stat
import sys
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from pathlib import Path

# Answers `msbuild -getProperty` and `clean` the way the .NET SDK does,
# including backslash-separated output paths.
FAKE_DOTNET_SCRIPT = r"""#!/bin/sh
cmd="$1"
shift
project="$1"
shift
echo "$cmd $project $*" >> "$FAKE_DOTNET_LOG"
case "$cmd" in
  msbuild)
    props=""
    config=""
    tf=""
    for arg in "$@"; do
      case "$arg" in
        -getProperty:*) props="${arg#-getProperty:}" ;;
        -p:Configuration=*) config="${arg#-p:Configuration=}" ;;
        -p:TargetFramework=*) tf="${arg#-p:TargetFramework=}" ;;
      esac
    done
    case "$props" in
      Configurations) echo "Debug;Release" ;;
      TargetFrameworks) echo "${FAKE_DOTNET_FRAMEWORKS:-}" ;;
      *)
        sep='\\'
        if [ -n "$tf" ]; then cell="$config$sep$tf$sep"; else cell="$config$sep"; fi
        printf '{"Properties":{"BaseIntermediateOutputPath":"obj%s","BaseOutputPath":"bin%s","PackageOutputPath":"bin%s%s","PublishDir":"bin%s%spublish%s"}}\n' \
          "$sep" "$sep" "$sep" "$cell" "$sep" "$cell" "$sep"
        ;;
    esac
    ;;
  clean)
    echo "Build succeeded."
    exit "${FAKE_DOTNET_CLEAN_EXIT:-0}"
    ;;
esac
"""


@pytest.fixture
def fake_dotnet(tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Install an executable stand-in for ``dotnet`` and return its path.

    Every invocation is appended to the file named by ``FAKE_DOTNET_LOG``.
    """
    if sys.platform == "win32":
        pytest.skip("fake dotnet executable is a POSIX shell script")
    bin_dir = tmp_path_factory.mktemp("fake-dotnet")
    executable = bin_dir / "dotnet"
    _ = executable.write_text(FAKE_DOTNET_SCRIPT, encoding="utf-8")
    executable.chmod(executable.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    monkeypatch.setenv("FAKE_DOTNET_LOG", str(bin_dir / "calls.log"))
    monkeypatch.delenv("FAKE_DOTNET_FRAMEWORKS", raising=False)
    monkeypatch.delenv("FAKE_DOTNET_CLEAN_EXIT", raising=False)
    return executable

