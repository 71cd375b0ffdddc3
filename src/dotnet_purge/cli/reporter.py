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

"""Console progress reporting for purge runs."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from dotnet_purge.cli.helpers import ERROR_STYLE, HINT_STYLE, SUCCESS_STYLE, WARNING_STYLE, echo

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from dotnet_purge._internal.process import CommandOutput
    from dotnet_purge.core.types import ConfigurationKey, ProjectTarget, RunSummary


def project_word(count: int) -> str:
    return "project" if count == 1 else "projects"


class ConsoleReporter:
    """Print purge progress the way users of the tool expect to read it.

    Paths are shown relative to ``root``; an existing file is shown as its
    containing directory.
    """

    def __init__(self, root: Path) -> None:
        self.root = root

    def relative(self, path: Path) -> str:
        shown = path.parent if path.is_file() else path
        try:
            return os.path.relpath(shown, self.root)
        except ValueError:
            # different drives on Windows
            return str(shown)

    def notice(self, message: str) -> None:
        echo(message, style=HINT_STYLE)

    def discovered(self, targets: Sequence[ProjectTarget], *, recurse: bool) -> None:
        count = len(targets)
        echo(f"Found {count} {project_word(count)} to purge")
        echo()
        if count == 0 and not recurse:
            echo("Use --recurse to search for projects in sub-directories.", style=HINT_STYLE)

    def clean_started(self, target: ProjectTarget, key: ConfigurationKey, args: Sequence[str]) -> None:
        del key
        echo(f"Running 'dotnet clean {self.relative(target.path)} {' '.join(args)}'...", newline=False)

    def clean_finished(self, target: ProjectTarget, key: ConfigurationKey, output: CommandOutput) -> None:
        del target, key
        if output.exit_code == 0:
            echo(" done!", style=SUCCESS_STYLE)
        else:
            echo(f" failed (exit code {output.exit_code})", style=ERROR_STYLE)

    def deleted(self, path: Path) -> None:
        echo(f"Deleted '{self.relative(path)}'")

    def project_purged(self, index: int, total: int, target: ProjectTarget) -> None:
        echo(f"({index}/{total}) Purged {self.relative(target.path)}")

    def project_failed(self, target: ProjectTarget, message: str) -> None:
        echo(f"Failed to purge project at path: {target.path}\n{message}", style=ERROR_STYLE)

    def summary(self, summary: RunSummary) -> None:
        if summary.succeeded > 0:
            echo()
            echo(f"Finished purging {summary.succeeded} {project_word(summary.succeeded)}", style=SUCCESS_STYLE)
        if summary.cancelled > 0:
            echo()
            echo(f"Cancelled purging {summary.cancelled} {project_word(summary.cancelled)}", style=WARNING_STYLE)
        if summary.failed > 0:
            echo()
            echo(f"Failed purging {summary.failed} {project_word(summary.failed)}", style=ERROR_STYLE)


__all__ = ["ConsoleReporter", "project_word"]
