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

"""Allow-listed subprocess execution for build tool invocations."""

from __future__ import annotations

import logging
import subprocess  # noqa: S404  # JUSTIFIED: the only place dotnet-purge starts child processes
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

from dotnet_purge._internal.logging_utils import structured_extra
from dotnet_purge.core.model_types import LogComponent

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable
    from pathlib import Path

    from dotnet_purge.core.type_aliases import Command

logger: logging.Logger = logging.getLogger("dotnet_purge.process")

__all__ = ["CommandOutput", "run_command"]


@dataclass(slots=True)
class CommandOutput:
    args: Command
    stdout: str
    stderr: str
    exit_code: int
    duration_ms: float


def run_command(
    args: Iterable[str],
    *,
    allowed: Collection[str] | None = None,
    project: Path | None = None,
) -> CommandOutput:
    """Run a child process to completion and capture its output.

    The argument vector is passed straight to the executable, never through a
    shell, and stdin is closed so a tool waiting for input cannot stall a purge.

    Args:
        args: Command line to execute; the first element is the executable.
        allowed: Executables the caller accepts. When given, ``args[0]`` must be
            one of them.
        project: Project the command operates on, attached to log records.

    Returns:
        ``CommandOutput`` with the argument vector, captured text, exit code
        and wall-clock duration in milliseconds.

    Raises:
        ValueError: If ``args`` is empty or the executable is not allowed.
        TypeError: If any argument is an empty string.
        OSError: If the executable cannot be started.
    """
    argv: Command = list(args)
    if not argv:
        msg = "command must not be empty"
        raise ValueError(msg)
    if not all(argv):
        msg = f"command contains an empty argument: {argv!r}"
        raise TypeError(msg)
    executable = argv[0]
    if allowed is not None and executable not in allowed:
        msg = f"executable {executable!r} is not allowed"
        raise ValueError(msg)
    command_line = " ".join(argv)
    logger.debug(
        "Executing command: %s",
        command_line,
        extra=structured_extra(LogComponent.BUILD_TOOL, tool=executable, project=project),
    )
    start = time.perf_counter()
    completed = subprocess.run(  # noqa: S603  # JUSTIFIED: argv is built by DotnetCli, executable allow-listed
        argv,
        check=False,
        capture_output=True,
        text=True,
        stdin=subprocess.DEVNULL,
    )
    duration_ms = (time.perf_counter() - start) * 1000
    if completed.returncode != 0:
        logger.warning(
            "Command failed (exit=%s): %s",
            completed.returncode,
            command_line,
            extra=structured_extra(
                LogComponent.BUILD_TOOL,
                tool=executable,
                project=project,
                exit_code=completed.returncode,
                duration_ms=duration_ms,
            ),
        )
    return CommandOutput(
        args=argv,
        stdout=completed.stdout or "",
        stderr=completed.stderr or "",
        exit_code=completed.returncode,
        duration_ms=duration_ms,
    )
