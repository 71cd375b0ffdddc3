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

"""Common exception hierarchy for dotnet-purge."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

__all__ = [
    "BuildToolError",
    "BuildToolNotFoundError",
    "CleanFailedError",
    "EvaluationFailedError",
    "PropertyOutputError",
    "PurgeCancelledError",
    "PurgeError",
    "PurgeFilesystemError",
    "PurgeTypeError",
    "PurgeValidationError",
    "SolutionError",
    "SolutionReadError",
    "TargetNotFoundError",
    "UnsupportedSolutionFormatError",
]


class PurgeError(Exception):
    """Base error for all dotnet-purge exceptions."""


class PurgeValidationError(PurgeError, ValueError):
    """Raised when input data fails validation checks."""


class PurgeTypeError(PurgeError, TypeError):
    """Raised when input data has an unexpected type."""


class PurgeCancelledError(PurgeError):
    """Raised when a cancellation request is observed mid-run."""

    def __init__(self) -> None:
        super().__init__("The operation was cancelled.")


class TargetNotFoundError(PurgeError):
    """Raised when the purge target path does not exist."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"'{path}' does not exist.")


class SolutionError(PurgeError):
    """Base error for solution file expansion."""


class UnsupportedSolutionFormatError(SolutionError):
    """Raised when no solution reader supports the file's extension."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(
            f"A solution file parser for file extension '{path.suffix}' could not be found.",
        )


class SolutionReadError(SolutionError):
    """Raised when a solution file cannot be read or parsed."""

    def __init__(self, path: Path, error: Exception) -> None:
        self.path = path
        self.error = error
        super().__init__(f"Unable to read solution file '{path}': {error}")


class BuildToolError(PurgeError):
    """Base error for failures reported by the external build tool."""

    def __init__(
        self,
        message: str,
        *,
        project: Path,
        exit_code: int,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        self.project = project
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(message)


class BuildToolNotFoundError(BuildToolError):
    """Raised when the build tool executable cannot be started."""

    def __init__(self, executable: str, project: Path, error: OSError) -> None:
        self.executable = executable
        self.error = error
        super().__init__(
            f"Unable to start '{executable}': {error}",
            project=project,
            exit_code=-1,
        )


def _format_tool_output(stdout: str, stderr: str) -> str:
    return "\n".join([
        "Stdout:",
        f"    {stdout.strip()}",
        "Stderr:",
        f"    {stderr.strip()}",
    ])


class EvaluationFailedError(BuildToolError):
    """Raised when evaluating project properties exits with a non-zero status."""

    def __init__(self, project: Path, exit_code: int, stdout: str = "", stderr: str = "") -> None:
        message = "\n".join([
            f"Error evaluating project properties at path: '{project}'.",
            f"Process exited with code: {exit_code}",
            _format_tool_output(stdout, stderr),
        ])
        super().__init__(message, project=project, exit_code=exit_code, stdout=stdout, stderr=stderr)


class PropertyOutputError(EvaluationFailedError):
    """Raised when the build tool's property output cannot be parsed."""

    def __init__(self, project: Path, stdout: str, error: Exception) -> None:
        self.error = error
        super().__init__(project, 0, stdout=stdout, stderr=str(error))


class CleanFailedError(BuildToolError):
    """Raised when ``dotnet clean`` exits with a non-zero status."""

    def __init__(
        self,
        project: Path,
        args: list[str],
        exit_code: int,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        self.args_used = list(args)
        message = "\n".join([
            f"Error cleaning project at path: '{project}' ({' '.join(args)}).",
            f"Process exited with code: {exit_code}",
            _format_tool_output(stdout, stderr),
        ])
        super().__init__(message, project=project, exit_code=exit_code, stdout=stdout, stderr=stderr)


class PurgeFilesystemError(PurgeError):
    """Raised when deleting an output path fails."""

    def __init__(self, path: Path, error: OSError) -> None:
        self.path = path
        self.error = error
        super().__init__(f"Unable to delete '{path}': {error}")
