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

"""Runtime data structures describing projects, build matrices, and purge outcomes."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Final, TypeAlias

from .model_types import PurgeStatus
from .type_aliases import ConfigurationName, FrameworkName, OutputProperties

if TYPE_CHECKING:
    from .type_aliases import Command

BUILD_PROJECT_REFERENCES_OFF: Final[str] = "-p:BuildProjectReferences=false"


@dataclass(slots=True, frozen=True)
class ProjectTarget:
    """A single project file selected for purging.

    Attributes:
        path: Absolute path of the project file. Two targets are equal when their
            paths are equal, which is what discovery relies on for deduplication.
    """

    path: Path

    @classmethod
    def from_path(cls, path: str | os.PathLike[str]) -> ProjectTarget:
        """Build a target from any path, normalising it without resolving symlinks."""
        return cls(path=Path(os.path.abspath(os.fspath(path))))

    @property
    def directory(self) -> Path:
        return self.path.parent

    @property
    def name(self) -> str:
        return self.path.name


@dataclass(slots=True, frozen=True)
class ConfigurationKey:
    """One cell of a project's build matrix."""

    configuration: ConfigurationName
    target_framework: FrameworkName | None = None

    def clean_args(self) -> Command:
        """Return ``dotnet clean`` arguments scoped to this cell only."""
        args: Command = ["--configuration", self.configuration, BUILD_PROJECT_REFERENCES_OFF]
        if self.target_framework is not None:
            args.extend(["--framework", self.target_framework])
        return args

    def __str__(self) -> str:
        if self.target_framework is None:
            return self.configuration
        return f"{self.configuration}|{self.target_framework}"


ConfigurationMatrix: TypeAlias = dict[ConfigurationKey, OutputProperties]


@dataclass(slots=True, frozen=True)
class DeletionPlan:
    """Existing output directories of a project, ordered deepest first.

    Attributes:
        project_directory: Directory containing the project file; never part of ``paths``.
        paths: Absolute directory paths sorted in descending order so that a
            nested directory always precedes any of its ancestors.
    """

    project_directory: Path
    paths: tuple[Path, ...] = ()

    def __len__(self) -> int:
        return len(self.paths)

    def __bool__(self) -> bool:
        return bool(self.paths)


def _default_paths() -> list[Path]:
    return []


@dataclass(slots=True)
class PurgeResult:
    """Outcome of purging one project."""

    target: ProjectTarget
    status: PurgeStatus
    message: str | None = None
    deleted: list[Path] = field(default_factory=_default_paths)
    cleaned: int = 0

    @property
    def succeeded(self) -> bool:
        return self.status is PurgeStatus.SUCCEEDED


def _default_results() -> list[PurgeResult]:
    return []


@dataclass(slots=True)
class RunSummary:
    """Aggregated counts for a whole purge run."""

    total: int = 0
    succeeded: int = 0
    failed: int = 0
    cancelled: int = 0
    was_cancelled: bool = False
    results: list[PurgeResult] = field(default_factory=_default_results)

    def record(self, result: PurgeResult) -> None:
        self.results.append(result)
        match result.status:
            case PurgeStatus.SUCCEEDED:
                self.succeeded += 1
            case PurgeStatus.FAILED:
                self.failed += 1
            case PurgeStatus.CANCELLED:
                self.cancelled += 1
                self.was_cancelled = True

    @property
    def remaining(self) -> int:
        return self.total - self.succeeded - self.failed - self.cancelled

    @property
    def exit_code(self) -> int:
        return 1 if self.failed > 0 or self.cancelled > 0 or self.was_cancelled else 0


__all__ = [
    "BUILD_PROJECT_REFERENCES_OFF",
    "ConfigurationKey",
    "ConfigurationMatrix",
    "DeletionPlan",
    "ProjectTarget",
    "PurgeResult",
    "RunSummary",
]
