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

"""Per-project purge: clean, delete output directories, prune empty parents.

Deletion order matters. Planned paths are deleted deepest first so that no
directory is removed while a nested planned path is still pending, and every
parent checked for emptiness afterwards is already free of planned children.
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import TYPE_CHECKING, Final, Protocol

from dotnet_purge._internal.collection_utils import dedupe_preserve
from dotnet_purge._internal.exceptions import CleanFailedError, PurgeFilesystemError
from dotnet_purge._internal.logging_utils import structured_extra
from dotnet_purge.core.model_types import LogComponent, PurgeStatus
from dotnet_purge.core.types import DeletionPlan, PurgeResult
from dotnet_purge.matrix import resolve_matrix

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from dotnet_purge._internal.process import CommandOutput
    from dotnet_purge.cancellation import CancellationToken
    from dotnet_purge.core.types import ConfigurationKey, ConfigurationMatrix, ProjectTarget
    from dotnet_purge.msbuild import BuildToolGateway

logger: logging.Logger = logging.getLogger("dotnet_purge.purge")

VS_DIRECTORY_NAME: Final[str] = ".vs"
VS_USER_SUFFIX: Final[str] = ".user"
REPOSITORY_MARKER: Final[str] = ".git"

__all__ = [
    "PurgeReporter",
    "build_deletion_plan",
    "delete_path",
    "delete_solution_vs_dir",
    "prune_empty_parents",
    "purge_project",
]


class PurgeReporter(Protocol):
    """Receives progress events while a single project is purged."""

    def clean_started(self, target: ProjectTarget, key: ConfigurationKey, args: Sequence[str]) -> None: ...

    def clean_finished(self, target: ProjectTarget, key: ConfigurationKey, output: CommandOutput) -> None: ...

    def deleted(self, path: Path) -> None: ...


def _native_separators(value: str) -> str:
    # MSBuild reports SDK defaults such as ``bin\`` with Windows separators on every OS
    if os.sep == "/":
        return value.replace("\\", "/")
    return value


def _plan_candidates(matrix: ConfigurationMatrix) -> Iterable[str]:
    for properties in matrix.values():
        for value in properties.values():
            stripped = value.strip() if value else ""
            if stripped:
                yield stripped


def _is_protected(path: Path, project_directory: Path) -> bool:
    return path == project_directory or path in project_directory.parents


def build_deletion_plan(target: ProjectTarget, matrix: ConfigurationMatrix) -> DeletionPlan:
    """Compute the existing output directories of a project, deepest first.

    Values from every matrix cell are merged, empty values are dropped, and each
    remaining value is made absolute relative to the project directory without
    resolving symlinks. Only directories that currently exist are kept. The
    project directory and its ancestors are never planned.

    Args:
        target: Project whose outputs are planned.
        matrix: Output properties per configuration key.

    Returns:
        ``DeletionPlan`` whose paths are unique and sorted in descending order.
    """
    project_directory = target.directory
    planned: list[Path] = []
    for raw in dedupe_preserve(_plan_candidates(matrix)):
        candidate = Path(os.path.abspath(os.path.join(project_directory, _native_separators(raw))))
        if not candidate.is_dir():
            continue
        if _is_protected(candidate, project_directory):
            logger.warning(
                "Refusing to delete %s: it contains the project %s",
                candidate,
                target.name,
                extra=structured_extra(LogComponent.PURGE, path=candidate, project=target.path),
            )
            continue
        planned.append(candidate)
    paths = tuple(sorted(dedupe_preserve(planned), reverse=True))
    return DeletionPlan(project_directory=project_directory, paths=paths)


def delete_path(path: Path) -> bool:
    """Delete a file, symlink or directory tree if present.

    Symlinks are unlinked, never followed.

    Returns:
        ``True`` when something was deleted, ``False`` when nothing was there.

    Raises:
        PurgeFilesystemError: If the deletion fails.
    """
    try:
        if path.is_symlink() or path.is_file():
            path.unlink()
            return True
        if path.is_dir():
            shutil.rmtree(path)
            return True
    except OSError as exc:
        raise PurgeFilesystemError(path, exc) from exc
    return False


def prune_empty_parents(path: Path, *, stop_at: Path) -> list[Path]:
    """Remove parents of ``path`` that are now empty, walking upwards.

    The walk stops at the first parent that is missing or not empty, at
    ``stop_at`` (which is never removed), or at the filesystem root.

    Returns:
        The removed directories, innermost first.

    Raises:
        PurgeFilesystemError: If an empty directory cannot be removed.
    """
    removed: list[Path] = []
    current = path.parent
    while current != stop_at and current.parent != current:
        if current.is_symlink() or not current.is_dir():
            break
        if any(current.iterdir()):
            break
        try:
            current.rmdir()
        except OSError as exc:
            raise PurgeFilesystemError(current, exc) from exc
        removed.append(current)
        current = current.parent
    return removed


def _run_clean(
    target: ProjectTarget,
    matrix: ConfigurationMatrix,
    gateway: BuildToolGateway,
    reporter: PurgeReporter,
    cancellation: CancellationToken | None,
) -> int:
    cleaned = 0
    for key in matrix:
        if cancellation is not None:
            cancellation.raise_if_cancelled()
        args = key.clean_args()
        reporter.clean_started(target, key, args)
        output = gateway.clean(target.path, args, cancellation=cancellation)
        reporter.clean_finished(target, key, output)
        if output.exit_code != 0:
            raise CleanFailedError(target.path, args, output.exit_code, output.stdout, output.stderr)
        cleaned += 1
    return cleaned


def _delete_vs_files(target: ProjectTarget, reporter: PurgeReporter) -> list[Path]:
    removed: list[Path] = []
    for candidate in (
        target.directory / VS_DIRECTORY_NAME,
        target.path.with_name(target.name + VS_USER_SUFFIX),
    ):
        if delete_path(candidate):
            reporter.deleted(candidate)
            removed.append(candidate)
    return removed


def purge_project(
    target: ProjectTarget,
    gateway: BuildToolGateway,
    *,
    no_clean: bool,
    delete_vs_files: bool,
    reporter: PurgeReporter,
    cancellation: CancellationToken | None = None,
    workers: int = 1,
) -> PurgeResult:
    """Purge one project.

    Steps, in order: resolve the configuration matrix; unless ``no_clean``, run
    ``dotnet clean`` for every matrix cell; delete the planned output
    directories deepest first; prune parents the deletions left empty (never
    the project directory); with ``delete_vs_files``, remove the project's
    ``.vs`` directory and ``<project>.user`` entry.

    Args:
        target: Project to purge.
        gateway: Build tool used for evaluation and clean.
        no_clean: Skip the clean step.
        delete_vs_files: Also delete Visual Studio scratch files.
        reporter: Receives clean and deletion events.
        cancellation: Token checked before each clean and before deletion starts.
        workers: Concurrency for matrix evaluation.

    Returns:
        A succeeded ``PurgeResult`` listing deleted paths in deletion order.

    Raises:
        EvaluationFailedError: If the matrix cannot be evaluated.
        CleanFailedError: If a clean invocation exits non-zero; nothing is deleted.
        PurgeFilesystemError: If a deletion fails.
        PurgeCancelledError: If cancellation is observed.
    """
    matrix = resolve_matrix(target, gateway, cancellation=cancellation, workers=workers)
    cleaned = 0
    if not no_clean:
        cleaned = _run_clean(target, matrix, gateway, reporter, cancellation)
    if cancellation is not None:
        cancellation.raise_if_cancelled()

    plan = build_deletion_plan(target, matrix)
    deleted: list[Path] = []
    removed_plan_paths: list[Path] = []
    for path in plan.paths:
        if delete_path(path):
            reporter.deleted(path)
            deleted.append(path)
            removed_plan_paths.append(path)
    for path in removed_plan_paths:
        for parent in prune_empty_parents(path, stop_at=plan.project_directory):
            reporter.deleted(parent)
            deleted.append(parent)
    if delete_vs_files:
        deleted.extend(_delete_vs_files(target, reporter))

    logger.info(
        "Purged %s: %d clean run(s), %d path(s) deleted",
        target.path,
        cleaned,
        len(deleted),
        extra=structured_extra(LogComponent.PURGE, project=target.path, details={"deleted": len(deleted)}),
    )
    return PurgeResult(target=target, status=PurgeStatus.SUCCEEDED, deleted=deleted, cleaned=cleaned)


def delete_solution_vs_dir(
    start: Path,
    *,
    reporter: PurgeReporter,
    cancellation: CancellationToken | None = None,
) -> Path | None:
    """Delete the nearest solution-level ``.vs`` directory above ``start``.

    The walk begins at ``start`` (or its parent when ``start`` is a file) and
    moves upwards until a ``.vs`` directory is found and deleted, or a
    directory holding ``.git`` marks the repository boundary.

    Returns:
        The deleted directory, or ``None`` when none was found.

    Raises:
        PurgeFilesystemError: If the directory cannot be deleted.
    """
    directory = Path(os.path.abspath(start))
    if not directory.is_dir():
        directory = directory.parent
    while directory.is_dir():
        if cancellation is not None and cancellation.cancelled:
            return None
        candidate = directory / VS_DIRECTORY_NAME
        if candidate.is_dir() and delete_path(candidate):
            reporter.deleted(candidate)
            return candidate
        if (directory / REPOSITORY_MARKER).exists():
            return None
        if directory.parent == directory:
            return None
        directory = directory.parent
    return None
