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

"""Discovery of the project files a purge run operates on."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Final

from dotnet_purge._internal.collection_utils import dedupe_preserve
from dotnet_purge._internal.exceptions import SolutionError, TargetNotFoundError
from dotnet_purge._internal.logging_utils import structured_extra
from dotnet_purge.core.model_types import LogComponent
from dotnet_purge.core.types import ProjectTarget
from dotnet_purge.solutions import is_solution_file, read_solution_projects

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from dotnet_purge.cancellation import CancellationToken

logger: logging.Logger = logging.getLogger("dotnet_purge.discovery")

SOLUTION_EXTENSIONS: Final[tuple[str, ...]] = (".sln", ".slnx")
PROJECT_EXTENSIONS: Final[tuple[str, ...]] = (".csproj", ".vbproj", ".fsproj", ".esproj", ".proj")
PROJECT_FILE_MASKS: Final[tuple[str, ...]] = tuple(f"*{ext}" for ext in (*SOLUTION_EXTENSIONS, *PROJECT_EXTENSIONS))
RECURSE_IGNORED_NOTICE: Final[str] = (
    "The --recurse option is ignored when specifying a single project or solution file."
)

__all__ = [
    "PROJECT_EXTENSIONS",
    "PROJECT_FILE_MASKS",
    "RECURSE_IGNORED_NOTICE",
    "SOLUTION_EXTENSIONS",
    "discover_projects",
]


def _is_cancelled(cancellation: CancellationToken | None) -> bool:
    return cancellation is not None and cancellation.cancelled


def _notify(on_notice: Callable[[str], None] | None, message: str) -> None:
    if on_notice is not None:
        on_notice(message)


def _discover_from_file(path: Path, *, recurse: bool, on_notice: Callable[[str], None] | None) -> list[Path]:
    if recurse:
        _notify(on_notice, RECURSE_IGNORED_NOTICE)
    if is_solution_file(path):
        return read_solution_projects(path)
    if path.suffix.lower() in PROJECT_EXTENSIONS:
        return [path]
    logger.debug(
        "Ignoring %s: not a project or solution file",
        path,
        extra=structured_extra(LogComponent.DISCOVERY, path=path),
    )
    return []


def _matching_files(root: Path, mask: str, *, recurse: bool) -> list[Path]:
    matches = root.rglob(mask) if recurse else root.glob(mask)
    return sorted(candidate for candidate in matches if candidate.is_file())


def _expand_candidate(candidate: Path, on_notice: Callable[[str], None] | None) -> list[Path]:
    if not is_solution_file(candidate):
        return [candidate]
    try:
        return read_solution_projects(candidate)
    except SolutionError as exc:
        logger.warning(
            "Skipping solution %s: %s",
            candidate,
            exc,
            extra=structured_extra(LogComponent.DISCOVERY, path=candidate),
        )
        _notify(on_notice, f"Skipping '{candidate}': {exc}")
        return []


def _iter_directory(
    root: Path,
    *,
    recurse: bool,
    cancellation: CancellationToken | None,
    on_notice: Callable[[str], None] | None,
) -> Iterator[Path]:
    for mask in PROJECT_FILE_MASKS:
        if _is_cancelled(cancellation):
            return
        for candidate in _matching_files(root, mask, recurse=recurse):
            if _is_cancelled(cancellation):
                return
            yield from _expand_candidate(candidate, on_notice)


def discover_projects(
    root: Path,
    *,
    recurse: bool,
    cancellation: CancellationToken | None = None,
    on_notice: Callable[[str], None] | None = None,
) -> list[ProjectTarget]:
    """Collect the project files to purge under ``root``.

    A file root is taken as a solution (expanded to its member projects) or as a
    single project; any other file yields nothing. A directory root is scanned
    for solution and project files, mask by mask, either at the top level or
    through the whole tree when ``recurse`` is set.

    Args:
        root: File or directory to search.
        recurse: Whether to search sub-directories of a directory root.
        cancellation: Token checked between masks and between files. When set,
            the projects found so far are returned.
        on_notice: Callback for user-facing notices such as an ignored
            ``--recurse`` flag or a skipped solution.

    Returns:
        Unique targets in first-seen order.

    Raises:
        TargetNotFoundError: If ``root`` does not exist.
        SolutionError: If ``root`` is a solution file that cannot be expanded.
    """
    absolute = Path(os.path.abspath(root))
    if not absolute.exists():
        raise TargetNotFoundError(root)
    if absolute.is_file():
        found = _discover_from_file(absolute, recurse=recurse, on_notice=on_notice)
    else:
        found = list(_iter_directory(absolute, recurse=recurse, cancellation=cancellation, on_notice=on_notice))
    targets = dedupe_preserve(ProjectTarget.from_path(path) for path in found)
    logger.info(
        "Discovered %d project(s) under %s",
        len(targets),
        absolute,
        extra=structured_extra(LogComponent.DISCOVERY, path=absolute, details={"recurse": recurse}),
    )
    return targets
