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

"""Run orchestration: discovery followed by sequential per-project purges."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from dotnet_purge._internal.error_codes import error_code_for
from dotnet_purge._internal.exceptions import PurgeCancelledError, PurgeFilesystemError
from dotnet_purge._internal.logging_utils import structured_extra
from dotnet_purge.core.model_types import LogComponent, PurgeStatus
from dotnet_purge.core.types import PurgeResult, RunSummary
from dotnet_purge.discovery import discover_projects
from dotnet_purge.purge import PurgeReporter, delete_solution_vs_dir, purge_project

if TYPE_CHECKING:
    from collections.abc import Sequence

    from dotnet_purge.cancellation import CancellationToken
    from dotnet_purge.core.types import ProjectTarget
    from dotnet_purge.msbuild import BuildToolGateway

logger: logging.Logger = logging.getLogger("dotnet_purge.services")

__all__ = ["PurgeOptions", "RunReporter", "run_purge"]


@dataclass(slots=True, frozen=True)
class PurgeOptions:
    """Resolved settings for one purge run.

    Attributes:
        target: Directory, solution or project file to purge.
        recurse: Search sub-directories of a directory target.
        no_clean: Skip ``dotnet clean`` and only delete directories.
        vs: Also delete Visual Studio scratch files.
        workers: Concurrency for per-project matrix evaluation.
    """

    target: Path
    recurse: bool = False
    no_clean: bool = False
    vs: bool = False
    workers: int = 1

    @property
    def root_directory(self) -> Path:
        """Directory that console paths are shown relative to."""
        absolute = Path(os.path.abspath(self.target))
        return absolute if absolute.is_dir() else absolute.parent


class RunReporter(PurgeReporter, Protocol):
    """Receives run-level events in addition to per-project progress."""

    def notice(self, message: str) -> None: ...

    def discovered(self, targets: Sequence[ProjectTarget], *, recurse: bool) -> None: ...

    def project_purged(self, index: int, total: int, target: ProjectTarget) -> None: ...

    def project_failed(self, target: ProjectTarget, message: str) -> None: ...

    def summary(self, summary: RunSummary) -> None: ...


def _cancel_remaining(summary: RunSummary, targets: Sequence[ProjectTarget]) -> None:
    if summary.remaining:
        logger.info(
            "Cancelling %d remaining project(s)",
            summary.remaining,
            extra=structured_extra(LogComponent.SERVICES, details={"remaining": summary.remaining}),
        )
    for target in targets[len(summary.results) :]:
        summary.record(PurgeResult(target=target, status=PurgeStatus.CANCELLED))


def _purge_one(
    target: ProjectTarget,
    options: PurgeOptions,
    gateway: BuildToolGateway,
    reporter: RunReporter,
    cancellation: CancellationToken,
) -> PurgeResult:
    try:
        return purge_project(
            target,
            gateway,
            no_clean=options.no_clean,
            delete_vs_files=options.vs,
            reporter=reporter,
            cancellation=cancellation,
            workers=options.workers,
        )
    except PurgeCancelledError as exc:
        return PurgeResult(target=target, status=PurgeStatus.CANCELLED, message=str(exc))
    # ignore JUSTIFIED: one failing project must not stop the remaining purges
    except Exception as exc:  # noqa: BLE001
        logger.warning(
            "Failed to purge %s",
            target.path,
            extra=structured_extra(
                LogComponent.SERVICES,
                project=target.path,
                details={"code": error_code_for(exc), "error": type(exc).__name__},
            ),
        )
        return PurgeResult(target=target, status=PurgeStatus.FAILED, message=str(exc))


def _delete_run_vs_dir(options: PurgeOptions, reporter: RunReporter, cancellation: CancellationToken) -> None:
    try:
        delete_solution_vs_dir(options.root_directory, reporter=reporter, cancellation=cancellation)
    except PurgeFilesystemError as exc:
        logger.warning(
            "Unable to delete Visual Studio directory: %s",
            exc,
            extra=structured_extra(LogComponent.SERVICES, path=exc.path),
        )
        reporter.notice(str(exc))


def run_purge(
    options: PurgeOptions,
    *,
    gateway: BuildToolGateway,
    reporter: RunReporter,
    cancellation: CancellationToken,
) -> RunSummary:
    """Discover projects under ``options.target`` and purge them one at a time.

    A failing project is reported and counted, and the run moves on to the
    next one. Once cancellation is observed, the current project (if it was
    interrupted) and all remaining projects are counted as cancelled.

    Args:
        options: Run settings.
        gateway: Build tool used for every project.
        reporter: Receives discovery, progress and summary events.
        cancellation: Token shared with the signal handler.

    Returns:
        Aggregated ``RunSummary``; its ``exit_code`` is the process exit status.

    Raises:
        TargetNotFoundError: If the target does not exist.
        SolutionError: If an explicitly named solution cannot be read.
    """
    targets = discover_projects(
        options.target,
        recurse=options.recurse,
        cancellation=cancellation,
        on_notice=reporter.notice,
    )
    reporter.discovered(targets, recurse=options.recurse)
    summary = RunSummary(total=len(targets))

    for target in targets:
        if cancellation.cancelled:
            _cancel_remaining(summary, targets)
            break
        result = _purge_one(target, options, gateway, reporter, cancellation)
        summary.record(result)
        if result.status is PurgeStatus.CANCELLED:
            _cancel_remaining(summary, targets)
            break
        if result.status is PurgeStatus.FAILED:
            reporter.project_failed(target, result.message or "")
            continue
        reporter.project_purged(summary.succeeded, summary.total, target)

    if options.vs and not cancellation.cancelled:
        _delete_run_vs_dir(options, reporter, cancellation)
    if cancellation.cancelled:
        summary.was_cancelled = True

    logger.info(
        "Purge run finished: %d succeeded, %d failed, %d cancelled",
        summary.succeeded,
        summary.failed,
        summary.cancelled,
        extra=structured_extra(LogComponent.SERVICES, exit_code=summary.exit_code),
    )
    reporter.summary(summary)
    return summary
