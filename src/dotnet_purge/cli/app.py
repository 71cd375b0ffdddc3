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

"""CLI entry point for dotnet-purge."""

from __future__ import annotations

import argparse
import logging
import signal
import threading
from collections.abc import Iterator, Sequence
from contextlib import contextmanager, suppress
from pathlib import Path
from typing import TYPE_CHECKING, Final

from dotnet_purge import __version__
from dotnet_purge._internal.error_codes import error_code_for
from dotnet_purge._internal.exceptions import PurgeError
from dotnet_purge._internal.precedence import env_flag, env_str, resolve_with_precedence
from dotnet_purge.cancellation import CancellationToken
from dotnet_purge.cli.helpers import (
    ERROR_STYLE,
    SUCCESS_STYLE,
    WARNING_STYLE,
    echo,
    parse_workers,
    register_argument,
)
from dotnet_purge.cli.reporter import ConsoleReporter
from dotnet_purge.config import Config, WorkersSetting, coerce_workers, load_config
from dotnet_purge.core.model_types import LogComponent, LogFormat
from dotnet_purge.logging import LOG_FORMATS, LOG_LEVELS, configure_logging, structured_extra
from dotnet_purge.matrix import effective_workers
from dotnet_purge.msbuild import DEFAULT_EXECUTABLE, DotnetCli
from dotnet_purge.services.purge import PurgeOptions, run_purge
from dotnet_purge.versioning import (
    DEFAULT_INDEX_URL,
    DEFAULT_TIMEOUT_SECONDS,
    UPDATE_COMMAND,
    VersionCheck,
    start_version_check,
)

if TYPE_CHECKING:
    from types import FrameType

    from dotnet_purge.msbuild import BuildToolGateway

logger: logging.Logger = logging.getLogger("dotnet_purge.cli")

PROGRAM_NAME: Final[str] = "dotnet-purge"
NO_UPDATE_CHECK_ENV: Final[str] = "DOTNET_PURGE_NO_UPDATE_CHECK"
WORKERS_ENV: Final[str] = "DOTNET_PURGE_WORKERS"


@contextmanager
def cancel_on_interrupt(token: CancellationToken) -> Iterator[None]:
    """Turn the first Ctrl+C into a cancellation request for the duration of the block.

    A second Ctrl+C raises ``KeyboardInterrupt`` as usual. Outside the main
    thread signal handlers cannot be installed and the block runs unchanged.
    """
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    def _handler(signum: int, frame: FrameType | None) -> None:
        if token.cancelled:
            signal.default_int_handler(signum, frame)
        token.cancel()

    previous = signal.signal(signal.SIGINT, _handler)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROGRAM_NAME,
        description="Purges the specified solution or project. `dnpurge` is an alias.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    register_argument(
        parser,
        "target",
        nargs="?",
        metavar="TARGET",
        default=None,
        help="The path of the solution or project to purge. If not specified, the current directory will be used.",
    )
    register_argument(
        parser,
        "-r",
        "--recurse",
        action="store_true",
        default=None,
        help="Find projects in sub-directories and purge those too.",
    )
    register_argument(
        parser,
        "-n",
        "--no-clean",
        action="store_true",
        default=None,
        help="Don't run `dotnet clean` before deleting the output directories.",
    )
    register_argument(
        parser,
        "--vs",
        action="store_true",
        default=None,
        help="Delete temporary files & directories created by Visual Studio, e.g. .vs, *.csproj.user.",
    )
    register_argument(
        parser,
        "--version",
        action="store_true",
        help="Print the dotnet-purge version and exit.",
    )
    register_argument(
        parser,
        "--config",
        type=Path,
        default=None,
        help="Configuration file to use instead of dotnet-purge.toml in the current directory.",
    )
    register_argument(
        parser,
        "--workers",
        type=parse_workers,
        default=None,
        help="Concurrent property evaluations per project (a positive number or 'auto').",
    )
    register_argument(
        parser,
        "--no-update-check",
        action="store_true",
        default=None,
        help="Skip the background check for a newer dotnet-purge release.",
    )
    register_argument(
        parser,
        "--log-format",
        choices=LOG_FORMATS,
        default=None,
        help="Diagnostic log format (human-readable text or structured JSON).",
    )
    register_argument(
        parser,
        "--log-level",
        choices=LOG_LEVELS,
        default=None,
        help="Verbosity of diagnostic logs written to stderr.",
    )
    return parser


def _initialize_logging(log_format: str | None, log_level: str | None) -> None:
    with suppress(ValueError):  # best-effort logger init; a bad env value keeps defaults
        _ = configure_logging(LogFormat.from_str(log_format) if log_format else None, log_level=log_level)


def _report_error(exc: BaseException) -> None:
    echo(f"[{PROGRAM_NAME}] {error_code_for(exc)}: {exc}", style=ERROR_STYLE, err=True)


def _flag(value: bool | None) -> bool | None:
    # store_true flags default to None so unset flags defer to config
    return True if value else None


def build_options(args: argparse.Namespace, config: Config, target: Path) -> PurgeOptions:
    """Merge CLI flags, environment and configuration into ``PurgeOptions``.

    Raises:
        ConfigValidationError: If ``DOTNET_PURGE_WORKERS`` holds an invalid value.
    """
    env_workers = coerce_workers(env_str(WORKERS_ENV), context=WORKERS_ENV)
    workers: WorkersSetting = resolve_with_precedence(
        cli_value=args.workers,
        env_value=env_workers,
        config_value=config.purge.workers,
        default=1,
    )
    return PurgeOptions(
        target=target,
        recurse=resolve_with_precedence(cli_value=_flag(args.recurse), config_value=config.purge.recurse, default=False),
        no_clean=resolve_with_precedence(
            cli_value=_flag(args.no_clean),
            config_value=config.purge.no_clean,
            default=False,
        ),
        vs=resolve_with_precedence(cli_value=_flag(args.vs), config_value=config.purge.vs, default=False),
        workers=effective_workers(workers),
    )


def _start_update_check(args: argparse.Namespace, config: Config) -> tuple[VersionCheck, float]:
    env_disabled = env_flag(NO_UPDATE_CHECK_ENV)
    enabled = resolve_with_precedence(
        cli_value=False if args.no_update_check else None,
        env_value=None if env_disabled is None else not env_disabled,
        config_value=config.update_check.enabled,
        default=True,
    )
    timeout = resolve_with_precedence(config_value=config.update_check.timeout_seconds, default=DEFAULT_TIMEOUT_SECONDS)
    check = start_version_check(
        __version__,
        enabled=enabled,
        index_url=resolve_with_precedence(config_value=config.update_check.index_url, default=DEFAULT_INDEX_URL),
        timeout=timeout,
    )
    return check, timeout


def _print_newer_version(check: VersionCheck, timeout: float) -> None:
    newer = check.result(timeout=timeout)
    if newer is None:
        return
    echo()
    echo(f"A newer version ({newer}) of dotnet-purge is available!", style=WARNING_STYLE)
    echo(f"Update by running '{UPDATE_COMMAND}'", style=SUCCESS_STYLE)


def _build_gateway(config: Config) -> BuildToolGateway:
    return DotnetCli(resolve_with_precedence(config_value=config.purge.dotnet, default=DEFAULT_EXECUTABLE))


def main(argv: Sequence[str] | None = None) -> int:
    """Main CLI entry point for the dotnet-purge command-line interface.

    Args:
        argv: Command-line arguments to parse. If None, uses sys.argv.

    Returns:
        int: ``0`` when every project was purged, ``1`` when any project failed,
        the run was cancelled, or a fatal error occurred.
    """
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    if args.version:
        echo(__version__)
        return 0
    _initialize_logging(args.log_format, args.log_level)

    target = Path(args.target) if args.target else Path.cwd()
    if not target.exists():
        echo(f"'{target}' does not exist.", err=True)
        return 1

    try:
        config = load_config(args.config)
        options = build_options(args, config, target)
    except PurgeError as exc:
        _report_error(exc)
        return 1

    version_check, timeout = _start_update_check(args, config)
    cancellation = CancellationToken()
    reporter = ConsoleReporter(options.root_directory)
    try:
        with cancel_on_interrupt(cancellation):
            summary = run_purge(options, gateway=_build_gateway(config), reporter=reporter, cancellation=cancellation)
    except PurgeError as exc:
        logger.debug("Purge run aborted", exc_info=True, extra=structured_extra(LogComponent.CLI))
        _report_error(exc)
        return 1
    except KeyboardInterrupt:
        echo()
        echo("Operation cancelled", style=WARNING_STYLE)
        return 1

    _print_newer_version(version_check, timeout)
    if summary.was_cancelled:
        echo()
        echo("Operation cancelled", style=WARNING_STYLE)
    return summary.exit_code


__all__ = ["build_options", "cancel_on_interrupt", "main"]
