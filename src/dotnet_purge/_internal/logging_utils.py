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

"""Structured logging utilities shared across dotnet-purge components."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Final, Literal, cast

from dotnet_purge.compat import UTC, TypedDict, Unpack, override
from dotnet_purge.core.model_types import LogComponent, LogFormat

ROOT_LOGGER_NAME: Final[str] = "dotnet_purge"
LOG_FORMAT_ENV: Final[str] = "DOTNET_PURGE_LOG_FORMAT"
LOG_LEVEL_ENV: Final[str] = "DOTNET_PURGE_LOG_LEVEL"
DEFAULT_LOG_LEVEL: Final[int] = logging.WARNING

LOG_FORMATS: Final[tuple[Literal["text", "json"], ...]] = cast(
    "tuple[Literal['text', 'json'], ...]",
    tuple(format_.value for format_ in LogFormat),
)
LOG_LEVELS: Final[tuple[Literal["debug", "info", "warning", "error"], ...]] = (
    "debug",
    "info",
    "warning",
    "error",
)
_LEVEL_VALUES: Final[dict[str, int]] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}
# Matrix cell fields are appended to text output; the rest only appear in JSON.
_CONTEXT_FIELDS: Final[tuple[str, ...]] = ("project", "configuration", "target_framework")
STRUCTURED_FIELDS: Final[tuple[str, ...]] = (
    "component",
    "tool",
    "exit_code",
    "duration_ms",
    "path",
    *_CONTEXT_FIELDS,
    "details",
)
CHILD_LOGGERS: Final[tuple[str, ...]] = (
    "dotnet_purge.cli",
    "dotnet_purge.discovery",
    "dotnet_purge.msbuild",
    "dotnet_purge.matrix",
    "dotnet_purge.process",
    "dotnet_purge.purge",
    "dotnet_purge.services",
    "dotnet_purge.versioning",
)


@dataclass(slots=True, frozen=True)
class LogConfig:
    """Formatter and numeric level applied by ``configure_logging``."""

    format: LogFormat
    level: int


class JSONLogFormatter(logging.Formatter):
    """Render log records as one JSON object per line."""

    @override
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname.lower(),
            "message": record.getMessage(),
            "logger": record.name,
        }
        payload.update({name: getattr(record, name) for name in STRUCTURED_FIELDS if hasattr(record, name)})
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


class TextLogFormatter(logging.Formatter):
    """Single-line formatter that appends the project and matrix cell, when present."""

    def __init__(self) -> None:
        super().__init__("[%(levelname)s] %(message)s")

    @override
    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = [f"{name}={getattr(record, name)}" for name in _CONTEXT_FIELDS if hasattr(record, name)]
        if not context:
            return line
        head, sep, tail = line.partition("\n")
        return f"{head} ({', '.join(context)}){sep}{tail}"


def _resolve_format(preferred: LogFormat | str | None) -> LogFormat:
    raw = preferred if preferred is not None else os.getenv(LOG_FORMAT_ENV)
    if not raw:
        return LogFormat.TEXT
    return raw if isinstance(raw, LogFormat) else LogFormat.from_str(raw)


def _resolve_level(preferred: str | int | None) -> int:
    raw = preferred if preferred is not None else os.getenv(LOG_LEVEL_ENV)
    if isinstance(raw, int):
        return raw
    if not raw:
        return DEFAULT_LOG_LEVEL
    return _LEVEL_VALUES.get(raw.strip().lower(), DEFAULT_LOG_LEVEL)


def configure_logging(
    log_format: LogFormat | str | None = None,
    *,
    log_level: str | int | None = None,
) -> LogConfig:
    """Install the diagnostics handler on the ``dotnet_purge`` logger tree.

    Console progress is written by the CLI reporter; the loggers configured here
    carry diagnostics only, so the default level is ``warning``.

    Args:
        log_format: Desired log output format. ``None`` falls back to the
            ``DOTNET_PURGE_LOG_FORMAT`` environment variable or ``text``.
        log_level: Preferred verbosity (name or numeric). ``None`` consults
            ``DOTNET_PURGE_LOG_LEVEL``; unknown names resolve to ``warning``.

    Returns:
        The applied ``LogConfig``.
    """
    selected_format = _resolve_format(log_format)
    level = _resolve_level(log_level)

    handler = logging.StreamHandler()
    handler.setFormatter(JSONLogFormatter() if selected_format is LogFormat.JSON else TextLogFormatter())
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    root_logger.propagate = False
    for child in CHILD_LOGGERS:
        logging.getLogger(child).setLevel(level)
    return LogConfig(format=selected_format, level=level)


class _StructuredLogBase(TypedDict):
    component: LogComponent


class StructuredLogExtra(_StructuredLogBase, total=False):
    """Structured logging extras accepted by dotnet-purge log records."""

    tool: str
    exit_code: int
    duration_ms: float
    path: str
    project: str
    configuration: str
    target_framework: str
    details: Mapping[str, object]


class _StructuredLogKwargs(TypedDict, total=False):
    tool: str
    exit_code: int
    duration_ms: float
    path: str | os.PathLike[str]
    project: str | os.PathLike[str]
    configuration: str | None
    target_framework: str | None
    details: Mapping[str, object]


def _fspath(value: object) -> str:
    return os.fspath(cast("str | os.PathLike[str]", value))


_FIELD_TRANSFORMS: Final[dict[str, Callable[[object], object]]] = {
    "tool": str,
    "exit_code": lambda value: int(cast("int", value)),
    "duration_ms": lambda value: float(cast("float", value)),
    "path": _fspath,
    "project": _fspath,
    "configuration": str,
    "target_framework": str,
}


def structured_extra(
    component: LogComponent,
    **kwargs: Unpack[_StructuredLogKwargs],
) -> StructuredLogExtra:
    """Return a consistently typed ``logging.extra`` payload.

    ``None`` values and empty ``details`` are left out, so callers can pass a
    matrix cell's optional configuration and framework unconditionally.

    Args:
        component: Logical logging component for the record.
        **kwargs: Optional structured fields (tool, exit code, paths, matrix cell, details).

    Returns:
        Mapping suitable for the ``extra`` parameter when emitting log records.
    """
    extra: StructuredLogExtra = {"component": component}
    fields = cast("dict[str, object]", extra)
    values = cast("dict[str, object]", kwargs)
    for name, transform in _FIELD_TRANSFORMS.items():
        value = values.get(name)
        if value is not None:
            fields[name] = transform(value)
    details = kwargs.get("details")
    if details:
        extra["details"] = dict(details)
    return extra


__all__ = [
    "LOG_FORMATS",
    "LOG_LEVELS",
    "LogConfig",
    "StructuredLogExtra",
    "configure_logging",
    "structured_extra",
]
