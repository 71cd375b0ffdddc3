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

"""Configuration file discovery and loading.

The loader looks for ``dotnet-purge.toml`` and then ``.dotnet-purge.toml`` in
the working directory, unless an explicit path is given. Settings may live at
the top level of the document or under ``[tool.dotnet-purge]``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Final, cast

from pydantic import ValidationError

from dotnet_purge.compat import tomllib

from .models import (
    Config,
    ConfigModel,
    ConfigReadError,
    InvalidConfigFileError,
    config_from_model,
    ensure_supported_version,
)

logger: logging.Logger = logging.getLogger("dotnet_purge.cli")

CONFIG_FILENAMES: Final[tuple[str, ...]] = ("dotnet-purge.toml", ".dotnet-purge.toml")
TOOL_TABLE: Final[str] = "dotnet-purge"


@dataclass(slots=True, frozen=True)
class LoadedConfig:
    """Container for a loaded configuration and its source path.

    Attributes:
        config: Parsed configuration instance.
        path: Filesystem path the configuration was loaded from, or None when
            defaults are used.
    """

    config: Config
    path: Path | None


def load_config(explicit_path: Path | None = None, *, cwd: Path | None = None) -> Config:
    """Load dotnet-purge configuration from a TOML file or use defaults."""
    return load_config_with_metadata(explicit_path, cwd=cwd).config


def load_config_with_metadata(explicit_path: Path | None = None, *, cwd: Path | None = None) -> LoadedConfig:
    """Load configuration together with the path it came from.

    Args:
        explicit_path: Configuration file to use instead of searching. It must
            exist; relative paths are taken from ``cwd``.
        cwd: Directory searched for the default file names; defaults to the
            process working directory.

    Returns:
        LoadedConfig: Parsed configuration, or defaults with a ``None`` path
        when no file was found.

    Raises:
        ConfigReadError: If a file cannot be read or is not valid TOML, or the
            explicit path does not exist.
        InvalidConfigFileError: If the document fails validation.
        UnsupportedConfigVersionError: If the document declares another
            ``config_version``.
    """
    base_dir = cwd if cwd is not None else Path.cwd()
    if explicit_path is not None:
        candidate = explicit_path if explicit_path.is_absolute() else base_dir / explicit_path
        if not candidate.is_file():
            raise ConfigReadError(candidate, FileNotFoundError("configuration file not found"))
        return _load_candidate(candidate)
    for name in CONFIG_FILENAMES:
        candidate = base_dir / name
        if candidate.is_file():
            return _load_candidate(candidate)
    return LoadedConfig(config=Config(), path=None)


def _load_candidate(candidate: Path) -> LoadedConfig:
    try:
        raw_map: dict[str, object] = tomllib.loads(candidate.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as exc:
        raise ConfigReadError(candidate, exc) from exc
    payload = _extract_payload(candidate, raw_map)
    try:
        model = ConfigModel.model_validate(payload)
    except ValidationError as exc:
        raise InvalidConfigFileError(candidate, exc) from exc
    ensure_supported_version(model, candidate)
    logger.debug("Loaded configuration from %s", candidate)
    return LoadedConfig(config=config_from_model(model), path=candidate.resolve())


def _extract_payload(candidate: Path, raw_map: dict[str, object]) -> dict[str, object]:
    """Return the mapping to validate, unwrapping ``[tool.dotnet-purge]`` when present.

    Raises:
        InvalidConfigFileError: If ``[tool.dotnet-purge]`` exists but is not a table.
    """
    tool_section = raw_map.get("tool")
    if not isinstance(tool_section, dict):
        return raw_map
    nested = cast("dict[str, object]", tool_section).get(TOOL_TABLE)
    if nested is None:
        return raw_map
    if not isinstance(nested, dict):
        message = f"[tool.{TOOL_TABLE}] must be a TOML table"
        raise InvalidConfigFileError(candidate, ValueError(message))
    return cast("dict[str, object]", nested)


__all__ = ["CONFIG_FILENAMES", "LoadedConfig", "load_config", "load_config_with_metadata"]
