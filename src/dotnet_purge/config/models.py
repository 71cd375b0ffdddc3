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

"""Configuration models for dotnet-purge.

TOML documents are validated with pydantic models and then converted into
plain dataclasses for runtime use. Every setting is optional; ``None`` means
"not configured" so that command-line flags and environment variables can be
layered on top.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar, Final, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from dotnet_purge._internal.exceptions import PurgeValidationError

if TYPE_CHECKING:
    from pathlib import Path

CONFIG_VERSION: Final[int] = 0
WORKERS_AUTO: Final[str] = "auto"

WorkersSetting = int | Literal["auto"]


class ConfigValidationError(PurgeValidationError):
    """Raised when configuration data contains invalid values."""


class ConfigFieldTypeError(ConfigValidationError):
    """Raised when a configuration field has an invalid type."""

    def __init__(self, field: str, expected: str) -> None:
        self.field = field
        self.expected = expected
        super().__init__(f"{field} must be {expected}")


class ConfigFieldChoiceError(ConfigValidationError):
    """Raised when a configuration field is provided with an unsupported value."""

    def __init__(self, field: str, allowed: tuple[str, ...]) -> None:
        self.field = field
        self.allowed = allowed
        allowed_text = ", ".join(sorted(allowed))
        super().__init__(f"{field} must be one of: {allowed_text}")


class UnsupportedConfigVersionError(ConfigValidationError):
    """Raised when a configuration file declares an unsupported schema version."""

    def __init__(self, provided: int, expected: int, path: Path | None = None) -> None:
        """Initialize the exception with version information.

        Args:
            provided: The config_version value provided in the configuration file.
            expected: The config_version value this release understands.
            path: Configuration file that declared ``provided``, when known.
        """
        self.provided = provided
        self.expected = expected
        self.path = path
        location = f" in {path}" if path is not None else ""
        super().__init__(f"Unsupported config_version {provided}{location}; expected {expected}")


class ConfigReadError(ConfigValidationError):
    """Raised when a configuration file cannot be read from disk."""

    def __init__(self, path: Path, error: Exception) -> None:
        self.path = path
        self.error = error
        super().__init__(f"Unable to read {path}: {error}")


class InvalidConfigFileError(ConfigValidationError):
    """Raised when the configuration file fails validation."""

    def __init__(self, path: Path, error: Exception) -> None:
        self.path = path
        self.error = error
        super().__init__(f"Invalid dotnet-purge configuration in {path}: {error}")


def coerce_workers(value: object, *, context: str) -> WorkersSetting | None:
    """Normalise a worker setting to a positive int, ``"auto"`` or ``None``.

    Raises:
        ConfigFieldChoiceError: For strings other than ``auto`` or a number.
        ConfigFieldTypeError: For non-positive numbers or other types.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ConfigFieldTypeError(context, "a positive integer or 'auto'")
    if isinstance(value, str):
        token = value.strip().lower()
        if token == WORKERS_AUTO:
            return WORKERS_AUTO
        try:
            value = int(token)
        except ValueError as exc:
            raise ConfigFieldChoiceError(context, (WORKERS_AUTO, "<positive integer>")) from exc
    if isinstance(value, int) and value >= 1:
        return value
    raise ConfigFieldTypeError(context, "a positive integer or 'auto'")


class PurgeSettingsModel(BaseModel):
    """Pydantic model for the ``[purge]`` table.

    Attributes:
        recurse: Search sub-directories of a directory target.
        no_clean: Skip ``dotnet clean``.
        vs: Delete Visual Studio scratch files.
        dotnet: Build tool executable name or path.
        workers: Concurrency for matrix evaluation, or ``"auto"``.
    """

    recurse: bool | None = None
    no_clean: bool | None = None
    vs: bool | None = None
    dotnet: str | None = None
    workers: WorkersSetting | None = None

    @field_validator("dotnet", mode="before")
    @classmethod
    def _normalise_dotnet(cls, value: object) -> str | None:
        if value is None:
            return None
        if not isinstance(value, str):
            raise ConfigFieldTypeError("purge.dotnet", "a string")
        stripped = value.strip()
        return stripped or None

    @field_validator("workers", mode="before")
    @classmethod
    def _coerce_workers(cls, value: object) -> WorkersSetting | None:
        return coerce_workers(value, context="purge.workers")


class UpdateCheckModel(BaseModel):
    """Pydantic model for the ``[update_check]`` table."""

    enabled: bool | None = None
    index_url: str | None = None
    timeout_seconds: float | None = None

    @field_validator("timeout_seconds", mode="before")
    @classmethod
    def _validate_timeout(cls, value: object) -> float | None:
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
            raise ConfigFieldTypeError("update_check.timeout_seconds", "a positive number")
        return float(value)


class ConfigModel(BaseModel):
    """Root configuration document.

    Attributes:
        config_version: Schema version number for the configuration file.
        purge: Purge run defaults.
        update_check: Newer-version check settings.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(populate_by_name=True)
    config_version: int = Field(default=CONFIG_VERSION)
    purge: PurgeSettingsModel = Field(default_factory=PurgeSettingsModel)
    update_check: UpdateCheckModel = Field(default_factory=UpdateCheckModel, alias="update-check")


@dataclass(slots=True)
class PurgeConfig:
    recurse: bool | None = None
    no_clean: bool | None = None
    vs: bool | None = None
    dotnet: str | None = None
    workers: WorkersSetting | None = None


@dataclass(slots=True)
class UpdateCheckConfig:
    enabled: bool | None = None
    index_url: str | None = None
    timeout_seconds: float | None = None


@dataclass(slots=True)
class Config:
    """Runtime configuration assembled from a validated ``ConfigModel``."""

    purge: PurgeConfig = field(default_factory=PurgeConfig)
    update_check: UpdateCheckConfig = field(default_factory=UpdateCheckConfig)


def ensure_supported_version(model: ConfigModel, path: Path | None = None) -> None:
    """Raise ``UnsupportedConfigVersionError`` unless ``model`` declares ``CONFIG_VERSION``."""
    if model.config_version != CONFIG_VERSION:
        raise UnsupportedConfigVersionError(model.config_version, CONFIG_VERSION, path)


def config_from_model(model: ConfigModel) -> Config:
    return Config(
        purge=PurgeConfig(**model.purge.model_dump(mode="python")),
        update_check=UpdateCheckConfig(**model.update_check.model_dump(mode="python")),
    )


__all__ = [
    "CONFIG_VERSION",
    "Config",
    "ConfigFieldChoiceError",
    "ConfigFieldTypeError",
    "ConfigModel",
    "ConfigReadError",
    "ConfigValidationError",
    "InvalidConfigFileError",
    "PurgeConfig",
    "PurgeSettingsModel",
    "UnsupportedConfigVersionError",
    "UpdateCheckConfig",
    "UpdateCheckModel",
    "WorkersSetting",
    "coerce_workers",
    "config_from_model",
    "ensure_supported_version",
]
