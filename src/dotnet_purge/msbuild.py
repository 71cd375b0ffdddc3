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

"""Gateway to the ``dotnet`` build tool.

Every invocation names the project file explicitly and never relies on the
working directory of the current process.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, ClassVar, Final, Protocol

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from dotnet_purge._internal.exceptions import (
    BuildToolNotFoundError,
    EvaluationFailedError,
    PropertyOutputError,
)
from dotnet_purge._internal.logging_utils import structured_extra
from dotnet_purge._internal.process import CommandOutput, run_command
from dotnet_purge.core.model_types import LogComponent
from dotnet_purge.core.types import BUILD_PROJECT_REFERENCES_OFF

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from dotnet_purge.cancellation import CancellationToken
    from dotnet_purge.core.type_aliases import Command

logger: logging.Logger = logging.getLogger("dotnet_purge.msbuild")

DEFAULT_EXECUTABLE: Final[str] = "dotnet"

__all__ = [
    "DEFAULT_EXECUTABLE",
    "BuildToolGateway",
    "DotnetCli",
    "MsBuildGetPropertyOutput",
    "parse_property_output",
]


class BuildToolGateway(Protocol):
    """Operations the purge pipeline needs from the build tool."""

    def evaluate(
        self,
        project_path: Path,
        properties: Sequence[str],
        *,
        configuration: str | None = None,
        target_framework: str | None = None,
        cancellation: CancellationToken | None = None,
    ) -> dict[str, str]: ...

    def clean(
        self,
        project_path: Path,
        args: Sequence[str],
        *,
        cancellation: CancellationToken | None = None,
    ) -> CommandOutput: ...


class MsBuildGetPropertyOutput(BaseModel):
    """JSON document printed by ``msbuild -getProperty`` for several properties."""

    model_config: ClassVar[ConfigDict] = ConfigDict(populate_by_name=True, extra="ignore")
    properties: dict[str, str] = Field(default_factory=dict, alias="Properties")

    @field_validator("properties", mode="before")
    @classmethod
    def _coerce_properties(cls, value: object) -> dict[str, str]:
        if value is None:
            return {}
        if not isinstance(value, dict):
            msg = "Properties must be a JSON object"
            raise ValueError(msg)
        return {str(key): "" if raw is None else str(raw) for key, raw in value.items()}


def parse_property_output(
    project_path: Path,
    properties: Sequence[str],
    stdout: str,
) -> dict[str, str]:
    """Interpret ``-getProperty`` output for the requested properties.

    A single property is printed as its raw value; several properties are
    printed as ``{"Properties": {...}}``. Properties missing from the output
    map to an empty string.

    Raises:
        PropertyOutputError: If a multi-property response is not valid JSON.
    """
    text = stdout.strip()
    if len(properties) == 1:
        return {properties[0]: text}
    try:
        parsed = MsBuildGetPropertyOutput.model_validate_json(text or "{}")
    except ValidationError as exc:
        raise PropertyOutputError(project_path, stdout, exc) from exc
    return {name: parsed.properties.get(name, "") for name in properties}


class DotnetCli:
    """``BuildToolGateway`` backed by the ``dotnet`` command-line tool."""

    allowed_executables: ClassVar[frozenset[str]] = frozenset({DEFAULT_EXECUTABLE})

    def __init__(self, executable: str = DEFAULT_EXECUTABLE) -> None:
        self.executable = executable

    def _run(
        self,
        project_path: Path,
        argv: Command,
        cancellation: CancellationToken | None,
    ) -> CommandOutput:
        if cancellation is not None:
            cancellation.raise_if_cancelled()
        try:
            output = run_command(argv, allowed=self.allowed_executables | {self.executable}, project=project_path)
        except OSError as exc:
            raise BuildToolNotFoundError(self.executable, project_path, exc) from exc
        # the child ran to completion; a pending cancellation wins over its result
        if cancellation is not None:
            cancellation.raise_if_cancelled()
        return output

    def evaluate(
        self,
        project_path: Path,
        properties: Sequence[str],
        *,
        configuration: str | None = None,
        target_framework: str | None = None,
        cancellation: CancellationToken | None = None,
    ) -> dict[str, str]:
        """Evaluate MSBuild properties of a project.

        Args:
            project_path: Project file to evaluate.
            properties: Property names to request; at least one.
            configuration: Optional ``Configuration`` global property override.
            target_framework: Optional ``TargetFramework`` global property override.
            cancellation: Token checked before and after the child process runs.

        Returns:
            Mapping of every requested property to its evaluated value.

        Raises:
            EvaluationFailedError: If the build tool exits with a non-zero status.
            PropertyOutputError: If the output cannot be parsed.
            BuildToolNotFoundError: If the executable cannot be started.
            PurgeCancelledError: If cancellation was requested.
        """
        if not properties:
            msg = "at least one property must be requested"
            raise ValueError(msg)
        argv: Command = [
            self.executable,
            "msbuild",
            str(project_path),
            f"-getProperty:{','.join(properties)}",
            BUILD_PROJECT_REFERENCES_OFF,
        ]
        if configuration is not None:
            argv.append(f"-p:Configuration={configuration}")
        if target_framework is not None:
            argv.append(f"-p:TargetFramework={target_framework}")
        logger.debug(
            "Evaluating %s for %s",
            ",".join(properties),
            project_path,
            extra=structured_extra(
                LogComponent.BUILD_TOOL,
                tool=self.executable,
                project=project_path,
                configuration=configuration,
                target_framework=target_framework,
            ),
        )
        output = self._run(project_path, argv, cancellation)
        if output.exit_code != 0:
            raise EvaluationFailedError(project_path, output.exit_code, output.stdout, output.stderr)
        return parse_property_output(project_path, properties, output.stdout)

    def clean(
        self,
        project_path: Path,
        args: Sequence[str],
        *,
        cancellation: CancellationToken | None = None,
    ) -> CommandOutput:
        """Run ``dotnet clean`` for a project and return the captured result.

        The exit code is reported, not raised on; callers decide how a failed
        clean affects the purge.
        """
        argv: Command = [self.executable, "clean", str(project_path), *args]
        output = self._run(project_path, argv, cancellation)
        logger.debug(
            "Clean finished for %s (exit=%s)",
            project_path,
            output.exit_code,
            extra=structured_extra(
                LogComponent.BUILD_TOOL,
                tool=self.executable,
                project=project_path,
                exit_code=output.exit_code,
                duration_ms=output.duration_ms,
            ),
        )
        return output

    def __repr__(self) -> str:
        return f"DotnetCli(executable={self.executable!r})"

