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

"""Enumerations shared across dotnet-purge layers."""

from __future__ import annotations

from typing import Final

from dotnet_purge.compat import StrEnum


class ProjectProperty(StrEnum):
    """MSBuild properties evaluated while purging a project."""

    CONFIGURATIONS = "Configurations"
    TARGET_FRAMEWORKS = "TargetFrameworks"
    BASE_INTERMEDIATE_OUTPUT_PATH = "BaseIntermediateOutputPath"
    BASE_OUTPUT_PATH = "BaseOutputPath"
    PACKAGE_OUTPUT_PATH = "PackageOutputPath"
    PUBLISH_DIR = "PublishDir"


OUTPUT_DIR_PROPERTIES: Final[tuple[ProjectProperty, ...]] = (
    ProjectProperty.BASE_INTERMEDIATE_OUTPUT_PATH,
    ProjectProperty.BASE_OUTPUT_PATH,
    ProjectProperty.PACKAGE_OUTPUT_PATH,
    ProjectProperty.PUBLISH_DIR,
)


class PurgeStatus(StrEnum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"


class LogFormat(StrEnum):
    TEXT = "text"
    JSON = "json"

    @classmethod
    def from_str(cls, raw: str) -> LogFormat:
        value = raw.strip().lower()
        try:
            return cls(value)
        except ValueError as exc:
            raise ValueError(f"Unknown log format '{raw}'") from exc


class LogComponent(StrEnum):
    CLI = "cli"
    DISCOVERY = "discovery"
    BUILD_TOOL = "build_tool"
    PURGE = "purge"
    SERVICES = "services"
    VERSION_CHECK = "version_check"


__all__ = [
    "OUTPUT_DIR_PROPERTIES",
    "LogComponent",
    "LogFormat",
    "ProjectProperty",
    "PurgeStatus",
]
