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

"""Core data model for dotnet-purge."""

from __future__ import annotations

from .model_types import OUTPUT_DIR_PROPERTIES, LogComponent, LogFormat, ProjectProperty, PurgeStatus
from .types import (
    ConfigurationKey,
    ConfigurationMatrix,
    DeletionPlan,
    ProjectTarget,
    PurgeResult,
    RunSummary,
)

__all__ = [
    "OUTPUT_DIR_PROPERTIES",
    "ConfigurationKey",
    "ConfigurationMatrix",
    "DeletionPlan",
    "LogComponent",
    "LogFormat",
    "ProjectProperty",
    "ProjectTarget",
    "PurgeResult",
    "PurgeStatus",
    "RunSummary",
]
