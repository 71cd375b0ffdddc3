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

"""dotnet-purge - delete the build outputs of .NET projects and solutions.

Discovers projects under a path, optionally runs ``dotnet clean`` for every
configuration and target framework, then deletes the output directories
msbuild reports and any parent directories they leave empty.
"""

from __future__ import annotations

from .cancellation import CancellationToken
from .core.types import ConfigurationKey, DeletionPlan, ProjectTarget, PurgeResult, RunSummary
from .discovery import discover_projects
from .exceptions import PurgeError
from .matrix import resolve_matrix
from .msbuild import BuildToolGateway, DotnetCli
from .purge import build_deletion_plan, prune_empty_parents, purge_project
from .services.purge import PurgeOptions, run_purge

__all__ = [
    "BuildToolGateway",
    "CancellationToken",
    "ConfigurationKey",
    "DeletionPlan",
    "DotnetCli",
    "ProjectTarget",
    "PurgeError",
    "PurgeOptions",
    "PurgeResult",
    "RunSummary",
    "__version__",
    "build_deletion_plan",
    "discover_projects",
    "prune_empty_parents",
    "purge_project",
    "resolve_matrix",
    "run_purge",
]

__version__ = "0.1.0"
