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

"""Resolution of a project's configuration × target-framework matrix."""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Literal

from dotnet_purge._internal.collection_utils import split_property_list
from dotnet_purge._internal.logging_utils import structured_extra
from dotnet_purge.core.model_types import OUTPUT_DIR_PROPERTIES, LogComponent, ProjectProperty
from dotnet_purge.core.type_aliases import ConfigurationName, FrameworkName
from dotnet_purge.core.types import ConfigurationKey

if TYPE_CHECKING:
    from collections.abc import Sequence
    from concurrent.futures import Future

    from dotnet_purge.cancellation import CancellationToken
    from dotnet_purge.core.type_aliases import OutputProperties
    from dotnet_purge.core.types import ConfigurationMatrix, ProjectTarget
    from dotnet_purge.msbuild import BuildToolGateway

logger: logging.Logger = logging.getLogger("dotnet_purge.matrix")

__all__ = ["effective_workers", "matrix_keys", "resolve_matrix"]


def effective_workers(value: int | Literal["auto"] | None) -> int:
    """Translate a worker setting into a thread count of at least one."""
    if value is None:
        return 1
    if isinstance(value, str):
        if value.strip().lower() == "auto":
            return max(1, os.cpu_count() or 1)
        logger.warning(
            "Unknown worker spec '%s'; evaluating sequentially",
            value,
            extra=structured_extra(LogComponent.BUILD_TOOL),
        )
        return 1
    return max(1, value)


def matrix_keys(configurations: Sequence[str], target_frameworks: Sequence[str]) -> list[ConfigurationKey]:
    """Expand configurations and frameworks into keys, configuration-major.

    Frameworks only split the matrix when more than one is listed; a
    single-targeted project gets one framework-less key per configuration.
    """
    multi_targeted = len(target_frameworks) > 1
    keys: list[ConfigurationKey] = []
    for configuration in configurations:
        if multi_targeted:
            keys.extend(
                ConfigurationKey(ConfigurationName(configuration), FrameworkName(framework))
                for framework in target_frameworks
            )
        else:
            keys.append(ConfigurationKey(ConfigurationName(configuration)))
    return keys


def _evaluate_list(
    target: ProjectTarget,
    gateway: BuildToolGateway,
    prop: ProjectProperty,
    cancellation: CancellationToken | None,
) -> list[str]:
    values = gateway.evaluate(target.path, [prop.value], cancellation=cancellation)
    return split_property_list(values.get(prop.value))


def _evaluate_outputs(
    target: ProjectTarget,
    gateway: BuildToolGateway,
    key: ConfigurationKey,
    cancellation: CancellationToken | None,
) -> OutputProperties:
    logger.debug(
        "Evaluating output directories for %s [%s]",
        target.name,
        key,
        extra=structured_extra(
            LogComponent.BUILD_TOOL,
            project=target.path,
            configuration=key.configuration,
            target_framework=key.target_framework,
        ),
    )
    return gateway.evaluate(
        target.path,
        [prop.value for prop in OUTPUT_DIR_PROPERTIES],
        configuration=key.configuration,
        target_framework=key.target_framework,
        cancellation=cancellation,
    )


def resolve_matrix(
    target: ProjectTarget,
    gateway: BuildToolGateway,
    *,
    cancellation: CancellationToken | None = None,
    workers: int = 1,
) -> ConfigurationMatrix:
    """Evaluate the output directories of every configuration/framework cell.

    ``Configurations`` and ``TargetFrameworks`` are evaluated first without
    overrides; then each cell's output-directory properties are evaluated with
    that cell's overrides, concurrently when ``workers`` exceeds one.

    Args:
        target: Project to evaluate.
        gateway: Build tool used for every evaluation.
        cancellation: Token checked before each evaluation is started.
        workers: Maximum number of concurrent per-cell evaluations.

    Returns:
        Mapping from each key to its output properties, in key order.

    Raises:
        EvaluationFailedError: If any evaluation fails; no retry is attempted.
        PurgeCancelledError: If cancellation is observed.
    """
    configurations = _evaluate_list(target, gateway, ProjectProperty.CONFIGURATIONS, cancellation)
    frameworks = _evaluate_list(target, gateway, ProjectProperty.TARGET_FRAMEWORKS, cancellation)
    keys = matrix_keys(configurations, frameworks)
    if not keys:
        logger.warning(
            "No configurations reported for %s",
            target.path,
            extra=structured_extra(LogComponent.BUILD_TOOL, project=target.path),
        )
        return {}
    if workers <= 1 or len(keys) == 1:
        matrix: ConfigurationMatrix = {}
        for key in keys:
            if cancellation is not None:
                cancellation.raise_if_cancelled()
            matrix[key] = _evaluate_outputs(target, gateway, key, cancellation)
        return matrix
    futures: dict[ConfigurationKey, Future[OutputProperties]] = {}
    with ThreadPoolExecutor(max_workers=min(workers, len(keys))) as executor:
        for key in keys:
            if cancellation is not None and cancellation.cancelled:
                break
            futures[key] = executor.submit(_evaluate_outputs, target, gateway, key, cancellation)
    # key order, not completion order
    matrix = {key: future.result() for key, future in futures.items()}
    if cancellation is not None:
        cancellation.raise_if_cancelled()
    return matrix
