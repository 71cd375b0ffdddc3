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

"""Stable error code registry used across dotnet-purge."""

from __future__ import annotations

from typing import TYPE_CHECKING, NewType

from dotnet_purge.config import (
    ConfigFieldChoiceError,
    ConfigFieldTypeError,
    ConfigReadError,
    ConfigValidationError,
    InvalidConfigFileError,
    UnsupportedConfigVersionError,
)

from .exceptions import (
    BuildToolError,
    BuildToolNotFoundError,
    CleanFailedError,
    EvaluationFailedError,
    PropertyOutputError,
    PurgeCancelledError,
    PurgeError,
    PurgeFilesystemError,
    PurgeTypeError,
    PurgeValidationError,
    SolutionError,
    SolutionReadError,
    TargetNotFoundError,
    UnsupportedSolutionFormatError,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

ErrorCode = NewType("ErrorCode", str)

_ERROR_CODES: dict[type[BaseException], ErrorCode] = {
    PurgeError: ErrorCode("DP000"),
    PurgeCancelledError: ErrorCode("DP001"),
    PurgeValidationError: ErrorCode("DP100"),
    PurgeTypeError: ErrorCode("DP101"),
    ConfigValidationError: ErrorCode("DP110"),
    ConfigFieldTypeError: ErrorCode("DP111"),
    ConfigFieldChoiceError: ErrorCode("DP112"),
    UnsupportedConfigVersionError: ErrorCode("DP113"),
    ConfigReadError: ErrorCode("DP114"),
    InvalidConfigFileError: ErrorCode("DP115"),
    TargetNotFoundError: ErrorCode("DP200"),
    SolutionError: ErrorCode("DP210"),
    UnsupportedSolutionFormatError: ErrorCode("DP211"),
    SolutionReadError: ErrorCode("DP212"),
    BuildToolError: ErrorCode("DP300"),
    BuildToolNotFoundError: ErrorCode("DP301"),
    EvaluationFailedError: ErrorCode("DP310"),
    PropertyOutputError: ErrorCode("DP311"),
    CleanFailedError: ErrorCode("DP320"),
    PurgeFilesystemError: ErrorCode("DP400"),
}


def error_code_for(exc: BaseException) -> ErrorCode:
    """Return a stable error code for a structured dotnet-purge exception.

    Args:
        exc: Exception instance raised by dotnet-purge code paths.

    Returns:
        Error code mapped from the exception's class hierarchy; ``DP000`` for
        anything unregistered.
    """
    for cls in type(exc).__mro__:
        code = _ERROR_CODES.get(cls)
        if code:
            return code
    return ErrorCode("DP000")


def error_code_catalog() -> Mapping[str, ErrorCode]:
    """Return a stable mapping of fully-qualified exception names to error codes.

    Returns:
        Mapping of ``<module>.<ExceptionName>`` strings to error codes.
    """
    result: dict[str, ErrorCode] = {}
    for exc_type, code in _ERROR_CODES.items():
        key = f"{exc_type.__module__}.{exc_type.__name__}"
        result[key] = code
    return result


__all__ = ["ErrorCode", "error_code_catalog", "error_code_for"]
