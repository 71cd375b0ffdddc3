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

"""Shared helpers for the dotnet-purge CLI."""

from __future__ import annotations

from .args import ArgumentRegistrar, parse_workers, register_argument
from .io import ERROR_STYLE, HINT_STYLE, SUCCESS_STYLE, WARNING_STYLE, echo

__all__ = [
    "ERROR_STYLE",
    "HINT_STYLE",
    "SUCCESS_STYLE",
    "WARNING_STYLE",
    "ArgumentRegistrar",
    "echo",
    "parse_workers",
    "register_argument",
]
