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

"""Pytest entry point that wires shared fixtures and markers."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest

from dotnet_purge._internal.logging_utils import CHILD_LOGGERS

if TYPE_CHECKING:
    from collections.abc import Iterator

pytest_plugins = ("tests.fixtures.fakes",)

_ENVIRONMENT_VARIABLES = (
    "DOTNET_PURGE_LOG_FORMAT",
    "DOTNET_PURGE_LOG_LEVEL",
    "DOTNET_PURGE_NO_UPDATE_CHECK",
    "DOTNET_PURGE_WORKERS",
)


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with the custom markers used by the test suite."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line(
        "markers",
        "integration: Integration tests (slower, multiple components)",
    )
    config.addinivalue_line("markers", "property: Property-based tests")
    config.addinivalue_line("markers", "cli: CLI-related tests")


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in _ENVIRONMENT_VARIABLES:
        monkeypatch.delenv(name, raising=False)
    yield
    for name in CHILD_LOGGERS:
        logging.getLogger(name).setLevel(logging.NOTSET)
    root = logging.getLogger("dotnet_purge")
    root.handlers.clear()
    root.setLevel(logging.NOTSET)
    root.propagate = True
