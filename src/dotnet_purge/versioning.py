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

"""Background lookup of a newer dotnet-purge release on the package index."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, Final

import requests
from packaging.version import InvalidVersion, Version
from pydantic import BaseModel, ConfigDict, Field

from dotnet_purge._internal.logging_utils import structured_extra
from dotnet_purge.core.model_types import LogComponent

if TYPE_CHECKING:
    from collections.abc import Iterable
    from concurrent.futures import Future

logger: logging.Logger = logging.getLogger("dotnet_purge.versioning")

DEFAULT_INDEX_URL: Final[str] = "https://pypi.org/simple/dotnet-purge/"
DEFAULT_TIMEOUT_SECONDS: Final[float] = 5.0
SIMPLE_JSON_ACCEPT: Final[str] = "application/vnd.pypi.simple.v1+json"
UPDATE_COMMAND: Final[str] = "pip install --upgrade dotnet-purge"

__all__ = [
    "DEFAULT_INDEX_URL",
    "DEFAULT_TIMEOUT_SECONDS",
    "UPDATE_COMMAND",
    "PackageVersions",
    "VersionCheck",
    "detect_newer_version",
    "latest_version",
    "start_version_check",
]


class PackageVersions(BaseModel):
    """Subset of the index's project listing: every published version string."""

    model_config: ClassVar[ConfigDict] = ConfigDict(extra="ignore")
    versions: list[str] = Field(default_factory=list)


def latest_version(current: Version, candidates: Iterable[str]) -> Version | None:
    """Return the greatest candidate newer than ``current``, if any.

    Unparseable candidates are skipped. Pre-releases only count when
    ``current`` is itself a pre-release.
    """
    allow_prereleases = current.is_prerelease
    best = current
    for raw in candidates:
        try:
            version = Version(raw)
        except InvalidVersion:
            continue
        if version.is_prerelease and not allow_prereleases:
            continue
        if version > best:
            best = version
    return best if best > current else None


def detect_newer_version(
    current: str,
    *,
    index_url: str = DEFAULT_INDEX_URL,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    session: requests.Session | None = None,
) -> str | None:
    """Query the package index and return a newer version string, or ``None``.

    Raises:
        requests.RequestException: On transport or HTTP status errors.
        pydantic.ValidationError: If the response body is not the expected JSON.
    """
    try:
        current_version = Version(current)
    except InvalidVersion:
        logger.debug("Current version %r is not comparable; skipping update check", current)
        return None
    http = session if session is not None else requests.Session()
    try:
        response = http.get(index_url, headers={"Accept": SIMPLE_JSON_ACCEPT}, timeout=timeout)
        response.raise_for_status()
        payload = PackageVersions.model_validate_json(response.text)
    finally:
        if session is None:
            http.close()
    newer = latest_version(current_version, payload.versions)
    return str(newer) if newer is not None else None


@dataclass(slots=True)
class VersionCheck:
    """Handle on a version lookup started in the background."""

    future: Future[str | None] | None = None

    def result(self, timeout: float | None = None) -> str | None:
        """Wait for the lookup and return its outcome; failures yield ``None``."""
        if self.future is None:
            return None
        try:
            return self.future.result(timeout=timeout)
        # ignore JUSTIFIED: the update check is advisory and must never affect the run
        except Exception as exc:  # noqa: BLE001
            logger.debug(
                "Newer version check failed: %s",
                exc,
                extra=structured_extra(LogComponent.VERSION_CHECK, details={"error": type(exc).__name__}),
            )
            return None


def start_version_check(
    current: str,
    *,
    enabled: bool = True,
    index_url: str = DEFAULT_INDEX_URL,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    session: requests.Session | None = None,
) -> VersionCheck:
    """Start ``detect_newer_version`` on a worker thread and return immediately."""
    if not enabled:
        return VersionCheck()
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="dotnet-purge-version")
    future = executor.submit(
        detect_newer_version,
        current,
        index_url=index_url,
        timeout=timeout,
        session=session,
    )
    executor.shutdown(wait=False)
    return VersionCheck(future=future)
