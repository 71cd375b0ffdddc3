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

"""Readers for Visual Studio solution files (``.sln`` and ``.slnx``).

Only the member project paths are extracted; solution folders, configuration
mappings and nested-project metadata are ignored.
"""

from __future__ import annotations

import logging
import os
import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import ClassVar, Final, Protocol

from dotnet_purge._internal.exceptions import SolutionReadError, UnsupportedSolutionFormatError

logger: logging.Logger = logging.getLogger("dotnet_purge.discovery")

SOLUTION_FOLDER_TYPE_ID: Final[str] = "2150E333-8FDC-42A3-9474-1A3956D46DE8"
SLN_HEADER: Final[str] = "Microsoft Visual Studio Solution File"

_SLN_PROJECT_LINE: Final[re.Pattern[str]] = re.compile(
    r'^\s*Project\(\s*"\{(?P<type>[^}]*)\}"\s*\)\s*=\s*'
    r'"(?P<name>[^"]*)"\s*,\s*"(?P<path>[^"]*)"\s*,\s*"(?P<id>[^"]*)"',
)

__all__ = [
    "SOLUTION_SERIALIZERS",
    "SlnSerializer",
    "SlnxSerializer",
    "SolutionSerializer",
    "is_solution_file",
    "read_solution_projects",
    "serializer_for",
]


class SolutionSerializer(Protocol):
    extensions: ClassVar[tuple[str, ...]]

    def is_supported(self, path: Path) -> bool: ...

    def project_paths(self, path: Path) -> list[str]: ...


class _ExtensionMatcher:
    extensions: ClassVar[tuple[str, ...]] = ()

    def is_supported(self, path: Path) -> bool:
        return path.suffix.lower() in self.extensions


class SlnSerializer(_ExtensionMatcher):
    """Classic text solution format."""

    extensions: ClassVar[tuple[str, ...]] = (".sln",)

    def project_paths(self, path: Path) -> list[str]:
        try:
            text = path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as exc:
            raise SolutionReadError(path, exc) from exc
        if SLN_HEADER not in text:
            raise SolutionReadError(path, ValueError("missing solution file header"))
        paths: list[str] = []
        for line in text.splitlines():
            match = _SLN_PROJECT_LINE.match(line)
            if match is None:
                continue
            if match.group("type").upper() == SOLUTION_FOLDER_TYPE_ID:
                continue
            paths.append(match.group("path"))
        return paths


class SlnxSerializer(_ExtensionMatcher):
    """XML solution format; projects may be nested inside ``<Folder>`` elements."""

    extensions: ClassVar[tuple[str, ...]] = (".slnx",)

    def project_paths(self, path: Path) -> list[str]:
        try:
            tree = ET.parse(path)  # noqa: S314  # JUSTIFIED: local solution files chosen by the user
        except (OSError, ET.ParseError) as exc:
            raise SolutionReadError(path, exc) from exc
        root = tree.getroot()
        if root.tag != "Solution":
            raise SolutionReadError(path, ValueError(f"unexpected root element <{root.tag}>"))
        return [element.attrib["Path"] for element in root.iter("Project") if element.attrib.get("Path")]


SOLUTION_SERIALIZERS: Final[tuple[SolutionSerializer, ...]] = (SlnSerializer(), SlnxSerializer())


def is_solution_file(path: Path) -> bool:
    return any(serializer.is_supported(path) for serializer in SOLUTION_SERIALIZERS)


def serializer_for(path: Path) -> SolutionSerializer:
    """Return the first serializer supporting ``path``.

    Raises:
        UnsupportedSolutionFormatError: If no serializer handles the extension.
    """
    for serializer in SOLUTION_SERIALIZERS:
        if serializer.is_supported(path):
            return serializer
    raise UnsupportedSolutionFormatError(path)


def _member_path(solution_dir: Path, raw: str) -> Path:
    # solution files always store Windows separators
    relative = raw.strip().replace("\\", "/")
    return Path(os.path.abspath(os.path.join(solution_dir, relative)))


def read_solution_projects(path: Path) -> list[Path]:
    """Return the absolute paths of the projects referenced by a solution.

    Args:
        path: Solution file to read.

    Returns:
        Member project paths in the order the solution lists them, resolved
        against the solution's directory without following symlinks.

    Raises:
        UnsupportedSolutionFormatError: If the extension is not a known solution format.
        SolutionReadError: If the file cannot be read or parsed.
    """
    serializer = serializer_for(path)
    solution_dir = Path(os.path.abspath(path)).parent
    members = [_member_path(solution_dir, raw) for raw in serializer.project_paths(path)]
    logger.debug("Solution %s lists %d project(s)", path, len(members))
    return members
