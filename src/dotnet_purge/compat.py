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

"""Compatibility shims for Python 3.10+ (and type-checker-friendly imports).

Modules that need version-tolerant behaviour import these names from here
rather than branching on the interpreter version themselves.

Deps (pyproject markers):
- typing_extensions (for py<3.12)
- tomli (for py<3.11)
"""

from __future__ import annotations

import datetime as _dt
import enum as _enum
from datetime import timezone as _timezone
from typing import TYPE_CHECKING, cast

# ------------------------------------------------------------
# TOML: tomllib (3.11+) / tomli (<=3.10)
# ------------------------------------------------------------
if TYPE_CHECKING:
    import tomli as tomllib
else:
    try:
        import tomllib  # py311+
    except ModuleNotFoundError:
        import tomli as tomllib


# ------------------------------------------------------------
# datetime.UTC (3.11+) fallback
# ------------------------------------------------------------
UTC = getattr(_dt, "UTC", _timezone.utc)


# ------------------------------------------------------------
# enum.StrEnum (3.11+) fallback
# ------------------------------------------------------------
class _StrEnumBase(str, _enum.Enum):
    """Type base for StrEnum-like enums."""


_StrEnum = getattr(_enum, "StrEnum", None)

if _StrEnum is None:

    class _CompatStrEnum(_StrEnumBase):
        """Backport of enum.StrEnum for Python 3.10."""

        def __str__(self) -> str:
            return str(self.value)

    StrEnum: type[_StrEnumBase] = _CompatStrEnum
else:
    StrEnum: type[_StrEnumBase] = cast("type[_StrEnumBase]", _StrEnum)


# ------------------------------------------------------------
# Typing features: prefer stdlib when present, otherwise typing_extensions.
# ------------------------------------------------------------
if TYPE_CHECKING:
    from typing_extensions import (
        TypedDict,  # noqa: TC004  # JUSTIFIED: for py310 type checking
        Unpack,
        override,
    )
else:
    # ---- Python 3.12 ----
    try:
        from typing import TypedDict, override
    except ImportError:  # py<3.12
        from typing_extensions import TypedDict, override

    # ---- Python 3.11 ----
    try:
        from typing import Unpack

    # ---- Python 3.10 ----
    except ImportError:
        from typing_extensions import Unpack


__all__ = [
    "UTC",
    "StrEnum",
    "TypedDict",
    "Unpack",
    "override",
    "tomllib",
]
