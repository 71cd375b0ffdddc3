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

"""IO helpers for CLI output."""

from __future__ import annotations

from typing import Final

from rich.console import Console

SUCCESS_STYLE: Final[str] = "green"
WARNING_STYLE: Final[str] = "yellow"
ERROR_STYLE: Final[str] = "red"
HINT_STYLE: Final[str] = "blue"

# rich resolves sys.stdout/sys.stderr on every write, so redirected streams are honoured
_STDOUT: Final[Console] = Console(highlight=False, soft_wrap=True, emoji=False)
_STDERR: Final[Console] = Console(stderr=True, highlight=False, soft_wrap=True, emoji=False)


def _select_console(*, err: bool = False) -> Console:
    return _STDERR if err else _STDOUT


def echo(message: str = "", *, style: str | None = None, newline: bool = True, err: bool = False) -> None:
    """Write a message to stdout/stderr, optionally coloured.

    Markup is disabled so paths containing ``[`` are printed verbatim.
    """
    console = _select_console(err=err)
    console.print(message, style=style, end="\n" if newline else "", markup=False)


__all__ = ["ERROR_STYLE", "HINT_STYLE", "SUCCESS_STYLE", "WARNING_STYLE", "echo"]
