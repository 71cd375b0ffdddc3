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

# ignore JUSTIFIED: argument helpers mirror argparse signatures and allow passthrough
# typing without constraining caller kwargs
# ruff: noqa: ANN401

"""Argument parser helpers used by the CLI."""

from __future__ import annotations

import argparse
from typing import Any, Protocol

from dotnet_purge.config import ConfigValidationError, WorkersSetting, coerce_workers


class ArgumentRegistrar(Protocol):
    """Interface shared by ``argparse.ArgumentParser`` and argument groups."""

    def add_argument(
        self,
        *args: Any,
        **kwargs: Any,
    ) -> argparse.Action: ...


def register_argument(
    registrar: ArgumentRegistrar,
    *args: Any,
    **kwargs: Any,
) -> None:
    """Register an argument on a parser/argument group, discarding the action handle.

    Args:
        registrar: Parser or argument group on which to register the option.
        *args: Positional flags and option strings forwarded to ``add_argument``.
        **kwargs: Keyword options forwarded to ``add_argument``.
    """
    _ = registrar.add_argument(*args, **kwargs)


def parse_workers(raw: str) -> WorkersSetting:
    """``argparse`` type for ``--workers``: a positive integer or ``auto``."""
    try:
        value = coerce_workers(raw, context="--workers")
    except ConfigValidationError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc
    if value is None:
        msg = "--workers requires a value"
        raise argparse.ArgumentTypeError(msg)
    return value


__all__ = ["ArgumentRegistrar", "parse_workers", "register_argument"]
