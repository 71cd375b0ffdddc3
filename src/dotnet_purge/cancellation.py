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

"""Cooperative cancellation shared by the CLI and the purge pipeline."""

from __future__ import annotations

import threading

from dotnet_purge._internal.exceptions import PurgeCancelledError

__all__ = ["CancellationToken"]


class CancellationToken:
    """Thread-safe flag observed between units of work.

    Child processes are never killed; callers check the token once a process
    has finished and before starting the next one.
    """

    __slots__ = ("_event",)

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        """Raise ``PurgeCancelledError`` when cancellation has been requested."""
        if self._event.is_set():
            raise PurgeCancelledError

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.cancelled})"
