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

"""Hypothesis strategies shared by the property-based tests."""

from __future__ import annotations

from hypothesis import strategies as st

__all__ = ["framework_lists", "msbuild_list_items", "output_dir_layouts", "path_segment"]


def path_segment() -> st.SearchStrategy[str]:
    """Return a strategy for one lower-case directory name."""
    return st.from_regex(r"[a-z][a-z0-9]{0,5}", fullmatch=True)


def output_dir_layouts(max_dirs: int = 4, max_depth: int = 4) -> st.SearchStrategy[list[list[str]]]:
    """Return a strategy for output directories given as segment lists.

    Args:
        max_dirs: Maximum number of output directories.
        max_depth: Maximum nesting depth of each directory.

    Returns:
        Hypothesis strategy producing non-empty lists of non-empty segment lists.
    """
    return st.lists(st.lists(path_segment(), min_size=1, max_size=max_depth), min_size=1, max_size=max_dirs)


def msbuild_list_items(max_size: int = 5) -> st.SearchStrategy[list[str]]:
    return st.lists(st.from_regex(r"[A-Za-z0-9.]{1,8}", fullmatch=True), max_size=max_size)


def framework_lists(max_size: int = 4) -> st.SearchStrategy[list[str]]:
    """Unique target framework monikers such as ``net8.0``."""
    return st.lists(st.from_regex(r"net[0-9]{1,2}\.[0-9]", fullmatch=True), max_size=max_size, unique=True)
