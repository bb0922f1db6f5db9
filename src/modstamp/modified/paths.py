# Copyright 2026 Firefly Software Solutions Inc.
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
"""The set of document paths whose modification triggers stamping."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Final

from modstamp.schema.ports import DocumentPort


class _AnyPath:
    """Sentinel standing for "any modified path of the document"."""

    _instance: _AnyPath | None = None

    def __new__(cls) -> _AnyPath:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ANY_PATH"


ANY_PATH: Final = _AnyPath()


@dataclass(frozen=True)
class WatchedPaths:
    """Ordered, never empty: either path names or the single :data:`ANY_PATH`."""

    paths: tuple[str | _AnyPath, ...]

    def __post_init__(self) -> None:
        if not self.paths:
            raise ValueError("WatchedPaths needs at least one path; use WatchedPaths.any()")
        if ANY_PATH in self.paths and len(self.paths) > 1:
            raise ValueError("ANY_PATH cannot be combined with named paths")

    @classmethod
    def any(cls) -> WatchedPaths:
        return cls((ANY_PATH,))

    @classmethod
    def of(cls, names: Iterable[str]) -> WatchedPaths:
        return cls(tuple(names))

    @property
    def matches_any(self) -> bool:
        return self.paths[0] is ANY_PATH

    def any_modified(self, document: DocumentPort) -> bool:
        """True as soon as one watched path is modified on *document*."""
        if self.matches_any:
            return document.is_modified()
        return any(document.is_modified(path) for path in self.paths)  # type: ignore[arg-type]

    def describe(self) -> str:
        return "<any path>" if self.matches_any else ", ".join(self.paths)  # type: ignore[arg-type]

    def __iter__(self) -> Iterator[str | _AnyPath]:
        return iter(self.paths)

    def __len__(self) -> int:
        return len(self.paths)
