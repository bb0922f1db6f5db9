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
"""Ports: the capability contract between a schema plugin and its host.

A host (the in-memory :mod:`modstamp.schema` layer, or the Beanie adapter)
implements :class:`SchemaPort` for registration time and
:class:`DocumentPort` for the document passed to every pre-persist hook.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

#: Pre-persist hook: called with the in-flight document, returns to continue.
Hook = Callable[["DocumentPort"], None]


@dataclass(frozen=True)
class Reference:
    """Field type for a reference to a document of another model."""

    ref: str


@dataclass(frozen=True)
class FieldSpec:
    """Definition of a path to be added to a schema.

    ``options`` carries host attributes (``required``, ``default``,
    ``expires``, ``select``, ...) and arbitrary per-path metadata.
    ``required`` may be a bool or a callable ``(document) -> bool``.
    """

    type: Any
    options: Mapping[str, Any] = field(default_factory=dict)
    mark_modified_on_set: bool = False


@runtime_checkable
class DocumentPort(Protocol):
    """Document instance as seen from a pre-persist hook."""

    @property
    def is_new(self) -> bool: ...

    def is_modified(self, path: str | None = None) -> bool: ...

    def set(self, path: str, value: Any) -> None: ...

    def invalidate(self, path: str, message: str) -> None: ...


@runtime_checkable
class SchemaPort(Protocol):
    """Schema handle as seen by a plugin at registration time."""

    def add_path(self, name: str, spec: FieldSpec) -> None: ...

    def path_names(self) -> list[str]: ...

    def path_options(self, name: str) -> Mapping[str, Any] | None: ...

    def pre(self, event: str, hook: Hook) -> None: ...
