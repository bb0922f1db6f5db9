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
"""Document instances with change tracking and a validate/save pipeline."""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from typing import Any, ClassVar, Self
from uuid import UUID, uuid4

from modstamp.kernel.exceptions import DocumentValidationError, UndefinedPathError
from modstamp.kernel.types import FieldError
from modstamp.logging.structlog_adapter import bound_document
from modstamp.schema.schema import PathSpec, Schema
from modstamp.schema.store import DocumentStore

logger = logging.getLogger(__name__)

_MISSING = object()


class Document:
    """A document of a model compiled with :meth:`Schema.model`.

    Values are addressed by dotted path (``doc.get("name.first")``,
    ``doc["name.first"] = "Ada"``). Assigning a value different from the
    current one marks its path modified; paths declared with
    ``mark_modified_on_set`` are marked on every assignment.

    Elements of array paths are addressed positionally
    (``doc["nicknames.0.name"] = "Ada"``); assigning through such a path
    marks the array path modified. Change tracking only sees assignments
    through :meth:`set`. Mutating a list or dict in place is invisible until
    the path is reassigned or :meth:`mark_modified` is called.

    ``save()`` runs ``validate`` hooks, then field validation, then ``save``
    hooks, and only then writes to the store. Hooks and validators report
    problems with :meth:`invalidate`; any reported error aborts the save with
    :class:`DocumentValidationError` and leaves the document (and its
    pending modifications) untouched for a retry.
    """

    schema: ClassVar[Schema]
    store: ClassVar[DocumentStore]
    collection: ClassVar[str]

    def __init__(self, data: Mapping[str, Any] | None = None, *, id: UUID | None = None) -> None:
        self.id: UUID = id if id is not None else uuid4()
        self._data: dict[str, Any] = {}
        self._modified: dict[str, None] = {}
        self._errors: dict[str, FieldError] = {}
        self._is_new = True

        for name in self.schema.path_names():
            default = self.schema.path_options(name).get("default", _MISSING)  # type: ignore[union-attr]
            if default is not _MISSING:
                self.set(name, default() if callable(default) else default)
        if data:
            self._assign(data, prefix="")

    @classmethod
    def hydrate(cls, record: Mapping[str, Any]) -> Self:
        """Build a persisted (not new, unmodified) document from a store record."""
        record = dict(record)
        doc = cls.__new__(cls)
        doc.id = record.pop("id")
        doc._data = copy.deepcopy(record)
        doc._modified = {}
        doc._errors = {}
        doc._is_new = False
        return doc

    @classmethod
    async def find_by_id(cls, id: UUID) -> Self | None:
        record = await cls.store.find_by_id(cls.collection, id)
        return cls.hydrate(record) if record is not None else None

    # ------------------------------------------------------------------
    # Values
    # ------------------------------------------------------------------

    def _assign(self, data: Mapping[str, Any], prefix: str) -> None:
        for key, value in data.items():
            name = f"{prefix}{key}"
            if self.schema.is_nested(name) and isinstance(value, Mapping):
                self._assign(value, prefix=f"{name}.")
            else:
                self.set(name, value)

    def get(self, path: str, default: Any = None) -> Any:
        current: Any = self._data
        for part in path.split("."):
            if isinstance(current, list) and part.isdigit() and int(part) < len(current):
                current = current[int(part)]
            elif isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default
        return current

    def _element_path(self, path: str) -> tuple[PathSpec, int, list[str]] | None:
        """Split ``<array>.<index>[.<field>...]`` into its array spec, index and rest."""
        parts = path.split(".")
        for i in range(1, len(parts)):
            spec = self.schema.path(".".join(parts[:i]))
            if spec is not None:
                if spec.is_array and parts[i].isdigit():
                    return spec, int(parts[i]), parts[i + 1 :]
                return None
        return None

    def set(self, path: str, value: Any) -> None:
        spec = self.schema.path(path)
        if spec is None:
            if self.schema.is_nested(path) and isinstance(value, Mapping):
                self._assign(value, prefix=f"{path}.")
                return
            element = self._element_path(path)
            if element is None:
                raise UndefinedPathError(path, self.collection)
            self._set_element(path, *element, value)
            return

        if isinstance(value, (list, dict)):
            value = copy.deepcopy(value)

        previous = self.get(path, _MISSING)
        parts = path.split(".")
        container = self._data
        for part in parts[:-1]:
            container = container.setdefault(part, {})
        container[parts[-1]] = value

        if spec.mark_modified_on_set or previous is _MISSING or previous != value:
            self.mark_modified(path)

    def _set_element(self, path: str, spec: PathSpec, index: int, rest: list[str], value: Any) -> None:
        items = self.get(spec.name)
        if not isinstance(items, list) or index >= len(items):
            raise UndefinedPathError(path, self.collection, f"`{spec.name}` has no element {index}")
        if rest and isinstance(spec.item, Schema):
            field = ".".join(rest)
            if spec.item.path(field) is None and not spec.item.is_nested(field):
                raise UndefinedPathError(path, self.collection)

        if isinstance(value, (list, dict)):
            value = copy.deepcopy(value)

        if not rest:
            previous = items[index]
            items[index] = value
        else:
            container = items[index]
            for part in rest[:-1]:
                if not isinstance(container, dict):
                    break
                container = container.setdefault(part, {})
            if not isinstance(container, dict):
                raise UndefinedPathError(path, self.collection, f"element {index} of `{spec.name}` is not a sub-document")
            previous = container.get(rest[-1], _MISSING)
            container[rest[-1]] = value

        if previous is _MISSING or previous != value:
            self.mark_modified(spec.name)

    def __getitem__(self, path: str) -> Any:
        return self.get(path)

    def __setitem__(self, path: str, value: Any) -> None:
        self.set(path, value)

    def to_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self._data)

    # ------------------------------------------------------------------
    # Change tracking
    # ------------------------------------------------------------------

    @property
    def is_new(self) -> bool:
        return self._is_new

    def is_modified(self, path: str | None = None) -> bool:
        """Whether *path* (or, without argument, anything) changed since the last save.

        A path counts as modified when it, one of its children or one of its
        parents was assigned.
        """
        if path is None:
            return bool(self._modified)
        return any(
            name == path or name.startswith(f"{path}.") or path.startswith(f"{name}.")
            for name in self._modified
        )

    def mark_modified(self, path: str) -> None:
        """Mark *path* modified; an array element path marks its array."""
        element = None if self.schema.path(path) is not None else self._element_path(path)
        self._modified[element[0].name if element else path] = None

    def modified_paths(self) -> list[str]:
        return list(self._modified)

    # ------------------------------------------------------------------
    # Validation and persistence
    # ------------------------------------------------------------------

    def invalidate(self, path: str, message: str, value: Any = None) -> None:
        """Record a field-level error that fails the pending validation."""
        self._errors[path] = FieldError(path, message, value)

    @property
    def errors(self) -> dict[str, str]:
        return {path: fe.message for path, fe in self._errors.items()}

    def validate(self) -> None:
        """Run ``validate`` hooks and field validators; raise on any error."""
        self._errors = {}
        for hook in self.schema.hooks("validate"):
            hook(self)

        for name in self.schema.path_names():
            if name in self._errors:
                continue
            required = self.schema.path_options(name).get("required", False)  # type: ignore[union-attr]
            if callable(required):
                required = required(self)
            if required and self.get(name) is None:
                self.invalidate(name, f"Path `{name}` is required.")

        self._raise_if_invalid()

    def _raise_if_invalid(self) -> None:
        if self._errors:
            raise DocumentValidationError(self._errors.values(), model=self.collection)

    async def save(self) -> Self:
        with bound_document(self.collection, self.id):
            self.validate()
            for hook in self.schema.hooks("save"):
                hook(self)
            self._raise_if_invalid()

            record = {"id": self.id, **self.to_dict()}
            if self._is_new:
                await self.store.insert(self.collection, self.id, record)
            else:
                await self.store.replace(self.collection, self.id, record)

            logger.debug(
                "Saved %s %s (new=%s, modified=%s)",
                self.collection,
                self.id,
                self._is_new,
                self.modified_paths(),
            )
        self._is_new = False
        self._modified = {}
        return self

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id} {self._data!r}>"
