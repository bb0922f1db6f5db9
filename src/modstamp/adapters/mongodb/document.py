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
"""DocumentPort view over a Beanie document."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

from beanie.odm.utils.dump import get_dict
from pydantic import BaseModel, PrivateAttr

from modstamp.kernel.exceptions import DocumentValidationError
from modstamp.kernel.types import FieldError


class AssignmentTracking(BaseModel):
    """Records assignments to the fields named in ``__modstamp_tracked__``.

    Beanie state management compares values, so assigning a field its
    current value is not a change. Tracked fields count every assignment.
    """

    __modstamp_tracked__ = frozenset()

    _modstamp_assigned: set[str] = PrivateAttr(default_factory=set)

    def __setattr__(self, name: str, value: Any) -> None:
        if name in type(self).__modstamp_tracked__:
            self._modstamp_assigned.add(name)
        super().__setattr__(name, value)


def _overlaps(changed: str, path: str) -> bool:
    return changed == path or changed.startswith(f"{path}.") or path.startswith(f"{changed}.")


def _leaves(data: Mapping[str, Any], prefix: str = "") -> Iterator[tuple[str, Any]]:
    """Flatten nested mappings into ``(dotted path, value)`` pairs."""
    for key, value in data.items():
        if isinstance(value, Mapping):
            yield from _leaves(value, f"{prefix}{key}.")
        else:
            yield f"{prefix}{key}", value


def _assigned_paths(model: BaseModel, prefix: str = "") -> Iterator[str]:
    if isinstance(model, AssignmentTracking):
        for name in model._modstamp_assigned:
            yield f"{prefix}{name}"
    for name in type(model).model_fields:
        value = getattr(model, name, None)
        if isinstance(value, AssignmentTracking):
            yield from _assigned_paths(value, f"{prefix}{name}.")


def clear_assignments(model: BaseModel) -> None:
    if isinstance(model, AssignmentTracking):
        model._modstamp_assigned.clear()
    for name in type(model).model_fields:
        value = getattr(model, name, None)
        if isinstance(value, AssignmentTracking):
            clear_assignments(value)


class BeanieDocument:
    """Exposes a Beanie document through :class:`~modstamp.schema.ports.DocumentPort`.

    A document is new until Beanie has saved its state, i.e. until it was
    inserted or loaded from the database, which requires
    ``Settings.use_state_management = True``. Modifications are the leaf
    paths whose value differs between the saved state and a dump of the
    current document, plus tracked assignments. Both sides are compared with
    nulls kept, so ``Settings.keep_nulls = False`` only changes how a cleared
    field is stored, not whether other fields count as changed.
    """

    def __init__(self, document: Any) -> None:
        self.document = document
        self._errors: dict[str, FieldError] = {}

    @property
    def is_new(self) -> bool:
        return self.document.id is None or self.document.get_saved_state() is None

    def modified_paths(self) -> list[str]:
        if self.is_new:
            return []
        saved = dict(_leaves(self.document.get_saved_state()))
        current = dict(
            _leaves(get_dict(self.document, to_db=True, keep_nulls=True, exclude={"revision_id"}))
        )
        paths = [path for path, value in current.items() if saved.get(path) != value]
        paths.extend(path for path in saved if path not in current and saved[path] is not None)
        paths.extend(p for p in _assigned_paths(self.document) if p not in paths)
        return paths

    def is_modified(self, path: str | None = None) -> bool:
        paths = self.modified_paths()
        if path is None:
            return bool(paths)
        return any(_overlaps(changed, path) for changed in paths)

    def get(self, path: str) -> Any:
        current: Any = self.document
        for part in path.split("."):
            current = getattr(current, part, None)
            if current is None:
                return None
        return current

    def set(self, path: str, value: Any) -> None:
        *parents, name = path.split(".")
        target: Any = self.document
        for part in parents:
            target = getattr(target, part)
        setattr(target, name, value)

    def invalidate(self, path: str, message: str) -> None:
        self._errors[path] = FieldError(path, message)

    @property
    def errors(self) -> dict[str, str]:
        return {path: fe.message for path, fe in self._errors.items()}

    def raise_if_invalid(self) -> None:
        if self._errors:
            raise DocumentValidationError(self._errors.values(), model=type(self.document).__name__)
