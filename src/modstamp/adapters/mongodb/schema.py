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
"""SchemaPort over a Beanie document class.

Pydantic models cannot grow fields in place, so :class:`BeanieSchema`
collects the paths a plugin adds and :meth:`BeanieSchema.build` derives a
subclass carrying them. Dotted paths become nested models
(``modified.date`` -> a ``modified`` sub-model with a ``date`` field).

Per-path metadata is read from ``Field(json_schema_extra={...})``::

    class Name(BaseModel):
        first: str = Field(json_schema_extra={"modified": True})
        last: str = ""
"""

from __future__ import annotations

import logging
import types
import typing
from collections.abc import Iterator, Mapping
from typing import Any

from beanie import Document, Insert, PydanticObjectId, Replace, Save, SaveChanges, after_event, before_event
from pydantic import BaseModel, Field
from pydantic.fields import FieldInfo
from pymongo import ASCENDING, IndexModel

from modstamp.adapters.mongodb.document import AssignmentTracking, BeanieDocument, clear_assignments
from modstamp.kernel.exceptions import ConfigurationException, SchemaDefinitionError
from modstamp.logging.structlog_adapter import bound_document
from modstamp.schema.ports import FieldSpec, Hook, Reference
from modstamp.schema.schema import EVENTS

logger = logging.getLogger(__name__)

_SKIPPED_FIELDS = frozenset({"id", "revision_id"})

_JSON_TYPES = (str, int, float, bool, type(None))


def _nested_model(annotation: Any) -> type[BaseModel] | None:
    """The BaseModel behind *annotation*, unwrapping ``X | None``."""
    if typing.get_origin(annotation) in (typing.Union, types.UnionType):
        args = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        annotation = args[0] if len(args) == 1 else None
    if isinstance(annotation, type) and issubclass(annotation, BaseModel) and not issubclass(annotation, Document):
        return annotation
    return None


def _model_paths(model: type[BaseModel], prefix: str = "") -> Iterator[tuple[str, FieldInfo]]:
    for name, info in model.model_fields.items():
        if not prefix and name in _SKIPPED_FIELDS:
            continue
        path = f"{prefix}{name}"
        yield path, info
        nested = _nested_model(info.annotation)
        if nested is not None:
            yield from _model_paths(nested, f"{path}.")


def _json_extra(info: FieldInfo) -> dict[str, Any]:
    extra = info.json_schema_extra
    return dict(extra) if isinstance(extra, Mapping) else {}


def _run_pre_persist(document: Any) -> None:
    schema: BeanieSchema = type(document).__modstamp_schema__
    view = BeanieDocument(document)
    with bound_document(document.get_collection_name(), document.id):
        for hook in schema.hooks("validate"):
            hook(view)
        for path, required in schema.required_rules():
            if path in view.errors:
                continue
            if callable(required):
                required = required(view)
            if required and view.get(path) is None:
                view.invalidate(path, f"Path `{path}` is required.")
        for hook in schema.hooks("save"):
            hook(view)
    view.raise_if_invalid()


def _run_post_persist(document: Any) -> None:
    clear_assignments(document)


class BeanieSchema:
    """Collects plugin paths and hooks for a Beanie :class:`~beanie.Document` class."""

    def __init__(self, document_cls: type[Document]) -> None:
        settings = getattr(document_cls, "Settings", None)
        if not getattr(settings, "use_state_management", False):
            raise ConfigurationException(
                f"{document_cls.__name__} needs Settings.use_state_management = True for modification tracking",
                code="SCHEMA_003",
                context={"document": document_cls.__name__},
            )
        self.document_cls = document_cls
        self._pending: dict[str, FieldSpec] = {}
        self._hooks: dict[str, list[Hook]] = {event: [] for event in EVENTS}

    # ------------------------------------------------------------------
    # SchemaPort
    # ------------------------------------------------------------------

    def add_path(self, name: str, spec: FieldSpec) -> None:
        if not isinstance(name, str) or not name or any(not part for part in name.split(".")):
            raise SchemaDefinitionError(str(name), "path names must be non-empty dotted strings")
        if name in self._pending:
            raise SchemaDefinitionError(name, "the path is already being added")
        expires = spec.options.get("expires")
        if expires is not None and (not isinstance(expires, int) or isinstance(expires, bool) or expires <= 0):
            raise SchemaDefinitionError(name, "`expires` must be a positive number of seconds")
        self._pending[name] = spec

    def path_names(self) -> list[str]:
        names = [path for path, _ in _model_paths(self.document_cls)]
        return names + [name for name in self._pending if name not in names]

    def path_options(self, name: str) -> dict[str, Any] | None:
        if name in self._pending:
            return dict(self._pending[name].options)
        for path, info in _model_paths(self.document_cls):
            if path == name:
                return _json_extra(info)
        return None

    def pre(self, event: str, hook: Hook) -> None:
        if event not in self._hooks:
            raise ConfigurationException(
                f"Unknown schema event '{event}', expected one of {', '.join(EVENTS)}",
                code="SCHEMA_002",
            )
        self._hooks[event].append(hook)

    def hooks(self, event: str) -> tuple[Hook, ...]:
        return tuple(self._hooks.get(event, ()))

    def required_rules(self) -> list[tuple[str, Any]]:
        return [
            (name, spec.options["required"])
            for name, spec in self._pending.items()
            if spec.options.get("required")
        ]

    # ------------------------------------------------------------------
    # Class generation
    # ------------------------------------------------------------------

    def build(self) -> type[Document]:
        """Derive the document class carrying the added paths and the persist actions."""
        cls = self.document_cls
        tree = self._tree()
        namespace: dict[str, Any] = {
            "__module__": cls.__module__,
            "__qualname__": cls.__qualname__,
            "__doc__": cls.__doc__,
            "__modstamp_schema__": self,
            "__modstamp_tracked__": self._tracked(tree),
            "modstamp_pre_persist": before_event(Insert, Replace, Save, SaveChanges)(_run_pre_persist),
            "modstamp_post_persist": after_event(Insert, Replace, Save, SaveChanges)(_run_post_persist),
        }
        annotations: dict[str, Any] = {}
        for name, node in tree.items():
            annotations[name], namespace[name] = self._field(cls, name, node)
        namespace["__annotations__"] = annotations

        indexes = [
            IndexModel([(name, ASCENDING)], expireAfterSeconds=spec.options["expires"], name=f"{name}_ttl")
            for name, spec in self._pending.items()
            if spec.options.get("expires") is not None
        ]
        if indexes:
            namespace["Settings"] = self._settings(cls, indexes)

        built = types.new_class(cls.__name__, (AssignmentTracking, cls), exec_body=lambda ns: ns.update(namespace))
        logger.debug("Built %s with modification paths %s", built.__name__, list(self._pending))
        return built

    def _tree(self) -> dict[str, Any]:
        tree: dict[str, Any] = {}
        for name, spec in self._pending.items():
            *parents, leaf = name.split(".")
            node = tree
            for part in parents:
                child = node.setdefault(part, {})
                if isinstance(child, FieldSpec):
                    raise SchemaDefinitionError(name, f"parent `{part}` is not a nested path")
                node = child
            if isinstance(node.get(leaf), dict):
                raise SchemaDefinitionError(name, "it is already a nested path")
            node[leaf] = spec
        return tree

    @staticmethod
    def _tracked(tree: Mapping[str, Any]) -> frozenset[str]:
        return frozenset(
            name for name, node in tree.items() if isinstance(node, FieldSpec) and node.mark_modified_on_set
        )

    def _field(self, owner: type[BaseModel], name: str, node: Any) -> tuple[Any, Any]:
        existing = owner.model_fields.get(name)
        if isinstance(node, FieldSpec):
            return self._leaf(node)

        base = _nested_model(existing.annotation) if existing is not None else None
        if existing is not None and base is None:
            raise SchemaDefinitionError(f"{name}.{next(iter(node))}", f"parent `{name}` is not a nested model")

        container = self._container(owner, name, node, base)
        return container, Field(default_factory=container)

    def _container(
        self,
        owner: type[BaseModel],
        name: str,
        tree: Mapping[str, Any],
        base: type[BaseModel] | None,
    ) -> type[BaseModel]:
        cls_name = f"{owner.__name__}{name.title().replace('_', '')}"
        namespace: dict[str, Any] = {
            "__module__": owner.__module__,
            "__qualname__": cls_name,
            "__modstamp_tracked__": self._tracked(tree),
        }
        annotations: dict[str, Any] = {}
        template = base if base is not None else BaseModel
        for child, node in tree.items():
            annotations[child], namespace[child] = self._field(template, child, node)
        namespace["__annotations__"] = annotations

        bases = (AssignmentTracking, base) if base is not None else (AssignmentTracking,)
        return types.new_class(cls_name, bases, exec_body=lambda ns: ns.update(namespace))

    @staticmethod
    def _leaf(spec: FieldSpec) -> tuple[Any, FieldInfo]:
        if isinstance(spec.type, Reference):
            python_type: Any = PydanticObjectId
        else:
            python_type = spec.type
        extra = {k: v for k, v in spec.options.items() if isinstance(v, _JSON_TYPES)}
        if isinstance(spec.type, Reference):
            extra["ref"] = spec.type.ref
        default = spec.options.get("default")
        if callable(default):
            return python_type | None, Field(default_factory=default, json_schema_extra=extra)
        return python_type | None, Field(default=default, json_schema_extra=extra)

    @staticmethod
    def _settings(cls: type[Document], indexes: list[IndexModel]) -> type:
        parent = getattr(cls, "Settings", None)
        bases = (parent,) if parent is not None else ()
        body = {
            "__module__": cls.__module__,
            "__qualname__": f"{cls.__qualname__}.Settings",
            "indexes": [*getattr(parent, "indexes", []), *indexes],
        }
        return types.new_class("Settings", bases, exec_body=lambda ns: ns.update(body))
