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
"""In-memory document schema: path registry, per-path options and hooks.

Schemas are declared with nested dicts, the way document models usually are::

    schema = Schema({
        "username": str,
        "name": {"first": {"type": str, "modified": True}, "last": str},
        "emails": [str],
        "created": {"type": datetime, "default": utcnow},
    })

Every leaf becomes a dotted path (``name.first``) carrying a
:class:`PathSpec`. Any key of a field dict other than ``type`` lands in the
path's ``options``, so arbitrary metadata flags can be attached and later
discovered by plugins through :meth:`Schema.path_options`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal

from modstamp.kernel.exceptions import ConfigurationException, SchemaDefinitionError
from modstamp.schema.ports import FieldSpec, Hook, Reference
from modstamp.schema.store import DocumentStore, InMemoryDocumentStore

if TYPE_CHECKING:
    from modstamp.schema.document import Document

logger = logging.getLogger(__name__)

#: Pre-persist events, in the order a save runs them.
EVENTS = ("validate", "save")

PathType = Literal["real", "nested", "adhocOrUndefined"]


@dataclass
class PathSpec:
    """A registered schema path.

    ``options`` is mutable: flags may be attached after the
    schema is declared (``schema.path("name.first").options["modified"] = True``).
    ``item`` holds the element type of array paths.
    """

    name: str
    type: Any
    options: dict[str, Any] = field(default_factory=dict)
    mark_modified_on_set: bool = False
    item: Any = None

    @property
    def is_array(self) -> bool:
        return self.type is list

    @property
    def is_reference(self) -> bool:
        return isinstance(self.type, Reference)


class Schema:
    """Registry of document paths plus the pre-persist hooks run on save."""

    def __init__(self, definition: Mapping[str, Any] | None = None) -> None:
        self._paths: dict[str, PathSpec] = {}
        self._nested: set[str] = set()
        self._hooks: dict[str, list[Hook]] = {event: [] for event in EVENTS}
        if definition:
            self.add(definition)

    # ------------------------------------------------------------------
    # Definition
    # ------------------------------------------------------------------

    def add(self, definition: Mapping[str, Any], prefix: str = "") -> Schema:
        """Add every path of a nested *definition* under *prefix*."""
        for key, value in definition.items():
            name = f"{prefix}{key}"
            if isinstance(value, Schema):
                for sub_name, sub_spec in value._paths.items():
                    self._register(
                        PathSpec(
                            f"{name}.{sub_name}",
                            sub_spec.type,
                            dict(sub_spec.options),
                            sub_spec.mark_modified_on_set,
                            sub_spec.item,
                        )
                    )
            elif isinstance(value, list):
                item = value[0] if value else Any
                self._register(PathSpec(name, list, {}, item=item))
            elif isinstance(value, Mapping) and "type" in value:
                options = {k: v for k, v in value.items() if k != "type"}
                if isinstance(value["type"], list):
                    item = value["type"][0] if value["type"] else Any
                    self._register(PathSpec(name, list, options, item=item))
                else:
                    self._register(PathSpec(name, value["type"], options))
            elif isinstance(value, Mapping) and value:
                self.add(value, prefix=f"{name}.")
            elif isinstance(value, Mapping):
                self._register(PathSpec(name, dict))
            else:
                self._register(PathSpec(name, value))
        return self

    def add_path(self, name: str, spec: FieldSpec) -> None:
        """Register a single path from a plugin-supplied :class:`FieldSpec`."""
        self._register(PathSpec(name, spec.type, dict(spec.options), spec.mark_modified_on_set))

    def _register(self, spec: PathSpec) -> None:
        name = spec.name
        if not isinstance(name, str) or not name or any(not part for part in name.split(".")):
            raise SchemaDefinitionError(str(name), "path names must be non-empty dotted strings")
        if name in self._nested:
            raise SchemaDefinitionError(name, "it is already a nested path")

        parts = name.split(".")
        parents = [".".join(parts[:i]) for i in range(1, len(parts))]
        for parent in parents:
            if parent in self._paths:
                raise SchemaDefinitionError(name, f"parent `{parent}` is not a nested path")

        expires = spec.options.get("expires")
        if expires is not None and (not isinstance(expires, int) or isinstance(expires, bool) or expires <= 0):
            raise SchemaDefinitionError(name, "`expires` must be a positive number of seconds")

        self._nested.update(parents)
        self._paths[name] = spec

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def path(self, name: str) -> PathSpec | None:
        return self._paths.get(name)

    def path_names(self) -> list[str]:
        return list(self._paths)

    def path_options(self, name: str) -> dict[str, Any] | None:
        spec = self._paths.get(name)
        return spec.options if spec is not None else None

    def path_type(self, name: str) -> PathType:
        if name in self._paths:
            return "real"
        if name in self._nested:
            return "nested"
        return "adhocOrUndefined"

    def is_nested(self, name: str) -> bool:
        return name in self._nested

    def indexes(self) -> list[tuple[str, dict[str, Any]]]:
        """Index directives for the storage layer (TTL from ``expires``)."""
        return [
            (name, {"expireAfterSeconds": spec.options["expires"]})
            for name, spec in self._paths.items()
            if spec.options.get("expires") is not None
        ]

    # ------------------------------------------------------------------
    # Hooks and plugins
    # ------------------------------------------------------------------

    def pre(self, event: str, hook: Hook) -> None:
        """Register *hook* to run before *event* (``validate`` or ``save``)."""
        if event not in self._hooks:
            raise ConfigurationException(
                f"Unknown schema event '{event}', expected one of {', '.join(EVENTS)}",
                code="SCHEMA_002",
            )
        self._hooks[event].append(hook)

    def hooks(self, event: str) -> tuple[Hook, ...]:
        return tuple(self._hooks.get(event, ()))

    def plugin(self, fn: Callable[..., Any], options: Any = None, **kwargs: Any) -> Schema:
        """Apply a plugin function ``fn(schema, options, **kwargs)``."""
        fn(self, options, **kwargs)
        logger.debug("Applied plugin %s to schema", getattr(fn, "__name__", repr(fn)))
        return self

    def model(self, name: str, store: DocumentStore | None = None) -> type[Document]:
        """Create a :class:`Document` subclass bound to this schema.

        *name* doubles as the collection name. Each call returns a fresh
        class, so tests can compile the same name repeatedly.
        """
        from modstamp.schema.document import Document

        return type(
            name,
            (Document,),
            {
                "schema": self,
                "store": store if store is not None else InMemoryDocumentStore(),
                "collection": name,
            },
        )
