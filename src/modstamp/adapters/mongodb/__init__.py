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
"""Beanie adapter: last-modified tracking for Beanie documents.

Example::

    @modified_document({"by": {"ref": "User", "options": {"required": True}}})
    class Article(Document):
        title: str = Field(json_schema_extra={"modified": True})
        body: str = ""

        class Settings:
            name = "articles"
            use_state_management = True

The decorated name refers to a generated subclass; register that class with
``init_beanie`` as usual.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, TypeVar

from beanie import Document

from modstamp.adapters.mongodb.document import AssignmentTracking, BeanieDocument, clear_assignments
from modstamp.adapters.mongodb.schema import BeanieSchema
from modstamp.modified.options import ModifiedOptions
from modstamp.modified.plugin import modified_plugin
from modstamp.modified.stamper import Clock

D = TypeVar("D", bound=Document)


def modified_document(
    options: ModifiedOptions | Mapping[str, Any] | None = None,
    *,
    clock: Clock | None = None,
) -> Callable[[type[D]], type[D]]:
    """Class decorator applying :func:`~modstamp.modified.modified_plugin` to a Beanie document."""

    def decorator(document_cls: type[D]) -> type[D]:
        schema = BeanieSchema(document_cls)
        modified_plugin(schema, options, clock=clock)
        return schema.build()  # type: ignore[return-value]

    return decorator


__all__ = [
    "AssignmentTracking",
    "BeanieDocument",
    "BeanieSchema",
    "clear_assignments",
    "modified_document",
]
