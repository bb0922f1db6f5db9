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
"""Document store port and its in-memory adapter."""

from __future__ import annotations

import copy
from typing import Any, Protocol, runtime_checkable
from uuid import UUID

from modstamp.kernel.exceptions import PersistenceException


@runtime_checkable
class DocumentStore(Protocol):
    """Async persistence interface used by :meth:`Document.save`."""

    async def insert(self, collection: str, id: UUID, record: dict[str, Any]) -> None: ...

    async def replace(self, collection: str, id: UUID, record: dict[str, Any]) -> None: ...

    async def find_by_id(self, collection: str, id: UUID) -> dict[str, Any] | None: ...


class InMemoryDocumentStore:
    """Keeps records in process memory, one dict per collection.

    Records are deep-copied on the way in and out so callers never share
    state with the store.
    """

    def __init__(self) -> None:
        self._collections: dict[str, dict[UUID, dict[str, Any]]] = {}

    async def insert(self, collection: str, id: UUID, record: dict[str, Any]) -> None:
        records = self._collections.setdefault(collection, {})
        if id in records:
            raise PersistenceException(
                f"Duplicate id {id} in collection '{collection}'",
                code="STORE_001",
                context={"collection": collection, "id": str(id)},
            )
        records[id] = copy.deepcopy(record)

    async def replace(self, collection: str, id: UUID, record: dict[str, Any]) -> None:
        records = self._collections.get(collection, {})
        if id not in records:
            raise PersistenceException(
                f"No document {id} in collection '{collection}'",
                code="STORE_002",
                context={"collection": collection, "id": str(id)},
            )
        records[id] = copy.deepcopy(record)

    async def find_by_id(self, collection: str, id: UUID) -> dict[str, Any] | None:
        record = self._collections.get(collection, {}).get(id)
        return copy.deepcopy(record) if record is not None else None

    def count(self, collection: str) -> int:
        return len(self._collections.get(collection, {}))
