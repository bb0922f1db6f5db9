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
"""In-memory schema/document host and the ports plugins are written against."""

from modstamp.schema.document import Document
from modstamp.schema.ports import DocumentPort, FieldSpec, Hook, Reference, SchemaPort
from modstamp.schema.schema import EVENTS, PathSpec, Schema
from modstamp.schema.store import DocumentStore, InMemoryDocumentStore

__all__ = [
    "EVENTS",
    "Document",
    "DocumentPort",
    "DocumentStore",
    "FieldSpec",
    "Hook",
    "InMemoryDocumentStore",
    "PathSpec",
    "Reference",
    "Schema",
    "SchemaPort",
]
