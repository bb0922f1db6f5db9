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
"""modstamp: last-modified timestamps for document schemas.

Applied once per schema, the modified plugin injects a timestamp field (and
optionally a "modified by" actor field) and stamps the timestamp whenever a
watched path of an existing document changes, just before it is persisted.

Hosts:
    - **In-memory schemas** (``modstamp.schema``): ``Schema.plugin(modified_plugin)``.
    - **Beanie documents** (``modstamp.adapters.mongodb``): ``@modified_document()``.
"""

from modstamp.kernel.exceptions import DocumentValidationError, ModStampException
from modstamp.modified import ANY_PATH, ModifiedOptions, StampRule, WatchedPaths, modified_plugin
from modstamp.schema import Document, FieldSpec, InMemoryDocumentStore, Reference, Schema

__version__ = "0.1.0"

__all__ = [
    "ANY_PATH",
    "Document",
    "DocumentValidationError",
    "FieldSpec",
    "InMemoryDocumentStore",
    "ModStampException",
    "ModifiedOptions",
    "Reference",
    "Schema",
    "StampRule",
    "WatchedPaths",
    "modified_plugin",
]
