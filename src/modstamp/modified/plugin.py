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
"""The modified plugin entry point."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from modstamp.modified.options import ModifiedOptions
from modstamp.modified.resolver import resolve
from modstamp.modified.stamper import Clock, Stamper, StampRule
from modstamp.schema.ports import SchemaPort


def modified_plugin(
    schema: SchemaPort,
    options: ModifiedOptions | Mapping[str, Any] | None = None,
    *,
    clock: Clock | None = None,
) -> StampRule:
    """Add last-modified tracking to *schema*.

    Injects the timestamp (and actor) fields and registers a ``validate``
    pre-hook that stamps the timestamp when a watched path of an existing
    document changed. Returns the resolved :class:`StampRule`.

    Example::

        schema = Schema({"name": {"first": {"type": str, "modified": True}}})
        schema.plugin(modified_plugin, {"by": {"options": {"required": True}}})
    """
    rule = resolve(schema, options, clock=clock)
    schema.pre("validate", Stamper(rule))
    return rule
