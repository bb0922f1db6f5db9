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
"""Registration-time resolution: watched paths and the injected fields."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from modstamp.modified.options import ModifiedOptions, resolve_options
from modstamp.modified.paths import WatchedPaths
from modstamp.modified.stamper import ActorRequired, Clock, StampRule, utcnow
from modstamp.schema.ports import FieldSpec, Reference, SchemaPort

logger = logging.getLogger(__name__)


def resolve_watched_paths(schema: SchemaPort, options: ModifiedOptions) -> WatchedPaths:
    """Explicit ``paths`` win; otherwise paths flagged with ``option_key``; otherwise any path."""
    if options.paths:
        return WatchedPaths.of(options.paths)

    flagged = [
        name
        for name in schema.path_names()
        if (schema.path_options(name) or {}).get(options.option_key)
    ]
    return WatchedPaths.of(flagged) if flagged else WatchedPaths.any()


def _without_type(options: Mapping[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in options.items() if key != "type"}


def date_field_spec(options: ModifiedOptions) -> FieldSpec:
    field_options = _without_type(options.date.options)
    if options.date.expires is not None:
        field_options["expires"] = options.date.expires
    return FieldSpec(type=datetime, options=field_options)


def actor_field_spec(options: ModifiedOptions) -> FieldSpec | None:
    """The actor field, or ``None`` when the actor path is disabled.

    A literal ``required=True`` becomes :class:`ActorRequired`, which only
    demands the actor on saves that stamp an existing document.
    """
    if not options.by.enabled:
        return None

    field_options = _without_type(options.by.options)
    if field_options.get("required") is True:
        field_options["required"] = ActorRequired(options.date.path)

    field_type: Any = Reference(options.by.ref) if options.by.ref else str
    return FieldSpec(type=field_type, options=field_options, mark_modified_on_set=True)


def resolve(
    schema: SchemaPort,
    options: ModifiedOptions | Mapping[str, Any] | None = None,
    *,
    clock: Clock | None = None,
) -> StampRule:
    """Resolve *options* against *schema*, add the fields, return the stamping rule.

    Watched paths are discovered before the fields are injected, so the
    timestamp and actor paths are never watched through discovery.
    """
    resolved = resolve_options(options)
    watched = resolve_watched_paths(schema, resolved)

    schema.add_path(resolved.date.path, date_field_spec(resolved))

    actor = actor_field_spec(resolved)
    if actor is not None:
        assert resolved.by.path is not None
        schema.add_path(resolved.by.path, actor)

    rule = StampRule(
        watched=watched,
        date_path=resolved.date.path,
        actor_path=resolved.by.path if actor is not None else None,
        actor_required=actor is not None and isinstance(actor.options.get("required"), ActorRequired),
        clock=clock or utcnow,
    )
    logger.debug(
        "Resolved modified tracking: watching %s, date at %s, actor at %s (required=%s)",
        watched.describe(),
        rule.date_path,
        rule.actor_path,
        rule.actor_required,
        extra={"watched": watched.describe(), "date_path": rule.date_path},
    )
    return rule
