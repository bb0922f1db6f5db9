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
"""Save-time stamping: decides, on every save, whether to stamp the timestamp.

The decision runs in a fixed order:

1. new documents are never stamped;
2. nothing happens unless a watched path was modified;
3. with a required actor, the actor path must have been assigned in the same
   save, otherwise the save is rejected on the actor path *before* the
   timestamp is touched;
4. the timestamp is set to the current instant.

Step 3 relies on the timestamp still being unmodified when it runs: the
:class:`ActorRequired` rule evaluated later by field validation reads
``is_modified(date_path)`` and must only see stamps made by step 4.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

from modstamp.modified.paths import WatchedPaths
from modstamp.schema.ports import DocumentPort

logger = logging.getLogger(__name__)

ACTOR_UPDATE_MESSAGE = "{path} must be updated for document modification"

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(UTC)


class Decision(Enum):
    """Outcome of one evaluation of the stamping rule."""

    NEW_DOCUMENT = "new_document"
    UNCHANGED = "unchanged"
    ACTOR_NOT_UPDATED = "actor_not_updated"
    STAMP = "stamp"


@dataclass(frozen=True)
class ActorRequired:
    """Computed requiredness of the actor field.

    Required only on existing documents whose timestamp is modified in the
    current save, so creating a document never demands an actor.
    """

    date_path: str

    def __call__(self, document: DocumentPort) -> bool:
        return not document.is_new and document.is_modified(self.date_path)


@dataclass(frozen=True)
class StampRule:
    """Everything the stamper needs, resolved once per schema."""

    watched: WatchedPaths
    date_path: str
    actor_path: str | None = None
    actor_required: bool = False
    clock: Clock = utcnow


def evaluate(rule: StampRule, document: DocumentPort) -> Decision:
    """Decide what a save of *document* requires, without mutating it."""
    if document.is_new:
        return Decision.NEW_DOCUMENT
    if not rule.watched.any_modified(document):
        return Decision.UNCHANGED
    if rule.actor_required and rule.actor_path and not document.is_modified(rule.actor_path):
        return Decision.ACTOR_NOT_UPDATED
    return Decision.STAMP


class Stamper:
    """Pre-persist hook applying a :class:`StampRule` to each saved document."""

    def __init__(self, rule: StampRule) -> None:
        self.rule = rule

    def __call__(self, document: DocumentPort) -> None:
        decision = evaluate(self.rule, document)
        if decision is Decision.STAMP:
            document.set(self.rule.date_path, self.rule.clock())
        elif decision is Decision.ACTOR_NOT_UPDATED:
            assert self.rule.actor_path is not None
            document.invalidate(self.rule.actor_path, ACTOR_UPDATE_MESSAGE.format(path=self.rule.actor_path))
        logger.debug(
            "Modified stamp decision: %s",
            decision.value,
            extra={"decision": decision.value, "date_path": self.rule.date_path},
        )

    def __repr__(self) -> str:
        return f"Stamper(watched={self.rule.watched.describe()!r}, date_path={self.rule.date_path!r})"
