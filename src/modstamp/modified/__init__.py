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
"""Last-modified tracking for document schemas."""

from modstamp.modified.options import ActorOptions, DateOptions, ModifiedOptions, resolve_options
from modstamp.modified.paths import ANY_PATH, WatchedPaths
from modstamp.modified.plugin import modified_plugin
from modstamp.modified.resolver import actor_field_spec, date_field_spec, resolve, resolve_watched_paths
from modstamp.modified.stamper import (
    ACTOR_UPDATE_MESSAGE,
    ActorRequired,
    Decision,
    Stamper,
    StampRule,
    evaluate,
    utcnow,
)

__all__ = [
    "ACTOR_UPDATE_MESSAGE",
    "ANY_PATH",
    "ActorOptions",
    "ActorRequired",
    "DateOptions",
    "Decision",
    "ModifiedOptions",
    "StampRule",
    "Stamper",
    "WatchedPaths",
    "actor_field_spec",
    "date_field_spec",
    "evaluate",
    "modified_plugin",
    "resolve",
    "resolve_options",
    "resolve_watched_paths",
    "utcnow",
]
