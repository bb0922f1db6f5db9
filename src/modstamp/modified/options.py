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
"""Options of the modified plugin, their defaults and how caller values merge in."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator

from modstamp.core.config import config_properties, deep_merge


class DateOptions(BaseModel):
    """Where the modification timestamp is stored."""

    model_config = ConfigDict(frozen=True)

    path: str = "modified.date"
    options: dict[str, Any] = Field(default_factory=dict)
    expires: PositiveInt | None = None


class ActorOptions(BaseModel):
    """Where the modifying actor is stored; an empty path disables the field."""

    model_config = ConfigDict(frozen=True)

    path: str | None = "modified.by"
    ref: str | None = None
    options: dict[str, Any] = Field(default_factory=dict)

    @property
    def enabled(self) -> bool:
        return bool(self.path)


@config_properties(prefix="modstamp.modified")
class ModifiedOptions(BaseModel):
    """Configuration of the modified plugin (modstamp.modified.*).

    Attributes:
        option_key: Per-path option flag marking paths to watch.
        date: Timestamp field settings.
        by: Actor field settings.
        paths: Explicit watch list; overrides discovery through ``option_key``.
    """

    model_config = ConfigDict(frozen=True)

    option_key: str = "modified"
    date: DateOptions = Field(default_factory=DateOptions)
    by: ActorOptions = Field(default_factory=ActorOptions)
    paths: tuple[str, ...] | None = None

    @field_validator("paths", mode="before")
    @classmethod
    def _wrap_single_path(cls, value: Any) -> Any:
        if isinstance(value, str):
            return (value,)
        return value


def resolve_options(options: ModifiedOptions | Mapping[str, Any] | None = None) -> ModifiedOptions:
    """Merge caller *options* over the defaults.

    Mappings are merged recursively, so ``{"by": {"ref": "User"}}`` keeps the
    default actor path. An explicit ``None`` replaces the default, which is
    how ``{"by": {"path": None}}`` turns the actor field off.
    """
    if options is None:
        return ModifiedOptions()
    if isinstance(options, ModifiedOptions):
        return options
    return ModifiedOptions.model_validate(deep_merge(ModifiedOptions().model_dump(), options))
