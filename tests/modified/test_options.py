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
"""Tests for ModifiedOptions and how caller options merge over the defaults."""

import pytest
from pydantic import ValidationError

from modstamp.modified import ActorOptions, DateOptions, ModifiedOptions, resolve_options


class TestDefaults:
    def test_default_options(self):
        options = resolve_options()
        assert options.option_key == "modified"
        assert options.date == DateOptions(path="modified.date", options={}, expires=None)
        assert options.by == ActorOptions(path="modified.by", ref=None, options={})
        assert options.paths is None

    def test_options_are_frozen(self):
        with pytest.raises(ValidationError):
            ModifiedOptions().option_key = "other"


class TestResolveOptions:
    def test_instance_is_used_as_is(self):
        options = ModifiedOptions(option_key="audited")
        assert resolve_options(options) is options

    def test_nested_mapping_keeps_sibling_defaults(self):
        options = resolve_options({"by": {"ref": "User"}})
        assert options.by.ref == "User"
        assert options.by.path == "modified.by"
        assert options.date.path == "modified.date"

    def test_caller_wins_on_leaves(self):
        options = resolve_options({"date": {"path": "modifiedDate", "options": {"select": False}}})
        assert options.date.path == "modifiedDate"
        assert options.date.options == {"select": False}

    @pytest.mark.parametrize("path", [None, ""])
    def test_actor_can_be_disabled(self, path):
        options = resolve_options({"by": {"path": path}})
        assert not options.by.enabled

    def test_single_path_is_wrapped(self):
        assert resolve_options({"paths": "name.first"}).paths == ("name.first",)

    def test_path_sequence(self):
        assert resolve_options({"paths": ["name.first", "emails"]}).paths == ("name.first", "emails")

    @pytest.mark.parametrize("expires", [0, -10])
    def test_expiry_must_be_positive(self, expires):
        with pytest.raises(ValidationError):
            resolve_options({"date": {"expires": expires}})

    def test_unknown_shapes_are_rejected(self):
        with pytest.raises(ValidationError):
            resolve_options({"paths": 42})
