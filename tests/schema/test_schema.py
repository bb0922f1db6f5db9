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
"""Tests for the in-memory Schema: definitions, path introspection, hooks."""

from datetime import datetime
from typing import Any

import pytest

from modstamp.kernel.exceptions import ConfigurationException, SchemaDefinitionError
from modstamp.schema import FieldSpec, Reference, Schema, SchemaPort


@pytest.fixture
def schema() -> Schema:
    return Schema(
        {
            "username": str,
            "name": {"first": {"type": str, "modified": True}, "last": str},
            "emails": [str],
            "tags": {"type": [str], "default": list},
            "settings": {},
        }
    )


class TestDefinition:
    def test_leaves_become_dotted_paths(self, schema):
        assert schema.path_names() == ["username", "name.first", "name.last", "emails", "tags", "settings"]

    def test_field_dict_keys_become_options(self, schema):
        assert schema.path("name.first").type is str
        assert schema.path_options("name.first") == {"modified": True}

    def test_arrays(self, schema):
        emails = schema.path("emails")
        assert emails.is_array
        assert emails.item is str
        assert schema.path("tags").is_array
        assert schema.path_options("tags") == {"default": list}

    def test_empty_mapping_is_a_mixed_path(self, schema):
        assert schema.path("settings").type is dict

    def test_nested_schema_array(self):
        nickname = Schema({"name": str})
        schema = Schema({"nicknames": [nickname]})
        assert schema.path("nicknames").item is nickname

    def test_embedded_schema_is_flattened(self):
        address = Schema({"city": {"type": str, "modified": True}})
        schema = Schema({"address": address})
        assert schema.path_names() == ["address.city"]
        assert schema.path_options("address.city") == {"modified": True}
        assert schema.path_options("address.city") is not address.path_options("city")

    def test_unknown_path_options(self, schema):
        assert schema.path("missing") is None
        assert schema.path_options("missing") is None

    def test_satisfies_schema_port(self, schema):
        assert isinstance(schema, SchemaPort)


class TestPathType:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("username", "real"),
            ("name.first", "real"),
            ("name", "nested"),
            ("name.middle", "adhocOrUndefined"),
            ("modified.by", "adhocOrUndefined"),
        ],
    )
    def test_path_type(self, schema, name, expected):
        assert schema.path_type(name) == expected


class TestAddPath:
    def test_add_nested_path(self, schema):
        schema.add_path("modified.date", FieldSpec(type=datetime, options={"select": False}))
        assert schema.path_type("modified.date") == "real"
        assert schema.path_type("modified") == "nested"
        assert schema.path_options("modified.date") == {"select": False}

    def test_options_are_copied(self, schema):
        options: dict[str, Any] = {"index": True}
        schema.add_path("modified.date", FieldSpec(type=datetime, options=options))
        schema.path_options("modified.date")["index"] = False
        assert options == {"index": True}

    def test_reference_and_set_tracking(self, schema):
        schema.add_path("modified.by", FieldSpec(type=Reference("User"), mark_modified_on_set=True))
        spec = schema.path("modified.by")
        assert spec.is_reference
        assert spec.mark_modified_on_set

    def test_path_under_a_leaf_is_rejected(self, schema):
        with pytest.raises(SchemaDefinitionError) as exc_info:
            schema.add_path("username.date", FieldSpec(type=datetime))
        assert exc_info.value.path == "username.date"

    def test_leaf_over_nested_path_is_rejected(self, schema):
        with pytest.raises(SchemaDefinitionError):
            schema.add_path("name", FieldSpec(type=str))

    @pytest.mark.parametrize("name", ["", "modified.", ".date", "a..b"])
    def test_malformed_names_are_rejected(self, schema, name):
        with pytest.raises(SchemaDefinitionError):
            schema.add_path(name, FieldSpec(type=str))

    @pytest.mark.parametrize("expires", [0, -1, 1.5, True, "60"])
    def test_invalid_expiry_is_rejected(self, schema, expires):
        with pytest.raises(SchemaDefinitionError):
            schema.add_path("modified.date", FieldSpec(type=datetime, options={"expires": expires}))


class TestIndexes:
    def test_expiry_becomes_ttl_directive(self, schema):
        schema.add_path("modified.date", FieldSpec(type=datetime, options={"expires": 86400}))
        assert schema.indexes() == [("modified.date", {"expireAfterSeconds": 86400})]

    def test_no_expiry_no_indexes(self, schema):
        assert schema.indexes() == []


class TestHooks:
    def test_hooks_run_in_registration_order(self, schema):
        first, second = (lambda doc: None), (lambda doc: None)
        schema.pre("validate", first)
        schema.pre("validate", second)
        assert schema.hooks("validate") == (first, second)
        assert schema.hooks("save") == ()

    def test_unknown_event(self, schema):
        with pytest.raises(ConfigurationException) as exc_info:
            schema.pre("remove", lambda doc: None)
        assert exc_info.value.code == "SCHEMA_002"

    def test_plugin_receives_schema_and_options(self, schema):
        calls = []

        def plugin(target, options, **kwargs):
            calls.append((target, options, kwargs))

        assert schema.plugin(plugin, {"a": 1}, flag=True) is schema
        assert calls == [(schema, {"a": 1}, {"flag": True})]


class TestModel:
    def test_model_binds_schema_and_collection(self, schema):
        User = schema.model("User")
        assert User.__name__ == "User"
        assert User.schema is schema
        assert User.collection == "User"

    def test_each_model_gets_its_own_store(self, schema):
        assert schema.model("User").store is not schema.model("User").store
