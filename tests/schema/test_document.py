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
"""Tests for in-memory Document: values, change tracking, validation and save."""

from uuid import uuid4

import pytest

from modstamp.kernel.exceptions import DocumentValidationError, PersistenceException, UndefinedPathError
from modstamp.schema import DocumentPort, FieldSpec, Schema


@pytest.fixture
def schema() -> Schema:
    schema = Schema(
        {
            "username": {"type": str, "required": True},
            "name": {"first": str, "last": str},
            "emails": [str],
            "role": {"type": str, "default": "member"},
        }
    )
    schema.add_path("audit.by", FieldSpec(type=str, mark_modified_on_set=True))
    return schema


@pytest.fixture
def User(schema):
    return schema.model("User")


@pytest.fixture
async def saved(User):
    return await User({"username": "ada", "name": {"first": "Ada", "last": "Lovelace"}}).save()


class TestValues:
    def test_construction_applies_defaults_and_data(self, User):
        user = User({"username": "ada", "name": {"first": "Ada"}})
        assert user.get("role") == "member"
        assert user["name.first"] == "Ada"
        assert user.get("name.last") is None
        assert user.get("name.last", "?") == "?"

    def test_callable_defaults_are_called(self, schema):
        schema.add_path("tags", FieldSpec(type=list, options={"default": list}))
        first, second = schema.model("User")(), schema.model("User")()
        first["tags"].append("x")
        assert second["tags"] == []

    def test_unknown_path_is_rejected(self, User):
        with pytest.raises(UndefinedPathError) as exc_info:
            User({"nickname": "ada"})

        assert exc_info.value.path == "nickname"
        assert exc_info.value.code == "VALIDATION_002"
        assert "'User'" in str(exc_info.value)

    def test_nested_mapping_assignment(self, User):
        user = User()
        user["name"] = {"first": "Ada", "last": "Byron"}
        assert user.to_dict()["name"] == {"first": "Ada", "last": "Byron"}

    def test_lists_are_copied_on_assignment(self, User):
        emails = ["ada@example.com"]
        user = User({"emails": emails})
        emails.append("other@example.com")
        assert user["emails"] == ["ada@example.com"]

    def test_to_dict_is_a_copy(self, User):
        user = User({"name": {"first": "Ada"}})
        user.to_dict()["name"]["first"] = "Grace"
        assert user["name.first"] == "Ada"

    def test_satisfies_document_port(self, User):
        assert isinstance(User(), DocumentPort)


class TestChangeTracking:
    def test_new_document(self, User):
        user = User({"username": "ada"})
        assert user.is_new
        assert user.is_modified("username")

    async def test_saved_document_is_clean(self, saved):
        assert not saved.is_new
        assert not saved.is_modified()
        assert saved.modified_paths() == []

    async def test_changed_value_is_modified(self, saved):
        saved["name.first"] = "Augusta"
        assert saved.is_modified()
        assert saved.is_modified("name.first")
        assert not saved.is_modified("name.last")
        assert not saved.is_modified("username")

    async def test_parent_and_child_overlap(self, saved):
        saved["name.first"] = "Augusta"
        assert saved.is_modified("name")

        saved.mark_modified("emails")
        assert saved.is_modified("emails")

    async def test_replaced_parent_marks_children(self, saved):
        saved.mark_modified("name")
        assert saved.is_modified("name.first")

    async def test_equal_value_is_not_a_change(self, saved):
        saved["username"] = "ada"
        assert not saved.is_modified()

    async def test_set_tracked_path_counts_every_assignment(self, saved):
        saved["audit.by"] = "grace"
        await saved.save()

        saved["audit.by"] = "grace"
        assert saved.is_modified("audit.by")

    async def test_in_place_mutation_is_invisible(self, saved):
        saved["emails"] = ["ada@example.com"]
        await saved.save()

        saved.get("emails").append("more@example.com")
        assert not saved.is_modified()


class TestArrayElementPaths:
    @pytest.fixture
    async def member(self):
        schema = Schema({"username": str, "nicknames": [Schema({"name": str})], "emails": [str]})
        Member = schema.model("Member")
        return await Member(
            {"username": "ada", "nicknames": [{"name": "Countess"}], "emails": ["ada@example.com"]}
        ).save()

    async def test_get_by_index(self, member):
        assert member["nicknames.0.name"] == "Countess"
        assert member["emails.0"] == "ada@example.com"
        assert member.get("nicknames.3.name") is None

    async def test_element_field_assignment_marks_array(self, member):
        member["nicknames.0.name"] = "Enchantress"

        assert member["nicknames"] == [{"name": "Enchantress"}]
        assert member.modified_paths() == ["nicknames"]
        assert member.is_modified("nicknames.0.name")

    async def test_scalar_element_assignment(self, member):
        member["emails.0"] = "lovelace@example.com"
        assert member.is_modified("emails")

    async def test_equal_element_value_is_not_a_change(self, member):
        member["nicknames.0.name"] = "Countess"
        assert not member.is_modified()

    async def test_mark_element_path_marks_array(self, member):
        member.mark_modified("nicknames.0.name")
        assert member.modified_paths() == ["nicknames"]

    async def test_missing_element_is_rejected(self, member):
        with pytest.raises(UndefinedPathError, match="has no element 2"):
            member["nicknames.2.name"] = "Enchantress"

    async def test_undefined_element_field_is_rejected(self, member):
        with pytest.raises(UndefinedPathError):
            member["nicknames.0.title"] = "Countess"
        assert not member.is_modified()


class TestValidation:
    def test_required_path(self, User):
        user = User()
        with pytest.raises(DocumentValidationError) as exc_info:
            user.validate()
        assert exc_info.value.errors == {"username": "Path `username` is required."}
        assert user.errors == {"username": "Path `username` is required."}

    def test_computed_requirement(self, schema):
        schema.path("name.last").options["required"] = lambda doc: doc.get("name.first") is not None
        User = schema.model("User")

        User({"username": "ada"}).validate()
        with pytest.raises(DocumentValidationError) as exc_info:
            User({"username": "ada", "name": {"first": "Ada"}}).validate()
        assert set(exc_info.value.errors) == {"name.last"}

    def test_hook_invalidation_wins_over_required_message(self, schema):
        schema.pre("validate", lambda doc: doc.invalidate("username", "taken", doc.get("username")))
        user = schema.model("User")()

        with pytest.raises(DocumentValidationError) as exc_info:
            user.validate()
        assert exc_info.value.errors == {"username": "taken"}

    def test_errors_are_cleared_on_each_run(self, User):
        user = User()
        with pytest.raises(DocumentValidationError):
            user.validate()
        user["username"] = "ada"
        user.validate()
        assert user.errors == {}


class TestSave:
    async def test_insert_then_find(self, User):
        user = await User({"username": "ada"}).save()
        found = await User.find_by_id(user.id)
        assert found.to_dict() == user.to_dict()
        assert found.id == user.id
        assert not found.is_new

    async def test_find_missing(self, User):
        assert await User.find_by_id(uuid4()) is None

    async def test_update_replaces_record(self, User, saved):
        saved["name.last"] = "King"
        await saved.save()
        found = await User.find_by_id(saved.id)
        assert found["name.last"] == "King"
        assert User.store.count("User") == 1

    async def test_hooks_run_before_write(self, schema):
        order = []
        schema.pre("validate", lambda doc: order.append("validate"))
        schema.pre("save", lambda doc: order.append("save"))
        await schema.model("User")({"username": "ada"}).save()
        assert order == ["validate", "save"]

    async def test_save_hook_invalidation_aborts_write(self, schema):
        schema.pre("save", lambda doc: doc.invalidate("username", "frozen"))
        User = schema.model("User")
        user = User({"username": "ada"})

        with pytest.raises(DocumentValidationError):
            await user.save()
        assert user.is_new
        assert user.is_modified("username")
        assert User.store.count("User") == 0

    async def test_store_errors_propagate(self, User):
        user_id = uuid4()
        await User({"username": "ada"}, id=user_id).save()
        with pytest.raises(PersistenceException) as exc_info:
            await User({"username": "grace"}, id=user_id).save()
        assert exc_info.value.code == "STORE_001"
