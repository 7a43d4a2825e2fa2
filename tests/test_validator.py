"""
Input validation against the users contract
"""

import pytest

from rpc.contracts.users import get_users_contract
from rpc.validator import Validator, input_fields_for


@pytest.fixture
def create_fields():
    return input_fields_for(get_users_contract(), "name", "email")


@pytest.fixture
def delete_fields():
    return input_fields_for(get_users_contract(), "id")


class TestCreateInput:

    def test_valid_input_is_cleaned(self, create_fields):
        result = Validator().validate({"name": "  Ada ", "email": "ada@x.com"}, create_fields)

        assert result.ok
        assert result.values == {"name": "Ada", "email": "ada@x.com"}

    @pytest.mark.parametrize("name", ["", "   ", "\t\n"])
    def test_blank_name_is_rejected(self, create_fields, name):
        result = Validator().validate({"name": name, "email": "b@x.com"}, create_fields)

        assert not result.ok
        assert [(e.field, e.message) for e in result.errors] == [("name", "Name is required")]

    @pytest.mark.parametrize("email", [
        "not-an-email",
        "a@b",
        "a@b.",
        "@x.com",
        "a@.com",
        "a b@x.com",
        "a@@x.com",
        " ada@x.com",
    ])
    def test_malformed_email_is_rejected(self, create_fields, email):
        result = Validator().validate({"name": "Ada", "email": email}, create_fields)

        assert not result.ok
        assert result.errors[0].field == "email"
        assert result.errors[0].message == "Invalid email address"

    @pytest.mark.parametrize("email", ["ada@x.com", "first.last+tag@mail.example.org"])
    def test_well_formed_email_is_accepted(self, create_fields, email):
        assert Validator().validate({"name": "Ada", "email": email}, create_fields).ok

    def test_missing_fields_are_all_reported(self, create_fields):
        result = Validator().validate({}, create_fields)

        assert {e.field for e in result.errors} == {"name", "email"}
        assert all(e.code == "required" for e in result.errors)

    def test_wrong_type_is_rejected(self, create_fields):
        result = Validator().validate({"name": 42, "email": "ada@x.com"}, create_fields)

        assert result.errors[0].code == "invalid_type"

    def test_unknown_field_is_rejected(self, create_fields):
        result = Validator().validate(
            {"name": "Ada", "email": "ada@x.com", "id": 7}, create_fields
        )

        assert [e.code for e in result.errors] == ["unknown_field"]

    def test_non_object_payload_is_rejected(self, create_fields):
        result = Validator().validate(["Ada", "ada@x.com"], create_fields)

        assert result.errors[0].field == "input"


class TestDeleteInput:

    def test_integer_id_is_accepted(self, delete_fields):
        result = Validator().validate({"id": 3}, delete_fields)

        assert result.ok
        assert result.values == {"id": 3}

    @pytest.mark.parametrize("value", ["3", 3.0, True, [3]])
    def test_non_integer_id_is_rejected(self, delete_fields, value):
        result = Validator().validate({"id": value}, delete_fields)

        assert result.errors[0].code == "invalid_type"

    def test_missing_id_is_required(self, delete_fields):
        result = Validator().validate(None, delete_fields)

        assert result.errors[0].code == "required"
