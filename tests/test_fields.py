"""
Testes de Fields, validadores, ações e colunas.
"""

from __future__ import annotations

import pytest

from adminkit.admin import (
    Action,
    BooleanField,
    Column,
    EmailField,
    IDField,
    NumberField,
    RelationshipField,
    RequestContext,
    Resource,
    SelectField,
    TextField,
    TextareaField,
    default_actions,
    validate_resource_data,
)
from adminkit.admin.fields import is_safe_identifier
from adminkit.admin.validators import (
    EMAIL_MESSAGE,
    REQUIRED_MESSAGE,
    ChoiceValidator,
    FieldValidationError,
    MaxLengthValidator,
    MinValueValidator,
    RegexValidator,
    RequiredValidator,
)


class ContactResource(Resource):
    title = "Contacts"
    slug = "contacts"

    def get_fields(self):
        return [
            IDField(),
            TextField("name", required=True).add_validator(MaxLengthValidator(5)),
            EmailField("email"),
            NumberField("age", min_value=0),
            SelectField("kind", options=[{"label": "A", "value": "a"}, {"label": "B", "value": "b"}]),
        ]


# =========================================================================
# Fields
# =========================================================================

class TestFields:
    """Testes de metadados dos Fields."""

    def test_label_defaults_to_name(self):
        assert TextField("title").label == "title"
        assert TextField("title", "Title").label == "Title"

    def test_id_field_is_readonly(self):
        field = IDField()
        assert field.name == "id"
        assert field.readonly is True
        assert field.type == "number"

    def test_to_dict_includes_type_extras(self):
        data = TextareaField("remark", rows=6).to_dict()
        assert data["type"] == "textarea"
        assert data["rows"] == 6
        assert data["required"] is False

    def test_relationship_field_to_dict(self):
        data = RelationshipField("category_id", related_resource="categories").to_dict()
        assert data["type"] == "relationship"
        assert data["related_resource"] == "categories"
        assert data["display_field"] == "name"

    def test_boolean_default(self):
        assert BooleanField("active").default is False

    def test_safe_identifiers(self):
        assert is_safe_identifier("crud_items")
        assert is_safe_identifier("_private1")
        assert not is_safe_identifier("1abc")
        assert not is_safe_identifier("name; --")
        assert not is_safe_identifier("")


# =========================================================================
# Validadores
# =========================================================================

class TestValidators:
    """Testes dos validadores individuais."""

    def test_required_accepts_zero_and_false(self):
        validator = RequiredValidator()
        assert validator(0) == 0
        assert validator(False) is False

    @pytest.mark.parametrize("value", [None, "", "   ", []])
    def test_required_rejects_empty(self, value):
        with pytest.raises(FieldValidationError):
            RequiredValidator()(value)

    def test_regex(self):
        validator = RegexValidator(r"^\d+$")
        assert validator("123") == "123"
        with pytest.raises(FieldValidationError):
            validator("12a")

    def test_min_value(self):
        with pytest.raises(FieldValidationError):
            MinValueValidator(1)(0)
        assert MinValueValidator(1)("3") == "3"

    def test_choice(self):
        validator = ChoiceValidator(["a", "b"])
        assert validator("a") == "a"
        with pytest.raises(FieldValidationError):
            validator("c")


class TestValidateResourceData:
    """Testes de validate_resource_data."""

    def test_valid_payload(self):
        data = {"name": "Ana", "email": "ana@example.com", "age": 3, "kind": "a"}
        assert validate_resource_data(ContactResource(), data) == {}

    def test_missing_required_field(self):
        errors = validate_resource_data(ContactResource(), {"email": "a@b"})
        assert errors == {"name": [REQUIRED_MESSAGE]}

    def test_blank_required_field(self):
        errors = validate_resource_data(ContactResource(), {"name": "   "})
        assert errors["name"] == [REQUIRED_MESSAGE]

    def test_email_without_at(self):
        errors = validate_resource_data(ContactResource(), {"name": "Ana", "email": "nope"})
        assert errors == {"email": [EMAIL_MESSAGE]}

    def test_empty_optional_email_is_valid(self):
        assert validate_resource_data(ContactResource(), {"name": "Ana", "email": ""}) == {}

    def test_field_validators_contribute(self):
        errors = validate_resource_data(
            ContactResource(),
            {"name": "Too long name", "age": -1, "kind": "z"},
        )
        assert set(errors) == {"name", "age", "kind"}


# =========================================================================
# Ações e colunas
# =========================================================================

class TestActions:
    """Testes de Action e das ações padrão."""

    def test_default_actions(self):
        names = [a.name for a in default_actions()]
        assert names == ["create", "edit", "delete", "view"]
        assert all(a.is_builtin for a in default_actions())

    def test_custom_action(self):
        action = Action("publish", "Publish", bulk=True, permission="posts.publish")
        data = action.to_dict()

        assert action.is_builtin is False
        assert data["name"] == "publish"
        assert data["bulk"] is True

    def test_visibility_callback(self):
        action = Action("secret", "Secret", visible=lambda ctx: ctx.user is not None)

        assert action.is_visible(RequestContext()) is False
        assert action.is_visible(RequestContext(user=object())) is True

    def test_resource_default_columns(self):
        columns = ContactResource().get_columns()
        assert [c.name for c in columns] == ["id", "name", "email", "age", "kind"]

    def test_column_to_dict(self):
        data = Column("status", "Status", badge_map={"on": "green"}).to_dict()
        assert data["name"] == "status"
        assert data["badge_map"] == {"on": "green"}


class TestResourceHelpers:
    """Testes dos helpers da classe Resource."""

    def test_get_field(self):
        resource = ContactResource()

        assert resource.get_field("email").type == "email"
        assert resource.get_field("nope") is None

    def test_form_fields_exclude_readonly(self):
        names = [f.name for f in ContactResource().get_form_fields()]
        assert names == ["name", "email", "age", "kind"]
