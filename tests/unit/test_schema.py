"""Content model structure validation tests."""

from contentkit.domain.entities import ContentField, FieldOption, FieldValidation, ModelSettings
from contentkit.domain.schema import validate_model_fields


def messages(errors) -> list[str]:
    return [e.message for e in errors]


def test_valid_fields() -> None:
    fields = [
        ContentField(name="title", type="text"),
        ContentField(name="author", type="reference", referenceTo="authors"),
        ContentField(name="size", type="select", options=[FieldOption(label="S", value="s")]),
    ]
    assert validate_model_fields(fields) == []


def test_empty_field_list() -> None:
    assert messages(validate_model_fields([])) == ["At least one field is required"]


def test_duplicate_reported_once_per_name() -> None:
    fields = [
        ContentField(name="title", type="text"),
        ContentField(name="title", type="text"),
        ContentField(name="title", type="number"),
    ]
    assert messages(validate_model_fields(fields)) == ["Duplicate field name: title"]


def test_reference_requires_target() -> None:
    errors = validate_model_fields([ContentField(name="author", type="reference")])
    assert messages(errors) == ["Reference field 'author' must specify referenceTo"]
    assert errors[0].code == "validation"
    assert errors[0].field == "author"


def test_select_and_multiselect_require_options() -> None:
    fields = [
        ContentField(name="size", type="select"),
        ContentField(name="tags", type="multiselect", options=[]),
    ]
    assert messages(validate_model_fields(fields)) == [
        "Select field 'size' must have options",
        "Select field 'tags' must have options",
    ]


def test_all_errors_aggregated() -> None:
    fields = [
        ContentField(name="a", type="text"),
        ContentField(name="a", type="text"),
        ContentField(name="ref", type="reference"),
        ContentField(name="sel", type="select"),
    ]
    assert len(validate_model_fields(fields)) == 3


def test_array_of_references_requires_target() -> None:
    fields = [ContentField(name="related", type="array", arrayOf="reference")]
    assert messages(validate_model_fields(fields)) == [
        "Array field 'related' of references must specify arrayReferenceTo"
    ]


def test_invalid_pattern() -> None:
    fields = [ContentField(name="code", type="text", validation=FieldValidation(pattern="[a-"))]
    assert messages(validate_model_fields(fields)) == ["Field 'code' has an invalid pattern"]


def test_slug_field_must_exist() -> None:
    fields = [ContentField(name="title", type="text")]
    assert validate_model_fields(fields, ModelSettings(slugField="title")) == []
    assert messages(validate_model_fields(fields, ModelSettings(slugField="name"))) == [
        "Slug field 'name' is not a field of this model"
    ]
