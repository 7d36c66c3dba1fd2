"""
Tests del mapeo de tipos de field a columnas.
"""
from __future__ import annotations

import pytest

from cms_mirror.application.services.type_mapper import (
    column_type,
    is_json_column,
    is_json_element,
)
from cms_mirror.domain.entities.content_model import FieldDefinition, FieldType
from cms_mirror.shared.exceptions.domain import UnknownFieldType


@pytest.mark.parametrize(
    ("field_type", "expected"),
    [
        (FieldType.ARRAY, "JSON"),
        (FieldType.BOOLEAN, "BOOLEAN"),
        (FieldType.DATE, "DATE"),
        (FieldType.INTEGER, "INTEGER"),
        (FieldType.LINK, "TEXT"),
        (FieldType.NUMBER, "REAL"),
        (FieldType.OBJECT, "JSON"),
        (FieldType.RICH_TEXT, "TEXT"),
        (FieldType.SYMBOL, "TEXT"),
        (FieldType.TEXT, "TEXT"),
    ],
)
def test_every_field_type_maps_to_one_column(field_type: FieldType, expected: str) -> None:
    assert column_type(FieldDefinition(id="f", type=field_type)) == expected


def test_mapping_is_total_over_field_type() -> None:
    for field_type in FieldType:
        assert column_type(FieldDefinition(id="f", type=field_type))


def test_typed_array_maps_to_array_of_item_column() -> None:
    tags = FieldDefinition(id="tags", type=FieldType.ARRAY, item_type=FieldType.SYMBOL)
    refs = FieldDefinition(id="refs", type=FieldType.ARRAY, item_type=FieldType.LINK)
    blocks = FieldDefinition(id="blocks", type=FieldType.ARRAY, item_type=FieldType.OBJECT)

    assert column_type(tags) == "TEXT[]"
    assert column_type(refs) == "TEXT[]"
    assert column_type(blocks) == "JSON[]"


def test_array_without_item_type_falls_back_to_json() -> None:
    assert column_type(FieldDefinition(id="any", type=FieldType.ARRAY)) == "JSON"


def test_unknown_type_fails_naming_model_and_field() -> None:
    field = FieldDefinition(id="where", type="Location")  # type: ignore[arg-type]

    with pytest.raises(UnknownFieldType) as exc_info:
        column_type(field, "Store")

    assert exc_info.value.details == {"model_id": "Store", "field_id": "where", "type": "Location"}


def test_array_of_arrays_is_rejected() -> None:
    field = FieldDefinition(id="matrix", type=FieldType.ARRAY, item_type=FieldType.ARRAY)

    with pytest.raises(UnknownFieldType):
        column_type(field, "Grid")


def test_json_column_helpers() -> None:
    assert is_json_column(FieldDefinition(id="meta", type=FieldType.OBJECT))
    assert is_json_column(FieldDefinition(id="any", type=FieldType.ARRAY))
    assert not is_json_column(FieldDefinition(id="tags", type=FieldType.ARRAY, item_type=FieldType.SYMBOL))
    assert not is_json_column(FieldDefinition(id="body", type=FieldType.RICH_TEXT))
    assert is_json_element(FieldDefinition(id="blocks", type=FieldType.ARRAY, item_type=FieldType.OBJECT))
