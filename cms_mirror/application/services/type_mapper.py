"""
Mapeo de tipos de field del CMS a tipos de columna PostgreSQL.

Función pura y total sobre FieldType: cada tipo tiene exactamente una
columna y un tipo fuera del enum falla con UnknownFieldType.
"""
from __future__ import annotations

from typing import Optional

from cms_mirror.domain.entities.content_model import FieldDefinition, FieldType
from cms_mirror.shared.exceptions.domain import UnknownFieldType

COLUMN_TYPES: dict[FieldType, str] = {
    FieldType.ARRAY: "JSON",
    FieldType.BOOLEAN: "BOOLEAN",
    FieldType.DATE: "DATE",
    FieldType.INTEGER: "INTEGER",
    FieldType.LINK: "TEXT",
    FieldType.NUMBER: "REAL",
    FieldType.OBJECT: "JSON",
    FieldType.RICH_TEXT: "TEXT",
    FieldType.SYMBOL: "TEXT",
    FieldType.TEXT: "TEXT",
}

JSON_COLUMN = "JSON"


def _mapped(field_type: object, *, model_id: Optional[str], field_id: str) -> str:
    if not isinstance(field_type, FieldType) or field_type not in COLUMN_TYPES:
        raise UnknownFieldType(field_type, model_id=model_id, field_id=field_id)
    return COLUMN_TYPES[field_type]


def column_type(field: FieldDefinition, model_id: Optional[str] = None) -> str:
    """
    Tipo de columna para un field.

    - Array con item_type: tipo del elemento como array (`TEXT[]`, `JSON[]`, ...)
    - Array sin item_type: JSON genérico
    """
    if field.type is FieldType.ARRAY and field.item_type is not None:
        if field.item_type is FieldType.ARRAY:
            raise UnknownFieldType("Array<Array>", model_id=model_id, field_id=field.id)
        return _mapped(field.item_type, model_id=model_id, field_id=field.id) + "[]"
    return _mapped(field.type, model_id=model_id, field_id=field.id)


def is_json_column(field: FieldDefinition) -> bool:
    """True si la columna del field es JSON escalar (no array de JSON)."""
    if field.type is FieldType.ARRAY:
        return field.item_type is None
    return COLUMN_TYPES.get(field.type) == JSON_COLUMN


def is_json_element(field: FieldDefinition) -> bool:
    """True si el field es un array cuyos elementos son JSON (`JSON[]`)."""
    return field.type is FieldType.ARRAY and field.item_type is FieldType.OBJECT
