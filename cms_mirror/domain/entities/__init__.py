"""
Entidades del dominio.
"""
from cms_mirror.domain.entities.content_model import (
    Asset,
    ContentModel,
    Entry,
    FieldDefinition,
    FieldType,
)
from cms_mirror.domain.entities.field_value import (
    FieldValue,
    ListValue,
    ReferenceValue,
    ScalarValue,
    to_field_value,
)

__all__ = [
    "Asset",
    "ContentModel",
    "Entry",
    "FieldDefinition",
    "FieldType",
    "FieldValue",
    "ListValue",
    "ReferenceValue",
    "ScalarValue",
    "to_field_value",
]
