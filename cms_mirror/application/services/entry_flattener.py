"""
Aplanado de entries del CMS a rows relacionales.

Reglas:
- link (`{"sys": {"id": ...}}`) -> id referenciado
- lista -> array de elementos reducidos con la misma regla
- cualquier otro valor pasa tal cual; objetos JSON se envuelven en `Json`
  para que psycopg los mande como json

No se valida contra los tipos declarados del model: un valor incompatible
lo rechaza PostgreSQL al insertar.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from psycopg.types.json import Json

from cms_mirror.application.services.schema_synthesizer import PRIMARY_KEY_COLUMN
from cms_mirror.application.services.type_mapper import is_json_column, is_json_element
from cms_mirror.domain.entities.content_model import ContentModel, Entry, FieldDefinition
from cms_mirror.domain.entities.field_value import (
    FieldValue,
    ListValue,
    ReferenceValue,
    ScalarValue,
    plain,
    to_field_value,
)
from cms_mirror.shared.exceptions.domain import RowInsertError


@dataclass(frozen=True)
class FlatRow:
    """Row listo para INSERT: `columns` y `values` tienen el mismo largo y orden."""

    table: str
    columns: list[str]
    values: list[Any]

    @property
    def id(self) -> Any:
        return self.values[0]


def _as_json_if_object(value: Any) -> Any:
    if isinstance(value, dict):
        return Json(value)
    return value


def adapt_value(value: FieldValue, field: Optional[FieldDefinition]) -> Any:
    """Convierte un FieldValue al valor que recibe el driver."""
    if isinstance(value, ListValue):
        items = [plain(item) for item in value.items]
        if field is not None and is_json_column(field):
            return Json(items)
        if field is not None and is_json_element(field):
            return [Json(item) for item in items]
        return [_as_json_if_object(item) for item in items]

    if isinstance(value, ReferenceValue):
        return value.id

    if isinstance(value, ScalarValue):
        if field is not None and is_json_column(field) and value.value is not None:
            return Json(value.value)
        return _as_json_if_object(value.value)

    raise TypeError(f"FieldValue no soportado: {type(value).__name__}")


def flatten_entry(entry: Entry, model: Optional[ContentModel]) -> FlatRow:
    """
    Aplana una entry en un row de la tabla de su content model.

    Solo se incluyen los fields presentes en la entry, en su propio orden;
    los ausentes quedan NULL en la tabla.
    """
    if model is None:
        raise RowInsertError(
            f"La entry {entry.id} pertenece al model '{entry.content_type_id}', que no tiene tabla",
            row_id=entry.id,
            table=entry.content_type_id,
        )

    columns = [PRIMARY_KEY_COLUMN]
    values: list[Any] = [entry.id]

    for field_id, raw in entry.fields.items():
        columns.append(field_id)
        values.append(adapt_value(to_field_value(raw), model.get_field(field_id)))

    return FlatRow(table=entry.content_type_id, columns=columns, values=values)
