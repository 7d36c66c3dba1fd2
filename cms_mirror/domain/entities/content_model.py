"""
Entidades del CMS origen: content models, entries y assets.

Se construyen una sola vez a partir del JSON de las páginas del CMS
(`from_source`) y no hacen I/O.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional

from cms_mirror.shared.exceptions.domain import SourceFetchError, UnknownFieldType


class FieldType(str, Enum):
    """Tipos de field que puede declarar un content model."""

    ARRAY = "Array"
    BOOLEAN = "Boolean"
    DATE = "Date"
    INTEGER = "Integer"
    LINK = "Link"
    NUMBER = "Number"
    OBJECT = "Object"
    RICH_TEXT = "RichText"
    SYMBOL = "Symbol"
    TEXT = "Text"

    @classmethod
    def parse(cls, raw: Any, *, model_id: Optional[str], field_id: str) -> "FieldType":
        try:
            return cls(raw)
        except ValueError:
            raise UnknownFieldType(raw, model_id=model_id, field_id=field_id) from None


def _sys_id(raw: Mapping[str, Any], resource: str) -> str:
    sys = raw.get("sys") or {}
    item_id = sys.get("id") if isinstance(sys, Mapping) else None
    if not isinstance(item_id, str) or not item_id:
        raise SourceFetchError(f"El CMS devolvió un {resource} sin 'sys.id'", resource=resource)
    return item_id


@dataclass(frozen=True)
class FieldDefinition:
    """
    Field declarado en un content model.

    - item_type: solo aplica si type es ARRAY; define el tipo de cada elemento.
    """

    id: str
    type: FieldType
    item_type: Optional[FieldType] = None

    @classmethod
    def from_source(cls, raw: Mapping[str, Any], *, model_id: str) -> "FieldDefinition":
        field_id = raw.get("id")
        if not isinstance(field_id, str) or not field_id:
            raise SourceFetchError(f"El model {model_id} tiene un field sin 'id'", resource="content_types")

        field_type = FieldType.parse(raw.get("type"), model_id=model_id, field_id=field_id)
        item_type = None
        items = raw.get("items") or {}
        if field_type is FieldType.ARRAY and items.get("type"):
            item_type = FieldType.parse(items["type"], model_id=model_id, field_id=field_id)
            if item_type is FieldType.ARRAY:
                # Arrays de arrays no existen en el CMS; no hay columna razonable.
                raise UnknownFieldType("Array<Array>", model_id=model_id, field_id=field_id)

        return cls(id=field_id, type=field_type, item_type=item_type)


@dataclass(frozen=True)
class ContentModel:
    """Content model: su id da nombre a la tabla y sus fields a las columnas."""

    id: str
    fields: tuple[FieldDefinition, ...] = ()

    @classmethod
    def from_source(cls, raw: Mapping[str, Any]) -> "ContentModel":
        model_id = _sys_id(raw, "content_types")
        return cls(
            id=model_id,
            fields=tuple(
                FieldDefinition.from_source(f, model_id=model_id) for f in raw.get("fields") or []
            ),
        )

    def get_field(self, field_id: str) -> Optional[FieldDefinition]:
        for definition in self.fields:
            if definition.id == field_id:
                return definition
        return None


@dataclass(frozen=True)
class Entry:
    """Entry del CMS. `fields` se guarda tal cual vino (sin validar tipos)."""

    id: str
    content_type_id: str
    fields: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_source(cls, raw: Mapping[str, Any]) -> "Entry":
        entry_id = _sys_id(raw, "entries")
        content_type = (raw.get("sys") or {}).get("contentType") or {}
        content_type_id = (content_type.get("sys") or {}).get("id")
        if not content_type_id:
            raise SourceFetchError(
                f"La entry {entry_id} no declara 'sys.contentType.sys.id'", resource="entries"
            )
        return cls(id=entry_id, content_type_id=content_type_id, fields=dict(raw.get("fields") or {}))


@dataclass(frozen=True)
class Asset:
    """Metadata de un asset. Los bytes se descargan aparte desde `url`."""

    id: str
    content_type: Optional[str]
    name: Optional[str]
    url: str
    title: Optional[str] = None

    @classmethod
    def from_source(cls, raw: Mapping[str, Any]) -> "Asset":
        asset_id = _sys_id(raw, "assets")
        fields = raw.get("fields") or {}
        file_info = fields.get("file") or {}
        url = file_info.get("url")
        if not url:
            raise SourceFetchError(f"El asset {asset_id} no tiene 'fields.file.url'", resource="assets")
        return cls(
            id=asset_id,
            content_type=file_info.get("contentType"),
            name=file_info.get("fileName"),
            url=url,
            title=fields.get("title"),
        )

    @property
    def download_url(self) -> str:
        """El CMS entrega URLs sin esquema (`//host/path`)."""
        if self.url.startswith("//"):
            return f"https:{self.url}"
        return self.url
