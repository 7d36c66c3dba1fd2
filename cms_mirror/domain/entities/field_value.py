"""
Valores de field de una entry, ya clasificados.

El JSON del CMS mezcla escalares, links (`{"sys": {"id": ...}}`) y listas de
ambos. Se clasifican una vez con `to_field_value` y el resto del pipeline
trabaja sobre estas variantes.

Objetos JSON anidados se guardan tal cual: solo se reducen links en el
nivel superior y como elementos directos de una lista.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union


@dataclass(frozen=True)
class ScalarValue:
    """String, número, bool, fecha u objeto JSON sin identidad de link."""

    value: Any


@dataclass(frozen=True)
class ReferenceValue:
    """Link a otra entry o asset; se persiste como el id referenciado."""

    id: str


@dataclass(frozen=True)
class ListValue:
    items: tuple[Union[ScalarValue, ReferenceValue], ...]


FieldValue = Union[ScalarValue, ReferenceValue, ListValue]


def reference_id(raw: Any) -> Optional[str]:
    """Retorna el id si `raw` tiene forma de link (`{"sys": {"id": str}}`)."""
    if not isinstance(raw, Mapping):
        return None
    sys = raw.get("sys")
    if not isinstance(sys, Mapping):
        return None
    ref_id = sys.get("id")
    return ref_id if isinstance(ref_id, str) else None


def _to_element(raw: Any) -> Union[ScalarValue, ReferenceValue]:
    ref_id = reference_id(raw)
    if ref_id is not None:
        return ReferenceValue(ref_id)
    return ScalarValue(raw)


def to_field_value(raw: Any) -> FieldValue:
    if isinstance(raw, (list, tuple)):
        return ListValue(tuple(_to_element(item) for item in raw))
    return _to_element(raw)


def plain(value: Union[ScalarValue, ReferenceValue]) -> Any:
    """Forma persistible de un elemento: el id si es link, el valor si no."""
    if isinstance(value, ReferenceValue):
        return value.id
    return value.value
