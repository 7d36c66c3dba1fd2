"""
DTOs del API de lectura.

Reproducen la forma de las respuestas de la Delivery API del CMS
(`sys`, `sys.contentType.sys`, `fields`, `includes.Asset`) para que los
clientes escritos contra el CMS funcionen sin cambios contra el mirror.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SysIdDTO(BaseModel):
    """Identidad `{"id": ...}`."""

    id: str


class LinkDTO(BaseModel):
    """Referencia `{"sys": {"id": ...}}`."""

    sys: SysIdDTO


class EntrySysDTO(BaseModel):
    id: str
    contentType: LinkDTO


class EntryDTO(BaseModel):
    """Entry reconstruida desde un row: `fields` son las columnas tal cual."""

    model_config = ConfigDict(populate_by_name=True)

    sys: EntrySysDTO
    entry_fields: Dict[str, Any] = Field(default_factory=dict, alias="fields")


class AssetFileDTO(BaseModel):
    url: str
    fileName: Optional[str] = None
    contentType: Optional[str] = None


class AssetFieldsDTO(BaseModel):
    title: Optional[str] = None
    file: AssetFileDTO


class AssetDTO(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    sys: SysIdDTO
    asset_fields: AssetFieldsDTO = Field(alias="fields")


class IncludesDTO(BaseModel):
    Asset: List[AssetDTO] = Field(default_factory=list)


class MirrorDocumentListDTO(BaseModel):
    """Respuesta de `GET /`."""

    items: List[EntryDTO] = Field(default_factory=list)
    includes: IncludesDTO = Field(default_factory=IncludesDTO)
