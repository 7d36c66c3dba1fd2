"""
Casos de uso del API de lectura: reconstruye documentos con forma CMS a
partir de las tablas del mirror y sirve los bytes de los assets.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from loguru import logger

from cms_mirror.application.dto.mirror_dto import (
    AssetDTO,
    AssetFieldsDTO,
    AssetFileDTO,
    EntryDTO,
    EntrySysDTO,
    IncludesDTO,
    LinkDTO,
    MirrorDocumentListDTO,
    SysIdDTO,
)
from cms_mirror.application.services.schema_synthesizer import PRIMARY_KEY_COLUMN
from cms_mirror.infrastructure.repositories.mirror_repository import AssetRow, MirrorRepository
from cms_mirror.shared.exceptions.domain import AssetNotFound

DEFAULT_MIME_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class AssetFile:
    content_type: str
    data: bytes


def asset_url(host: str, asset_id: str) -> str:
    """URL relativa al protocolo, calificada con el host del request."""
    return f"//{host}/asset/{asset_id}"


def entry_document(table_name: str, row: Dict[str, Any]) -> EntryDTO:
    return EntryDTO(
        sys=EntrySysDTO(
            id=row[PRIMARY_KEY_COLUMN],
            contentType=LinkDTO(sys=SysIdDTO(id=table_name)),
        ),
        entry_fields=dict(row),
    )


def asset_document(asset: AssetRow, host: str) -> AssetDTO:
    return AssetDTO(
        sys=SysIdDTO(id=asset.id),
        asset_fields=AssetFieldsDTO(
            title=asset.title,
            file=AssetFileDTO(
                url=asset_url(host, asset.id),
                fileName=asset.name,
                contentType=asset.type,
            ),
        ),
    )


def build_document_list(
    tables: Iterable[Tuple[str, List[Dict[str, Any]]]],
    assets: Iterable[AssetRow],
    host: str,
) -> MirrorDocumentListDTO:
    """Función pura: mismos rows producen siempre el mismo documento."""
    items = [entry_document(table_name, row) for table_name, rows in tables for row in rows]
    return MirrorDocumentListDTO(
        items=items,
        includes=IncludesDTO(Asset=[asset_document(a, host) for a in assets]),
    )


class MirrorUseCases:
    """Casos de uso de lectura del mirror."""

    def __init__(self, repository: MirrorRepository):
        self.repository = repository

    async def list_documents(self, host: str) -> MirrorDocumentListDTO:
        """
        Lista todas las entries de todas las tablas derivadas y, aparte,
        los assets como `includes.Asset` con URL en lugar de bytes.
        """
        tables = []
        for table_name in await self.repository.list_content_tables():
            tables.append((table_name, await self.repository.fetch_rows(table_name)))

        assets = await self.repository.fetch_assets()
        document = build_document_list(tables, assets, host)
        logger.debug(f"Mirror: {len(document.items)} entries de {len(tables)} tablas, {len(assets)} assets")
        return document

    async def get_asset(self, asset_id: str) -> AssetFile:
        """
        Bytes y MIME type de un asset.

        Raises:
            AssetNotFound: si no existe un asset con ese id
        """
        asset: Optional[AssetRow] = await self.repository.get_asset(asset_id)
        if asset is None:
            raise AssetNotFound(asset_id)
        return AssetFile(content_type=asset.type or DEFAULT_MIME_TYPE, data=asset.data or b"")
