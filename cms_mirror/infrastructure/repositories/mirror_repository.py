"""
Repositorio de solo lectura sobre las tablas del mirror.

Las tablas se crean dinámicamente en cada import, por lo que no hay modelos
ORM: se listan con el inspector de SQLAlchemy y se consultan como tablas
ligeras (`table()`), que citan los identificadores cuando hace falta.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from sqlalchemy import column, inspect, literal_column, select, table
from sqlalchemy.ext.asyncio import AsyncConnection

from cms_mirror.application.services.schema_synthesizer import ASSET_TABLE_NAME


@dataclass(frozen=True)
class AssetRow:
    """Row de la tabla asset. `data` solo se carga al pedir un asset puntual."""

    id: str
    type: Optional[str]
    name: Optional[str]
    title: Optional[str] = None
    data: Optional[bytes] = None


_asset = table(
    ASSET_TABLE_NAME,
    column("id"),
    column("type"),
    column("name"),
    column("title"),
    column("data"),
)


class MirrorRepository:
    """
    Consultas del API de lectura sobre una conexión async.
    """

    def __init__(self, conn: AsyncConnection):
        self.conn = conn

    async def _table_names(self) -> List[str]:
        return await self.conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())

    async def list_content_tables(self) -> List[str]:
        """Tablas derivadas de content models (todas menos `asset`), ordenadas."""
        return sorted(name for name in await self._table_names() if name != ASSET_TABLE_NAME)

    async def fetch_rows(self, table_name: str) -> List[Dict[str, Any]]:
        """Todas las filas de una tabla, con sus columnas tal cual."""
        query = select(literal_column("*")).select_from(table(table_name))
        result = await self.conn.execute(query)
        return [dict(row) for row in result.mappings().all()]

    async def fetch_assets(self) -> List[AssetRow]:
        """Metadata de todos los assets (sin bytes)."""
        if ASSET_TABLE_NAME not in await self._table_names():
            return []

        query = select(_asset.c.id, _asset.c.type, _asset.c.name, _asset.c.title).order_by(_asset.c.id)
        result = await self.conn.execute(query)
        return [AssetRow(**row) for row in result.mappings().all()]

    async def get_asset(self, asset_id: str) -> Optional[AssetRow]:
        """Asset completo (con bytes) o None si no existe."""
        if ASSET_TABLE_NAME not in await self._table_names():
            return None

        query = select(_asset).where(_asset.c.id == asset_id)
        result = await self.conn.execute(query)
        row = result.mappings().first()
        return AssetRow(**row) if row else None
