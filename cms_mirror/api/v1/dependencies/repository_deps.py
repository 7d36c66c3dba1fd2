"""
Dependencias para inyección de repositorios.
"""
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncConnection

from cms_mirror.infrastructure.database.session import get_db
from cms_mirror.infrastructure.repositories.mirror_repository import MirrorRepository


async def get_mirror_repository(
    conn: AsyncConnection = Depends(get_db)
) -> MirrorRepository:
    """
    Dependencia para obtener el repositorio de lectura del mirror.

    Args:
        conn: Conexión async a la base del mirror

    Returns:
        MirrorRepository: Instancia del repositorio
    """
    return MirrorRepository(conn)
