"""
Engine async del API de lectura.

Es independiente de la conexión del import (corren en procesos distintos).
Nunca se lee un mirror a medias, pero mientras corre un import:
- un `GET /` que toca una tabla ya recreada queda bloqueado por el lock del
  DROP hasta el commit, es decir durante todo el import (fetches HTTP y
  descargas de assets incluidos)
- si la tabla que esperaba no existe en el mirror nuevo (model eliminado),
  la lectura bloqueada falla al liberarse el lock y responde 500
"""
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine

from cms_mirror.core.config import settings


def _create_engine_args(database_url: str) -> dict:
    """
    Construye los argumentos del engine segun el tipo de base de datos.
    PostgreSQL usa pool de conexiones, SQLite no lo soporta.
    """
    args = {
        "echo": settings.DEBUG,
    }

    if database_url.startswith("postgresql"):
        args.update({
            "pool_size": settings.DB_POOL_SIZE,
            "max_overflow": settings.DB_MAX_OVERFLOW,
            "pool_pre_ping": True,  # Verifica conexion antes de usar
        })

    return args


def create_engine(database_url: str) -> AsyncEngine:
    return create_async_engine(database_url, **_create_engine_args(database_url))


# Engine de base de datos (el driver se carga recien al primer connect)
engine = create_engine(settings.effective_database_url)


async def get_db() -> AsyncGenerator[AsyncConnection, None]:
    """
    Generador de conexiones de solo lectura.
    Para usar como dependencia en FastAPI.
    """
    async with engine.connect() as conn:
        yield conn


async def close_db() -> None:
    """Cierra las conexiones de la base de datos."""
    await engine.dispose()
