"""
Manejadores de eventos de inicio y cierre del API de lectura.
"""
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable

from fastapi import FastAPI
from loguru import logger

from cms_mirror.core.config import settings
from cms_mirror.infrastructure.database.session import close_db


def startup_handler(app: FastAPI) -> Callable:
    """
    Manejador de eventos de inicio de la aplicacion.

    Args:
        app: Instancia de FastAPI

    Returns:
        Callable: Funcion asincrona de inicio
    """
    async def startup() -> None:
        """Configura logging y muestra la configuracion efectiva."""
        logger.info(f"Iniciando {settings.APP_NAME} v{settings.APP_VERSION}")
        logger.info(f"Entorno: {settings.ENVIRONMENT}")

        # El mirror vive en la misma base que escribe el import
        logger.info(
            f"Base del mirror: {settings.DATABASE_HOST}:{settings.DATABASE_PORT}/{settings.DATABASE_NAME}"
            if not settings.DATABASE_URL else "Base del mirror: DATABASE_URL"
        )

        logger.add(
            settings.LOG_FILE,
            rotation="500 MB",
            retention="10 days",
            level=settings.LOG_LEVEL
        )

        logger.success("Aplicacion iniciada correctamente")

    return startup


def shutdown_handler(app: FastAPI) -> Callable:
    """
    Manejador de eventos de cierre de la aplicacion.

    Args:
        app: Instancia de FastAPI

    Returns:
        Callable: Funcion asincrona de cierre
    """
    async def shutdown() -> None:
        """Libera el pool de conexiones del mirror."""
        logger.info("Cerrando aplicacion...")

        await close_db()
        logger.info("Conexiones de base de datos cerradas")

        logger.success("Aplicacion cerrada correctamente")

    return shutdown


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan de FastAPI armado con los manejadores de inicio y cierre."""
    await startup_handler(app)()
    try:
        yield
    finally:
        await shutdown_handler(app)()
