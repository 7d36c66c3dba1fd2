"""
Configuración de fixtures para pytest.
"""
from typing import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncConnection, create_async_engine


# URL de base de datos de prueba
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture(scope="function")
async def mirror_conn() -> AsyncGenerator[AsyncConnection, None]:
    """
    Conexión a una base en memoria para tests del repositorio de lectura.
    Cada test arma sus propias tablas sobre esta misma conexión.
    """
    engine = create_async_engine(TEST_DATABASE_URL, echo=False)

    async with engine.connect() as conn:
        yield conn

    await engine.dispose()
