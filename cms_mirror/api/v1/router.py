"""
Router principal de la API v1.
Agrupa todos los endpoints de la version 1.
"""
from fastapi import APIRouter

from cms_mirror.api.v1.endpoints import mirror


# Sin prefijo: el contrato del mirror expone `/` y `/asset/{id}` en la raiz
api_router = APIRouter()

api_router.include_router(mirror.router)
