"""
Endpoints del API de lectura del mirror.

Contrato HTTP del mirror:
- `GET /`            -> entries + includes.Asset con forma CMS
- `GET /asset/{id}`  -> bytes del asset con su MIME type, o 404 en texto plano
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import PlainTextResponse

from cms_mirror.api.v1.dependencies.use_case_deps import get_mirror_use_cases
from cms_mirror.application.dto.mirror_dto import MirrorDocumentListDTO
from cms_mirror.application.use_cases.mirror_use_cases import MirrorUseCases
from cms_mirror.shared.exceptions.domain import AssetNotFound

ASSET_NOT_FOUND_MESSAGE = "Asset not found!"


router = APIRouter(tags=["Mirror"])


@router.get(
    "/",
    response_model=MirrorDocumentListDTO,
    summary="Listar entries y assets del mirror con forma CMS"
)
async def list_documents(
    request: Request,
    use_cases: MirrorUseCases = Depends(get_mirror_use_cases),
) -> MirrorDocumentListDTO:
    """
    Reconstruye todas las entries desde las tablas derivadas.
    Las URLs de assets se califican con el host del request.
    """
    host = request.headers.get("host") or request.url.netloc
    return await use_cases.list_documents(host=host)


@router.get(
    "/asset/{asset_id}",
    summary="Obtener los bytes de un asset",
    responses={status.HTTP_404_NOT_FOUND: {"description": ASSET_NOT_FOUND_MESSAGE}},
)
async def get_asset(
    asset_id: str,
    use_cases: MirrorUseCases = Depends(get_mirror_use_cases),
) -> Response:
    try:
        asset = await use_cases.get_asset(asset_id)
    except AssetNotFound:
        return PlainTextResponse(ASSET_NOT_FOUND_MESSAGE, status_code=status.HTTP_404_NOT_FOUND)

    return Response(content=asset.data, media_type=asset.content_type)
