"""
Paginación por skip/limit sobre colecciones del CMS.
"""

from __future__ import annotations

from typing import Any, Optional

from loguru import logger

from cms_mirror.shared.exceptions.domain import SourceFetchError

from .types import CancelToken, FetchPage


def fetch_all(
    page_size: int,
    fetch_page: FetchPage,
    *,
    resource: str = "items",
    cancel_token: Optional[CancelToken] = None,
) -> list[dict[str, Any]]:
    """
    Trae una colección completa pidiendo páginas con offset creciente hasta
    que `skip + page_size >= total`.

    - El orden lo define el request al CMS (sys.createdAt), no se reordena aquí.
    - Una colección vacía (total=0) termina tras el primer request.
    - Los errores de `fetch_page` se propagan sin reintentos: la política de
      retry es del cliente HTTP.
    """
    if page_size < 1:
        raise ValueError(f"page_size debe ser >= 1 (recibido {page_size})")

    items: list[dict[str, Any]] = []
    skip = 0

    while True:
        if cancel_token is not None:
            cancel_token.raise_if_cancelled(f"fetching_{resource}")

        page = fetch_page(skip, page_size)
        items.extend(page.items)
        logger.debug(f"Página {resource}: skip={skip} items={len(page.items)} total={page.total}")

        if skip + page_size >= page.total:
            break

        if not page.items:
            # El CMS promete más items pero no entrega ninguno: sin esto el loop no termina.
            raise SourceFetchError(
                f"Página vacía en {resource} con skip={skip} < total={page.total}",
                resource=resource,
                skip=skip,
            )

        skip += page_size

    return items
