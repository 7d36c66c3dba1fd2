"""
Cliente mínimo de la Content Delivery API de Contentful (sin SDK).

Requisitos cubiertos:
- requests
- paginación por skip/limit (una página por llamada; el loop vive en pagination.py)
- rate-limit/backoff (429, 5xx)
- descarga de bytes de assets
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Optional

import requests
from loguru import logger

from cms_mirror.shared.exceptions.domain import AssetDownloadError, SourceFetchError

from .types import Page


@dataclass(frozen=True)
class ContentfulCredentials:
    space_id: str
    access_token: str
    environment: str = "master"


class ContentfulClient:
    """
    Cliente HTTP de Contentful.

    Importante:
    - No interpreta los items: devuelve el JSON crudo de cada página.
    - Pide siempre `order=sys.createdAt` e `include=0` para que dos imports
      seguidos vean el mismo orden y no se mezclen entries embebidas.
    """

    def __init__(
        self,
        credentials: ContentfulCredentials,
        *,
        session: Optional[requests.Session] = None,
        base_url: str = "https://cdn.contentful.com",
        timeout_s: int = 30,
        max_retries: int = 6,
        min_backoff_s: float = 0.8,
        max_backoff_s: float = 20.0,
    ) -> None:
        self._creds = credentials
        self._base_url = base_url.rstrip("/")
        self._timeout_s = timeout_s
        self._max_retries = max_retries
        self._min_backoff_s = min_backoff_s
        self._max_backoff_s = max_backoff_s
        self._session = session or requests.Session()

    def get_content_types(self, skip: int, limit: int) -> Page:
        return self._get_page("content_types", skip, limit)

    def get_entries(self, skip: int, limit: int) -> Page:
        return self._get_page("entries", skip, limit)

    def get_assets(self, skip: int, limit: int) -> Page:
        return self._get_page("assets", skip, limit)

    def download_asset(self, url: str, *, asset_id: str) -> bytes:
        """Descarga los bytes de un asset desde su URL pública."""
        try:
            resp = self._session.get(url, timeout=self._timeout_s)
        except requests.RequestException as e:
            raise AssetDownloadError(f"No se pudo descargar el asset {asset_id}: {e}", asset_id=asset_id, url=url) from e

        if not 200 <= resp.status_code < 300:
            raise AssetDownloadError(
                f"Descarga del asset {asset_id} falló {resp.status_code}",
                asset_id=asset_id,
                url=url,
            )
        return resp.content

    def _get_page(self, resource: str, skip: int, limit: int) -> Page:
        url = (
            f"{self._base_url}/spaces/{self._creds.space_id}"
            f"/environments/{self._creds.environment}/{resource}"
        )
        params: dict[str, Any] = {
            "order": "sys.createdAt",
            "include": 0,
            "limit": limit,
            "skip": skip,
        }

        payload = self._request_json(url, params=params, resource=resource, skip=skip)

        items = payload.get("items")
        total = payload.get("total")
        if not isinstance(items, list) or not isinstance(total, int):
            raise SourceFetchError(
                f"Página malformada de {resource}: faltan 'items' o 'total'",
                resource=resource,
                skip=skip,
            )
        return Page(items=items, total=total)

    def _request_json(self, url: str, *, params: dict[str, Any], resource: str, skip: int) -> dict[str, Any]:
        """
        Request HTTP con backoff para 429/5xx.

        Estrategia:
        - 429: respeta X-Contentful-RateLimit-Reset / Retry-After si existen,
          si no exponencial con jitter simple.
        - 5xx: exponencial con jitter.
        - 4xx (no 429): error inmediato (space/token mal configurados).
        """
        headers = {"Authorization": f"Bearer {self._creds.access_token}"}

        for attempt in range(self._max_retries + 1):
            try:
                resp = self._session.request(
                    method="GET",
                    url=url,
                    params=params,
                    headers=headers,
                    timeout=self._timeout_s,
                )
            except requests.RequestException as e:
                raise SourceFetchError(f"Request a Contentful falló: {e}", resource=resource, skip=skip) from e

            if 200 <= resp.status_code < 300:
                try:
                    return resp.json()
                except ValueError as e:
                    raise SourceFetchError(
                        f"Contentful devolvió un body que no es JSON para {resource}",
                        resource=resource,
                        skip=skip,
                    ) from e

            # Errores recuperables
            if resp.status_code == 429 or 500 <= resp.status_code < 600:
                if attempt >= self._max_retries:
                    raise SourceFetchError(
                        f"Contentful error {resp.status_code} tras {attempt} reintentos: {resp.text}",
                        resource=resource,
                        skip=skip,
                    )

                sleep_s = self._retry_delay(resp, attempt)
                logger.warning(
                    f"Contentful respondió {resp.status_code} en {resource} (skip={skip}); "
                    f"reintento {attempt + 1} en {sleep_s:.1f}s"
                )
                time.sleep(sleep_s)
                continue

            # Errores no recuperables
            raise SourceFetchError(
                f"Request a Contentful falló {resp.status_code}: {resp.text}",
                resource=resource,
                skip=skip,
            )

        raise SourceFetchError(f"Sin respuesta de Contentful para {resource}", resource=resource, skip=skip)

    def _retry_delay(self, resp: requests.Response, attempt: int) -> float:
        retry_after = resp.headers.get("X-Contentful-RateLimit-Reset") or resp.headers.get("Retry-After")
        if retry_after:
            try:
                return float(retry_after)
            except ValueError:
                return self._min_backoff_s
        # Exponencial simple + jitter proporcional
        base = min(self._max_backoff_s, self._min_backoff_s * (2**attempt))
        return base + (0.15 * base)
