"""
Servicio de import Contentful -> Postgres.

Diseño (resumen):
- Trae todos los content models y reconstruye el esquema (DROP + CREATE)
- Trae todas las entries, las aplana y las inserta en la tabla de su model
- Trae todos los assets, descarga sus bytes y los inserta en `asset`
- Todo en una sola conexión y una sola transacción: si algo falla se hace
  rollback (PostgreSQL soporta DDL transaccional) y el mirror previo queda
  intacto. No hay resume: un import fallido se vuelve a correr desde cero.

Los pasos son estrictamente secuenciales (ver ImportState). Cada paso se
loguea con un par inicio/fin y la cantidad de items procesados.
"""

from __future__ import annotations

import time
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional, Protocol

import psycopg
from loguru import logger

from cms_mirror.application.services.entry_flattener import flatten_entry
from cms_mirror.application.services.schema_synthesizer import ASSET_TABLE_NAME, SchemaSynthesizer
from cms_mirror.core.config import Settings
from cms_mirror.domain.entities.content_model import Asset, ContentModel, Entry
from cms_mirror.shared.exceptions.domain import (
    ImportAlreadyRunning,
    ImportConfigError,
    RowInsertError,
)

from .contentful_client import ContentfulClient, ContentfulCredentials
from .pagination import fetch_all
from .pg_repository import PostgresMirrorRepository
from .types import CancelToken, ImportResult, ImportState, Page


class ContentSource(Protocol):
    """Colaborador paginado del CMS (ContentfulClient en producción)."""

    def get_content_types(self, skip: int, limit: int) -> Page: ...

    def get_entries(self, skip: int, limit: int) -> Page: ...

    def get_assets(self, skip: int, limit: int) -> Page: ...

    def download_asset(self, url: str, *, asset_id: str) -> bytes: ...


def stable_lock_key(namespace: str, name: str) -> int:
    """
    Genera un lock key reproducible para pg_advisory_lock.
    """
    # hash() no es estable entre procesos; suma simple de bytes (no es crypto).
    raw = (namespace + ":" + name).encode("utf-8")
    return int(sum(raw) % (2**31 - 1))


DEFAULT_LOCK_KEY = stable_lock_key("cms_mirror", "import")


@dataclass
class _StepProgress:
    count: int = 0


class ContentfulImporter:
    """
    Orquestador del import completo.

    La conexión a Postgres es exclusiva de la corrida y se libera siempre,
    termine bien o mal.
    """

    def __init__(
        self,
        *,
        pg_repo: PostgresMirrorRepository,
        source: ContentSource,
        page_size: int = 1000,
        asset_download_workers: int = 1,
        lock_key: int = DEFAULT_LOCK_KEY,
    ) -> None:
        self._pg = pg_repo
        self._source = source
        self._page_size = page_size
        self._asset_download_workers = max(1, asset_download_workers)
        self._lock_key = lock_key
        self._synthesizer = SchemaSynthesizer(pg_repo)
        self.last_result: Optional[ImportResult] = None

    def run(self, cancel_token: Optional[CancelToken] = None) -> ImportResult:
        """
        Ejecuta un import completo.

        ADVERTENCIA: destructivo. Todas las tablas derivadas (y `asset`) se
        eliminan y se recrean; los datos previos del mirror se pierden al
        hacer commit.
        """
        cancel = cancel_token or CancelToken()
        result = self.last_result = ImportResult()
        started = time.perf_counter()
        logger.info("Iniciando import...")

        try:
            with self._step(result, ImportState.CONNECTING) as progress:
                conn = self._pg.connect()
                progress.count = 1

            # `with` cierra la conexión en cualquier salida (rollback si hubo excepción).
            with conn:
                if not self._pg.try_advisory_lock(conn, self._lock_key):
                    raise ImportAlreadyRunning(self._lock_key)

                models = self._fetch_models(result, cancel)
                self._synthesize_schema(conn, result, models)
                entries = self._fetch_entries(result, cancel)
                self._insert_entries(conn, result, models, entries, cancel)
                assets = self._fetch_assets(result, cancel)
                self._insert_assets(conn, result, assets, cancel)

                conn.commit()

            result.states.append(ImportState.DONE)
            logger.success(
                f"Import terminado: {result.tables} tablas, {result.entries} entries, {result.assets} assets"
            )
            return result
        except Exception as e:
            step = result.state.value if result.state else ImportState.CONNECTING.value
            result.states.append(ImportState.FAILED)
            result.error = str(e)
            context = getattr(e, "details", None) or {}
            logger.error(f"Import falló en '{step}': {e} {context}")
            raise
        finally:
            logger.info(f"Duración del import: {time.perf_counter() - started:.2f}s")

    @contextmanager
    def _step(self, result: ImportResult, state: ImportState) -> Iterator[_StepProgress]:
        result.states.append(state)
        progress = _StepProgress()
        logger.info(f"[{state.value}] inicio")
        t0 = time.perf_counter()
        outcome = "fallido"
        try:
            yield progress
            outcome = "ok"
        finally:
            logger.info(
                f"[{state.value}] fin ({outcome}): {progress.count} items en {time.perf_counter() - t0:.2f}s"
            )

    def _fetch_models(self, result: ImportResult, cancel: CancelToken) -> list[ContentModel]:
        with self._step(result, ImportState.FETCHING_MODELS) as progress:
            raw = fetch_all(
                self._page_size,
                self._source.get_content_types,
                resource="content_types",
                cancel_token=cancel,
            )
            models = [ContentModel.from_source(item) for item in raw]
            progress.count = result.models = len(models)
        return models

    def _synthesize_schema(self, conn: psycopg.Connection, result: ImportResult, models: list[ContentModel]) -> None:
        with self._step(result, ImportState.SYNTHESIZING_SCHEMA) as progress:
            tables = self._synthesizer.synthesize(conn, models)
            progress.count = result.tables = len(tables)

    def _fetch_entries(self, result: ImportResult, cancel: CancelToken) -> list[Entry]:
        with self._step(result, ImportState.FETCHING_ENTRIES) as progress:
            raw = fetch_all(self._page_size, self._source.get_entries, resource="entries", cancel_token=cancel)
            entries = [Entry.from_source(item) for item in raw]
            progress.count = len(entries)
        return entries

    def _insert_entries(
        self,
        conn: psycopg.Connection,
        result: ImportResult,
        models: list[ContentModel],
        entries: list[Entry],
        cancel: CancelToken,
    ) -> None:
        models_by_id = {m.id: m for m in models}

        with self._step(result, ImportState.INSERTING_ENTRIES) as progress:
            for entry in entries:
                cancel.raise_if_cancelled(ImportState.INSERTING_ENTRIES.value)
                logger.debug(f"Insertando entry {entry.id} en tabla {entry.content_type_id}...")

                row = flatten_entry(entry, models_by_id.get(entry.content_type_id))
                try:
                    self._pg.insert_row(conn, row)
                except psycopg.Error as e:
                    raise RowInsertError(
                        f"No se pudo insertar la entry {entry.id} en '{row.table}': {e}",
                        row_id=entry.id,
                        table=row.table,
                    ) from e
                progress.count += 1

            result.entries = progress.count

    def _fetch_assets(self, result: ImportResult, cancel: CancelToken) -> list[Asset]:
        with self._step(result, ImportState.FETCHING_ASSETS) as progress:
            raw = fetch_all(self._page_size, self._source.get_assets, resource="assets", cancel_token=cancel)
            assets = [Asset.from_source(item) for item in raw]
            progress.count = len(assets)
        return assets

    def _insert_assets(
        self,
        conn: psycopg.Connection,
        result: ImportResult,
        assets: list[Asset],
        cancel: CancelToken,
    ) -> None:
        with self._step(result, ImportState.INSERTING_ASSETS) as progress:
            for asset, data in self._iter_downloads(assets, cancel):
                logger.debug(f"Insertando asset {asset.id} ({len(data)} bytes)...")
                try:
                    self._pg.insert_asset(conn, asset, data)
                except psycopg.Error as e:
                    raise RowInsertError(
                        f"No se pudo insertar el asset {asset.id}: {e}",
                        row_id=asset.id,
                        table=ASSET_TABLE_NAME,
                        step=ImportState.INSERTING_ASSETS.value,
                    ) from e
                progress.count += 1

            result.assets = progress.count

    def _download(self, asset: Asset) -> bytes:
        return self._source.download_asset(asset.download_url, asset_id=asset.id)

    def _iter_downloads(self, assets: list[Asset], cancel: CancelToken) -> Iterator[tuple[Asset, bytes]]:
        """
        Descarga bytes de assets en el mismo orden en que llegaron.

        Con más de un worker las descargas corren en paralelo con una ventana
        de `workers` descargas en vuelo; los INSERT siguen siendo secuenciales
        sobre la única conexión. Cada resultado se suelta apenas se entrega.
        """
        step = ImportState.INSERTING_ASSETS.value
        workers = self._asset_download_workers

        if workers == 1:
            for asset in assets:
                cancel.raise_if_cancelled(step)
                yield asset, self._download(asset)
            return

        executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="asset-download")
        pending = iter(assets)
        in_flight: deque[tuple[Asset, Future[bytes]]] = deque()

        def _submit_next() -> None:
            asset = next(pending, None)
            if asset is not None:
                in_flight.append((asset, executor.submit(self._download, asset)))

        try:
            for _ in range(workers):
                _submit_next()

            while in_flight:
                cancel.raise_if_cancelled(step)
                asset, future = in_flight.popleft()
                data = future.result()
                _submit_next()
                yield asset, data
        finally:
            executor.shutdown(wait=True, cancel_futures=True)


def build_from_settings(
    settings: Settings,
    *,
    space_id: Optional[str] = None,
    access_token: Optional[str] = None,
    environment: Optional[str] = None,
    page_size: Optional[int] = None,
) -> ContentfulImporter:
    """
    Constructor "oficial" del import a partir de Settings (env / .env),
    con overrides opcionales desde la CLI.
    """
    space_id = space_id or settings.CONTENTFUL_SPACE_ID
    access_token = access_token or settings.CONTENTFUL_ACCESS_TOKEN
    if not space_id:
        raise ImportConfigError("CONTENTFUL_SPACE_ID")
    if not access_token:
        raise ImportConfigError("CONTENTFUL_ACCESS_TOKEN")

    client = ContentfulClient(
        ContentfulCredentials(
            space_id=space_id,
            access_token=access_token,
            environment=environment or settings.CONTENTFUL_ENVIRONMENT,
        ),
        base_url=settings.CONTENTFUL_BASE_URL,
    )
    return ContentfulImporter(
        pg_repo=PostgresMirrorRepository(settings.psycopg_dsn),
        source=client,
        page_size=page_size or settings.CONTENTFUL_PAGE_SIZE,
        asset_download_workers=settings.ASSET_DOWNLOAD_WORKERS,
    )
