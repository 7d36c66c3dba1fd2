"""
Tests del orquestador del import (sin Postgres ni HTTP reales).
"""
from __future__ import annotations

import threading
from unittest.mock import patch

import pytest
from loguru import logger

psycopg = pytest.importorskip("psycopg")

from cms_mirror.core.config import Settings
from cms_mirror.infrastructure.external.contentful_import.import_service import (
    ContentfulImporter,
    build_from_settings,
    stable_lock_key,
)
from cms_mirror.infrastructure.external.contentful_import.pg_repository import PostgresMirrorRepository
from cms_mirror.infrastructure.external.contentful_import.types import CancelToken, ImportState, Page
from cms_mirror.shared.exceptions.domain import (
    AssetDownloadError,
    ImportAlreadyRunning,
    ImportCancelled,
    ImportConfigError,
    RowInsertError,
    SchemaError,
    SourceFetchError,
)
from tests.factories import (
    article_model_payload,
    asset_payload,
    entry_payload,
    link,
    person_model_payload,
)

ALL_STEPS = [
    ImportState.CONNECTING,
    ImportState.FETCHING_MODELS,
    ImportState.SYNTHESIZING_SCHEMA,
    ImportState.FETCHING_ENTRIES,
    ImportState.INSERTING_ENTRIES,
    ImportState.FETCHING_ASSETS,
    ImportState.INSERTING_ASSETS,
    ImportState.DONE,
]


class _FakeConn:
    def __init__(self) -> None:
        self.committed = False
        self.rolled_back = False
        self.closed = False

    def commit(self) -> None:
        self.committed = True

    def rollback(self) -> None:
        self.rolled_back = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is not None:
            self.rollback()
        self.closed = True
        return False


class _FakeRepo:
    def __init__(self, *, lock_free: bool = True, reject_row: str | None = None) -> None:
        self.conn = _FakeConn()
        self.lock_free = lock_free
        self.reject_row = reject_row
        self.tables: list[str] = []
        self.rows = []
        self.assets: list[tuple[str, bytes]] = []

    def connect(self) -> _FakeConn:
        return self.conn

    def try_advisory_lock(self, conn, lock_key: int) -> bool:
        return self.lock_free

    def recreate_table(self, conn, table) -> None:
        self.tables.append(table.name)

    def insert_row(self, conn, row) -> None:
        if row.id == self.reject_row:
            raise psycopg.DataError("invalid input syntax for type integer")
        self.rows.append(row)

    def insert_asset(self, conn, asset, data: bytes) -> None:
        self.assets.append((asset.id, data))


class _FakeSource:
    def __init__(self, *, models=None, entries=None, assets=None, broken: str | None = None) -> None:
        self._collections = {
            "content_types": models or [],
            "entries": entries or [],
            "assets": assets or [],
        }
        self._broken = broken
        self.downloads: list[str] = []

    def _page(self, resource: str, skip: int, limit: int) -> Page:
        if resource == self._broken:
            raise SourceFetchError("Contentful caído", resource=resource, skip=skip)
        items = self._collections[resource]
        return Page(items=items[skip:skip + limit], total=len(items))

    def get_content_types(self, skip: int, limit: int) -> Page:
        return self._page("content_types", skip, limit)

    def get_entries(self, skip: int, limit: int) -> Page:
        return self._page("entries", skip, limit)

    def get_assets(self, skip: int, limit: int) -> Page:
        return self._page("assets", skip, limit)

    def download_asset(self, url: str, *, asset_id: str) -> bytes:
        if asset_id == "broken":
            raise AssetDownloadError("404", asset_id=asset_id, url=url)
        self.downloads.append(url)
        return f"bytes-{asset_id}".encode()


def _source(**kwargs) -> _FakeSource:
    defaults = {
        "models": [article_model_payload(), person_model_payload()],
        "entries": [
            entry_payload("p1", "person", {"name": "Ana"}),
            entry_payload("e1", "Article", {"title": "Hello", "tags": ["a", "b"], "author": link("p1")}),
            entry_payload("e2", "Article", {"title": "Bye"}),
        ],
        "assets": [asset_payload("a1"), asset_payload("a2")],
    }
    defaults.update(kwargs)
    return _FakeSource(**defaults)


def test_full_import_walks_every_step_and_commits() -> None:
    repo, source = _FakeRepo(), _source()
    importer = ContentfulImporter(pg_repo=repo, source=source, page_size=2)

    result = importer.run()

    assert result.states == ALL_STEPS
    assert (result.models, result.tables, result.entries, result.assets) == (2, 3, 3, 2)
    assert repo.tables == ["asset", "Article", "person"]
    assert repo.conn.committed and repo.conn.closed
    assert not repo.conn.rolled_back

    article_row = repo.rows[1]
    assert article_row.table == "Article"
    assert article_row.columns == ["id", "title", "tags", "author"]
    assert article_row.values == ["e1", "Hello", ["a", "b"], "p1"]

    assert repo.assets == [("a1", b"bytes-a1"), ("a2", b"bytes-a2")]
    assert source.downloads[0] == "https://images.example.net/a1/logo.png"


def test_insert_failure_aborts_and_releases_connection() -> None:
    repo = _FakeRepo(reject_row="e1")
    importer = ContentfulImporter(pg_repo=repo, source=_source())

    with pytest.raises(RowInsertError) as exc_info:
        importer.run()

    assert exc_info.value.details["row_id"] == "e1"
    assert importer.last_result.states[-2:] == [ImportState.INSERTING_ENTRIES, ImportState.FAILED]
    assert repo.conn.rolled_back and repo.conn.closed
    assert not repo.conn.committed
    assert repo.assets == []


def test_entry_of_unknown_model_is_an_error() -> None:
    repo = _FakeRepo()
    source = _source(entries=[entry_payload("x1", "Ghost", {"title": "?"})])

    with pytest.raises(RowInsertError):
        ContentfulImporter(pg_repo=repo, source=source).run()

    assert repo.rows == []
    assert repo.conn.closed


def test_source_failure_before_schema_leaves_tables_untouched() -> None:
    repo = _FakeRepo()
    importer = ContentfulImporter(pg_repo=repo, source=_source(broken="content_types"))

    with pytest.raises(SourceFetchError):
        importer.run()

    assert repo.tables == []
    assert importer.last_result.state is ImportState.FAILED
    assert repo.conn.closed


def test_asset_download_failure_aborts_import() -> None:
    repo = _FakeRepo()
    source = _source(assets=[asset_payload("a1"), asset_payload("broken")])

    with pytest.raises(AssetDownloadError):
        ContentfulImporter(pg_repo=repo, source=source).run()

    assert repo.conn.rolled_back and repo.conn.closed


def test_busy_advisory_lock_refuses_to_run() -> None:
    repo = _FakeRepo(lock_free=False)

    with pytest.raises(ImportAlreadyRunning):
        ContentfulImporter(pg_repo=repo, source=_source()).run()

    assert repo.tables == []
    assert repo.conn.closed


def test_cancelled_import_stops_and_rolls_back() -> None:
    repo = _FakeRepo()
    token = CancelToken()
    token.cancel()

    with pytest.raises(ImportCancelled):
        ContentfulImporter(pg_repo=repo, source=_source()).run(cancel_token=token)

    assert repo.tables == []
    assert repo.conn.rolled_back and repo.conn.closed


def test_parallel_downloads_keep_asset_order() -> None:
    repo = _FakeRepo()
    assets = [asset_payload(f"a{i}") for i in range(8)]

    result = ContentfulImporter(pg_repo=repo, source=_source(assets=assets), asset_download_workers=3).run()

    assert result.assets == 8
    assert [asset_id for asset_id, _ in repo.assets] == [f"a{i}" for i in range(8)]


def test_empty_space_still_rebuilds_asset_table() -> None:
    repo = _FakeRepo()

    result = ContentfulImporter(pg_repo=repo, source=_FakeSource()).run()

    assert result.states == ALL_STEPS
    assert repo.tables == ["asset"]


def test_lock_key_is_stable() -> None:
    assert stable_lock_key("cms_mirror", "import") == stable_lock_key("cms_mirror", "import")
    assert 0 <= stable_lock_key("cms_mirror", "import") < 2**31 - 1


def test_build_from_settings_requires_contentful_credentials() -> None:
    settings = Settings(_env_file=None, CONTENTFUL_SPACE_ID="", CONTENTFUL_ACCESS_TOKEN="")

    with pytest.raises(ImportConfigError):
        build_from_settings(settings)

    with pytest.raises(ImportConfigError) as exc_info:
        build_from_settings(settings, space_id="space1")

    assert exc_info.value.details == {"setting": "CONTENTFUL_ACCESS_TOKEN"}


def test_build_from_settings_uses_psycopg_dsn() -> None:
    settings = Settings(
        _env_file=None,
        DATABASE_URL="postgresql+asyncpg://u:p@db:5432/mirror",
        CONTENTFUL_SPACE_ID="space1",
        CONTENTFUL_ACCESS_TOKEN="token1",
    )

    importer = build_from_settings(settings, page_size=250)

    assert settings.psycopg_dsn == "postgresql://u:p@db:5432/mirror"
    assert set(Settings.model_computed_fields) == {"effective_database_url", "psycopg_dsn"}
    assert isinstance(importer, ContentfulImporter)


class _CountingSource(_FakeSource):
    """Cuenta descargas terminadas para medir cuánto se adelantan a los INSERT."""

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._lock = threading.Lock()
        self.downloaded = 0

    def download_asset(self, url: str, *, asset_id: str) -> bytes:
        data = super().download_asset(url, asset_id=asset_id)
        with self._lock:
            self.downloaded += 1
        return data


class _AheadTrackingRepo(_FakeRepo):
    def __init__(self, source: _CountingSource) -> None:
        super().__init__()
        self._source = source
        self.ahead: list[int] = []

    def insert_asset(self, conn, asset, data: bytes) -> None:
        self.ahead.append(self._source.downloaded - len(self.assets))
        super().insert_asset(conn, asset, data)


def test_parallel_downloads_stay_within_worker_window() -> None:
    workers = 4
    source = _CountingSource(assets=[asset_payload(f"a{i}") for i in range(50)])
    repo = _AheadTrackingRepo(source)

    result = ContentfulImporter(pg_repo=repo, source=source, asset_download_workers=workers).run()

    assert result.assets == 50
    # a lo sumo `workers` descargas en vuelo más la que se está insertando
    assert max(repo.ahead) <= workers + 1
    assert [asset_id for asset_id, _ in repo.assets] == [f"a{i}" for i in range(50)]


def test_unreachable_database_fails_in_connecting_step() -> None:
    importer = ContentfulImporter(
        pg_repo=PostgresMirrorRepository("postgresql://u:p@nowhere:5432/mirror"),
        source=_source(),
    )

    with patch(
        "cms_mirror.infrastructure.external.contentful_import.pg_repository.psycopg.connect",
        side_effect=psycopg.OperationalError("connection refused"),
    ):
        with pytest.raises(SchemaError) as exc_info:
            importer.run()

    assert exc_info.value.details == {"step": "connecting"}
    assert "mirror" in exc_info.value.message
    assert importer.last_result.states == [ImportState.CONNECTING, ImportState.FAILED]


def test_failed_step_still_logs_its_end() -> None:
    messages: list[str] = []
    handler_id = logger.add(messages.append, format="{message}", level="INFO")
    try:
        with pytest.raises(SourceFetchError):
            ContentfulImporter(pg_repo=_FakeRepo(), source=_source(broken="entries")).run()
    finally:
        logger.remove(handler_id)

    assert any(m.startswith("[fetching_entries] inicio") for m in messages)
    assert any(m.startswith("[fetching_entries] fin (fallido)") for m in messages)
    assert any(m.startswith("[fetching_models] fin (ok)") for m in messages)
