"""
Tests del repositorio de lectura sobre una base SQLite en memoria.
"""
from __future__ import annotations

import pytest
from sqlalchemy import text

from cms_mirror.infrastructure.repositories.mirror_repository import AssetRow, MirrorRepository


async def _create_mirror(conn) -> None:
    await conn.execute(text('CREATE TABLE "Article" (id TEXT PRIMARY KEY, title TEXT, views INTEGER)'))
    await conn.execute(text("CREATE TABLE person (id TEXT PRIMARY KEY, name TEXT)"))
    await conn.execute(
        text("CREATE TABLE asset (id TEXT PRIMARY KEY, type TEXT, name TEXT, data BLOB, title TEXT)")
    )
    await conn.execute(text("""INSERT INTO "Article" VALUES ('e1', 'Hello', 3), ('e2', 'Bye', NULL)"""))
    await conn.execute(text("INSERT INTO person VALUES ('p1', 'Ana')"))
    await conn.execute(
        text("INSERT INTO asset VALUES (:id, :type, :name, :data, :title)"),
        [
            {"id": "a2", "type": "image/png", "name": "b.png", "data": b"\x89PNG", "title": "B"},
            {"id": "a1", "type": "application/pdf", "name": "a.pdf", "data": b"%PDF", "title": None},
        ],
    )


@pytest.mark.asyncio
async def test_lists_content_tables_without_asset(mirror_conn) -> None:
    await _create_mirror(mirror_conn)

    tables = await MirrorRepository(mirror_conn).list_content_tables()

    assert tables == ["Article", "person"]


@pytest.mark.asyncio
async def test_fetch_rows_returns_columns_as_stored(mirror_conn) -> None:
    await _create_mirror(mirror_conn)

    rows = await MirrorRepository(mirror_conn).fetch_rows("Article")

    assert sorted(rows, key=lambda r: r["id"]) == [
        {"id": "e1", "title": "Hello", "views": 3},
        {"id": "e2", "title": "Bye", "views": None},
    ]


@pytest.mark.asyncio
async def test_fetch_assets_skips_bytes(mirror_conn) -> None:
    await _create_mirror(mirror_conn)

    assets = await MirrorRepository(mirror_conn).fetch_assets()

    assert assets == [
        AssetRow(id="a1", type="application/pdf", name="a.pdf", title=None),
        AssetRow(id="a2", type="image/png", name="b.png", title="B"),
    ]


@pytest.mark.asyncio
async def test_get_asset_includes_bytes(mirror_conn) -> None:
    await _create_mirror(mirror_conn)
    repository = MirrorRepository(mirror_conn)

    asset = await repository.get_asset("a2")

    assert asset is not None
    assert asset.data == b"\x89PNG"
    assert asset.type == "image/png"
    assert await repository.get_asset("missing-id") is None


@pytest.mark.asyncio
async def test_empty_database_before_first_import(mirror_conn) -> None:
    repository = MirrorRepository(mirror_conn)

    assert await repository.list_content_tables() == []
    assert await repository.fetch_assets() == []
    assert await repository.get_asset("a1") is None
