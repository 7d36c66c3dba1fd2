"""
Repositorio Postgres (psycopg) del import:
- DDL de las tablas derivadas (DROP + CREATE)
- INSERT de rows de entries y de assets
- advisory lock para evitar dos imports simultáneos

Los identificadores (ids de models y fields elegidos en el CMS) se citan
siempre con `psycopg.sql.Identifier`; los valores van como parámetros.
"""

from __future__ import annotations

from typing import Optional

import psycopg
from psycopg import sql
from psycopg.rows import dict_row

from cms_mirror.application.services.entry_flattener import FlatRow
from cms_mirror.application.services.schema_synthesizer import ASSET_TABLE, TableDefinition
from cms_mirror.domain.entities.content_model import Asset
from cms_mirror.shared.exceptions.domain import SchemaError


def build_drop_table_sql(table: TableDefinition) -> sql.Composed:
    return sql.SQL("DROP TABLE IF EXISTS {}").format(sql.Identifier(table.name))


def build_create_table_sql(table: TableDefinition) -> sql.Composed:
    columns = []
    for column in table.columns:
        definition = sql.SQL("{} {}").format(sql.Identifier(column.name), sql.SQL(column.sql_type))
        if column.primary_key:
            definition = sql.SQL("{} PRIMARY KEY").format(definition)
        columns.append(definition)

    return sql.SQL("CREATE TABLE {} ({})").format(
        sql.Identifier(table.name),
        sql.SQL(", ").join(columns),
    )


def build_insert_sql(table: str, columns: list[str]) -> sql.Composed:
    return sql.SQL("INSERT INTO {} ({}) VALUES ({})").format(
        sql.Identifier(table),
        sql.SQL(", ").join(sql.Identifier(c) for c in columns),
        sql.SQL(", ").join(sql.Placeholder() * len(columns)),
    )


class PostgresMirrorRepository:
    def __init__(self, dsn: str) -> None:
        self._dsn = dsn

    def connect(self) -> psycopg.Connection:
        """
        Abre conexión (autocommit False). El caller controla commits.

        Raises:
            SchemaError: si la base no es accesible (paso `connecting`)
        """
        try:
            return psycopg.connect(self._dsn, row_factory=dict_row)
        except psycopg.OperationalError as e:
            raise SchemaError(
                f"No se pudo conectar a PostgreSQL: {e}\n"
                f"Sugerencia: verifica que DATABASE_HOST/DATABASE_PORT sean accesibles desde donde ejecutas el import "
                f"y que la base '{self._database_name()}' exista.",
                step="connecting",
            ) from e

    def _database_name(self) -> Optional[str]:
        return self._dsn.rsplit("/", 1)[-1] if "/" in self._dsn else None

    def try_advisory_lock(self, conn: psycopg.Connection, lock_key: int) -> bool:
        """
        Evita ejecuciones simultáneas del import sobre la misma base.
        """
        with conn.cursor() as cur:
            cur.execute("SELECT pg_try_advisory_lock(%s) AS locked", (lock_key,))
            row = cur.fetchone()
            return bool(row and row.get("locked"))

    def recreate_table(self, conn: psycopg.Connection, table: TableDefinition) -> None:
        """DROP TABLE IF EXISTS + CREATE TABLE. Destructivo."""
        with conn.cursor() as cur:
            cur.execute(build_drop_table_sql(table))
            cur.execute(build_create_table_sql(table))

    def insert_row(self, conn: psycopg.Connection, row: FlatRow) -> None:
        with conn.cursor() as cur:
            cur.execute(build_insert_sql(row.table, row.columns), row.values)

    def insert_asset(self, conn: psycopg.Connection, asset: Asset, data: bytes) -> None:
        with conn.cursor() as cur:
            cur.execute(
                build_insert_sql(ASSET_TABLE.name, ASSET_TABLE.column_names),
                (asset.id, asset.content_type, asset.name, data, asset.title),
            )
