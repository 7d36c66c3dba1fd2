"""
Síntesis del esquema relacional a partir de los content models.

Una tabla por content model (mismo id) más la tabla fija `asset`.
Cada import reconstruye el esquema completo: DROP TABLE IF EXISTS + CREATE.

IMPORTANTE: la operación es destructiva. Los datos de cualquier tabla con el
mismo nombre se pierden; no hay versionado ni merge con imports previos.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Protocol

import psycopg
from loguru import logger

from cms_mirror.application.services.type_mapper import column_type
from cms_mirror.domain.entities.content_model import ContentModel
from cms_mirror.shared.exceptions.domain import SchemaError

ASSET_TABLE_NAME = "asset"
PRIMARY_KEY_COLUMN = "id"


@dataclass(frozen=True)
class ColumnDefinition:
    name: str
    sql_type: str
    primary_key: bool = False


@dataclass(frozen=True)
class TableDefinition:
    """Tabla derivada. La primera columna siempre es `id TEXT PRIMARY KEY`."""

    name: str
    columns: tuple[ColumnDefinition, ...]

    @property
    def column_names(self) -> list[str]:
        return [c.name for c in self.columns]


ASSET_TABLE = TableDefinition(
    name=ASSET_TABLE_NAME,
    columns=(
        ColumnDefinition(PRIMARY_KEY_COLUMN, "TEXT", primary_key=True),
        ColumnDefinition("type", "TEXT"),
        ColumnDefinition("name", "TEXT"),
        ColumnDefinition("data", "BYTEA"),
        ColumnDefinition("title", "TEXT"),
    ),
)


def table_for_model(model: ContentModel) -> TableDefinition:
    """Tabla de un content model, con columnas en el orden declarado de sus fields."""
    columns = [ColumnDefinition(PRIMARY_KEY_COLUMN, "TEXT", primary_key=True)]
    seen = {PRIMARY_KEY_COLUMN}
    for field in model.fields:
        if field.id in seen:
            raise SchemaError(
                f"El model {model.id} declara la columna '{field.id}' más de una vez",
                table=model.id,
            )
        seen.add(field.id)
        columns.append(ColumnDefinition(field.id, column_type(field, model.id)))
    return TableDefinition(name=model.id, columns=tuple(columns))


def build_table_definitions(models: Iterable[ContentModel]) -> list[TableDefinition]:
    """
    Definiciones de todas las tablas del mirror: `asset` primero, luego una
    por model en el orden en que llegaron del CMS.

    Se validan antes de ejecutar DDL para no dejar un esquema a medias por
    un error de definición.
    """
    tables = [ASSET_TABLE]
    names = {ASSET_TABLE_NAME}
    for model in models:
        if model.id in names:
            raise SchemaError(f"Nombre de tabla duplicado o reservado: '{model.id}'", table=model.id)
        names.add(model.id)
        tables.append(table_for_model(model))
    return tables


class SchemaWriter(Protocol):
    def recreate_table(self, conn: psycopg.Connection, table: TableDefinition) -> None: ...


class SchemaSynthesizer:
    """Ejecuta el DDL de las tablas derivadas sobre la conexión del import."""

    def __init__(self, writer: SchemaWriter) -> None:
        self._writer = writer

    def synthesize(self, conn: psycopg.Connection, models: Iterable[ContentModel]) -> list[TableDefinition]:
        tables = build_table_definitions(models)

        for table in tables:
            logger.debug(f"Creando tabla {table.name} con {len(table.columns)} columnas...")
            try:
                self._writer.recreate_table(conn, table)
            except psycopg.Error as e:
                raise SchemaError(f"Falló el DDL de la tabla '{table.name}': {e}", table=table.name) from e

        return tables
