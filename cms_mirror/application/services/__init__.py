"""
Servicios de aplicacion.

Contiene la logica de transformacion CMS -> relacional que usan
el import y el API de lectura.
"""
from cms_mirror.application.services.type_mapper import column_type
from cms_mirror.application.services.schema_synthesizer import (
    ASSET_TABLE,
    ASSET_TABLE_NAME,
    PRIMARY_KEY_COLUMN,
    SchemaSynthesizer,
    TableDefinition,
    build_table_definitions,
)
from cms_mirror.application.services.entry_flattener import FlatRow, flatten_entry


__all__ = [
    "column_type",
    "ASSET_TABLE",
    "ASSET_TABLE_NAME",
    "PRIMARY_KEY_COLUMN",
    "SchemaSynthesizer",
    "TableDefinition",
    "build_table_definitions",
    "FlatRow",
    "flatten_entry",
]
