"""
Excepciones del mirror CMS -> PostgreSQL.

Todas cargan en `details` el contexto necesario para diagnosticar
(paso del import, modelo, entry o asset involucrado).
"""
from typing import Any, Optional

from cms_mirror.shared.exceptions.base import AppException


class MirrorException(AppException):
    """Excepción base para errores del import y del mirror."""

    def __init__(
        self,
        message: str,
        error_code: str = "MIRROR_ERROR",
        details: Optional[dict[str, Any]] = None,
        status_code: int = 500,
    ):
        super().__init__(
            message=message,
            status_code=status_code,
            error_code=error_code,
            details=details
        )


class SourceFetchError(MirrorException):
    """Falló un request paginado al CMS o la página vino malformada."""

    def __init__(self, message: str, *, resource: str, skip: Optional[int] = None):
        details: dict[str, Any] = {"resource": resource}
        if skip is not None:
            details["skip"] = skip
        super().__init__(message=message, error_code="SOURCE_FETCH_ERROR", details=details)


class UnknownFieldType(MirrorException):
    """El tipo declarado de un field no tiene mapeo a columna."""

    def __init__(self, field_type: Any, *, model_id: Optional[str], field_id: str):
        super().__init__(
            message=f"Tipo de field desconocido '{field_type}' en {model_id}.{field_id}",
            error_code="UNKNOWN_FIELD_TYPE",
            details={"model_id": model_id, "field_id": field_id, "type": str(field_type)}
        )


class SchemaError(MirrorException):
    """
    Error del store relacional: DDL (o definición del esquema) de una tabla,
    o base inaccesible al conectar (sin `table`).
    """

    def __init__(self, message: str, *, table: Optional[str] = None, step: str = "synthesizing_schema"):
        details: dict[str, Any] = {"step": step}
        if table is not None:
            details["table"] = table
        super().__init__(message=message, error_code="SCHEMA_ERROR", details=details)


class RowInsertError(MirrorException):
    """Error de DML al insertar un row (entry o asset)."""

    def __init__(self, message: str, *, row_id: str, table: str, step: str = "inserting_entries"):
        super().__init__(
            message=message,
            error_code="ROW_INSERT_ERROR",
            details={"step": step, "row_id": row_id, "table": table}
        )


class AssetDownloadError(MirrorException):
    """No se pudieron descargar los bytes de un asset."""

    def __init__(self, message: str, *, asset_id: str, url: Optional[str] = None):
        super().__init__(
            message=message,
            error_code="ASSET_DOWNLOAD_ERROR",
            details={"step": "inserting_assets", "asset_id": asset_id, "url": url}
        )


class AssetNotFound(MirrorException):
    """El asset pedido al API de lectura no existe. Resultado esperado, no fallo."""

    def __init__(self, asset_id: str):
        super().__init__(
            message=f"Asset con ID '{asset_id}' no encontrado",
            error_code="ASSET_NOT_FOUND",
            details={"asset_id": asset_id},
            status_code=404,
        )


class ImportCancelled(MirrorException):
    """El operador canceló el import entre dos pasos."""

    def __init__(self, step: str):
        super().__init__(
            message=f"Import cancelado durante '{step}'",
            error_code="IMPORT_CANCELLED",
            details={"step": step}
        )


class ImportAlreadyRunning(MirrorException):
    """Otro import tiene tomado el advisory lock."""

    def __init__(self, lock_key: int):
        super().__init__(
            message="Ya hay un import en curso (advisory lock ocupado)",
            error_code="IMPORT_ALREADY_RUNNING",
            details={"lock_key": lock_key},
            status_code=409,
        )


class ImportConfigError(MirrorException):
    """Falta configuración obligatoria para el import."""

    def __init__(self, setting: str):
        super().__init__(
            message=f"Falta configuración obligatoria: {setting}",
            error_code="IMPORT_CONFIG_ERROR",
            details={"setting": setting}
        )
