"""
Data Transfer Objects (DTOs) para la capa de aplicacion.
"""
from .mirror_dto import (
    AssetDTO,
    AssetFieldsDTO,
    AssetFileDTO,
    EntryDTO,
    EntrySysDTO,
    IncludesDTO,
    LinkDTO,
    MirrorDocumentListDTO,
    SysIdDTO,
)

__all__ = [
    "AssetDTO",
    "AssetFieldsDTO",
    "AssetFileDTO",
    "EntryDTO",
    "EntrySysDTO",
    "IncludesDTO",
    "LinkDTO",
    "MirrorDocumentListDTO",
    "SysIdDTO",
]
