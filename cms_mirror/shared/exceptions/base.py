"""
Excepción base del proyecto.
"""
from typing import Any, Dict, Optional


class AppException(Exception):
    """
    Excepción base de cms_mirror.
    Las excepciones del import y del API de lectura heredan de esta clase.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Args:
            message: Mensaje de error descriptivo
            status_code: Código HTTP cuando la excepción llega al API
            error_code: Código de error estable (para logs y clientes)
            details: Contexto adicional (ids, paso del import, etc.)
        """
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Representación JSON usada por el handler global de FastAPI."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }
