"""
Middleware para manejo centralizado de errores.
"""
from fastapi import Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError
from starlette.middleware.base import BaseHTTPMiddleware
from loguru import logger


def _error_response(status_code: int, error: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "message": message, "details": {}},
    )


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Captura errores no manejados del API de lectura.

    - Base del mirror inaccesible -> 503
    - Cualquier otro error -> 500
    """

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except OperationalError as exc:
            logger.error(f"Base del mirror no disponible en {request.method} {request.url.path}: {exc.orig}")
            return _error_response(
                status.HTTP_503_SERVICE_UNAVAILABLE,
                "MIRROR_UNAVAILABLE",
                "La base del mirror no está disponible",
            )
        except Exception as exc:
            logger.opt(exception=exc).error(f"Error no manejado en {request.method} {request.url.path}: {exc}")
            return _error_response(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                "INTERNAL_SERVER_ERROR",
                "Ha ocurrido un error interno del servidor",
            )
