"""
Punto de entrada del API de lectura del mirror (FastAPI).
Configura la aplicacion, middlewares, rutas y eventos.
"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cms_mirror.api.middlewares.error_handler import ErrorHandlerMiddleware
from cms_mirror.api.v1.router import api_router
from cms_mirror.core.config import get_cors_origins, settings
from cms_mirror.core.events import lifespan
from cms_mirror.shared.exceptions.base import AppException


def create_application() -> FastAPI:
    """
    Factory para crear y configurar la aplicacion FastAPI.

    Returns:
        FastAPI: Instancia configurada de la aplicacion
    """
    application = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="API de solo lectura que reconstruye entries y assets del CMS desde PostgreSQL",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Configurar CORS
    application.add_middleware(
        CORSMiddleware,
        allow_origins=get_cors_origins(settings.CORS_ORIGINS),
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    # Middleware personalizado para manejo de errores
    application.add_middleware(ErrorHandlerMiddleware)

    application.include_router(api_router)

    # Manejador global de excepciones personalizadas
    @application.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @application.get("/health", tags=["Health"])
    async def health_check():
        """Endpoint para verificar el estado de la aplicacion."""
        return {
            "status": "healthy",
            "app_name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "environment": settings.ENVIRONMENT
        }

    return application


# Crear instancia de la aplicacion
app = create_application()


if __name__ == "__main__":
    import uvicorn
    from loguru import logger

    access_host = "localhost" if settings.HOST == "0.0.0.0" else settings.HOST
    logger.info(f"Mirror disponible en http://{access_host}:{settings.PORT}/")

    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
