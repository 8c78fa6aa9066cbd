from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse

from laburoya.api.v1.api import api_router
from laburoya.config.database import initialize_database
from laburoya.config.settings import settings
from laburoya.core.datastore.repository.base import Repository
from laburoya.core.event.publisher import EventPublisher, build_event_publisher
from laburoya.core.exceptions import AuthenticationException, LaburoYaException, ValidationException
import logging

# Configurar logging
logger = logging.getLogger(__name__)


def configure_logging():
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )


async def laburoya_exception_handler(request: Request, exc: LaburoYaException):
    content = {"error": exc.message}
    if isinstance(exc, ValidationException) and exc.field:
        content["fields"] = [{"field": exc.field, "message": exc.message}]
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationException) else None
    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    fields = [
        {"field": ".".join(str(part) for part in error["loc"] if part != "body"), "message": error["msg"]}
        for error in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"error": "Invalid request", "fields": fields})


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {str(exc)}", exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(
        repository: Optional[Repository] = None,
        event_publisher: Optional[EventPublisher] = None
) -> FastAPI:
    """
    Crea la aplicación. Si no se inyectan repositorio y publicador de eventos
    se construyen al arrancar según la configuración.
    """
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        openapi_url=f"{settings.API_V1_STR}/openapi.json"
    )
    app.state.repository = repository
    app.state.event_publisher = event_publisher

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(LaburoYaException, laburoya_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(api_router, prefix=settings.API_V1_STR)

    @app.on_event("startup")
    async def startup_event():
        if app.state.repository is None:
            app.state.repository = await initialize_database(settings)
            logger.info(f"Repository ready ({settings.STORE_BACKEND})")

        if app.state.event_publisher is None:
            app.state.event_publisher = build_event_publisher(settings)
        try:
            await app.state.event_publisher.start()
        except Exception:
            logger.exception("Excepción inicializando el publicador de eventos")

    @app.on_event("shutdown")
    async def shutdown_event():
        if app.state.event_publisher is not None:
            await app.state.event_publisher.stop()
            logger.info("Event publisher stopped.")

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        return {
            "status": "ok",
            "version": settings.VERSION,
            "store": settings.STORE_BACKEND
        }

    return app


configure_logging()
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8090, workers=1)
