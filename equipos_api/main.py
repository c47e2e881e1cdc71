import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from .api import router
from .config import Settings, get_settings
from .db import Database
from .logging_config import setup_logging
from .usuarios import CredentialHasher

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings)

    app = FastAPI(title="Equipos Biomédicos API")
    app.state.settings = settings
    app.state.database = Database(
        settings.db_path,
        pool_size=settings.db_pool_size,
        timeout=settings.db_timeout_seconds,
    )
    app.state.hasher = CredentialHasher()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.methods,
        allow_headers=settings.headers,
    )

    @app.exception_handler(RequestValidationError)
    async def invalid_body(request: Request, exc: RequestValidationError):
        # cuerpo mal formado: mismo 400 que el resto de errores de validación
        logger.info("Solicitud inválida %s %s: %s", request.method, request.url.path, exc.errors())
        return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})

    @app.middleware("http")
    async def log_request(request: Request, call_next):
        logger.info(
            "%s %s origin=%s",
            request.method,
            request.url.path,
            request.headers.get("origin"),
        )
        return await call_next(request)

    @app.on_event("startup")
    def startup():
        # Ensure schema
        app.state.database.init_schema()
        logger.info("Servidor listo en %s:%s", settings.host, settings.port)

    app.include_router(router)
    return app


app = create_app()


def run():
    import uvicorn

    settings = app.state.settings
    uvicorn.run(app, host=settings.host, port=settings.port)
