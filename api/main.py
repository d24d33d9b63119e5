from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from contacts import router as contacts_router
from core.config import AppConfig
from core.db import Database
from core.dependencies import get_db
from core.errors import ConstraintViolationError, DataAccessError
from core.log import setup_logging

logger = logging.getLogger(__name__)

SERVICE_NAME = "contacts-api"


def create_app(config: AppConfig | None = None, *, db: Database | None = None) -> FastAPI:
    config = config or AppConfig.from_env()
    db = db or Database(config.database)
    setup_logging(config.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Open the DB pool once per process.
        await db.open()
        try:
            yield
        finally:
            await db.close()

    app = FastAPI(title=SERVICE_NAME, lifespan=lifespan)
    app.state.config = config
    app.state.db = db

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.cors_origins),
        allow_credentials="*" not in config.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(ConstraintViolationError)
    async def handle_constraint_error(_: Request, exc: ConstraintViolationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": str(exc)},
        )

    @app.exception_handler(DataAccessError)
    async def handle_data_access_error(request: Request, exc: DataAccessError) -> JSONResponse:
        logger.error(
            "data_access_failed method=%s path=%s error=%s",
            request.method,
            request.url.path,
            exc,
            exc_info=exc,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Database error."},
        )

    app.include_router(contacts_router.router, tags=["contacts"])

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.get("/health/db")
    async def health_db(database: Database = Depends(get_db)) -> JSONResponse:
        try:
            ok = await database.ping()
        except DataAccessError:
            logger.exception("db_health_check_failed")
            ok = False
        if not ok:
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"status": "unavailable"},
            )
        return JSONResponse(content={"status": "ok"})

    @app.get("/")
    def root() -> dict:
        return {"message": f"{SERVICE_NAME} api", "docs": "/docs"}

    return app


app = create_app()
