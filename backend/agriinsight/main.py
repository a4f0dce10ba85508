"""FastAPI application entrypoint."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

import agriinsight.models  # noqa: F401  registers tables on Base.metadata
from agriinsight.api import api_router
from agriinsight.core.config import Settings, get_settings
from agriinsight.core.security import Clock, PasswordHasher, SessionSigner
from agriinsight.db.session import Database
from agriinsight.middleware.errors import UnhandledErrorMiddleware
from agriinsight.services.agronomy import AgronomicDataProvider, RandomAgronomicDataProvider
from agriinsight.services.auth import AuthService

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level.upper(), format="%(asctime)s %(levelname)s [%(name)s] %(message)s")


@asynccontextmanager
async def lifespan(app: FastAPI):
    database: Database = app.state.database
    try:
        await database.connect()
    except Exception:
        logger.exception("Error initializing database")
        raise
    try:
        yield
    finally:
        await database.dispose()


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()) if item not in ("body", "query"))
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(parts) or "Invalid request"


async def _http_error(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=getattr(exc, "headers", None))


async def _validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse({"error": _validation_message(exc)}, status_code=422)


def create_app(
    settings: Settings | None = None,
    *,
    data_provider: AgronomicDataProvider | None = None,
    clock: Clock | None = None,
) -> FastAPI:
    """Build the application with its own database pool, signer and data provider."""

    settings = settings or get_settings()

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.settings = settings
    app.state.database = Database(
        settings.database_url,
        pool_size=settings.db_pool_size,
        pool_timeout=settings.db_pool_timeout,
    )
    app.state.auth_service = AuthService(
        PasswordHasher(rounds=settings.password_hash_rounds),
        SessionSigner(settings.secret_key, max_age=settings.session_max_age_seconds, clock=clock),
    )
    app.state.data_provider = data_provider or RandomAgronomicDataProvider()

    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(RequestValidationError, _validation_error)

    # added first so it runs inside CORS
    app.add_middleware(UnhandledErrorMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)
    return app


app = create_app()
