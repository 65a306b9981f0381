# app/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api import contracts, measurements, offices
from app.api.auth import router as auth_router
from app.core.config import settings
from app.core.logging import init_logging
from app.core.middleware import MessagePackMiddleware
from app.core.rate_limit import limiter
from app.db.session import engine
from app.models.user import User
from app.schemas.user import UserRead
from app.utils.deps import get_current_user


def _error_body(code: int, message, **extra) -> dict:
    return {"error": {"code": code, "message": message, **extra}}


def add_global_exception_handlers(app: FastAPI):
    """
    Register global exception handlers for various error types.
    """

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        logger = logging.getLogger("app.errors")
        logger.warning(
            "HTTP exception: %s %s -> %s",
            request.method,
            request.url,
            exc.status_code,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.status_code, exc.detail),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RateLimitExceeded)
    def rate_limit_handler(request: Request, exc: RateLimitExceeded):
        logging.getLogger("app.security").warning(
            "Rate limit exceeded: %s %s (%s)", request.method, request.url, exc.detail
        )
        return JSONResponse(
            status_code=429,
            content=_error_body(429, f"Rate limit exceeded: {exc.detail}"),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ):
        logger = logging.getLogger("app.errors")
        logger.info("Validation error: %s %s", request.method, request.url)
        return JSONResponse(
            status_code=422,
            content=_error_body(
                422, "Validation error", details=jsonable_encoder(exc.errors())
            ),
        )

    @app.exception_handler(SQLAlchemyError)
    async def db_exception_handler(request: Request, exc: SQLAlchemyError):
        logger = logging.getLogger("app.errors")
        logger.error(
            "Database error on %s %s: %s",
            request.method,
            request.url,
            exc,
            exc_info=True,
        )
        return JSONResponse(
            status_code=503,
            content=_error_body(503, "Database temporarily unavailable"),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger = logging.getLogger("app.errors")
        logger.error(
            "Unhandled exception on %s %s",
            request.method,
            request.url,
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content=_error_body(500, "Internal Server Error"),
        )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    On startup: init logging, check the database.
    On shutdown: dispose the engine.
    """
    init_logging()
    logger = logging.getLogger("app.main")
    logger.info("Starting CRM versioning API (env=%s)", settings.ENVIRONMENT)

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Successfully connected to the database.")
    except SQLAlchemyError as exc:
        logger.critical("Failed to connect to DB: %s", exc, exc_info=True)
        raise

    yield

    await engine.dispose()
    logger.info("Shutting down CRM versioning API.")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Doors CRM Versioning API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    add_global_exception_handlers(app)

    if settings.ENABLE_MSGPACK:
        app.add_middleware(MessagePackMiddleware)

    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)

    @app.get("/health", tags=["Health"])
    async def health_check():
        logger = logging.getLogger("app.main")
        db_status = "ok"
        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            logger.error("Health check failed: DB unavailable (%s)", exc)
            db_status = "unavailable"
        status_code = 200 if db_status == "ok" else 503
        return JSONResponse(
            status_code=status_code,
            content={
                "status": "ok" if status_code == 200 else "degraded",
                "db": db_status,
            },
        )

    @app.get("/me", response_model=UserRead, tags=["User"])
    async def read_current_user(current_user: User = Depends(get_current_user)):
        """
        Returns information about the current authenticated user.
        """
        return UserRead.model_validate(current_user)

    app.include_router(auth_router)
    for module in (measurements, contracts, offices):
        app.include_router(module.router)
        app.include_router(module.history_router)

    return app


app = create_app()
