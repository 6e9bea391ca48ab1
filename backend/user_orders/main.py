import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine

from user_orders.api.routes import users
from user_orders.core.config import Settings, load_settings
from user_orders.core.database import create_db_engine, create_session_factory
from user_orders.core.exceptions import ConfigurationError
from user_orders.core.security import PasswordHasher
from user_orders.services.user_service import UserService
from user_orders.storage.user_store import UserStore

logger = logging.getLogger(__name__)

APP_NAME = "User Orders API"
APP_VERSION = "1.0.0"


def _public_errors(exc: RequestValidationError) -> list[dict]:
    """
    Field errors without the submitted values.

    "input" can hold the whole request body (password included) and "ctx" holds
    exception objects, so only type, loc and msg are sent back.
    """
    return [
        {key: value for key, value in error.items() if key not in ("input", "ctx")}
        for error in exc.errors()
    ]


def create_app(settings: Settings, engine: Optional[Engine] = None) -> FastAPI:
    """
    Build the application from explicit settings.

    The engine is created from settings.database_url unless one is passed in
    (tests hand in an in-memory SQLite engine). It is disposed on shutdown.
    """
    engine = engine or create_db_engine(settings.database_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Manage app lifecycle events.

        Shutdown: close the database connections
        """
        logger.info(f"{APP_NAME} started")
        yield
        engine.dispose()
        logger.info("Database connections closed")

    app = FastAPI(
        title=APP_NAME,
        version=APP_VERSION,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    store = UserStore(
        create_session_factory(engine),
        PasswordHasher(rounds=settings.BCRYPT_SALT_ROUNDS),
    )
    app.state.settings = settings
    app.state.user_service = UserService(store)

    # CORS middleware - lets browser clients on other origins call the API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),  # From CORS_ORIGINS, "*" by default
        allow_methods=["*"],  # Allow all HTTP methods
        allow_headers=["*"],  # Allow all headers
    )

    # All routes are prefixed with /api
    app.include_router(users.router, prefix="/api")

    # Payloads that fail validation never reach the service; they are
    # answered with the generic failure envelope and a 500
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.info(f"Rejected request to {request.url.path}: {len(exc.errors())} invalid field(s)")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "success": False,
                "message": "Something went wrong",
                "error": jsonable_encoder(_public_errors(exc)),
            },
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "success": False,
                "message": "Something went wrong",
                "error": {"name": type(exc).__name__, "message": str(exc)},
            },
        )

    @app.get("/")
    async def root():
        """Root endpoint - API information"""
        return {"message": APP_NAME, "version": APP_VERSION}

    @app.get("/health")
    async def health():
        """Health check endpoint - used by monitoring/deployment tools"""
        return {"status": "healthy"}

    return app


def main():
    """Load the settings from the environment and serve the API"""
    try:
        settings = load_settings()
    except ConfigurationError as exc:
        logging.basicConfig(level=logging.INFO)
        logger.critical(f"Error on server startup: {exc}")
        raise SystemExit(1) from exc

    logging.basicConfig(level=settings.LOG_LEVEL.upper())
    app = create_app(settings)
    logger.info(f"Server is running on port {settings.PORT}")
    # uvicorn runs the lifespan shutdown on SIGINT/SIGTERM
    uvicorn.run(
        app,
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
