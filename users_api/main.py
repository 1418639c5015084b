import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings, get_settings
from .database import Database
from .errors import ErrorKind, ServiceError
from .routers import users
from .security import PasswordHasher

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.STORE_UNAVAILABLE: 503,
    ErrorKind.STORE_ERROR: 500,
    ErrorKind.HASHING_FAILED: 500,
}


async def service_error_handler(request: Request, exc: ServiceError):
    status_code = STATUS_BY_KIND.get(exc.kind, 500)
    if status_code >= 500:
        logger.error(f"[API] {request.method} {request.url.path} -> {status_code} ({exc.kind.value})")
    return JSONResponse(status_code=status_code, content={"error": exc.message})


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"[API] Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(settings: Settings | None = None, database: Database | None = None) -> FastAPI:
    """
    Build the application.

    Reads DATABASE_URL eagerly: a missing value raises ConfigurationError here,
    so the server refuses to start instead of connecting somewhere unexpected.
    """
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level)

    if database is None:
        database = Database(settings.database_url, echo=settings.sql_echo)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database.create_all()
        yield
        database.dispose()
        logger.info("[DB] Engine disposed")

    app = FastAPI(title=settings.app_name, version="0.1.0", redirect_slashes=False, lifespan=lifespan)
    app.state.settings = settings
    app.state.database = database
    app.state.password_hasher = PasswordHasher(rounds=settings.bcrypt_rounds)

    allowed_origins = settings.cors_origins
    logger.info(f"[API] Allowed CORS origins: {allowed_origins}")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        # Browsers reject credentials with a wildcard origin
        allow_credentials="*" not in allowed_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(users.router, prefix="/api")

    @app.get("/", tags=["root"])
    async def root():
        return {"service": settings.app_name, "status": "running"}

    @app.get("/api/health", tags=["health"])
    def health():
        database_ok = app.state.database.ping()
        return {"status": "ok", "database": "ok" if database_ok else "unavailable"}

    return app
