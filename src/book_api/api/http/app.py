"""FastAPI application factory and setup."""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse, Response

from book_api.api.http.app_data import ApplicationDependencies
from book_api.api.http.routers import books, health
from book_api.api.utils.app_startup import configure_logging
from book_api.core.errors import BookApiError, Unauthorized
from book_api.core.services import DbSessionService, MigrationRunner, UserManagementService
from book_api.runtime.config.config_data import ConfigData
from book_api.runtime.context import get_config


def error_body(reason: str) -> dict:
    return {"error": True, "reason": reason}


# --- Lifecycle hooks ---
def startup(app: FastAPI) -> None:
    """Bring the schema up to date and seed users before serving traffic.

    Any failure here aborts startup.
    """
    deps: ApplicationDependencies = app.state.app_dependencies
    config = deps.config
    logger.info("Starting up application in {} environment", config.app.environment)

    if config.database.auto_migrate:
        MigrationRunner(deps.database_service.engine).apply_all()

    if config.security.seed_users:
        with deps.database_service.session_scope() as session:
            created = UserManagementService(session).seed_users(config.security.seed_users)
        logger.info("Seeded {} user(s)", len(created))


def shutdown(app: FastAPI) -> None:
    logger.info("Shutting down application")
    deps: ApplicationDependencies = app.state.app_dependencies
    if deps.owns_database:
        deps.database_service.dispose()


@asynccontextmanager
async def lifespan(app: FastAPI):
    startup(app)
    try:
        yield
    finally:
        shutdown(app)


# --- Error rendering ---
async def book_api_error_handler(request: Request, exc: BookApiError) -> Response:
    if isinstance(exc, Unauthorized):
        realm = request.app.state.app_dependencies.config.security.realm
        return Response(
            status_code=exc.status_code,
            headers={"WWW-Authenticate": f'Basic realm="{realm}"'},
        )
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.reason))


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    reasons = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg')}"
        for err in exc.errors()
    )
    return JSONResponse(status_code=400, content=error_body(reasons or "Bad Request"))


async def http_error_handler(
    request: Request, exc: StarletteHTTPException
) -> Response:
    if exc.status_code < 400:
        return Response(status_code=exc.status_code, headers=exc.headers)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail)),
        headers=exc.headers,
    )


# --- Request logging middleware ---
async def log_requests(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

    xff = request.headers.get("x-forwarded-for")
    client_ip = (
        xff.split(",")[0].strip()
        if xff
        else request.client.host
        if request.client
        else "unknown"
    )

    base_ctx = {
        "request_id": request_id,
        "method": request.method,
        "path": request.url.path,
        "client_ip": client_ip,
    }

    start = time.perf_counter()

    with logger.contextualize(**base_ctx):
        try:
            logger.info("request.start")
            response = await call_next(request)

            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=response.status_code,
                duration_ms=round(duration_ms, 1),
            ).info("request.end {} {}", request.method, response.status_code)

            response.headers.setdefault("X-Request-ID", request_id)
            return response

        except Exception as exc:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=500,
                duration_ms=round(duration_ms, 1),
                error_type=type(exc).__name__,
            ).exception("request.error")
            return JSONResponse(
                status_code=500,
                content={**error_body("Internal Server Error"), "request_id": request_id},
                headers={"X-Request-ID": request_id},
            )


def create_app(
    config: ConfigData | None = None,
    database_service: DbSessionService | None = None,
) -> FastAPI:
    """Build the application around an explicit database service.

    Args:
        config: Configuration; defaults to the current context's.
        database_service: Storage handle shared by every request. When omitted
            the application creates one and disposes it on shutdown.
    """
    config = config or get_config()
    configure_logging(config)

    owns_database = database_service is None
    if database_service is None:
        database_service = DbSessionService(config.database, config.app.environment)

    app = FastAPI(
        title=config.app.name,
        lifespan=lifespan,
        docs_url=None if config.app.environment == "production" else "/docs",
        redoc_url=None if config.app.environment == "production" else "/redoc",
    )
    app.state.app_dependencies = ApplicationDependencies(
        config=config,
        database_service=database_service,
        owns_database=owns_database,
    )

    app.add_exception_handler(BookApiError, book_api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.middleware("http")(log_requests)

    app.include_router(health.router)
    app.include_router(books.router)
    return app


app = create_app()

__all__ = ["app", "create_app", "startup", "shutdown"]


if __name__ == "__main__":
    import uvicorn

    main_config = get_config()
    uvicorn.run(
        app,
        host=main_config.app.host,
        port=main_config.app.port,
        access_log=False,  # We handle access logging in middleware
    )
