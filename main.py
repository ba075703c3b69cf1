import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.config import settings
from core.config_validator import validate_config_on_startup
from core.logging_config import logger

from routers import companies, employee, health, reports, sites, stripe_webhooks, users

# Registration order only affects the OpenAPI listing
ROUTERS = (
    users.router,
    companies.router,
    employee.router,
    sites.router,
    reports.router,
    stripe_webhooks.router,
    health.router,
)

# Denials worth a log line: auth failures, tenancy misses, lapsed billing
LOGGED_STATUSES = {401, 402, 403, 404}


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="1.0.0",
        description="Multi-tenant snow removal compliance reporting",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition", "Retry-After"],
    )

    @app.on_event("startup")
    async def on_startup():
        logger.info(f"Starting {settings.PROJECT_NAME} ({settings.ENV})")
        validate_config_on_startup()

    @app.middleware("http")
    async def log_slow_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        if elapsed_ms > 2000:
            logger.warning(f"Slow request {request.method} {request.url.path}: {elapsed_ms:.0f} ms")
        return response

    @app.exception_handler(StarletteHTTPException)
    async def handle_http(request: Request, exc: StarletteHTTPException):
        if exc.status_code in LOGGED_STATUSES or exc.status_code >= 500:
            logger.warning(f"{exc.status_code} {request.method} {request.url.path}: {exc.detail}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    # Full traceback in the logs, generic message to the client
    @app.exception_handler(Exception)
    async def handle_unhandled(request: Request, exc: Exception):
        logger.error(f"Unhandled error at {request.method} {request.url.path}", exc_info=exc)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    for router in ROUTERS:
        app.include_router(router)

    return app


app = create_app()
