"""FastAPI application factory"""

import logging
import time
from contextlib import asynccontextmanager
import sentry_sdk
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from receivables.adapter.services.schema import init_schema
from receivables.api.error import ClientError
from receivables.api.routes import invoices, overdue, payments, recurring

logger = logging.getLogger(__name__)


def _validation_details(exc: RequestValidationError) -> list:
    details = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        details.append(f"{location}: {err.get('msg')}" if location else err.get("msg"))
    return details


def create_app(config) -> FastAPI:
    """
    Build the receivables API

    Args:
        config: ApplicationConfig (or a subclass overriding its values)
    """
    logging.basicConfig(
        level=getattr(logging, str(config.LOG_LEVEL).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if config.ENABLE_SENTRY and config.DSN_SENTRY:
        sentry_sdk.init(
            dsn=config.DSN_SENTRY,
            environment=config.SENTRY_ENVIRONMENT,
            traces_sample_rate=0.1,
        )
        logger.info(f"Sentry enabled for environment {config.SENTRY_ENVIRONMENT}")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        from receivables.depends import engine

        if config.INIT_SCHEMA_ON_STARTUP:
            await init_schema(engine)
            logger.info("Database schema initialized")
        yield
        await engine.dispose()
        logger.info("Database connections closed")

    app = FastAPI(
        title="Receivables API",
        description="Invoices, payments, recurring billing and overdue collection",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=config.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if config.ENABLE_LOGGING_MIDDLEWARE:
        @app.middleware("http")
        async def log_requests(request: Request, call_next):
            started = time.perf_counter()
            response = await call_next(request)
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.info(
                f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f}ms)"
            )
            return response

    @app.exception_handler(ClientError)
    async def client_error_handler(request: Request, exc: ClientError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.error.code} {exc.error.reason}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        details = _validation_details(exc)
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "success": False,
                "error": {
                    "code": "VALIDATION_ERROR",
                    "message": "Invalid request parameters",
                    "reason": "; ".join(details),
                    "details": details,
                },
            },
        )

    @app.get("/health", tags=["Health"])
    async def health():
        return {"success": True, "data": {"status": "ok"}}

    for module in (invoices, payments, recurring, overdue):
        app.include_router(module.router, prefix=config.API_PREFIX)

    return app
