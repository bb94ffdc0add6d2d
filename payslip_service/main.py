import logging
import os
import signal
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from payslip_service.api.router import router
from payslip_service.core.config import settings
from payslip_service.core.exceptions import (
    PayslipError,
    PayslipNotFoundError,
    StorageError,
    StorageUnavailableError,
)
from payslip_service.db.session import Database
from payslip_service.repositories.payslips import PayslipRepository

logger = logging.getLogger(__name__)


def terminate_process() -> None:
    os.kill(os.getpid(), signal.SIGTERM)


async def fail_fast_if_pool_dead(app: FastAPI) -> bool:
    """
    Probe storage after a connectivity failure.

    A failed request alone is not fatal; a pool that cannot hand out a
    working connection is, and the process is terminated.
    """
    if await app.state.database.ping():
        return False
    logger.critical("Storage connection pool is unusable, terminating process")
    app.state.terminate()
    return True


@asynccontextmanager
async def lifespan(app: FastAPI):
    database: Database = app.state.database
    database.connect()
    # MVP: create tables automatically. Later: Alembic migrations.
    await database.create_all()
    logger.info("Payslip service ready")
    yield
    await database.dispose()


def _describe_request_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    if first.get("type") == "json_invalid":
        return "Invalid JSON body"
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    if not loc:
        return f"Invalid request: {first.get('msg')}"
    return f"Invalid {'.'.join(loc)}: {first.get('msg')}"


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(PayslipError)
    async def payslip_error_handler(request: Request, exc: PayslipError):
        if isinstance(exc, StorageError):
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
            if isinstance(exc, StorageUnavailableError):
                await fail_fast_if_pool_dead(request.app)
            return JSONResponse(status_code=500, content={"error": "Internal server error"})

        if isinstance(exc, PayslipNotFoundError):
            logger.info("%s %s: %s", request.method, request.url.path, exc.message)
        else:
            logger.warning("%s %s rejected: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        message = _describe_request_error(exc)
        logger.warning("%s %s rejected: %s", request.method, request.url.path, message)
        return JSONResponse(status_code=400, content={"error": message})


def create_app(
    database: Optional[Database] = None,
    repository: Optional[PayslipRepository] = None,
    terminate: Optional[Callable[[], None]] = None,
) -> FastAPI:
    if database is None:
        database = Database(
            settings.DATABASE_URL,
            echo=settings.LOG_SQL_QUERIES,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
        )

    app = FastAPI(title="Payslip Service", lifespan=lifespan)
    app.state.database = database
    app.state.repository = repository or PayslipRepository(database)
    app.state.terminate = terminate or terminate_process

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)
    app.include_router(router)
    return app


app = create_app()
