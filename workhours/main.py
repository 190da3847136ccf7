import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from workhours.core.config import settings
from workhours.core.database import create_tables
from workhours.core.exceptions import (
    ConfigurationError, DependencyUnavailable, InvalidInterval, InvalidStateTransition,
    InvariantViolation, NotFound,
)
from workhours.api.v1.compliance import router as compliance_router
from workhours.api.v1.intervals import router as intervals_router
from workhours.api.v1.payroll import router as payroll_router
from workhours.api.v1.rule_sets import router as rule_sets_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Seconds a client should wait before retrying after a store outage
RETRY_AFTER_SECONDS = 5


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create tables on startup (SQLite / local development)
    await create_tables()
    yield


app = FastAPI(
    title="Work Hours API",
    description="Work-hour regulation and payroll compliance",
    version="1.0.0",
    lifespan=lifespan,
    # Swagger UI only in development; set DEBUG=false in production
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Error mapping ────────────────────────────────────────────────────────────

def _error(status_code: int, exc: Exception, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": str(exc)}, headers=headers)


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    return _error(status.HTTP_422_UNPROCESSABLE_ENTITY, exc)


@app.exception_handler(InvariantViolation)
async def invariant_violation_handler(request: Request, exc: InvariantViolation):
    return _error(status.HTTP_422_UNPROCESSABLE_ENTITY, exc)


@app.exception_handler(InvalidInterval)
async def invalid_interval_handler(request: Request, exc: InvalidInterval):
    return _error(status.HTTP_422_UNPROCESSABLE_ENTITY, exc)


@app.exception_handler(InvalidStateTransition)
async def invalid_transition_handler(request: Request, exc: InvalidStateTransition):
    return _error(status.HTTP_400_BAD_REQUEST, exc)


@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound):
    return _error(status.HTTP_404_NOT_FOUND, exc)


@app.exception_handler(DependencyUnavailable)
async def dependency_unavailable_handler(request: Request, exc: DependencyUnavailable):
    logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return _error(
        status.HTTP_503_SERVICE_UNAVAILABLE, exc, headers={"Retry-After": str(RETRY_AFTER_SECONDS)}
    )


API_PREFIX = "/api/v1"

app.include_router(rule_sets_router, prefix=API_PREFIX)
app.include_router(compliance_router, prefix=API_PREFIX)
app.include_router(payroll_router, prefix=API_PREFIX)
app.include_router(intervals_router, prefix=API_PREFIX)


@app.get("/health")
async def health_check():
    return {"status": "ok", "service": "Work Hours API", "version": "1.0.0"}
