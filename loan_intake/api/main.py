"""FastAPI application factory"""

import logging
from contextlib import asynccontextmanager
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from loan_intake.api.middleware import RequestIDMiddleware, MetricsMiddleware
from loan_intake.api.v1 import loans, preview, status
from loan_intake.infrastructure.database.session import SessionLocal, get_db, init_db, ping_db
from loan_intake.api.dependencies import get_decision_policy
from loan_intake.services.submission import LoanSubmissionService
from loan_intake.infrastructure.observability.logging import setup_logging
from loan_intake.config import settings

# Setup structured logging
setup_logging(settings.log_level)

# Error codes returned to clients; storage and internal details are never exposed
ERROR_CODES = {
    400: "invalid_payload",
    404: "not_found",
    405: "method_not_allowed",
    500: "internal_error",
}


def recover_pending_applications(session_factory=SessionLocal) -> int:
    """Decide applications left pending by an earlier failed decision write"""
    db = session_factory()
    try:
        service = LoanSubmissionService(db, policy=get_decision_policy())
        return len(service.recover_pending())
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.auto_create_tables:
        init_db()
    if settings.recover_pending_on_startup:
        recover_pending_applications()
    yield


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": ERROR_CODES.get(exc.status_code, "http_error")},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Flatten pydantic errors into {field: [messages]}"""
    details: dict[str, list[str]] = {}
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"][1:]) or "body"
        details.setdefault(field, []).append(error["msg"])

    return JSONResponse(status_code=400, content={"error": "invalid_payload", "details": details})


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logging.error(f"Unhandled error: {exc}", extra={"path": request.url.path})
    return JSONResponse(status_code=500, content={"error": "internal_error"})


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Loan Intake Service",
        description="Loan application intake with synchronous admissibility and risk decision",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Health check endpoint, also verifies the database
    @app.get("/health")
    def health_check(db: Session = Depends(get_db)):
        try:
            ping_db(db)
        except SQLAlchemyError as e:
            logging.error(f"Health check failed: {e}")
            return JSONResponse(status_code=503, content={"status": "db-down", "service": settings.service_name})
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(loans.router, prefix="/v1", tags=["loans"])
    app.include_router(status.router, prefix="/v1", tags=["status"])
    app.include_router(preview.router, prefix="/v1", tags=["preview"])

    return app


app = create_app()
