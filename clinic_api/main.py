from contextlib import asynccontextmanager
from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from pydantic.alias_generators import to_camel
import time
import logging
import os

from .api.v1.appointments import router as appointments_router
from .core.config import settings
from .core.database import get_db, init_db
from .core.exceptions import (
    AppointmentConflictError, MissingFieldsError, SchedulingError, StoreFailureError
)
from .schemas.appointment import AppointmentCreate

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# Booking error kind -> HTTP status; anything not listed is a client error.
# Listing routes answer 400 for every engine error.
BOOKING_STATUS_CODES = {
    AppointmentConflictError: status.HTTP_409_CONFLICT,
    StoreFailureError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

BODY_FIELDS = [to_camel(name) for name in AppointmentCreate.model_fields]

def error_response(status_code: int, error: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, "message": message})

def status_for(request: Request, exc: SchedulingError) -> int:
    if request.method != "POST":
        return status.HTTP_400_BAD_REQUEST
    return BOOKING_STATUS_CODES.get(type(exc), status.HTTP_400_BAD_REQUEST)

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting %s %s", settings.APP_NAME, settings.VERSION)
    try:
        init_db()
    except SQLAlchemyError:
        logger.exception("Could not create the scheduling tables")
        raise
    yield
    logger.info("Shutting down %s", settings.APP_NAME)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    description="Clinic appointment scheduling with double-booking prevention",
    openapi_url="/api/v1/openapi.json",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

# Host checking is off under test, where requests come from "testserver"
if not os.getenv("TESTING"):
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=["localhost", "127.0.0.1", "*.localhost"]
    )

@app.middleware("http")
async def log_request(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed = time.perf_counter() - started
    response.headers["X-Process-Time"] = f"{elapsed:.6f}"
    logger.info("%s %s -> %d (%.4fs)", request.method, request.url.path, response.status_code, elapsed)
    return response

@app.exception_handler(SchedulingError)
async def scheduling_error_handler(request: Request, exc: SchedulingError):
    message = exc.message
    if isinstance(exc, StoreFailureError):
        # Driver details stay in the log
        logger.error("Store failure on %s %s: %r", request.method, request.url.path, exc.__cause__)
        message = "An unexpected storage error occurred"
    return error_response(status_for(request, exc), exc.code, message)

@app.exception_handler(RequestValidationError)
async def body_error_handler(request: Request, exc: RequestValidationError):
    """Unusable booking bodies (not JSON, not an object, odd field types)."""
    fields = sorted({
        str(error["loc"][-1]) for error in exc.errors()
        if error.get("loc") and str(error["loc"][-1]) in BODY_FIELDS
    })
    missing = MissingFieldsError(fields or BODY_FIELDS)
    return error_response(status.HTTP_400_BAD_REQUEST, missing.code, missing.message)

app.include_router(appointments_router, prefix="/api/v1")

@app.get("/health")
def health_check(db: Session = Depends(get_db)):
    """Liveness plus a round trip to the appointment store."""
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Health check could not reach the database")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unavailable", "database": "unreachable"},
        )
    return {"status": "healthy", "database": "ok", "version": settings.VERSION}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "clinic_api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
