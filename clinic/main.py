"""
Clinic Management API
Patients, doctors, appointments, medical records, dashboard and notifications.
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api import appointments, auth, dashboard, doctors, notifications, patients, records
from .core.config import settings
from .core.errors import AuthenticationError, ClinicError
from .core.request_logging import RequestLoggingMiddleware
from .models.base import Base, SessionLocal, engine
from .models import counter, notification, user  # noqa: F401  ensure tables are registered
from .seed_demo import seed_demo_data
from .services import notification_engine

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def _purge_expired_notifications() -> None:
    db = SessionLocal()
    try:
        notification_engine.purge_expired(db)
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # A database that cannot be reached aborts startup.
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Database connection failed (%s)", engine.url.render_as_string(hide_password=True))
        raise

    # NOTE: deployed databases are migrated with Alembic; create_all only fills gaps
    Base.metadata.create_all(bind=engine)
    if settings.SEED_DEMO_DATA:
        seed_demo_data()
    _purge_expired_notifications()
    logger.info("%s %s started", settings.APP_NAME, settings.VERSION)
    yield


app = FastAPI(
    title="Clinic Management API",
    description="Administration backend for a medical clinic.",
    version=settings.VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
    expose_headers=["Authorization"],
)

app.add_middleware(RequestLoggingMiddleware)


# ── Error envelopes ──────────────────────────────────────────────────────────

def _error(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message},
        headers=headers,
    )


@app.exception_handler(ClinicError)
async def clinic_error_handler(request: Request, exc: ClinicError):
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    return _error(exc.status_code, exc.message, headers)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return _error(exc.status_code, message, getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
        message = f"{field}: {first.get('msg')}" if field else first.get("msg", "Invalid request")
    else:
        message = "Invalid request"
    return _error(400, message)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    return _error(500, "Server error")


app.include_router(auth.router, prefix="/api")
app.include_router(patients.router, prefix="/api")
app.include_router(doctors.router, prefix="/api")
app.include_router(appointments.router, prefix="/api")
app.include_router(records.router, prefix="/api")
app.include_router(dashboard.router, prefix="/api")
app.include_router(notifications.router, prefix="/api")


@app.get("/health")
def health_check():
    return {"status": "healthy", "service": settings.APP_NAME, "version": settings.VERSION}


@app.get("/api/test")
def connectivity_test(request: Request):
    return {
        "message": "API is reachable",
        "origin": request.headers.get("origin"),
        "timestamp": datetime.utcnow().isoformat(),
    }
