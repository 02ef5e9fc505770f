import logging
import os

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from hospital.api.routes import appointments, auth, examinations, staff
from hospital.core.config import _ENV_FILE, settings
from hospital.core.exceptions import HospitalError

if os.getenv("ENV") != "production":
    logging.basicConfig(level=logging.DEBUG)
else:
    logging.basicConfig(
        level=logging.INFO,
        format='{"time": "%(asctime)s", "level": "%(levelname)s", "message": "%(message)s"}',
    )
logger = logging.getLogger(__name__)


app = FastAPI(
    title="Hospital API",
    description="Hospital backend: staff, doctor scheduling, appointments, examinations",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

app.include_router(auth.router, prefix="/api/v1")
app.include_router(staff.router, prefix="/api/v1")
app.include_router(appointments.router, prefix="/api/v1")
app.include_router(examinations.router, prefix="/api/v1")


def _cors_headers(origin: str | None) -> dict[str, str]:
    """Add CORS headers to error responses so the browser doesn't block them."""
    headers = {
        "Access-Control-Allow-Credentials": "true",
        "Access-Control-Allow-Methods": "GET, POST, PUT, PATCH, DELETE, OPTIONS",
        "Access-Control-Allow-Headers": "Authorization, Content-Type",
    }
    if origin and origin in settings.cors_origins_list:
        headers["Access-Control-Allow-Origin"] = origin
    elif settings.cors_origins_list:
        headers["Access-Control-Allow-Origin"] = settings.cors_origins_list[0]
    return headers


@app.exception_handler(HospitalError)
async def hospital_error_handler(request: Request, exc: HospitalError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": str(exc)},
        headers=_cors_headers(request.headers.get("origin")),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return the error in JSON; include CORS so 500 responses are not blocked by browser."""
    origin = request.headers.get("origin")
    headers = _cors_headers(origin)
    if isinstance(exc, HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=headers,
        )
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
        headers=headers,
    )


@app.on_event("startup")
def startup_log() -> None:
    logger.info("Loading .env from: %s (exists: %s)", _ENV_FILE, _ENV_FILE.exists())
    logger.info(
        "Scheduling: %d-minute slots, %d-minute admission window, whole-hour grid=%s",
        settings.slot_duration_minutes,
        settings.admission_window_minutes,
        settings.schedule_whole_hour_slots,
    )


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}
