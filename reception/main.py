# reception/main.py
"""
FastAPI application entry point.
Includes request timing, the error envelope handlers, and all routers.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from reception.routers import audit_logs, auth, health, rooms, visitors
from reception.database import create_tables
from reception.config import settings
from reception.services.errors import InternalError, ReceptionError, ValidationError
from reception.utils.logger import get_logger
import time

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚀 Reception backend starting up...")
    create_tables()
    logger.info("✅ Database tables ready")
    logger.info(f"🚪 Rooms configured: {settings.ROOMS} (capacity {settings.ROOM_CAPACITY})")
    logger.info(f"🌐 Listening on http://{settings.BACKEND_HOST}:{settings.BACKEND_PORT}")
    logger.info("📖 API docs at /docs")
    yield
    logger.info("🛑 Reception backend shutting down...")


app = FastAPI(
    title="Reception Control API",
    description="Visitor registration, room check-in/check-out under a per-room cap, and audit log.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# ── CORS (allow the reception front-end to call the API) ────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Request Timing Middleware ────────────────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 2)
    logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
    return response


# ── Error Envelope ───────────────────────────────────────────────────────────
@app.exception_handler(ReceptionError)
async def reception_error_handler(request: Request, exc: ReceptionError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.to_dict()})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    fields = [".".join(str(p) for p in err["loc"] if p != "body") for err in exc.errors()]
    error = ValidationError(f"Invalid data: {', '.join(f for f in fields if f) or 'request'}")
    return JSONResponse(status_code=error.status_code, content={"error": error.to_dict()})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    error = InternalError()
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": error.to_dict()})


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(auth.router,       prefix="/api/v1", tags=["🔑 Auth"])
app.include_router(visitors.router,   prefix="/api/v1", tags=["🧑 Visitors"])
app.include_router(rooms.router,      prefix="/api/v1", tags=["🚪 Rooms"])
app.include_router(audit_logs.router, prefix="/api/v1", tags=["📜 Audit Log"])
app.include_router(health.router,     prefix="/api/v1", tags=["💚 Health"])
