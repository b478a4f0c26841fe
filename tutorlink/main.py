# tutorlink/main.py
# TutorLink FastAPI application entry point
#
# Startup:  logging setup, DB connection check
# Shutdown: Clean connection pool disposal
# Routes:   /health, /api/* (all endpoints via master router)
#
# Every error leaves the server as {"success": false, "message": ..., "code"?: ...}

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from tutorlink.api.v1.router import api_router
from tutorlink.core.config import settings
from tutorlink.core.errors import InvalidStateTransition
from tutorlink.core.logging_setup import setup_logging
from tutorlink.db.session import check_db_connection, engine

logger = logging.getLogger("tutorlink.main")


# ── Lifespan ──────────────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup and shutdown logic.
    Schema is managed by Alembic: run `alembic upgrade head` before starting.
    """
    setup_logging()
    logger.info("Starting %s v%s [%s]", settings.app_name, settings.app_version, settings.app_env)

    if check_db_connection():
        logger.info("Database connection: OK")
    else:
        logger.warning("Database connection failed -- check DATABASE_URL")

    yield  # App runs here

    logger.info("Shutting down -- disposing DB connection pool")
    engine.dispose()


# ── App Instance ──────────────────────────────────────────────────────────────

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="TutorLink -- tutor requests, tuition jobs, applications and demo classes.",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
    debug=settings.debug,
)


# ── CORS ──────────────────────────────────────────────────────────────────────

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Error Envelope ────────────────────────────────────────────────────────────

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Flatten HTTPException(detail=str | {"message", "code"}) into the error envelope."""
    content = {"success": False}
    if isinstance(exc.detail, dict):
        content.update(exc.detail)
    else:
        content["message"] = str(exc.detail)
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Body / query validation failures answer 400 with the first message up front."""
    errors = [
        {
            "loc": [str(part) for part in err.get("loc", ())],
            "msg": str(err.get("msg", "")).replace("Value error, ", "", 1),
        }
        for err in exc.errors()
    ]
    message = errors[0]["msg"] if errors else "Invalid request."
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "message": message,
            "code": "validation_error",
            "errors": errors,
        },
    )


@app.exception_handler(InvalidStateTransition)
async def state_transition_handler(request: Request, exc: InvalidStateTransition):
    logger.info("Rejected transition %s → %s on %s", exc.current, exc.target, request.url.path)
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "message": exc.message,
            "code": exc.code,
            "current": exc.current,
            "target": exc.target,
        },
    )


# ── Routes ────────────────────────────────────────────────────────────────────

app.include_router(api_router, prefix="/api")


# ── Health Check ──────────────────────────────────────────────────────────────

@app.get("/health", tags=["Health"], include_in_schema=False)
def health_check():
    """
    Health check endpoint for load balancers.
    Returns 200 OK if the app is running; DB status included for observability.
    """
    db_ok = check_db_connection()
    return JSONResponse(
        status_code=200,
        content={
            "status": "ok",
            "app": settings.app_name,
            "version": settings.app_version,
            "environment": settings.app_env,
            "services": {
                "database": "ok" if db_ok else "unavailable",
            },
        },
    )


@app.get("/", include_in_schema=False)
def root():
    return JSONResponse(
        content={
            "message": "TutorLink API",
            "docs": "/api/docs",
            "health": "/health",
        }
    )
