from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from contextlib import asynccontextmanager

from school_eval.core.config import settings
from school_eval.core.database import init_db, close_db
from school_eval.core.exceptions import SchoolEvalError, error_response
from school_eval.core.logging_config import logger
from school_eval.core.middleware import RequestLoggingMiddleware
from school_eval.api.v1.router import api_router
from school_eval.services.evidence_service import EvidenceService
from school_eval.services.evidence_storage import EvidenceStorage


async def validate_critical_config():
    """Validate configuration at startup - fail fast if unusable"""
    if not settings.DATABASE_URL:
        logger.critical("[Startup] CRITICAL: DATABASE_URL is not set")
        raise RuntimeError("Missing critical configuration: DATABASE_URL is not set")

    missing = settings.missing_drive_credentials()
    if missing:
        logger.warning(
            f"[Startup] WARNING: {', '.join(missing)} not set - evidence uploads will be stored locally "
            f"and Drive-backed evidence cannot be deleted"
        )
    else:
        logger.info(f"[Startup] Google Drive storage enabled (folder {settings.effective_drive_folder_id})")

    logger.info("[Startup] Configuration validated")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup and shutdown"""
    logger.info("=" * 60)
    logger.info(f"Starting {settings.APP_NAME}...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info("=" * 60)

    await validate_critical_config()
    await init_db()
    logger.info("[Startup] Database tables ready")

    storage = EvidenceStorage.from_settings(settings)
    app.state.evidence_service = EvidenceService(storage)
    logger.info(f"[Startup] Evidence storage ready (remote: {storage.remote_enabled}, local: {settings.UPLOAD_DIR})")

    yield

    logger.info(f"Shutting down {settings.APP_NAME}...")
    await close_db()


app = FastAPI(
    title=settings.APP_NAME,
    description="Track school standards, indicators, checklist progress and evidence",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
    redirect_slashes=False,
)

app.add_middleware(RequestLoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials="*" not in settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Response-Time"],
)


@app.exception_handler(SchoolEvalError)
async def school_eval_exception_handler(request: Request, exc: SchoolEvalError):
    if exc.status_code >= 500:
        logger.error(f"[API] {request.method} {request.url.path} failed: {exc.code}: {exc.message}")
    else:
        logger.info(f"[API] {request.method} {request.url.path} -> {exc.status_code} {exc.code}")
    return JSONResponse(status_code=exc.status_code, content=error_response(exc))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Global exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": {
                "code": "INTERNAL_ERROR",
                "message": str(exc) if settings.DEBUG else "An error occurred",
                "details": {},
            },
        },
    )


# Locally stored evidence files
settings.UPLOAD_DIR.mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=str(settings.UPLOAD_DIR)), name="uploads")

app.include_router(api_router, prefix=settings.API_PREFIX)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "school_eval.main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=settings.is_dev_mode(),
    )
