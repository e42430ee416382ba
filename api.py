"""
Study Pods FastAPI Application

Main entry point for the Study Pods API. Exposes the accountability engine
(check-ins, streaks, pod matching, weekly reviews, coaching) over HTTP.
"""

import logging
from contextlib import asynccontextmanager

from bson.errors import InvalidId
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from common.database import MongoDB
from common.utils import APIException, error_response, success_response

from studypods.config import settings
from studypods.dependencies import init_all_services, get_checkin_service
from studypods.routers import checkin_router, pods_router, progress_router

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


# =============================================================================
# Database Instance
# =============================================================================
main_db = MongoDB()


# =============================================================================
# Application Lifespan
# =============================================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Connects the database, initializes services and ensures indexes.
    """
    logger.info("Starting Study Pods API...")
    settings.validate_required()

    await main_db.connect(
        uri=settings.MONGODB_URI,
        database_name=settings.MONGODB_DATABASE,
    )

    init_all_services(db=main_db.db)
    await get_checkin_service().ensure_indexes()
    logger.info("All services initialized")

    yield

    logger.info("Shutting down Study Pods API...")
    await main_db.disconnect()


# =============================================================================
# FastAPI Application
# =============================================================================
app = FastAPI(
    title="Study Pods API",
    description="Accountability engine for JLPT study pods",
    version=VERSION,
    lifespan=lifespan,
    docs_url="/docs" if settings.is_development() else None,
    redoc_url="/redoc" if settings.is_development() else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================
@app.exception_handler(APIException)
async def api_exception_handler(request: Request, exc: APIException):
    detail = exc.detail
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(
            detail.get("message", "Error"),
            code=detail.get("code"),
            details=detail.get("details"),
        ),
        headers=exc.headers,
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content=error_response(
            "Invalid request",
            code="VALIDATION_ERROR",
            details=jsonable_encoder(exc.errors()),
        ),
    )


@app.exception_handler(InvalidId)
async def invalid_id_handler(request: Request, exc: InvalidId):
    return JSONResponse(
        status_code=400,
        content=error_response("Malformed identifier", code="INVALID_ID"),
    )


# =============================================================================
# Include Routers (all under /api/v1 prefix)
# =============================================================================
API_PREFIX = "/api/v1"

app.include_router(checkin_router, prefix=API_PREFIX, tags=["Check-in"])
app.include_router(pods_router, prefix=API_PREFIX, tags=["Pods"])
app.include_router(progress_router, prefix=API_PREFIX, tags=["Progress"])


# =============================================================================
# Health Check Endpoint
# =============================================================================
@app.get("/health", tags=["Health"])
async def health():
    """Health check endpoint."""
    return success_response({
        "status": "ok",
        "version": VERSION,
        "database": main_db.is_connected,
    })


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.is_development(),
    )
