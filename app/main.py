"""
Campus Trust API - Main Application

FastAPI backend with:
- MongoDB (motor) as the document store
- JWT bearer principals resolved to College/Student/Recruiter profiles
- Verification workflows for student enrollment, achievements and projects
- Application lifecycle for recruiter opportunities

Run: uvicorn app.main:app --reload
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.routes import api_router
from app.core.config import get_settings
from app.core.errors import AppError
from app.core.logging_config import setup_logging
from app.db.mongodb import init_mongo_indexes, test_mongo_connection
from app.utils.helpers import format_response

settings = get_settings()
setup_logging(settings.log_level)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Campus Trust API",
    description="""
    Students, colleges and recruiters around two trust workflows.

    ## Features
    - **Colleges**: directory, profile, dashboard stats, student roster
    - **Verification**: enrollment, achievements and projects reviewed by the student's college
    - **Applications**: recruiter-side status lifecycle with match-score ranking
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware (allow all for development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix="/api")


# ============================================================
# ERROR HANDLERS - everything leaves in the response envelope
# ============================================================

HTTP_ERROR_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
}


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(
        status_code=exc.status_code,
        content=format_response(False, None, exc.message, {"code": exc.code}),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"{field}: {first.get('msg')}" if field else "Invalid request"
    return JSONResponse(
        status_code=400,
        content=format_response(False, None, message, {"code": "VALIDATION_ERROR"}),
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    code = HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR")
    return JSONResponse(
        status_code=exc.status_code,
        content=format_response(False, None, str(exc.detail), {"code": code}),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    """Store failures and bugs still leave in the envelope."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    message = str(exc) if settings.debug else "Internal server error"
    return JSONResponse(
        status_code=500,
        content=format_response(False, None, message, {"code": "INTERNAL_ERROR"}),
    )


# Startup event
@app.on_event("startup")
async def startup_event():
    """Initialize MongoDB indexes on startup."""
    try:
        await init_mongo_indexes()
    except Exception as e:
        logger.warning(f"MongoDB index initialization failed: {e}")


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    connected = await test_mongo_connection()
    return {
        "status": "healthy" if connected else "degraded",
        "mongodb": "connected" if connected else "disconnected"
    }
