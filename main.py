"""
Health Information System API
Clients, health programs and enrollments for a healthcare facility
"""

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
import uvicorn
from contextlib import asynccontextmanager
import logging
import traceback
import uuid
from datetime import datetime, timezone

from app.config import settings
from app.database import engine, Base, SessionLocal
from app import models  # noqa: F401  registers every table on Base.metadata
from app.routers import actions, auth, clients, keys, programs
from app.services.activity_logger import ActivityLogger
from app.utils.error_handler import AppError, ErrorContext, ErrorHandler
from app.utils.rate_limit import limiter

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Refuse to start without an OAuth client
settings.require_oauth_credentials()

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management"""
    logger.info("Starting Health Information System API...")
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created/verified")

    yield

    logger.info("Shutting down Health Information System API...")

app = FastAPI(
    title="Health Information System API",
    description="Client registration, health programs and enrollments with role-based access",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# Add rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router, prefix="/api/auth", tags=["authentication"])
app.include_router(clients.router, prefix="/api/clients", tags=["clients"])
app.include_router(programs.router, prefix="/api/programs", tags=["programs"])
app.include_router(keys.router, prefix="/api/keys", tags=["api keys"])
app.include_router(actions.router, prefix="/api/actions", tags=["actions"])

@app.get("/")
@limiter.limit("10/minute")
async def root(request: Request):
    """Root endpoint with API information - publicly accessible"""
    return {
        "message": "Health Information System API",
        "version": "1.0.0",
        "docs": "/docs",
        "redoc": "/redoc",
        "timestamp": datetime.now(timezone.utc).isoformat()
    }

@app.get("/health")
@limiter.limit("30/minute")
async def health_check(request: Request):
    """Health check endpoint"""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat()
    }

@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Known errors carry their own status and message"""
    return ErrorHandler.create_error_response(ErrorContext(request), exc)

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Anything unexpected is a 500 with an id to trace it by"""
    error_id = str(uuid.uuid4())

    logger.error(
        f"Unhandled exception {error_id}: {type(exc).__name__} in {request.method} {request.url.path}",
        extra={
            "error_id": error_id,
            "endpoint": str(request.url.path),
            "method": request.method,
            "error_type": type(exc).__name__,
            "error_message": str(exc),
            "stack_trace": traceback.format_exc()
        },
        exc_info=True
    )

    # Try to log the error activity (but don't fail if this fails)
    db = SessionLocal()
    try:
        await ActivityLogger(db).log_request(request, 500, error_message=f"[{error_id}] {str(exc)}")
    finally:
        db.close()

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred. Please try again later.",
                "error_id": error_id,
                "timestamp": datetime.now(timezone.utc).isoformat()
            }
        }
    )

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=not settings.is_production,
        log_level="info"
    )
