from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
import time
import logging

from .api.v1.appointments import router as appointments_router
from .api.v1.auth import router as auth_router
from .api.v1.care import router as care_router
from .api.v1.dashboard import router as dashboard_router
from .api.v1.notifications import router as notifications_router
from .api.v1.people import router as people_router
from .api.v1.profile import router as profile_router
from .core.config import settings
from .core.exceptions import ClientValidationError, PortalError, SlotUnavailableError

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    description="Practice portal for doctors, secretaries and patients",
    openapi_url="/api/v1/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Middleware setup
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Only add TrustedHostMiddleware in production, not in testing
if not settings.TESTING:
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=["localhost", "127.0.0.1", "*.localhost", "testserver"]
    )

# Custom middleware for request logging and timing
@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)

    # Log request
    logger.info(
        f"{request.method} {request.url.path} - "
        f"Status: {response.status_code} - "
        f"Time: {process_time:.4f}s"
    )

    return response

# Exception handlers
@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError):
    content = {"error": exc.error, "message": exc.message}
    if isinstance(exc, ClientValidationError):
        content["field"] = exc.field
    if isinstance(exc, SlotUnavailableError):
        content["retryable"] = exc.retryable
    return JSONResponse(status_code=exc.status_code, content=content)

@app.exception_handler(404)
async def not_found_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=404,
        content={
            "error": "Not Found",
            "message": getattr(exc, "detail", None) or "The requested resource was not found",
            "path": str(request.url.path)
        }
    )

@app.exception_handler(Exception)
async def internal_error_handler(request: Request, exc: Exception):
    # No retry here; the client is told to reload
    logger.exception(f"Internal server error: {str(exc)}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal Server Error",
            "message": "Une erreur inattendue est survenue. Veuillez recharger la page.",
            "action": "reload"
        }
    )

# Include routers
app.include_router(auth_router, prefix="/api/v1")
app.include_router(profile_router, prefix="/api/v1")
app.include_router(dashboard_router, prefix="/api/v1")
app.include_router(appointments_router, prefix="/api/v1")
app.include_router(care_router, prefix="/api/v1")
app.include_router(people_router, prefix="/api/v1")
app.include_router(notifications_router, prefix="/api/v1")

# Startup and shutdown events
@app.on_event("startup")
async def startup_event():
    """Initialize application on startup."""
    logger.info("Starting Cabinet Portal...")
    logger.info(f"Practice backend: {settings.API_BASE_URL}")
    logger.info(f"Notifications: {settings.API_BASE_URL}{settings.NOTIFICATIONS_PATH}")
    logger.info("Application startup complete")

@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on application shutdown."""
    logger.info("Shutting down Cabinet Portal...")

# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": time.time(),
        "version": settings.VERSION
    }

# Root endpoint
@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "message": "Welcome to the Cabinet Portal API",
        "version": settings.VERSION,
        "docs": "/docs",
        "redoc": "/redoc",
        "health": "/health"
    }

# API Info endpoint
@app.get("/api/v1/info")
async def api_info():
    """API information endpoint."""
    return {
        "name": settings.APP_NAME,
        "version": settings.VERSION,
        "endpoints": {
            "authentication": "/api/v1/auth",
            "profile": "/api/v1/profile",
            "dashboard": "/api/v1/dashboard",
            "appointments": "/api/v1/appointments",
            "notifications": "/api/v1/notifications",
            "docs": "/docs",
            "openapi": "/api/v1/openapi.json"
        }
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "cabinet.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level="info"
    )
