"""
FastAPI application entry point.
"""

from fastapi import FastAPI

from app.config import get_settings
from app.middleware.logging import RequestLoggingMiddleware
from app.api import interactions, jobs, monitor
from app.utils.logging import setup_logging, get_logger

settings = get_settings()

# Configure structured logging
setup_logging(settings.log_level.upper())

logger = get_logger(__name__)

# Create FastAPI application
app = FastAPI(
    title="Function Error Monitor",
    description="Tracks failed scheduled functions and remediates them from Discord",
    version="0.1.0"
)

# Add request logging middleware
app.add_middleware(RequestLoggingMiddleware)


@app.get("/health")
async def health_check():
    """Health check endpoint for container orchestration."""
    return {"status": "healthy", "version": "0.1.0"}


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Function Error Monitor API",
        "version": "0.1.0",
        "docs": "/docs"
    }


# Include API routers
app.include_router(interactions.router)
app.include_router(monitor.router)
app.include_router(jobs.router)


@app.on_event("startup")
async def startup_event():
    """Report configuration gaps on application startup."""
    logger.info(f"Starting Function Error Monitor for project {settings.project_name}")

    if not settings.store_configured:
        logger.warning("Record store credentials are missing; error filing is disabled")
    if not settings.discord_public_key:
        logger.warning("DISCORD_PUBLIC_KEY is missing; interactions will be rejected")
    if not settings.chat_configured:
        logger.warning("Discord bot token or channel is missing; announcements are disabled")
    if not settings.job_invoker_configured:
        logger.warning("Function invocation is not configured; retries will fail")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
