"""
FastAPI application entry point for PDF Keyword Highlighter.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

# Configure logging
structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.dev.ConsoleRenderer()
    ]
)

logger = structlog.get_logger()

from config import settings
from api.routes import router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    logger.info(
        "Starting PDF Keyword Highlighter",
        version=settings.APP_VERSION,
        match_mode=settings.MATCH_MODE,
        default_zoom=settings.DEFAULT_ZOOM,
    )
    logger.info(
        "OCR fallback configured",
        ocr_engine=settings.OCR_ENGINE,
        ocr_language=settings.OCR_LANGUAGE,
        convert_image_url=settings.CONVERT_IMAGE_URL,
    )

    issues = settings.validate()
    for issue in issues:
        logger.warning("Configuration issue", issue=issue)

    yield

    logger.info("Shutting down PDF Keyword Highlighter")


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Keyword search and highlight regions for PDF documents",
    lifespan=lifespan
)

# Include routes
app.include_router(router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
