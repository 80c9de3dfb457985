"""
Hierophant AI - Main Application Entry Point

Single chat endpoint in front of several interchangeable LLM backends.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hierophant import __version__
from hierophant.core.config import get_settings
from hierophant.core.logger import logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    # Startup
    settings = get_settings()
    logger.info(f"Starting Hierophant AI in {settings.ENVIRONMENT} mode...")

    from hierophant.infrastructure.local.database import get_engine, init_db

    await init_db()

    yield

    # Shutdown
    logger.info("Shutting down Hierophant AI...")
    await get_engine().dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Hierophant AI",
        description="Multi-provider chat backend",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    from hierophant.api import chat, models

    app.include_router(chat.router, prefix="/api/chat", tags=["chat"])
    app.include_router(models.router, prefix="/api/models", tags=["models"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "environment": settings.ENVIRONMENT,
            "version": __version__,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
