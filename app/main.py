"""Main FastAPI application"""
from fastapi import FastAPI
from app.config import get_settings
from app.middleware.cors import setup_cors
from app.middleware.error_handler import ErrorHandlerMiddleware
from app.routers import submissions, tools
import logging

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Build the application with its middleware and routers"""
    settings = get_settings()

    app = FastAPI(
        title="AI Tools API",
        description="AI marketing tools: dynamic forms, webhook delivery and results history",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc"
    )

    setup_cors(app, settings)
    app.add_middleware(ErrorHandlerMiddleware, debug=settings.environment == "development")

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "healthy", "service": "ai-tools-backend"}

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "message": "AI Tools Backend API",
            "version": "1.0.0",
            "docs": "/docs"
        }

    app.include_router(tools.router, prefix="/api/tools", tags=["Tools"])
    app.include_router(submissions.router, prefix="/api/submissions", tags=["Submissions"])

    logger.info(f"Application configured for {settings.environment}")
    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
