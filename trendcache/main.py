from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn
from contextlib import asynccontextmanager
import logging

# Relative imports: run as ``uvicorn trendcache.main:app`` or
# ``python -m trendcache.main`` so the package namespace is available.
from .api.routes import router as api_router
from .core.config import settings
from .services.trends_service import TrendsService

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the trends service, start background refreshes, close on shutdown."""
    logger.info("🚀 Starting up the application...")
    service = TrendsService.from_settings(settings)
    app.state.trends_service = service
    service.start()
    try:
        yield
    finally:
        # Cancel the scheduler and close adapter HTTP sessions to avoid
        # unclosed aiohttp client warnings.
        try:
            await service.close()
        except Exception as e:
            logger.warning(f"Error closing trends service: {e}")
        logger.info("🛑 Shutting down the application...")


# Initialize FastAPI app
app = FastAPI(
    title="TrendCache - Trends Aggregation Service",
    description="Aggregates, ranks and caches trending business and technology news",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Health check endpoint
@app.get("/health")
async def health_check():
    return {"status": "ok", "message": "Service is healthy"}

# Mount all API routes
app.include_router(api_router, prefix="/api")

# Dev entry point
if __name__ == "__main__":
    uvicorn.run(
        "trendcache.main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=settings.ENVIRONMENT == "development"
    )
