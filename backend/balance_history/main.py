"""Balance History API - Main Application"""
from datetime import datetime, timezone
import structlog
from contextlib import asynccontextmanager
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from balance_history.config import get_settings
from balance_history.api.v1.router import api_router
from balance_history.models.database import init_db, close_db, get_db, ping_db

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.dev.ConsoleRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info("Starting Balance History API", version=settings.app_version)

    await init_db()
    logger.info("Database initialized")

    yield

    await close_db()
    logger.info("Balance History API shutdown complete")


def create_app() -> FastAPI:
    """Create FastAPI application"""
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Balance charts and CSV exports for NEAR treasury accounts",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix=settings.api_prefix)

    @app.get("/health")
    async def health_check(db: AsyncSession = Depends(get_db)):
        """Health check endpoint, including database connectivity"""
        timestamp = datetime.now(timezone.utc).isoformat()
        try:
            await ping_db(db)
        except Exception as e:
            logger.error("Database health check failed", error=str(e))
            return JSONResponse(
                status_code=503,
                content={
                    "status": "unhealthy",
                    "version": settings.app_version,
                    "timestamp": timestamp,
                    "database": {"connected": False, "error": "Database connection failed"},
                },
            )

        return {
            "status": "healthy",
            "version": settings.app_version,
            "timestamp": timestamp,
            "database": {"connected": True},
        }

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "balance_history.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
    )
