import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import Depends, FastAPI
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.middleware.cors import CORSMiddleware

from learnhub.api.v1.router import api_router
from learnhub.clients.redis_client import RedisClient
from learnhub.config import get_settings
from learnhub.db.session import init_db, close_db, database_available
from learnhub.dependencies.db import get_database
from learnhub.dependencies.services import get_redis_client
from learnhub.schemas.generic import HealthResponse
from learnhub.utils.exception_handlers import register_exception_handlers
from learnhub.utils.log import setup_logging

setup_logging()
logger = logging.getLogger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI) -> AsyncGenerator:
    """Lifecycle events"""
    # STARTUP
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    await init_db()

    redis_client = await get_redis_client()
    if redis_client.is_available() and not await redis_client.ping():
        logger.warning("Redis ping failed, locks fall back to this process")

    yield

    # SHUTDOWN
    logger.info(f"Shutting down {settings.app_name}")
    await redis_client.disconnect()
    await close_db()


# Create app
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Course authoring, quizzes and learner progress",
    lifespan=lifespan,
    docs_url="/docs" if settings.environment == "development" else None,
    redoc_url="/redoc" if settings.environment == "development" else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register global exception handlers
register_exception_handlers(app)


@app.get("/health", response_model=HealthResponse)
async def health_check(
        session: AsyncSession = Depends(get_database),
        redis_client: RedisClient = Depends(get_redis_client),
) -> HealthResponse:
    database = await database_available(session)
    return HealthResponse(
        status="healthy" if database else "degraded",
        service=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
        database=database,
        distributed_locks=redis_client.is_available(),
    )


# Include routers
app.include_router(api_router, prefix="/api/v1")
