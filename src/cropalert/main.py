"""FastAPI application factory and lifespan management."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cropalert.config import settings
from cropalert.logging_config import configure_logging

# Configure logging at import time
configure_logging(log_level=settings.log_level, json_output=settings.json_logs)

logger = logging.getLogger(__name__)


def _connect_redis(url: str):
    """Return an asyncio Redis client, or None when fan-out is disabled or unavailable."""
    if not url:
        return None
    try:
        import redis.asyncio as aioredis
        return aioredis.from_url(url, decode_responses=True)
    except Exception:
        logger.warning("Redis not available, notification fan-out disabled")
        return None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application startup and shutdown resources."""
    from cropalert.db.engine import create_db_engine, create_session_factory, create_tables
    from cropalert.services.engine import build_engine

    db_engine = create_db_engine(settings.database_url)
    # Storage is one key/value table; create it on every start
    await create_tables(db_engine)
    session_factory = create_session_factory(db_engine)

    app.state.db_engine = db_engine
    app.state.db_session_factory = session_factory
    app.state.redis = _connect_redis(settings.redis_url)

    engine = build_engine(settings, session_factory, redis=app.state.redis)
    await engine.init(start_scheduler=settings.scheduler_enabled)
    app.state.engine = engine

    logger.info("CropAlert API started (db=%s)", "sqlite" if settings.is_sqlite else "external")
    yield

    # Shutdown
    await engine.shutdown()
    if app.state.redis:
        await app.state.redis.aclose()
    await db_engine.dispose()
    logger.info("CropAlert API shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="CropAlert API",
        version="0.1.0",
        description="Multi-channel alerting for farmers: weather, market prices, seasonal tips and government schemes.",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from cropalert.api.middleware.trace_id import TraceIdMiddleware
    app.add_middleware(TraceIdMiddleware)

    from cropalert.errors.handlers import register_exception_handlers
    register_exception_handlers(app)

    # Prometheus metrics (internal endpoint)
    try:
        from prometheus_fastapi_instrumentator import Instrumentator
        Instrumentator(
            should_group_status_codes=True,
            should_respect_env_var=False,
            excluded_handlers=["/api/v1/health.*", "/api/v1/stream.*", "/metrics"],
        ).instrument(app).expose(app, endpoint="/metrics", include_in_schema=False)
    except ImportError:
        logger.debug("prometheus-fastapi-instrumentator not installed, /metrics disabled")

    from cropalert.api.router import api_router
    app.include_router(api_router)

    return app


app = create_app()
