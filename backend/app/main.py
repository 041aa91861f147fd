"""Social Hub Backend - FastAPI Entry Point."""
import sys

# asyncpg is incompatible with Windows ProactorEventLoop (default on Windows).
# Must be set before any asyncio usage.
if sys.platform == "win32":
    import asyncio
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

import structlog
from fastapi import FastAPI

from app.config import Settings, settings as default_settings
from app.database import create_engine, create_session_factory
from app.integrations.ai.comment_scorer import build_comment_scorer
from app.integrations.ai.llm_client import LLMClient
from app.integrations.networks.registry import build_network_registry
from app.middleware.cors import setup_cors
from app.middleware.error_handler import setup_error_handlers
from app.middleware.logging_middleware import LoggingMiddleware
from app.api.v1 import comments as comments_router
from app.api.v1 import easy_reply as easy_reply_router
from app.api.v1 import stats as stats_router

logger = structlog.get_logger()


def configure_logging(level: str = "INFO", json_logs: bool = False) -> None:
    logging.basicConfig(level=level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger().setLevel(level.upper())
    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level.upper())),
        cache_logger_on_first_use=True,
    )


def init_sentry(settings: Settings) -> None:
    if not settings.SENTRY_DSN:
        return
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        integrations=[FastApiIntegration()],
        traces_sample_rate=0.1 if settings.APP_ENV == "production" else 1.0,
        environment=settings.APP_ENV,
    )


def create_app(settings: Settings = default_settings) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("startup", env=settings.APP_ENV)
        init_sentry(settings)

        engine = create_engine(settings)
        llm_client = LLMClient(settings)
        app.state.settings = settings
        app.state.engine = engine
        app.state.session_factory = create_session_factory(engine)
        app.state.llm_client = llm_client
        app.state.comment_scorer = build_comment_scorer(settings, llm_client)
        app.state.network_registry = build_network_registry(settings)
        try:
            yield
        finally:
            await engine.dispose()
            logger.info("shutdown")

    application = FastAPI(
        title="Social Hub API",
        description="Comment triage and decay-scheduled social statistics",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    # Reachable without the lifespan (tests override the other collaborators)
    application.state.settings = settings

    # Middleware (order matters: last added = first executed)
    setup_cors(application, settings)
    setup_error_handlers(application)
    application.add_middleware(LoggingMiddleware)

    # API Routers
    application.include_router(comments_router.router, prefix="/api/v1/comments", tags=["Comments"])
    application.include_router(easy_reply_router.router, prefix="/api/v1/easy-reply", tags=["Easy Reply"])
    application.include_router(stats_router.router, prefix="/api/v1/stats", tags=["Stats"])

    # Health check
    @application.get("/health", tags=["health"])
    async def health_check() -> dict[str, str]:
        return {"status": "ok"}

    return application


configure_logging(default_settings.LOG_LEVEL, json_logs=default_settings.APP_ENV == "production")
app = create_app()
