"""FastAPI application entry point with lifespan management."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.auth import router as auth_router
from src.api.documents import router as documents_router
from src.api.health import router as health_router
from src.api.middleware import RequestContextMiddleware
from src.core.config import Settings, settings
from src.core.logging import configure_logging, get_logger
from src.core.sentry import init_sentry
from src.core.sessions import SessionStore
from src.documents.generator import build_generator
from src.documents.history import HistoryStore

logger = get_logger(__name__)


def init_app_state(app: FastAPI, config: Settings) -> None:
    """Attach document services to app state.

    Tests call this directly with their own settings instead of running
    the lifespan.
    """
    app.state.history = HistoryStore(
        config.history_storage_url, namespace=config.history_namespace
    )
    app.state.generator = build_generator(config, history=app.state.history)
    app.state.sessions = SessionStore()
    app.state.document_price = config.document_price
    app.state.payment_delay = config.payment_delay_seconds


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle resources.

    Startup:
        - Configure structured logging
        - Initialize Sentry error tracking
        - Build template registry, generator, history store and sessions
    """
    configure_logging()
    logger.info("Starting application", environment=settings.environment)

    init_sentry()

    init_app_state(app, settings)
    logger.info(
        "Document services ready",
        templates=len(app.state.generator.registry),
        history_storage=settings.history_storage_url,
    )

    yield

    logger.info("Shutting down application")


app = FastAPI(
    title="BuellDocs",
    description="Novelty paystub, W-2 and bank statement generator",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestContextMiddleware)

app.include_router(health_router)
app.include_router(auth_router)
app.include_router(documents_router)
