# ========================================
# jobboard/main.py - application factory
# ========================================

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from jobboard.config import Settings, load_settings
from jobboard.database import Database
from jobboard.errors import register_error_handlers
from jobboard.routes.job import router as job_router
from jobboard.routes.user import router as user_router
from jobboard.utils.email import Mailer
from jobboard.utils.security import PasswordHasher, TokenService

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s'


def configure_logging(level: str):
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT,
                        datefmt='%Y-%m-%d %H:%M:%S')


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Connect to MongoDB on startup, close it on shutdown."""
    await app.state.db.connect()
    app.state.mailer.start()
    logger.info("JobBoard API started (database=%s)", app.state.settings.database_name)
    yield
    await app.state.db.close()
    app.state.mailer.shutdown()


def create_app(settings: Optional[Settings] = None, client=None) -> FastAPI:
    """
    Build the API. ``settings`` defaults to the environment; ``client`` lets
    callers supply an already-built Mongo client (tests pass an in-memory one).
    """
    if settings is None:
        settings = load_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="JobBoard API",
        description="Job board backend: company approval, employees, candidates and job postings",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.db = Database(settings, client=client)
    app.state.tokens = TokenService(settings)
    app.state.hasher = PasswordHasher()
    app.state.mailer = Mailer(settings)

    # ===========================
    # CORS MIDDLEWARE
    # ===========================
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    app.include_router(user_router)
    app.include_router(job_router)

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "version": "1.0.0"}

    return app


def run():
    import uvicorn

    settings = load_settings()
    uvicorn.run(create_app(settings), host="0.0.0.0", port=5000)
