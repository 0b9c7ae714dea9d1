"""NotesHelp - FastAPI Application."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from src.api.errors import register_exception_handlers
from src.api.routes import auth, documents, health, subjects
from src.cli.create_admin import create_first_admin
from src.config import Settings, get_settings
from src.logging_config import setup_logging
from src.storage.database import create_engine, create_session_factory, init_db
from src.storage.file_storage import LOCAL_FILES_PREFIX, build_storage

logger = logging.getLogger(__name__)


async def ensure_admin_exists(app: FastAPI, settings: Settings) -> None:
    """Create the configured admin if ADMIN_PASSWORD is set."""
    if not settings.admin_password:
        logger.info("ADMIN_PASSWORD not set, skipping admin creation")
        return

    async with app.state.session_factory() as db:
        created, message = await create_first_admin(
            db, settings.admin_email, settings.admin_name, settings.admin_password
        )
    if created:
        logger.info("Created admin user: %s", settings.admin_email)
    else:
        logger.info(message)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the database engine and storage client for the process lifetime."""
    settings = get_settings()
    setup_logging(settings.log_level)

    engine = create_engine(settings.database_url)
    app.state.session_factory = create_session_factory(engine)
    app.state.storage = build_storage(settings)

    await init_db(engine)
    await ensure_admin_exists(app, settings)
    logger.info("Started with %s storage", settings.storage_backend)
    yield
    # Shutdown
    await engine.dispose()


settings = get_settings()

app = FastAPI(
    title=settings.api_title,
    description="Share and moderate study notes and past papers",
    version=settings.api_version,
    lifespan=lifespan,
)

# CORS configuration for frontend
ALLOWED_ORIGINS = [
    settings.frontend_url,
    "http://localhost:5173",
    "http://localhost:3000",
]
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(health.router, tags=["health"])
app.include_router(auth.router)
app.include_router(subjects.router)
app.include_router(documents.router)

# Local storage serves uploaded files itself
if settings.storage_backend == "local":
    app.mount(
        LOCAL_FILES_PREFIX,
        StaticFiles(directory=settings.upload_dir, check_dir=False),
        name="files",
    )
