import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv


# Load .env FIRST before any other imports that might need env vars
PROJECT_DIR = Path(__file__).parent.parent
load_dotenv(PROJECT_DIR / ".env")

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from .admin.router import router as admin_router
from .config.logging import setup_logging
from .config.settings import Settings, get_settings
from .courses.router import router as courses_router
from .database.client import close_service_client
from .middleware.error_handlers import register_exception_handlers
from .middleware.security import SimpleSecurityMiddleware, limiter
from .student.router import router as student_router


logger = logging.getLogger(__name__)


def _register_routers(app: FastAPI) -> None:
    app.include_router(courses_router)  # Catalog, enrollment, lesson progress
    app.include_router(student_router)
    app.include_router(admin_router)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Log the target project on startup and release the shared client on shutdown."""
    settings = get_settings()
    if not settings.SUPABASE_SECRET_KEY:
        logger.warning("SUPABASE_SECRET_KEY is not set - token checks use the publishable key")
    logger.info(f"Starting in {settings.ENVIRONMENT} mode against {settings.SUPABASE_URL}")

    yield

    await close_service_client()
    logger.info("Shutdown complete")


def _add_middleware(app: FastAPI, settings: Settings) -> None:
    # Note: When allow_credentials=True, allow_origins cannot be ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(SimpleSecurityMiddleware)


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    try:
        settings = get_settings()
    except ValueError:
        logger.exception("Failed to load settings")
        raise

    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="Coursemart API",
        description="Course enrollment and lesson progress tracking",
        version="0.1.0",
        debug=settings.DEBUG,
        lifespan=None if settings.is_test else lifespan,
    )
    app.state.limiter = limiter

    _add_middleware(app, settings)
    register_exception_handlers(app)

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "healthy"}

    _register_routers(app)
    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    from coursemart.config import env

    uvicorn.run(app, host=env("API_HOST", "127.0.0.1"), port=int(env("API_PORT", "8080")))
