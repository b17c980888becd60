import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from orgcms.config import settings
from orgcms.database import Base, engine
from orgcms.exception_handlers import register_exception_handlers
from orgcms.middleware.logging import StructuredLoggingMiddleware, setup_structured_logging
from orgcms.middleware.rate_limit import configure_rate_limiting
from orgcms.routes import auth, cron, organizations, revisions, roles, scheduling
from orgcms.routes.content import pages_router, posts_router, products_router
from orgcms.scheduler import shutdown_scheduler, start_scheduler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Tasks to run at application startup and shutdown."""
    logger.info("Starting up the application...")
    if settings.debug:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created (if not existing).")

    start_scheduler()
    yield

    logger.info("Shutting down the application...")
    shutdown_scheduler()
    await engine.dispose()


def create_app() -> FastAPI:
    """Create the FastAPI application."""
    setup_structured_logging(log_level=settings.log_level, json_format=settings.log_json)

    app = FastAPI(
        title=settings.app_name,
        description="Multi-tenant CMS backend: revisions, scheduled publishing and role-based access",
        debug=settings.debug,
        version=settings.app_version,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(StructuredLoggingMiddleware)

    register_exception_handlers(app)
    configure_rate_limiting(app)

    app.include_router(auth.router, prefix="/auth", tags=["Auth"])
    app.include_router(cron.router, prefix="/api/cron")
    app.include_router(revisions.router, prefix="/api/admin")
    app.include_router(scheduling.router, prefix="/api/admin")
    app.include_router(roles.router, prefix="/api/admin")
    app.include_router(organizations.router, prefix="/api/admin")
    app.include_router(posts_router, prefix="/api/admin/posts")
    app.include_router(pages_router, prefix="/api/admin/pages")
    app.include_router(products_router, prefix="/api/admin/products")

    @app.get("/health", tags=["Root"])
    async def health():
        return {"status": "ok", "version": settings.app_version}

    if settings.debug:
        logger.info(f"Running in {settings.environment} mode")
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=settings.debug)
