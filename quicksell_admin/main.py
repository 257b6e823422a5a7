from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# IMPORTANT:
# This imports ALL models so SQLAlchemy registers tables + FKs correctly
import quicksell_admin.models  # noqa: F401

from quicksell_admin.core.config import settings
from quicksell_admin.core.db import dispose_engine, init_engine
from quicksell_admin.core.handlers import register_exception_handlers
from quicksell_admin.core.log_config import configure_logging

# Routers
from quicksell_admin.routers.admin_dashboard import router as admin_dashboard_router
from quicksell_admin.routers.admin_users import router as admin_users_router
from quicksell_admin.routers.admin_listings import router as admin_listings_router
from quicksell_admin.routers.admin_system import router as admin_system_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_engine()
    try:
        yield
    finally:
        await dispose_engine()


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(title="QuickSell Admin API", lifespan=lifespan)

    # CORS for the dashboard SPA dev server; set CORS_ORIGINS in prod
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Dashboard & metrics
    app.include_router(admin_dashboard_router)

    # Users & listings management
    app.include_router(admin_users_router)
    app.include_router(admin_listings_router)

    # System, analytics, activity
    app.include_router(admin_system_router)

    @app.get("/health")
    async def health():
        return {"success": True, "status": "ok"}

    return app


app = create_app()
