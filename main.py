from contextlib import asynccontextmanager

from fastapi import FastAPI

from notification_dispatch.infrastructure.database import engine, initialize_database
from notification_dispatch.interfaces.api.routes import register_routes


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create missing tables on startup and release the engine on shutdown."""

    initialize_database()
    yield
    engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(lifespan=lifespan, title="Notification dispatch")
    register_routes(app)
    return app


app = create_app()
