from fastapi import FastAPI

from .messages import router as messages_router


def register_routes(app: FastAPI) -> None:
    """Register every API router on the FastAPI application."""

    app.include_router(messages_router)
