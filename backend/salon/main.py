"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from salon.config import get_settings
from salon.infrastructure.dependencies import build_mirror, build_remote_store, get_sse_manager
from salon.infrastructure.logging.log_config import setup_logging
from salon.presentation.api.router import router as api_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan — connect the store, load the mirror, wire SSE."""
    settings = get_settings()
    setup_logging(settings)

    # 1. Connect the remote store (Supabase or self-hosted database)
    store = await build_remote_store(settings)

    # 2. Build the mirror and forward its changes to SSE clients
    sse = get_sse_manager()
    mirror = build_mirror(store, settings)
    mirror.add_listener(sse.on_mirror_change)
    app.state.mirror = mirror

    try:
        # 3. Subscribe to the change feeds and read every table
        await mirror.load()
        logger.info(
            "Mirror ready (%s store, state=%s)", store.backend_name, mirror.state.value
        )
        yield
    finally:
        # Shutdown
        app.state.mirror = None
        await mirror.close()
        await store.close()
        await sse.shutdown()


def create_app() -> FastAPI:
    """Factory function that builds and configures the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Mount API routes
    app.include_router(api_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "salon.main:app",
        host="0.0.0.0",
        port=8020,
        reload=True,
    )
