"""Dependency wiring — builds the remote store and exposes FastAPI dependencies."""

import logging
from functools import lru_cache

from fastapi import HTTPException, Request, status

from salon.application.interfaces import RemoteStore
from salon.application.services import LocalMirror, SalonService, SSEManager
from salon.config import Settings, get_settings
from salon.infrastructure.database import (
    SQLAlchemyRemoteStore,
    create_engine,
    create_session_factory,
    create_tables,
)

logger = logging.getLogger(__name__)


async def build_remote_store(settings: Settings | None = None) -> RemoteStore:
    """Create the configured RemoteStore adapter.

    ``supabase`` connects to the hosted backend; ``database`` runs the
    self-hosted SQLAlchemy store and creates its tables if needed.
    """
    settings = settings or get_settings()

    if settings.remote_store == "supabase":
        from salon.infrastructure.supabase import SupabaseRemoteStore

        logger.info("Using Supabase remote store at %s", settings.supabase_url)
        return await SupabaseRemoteStore.connect(
            settings.supabase_url,
            settings.supabase_key,
            schema=settings.supabase_schema,
        )

    engine = create_engine(settings.database_url)
    await create_tables(engine)
    logger.info("Using database remote store (%s)", engine.url.render_as_string(hide_password=True))
    return SQLAlchemyRemoteStore(create_session_factory(engine), engine=engine)


def build_mirror(store: RemoteStore, settings: Settings | None = None) -> LocalMirror:
    """Create a LocalMirror configured from settings."""
    settings = settings or get_settings()
    return LocalMirror(
        store,
        write_strategy=settings.write_strategy,
        orphan_policy=settings.orphan_policy,
        echo_timeout=settings.feed_echo_timeout,
        resubscribe_attempts=settings.feed_resubscribe_attempts,
        resubscribe_delay=settings.feed_resubscribe_delay,
        resync_on_reconnect=settings.resync_on_reconnect,
    )


@lru_cache
def get_sse_manager() -> SSEManager:
    """Process-wide SSE broadcaster."""
    return SSEManager()


def get_mirror(request: Request) -> LocalMirror:
    """Provides the LocalMirror created during application startup."""
    mirror: LocalMirror | None = getattr(request.app.state, "mirror", None)
    if mirror is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Local mirror is not running",
        )
    return mirror


def get_salon_service(request: Request) -> SalonService:
    """Provides a SalonService bound to the running mirror."""
    return SalonService(get_mirror(request))
