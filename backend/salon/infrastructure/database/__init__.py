from .base import Base
from .change_broadcaster import ChangeBroadcaster, LocalSubscription
from .session import create_engine, create_session_factory, get_async_url
from .sqlalchemy_remote_store import SQLAlchemyRemoteStore, create_tables

__all__ = [
    "Base",
    "ChangeBroadcaster",
    "LocalSubscription",
    "create_engine",
    "create_session_factory",
    "get_async_url",
    "SQLAlchemyRemoteStore",
    "create_tables",
]
