from .remote_store import ChangeHandler, DisconnectHandler, RemoteStore, Subscription

__all__ = [
    "ChangeHandler",
    "DisconnectHandler",
    "RemoteStore",
    "Subscription",
]
