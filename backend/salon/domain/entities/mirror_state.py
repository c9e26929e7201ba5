"""Lifecycle and policy enums for the local mirror."""

from enum import Enum


class MirrorState(str, Enum):
    """Lifecycle states of a LocalMirror instance."""

    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    DEGRADED = "degraded"  # a change feed is down, snapshot may be stale
    CLOSED = "closed"


class WriteStrategy(str, Enum):
    """How an acknowledged write becomes visible in the mirror."""

    DIRECT = "direct"  # fold the store's response in immediately
    FEED = "feed"      # wait for the change-feed echo, fall back to the response


class OrphanPolicy(str, Enum):
    """What happens to appointments when their client or service is deleted."""

    KEEP = "keep"
    CASCADE = "cascade"
