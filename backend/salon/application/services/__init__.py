from .local_mirror import LocalMirror, MirrorListener, merge_change
from .salon_service import SalonService
from .sse_manager import SSEManager

__all__ = [
    "LocalMirror",
    "MirrorListener",
    "merge_change",
    "SalonService",
    "SSEManager",
]
