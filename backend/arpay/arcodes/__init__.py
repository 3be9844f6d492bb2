"""
AR Codes Module - payment codes anchored in AR space.

Owns the code lifecycle (Active -> Scanned/Expired -> Removed) and its
best-effort mirroring to a remote store.
"""

from .gateway import HttpPersistenceGateway, InMemoryPersistenceGateway, PersistenceGateway
from .manager import ARCodeLifecycleManager
from .models import (
    ALLOWED_TRANSITIONS,
    Anchor,
    ARCode,
    CodeStatus,
    PersistenceState,
    ScanEvent,
    StatusChange,
)

__all__ = [
    "ARCodeLifecycleManager",
    "PersistenceGateway",
    "HttpPersistenceGateway",
    "InMemoryPersistenceGateway",
    "ALLOWED_TRANSITIONS",
    "Anchor",
    "ARCode",
    "CodeStatus",
    "PersistenceState",
    "ScanEvent",
    "StatusChange",
]
