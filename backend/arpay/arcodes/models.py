"""
AR code records.

An ARCode has two independent phases: the authoritative local status
(Active -> Scanned/Expired -> Removed, never backwards) and the advisory
remote persistence state, updated once per remote attempt.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, Mapping, Optional

from ..payment.models import PaymentRequest


class CodeStatus(str, Enum):
    """Display status of an AR code."""

    ACTIVE = "active"
    SCANNED = "scanned"
    EXPIRED = "expired"
    REMOVED = "removed"


class PersistenceState(str, Enum):
    """Outcome of the latest remote persistence attempt."""

    LOCAL_ONLY = "local_only"
    PERSIST_PENDING = "persist_pending"
    PERSISTED = "persisted"
    PERSIST_FAILED = "persist_failed"


ALLOWED_TRANSITIONS: Mapping[CodeStatus, FrozenSet[CodeStatus]] = {
    CodeStatus.ACTIVE: frozenset({CodeStatus.SCANNED, CodeStatus.EXPIRED}),
    CodeStatus.SCANNED: frozenset({CodeStatus.REMOVED}),
    CodeStatus.EXPIRED: frozenset({CodeStatus.REMOVED}),
    CodeStatus.REMOVED: frozenset(),
}


@dataclass(frozen=True)
class Anchor:
    """Position in the local AR frame, in meters."""

    x: float = 0.0
    y: float = 1.0
    z: float = -2.0

    def as_tuple(self):
        return (self.x, self.y, self.z)


@dataclass
class ARCode:
    """A payment code displayed at a 3D anchor."""

    id: str
    payload: str
    anchor: Anchor
    linked_payment_request: PaymentRequest
    created_at: datetime
    expires_at: datetime
    owner_agent_id: Optional[str] = None
    size_hint: float = 1.5
    status: CodeStatus = CodeStatus.ACTIVE
    persistence_state: PersistenceState = PersistenceState.LOCAL_ONLY
    scanned_at: Optional[datetime] = None
    expired_at: Optional[datetime] = None
    removed_at: Optional[datetime] = None
    remote_id: Optional[str] = None
    persistence_error: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_terminal(self) -> bool:
        return self.status != CodeStatus.ACTIVE

    @property
    def terminal_at(self) -> Optional[datetime]:
        """When the code left Active."""
        if self.status == CodeStatus.ACTIVE:
            return None
        return self.scanned_at or self.expired_at

    def to_record(self) -> Dict[str, Any]:
        """Row shape written to the remote store."""
        x, y, z = self.anchor.as_tuple()
        return {
            "transaction_id": self.id,
            "qr_code_data": self.payload,
            "position_x": x,
            "position_y": y,
            "position_z": z,
            "scale": self.size_hint,
            "status": self.status.value,
            "agent_id": self.owner_agent_id,
            "expiration_time": self.expires_at.isoformat(),
            "created_at": self.created_at.isoformat(),
        }

    def to_dict(self) -> Dict[str, Any]:
        """Plain dict view for API responses."""
        return {
            "id": self.id,
            "payload": self.payload,
            "anchor": {"x": self.anchor.x, "y": self.anchor.y, "z": self.anchor.z},
            "size_hint": self.size_hint,
            "status": self.status.value,
            "persistence_state": self.persistence_state.value,
            "owner_agent_id": self.owner_agent_id,
            "created_at": self.created_at.isoformat(),
            "expires_at": self.expires_at.isoformat(),
            "scanned_at": self.scanned_at.isoformat() if self.scanned_at else None,
            "remote_id": self.remote_id,
            "persistence_error": self.persistence_error,
            "payment_request": self.linked_payment_request.to_dict(),
            "metadata": dict(self.metadata),
        }


@dataclass(frozen=True)
class StatusChange:
    """Event published to subscribers on every status transition."""

    code_id: str
    previous: Optional[CodeStatus]
    current: CodeStatus
    at: datetime


@dataclass(frozen=True)
class ScanEvent:
    """Scan confirmation delivered by a scanning surface."""

    code_id: str
    scanned_at: Optional[datetime] = None
