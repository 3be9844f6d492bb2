"""
ARCodeLifecycleManager - owns every AR payment code and its state machine.

Local status is authoritative and changes synchronously; remote persistence
runs as fire-and-forget tasks on the running event loop and only ever
updates ``persistence_state``. A gateway failure is logged and recorded,
never surfaced to the caller and never reverts a local transition.
"""

import asyncio
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Set, Union

from ..errors import BuildError, CodeNotFoundError, PersistenceError
from ..payment.builder import PaymentDescriptorBuilder
from ..payment.models import PaymentRequest
from .gateway import PersistenceGateway
from .models import (
    ALLOWED_TRANSITIONS,
    Anchor,
    ARCode,
    CodeStatus,
    PersistenceState,
    ScanEvent,
    StatusChange,
)

logger = logging.getLogger(__name__)

DEFAULT_TTL_MS = 300_000
DEFAULT_TICK_INTERVAL_S = 1.0
DEFAULT_REMOVAL_DELAY_S = 2.0
DEFAULT_HISTORY_LIMIT = 50
HISTORY_TRIM = 10
DEFAULT_SIZE_HINT = 1.5
SUBSCRIBER_QUEUE_SIZE = 100


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_code_id() -> str:
    return f"arqr_{uuid.uuid4().hex}"


class ARCodeLifecycleManager:
    """Creates AR codes and drives them Active -> Scanned/Expired -> Removed."""

    def __init__(
        self,
        builder: PaymentDescriptorBuilder,
        gateway: Optional[PersistenceGateway] = None,
        clock: Optional[Callable[[], datetime]] = None,
        default_ttl_ms: int = DEFAULT_TTL_MS,
        tick_interval_s: float = DEFAULT_TICK_INTERVAL_S,
        removal_delay_s: float = DEFAULT_REMOVAL_DELAY_S,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        """Initialize the manager.

        Args:
            builder: Descriptor builder used to render payloads
            gateway: Optional remote store; None keeps every code local_only
            clock: Returns the current aware datetime (injectable for tests)
            default_ttl_ms: TTL applied when ``create`` is given none
            tick_interval_s: Expiry tick period, at most one second
            removal_delay_s: Retention of scanned/expired codes before removal
            history_limit: Removed codes kept for lookups
            id_factory: Returns new unique code ids
        """
        if default_ttl_ms <= 0:
            raise ValueError("default_ttl_ms must be positive")
        if not 0 < tick_interval_s <= 1.0:
            raise ValueError("tick_interval_s must be in (0, 1]")
        if removal_delay_s < 0:
            raise ValueError("removal_delay_s cannot be negative")
        if history_limit < 0:
            raise ValueError("history_limit cannot be negative")

        self.builder = builder
        self.gateway = gateway
        self.clock = clock or utc_now
        self.default_ttl_ms = default_ttl_ms
        self.tick_interval_s = tick_interval_s
        self.removal_delay = timedelta(seconds=removal_delay_s)
        self.history_limit = history_limit
        self.id_factory = id_factory or new_code_id

        self._codes: Dict[str, ARCode] = {}
        self._history: List[ARCode] = []
        self._issued = 0
        self._persist_tasks: Dict[str, asyncio.Task] = {}
        self._background: Set[asyncio.Task] = set()
        self._subscribers: List[asyncio.Queue] = []
        self._tick_task: Optional[asyncio.Task] = None

    @classmethod
    def from_settings(cls, builder, settings, gateway=None, clock=None) -> "ARCodeLifecycleManager":
        return cls(
            builder,
            gateway=gateway,
            clock=clock,
            default_ttl_ms=settings.code_default_ttl_ms,
            tick_interval_s=settings.code_tick_interval_s,
            removal_delay_s=settings.code_removal_delay_s,
            history_limit=settings.code_history_limit,
        )

    # ------------------------------------------------------------------
    # Creation and persistence
    # ------------------------------------------------------------------

    def create(
        self,
        request: PaymentRequest,
        anchor: Optional[Anchor] = None,
        ttl_ms: Optional[int] = None,
        *,
        owner_agent_id: Optional[str] = None,
        size_hint: float = DEFAULT_SIZE_HINT,
        metadata: Optional[dict] = None,
    ) -> ARCode:
        """
        Register a new Active code for ``request``.

        The code is queryable as Active before this returns; the single
        remote persistence attempt runs afterwards on the event loop.

        Raises:
            BuildError: If the payment descriptor cannot be built
            ValueError: If ``ttl_ms`` is not positive
        """
        ttl = self.default_ttl_ms if ttl_ms is None else ttl_ms
        if ttl <= 0:
            raise ValueError(f"ttl_ms must be positive, got {ttl}")

        payload = self.builder.build(request)
        if isinstance(payload, BuildError):
            raise payload

        code_id = self.id_factory()
        if code_id in self._codes or any(c.id == code_id for c in self._history):
            raise ValueError(f"Duplicate AR code id: {code_id}")

        now = self.clock()
        code = ARCode(
            id=code_id,
            payload=payload,
            anchor=anchor or Anchor(),
            linked_payment_request=request,
            created_at=now,
            expires_at=now + timedelta(milliseconds=ttl),
            owner_agent_id=owner_agent_id,
            size_hint=size_hint,
            metadata=dict(metadata or {}),
        )
        self._codes[code_id] = code
        self._issued += 1
        self._publish(StatusChange(code_id, None, CodeStatus.ACTIVE, now))
        logger.info(
            f"AR code {code_id} active: {request.amount} {request.asset_symbol} "
            f"on {request.family_value}:{request.chain_id}, expires {code.expires_at.isoformat()}"
        )

        self._schedule_persist(code)
        return code

    def _spawn(self, coro) -> Optional[asyncio.Task]:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            coro.close()
            return None
        task = loop.create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    def _schedule_persist(self, code: ARCode) -> None:
        if self.gateway is None:
            return
        code.persistence_state = PersistenceState.PERSIST_PENDING
        task = self._spawn(self._persist(code))
        if task is None:
            code.persistence_state = PersistenceState.LOCAL_ONLY
            logger.warning(f"No running event loop; AR code {code.id} kept local only")
            return
        self._persist_tasks[code.id] = task

    async def _persist(self, code: ARCode) -> None:
        try:
            result = await self.gateway.create(code.to_record())
        except PersistenceError as e:
            self._record_failure(code, e.message)
            return
        except Exception as e:
            self._record_failure(code, f"{type(e).__name__}: {e}")
            return
        code.remote_id = str(result["id"])
        code.persistence_state = PersistenceState.PERSISTED
        code.persistence_error = None
        logger.info(f"AR code {code.id} persisted as {code.remote_id}")

    def _record_failure(self, code: ARCode, message: str) -> None:
        code.persistence_state = PersistenceState.PERSIST_FAILED
        code.persistence_error = message
        logger.warning(f"Persistence failed for AR code {code.id} (still {code.status.value} locally): {message}")

    def _schedule_status_sync(self, code: ARCode, status: CodeStatus) -> None:
        if self.gateway is None:
            return
        self._spawn(self._sync_status(code, status))

    async def _sync_status(self, code: ARCode, status: CodeStatus) -> None:
        pending = self._persist_tasks.get(code.id)
        if pending is not None and not pending.done():
            await asyncio.wait({pending})

        if code.persistence_state != PersistenceState.PERSISTED or code.remote_id is None:
            logger.debug(f"Skipping {status.value} sync for unpersisted AR code {code.id}")
            return
        try:
            await self.gateway.update_status(code.remote_id, status.value)
        except PersistenceError as e:
            self._record_failure(code, e.message)
            return
        except Exception as e:
            self._record_failure(code, f"{type(e).__name__}: {e}")
            return
        logger.info(f"AR code {code.id} remote status set to {status.value}")

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _transition(self, code: ARCode, status: CodeStatus, at: datetime) -> None:
        if status not in ALLOWED_TRANSITIONS[code.status]:
            raise ValueError(f"Illegal transition {code.status.value} -> {status.value} for {code.id}")
        previous = code.status
        code.status = status
        if status == CodeStatus.SCANNED:
            code.scanned_at = code.scanned_at or at
        elif status == CodeStatus.EXPIRED:
            code.expired_at = at
        elif status == CodeStatus.REMOVED:
            code.removed_at = at
        self._publish(StatusChange(code.id, previous, status, at))

    def _lookup(self, code_id: str) -> Optional[ARCode]:
        code = self._codes.get(code_id)
        if code is not None:
            return code
        for removed in reversed(self._history):
            if removed.id == code_id:
                return removed
        return None

    def mark_scanned(
        self, code_id: str, scanned_at: Optional[datetime] = None
    ) -> Union[ARCode, CodeNotFoundError]:
        """
        Confirm a scan of ``code_id``.

        Codes that already left Active (scanned, expired or removed) are
        returned unchanged, so a scan racing the expiry tick is harmless.

        Returns:
            The code, or CodeNotFoundError if the id was never issued here
        """
        code = self._lookup(code_id)
        if code is None:
            logger.warning(f"Scan for unknown AR code {code_id}")
            return CodeNotFoundError(code_id)

        now = self.clock()
        # a scan stamped ahead of the local clock cannot pull expiry forward
        scanned_at = min(scanned_at or now, now)
        self._expire_if_due(code, scanned_at, now)
        if code.status != CodeStatus.ACTIVE:
            logger.info(f"Scan for AR code {code_id} ignored; already {code.status.value}")
            return code

        code.scanned_at = scanned_at
        self._transition(code, CodeStatus.SCANNED, code.scanned_at)
        logger.info(f"AR code {code_id} scanned")
        self._schedule_status_sync(code, CodeStatus.SCANNED)
        return code

    def handle_scan(self, event: ScanEvent) -> Union[ARCode, CodeNotFoundError]:
        return self.mark_scanned(event.code_id, event.scanned_at)

    def _expire_if_due(self, code: ARCode, reference: datetime, now: datetime) -> bool:
        if code.status != CodeStatus.ACTIVE or reference < code.expires_at:
            return False
        self._transition(code, CodeStatus.EXPIRED, now)
        logger.info(f"AR code {code.id} expired")
        self._schedule_status_sync(code, CodeStatus.EXPIRED)
        return True

    def _expire_due(self, now: datetime) -> int:
        return sum(self._expire_if_due(code, now, now) for code in list(self._codes.values()))

    def _remove(self, code: ARCode, now: datetime) -> None:
        self._transition(code, CodeStatus.REMOVED, now)
        del self._codes[code.id]
        self._persist_tasks.pop(code.id, None)
        self._history.append(code)
        if len(self._history) > self.history_limit:
            # Trim in chunks rather than on every removal
            excess = len(self._history) - self.history_limit
            chunk = min(HISTORY_TRIM, max(self.history_limit // 5, 1))
            del self._history[: max(excess, chunk)]
        logger.debug(f"AR code {code.id} removed")

    def tick(self, now: Optional[datetime] = None) -> int:
        """
        Expire due codes and remove terminal codes past retention.

        Returns:
            Number of transitions applied
        """
        now = now or self.clock()
        changed = self._expire_due(now)
        for code in list(self._codes.values()):
            terminal_at = code.terminal_at
            if terminal_at is not None and now >= terminal_at + self.removal_delay:
                self._remove(code, now)
                changed += 1
        if changed:
            logger.debug(f"Tick applied {changed} transition(s)")
        return changed

    def remove(self, code_id: str) -> Union[ARCode, CodeNotFoundError]:
        """Remove a scanned or expired code now; Active codes are left as they are."""
        code = self._lookup(code_id)
        if code is None:
            return CodeNotFoundError(code_id)
        now = self.clock()
        self._expire_if_due(code, now, now)
        if code.status in (CodeStatus.SCANNED, CodeStatus.EXPIRED):
            self._remove(code, now)
        return code

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, code_id: str) -> Optional[ARCode]:
        code = self._lookup(code_id)
        if code is not None:
            now = self.clock()
            self._expire_if_due(code, now, now)
        return code

    def list_active(self) -> List[ARCode]:
        self._expire_due(self.clock())
        return [c for c in self._codes.values() if c.status == CodeStatus.ACTIVE]

    def list_for_agent(self, agent_id: str) -> List[ARCode]:
        self._expire_due(self.clock())
        return [c for c in self._codes.values() if c.owner_agent_id == agent_id]

    def history(self) -> List[ARCode]:
        return list(self._history)

    def stats(self) -> Dict[str, int]:
        self._expire_due(self.clock())
        counts = {status: 0 for status in CodeStatus}
        for code in self._codes.values():
            counts[code.status] += 1
        tracked = list(self._codes.values()) + self._history
        return {
            "active": counts[CodeStatus.ACTIVE],
            "scanned": counts[CodeStatus.SCANNED],
            "expired": counts[CodeStatus.EXPIRED],
            "removed": len(self._history),
            "total": self._issued,
            "persisted": sum(c.persistence_state == PersistenceState.PERSISTED for c in tracked),
            "persist_failed": sum(
                c.persistence_state == PersistenceState.PERSIST_FAILED for c in tracked
            ),
        }

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def subscribe(self, maxsize: int = SUBSCRIBER_QUEUE_SIZE) -> asyncio.Queue:
        """
        Queue receiving a StatusChange for every transition from now on.

        The queue is bounded; once a subscriber falls ``maxsize`` events
        behind, further events for it are dropped until it catches up.
        """
        queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self._subscribers.append(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        if queue in self._subscribers:
            self._subscribers.remove(queue)

    def _publish(self, change: StatusChange) -> None:
        for queue in self._subscribers:
            try:
                queue.put_nowait(change)
            except asyncio.QueueFull:
                logger.warning(
                    f"Subscriber queue full; dropped {change.current.value} event for AR code {change.code_id}"
                )

    # ------------------------------------------------------------------
    # Background work
    # ------------------------------------------------------------------

    @property
    def running(self) -> bool:
        return self._tick_task is not None and not self._tick_task.done()

    def start(self) -> None:
        """Start the expiry tick on the running event loop."""
        if self.running:
            return
        self._tick_task = asyncio.get_running_loop().create_task(self._run_ticks())
        logger.info(f"AR code tick started (every {self.tick_interval_s}s)")

    async def _run_ticks(self) -> None:
        while True:
            try:
                self.tick()
            except Exception:
                logger.exception("AR code tick failed")
            await asyncio.sleep(self.tick_interval_s)

    async def drain(self) -> None:
        """Wait for all outstanding persistence work to finish."""
        while self._background:
            await asyncio.wait(set(self._background))

    async def stop(self) -> None:
        """Stop the tick and wait for in-flight persistence attempts."""
        if self._tick_task is not None:
            self._tick_task.cancel()
            try:
                await self._tick_task
            except asyncio.CancelledError:
                pass
            self._tick_task = None
            logger.info("AR code tick stopped")
        await self.drain()
