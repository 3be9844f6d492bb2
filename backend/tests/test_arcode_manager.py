import asyncio
from datetime import timedelta
from decimal import Decimal
from itertools import count

import pytest

from arpay.arcodes import (
    Anchor,
    ARCodeLifecycleManager,
    CodeStatus,
    InMemoryPersistenceGateway,
    PersistenceState,
    ScanEvent,
)
from arpay.config import ArPaySettings
from arpay.errors import BuildError, CodeNotFoundError, PersistenceError
from arpay.networks import ChainFamily
from arpay.payment import PaymentRequest

RECIPIENT = "0x742d35cc6634c0532925a3b844bc454e4438f44e"
BASE_USDC = "0x036CbD53842c5426634e7929541eC2318f3dCF7e"
TTL_MS = 60_000


def usdc_request(amount="10"):
    return PaymentRequest(
        recipient_address=RECIPIENT,
        asset_symbol="USDC",
        asset_contract_or_mint=BASE_USDC,
        amount=Decimal(amount),
        chain_family=ChainFamily.EVM,
        chain_id=84532,
    )


def sequential_ids():
    counter = count(1)
    return lambda: f"code-{next(counter)}"


@pytest.fixture
def manager(builder, clock):
    return ARCodeLifecycleManager(
        builder, clock=clock, default_ttl_ms=TTL_MS, id_factory=sequential_ids()
    )


class FlakyGateway(InMemoryPersistenceGateway):
    """Accepts creates, then fails every status update."""

    async def update_status(self, record_id, status):
        self.update_calls += 1
        raise PersistenceError("timeout", "update timed out")


class ExplodingGateway:
    async def create(self, record):
        raise RuntimeError("connection reset")

    async def update_status(self, record_id, status):
        raise RuntimeError("connection reset")


# --- Creation ---------------------------------------------------------------


def test_create_is_active_immediately(manager, builder, clock):
    code = manager.create(usdc_request(), Anchor(1.0, 2.0, -3.0), owner_agent_id="agent-1")
    assert code.status == CodeStatus.ACTIVE
    assert code.persistence_state == PersistenceState.LOCAL_ONLY
    assert code.payload == builder.build(usdc_request())
    assert code.created_at == clock.now
    assert code.expires_at == clock.now + timedelta(milliseconds=TTL_MS)
    assert code.anchor == Anchor(1.0, 2.0, -3.0)
    assert manager.list_active() == [code]


def test_create_default_anchor_and_ttl(builder, clock):
    manager = ARCodeLifecycleManager(builder, clock=clock)
    code = manager.create(usdc_request())
    assert code.anchor == Anchor(0.0, 1.0, -2.0)
    assert code.expires_at - code.created_at == timedelta(minutes=5)


def test_create_with_invalid_request_raises_build_error(manager):
    with pytest.raises(BuildError) as exc:
        manager.create(usdc_request("0"))
    assert exc.value.reason == "invalid_request"
    assert manager.list_active() == []
    assert manager.stats()["total"] == 0


def test_create_rejects_non_positive_ttl(manager):
    with pytest.raises(ValueError):
        manager.create(usdc_request(), ttl_ms=0)


def test_duplicate_ids_are_rejected(builder, clock):
    manager = ARCodeLifecycleManager(builder, clock=clock, id_factory=lambda: "same")
    manager.create(usdc_request())
    with pytest.raises(ValueError):
        manager.create(usdc_request())


def test_settings_drive_manager_timing(builder):
    settings = ArPaySettings(code_default_ttl_ms=1000, code_removal_delay_s=0.5, code_history_limit=7)
    manager = ARCodeLifecycleManager.from_settings(builder, settings)
    assert manager.default_ttl_ms == 1000
    assert manager.removal_delay == timedelta(seconds=0.5)
    assert manager.history_limit == 7


def test_tick_interval_above_one_second_rejected(builder):
    with pytest.raises(ValueError):
        ARCodeLifecycleManager(builder, tick_interval_s=5)


# --- Scanning ---------------------------------------------------------------


def test_mark_scanned(manager, clock):
    code = manager.create(usdc_request())
    clock.advance(seconds=10)
    scanned = manager.mark_scanned(code.id)
    assert scanned is code
    assert code.status == CodeStatus.SCANNED
    assert code.scanned_at == clock.now
    assert manager.list_active() == []


def test_mark_scanned_is_idempotent(manager, clock):
    code = manager.create(usdc_request())
    manager.mark_scanned(code.id)
    first_scan = code.scanned_at
    clock.advance(seconds=1)
    again = manager.mark_scanned(code.id)
    assert again.status == CodeStatus.SCANNED
    assert again.scanned_at == first_scan


def test_scan_after_expiry_leaves_code_expired(manager, clock):
    code = manager.create(usdc_request())
    clock.advance(ms=TTL_MS)
    result = manager.mark_scanned(code.id)
    assert result.status == CodeStatus.EXPIRED
    assert result.scanned_at is None


def test_scan_timestamp_before_expiry_wins(manager, clock):
    code = manager.create(usdc_request())
    scanned_at = clock.now + timedelta(seconds=30)
    clock.advance(ms=TTL_MS + 500)
    result = manager.mark_scanned(code.id, scanned_at=scanned_at)
    assert result.status == CodeStatus.SCANNED
    assert result.scanned_at == scanned_at


def test_future_scan_timestamp_cannot_expire_early(manager, clock):
    code = manager.create(usdc_request())
    clock.advance(seconds=10)
    result = manager.mark_scanned(code.id, scanned_at=clock.now + timedelta(seconds=120))
    assert result.status == CodeStatus.SCANNED
    assert result.expired_at is None
    assert result.scanned_at == clock.now
    assert result.scanned_at < result.expires_at


def test_scan_event(manager, clock):
    code = manager.create(usdc_request())
    result = manager.handle_scan(ScanEvent(code.id, clock.now))
    assert result.status == CodeStatus.SCANNED
    assert isinstance(manager.handle_scan(ScanEvent("missing")), CodeNotFoundError)


def test_scan_unknown_code(manager):
    result = manager.mark_scanned("missing")
    assert isinstance(result, CodeNotFoundError)
    assert result.error_code == "code:not_found"


# --- Expiry and removal -----------------------------------------------------


def test_expiry_boundary(manager, clock):
    code = manager.create(usdc_request())
    clock.advance(ms=TTL_MS - 1)
    assert manager.list_active() == [code]
    clock.advance(ms=1)
    assert manager.list_active() == []
    assert code.status == CodeStatus.EXPIRED
    assert code.expired_at == clock.now


def test_lazy_expiry_survives_clock_jump(manager, clock):
    code = manager.create(usdc_request())
    clock.advance(seconds=3600)
    assert manager.get(code.id).status == CodeStatus.EXPIRED


def test_tick_expires_then_removes_after_delay(manager, clock):
    code = manager.create(usdc_request())
    clock.advance(ms=TTL_MS)
    assert manager.tick() == 1
    assert code.status == CodeStatus.EXPIRED

    clock.advance(seconds=1)
    assert manager.tick() == 0

    clock.advance(seconds=1)
    assert manager.tick() == 1
    assert code.status == CodeStatus.REMOVED
    assert manager.history() == [code]
    assert manager.get(code.id) is code
    assert code not in manager.list_active()


def test_removed_code_never_reactivates(manager, clock):
    code = manager.create(usdc_request())
    manager.mark_scanned(code.id)
    clock.advance(seconds=2)
    manager.tick()
    assert code.status == CodeStatus.REMOVED
    assert manager.mark_scanned(code.id).status == CodeStatus.REMOVED
    assert manager.list_active() == []


def test_manual_remove(manager):
    active = manager.create(usdc_request())
    scanned = manager.create(usdc_request())
    manager.mark_scanned(scanned.id)

    assert manager.remove(active.id).status == CodeStatus.ACTIVE
    assert manager.remove(scanned.id).status == CodeStatus.REMOVED
    assert isinstance(manager.remove("missing"), CodeNotFoundError)


def test_history_is_bounded(builder, clock):
    manager = ARCodeLifecycleManager(
        builder, clock=clock, removal_delay_s=0, history_limit=5, id_factory=sequential_ids()
    )
    for _ in range(8):
        manager.mark_scanned(manager.create(usdc_request()).id)
    manager.tick()
    history = manager.history()
    assert len(history) <= 5
    assert history[-1].id == "code-8"


def test_stats(manager, clock):
    a = manager.create(usdc_request())
    manager.create(usdc_request())
    c = manager.create(usdc_request(), ttl_ms=1000)
    manager.mark_scanned(a.id)
    clock.advance(seconds=1)

    stats = manager.stats()
    assert stats == {
        "active": 1,
        "scanned": 1,
        "expired": 1,
        "removed": 0,
        "total": 3,
        "persisted": 0,
        "persist_failed": 0,
    }
    assert c.status == CodeStatus.EXPIRED


def test_list_for_agent(manager):
    mine = manager.create(usdc_request(), owner_agent_id="agent-1")
    manager.create(usdc_request(), owner_agent_id="agent-2")
    assert manager.list_for_agent("agent-1") == [mine]


# --- Persistence ------------------------------------------------------------


def test_no_running_loop_keeps_code_local(builder, clock):
    gateway = InMemoryPersistenceGateway()
    manager = ARCodeLifecycleManager(builder, gateway=gateway, clock=clock)
    code = manager.create(usdc_request())
    assert code.persistence_state == PersistenceState.LOCAL_ONLY
    assert gateway.create_calls == 0


def test_persistence_runs_after_create_returns(builder, clock):
    gateway = InMemoryPersistenceGateway()
    manager = ARCodeLifecycleManager(builder, gateway=gateway, clock=clock)

    async def scenario():
        code = manager.create(usdc_request(), owner_agent_id="agent-1")
        assert code.status == CodeStatus.ACTIVE
        assert code.persistence_state == PersistenceState.PERSIST_PENDING
        await manager.drain()
        return code

    code = asyncio.run(scenario())
    assert code.persistence_state == PersistenceState.PERSISTED
    record = gateway.records[code.remote_id]
    assert record["transaction_id"] == code.id
    assert record["qr_code_data"] == code.payload
    assert record["status"] == "active"
    assert record["agent_id"] == "agent-1"


def test_failed_persistence_keeps_code_active(builder, clock):
    gateway = InMemoryPersistenceGateway(available=False)
    manager = ARCodeLifecycleManager(builder, gateway=gateway, clock=clock)

    async def scenario():
        code = manager.create(usdc_request())
        await manager.drain()
        scanned = manager.mark_scanned(code.id)
        await manager.drain()
        return scanned

    code = asyncio.run(scenario())
    assert code.status == CodeStatus.SCANNED
    assert code.persistence_state == PersistenceState.PERSIST_FAILED
    assert "offline" in code.persistence_error
    assert gateway.create_calls == 1
    # Never persisted, so no status update is attempted
    assert gateway.update_calls == 0
    assert manager.stats()["persist_failed"] == 1


def test_unexpected_gateway_errors_are_recorded(builder, clock):
    manager = ARCodeLifecycleManager(builder, gateway=ExplodingGateway(), clock=clock)

    async def scenario():
        code = manager.create(usdc_request())
        await manager.drain()
        return code

    code = asyncio.run(scenario())
    assert code.status == CodeStatus.ACTIVE
    assert code.persistence_state == PersistenceState.PERSIST_FAILED
    assert "connection reset" in code.persistence_error


def test_scan_is_synced_after_create_resolves(builder, clock):
    gateway = InMemoryPersistenceGateway()
    manager = ARCodeLifecycleManager(builder, gateway=gateway, clock=clock)

    async def scenario():
        code = manager.create(usdc_request())
        # Scan before the create attempt has had a chance to run
        manager.mark_scanned(code.id)
        await manager.drain()
        return code

    code = asyncio.run(scenario())
    assert code.status == CodeStatus.SCANNED
    assert code.persistence_state == PersistenceState.PERSISTED
    assert gateway.records[code.remote_id]["status"] == "scanned"
    assert gateway.update_calls == 1


def test_expiry_is_synced(builder, clock):
    gateway = InMemoryPersistenceGateway()
    manager = ARCodeLifecycleManager(builder, gateway=gateway, clock=clock, default_ttl_ms=1000)

    async def scenario():
        code = manager.create(usdc_request())
        await manager.drain()
        clock.advance(seconds=1)
        manager.tick()
        await manager.drain()
        return code

    code = asyncio.run(scenario())
    assert gateway.records[code.remote_id]["status"] == "expired"


def test_failed_status_sync_does_not_revert_scan(builder, clock):
    gateway = FlakyGateway()
    manager = ARCodeLifecycleManager(builder, gateway=gateway, clock=clock)

    async def scenario():
        code = manager.create(usdc_request())
        await manager.drain()
        manager.mark_scanned(code.id)
        await manager.drain()
        return code

    code = asyncio.run(scenario())
    assert code.status == CodeStatus.SCANNED
    assert code.persistence_state == PersistenceState.PERSIST_FAILED
    assert gateway.update_calls == 1


# --- Events and background tick ---------------------------------------------


def test_subscribers_see_transitions_in_order(manager, clock):
    async def scenario():
        queue = manager.subscribe()
        code = manager.create(usdc_request())
        manager.mark_scanned(code.id)
        clock.advance(seconds=2)
        manager.tick()
        manager.unsubscribe(queue)
        manager.create(usdc_request())
        events = []
        while not queue.empty():
            events.append(queue.get_nowait())
        return code, events

    code, events = asyncio.run(scenario())
    assert [(e.previous, e.current) for e in events] == [
        (None, CodeStatus.ACTIVE),
        (CodeStatus.ACTIVE, CodeStatus.SCANNED),
        (CodeStatus.SCANNED, CodeStatus.REMOVED),
    ]
    assert all(e.code_id == code.id for e in events)


def test_slow_subscriber_drops_events(manager, clock):
    async def scenario():
        slow = manager.subscribe(maxsize=1)
        fast = manager.subscribe()
        first = manager.create(usdc_request())
        manager.create(usdc_request())
        manager.mark_scanned(first.id)
        return slow, fast

    slow, fast = asyncio.run(scenario())
    assert slow.qsize() == 1
    assert slow.get_nowait().code_id == "code-1"
    assert fast.qsize() == 3


def test_start_and_stop_tick(builder):
    manager = ARCodeLifecycleManager(builder, default_ttl_ms=50, tick_interval_s=0.01)

    async def scenario():
        manager.start()
        assert manager.running
        code = manager.create(usdc_request())
        await asyncio.sleep(0.2)
        await manager.stop()
        return code

    code = asyncio.run(scenario())
    assert code.status == CodeStatus.EXPIRED
    assert not manager.running
