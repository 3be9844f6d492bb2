from decimal import Decimal

import pytest

from arpay.arcodes import ARCodeLifecycleManager, CodeStatus
from arpay.errors import ChainLookupError
from arpay.networks import ChainFamily, ChainKey
from arpay.networks.config import ARBITRUM_SEPOLIA, BASE_SEPOLIA, SOLANA_DEVNET
from arpay.payment import PaymentRequest
from arpay.routing import RouteResolver
from arpay.session import SessionState

RECIPIENT = "0x742d35cc6634c0532925a3b844bc454e4438f44e"


@pytest.fixture
def session(registry):
    return SessionState(registry=registry.snapshot(), agent_id="agent-7")


def native_eth(amount="0.5"):
    return PaymentRequest(
        recipient_address=RECIPIENT,
        asset_symbol="ETH",
        amount=Decimal(amount),
        chain_family=ChainFamily.EVM,
        chain_id=84532,
    )


def test_select_network(session):
    network = session.select_network(BASE_SEPOLIA)
    assert network.name == "Base Sepolia"
    assert session.network is network


def test_select_unknown_network_keeps_selection(session):
    session.select_network(BASE_SEPOLIA)
    result = session.select_network(ChainKey(ChainFamily.EVM, 1))
    assert isinstance(result, ChainLookupError)
    assert session.network_key == BASE_SEPOLIA


def test_codes_outlive_closed_session(session, builder, clock):
    manager = ARCodeLifecycleManager(builder, clock=clock)
    code = session.create_code(manager, native_eth())
    assert code.owner_agent_id == "agent-7"
    assert session.active_codes(manager) == [code]

    session.close()
    assert session.closed
    assert manager.get(code.id).status == CodeStatus.ACTIVE
    with pytest.raises(RuntimeError):
        session.create_code(manager, native_eth())


def test_estimate_for_payer(session, registry):
    resolver = RouteResolver(registry)
    session.select_network(BASE_SEPOLIA)

    same_chain = session.estimate_for_payer(resolver, BASE_SEPOLIA, Decimal("2"))
    assert same_chain.bridge_fee == Decimal("0")

    cross_chain = session.estimate_for_payer(resolver, SOLANA_DEVNET, Decimal("2"))
    assert cross_chain.can_process
    assert cross_chain.bridge_fee > 0

    session.select_network(SOLANA_DEVNET)
    blocked = session.estimate_for_payer(resolver, ARBITRUM_SEPOLIA, Decimal("2"))
    assert not blocked.can_process
