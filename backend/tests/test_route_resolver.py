from decimal import Decimal

import pytest

from arpay.config import ArPaySettings
from arpay.errors import RouteError
from arpay.networks.config import (
    ARBITRUM_SEPOLIA,
    BASE_SEPOLIA,
    ETHEREUM_SEPOLIA,
    HEDERA_TESTNET,
    SOLANA_CCIP_ROUTER,
    SOLANA_DEVNET,
)
from arpay.routing import FeeEstimate, Route, RouteResolver


@pytest.fixture
def resolver(registry):
    return RouteResolver(registry)


def test_lanes_are_directional(registry, resolver):
    base = registry.get(BASE_SEPOLIA)
    solana = registry.get(SOLANA_DEVNET)
    assert not resolver.can_route(base, solana)
    assert resolver.can_route(solana, base)
    assert resolver.lane_address(solana, base) == SOLANA_CCIP_ROUTER


def test_lane_lookup_uses_canonical_key(registry, resolver):
    ethereum = registry.get(ETHEREUM_SEPOLIA)
    arbitrum = registry.get(ARBITRUM_SEPOLIA)
    lane = resolver.lane(ethereum, arbitrum)
    assert lane.lane_address == "0xBc09627e58989Ba8F1eDA775e486467d2A00944F"
    assert lane.destination.key == ARBITRUM_SEPOLIA


def test_non_ccip_networks_have_no_lanes(registry, resolver):
    hedera = registry.get(HEDERA_TESTNET)
    base = registry.get(BASE_SEPOLIA)
    assert not resolver.can_route(hedera, base)
    assert not resolver.can_route(base, hedera)


def test_asset_allow_list(registry, resolver):
    ethereum = registry.get(ETHEREUM_SEPOLIA)
    base = registry.get(BASE_SEPOLIA)
    assert resolver.can_route(ethereum, base, "USDC")
    assert resolver.can_route(ethereum, base, "usdc")
    assert not resolver.can_route(ethereum, base, "ETH")


def test_estimate_fee_uses_configured_constants(registry, resolver):
    estimate = resolver.estimate_fee(
        registry.get(ETHEREUM_SEPOLIA), registry.get(BASE_SEPOLIA), Decimal("100")
    )
    assert isinstance(estimate, FeeEstimate)
    assert estimate.fee_amount == Decimal("1.6")
    assert estimate.total_cost == Decimal("101.6")


def test_estimate_fee_for_missing_lane_is_unsupported(registry, resolver):
    result = resolver.estimate_fee(registry.get(BASE_SEPOLIA), registry.get(SOLANA_DEVNET), 10)
    assert isinstance(result, RouteError)
    assert result.error_code == "route:unsupported"


def test_estimate_fee_rejects_negative_amount(registry, resolver):
    result = resolver.estimate_fee(
        registry.get(ETHEREUM_SEPOLIA), registry.get(BASE_SEPOLIA), Decimal("-1")
    )
    assert isinstance(result, RouteError)
    assert result.reason == "invalid_amount"


def test_fee_is_non_decreasing(resolver):
    amounts = [Decimal(a) for a in ("0", "0.5", "1", "10", "1000", "1000000")]
    fees = [resolver.fee_for(a) for a in amounts]
    assert fees == sorted(fees)
    assert fees[0] == Decimal("1.5")


def test_constants_come_from_settings(registry):
    settings = ArPaySettings(route_base_fee=Decimal("2"), route_variable_rate_bp=Decimal("50"))
    resolver = RouteResolver.from_settings(registry, settings)
    assert resolver.fee_for(Decimal("100")) == Decimal("2.5")


def test_negative_constants_rejected(registry):
    with pytest.raises(ValueError):
        RouteResolver(registry, base_fee=Decimal("-1"))


def test_find_route_is_direct_only(registry, resolver):
    solana = registry.get(SOLANA_DEVNET)
    arbitrum = registry.get(ARBITRUM_SEPOLIA)
    route = resolver.find_route(solana, arbitrum)
    assert isinstance(route, Route)
    assert route.is_direct
    assert [n.key for n in route.hops] == [SOLANA_DEVNET, ARBITRUM_SEPOLIA]

    # Arbitrum -> Solana would need a hop through another chain
    assert isinstance(resolver.find_route(arbitrum, solana), RouteError)


def test_all_lanes(resolver):
    lanes = resolver.all_lanes()
    assert len(lanes) == 39
    assert all(lane.source.key != lane.destination.key for lane in lanes)


def test_estimate_payment_same_chain_has_no_bridge_fee(registry, resolver):
    base = registry.get(BASE_SEPOLIA)
    estimate = resolver.estimate_payment(base, base, Decimal("5"))
    assert estimate.can_process
    assert estimate.bridge_fee == Decimal("0")
    assert estimate.total_user_cost == Decimal("5")
    assert estimate.is_direct


def test_estimate_payment_cross_chain(registry, resolver):
    estimate = resolver.estimate_payment(
        registry.get(SOLANA_DEVNET), registry.get(BASE_SEPOLIA), Decimal("10")
    )
    assert estimate.can_process
    assert estimate.bridge_fee == Decimal("1.51")
    assert estimate.total_user_cost == Decimal("11.51")


def test_estimate_payment_without_lane(registry, resolver):
    estimate = resolver.estimate_payment(
        registry.get(ARBITRUM_SEPOLIA), registry.get(SOLANA_DEVNET), Decimal("10")
    )
    assert not estimate.can_process
    assert estimate.error_message


def test_estimate_payment_unknown_network(registry, resolver):
    estimate = resolver.estimate_payment(None, registry.get(BASE_SEPOLIA), Decimal("1"))
    assert not estimate.can_process
    assert estimate.error_message == "Unsupported network"
