"""
Cross-chain route resolution.

Lanes are looked up by the destination's canonical (family, chain_id) key
through the registry, never by display name. Only direct lanes are
resolved; there is no multi-hop search.

Fee estimates use configured constants:

    fee = base_fee + amount * variable_rate_bp / 10_000

They are advisory and carry no on-chain grounding.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import FrozenSet, List, Optional, Union

from ..config import ArPaySettings
from ..errors import RouteError
from ..networks.models import NetworkDescriptor
from ..networks.registry import NetworkRegistry

logger = logging.getLogger(__name__)

BASIS_POINTS = Decimal(10_000)

# Human-readable completion windows reported with payment estimates
SAME_CHAIN_ETA = "1-2 minutes"
CROSS_CHAIN_ETA = "5-15 minutes"


@dataclass(frozen=True)
class LaneEdge:
    """Directed lane source -> destination."""

    source: NetworkDescriptor
    destination: NetworkDescriptor
    lane_address: str
    assets: FrozenSet[str] = frozenset()

    def supports(self, asset_symbol: str) -> bool:
        return asset_symbol.upper() in {a.upper() for a in self.assets}


@dataclass(frozen=True)
class FeeEstimate:
    """Advisory bridge fee for a direct lane."""

    fee_amount: Decimal
    total_cost: Decimal


@dataclass(frozen=True)
class Route:
    """Resolved route; always direct."""

    hops: List[NetworkDescriptor] = field(default_factory=list)
    is_direct: bool = True


@dataclass
class PaymentEstimate:
    """Cost and feasibility of paying an agent from a given network."""

    can_process: bool
    agent_fee: Decimal  # What the agent receives
    bridge_fee: Decimal  # Cross-chain transfer fee (0 on the same chain)
    total_user_cost: Decimal
    estimated_time: str
    source: Optional[NetworkDescriptor]
    destination: Optional[NetworkDescriptor]
    is_direct: bool
    error_message: Optional[str] = None


class RouteResolver:
    """Stateless lane lookups and fee estimates over a NetworkRegistry."""

    def __init__(
        self,
        registry: NetworkRegistry,
        base_fee: Decimal = Decimal("1.5"),
        variable_rate_bp: Decimal = Decimal("10"),
    ) -> None:
        """
        Initialize the resolver.

        Args:
            registry: Registry used to resolve lane destinations
            base_fee: Flat fee per cross-chain transfer, in asset units
            variable_rate_bp: Proportional fee in basis points of the amount
        """
        if base_fee < 0 or variable_rate_bp < 0:
            raise ValueError("Fee constants must be non-negative")
        self.registry = registry
        self.base_fee = Decimal(base_fee)
        self.variable_rate_bp = Decimal(variable_rate_bp)

    @classmethod
    def from_settings(cls, registry: NetworkRegistry, settings: ArPaySettings) -> "RouteResolver":
        return cls(
            registry,
            base_fee=settings.route_base_fee,
            variable_rate_bp=settings.route_variable_rate_bp,
        )

    def lane(
        self, source: NetworkDescriptor, destination: NetworkDescriptor
    ) -> Optional[LaneEdge]:
        """Get the directed lane source -> destination.

        Returns:
            LaneEdge or None if the source has no lane keyed by the
            destination's canonical identity
        """
        if source.ccip is None:
            return None
        resolved = self.registry.get(destination.key)
        if resolved is None:
            return None
        lane_address = source.ccip.lanes.get(resolved.key)
        if lane_address is None:
            return None
        return LaneEdge(
            source=source,
            destination=resolved,
            lane_address=lane_address,
            assets=resolved.bridgeable_assets,
        )

    def can_route(
        self,
        source: NetworkDescriptor,
        destination: NetworkDescriptor,
        asset: Optional[str] = None,
    ) -> bool:
        """True iff a direct lane exists (and allow-lists ``asset`` if given)."""
        lane = self.lane(source, destination)
        if lane is None:
            return False
        return asset is None or lane.supports(asset)

    def lane_address(
        self, source: NetworkDescriptor, destination: NetworkDescriptor
    ) -> Optional[str]:
        lane = self.lane(source, destination)
        return lane.lane_address if lane else None

    def fee_for(self, amount: Decimal) -> Decimal:
        """Raw fee formula; non-decreasing in ``amount``."""
        return self.base_fee + Decimal(amount) * self.variable_rate_bp / BASIS_POINTS

    def estimate_fee(
        self,
        source: NetworkDescriptor,
        destination: NetworkDescriptor,
        amount: Decimal,
    ) -> Union[FeeEstimate, RouteError]:
        """
        Estimate the bridge fee for a direct transfer.

        Args:
            source: Network the payer sends from
            destination: Network the agent receives on
            amount: Amount the agent should receive

        Returns:
            FeeEstimate, or RouteError when no lane exists or the amount is
            negative
        """
        amount = Decimal(amount)
        if amount < 0:
            return RouteError("invalid_amount", f"Amount must be non-negative, got {amount}")
        if not self.can_route(source, destination):
            return RouteError(
                "unsupported",
                f"Cross-chain transfer not supported from {source.name} to {destination.name}",
                {"source": str(source.key), "destination": str(destination.key)},
            )
        fee = self.fee_for(amount)
        return FeeEstimate(fee_amount=fee, total_cost=amount + fee)

    def find_route(
        self, source: NetworkDescriptor, destination: NetworkDescriptor
    ) -> Union[Route, RouteError]:
        """Resolve a direct route. No multi-hop search is performed."""
        if not self.can_route(source, destination):
            return RouteError(
                "unsupported",
                f"No direct lane from {source.name} to {destination.name}",
                {"source": str(source.key), "destination": str(destination.key)},
            )
        return Route(hops=[source, destination], is_direct=True)

    def all_lanes(self) -> List[LaneEdge]:
        """Every configured lane in the registry."""
        lanes: List[LaneEdge] = []
        for source in self.registry.list_route_capable():
            for destination_key in source.ccip.lanes:
                destination = self.registry.get(destination_key)
                lane = self.lane(source, destination) if destination else None
                if lane is not None:
                    lanes.append(lane)
        return lanes

    def estimate_payment(
        self,
        source: Optional[NetworkDescriptor],
        destination: Optional[NetworkDescriptor],
        agent_fee: Decimal,
    ) -> PaymentEstimate:
        """
        Estimate what a payer on ``source`` pays an agent on ``destination``.

        Same-chain payments carry no bridge fee. Unknown networks or missing
        lanes produce a non-processable estimate rather than an error.
        """
        agent_fee = Decimal(agent_fee)

        def rejected(message: str) -> PaymentEstimate:
            return PaymentEstimate(
                can_process=False,
                agent_fee=agent_fee,
                bridge_fee=Decimal("0"),
                total_user_cost=agent_fee,
                estimated_time="N/A",
                source=source,
                destination=destination,
                is_direct=False,
                error_message=message,
            )

        if source is None or destination is None:
            return rejected("Unsupported network")

        if source.key == destination.key:
            return PaymentEstimate(
                can_process=True,
                agent_fee=agent_fee,
                bridge_fee=Decimal("0"),
                total_user_cost=agent_fee,
                estimated_time=SAME_CHAIN_ETA,
                source=source,
                destination=destination,
                is_direct=True,
            )

        estimate = self.estimate_fee(source, destination, agent_fee)
        if isinstance(estimate, RouteError):
            logger.info(f"Payment estimate rejected: {estimate.message}")
            return rejected(estimate.message)

        return PaymentEstimate(
            can_process=True,
            agent_fee=agent_fee,
            bridge_fee=estimate.fee_amount,
            total_user_cost=estimate.total_cost,
            estimated_time=CROSS_CHAIN_ETA,
            source=source,
            destination=destination,
            is_direct=True,
        )
