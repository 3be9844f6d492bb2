"""
Route API Routes.

Endpoints for cross-chain lanes and advisory payment estimates.
"""

from decimal import Decimal
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..networks.models import ChainFamily
from ..services import ArPayServices, get_services
from .resolver import LaneEdge, PaymentEstimate

router = APIRouter(prefix="/routes", tags=["routes"])


def lane_to_dict(lane: LaneEdge) -> Dict[str, Any]:
    return {
        "source": str(lane.source.key),
        "source_name": lane.source.name,
        "destination": str(lane.destination.key),
        "destination_name": lane.destination.name,
        "lane_address": lane.lane_address,
        "assets": sorted(lane.assets),
    }


def estimate_to_dict(estimate: PaymentEstimate) -> Dict[str, Any]:
    return {
        "can_process": estimate.can_process,
        "agent_fee": str(estimate.agent_fee),
        "bridge_fee": str(estimate.bridge_fee),
        "total_user_cost": str(estimate.total_user_cost),
        "estimated_time": estimate.estimated_time,
        "source": str(estimate.source.key) if estimate.source else None,
        "destination": str(estimate.destination.key) if estimate.destination else None,
        "is_direct": estimate.is_direct,
        "error_message": estimate.error_message,
    }


@router.get("")
async def list_lanes(
    source_family: Optional[ChainFamily] = None,
    source_chain_id: Optional[str] = None,
    services: ArPayServices = Depends(get_services),
) -> Dict[str, Any]:
    """List configured lanes, optionally only those leaving one network."""
    lanes = services.resolver.all_lanes()
    if source_family is not None and source_chain_id is not None:
        source = services.registry.get_by_chain_id(source_family, source_chain_id)
        if source is None:
            raise HTTPException(
                status_code=404, detail=f"Unknown network: {source_family.value}:{source_chain_id}"
            )
        lanes = [lane for lane in lanes if lane.source.key == source.key]
    return {"lanes": [lane_to_dict(lane) for lane in lanes], "count": len(lanes)}


@router.get("/estimate")
async def estimate_route(
    source_family: ChainFamily,
    source_chain_id: str,
    destination_family: ChainFamily,
    destination_chain_id: str,
    amount: Decimal = Query(..., ge=0),
    services: ArPayServices = Depends(get_services),
) -> Dict[str, Any]:
    """Estimate what a payer on the source network pays an agent on the destination.

    Unknown networks and missing lanes yield ``can_process: false`` rather
    than an HTTP error.
    """
    registry = services.registry
    estimate = services.resolver.estimate_payment(
        registry.get_by_chain_id(source_family, source_chain_id),
        registry.get_by_chain_id(destination_family, destination_chain_id),
        amount,
    )
    return estimate_to_dict(estimate)
