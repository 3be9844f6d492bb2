"""
Network API Routes.

Endpoints for listing configured networks and probing their RPC endpoints.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException

from ..errors import ChainLookupError
from ..services import ArPayServices, get_services
from .health import check_network_status, estimate_gas_price
from .models import ChainFamily, NetworkDescriptor

router = APIRouter(prefix="/networks", tags=["networks"])


def _resolve(services: ArPayServices, family: str, chain_id: str) -> NetworkDescriptor:
    network = services.registry.get_by_chain_id(family, chain_id)
    if network is None:
        error = ChainLookupError(
            f"Unknown network: {family}:{chain_id}", {"family": family, "chain_id": chain_id}
        )
        raise HTTPException(status_code=404, detail=error.to_dict())
    return network


@router.get("")
async def list_networks(
    family: Optional[ChainFamily] = None,
    active_only: bool = False,
    services: ArPayServices = Depends(get_services),
) -> Dict[str, Any]:
    """List configured networks, optionally filtered by family and status."""
    registry = services.registry
    if active_only:
        networks = registry.list_active(family)
    elif family is not None:
        networks = registry.list_by_family(family)
    else:
        networks = registry.list_all()
    return {"networks": [n.to_dict() for n in networks], "count": len(networks)}


@router.get("/{family}/{chain_id}")
async def get_network(
    family: str, chain_id: str, services: ArPayServices = Depends(get_services)
) -> Dict[str, Any]:
    """Get one network by family and chain id.

    Raises:
        HTTPException: 404 if the network is not configured
    """
    return _resolve(services, family, chain_id).to_dict()


@router.get("/{family}/{chain_id}/health")
def get_network_health(
    family: str, chain_id: str, services: ArPayServices = Depends(get_services)
) -> Dict[str, Any]:
    """Probe the network's RPC endpoint (blocking; runs in the threadpool)."""
    network = _resolve(services, family, chain_id)
    return check_network_status(network).__dict__


@router.get("/{family}/{chain_id}/gas")
def get_gas_price(
    family: str, chain_id: str, services: ArPayServices = Depends(get_services)
) -> Dict[str, Any]:
    network = _resolve(services, family, chain_id)
    estimate = estimate_gas_price(network)
    if estimate is None:
        raise HTTPException(
            status_code=404, detail=f"No gas price available for {network.name}"
        )
    return {
        "network": estimate.network,
        "wei": estimate.wei,
        "gwei": str(estimate.gwei),
        "source": estimate.source,
    }
