"""
Network health probes.

This module provides:
- JSON-RPC liveness checks per chain family (EVM eth_blockNumber,
  Solana getHealth)
- Latency tracking for each probe
- Gas price lookup with fallback to the configured value

Probes are advisory; nothing in the payment core depends on them.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

import requests
from web3 import Web3

from .models import ChainFamily, NetworkDescriptor

logger = logging.getLogger(__name__)

# Health check timeout (short, probes are informational)
HEALTH_CHECK_TIMEOUT = 3  # seconds

# Default timeout for RPC calls
DEFAULT_RPC_TIMEOUT = 10  # seconds


@dataclass
class NetworkHealth:
    """Result of a network liveness probe."""

    network: str
    healthy: bool
    probed: bool
    latency_ms: Optional[float] = None
    error_message: Optional[str] = None


@dataclass
class GasPriceEstimate:
    """Gas price for an EVM network."""

    network: str
    wei: int
    gwei: Decimal
    source: str  # "rpc" or "config"


def _probe_payload(family: ChainFamily) -> Optional[dict]:
    if family in (ChainFamily.EVM, ChainFamily.HEDERA):
        return {"jsonrpc": "2.0", "id": 1, "method": "eth_blockNumber", "params": []}
    if family == ChainFamily.SOLANA:
        return {"jsonrpc": "2.0", "id": 1, "method": "getHealth"}
    return None


def check_network_status(
    network: NetworkDescriptor,
    session: Optional[requests.Session] = None,
    timeout: float = HEALTH_CHECK_TIMEOUT,
) -> NetworkHealth:
    """
    Perform a quick liveness check on a network's RPC endpoint.

    Families without a known probe are reported healthy but unprobed.

    Args:
        network: Network to probe
        session: Optional requests session (for connection reuse and tests)
        timeout: Request timeout in seconds

    Returns:
        NetworkHealth with probe outcome and latency
    """
    payload = _probe_payload(network.family)
    if payload is None:
        return NetworkHealth(network=network.name, healthy=True, probed=False)

    http = session or requests
    started = time.monotonic()
    try:
        response = http.post(network.rpc_endpoint, json=payload, timeout=timeout)
        latency_ms = (time.monotonic() - started) * 1000

        if response.status_code != 200:
            return NetworkHealth(
                network=network.name,
                healthy=False,
                probed=True,
                latency_ms=latency_ms,
                error_message=f"HTTP {response.status_code}",
            )

        data = response.json()
        if "result" not in data:
            error = data.get("error", {})
            message = error.get("message") if isinstance(error, dict) else str(error)
            return NetworkHealth(
                network=network.name,
                healthy=False,
                probed=True,
                latency_ms=latency_ms,
                error_message=message or "Missing result",
            )

        return NetworkHealth(
            network=network.name, healthy=True, probed=True, latency_ms=latency_ms
        )

    except requests.exceptions.Timeout:
        logger.warning(f"RPC {network.rpc_endpoint} health check timed out")
        return NetworkHealth(
            network=network.name, healthy=False, probed=True, error_message="Timeout"
        )
    except (requests.exceptions.RequestException, ValueError) as e:
        logger.warning(f"RPC {network.rpc_endpoint} health check failed: {e}")
        return NetworkHealth(
            network=network.name, healthy=False, probed=True, error_message=str(e)
        )


def estimate_gas_price(
    network: NetworkDescriptor,
    web3: Optional[Web3] = None,
    timeout: int = DEFAULT_RPC_TIMEOUT,
) -> Optional[GasPriceEstimate]:
    """
    Read the current gas price, falling back to the configured value.

    Args:
        network: EVM network to query
        web3: Optional Web3 instance (defaults to an HTTP provider on the
            network's RPC endpoint)
        timeout: Request timeout in seconds

    Returns:
        GasPriceEstimate, or None for non-EVM networks or when neither the
        RPC nor the configuration provides a price
    """
    if network.family != ChainFamily.EVM:
        return None

    try:
        w3 = web3 or Web3(
            Web3.HTTPProvider(network.rpc_endpoint, request_kwargs={"timeout": timeout})
        )
        gas_price = int(w3.eth.gas_price)
        return GasPriceEstimate(
            network=network.name,
            wei=gas_price,
            gwei=Decimal(Web3.from_wei(gas_price, "gwei")),
            source="rpc",
        )
    except Exception as e:
        logger.warning(f"Gas price lookup failed for {network.name}: {e}")

    if network.gas_price_wei is None:
        return None
    return GasPriceEstimate(
        network=network.name,
        wei=network.gas_price_wei,
        gwei=Decimal(Web3.from_wei(network.gas_price_wei, "gwei")),
        source="config",
    )
