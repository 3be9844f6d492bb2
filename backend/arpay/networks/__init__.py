"""
Networks package.

This package provides:
- Network descriptor types (chain identity, assets, CCIP lanes)
- The static network table
- NetworkRegistry for read-only lookups
- RPC health and gas price probes
"""

from .config import NETWORKS
from .health import GasPriceEstimate, NetworkHealth, check_network_status, estimate_gas_price
from .models import (
    CcipConfig,
    ChainFamily,
    ChainKey,
    Erc20Asset,
    NativeAsset,
    NetworkDescriptor,
    NetworkStatus,
    SplAsset,
)
from .registry import NetworkRegistry, RegistrySnapshot, normalize_chain_id

__all__ = [
    "NETWORKS",
    "CcipConfig",
    "ChainFamily",
    "ChainKey",
    "Erc20Asset",
    "NativeAsset",
    "NetworkDescriptor",
    "NetworkStatus",
    "SplAsset",
    "NetworkRegistry",
    "RegistrySnapshot",
    "normalize_chain_id",
    "NetworkHealth",
    "GasPriceEstimate",
    "check_network_status",
    "estimate_gas_price",
]
