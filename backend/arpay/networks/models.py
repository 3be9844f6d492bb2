"""
Network descriptor types.

Descriptors are frozen once built. Asset metadata is a tagged union keyed by
chain family: EVM chains carry ERC-20 contract addresses, Solana chains carry
SPL mint addresses, and no variant carries fields meaningful only to another.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Mapping, Optional, Union


ChainId = Union[int, str]


class ChainFamily(str, Enum):
    """Protocol class of a network."""

    EVM = "evm"
    SOLANA = "solana"
    HEDERA = "hedera"
    XRPL = "xrpl"
    TRON = "tron"
    STARKNET = "starknet"


class NetworkStatus(str, Enum):
    """Operational status of a network."""

    ACTIVE = "active"
    MAINTENANCE = "maintenance"
    DEPRECATED = "deprecated"


@dataclass(frozen=True)
class ChainKey:
    """Canonical (family, chain_id) identity of a network."""

    family: ChainFamily
    chain_id: ChainId

    def __str__(self) -> str:
        return f"{self.family.value}:{self.chain_id}"


@dataclass(frozen=True)
class NativeAsset:
    """Gas token of a chain."""

    symbol: str
    decimals: int
    uri_places: Optional[int] = None  # decimal places used in decimal-amount URIs


@dataclass(frozen=True)
class Erc20Asset:
    """ERC-20 token on an EVM chain."""

    symbol: str
    contract_address: str
    decimals: int

    @property
    def address(self) -> str:
        return self.contract_address


@dataclass(frozen=True)
class SplAsset:
    """SPL token on a Solana chain."""

    symbol: str
    mint_address: str
    decimals: int

    @property
    def address(self) -> str:
        return self.mint_address


TokenAsset = Union[Erc20Asset, SplAsset]


@dataclass(frozen=True)
class CcipConfig:
    """Cross-chain router metadata and outbound lanes keyed by destination."""

    chain_selector: str
    router_address: str
    lanes: Mapping[ChainKey, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "lanes", MappingProxyType(dict(self.lanes)))


@dataclass(frozen=True)
class NetworkDescriptor:
    """Identity and payment metadata of one chain."""

    family: ChainFamily
    chain_id: ChainId
    name: str
    native_asset: NativeAsset
    rpc_endpoint: str
    explorer_base_url: str
    is_testnet: bool = True
    status: NetworkStatus = NetworkStatus.ACTIVE
    stable_asset: Optional[TokenAsset] = None
    ccip: Optional[CcipConfig] = None
    bridgeable_assets: FrozenSet[str] = frozenset({"USDC"})
    gas_price_wei: Optional[int] = None

    def __post_init__(self) -> None:
        if self.stable_asset is not None:
            expected = Erc20Asset if self.family == ChainFamily.EVM else SplAsset
            if self.family in (ChainFamily.EVM, ChainFamily.SOLANA) and not isinstance(
                self.stable_asset, expected
            ):
                raise ValueError(
                    f"{self.name}: stable asset must be {expected.__name__} "
                    f"for {self.family.value} networks"
                )
        object.__setattr__(self, "bridgeable_assets", frozenset(self.bridgeable_assets))

    @property
    def key(self) -> ChainKey:
        return ChainKey(self.family, self.chain_id)

    @property
    def native_asset_symbol(self) -> str:
        return self.native_asset.symbol

    @property
    def stable_asset_address(self) -> Optional[str]:
        return self.stable_asset.address if self.stable_asset else None

    def is_native(self, symbol: str) -> bool:
        return symbol.upper() == self.native_asset.symbol.upper()

    def asset_by_symbol(self, symbol: str) -> Optional[Union[NativeAsset, TokenAsset]]:
        """Resolve a symbol to the native asset or the configured token."""
        if self.is_native(symbol):
            return self.native_asset
        if self.stable_asset and self.stable_asset.symbol.upper() == symbol.upper():
            return self.stable_asset
        return None

    def asset_by_address(self, address: str) -> Optional[TokenAsset]:
        """Resolve a contract/mint address to the configured token."""
        if self.stable_asset is None:
            return None
        if self.family == ChainFamily.EVM:
            matches = self.stable_asset.address.lower() == address.lower()
        else:
            matches = self.stable_asset.address == address
        return self.stable_asset if matches else None

    def to_dict(self) -> Dict[str, Any]:
        """Plain dict view for API responses."""
        return {
            "family": self.family.value,
            "chain_id": self.chain_id,
            "name": self.name,
            "native_asset_symbol": self.native_asset.symbol,
            "stable_asset_symbol": self.stable_asset.symbol if self.stable_asset else None,
            "stable_asset_address": self.stable_asset_address,
            "rpc_endpoint": self.rpc_endpoint,
            "explorer_base_url": self.explorer_base_url,
            "is_testnet": self.is_testnet,
            "status": self.status.value,
            "route_capable": self.ccip is not None,
            "lanes": {
                str(key): address for key, address in (self.ccip.lanes.items() if self.ccip else [])
            },
        }
