"""
Network Registry.

Read-only directory of every supported chain, keyed by canonical
(family, chain_id). Lookups on unknown ids return None; callers decide
whether absence is fatal.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

from web3 import Web3

from .models import (
    ChainFamily,
    ChainId,
    ChainKey,
    NetworkDescriptor,
    NetworkStatus,
    TokenAsset,
)

logger = logging.getLogger(__name__)

# Families whose chain ids are numeric on the wire
NUMERIC_CHAIN_ID_FAMILIES = (ChainFamily.EVM, ChainFamily.HEDERA)


def normalize_chain_id(family: ChainFamily, chain_id: ChainId) -> Optional[ChainId]:
    """Coerce a chain id to the type the family uses, or None if impossible."""
    if family in NUMERIC_CHAIN_ID_FAMILIES:
        if isinstance(chain_id, bool):
            return None
        if isinstance(chain_id, int):
            return chain_id
        text = str(chain_id).strip()
        if text.lower().startswith("0x"):
            try:
                return int(text, 16)
            except ValueError:
                return None
        return int(text) if text.isdigit() else None
    return str(chain_id)



def _check_evm_ccip_addresses(network: NetworkDescriptor) -> None:
    # Only the hex shape is checked; checksum casing is not enforced on static
    # config. Lanes into non-EVM families may name the destination program.
    addresses = [("router", network.ccip.router_address)]
    addresses += [
        (f"lane to {dest}", addr)
        for dest, addr in network.ccip.lanes.items()
        if dest.family == ChainFamily.EVM
    ]
    for label, address in addresses:
        if not isinstance(address, str) or not Web3.is_address(address.lower()):
            raise ValueError(f"{network.name} {label} has a malformed address: {address!r}")


@dataclass(frozen=True)
class RegistrySnapshot:
    """Immutable view of the registry handed to collaborators."""

    networks: Mapping[ChainKey, NetworkDescriptor]

    def get(self, key: ChainKey) -> Optional[NetworkDescriptor]:
        return self.networks.get(key)


class NetworkRegistry:
    """Registry of all supported networks and their cross-chain lanes."""

    def __init__(self, networks: Iterable[NetworkDescriptor]):
        """Build the registry from a static table.

        Args:
            networks: NetworkDescriptor records supplied at startup

        Raises:
            ValueError: If a (family, chain_id) repeats, a lane points at
                an unregistered network, or an EVM router or EVM-to-EVM lane
                address is not a 20-byte hex address
        """
        table: Dict[ChainKey, NetworkDescriptor] = {}
        for network in networks:
            if network.key in table:
                raise ValueError(f"Duplicate network registration: {network.key}")
            table[network.key] = network

        for network in table.values():
            if network.ccip is None:
                continue
            for destination in network.ccip.lanes:
                if destination not in table:
                    raise ValueError(
                        f"Lane {network.key} -> {destination} references an unknown network"
                    )
                if destination == network.key:
                    raise ValueError(f"Lane {network.key} points at itself")
            if network.family == ChainFamily.EVM:
                _check_evm_ccip_addresses(network)

        self._networks: Mapping[ChainKey, NetworkDescriptor] = MappingProxyType(table)
        logger.info(
            f"Network registry loaded: {len(table)} networks, "
            f"{sum(1 for n in table.values() if n.ccip)} route capable"
        )

    @classmethod
    def from_config(cls, networks: Optional[Iterable[NetworkDescriptor]] = None) -> "NetworkRegistry":
        """Create a registry from the given table or the bundled default."""
        if networks is None:
            from .config import NETWORKS

            networks = NETWORKS
        return cls(networks)

    def __len__(self) -> int:
        return len(self._networks)

    def __contains__(self, key: object) -> bool:
        return key in self._networks

    def get(self, key: ChainKey) -> Optional[NetworkDescriptor]:
        """Get a network by canonical key.

        Args:
            key: ChainKey of the network

        Returns:
            NetworkDescriptor or None if not found
        """
        return self._networks.get(key)

    def get_by_chain_id(
        self, family: Union[ChainFamily, str], chain_id: ChainId
    ) -> Optional[NetworkDescriptor]:
        """Get a network by family and chain id.

        Args:
            family: Chain family (enum or its string value)
            chain_id: Numeric or opaque chain id; numeric strings are accepted
                for numeric families

        Returns:
            NetworkDescriptor or None if not found
        """
        try:
            family = ChainFamily(family)
        except ValueError:
            return None
        normalized = normalize_chain_id(family, chain_id)
        if normalized is None:
            return None
        return self._networks.get(ChainKey(family, normalized))

    def list_all(self) -> List[NetworkDescriptor]:
        return list(self._networks.values())

    def list_by_family(self, family: ChainFamily) -> List[NetworkDescriptor]:
        return [n for n in self._networks.values() if n.family == family]

    def list_active(self, family: Optional[ChainFamily] = None) -> List[NetworkDescriptor]:
        """Get all active networks, optionally restricted to one family.

        Returns:
            List of NetworkDescriptor instances with status ACTIVE
        """
        return [
            n
            for n in self._networks.values()
            if n.status == NetworkStatus.ACTIVE and (family is None or n.family == family)
        ]

    @staticmethod
    def is_route_capable(descriptor: NetworkDescriptor) -> bool:
        """True iff the network carries a CCIP block."""
        return descriptor.ccip is not None

    def list_route_capable(self) -> List[NetworkDescriptor]:
        return [n for n in self._networks.values() if self.is_route_capable(n)]

    def find_by_asset_address(
        self, family: ChainFamily, address: str
    ) -> Optional[Tuple[NetworkDescriptor, TokenAsset]]:
        """Resolve a contract/mint address to its network and asset.

        Returns:
            (NetworkDescriptor, asset) or None if no network in the family
            lists that address
        """
        for network in self.list_by_family(family):
            asset = network.asset_by_address(address)
            if asset is not None:
                return network, asset
        return None

    def snapshot(self) -> RegistrySnapshot:
        return RegistrySnapshot(networks=self._networks)
