"""
PaymentDescriptorBuilder - wallet-scannable payment strings per chain family.

Dispatch is by ``request.chain_family`` only. Errors come back as values:
``build`` returns the URI or a BuildError, ``parse`` returns the request or
a ParseError.
"""

import logging
from typing import Dict, List, Optional, Union

from ..errors import BuildError, ParseError
from ..networks.models import ChainFamily
from ..networks.registry import NetworkRegistry
from .codec import PaymentCodec
from .evm import EvmPaymentCodec
from .models import PaymentRequest
from .solana import SolanaPayCodec

logger = logging.getLogger(__name__)


class PaymentDescriptorBuilder:
    """Builds and parses payment descriptors across supported families."""

    def __init__(
        self,
        registry: NetworkRegistry,
        default_solana_chain_id: str = "devnet",
        codecs: Optional[List[PaymentCodec]] = None,
    ):
        """Initialize with the network registry.

        Args:
            registry: Registry used to resolve chains, contracts and mints
            default_solana_chain_id: Cluster assumed for native Solana links
            codecs: Optional codec list overriding the default EIP-681 + Solana set
        """
        self.registry = registry
        if codecs is None:
            codecs = [
                EvmPaymentCodec(registry),
                SolanaPayCodec(registry, default_chain_id=default_solana_chain_id),
            ]
        self._codecs: Dict[ChainFamily, PaymentCodec] = {
            family: codec for codec in codecs for family in codec.families
        }

    def supported_families(self) -> List[ChainFamily]:
        return list(self._codecs)

    def codec_for(self, family: Union[ChainFamily, str]) -> Optional[PaymentCodec]:
        try:
            return self._codecs.get(ChainFamily(family))
        except ValueError:
            return None

    def build(self, request: PaymentRequest) -> Union[str, BuildError]:
        """Render ``request`` as a wallet deep link.

        Returns:
            The payment URI, or BuildError("unsupported_family") /
            BuildError(<validation reason>)
        """
        codec = self.codec_for(request.chain_family)
        if codec is None:
            return BuildError(
                "unsupported_family",
                f"No payment encoding for chain family: {request.family_value}",
                {"chain_family": request.family_value},
            )
        try:
            uri = codec.encode(request)
        except BuildError as e:
            logger.warning(f"Payment descriptor build failed: {e.message}")
            return e
        logger.info(
            f"Built {codec.scheme} descriptor for {request.amount} {request.asset_symbol} "
            f"on {request.family_value}:{request.chain_id}"
        )
        return uri

    def decode(self, uri: str) -> Union[PaymentRequest, ParseError]:
        """Parse a deep link produced by any supported family."""
        if not isinstance(uri, str):
            return ParseError("malformed", "Payment descriptor must be a string")
        for codec in dict.fromkeys(self._codecs.values()):
            if codec.handles(uri):
                return codec.decode(uri)
        return ParseError("unsupported_scheme", f"Unsupported payment URI scheme: {uri[:32]}")

    parse = decode
