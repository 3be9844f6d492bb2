"""
Solana Pay transfer links.

    solana:<recipient>?[spl-token=<mint>&]amount=<decimal>&label=<label>[&message=<memo>]

Unlike EIP-681 the amount is a human decimal, rendered at the asset's URI
precision (token decimals for SPL tokens, the native asset's declared
places for SOL). Solana Pay links carry no cluster, so native payments
resolve to the configured default cluster.
"""

import logging
import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Tuple
from urllib.parse import quote

import base58

from ..errors import BuildError, ParseError
from ..networks.models import ChainFamily, NetworkDescriptor
from .codec import PaymentCodec, parse_query, require_positive_amount
from .models import PaymentRequest

logger = logging.getLogger(__name__)

PUBLIC_KEY_LENGTH = 32

# Symbol reported for well-formed mints the registry does not know
UNKNOWN_SPL_SYMBOL = "SPL"

_DECIMAL_AMOUNT = re.compile(r"^[0-9]+(\.[0-9]+)?$")


def is_valid_solana_address(address: str) -> bool:
    """True iff ``address`` is base58 for a 32-byte public key."""
    if not isinstance(address, str) or not 32 <= len(address) <= 44:
        return False
    try:
        return len(base58.b58decode(address)) == PUBLIC_KEY_LENGTH
    except ValueError:
        return False


def default_label(asset_symbol: str) -> str:
    return f"AR Agent {asset_symbol} Payment"


def format_amount(amount: Decimal, places: int) -> str:
    """Fixed-point rendering with ``places`` decimals."""
    quantum = Decimal(1).scaleb(-places)
    return f"{amount.quantize(quantum, rounding=ROUND_HALF_UP):f}"


class SolanaPayCodec(PaymentCodec):
    """Solana Pay encoder/decoder."""

    family = ChainFamily.SOLANA
    scheme = "solana"

    def __init__(self, registry, default_chain_id: str = "devnet"):
        super().__init__(registry)
        self.default_chain_id = default_chain_id

    def _network(self, request: PaymentRequest) -> NetworkDescriptor:
        network = self.registry.get_by_chain_id(ChainFamily.SOLANA, request.chain_id)
        if network is None:
            raise BuildError(
                "unknown_chain",
                f"Solana cluster {request.chain_id} is not registered",
                {"chain_id": request.chain_id},
            )
        return network

    def _asset_precision(
        self, network: NetworkDescriptor, request: PaymentRequest
    ) -> Tuple[Optional[str], int]:
        """Resolve (mint, places) for the requested asset."""
        mint = request.asset_contract_or_mint
        if mint is None:
            if not network.is_native(request.asset_symbol):
                raise BuildError(
                    "invalid_request",
                    f"{request.asset_symbol} is not native on {network.name}; "
                    f"a mint address is required",
                )
            native = network.native_asset
            places = native.uri_places if native.uri_places is not None else native.decimals
            return None, places

        if not is_valid_solana_address(mint):
            raise BuildError("invalid_request", f"Invalid token mint address: {mint}")
        asset = network.asset_by_address(mint)
        if asset is None or asset.symbol.upper() != request.asset_symbol.upper():
            raise BuildError(
                "unknown_asset",
                f"{request.asset_symbol} mint {mint} is not configured on {network.name}",
                {"mint": mint, "chain_id": network.chain_id},
            )
        return mint, asset.decimals

    def encode(self, request: PaymentRequest) -> str:
        """
        Render a payment request as a Solana Pay transfer link.

        Raises:
            BuildError: If the cluster, asset, recipient or amount is invalid
        """
        network = self._network(request)
        amount = require_positive_amount(request)

        if not is_valid_solana_address(request.recipient_address):
            raise BuildError(
                "invalid_request",
                f"Invalid Solana recipient address: {request.recipient_address}",
            )

        mint, places = self._asset_precision(network, request)
        amount_text = format_amount(amount, places)
        if Decimal(amount_text) <= 0:
            raise BuildError(
                "invalid_request", f"Amount {amount} rounds to zero at {places} decimal places"
            )

        label = request.label or default_label(request.asset_symbol)
        uri = f"solana:{request.recipient_address}?"
        if mint:
            uri += f"spl-token={mint}&"
        uri += f"amount={amount_text}&label={quote(label, safe='')}"
        if request.memo:
            uri += f"&message={quote(request.memo, safe='')}"
        return uri

    def _decode(self, uri: str) -> PaymentRequest:
        text = uri.strip()
        if not text.lower().startswith("solana:"):
            raise ParseError("malformed", f"Not a Solana Pay link: {uri}")

        body = text[len("solana:"):]
        recipient, _, query = body.partition("?")
        if not is_valid_solana_address(recipient):
            raise ParseError("invalid_recipient", f"Invalid Solana recipient address: {recipient}")

        params = parse_query(query)

        amount_text = params.get("amount")
        if amount_text is None or not _DECIMAL_AMOUNT.match(amount_text):
            raise ParseError("invalid_amount", f"Invalid amount: {amount_text}")
        amount = Decimal(amount_text)
        if amount <= 0:
            raise ParseError("invalid_amount", "Amount must be positive")

        mint = params.get("spl-token")
        if mint is not None:
            if not is_valid_solana_address(mint):
                raise ParseError("invalid_mint", f"Invalid token mint address: {mint}")
            network, symbol, decimals = self._resolve_mint(mint)
        else:
            network = self.registry.get_by_chain_id(ChainFamily.SOLANA, self.default_chain_id)
            if network is None:
                raise ParseError(
                    "unknown_chain", f"Default Solana cluster {self.default_chain_id} is not registered"
                )
            symbol = network.native_asset.symbol
            decimals = network.native_asset.decimals

        if -amount.as_tuple().exponent > decimals:
            raise ParseError(
                "invalid_amount", f"Amount {amount_text} exceeds {decimals} decimals of {symbol}"
            )

        label = params.get("label") or None
        if label == default_label(symbol):
            label = None

        return PaymentRequest(
            recipient_address=recipient,
            asset_symbol=symbol,
            asset_contract_or_mint=mint,
            amount=amount,
            chain_family=ChainFamily.SOLANA,
            chain_id=network.chain_id,
            memo=params.get("message") or params.get("memo") or None,
            label=label,
        )

    def _resolve_mint(self, mint: str) -> Tuple[NetworkDescriptor, str, int]:
        found = self.registry.find_by_asset_address(ChainFamily.SOLANA, mint)
        if found is not None:
            network, asset = found
            return network, asset.symbol, asset.decimals

        network = self.registry.get_by_chain_id(ChainFamily.SOLANA, self.default_chain_id)
        if network is None:
            raise ParseError(
                "unknown_chain", f"Default Solana cluster {self.default_chain_id} is not registered"
            )
        logger.info(f"Mint {mint} not in registry; decoding as generic SPL token")
        # Precision unknown; accept up to the native asset's decimals
        return network, UNKNOWN_SPL_SYMBOL, network.native_asset.decimals
