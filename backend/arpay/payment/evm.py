"""
EVM payment links (EIP-681).

Token payments call ``transfer`` on the ERC-20 contract:

    ethereum:<contract>@<chainId>/transfer?address=<recipient>&uint256=<units>

Native payments target the recipient directly:

    ethereum:<recipient>@<chainId>?value=<wei>

Hedera networks share the format through their JSON-RPC relay, which
counts HBAR in 18-decimal weibars.

Amounts are integer smallest units, floor(amount * 10^decimals).
"""

import re
from typing import Optional

from web3 import Web3

from ..errors import BuildError, ParseError
from ..networks.models import ChainFamily, NetworkDescriptor
from .codec import PaymentCodec, parse_query, require_positive_amount
from .models import PaymentRequest, amount_to_units, units_to_amount

# EIP-681 default when a link omits the chain id
DEFAULT_EVM_CHAIN_ID = 1

TRANSFER_FUNCTION = "transfer"

_EIP681_PATTERN = re.compile(
    r"^ethereum:(?:pay-)?(?P<target>0x[0-9a-fA-F]{40})"
    r"(?:@(?P<chain_id>[0-9]+))?"
    r"(?:/(?P<function>[A-Za-z_][A-Za-z0-9_]*))?"
    r"(?:\?(?P<query>.*))?$"
)
_UNSIGNED_INTEGER = re.compile(r"^[0-9]+$")


def is_valid_evm_address(address: str) -> bool:
    """Hex address check; mixed-case addresses must carry a valid checksum."""
    return isinstance(address, str) and Web3.is_address(address)


class EvmPaymentCodec(PaymentCodec):
    """EIP-681 encoder/decoder for EVM networks and EVM-compatible relays."""

    family = ChainFamily.EVM
    families = (ChainFamily.EVM, ChainFamily.HEDERA)
    scheme = "ethereum"

    def _lookup(self, chain_id) -> Optional[NetworkDescriptor]:
        for family in self.families:
            network = self.registry.get_by_chain_id(family, chain_id)
            if network is not None:
                return network
        return None

    def _network(self, request: PaymentRequest) -> NetworkDescriptor:
        network = self.registry.get_by_chain_id(request.chain_family, request.chain_id)
        if network is None or network.family not in self.families:
            raise BuildError(
                "unknown_chain",
                f"{request.family_value} chain {request.chain_id} is not registered",
                {"chain_id": request.chain_id},
            )
        return network

    def encode(self, request: PaymentRequest) -> str:
        """
        Render a payment request as an EIP-681 link.

        Raises:
            BuildError: If the chain, asset, recipient or amount is invalid
        """
        network = self._network(request)
        amount = require_positive_amount(request)

        if not is_valid_evm_address(request.recipient_address):
            raise BuildError(
                "invalid_request",
                f"Invalid EVM recipient address: {request.recipient_address}",
            )

        contract = request.asset_contract_or_mint
        if contract is None:
            if not network.is_native(request.asset_symbol):
                raise BuildError(
                    "invalid_request",
                    f"{request.asset_symbol} is not native on {network.name}; "
                    f"a contract address is required",
                )
            wei = amount_to_units(amount, network.native_asset.decimals)
            if wei <= 0:
                raise BuildError("invalid_request", f"Amount {amount} is below one wei")
            return f"ethereum:{request.recipient_address}@{network.chain_id}?value={wei}"

        asset = network.asset_by_address(contract)
        if asset is None or asset.symbol.upper() != request.asset_symbol.upper():
            raise BuildError(
                "unknown_asset",
                f"{request.asset_symbol} contract {contract} is not configured on {network.name}",
                {"contract": contract, "chain_id": network.chain_id},
            )

        units = amount_to_units(amount, asset.decimals)
        if units <= 0:
            raise BuildError(
                "invalid_request",
                f"Amount {amount} is below the smallest unit of {asset.symbol}",
            )
        return (
            f"ethereum:{contract}@{network.chain_id}/{TRANSFER_FUNCTION}"
            f"?address={request.recipient_address}&uint256={units}"
        )

    def _decode(self, uri: str) -> PaymentRequest:
        match = _EIP681_PATTERN.match(uri.strip())
        if not match:
            raise ParseError("malformed", f"Not an EIP-681 payment link: {uri}")

        params = parse_query(match.group("query") or "")
        chain_text = match.group("chain_id") or params.get("chainId")
        chain_id = int(chain_text) if chain_text and chain_text.isdigit() else None
        if chain_text and chain_id is None:
            raise ParseError("unknown_chain", f"Invalid chain id: {chain_text}")
        if chain_id is None:
            chain_id = DEFAULT_EVM_CHAIN_ID

        network = self._lookup(chain_id)
        if network is None:
            raise ParseError(
                "unknown_chain", f"EVM chain {chain_id} is not registered", {"chain_id": chain_id}
            )

        target = match.group("target")
        function = match.group("function")

        if function == TRANSFER_FUNCTION:
            asset = network.asset_by_address(target)
            if asset is None:
                raise ParseError(
                    "unknown_asset",
                    f"Contract {target} is not configured on {network.name}",
                    {"contract": target, "chain_id": chain_id},
                )
            recipient = params.get("address", "")
            if not is_valid_evm_address(recipient):
                raise ParseError("invalid_recipient", f"Invalid EVM recipient address: {recipient}")
            units = self._units(params.get("uint256"))
            return PaymentRequest(
                recipient_address=recipient,
                asset_symbol=asset.symbol,
                asset_contract_or_mint=target,
                amount=units_to_amount(units, asset.decimals),
                chain_family=network.family,
                chain_id=network.chain_id,
            )

        if function is not None:
            raise ParseError("unsupported_function", f"Unsupported EIP-681 function: {function}")

        if not is_valid_evm_address(target):
            raise ParseError("invalid_recipient", f"Invalid EVM recipient address: {target}")
        units = self._units(params.get("value"))
        return PaymentRequest(
            recipient_address=target,
            asset_symbol=network.native_asset.symbol,
            amount=units_to_amount(units, network.native_asset.decimals),
            chain_family=network.family,
            chain_id=network.chain_id,
        )

    @staticmethod
    def _units(value) -> int:
        if value is None:
            raise ParseError("invalid_amount", "Missing amount parameter")
        if not _UNSIGNED_INTEGER.match(value):
            raise ParseError("invalid_amount", f"Amount must be integer smallest units, got {value}")
        units = int(value)
        if units <= 0:
            raise ParseError("invalid_amount", "Amount must be positive")
        return units
