"""
Payment Module - chain-specific payment descriptors.

Encodes payment requests as wallet deep links (EIP-681 for EVM networks,
Solana Pay for Solana) and parses them back.
"""

from .builder import PaymentDescriptorBuilder
from .codec import PaymentCodec
from .evm import EvmPaymentCodec, is_valid_evm_address
from .models import PaymentRequest, amount_to_units, units_to_amount
from .solana import SolanaPayCodec, is_valid_solana_address

__all__ = [
    "PaymentDescriptorBuilder",
    "PaymentCodec",
    "EvmPaymentCodec",
    "SolanaPayCodec",
    "PaymentRequest",
    "amount_to_units",
    "units_to_amount",
    "is_valid_evm_address",
    "is_valid_solana_address",
]
