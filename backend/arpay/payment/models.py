"""
Payment request model and amount conversions.
"""

from dataclasses import dataclass
from decimal import ROUND_FLOOR, Decimal, InvalidOperation, localcontext
from typing import Any, Dict, Optional, Union

from ..networks.models import ChainFamily, ChainId
from ..networks.registry import normalize_chain_id

# Enough precision for any uint256 value plus its decimal scale
_UNIT_PRECISION = 100


def to_decimal(value: Union[Decimal, int, float, str]) -> Decimal:
    """Coerce an amount to Decimal without binary float artifacts."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(value)


def amount_to_units(amount: Decimal, decimals: int) -> int:
    """floor(amount * 10^decimals) as an exact integer."""
    with localcontext() as ctx:
        ctx.prec = _UNIT_PRECISION
        scaled = to_decimal(amount) * (Decimal(10) ** decimals)
        return int(scaled.to_integral_value(rounding=ROUND_FLOOR))


def units_to_amount(units: int, decimals: int) -> Decimal:
    """Exact inverse of amount_to_units for representable amounts."""
    with localcontext() as ctx:
        ctx.prec = _UNIT_PRECISION
        return Decimal(units) / (Decimal(10) ** decimals)


@dataclass(frozen=True)
class PaymentRequest:
    """A request for ``amount`` of an asset paid to ``recipient_address``."""

    recipient_address: str
    asset_symbol: str
    amount: Decimal
    chain_family: Union[ChainFamily, str]
    chain_id: ChainId
    asset_contract_or_mint: Optional[str] = None
    memo: Optional[str] = None
    label: Optional[str] = None

    def __post_init__(self) -> None:
        try:
            family = ChainFamily(self.chain_family)
        except ValueError:
            family = None
        if family is not None:
            object.__setattr__(self, "chain_family", family)
            normalized = normalize_chain_id(family, self.chain_id)
            if normalized is not None:
                object.__setattr__(self, "chain_id", normalized)
        try:
            object.__setattr__(self, "amount", to_decimal(self.amount))
        except (InvalidOperation, TypeError, ValueError):
            # Left as-is; builders reject non-decimal amounts
            pass

    @property
    def family_value(self) -> str:
        family = self.chain_family
        return family.value if isinstance(family, ChainFamily) else str(family)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "recipient_address": self.recipient_address,
            "asset_symbol": self.asset_symbol,
            "asset_contract_or_mint": self.asset_contract_or_mint,
            "amount": str(self.amount),
            "chain_family": self.family_value,
            "chain_id": self.chain_id,
            "memo": self.memo,
            "label": self.label,
        }
