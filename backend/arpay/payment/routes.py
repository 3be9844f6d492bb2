"""
Payment Descriptor API Routes.

Endpoints for building wallet deep links and parsing them back.
"""

from decimal import Decimal
from typing import Any, Dict, Optional, Union

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..errors import BuildError, ParseError
from ..services import ArPayServices, get_services
from .models import PaymentRequest

router = APIRouter(prefix="/descriptors", tags=["payment"])


class PaymentRequestBody(BaseModel):
    """Request body describing a payment."""
    recipient_address: str
    asset_symbol: str
    amount: Decimal
    chain_family: str
    chain_id: Union[int, str]
    asset_contract_or_mint: Optional[str] = None
    memo: Optional[str] = None
    label: Optional[str] = None

    def to_request(self) -> PaymentRequest:
        return PaymentRequest(
            recipient_address=self.recipient_address,
            asset_symbol=self.asset_symbol,
            amount=self.amount,
            chain_family=self.chain_family,
            chain_id=self.chain_id,
            asset_contract_or_mint=self.asset_contract_or_mint,
            memo=self.memo,
            label=self.label,
        )


class ParseDescriptorRequest(BaseModel):
    """Request body for descriptor parsing."""
    uri: str


class DescriptorResponse(BaseModel):
    """Built payment descriptor."""
    uri: str
    chain_family: str
    chain_id: Union[int, str]


@router.post("", response_model=DescriptorResponse)
async def build_descriptor(
    body: PaymentRequestBody, services: ArPayServices = Depends(get_services)
) -> DescriptorResponse:
    """Build a wallet deep link for a payment request.

    Raises:
        HTTPException: 400 with the build error if the request is invalid
    """
    request = body.to_request()
    result = services.builder.build(request)
    if isinstance(result, BuildError):
        raise HTTPException(status_code=400, detail=result.to_dict())
    return DescriptorResponse(uri=result, chain_family=request.family_value, chain_id=request.chain_id)


@router.post("/parse")
async def parse_descriptor(
    body: ParseDescriptorRequest, services: ArPayServices = Depends(get_services)
) -> Dict[str, Any]:
    """Parse a wallet deep link back into a payment request."""
    result = services.builder.decode(body.uri)
    if isinstance(result, ParseError):
        raise HTTPException(status_code=400, detail=result.to_dict())
    return result.to_dict()
