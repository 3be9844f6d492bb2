"""
AR Code API Routes.

Endpoints for creating AR payment codes, confirming scans and inspecting the
lifecycle manager.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ..errors import BuildError, CodeNotFoundError
from ..payment.routes import PaymentRequestBody
from ..services import ArPayServices, get_services
from .manager import DEFAULT_SIZE_HINT
from .models import Anchor

router = APIRouter(prefix="/codes", tags=["ar-codes"])


class AnchorBody(BaseModel):
    """Anchor position in meters."""
    x: float = 0.0
    y: float = 1.0
    z: float = -2.0


class CreateCodeRequest(BaseModel):
    """Request body for AR code creation."""
    payment: PaymentRequestBody
    anchor: Optional[AnchorBody] = None
    ttl_ms: Optional[int] = Field(default=None, gt=0)
    owner_agent_id: Optional[str] = None
    size_hint: float = DEFAULT_SIZE_HINT


class ScanRequest(BaseModel):
    """Optional scan confirmation details."""
    scanned_at: Optional[datetime] = None


@router.post("", status_code=201)
async def create_code(
    body: CreateCodeRequest, services: ArPayServices = Depends(get_services)
) -> Dict[str, Any]:
    """Create an Active AR code; persistence happens in the background.

    Raises:
        HTTPException: 400 if the payment descriptor cannot be built
    """
    anchor = Anchor(body.anchor.x, body.anchor.y, body.anchor.z) if body.anchor else None
    try:
        code = services.manager.create(
            body.payment.to_request(),
            anchor,
            body.ttl_ms,
            owner_agent_id=body.owner_agent_id,
            size_hint=body.size_hint,
        )
    except BuildError as e:
        raise HTTPException(status_code=400, detail=e.to_dict())
    return code.to_dict()


@router.get("")
async def list_codes(
    agent_id: Optional[str] = None, services: ArPayServices = Depends(get_services)
) -> Dict[str, Any]:
    """List active codes, or every live code owned by ``agent_id``."""
    manager = services.manager
    codes = manager.list_for_agent(agent_id) if agent_id else manager.list_active()
    return {"codes": [c.to_dict() for c in codes], "count": len(codes)}


@router.get("/stats")
async def code_stats(services: ArPayServices = Depends(get_services)) -> Dict[str, int]:
    return services.manager.stats()


@router.get("/{code_id}")
async def get_code(code_id: str, services: ArPayServices = Depends(get_services)) -> Dict[str, Any]:
    code = services.manager.get(code_id)
    if code is None:
        raise HTTPException(status_code=404, detail=CodeNotFoundError(code_id).to_dict())
    return code.to_dict()


@router.post("/{code_id}/scan")
async def scan_code(
    code_id: str,
    body: Optional[ScanRequest] = None,
    services: ArPayServices = Depends(get_services),
) -> Dict[str, Any]:
    """Confirm a scan. Already scanned or expired codes are returned unchanged."""
    scanned_at = body.scanned_at if body else None
    if scanned_at is not None and scanned_at.tzinfo is None:
        scanned_at = scanned_at.replace(tzinfo=timezone.utc)
    result = services.manager.mark_scanned(code_id, scanned_at)
    if isinstance(result, CodeNotFoundError):
        raise HTTPException(status_code=404, detail=result.to_dict())
    return result.to_dict()
