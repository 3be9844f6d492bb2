"""
Per-session state for an AR payment agent.

Replaces process-wide wallet/network globals with an explicit object that
callers pass around. A session remembers which network it receives
payments on and which codes it created; the codes themselves belong to the
lifecycle manager and outlive the session.
"""

import logging
import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional, Union

from .arcodes.manager import ARCodeLifecycleManager
from .arcodes.models import Anchor, ARCode, CodeStatus
from .errors import ChainLookupError
from .networks.models import ChainKey, NetworkDescriptor
from .networks.registry import RegistrySnapshot
from .payment.models import PaymentRequest
from .routing.resolver import PaymentEstimate, RouteResolver

logger = logging.getLogger(__name__)


@dataclass
class SessionState:
    """Network selection and issued codes for one agent session."""

    registry: RegistrySnapshot
    agent_id: str
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    network_key: Optional[ChainKey] = None
    code_ids: List[str] = field(default_factory=list)
    closed: bool = False

    @property
    def network(self) -> Optional[NetworkDescriptor]:
        if self.network_key is None:
            return None
        return self.registry.get(self.network_key)

    def select_network(self, key: ChainKey) -> Union[NetworkDescriptor, ChainLookupError]:
        """Switch the receiving network; unknown keys leave the selection unchanged."""
        network = self.registry.get(key)
        if network is None:
            return ChainLookupError(f"Unknown network: {key}", {"network": str(key)})
        self.network_key = key
        logger.info(f"Session {self.session_id} switched to {network.name}")
        return network

    def create_code(
        self,
        manager: ARCodeLifecycleManager,
        request: PaymentRequest,
        anchor: Optional[Anchor] = None,
        ttl_ms: Optional[int] = None,
    ) -> ARCode:
        """Create a code owned by this session's agent.

        Raises:
            RuntimeError: If the session is closed
            BuildError: If the payment descriptor cannot be built
        """
        if self.closed:
            raise RuntimeError(f"Session {self.session_id} is closed")
        code = manager.create(request, anchor, ttl_ms, owner_agent_id=self.agent_id)
        self.code_ids.append(code.id)
        return code

    def active_codes(self, manager: ARCodeLifecycleManager) -> List[ARCode]:
        codes = (manager.get(code_id) for code_id in self.code_ids)
        return [c for c in codes if c is not None and c.status == CodeStatus.ACTIVE]

    def estimate_for_payer(
        self, resolver: RouteResolver, payer_key: ChainKey, agent_fee: Decimal
    ) -> PaymentEstimate:
        """Cost for a payer on ``payer_key`` to pay this session's network.

        The resolver is only asked for a lane when the networks differ.
        """
        return resolver.estimate_payment(self.registry.get(payer_key), self.network, agent_fee)

    def close(self) -> None:
        """Drop the session's view. Codes already issued keep running."""
        self.closed = True
        logger.info(f"Session {self.session_id} closed with {len(self.code_ids)} code(s) issued")
