"""
arpay - payment core for AR agents.

Network registry, cross-chain route resolution, wallet payment descriptors
and the lifecycle of AR-anchored payment codes.
"""

from .arcodes import ARCodeLifecycleManager, Anchor, ARCode, CodeStatus, PersistenceState
from .errors import (
    ArPayError,
    BuildError,
    ChainLookupError,
    CodeNotFoundError,
    ParseError,
    PersistenceError,
    RouteError,
)
from .networks import ChainFamily, ChainKey, NetworkDescriptor, NetworkRegistry
from .payment import PaymentDescriptorBuilder, PaymentRequest
from .routing import RouteResolver
from .session import SessionState

__version__ = "0.1.0"

__all__ = [
    "ARCodeLifecycleManager",
    "Anchor",
    "ARCode",
    "CodeStatus",
    "PersistenceState",
    "ArPayError",
    "BuildError",
    "ChainLookupError",
    "CodeNotFoundError",
    "ParseError",
    "PersistenceError",
    "RouteError",
    "ChainFamily",
    "ChainKey",
    "NetworkDescriptor",
    "NetworkRegistry",
    "PaymentDescriptorBuilder",
    "PaymentRequest",
    "RouteResolver",
    "SessionState",
]
