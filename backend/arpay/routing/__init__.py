"""
Routing package - direct cross-chain lane resolution and fee estimates.
"""

from .resolver import FeeEstimate, LaneEdge, PaymentEstimate, Route, RouteResolver

__all__ = [
    "RouteResolver",
    "LaneEdge",
    "FeeEstimate",
    "Route",
    "PaymentEstimate",
]
