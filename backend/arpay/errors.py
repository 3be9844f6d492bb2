"""
Error taxonomy for the AR payment core.

Every error carries a stable ``error_code`` so API responses stay machine
readable. Registry, builder, decoder and route errors are handed back to the
caller as values; persistence errors never leave the lifecycle manager.
"""

from typing import Any, Dict, Optional


class ArPayError(Exception):
    """Base exception for all AR payment core errors."""

    def __init__(
        self,
        error_code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.error_code = error_code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    @property
    def reason(self) -> str:
        """Short reason, e.g. ``unsupported`` for ``route:unsupported``."""
        return self.error_code.split(":", 1)[-1]

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to API error response format."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ChainLookupError(ArPayError):
    """Unknown chain or asset."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("lookup:not_found", message, details)


class BuildError(ArPayError):
    """
    Payment descriptor could not be built.

    Reasons:
    - unsupported_family: no codec for the request's chain family
    - invalid_request: amount, address or asset fields are malformed
    - unknown_chain: chain id is not registered
    - unknown_asset: contract/mint does not belong to the chain
    """

    def __init__(
        self,
        reason: str,
        message: str = "",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(f"build:{reason}", message or reason, details)


class ParseError(ArPayError):
    """Malformed or unresolvable wire payload."""

    def __init__(
        self,
        reason: str,
        message: str = "",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(f"parse:{reason}", message or reason, details)


class RouteError(ArPayError):
    """No usable lane between two networks."""

    def __init__(
        self,
        reason: str = "unsupported",
        message: str = "",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(f"route:{reason}", message or reason, details)


class PersistenceError(ArPayError):
    """
    Remote store unavailable or rejected the write.

    Always non-fatal to the in-memory code lifecycle.
    """

    def __init__(
        self,
        reason: str,
        message: str = "",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(f"persistence:{reason}", message or reason, details)


class CodeNotFoundError(ArPayError):
    """AR code id was never issued by this manager."""

    def __init__(self, code_id: str):
        super().__init__(
            "code:not_found",
            f"AR code not found: {code_id}",
            {"code_id": code_id},
        )
