"""
Common surface of per-family payment URI codecs.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, Tuple, Union
from urllib.parse import parse_qsl

from ..errors import BuildError, ParseError
from ..networks.models import ChainFamily
from ..networks.registry import NetworkRegistry
from .models import PaymentRequest

logger = logging.getLogger(__name__)


class PaymentCodec:
    """Encodes PaymentRequests into wallet deep links and back.

    Subclasses implement ``encode`` (raising BuildError) and ``_decode``
    (raising ParseError). ``decode`` never lets an exception escape.
    """

    family: ChainFamily
    scheme: str

    def __init__(self, registry: NetworkRegistry):
        self.registry = registry

    @property
    def families(self) -> Tuple[ChainFamily, ...]:
        """Chain families whose payments this codec encodes."""
        return (self.family,)

    def encode(self, request: PaymentRequest) -> str:
        raise NotImplementedError

    def _decode(self, uri: str) -> PaymentRequest:
        raise NotImplementedError

    def handles(self, uri: str) -> bool:
        return uri.lower().startswith(f"{self.scheme}:")

    def decode(self, uri: str) -> Union[PaymentRequest, ParseError]:
        """Parse a deep link; malformed input yields ParseError, never raises."""
        try:
            return self._decode(uri)
        except ParseError as e:
            logger.info(f"Rejected {self.scheme} payload: {e.message}")
            return e
        except (InvalidOperation, ValueError, TypeError) as e:
            logger.info(f"Malformed {self.scheme} payload: {e}")
            return ParseError("malformed", f"Malformed {self.scheme} payload: {e}")


def require_positive_amount(request: PaymentRequest) -> Decimal:
    """Validate the request amount for encoding."""
    amount = request.amount
    if not isinstance(amount, Decimal) or not amount.is_finite():
        raise BuildError("invalid_request", f"Amount must be a finite decimal, got {amount!r}")
    if amount <= 0:
        raise BuildError("invalid_request", f"Amount must be positive, got {amount}")
    return amount


def parse_query(query: str) -> Dict[str, str]:
    """Parse a URI query string, rejecting repeated keys."""
    params: Dict[str, str] = {}
    for key, value in parse_qsl(query, keep_blank_values=True):
        if key in params:
            raise ParseError("malformed", f"Repeated query parameter: {key}")
        params[key] = value
    return params
