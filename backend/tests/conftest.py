from datetime import datetime, timedelta, timezone

import pytest

from arpay.networks import NetworkRegistry
from arpay.payment import PaymentDescriptorBuilder


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start=None):
        self.now = start or datetime(2025, 1, 1, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, seconds=0, ms=0):
        self.now += timedelta(seconds=seconds, milliseconds=ms)


@pytest.fixture
def registry():
    return NetworkRegistry.from_config()


@pytest.fixture
def builder(registry):
    return PaymentDescriptorBuilder(registry)


@pytest.fixture
def clock():
    return FakeClock()
