"""
Service wiring for the HTTP API.

Builds the registry, resolver, descriptor builder and lifecycle manager from
settings and exposes them to route handlers through ``app.state``.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from .arcodes.gateway import HttpPersistenceGateway, PersistenceGateway
from .arcodes.manager import ARCodeLifecycleManager
from .config import ArPaySettings
from .networks.registry import NetworkRegistry
from .payment.builder import PaymentDescriptorBuilder
from .routing.resolver import RouteResolver

logger = logging.getLogger(__name__)


@dataclass
class ArPayServices:
    """Core components shared by all request handlers."""

    settings: ArPaySettings
    registry: NetworkRegistry
    resolver: RouteResolver
    builder: PaymentDescriptorBuilder
    manager: ARCodeLifecycleManager
    gateway: Optional[PersistenceGateway] = None


def build_services(
    settings: ArPaySettings,
    registry: Optional[NetworkRegistry] = None,
    gateway: Optional[PersistenceGateway] = None,
) -> ArPayServices:
    """
    Assemble the core components.

    Without an explicit gateway, an HTTP gateway is created when
    ``persistence_url`` is configured; otherwise codes stay local only.
    """
    settings.validate_config()
    registry = registry or NetworkRegistry.from_config()

    if gateway is None and settings.persistence_url:
        gateway = HttpPersistenceGateway(
            settings.persistence_url,
            api_key=settings.persistence_api_key,
            table=settings.persistence_table,
            timeout=settings.persistence_timeout_s,
        )
        logger.info(f"AR code persistence enabled: {settings.persistence_url}")
    elif gateway is None:
        logger.info("AR code persistence disabled; codes are kept local only")

    builder = PaymentDescriptorBuilder(
        registry, default_solana_chain_id=settings.default_solana_chain_id
    )
    return ArPayServices(
        settings=settings,
        registry=registry,
        resolver=RouteResolver.from_settings(registry, settings),
        builder=builder,
        manager=ARCodeLifecycleManager.from_settings(builder, settings, gateway=gateway),
        gateway=gateway,
    )


def get_services(request: Request) -> ArPayServices:
    """FastAPI dependency returning the app's services."""
    return request.app.state.services
