"""
Order Service Factory

Factory functions for creating service instances with real dependencies.
This is the ONLY place that imports I/O-dependent modules.

Usage:
    from .factory import create_order_service
    service = create_order_service(settings, event_bus)
"""
import logging
from typing import Optional

from core.config import OrderEngineConfig, get_settings

from .order_service import OrderService

logger = logging.getLogger(__name__)


def create_order_service(
    config: Optional[OrderEngineConfig] = None,
    event_bus=None,
    db=None,
    product_client=None,
) -> OrderService:
    """
    Create OrderService with real dependencies.

    This function imports the real repository and HTTP client (which have
    I/O dependencies). Use this in production, NOT in tests.

    Args:
        config: Engine configuration (defaults to global settings)
        event_bus: Event bus for publishing events
        db: PostgresClientWrapper override
        product_client: Product enrichment port override

    Returns:
        Configured OrderService instance
    """
    # Import real I/O modules here (not at module level)
    from core.postgres_client import PostgresClientWrapper
    from .order_repository import OrderRepository
    from .clients import ProductClient
    from .pricing import PricingCalculator

    config = config or get_settings()

    if db is None:
        db = PostgresClientWrapper("order_service", config=config.infra)

    if product_client is None:
        product_client = ProductClient(
            base_url=config.order.product_service_url,
            timeout=config.order.http_timeout_seconds,
        )

    return OrderService(
        repository=OrderRepository(db),
        product_client=product_client,
        pricing_calculator=PricingCalculator(),
        event_bus=event_bus,
        config=config.order,
    )


async def create_order_service_with_events(
    config: Optional[OrderEngineConfig] = None,
) -> OrderService:
    """
    Create OrderService with the shared PostgreSQL client, connecting the
    NATS event bus when events are enabled.

    A NATS connection failure downgrades to running without events.
    """
    from core.logger import setup_service_logger
    from core.nats_client import get_event_bus
    from core.postgres_client import get_postgres_client

    config = config or get_settings()
    setup_service_logger("microservices.order_service", config.logging)
    event_bus = None

    if config.order.events_enabled:
        try:
            event_bus = await get_event_bus("order_service", config=config.infra)
        except Exception as e:
            logger.warning(f"Failed to initialize event bus: {e}. Continuing without events.")

    db = await get_postgres_client("order_service", config=config.infra)
    return create_order_service(config=config, event_bus=event_bus, db=db)
