"""
Order Service Events Module

Exports all event-related functionality for order service
"""

from .models import (
    OrderCreatedEvent,
    OrderStatusChangedEvent,
)

from .publishers import (
    publish_order_created,
    publish_order_status_changed,
)

__all__ = [
    # Event Models
    "OrderCreatedEvent",
    "OrderStatusChangedEvent",
    # Publishers
    "publish_order_created",
    "publish_order_status_changed",
]
