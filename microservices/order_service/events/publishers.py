"""
Order Service Event Publishers

Functions to publish events from order service.
Publishing never fails the calling operation: errors are logged and
reported through the boolean return value.
"""

import logging
from typing import Optional

from core.nats_client import Event, EventType, ServiceSource
from ..models import Order
from .models import OrderCreatedEvent, OrderStatusChangedEvent

logger = logging.getLogger(__name__)


async def publish_order_created(event_bus, order: Order) -> bool:
    """Publish order.created event"""
    if not event_bus:
        logger.debug("Event bus not available, skipping order.created event")
        return False

    try:
        event_data = OrderCreatedEvent(
            order_id=order.id,
            order_number=order.order_number,
            user_id=order.user_id,
            order_type=order.type.value,
            status=order.status.value,
            currency=order.currency,
            subtotal=order.subtotal,
            taxes=order.taxes,
            total_amount=order.total_amount,
            custody_service_id=order.custody_service_id,
            items=[item.model_dump(mode='json') for item in order.items],
        )

        event = Event(
            event_type=EventType.ORDER_CREATED,
            source=ServiceSource.ORDER_SERVICE,
            data=event_data.model_dump(mode='json')
        )

        await event_bus.publish_event(event)
        logger.info(f"Published order.created event for order {order.id}")
        return True

    except Exception as e:
        logger.error(f"Failed to publish order.created event: {e}")
        return False


async def publish_order_status_changed(
    event_bus,
    order_id: str,
    user_id: str,
    old_status: str,
    new_status: str,
    changed_by: Optional[str] = None
) -> bool:
    """Publish order.status_changed event"""
    if not event_bus:
        logger.debug("Event bus not available, skipping order.status_changed event")
        return False

    try:
        event_data = OrderStatusChangedEvent(
            order_id=order_id,
            user_id=user_id,
            old_status=old_status,
            new_status=new_status,
            changed_by=changed_by,
        )

        event = Event(
            event_type=EventType.ORDER_STATUS_CHANGED,
            source=ServiceSource.ORDER_SERVICE,
            data=event_data.model_dump(mode='json')
        )

        await event_bus.publish_event(event)
        logger.info(f"Published order.status_changed event for order {order_id}")
        return True

    except Exception as e:
        logger.error(f"Failed to publish order.status_changed event: {e}")
        return False
