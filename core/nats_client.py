"""
NATS Client for Python Microservices
Provides event-driven communication for the order engine

Events are plain JSON envelopes published on subjects named after the
event type (e.g. ``order.created``).
"""

import json
import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional

import nats
from nats.aio.client import Client as NATSConnection

from core.config import InfraConfig


class DecimalEncoder(json.JSONEncoder):
    """Custom JSON encoder that handles Decimal types"""
    def default(self, obj):
        if isinstance(obj, Decimal):
            return str(obj)
        if isinstance(obj, datetime):
            return obj.isoformat()
        return super().default(obj)


logger = logging.getLogger(__name__)


class EventType(Enum):
    """Event types published by the order engine"""

    ORDER_CREATED = "order.created"
    ORDER_STATUS_CHANGED = "order.status_changed"


class ServiceSource(Enum):
    """Service sources"""

    ORDER_SERVICE = "order_service"
    PRODUCT_SERVICE = "product_service"
    CUSTODY_SERVICE = "custody_service"


class Event:
    """Event model"""

    def __init__(
        self,
        event_type: EventType,
        source: ServiceSource,
        data: Dict[str, Any],
        subject: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None,
    ):
        self.id = str(uuid.uuid4())
        self.type = event_type.value
        self.source = source.value
        self.data = data
        self.subject = subject
        self.timestamp = datetime.now(timezone.utc).isoformat()
        self.metadata = metadata or {}
        self.version = "1.0.0"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "source": self.source,
            "subject": self.subject,
            "timestamp": self.timestamp,
            "data": self.data,
            "metadata": self.metadata,
            "version": self.version,
        }


class NATSEventBus:
    """NATS event bus (core publish, JSON payloads)"""

    def __init__(self, service_name: str, config: Optional[InfraConfig] = None):
        """
        Initialize NATS Event Bus.

        Args:
            service_name: Name of the publishing service
            config: Infrastructure configuration (defaults to environment)
        """
        self.service_name = service_name
        self.config = config or InfraConfig.from_env()
        self.url = self.config.resolved_nats_url
        self._nc: Optional[NATSConnection] = None

        logger.info(f"NATS EventBus initialized: {self.url}")

    @property
    def is_connected(self) -> bool:
        return self._nc is not None and self._nc.is_connected

    async def connect(self):
        """Connect to NATS"""
        try:
            self._nc = await nats.connect(self.url, name=self.service_name)
            logger.info(f"Connected to NATS as {self.service_name}")
        except Exception as e:
            logger.error(f"Failed to connect to NATS at {self.url}: {e}")
            raise

    async def publish_event(self, event: Event) -> bool:
        """
        Publish an event.

        The subject is the event's explicit subject or, by default, its type.
        """
        if not self.is_connected:
            logger.warning(f"NATS not connected, dropping event {event.type}")
            return False

        subject = event.subject or event.type
        payload = json.dumps(event.to_dict(), cls=DecimalEncoder).encode("utf-8")
        await self._nc.publish(subject, payload)
        logger.debug(f"Published {event.type} ({event.id}) to {subject}")
        return True

    async def close(self):
        """Drain and close the connection"""
        if self._nc is not None:
            await self._nc.drain()
            self._nc = None


_event_bus: Optional[NATSEventBus] = None


async def get_event_bus(
    service_name: str,
    config: Optional[InfraConfig] = None,
) -> NATSEventBus:
    """
    Get or create event bus instance.

    Args:
        service_name: Name of the service using the event bus
        config: Optional infrastructure config

    Returns:
        Connected NATSEventBus instance; a failed connect caches nothing
    """
    global _event_bus

    if _event_bus is None:
        event_bus = NATSEventBus(service_name=service_name, config=config)
        await event_bus.connect()
        _event_bus = event_bus

    return _event_bus
