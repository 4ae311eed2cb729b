"""
Order Service Event Models

Pydantic models for events published by order service
"""

from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List
from datetime import datetime, timezone
from decimal import Decimal


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OrderCreatedEvent(BaseModel):
    """Event published when order is created"""
    order_id: str
    order_number: str
    user_id: str
    order_type: str
    status: str
    currency: str
    subtotal: Decimal
    taxes: Decimal
    total_amount: Decimal
    custody_service_id: Optional[str] = None
    items: List[Dict[str, Any]] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=_utcnow)


class OrderStatusChangedEvent(BaseModel):
    """Event published when an order moves to a new status"""
    order_id: str
    user_id: str
    old_status: str
    new_status: str
    changed_by: Optional[str] = None
    timestamp: datetime = Field(default_factory=_utcnow)
