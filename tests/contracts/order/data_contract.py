"""
Order Service Data Contract

Canonical test data for order service testing: request payloads,
order aggregates and the flattened joined rows the repository returns.

Zero hardcoded data - all test data generated through factory methods.
"""

import uuid
import random
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

from microservices.order_service.models import (
    CustodianRef, CustodyServiceRef, Order, OrderItem, OrderStatus, OrderType
)
from microservices.order_service.order_aggregator import generate_order_number


class OrderTestDataFactory:
    """
    Test data factory for order_service - zero hardcoded data.

    All factory methods generate unique, random data suitable for testing.
    """

    # === ID Generators ===

    @staticmethod
    def make_order_id() -> str:
        """Generate valid order ID"""
        return str(uuid.uuid4())

    @staticmethod
    def make_user_id() -> str:
        """Generate valid user ID"""
        return f"user_{uuid.uuid4().hex[:12]}"

    @staticmethod
    def make_product_id() -> str:
        """Generate valid product ID"""
        return f"prod_{uuid.uuid4().hex[:8]}"

    # === Amount Generators ===

    @staticmethod
    def make_unit_price() -> Decimal:
        """Generate valid positive unit price"""
        return Decimal(str(round(random.uniform(9.99, 999.99), 2)))

    @staticmethod
    def make_quantity() -> int:
        return random.randint(1, 10)

    # === Requests ===

    @staticmethod
    def make_create_request(**overrides) -> Dict[str, Any]:
        """Valid raw create-order payload"""
        payload = {
            "user_id": OrderTestDataFactory.make_user_id(),
            "type": "buy",
            "items": [{
                "product_id": OrderTestDataFactory.make_product_id(),
                "quantity": OrderTestDataFactory.make_quantity(),
            }],
        }
        payload.update(overrides)
        return payload

    @staticmethod
    def make_shipping_address(**overrides) -> Dict[str, Any]:
        address = {
            "first_name": "Ada",
            "last_name": "Keller",
            "street": "Bahnhofstrasse 1",
            "city": "Zurich",
            "state": "ZH",
            "zip_code": "8001",
            "country": "CH",
        }
        address.update(overrides)
        return address

    # === Aggregates ===

    @staticmethod
    def make_item(**overrides) -> OrderItem:
        quantity = overrides.pop("quantity", OrderTestDataFactory.make_quantity())
        unit_price = overrides.pop("unit_price", OrderTestDataFactory.make_unit_price())
        fields = {
            "id": str(uuid.uuid4()),
            "product_id": OrderTestDataFactory.make_product_id(),
            "product_name": "Gold Bar 1oz",
            "quantity": quantity,
            "unit_price": unit_price,
            "total_price": unit_price * quantity,
        }
        fields.update(overrides)
        return OrderItem(**fields)

    @staticmethod
    def make_order(
        user_id: Optional[str] = None,
        status: OrderStatus = OrderStatus.PENDING,
        order_type: OrderType = OrderType.BUY,
        items: Optional[List[OrderItem]] = None,
        created_at: Optional[datetime] = None,
        custody_service: Optional[CustodyServiceRef] = None,
        custodian: Optional[CustodianRef] = None,
        currency: str = "CHF",
    ) -> Order:
        """Order aggregate whose totals match its items"""
        order_id = OrderTestDataFactory.make_order_id()
        items = items if items is not None else [OrderTestDataFactory.make_item()]
        subtotal = sum((item.total_price for item in items), Decimal("0"))
        created_at = created_at or datetime.now(timezone.utc).replace(microsecond=0)
        return Order(
            id=order_id,
            user_id=user_id or OrderTestDataFactory.make_user_id(),
            type=order_type,
            status=status,
            order_number=generate_order_number(order_id),
            items=items,
            currency=currency,
            subtotal=subtotal,
            taxes=Decimal("0"),
            total_amount=subtotal,
            custody_service=custody_service,
            custodian=custodian,
            custody_service_id=custody_service.id if custody_service else None,
            created_at=created_at,
            updated_at=created_at,
        )

    @staticmethod
    def make_orders_for_user(user_id: str, count: int) -> List[Order]:
        """count orders, one minute apart, oldest first"""
        base = datetime(2025, 1, 1, tzinfo=timezone.utc)
        return [
            OrderTestDataFactory.make_order(
                user_id=user_id, created_at=base + timedelta(minutes=index)
            )
            for index in range(count)
        ]


# ============================================================================
# Joined rows
# ============================================================================

def order_to_rows(order: Order) -> List[Dict[str, Any]]:
    """
    Flatten an order into joined rows, one per item.

    An order without items becomes a single row with NULL item columns.
    Numeric columns are text, as the repository selects them.
    """
    header = {
        "order_id": order.id,
        "user_id": order.user_id,
        "order_type": order.type.value,
        "order_status": order.status.value,
        "payment_status": order.payment_status,
        "currency": order.currency,
        "order_number": order.order_number,
        "created_at": order.created_at,
        "updated_at": order.updated_at,
        "custody_service_id": order.custody_service.id if order.custody_service else order.custody_service_id,
        "custody_service_name": order.custody_service.name if order.custody_service else None,
        "custody_service_fee": (
            str(order.custody_service.fee)
            if order.custody_service and order.custody_service.fee is not None else None
        ),
        "custody_service_currency": order.custody_service.currency if order.custody_service else None,
        "custody_service_payment_frequency": (
            order.custody_service.payment_frequency if order.custody_service else None
        ),
        "custodian_id": order.custodian.id if order.custodian else None,
        "custodian_name": order.custodian.name if order.custodian else None,
    }
    empty_item = {
        "item_id": None,
        "product_id": None,
        "product_name": None,
        "quantity": None,
        "unit_price": None,
        "total_price": None,
    }

    if not order.items:
        return [{**header, **empty_item}]

    return [
        {
            **header,
            "item_id": item.id,
            "product_id": item.product_id,
            "product_name": item.product_name,
            "quantity": str(item.quantity),
            "unit_price": str(item.unit_price),
            "total_price": str(item.total_price),
        }
        for item in order.items
    ]
