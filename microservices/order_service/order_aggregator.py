"""
Order Aggregator

Rebuilds Order aggregates from flattened order/item/custody join rows.

An order with N items arrives as N rows; an order without items arrives
as one row whose item columns are NULL. Rows are grouped by order id in
first-seen order, items keep row order, and totals are always recomputed
from the items rather than read from stored columns.

Expected row keys:
    order_id, user_id, order_type, order_status, payment_status, currency,
    created_at, updated_at, custody_service_id,
    custody_service_name, custody_service_fee, custody_service_currency,
    custody_service_payment_frequency, custodian_id, custodian_name,
    item_id, product_id, product_name, quantity, unit_price, total_price
"""

from collections import OrderedDict
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from .models import CustodianRef, CustodyServiceRef, Order, OrderItem
from .order_validator import parse_order_status, parse_order_type
from .protocols import OrderValidationError, PersistenceError

ZERO = Decimal("0")
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
DEFAULT_CURRENCY = "CHF"


def generate_order_number(order_id: str) -> str:
    """ORD- plus the first 8 characters of the order id, upper-cased"""
    return f"ORD-{str(order_id)[:8].upper()}"


def parse_decimal(value: Any) -> Decimal:
    """Parse a numeric column; anything unparseable degrades to 0"""
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        return value if value.is_finite() else ZERO
    try:
        parsed = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return ZERO
    return parsed if parsed.is_finite() else ZERO


def parse_quantity(value: Any) -> int:
    quantity = parse_decimal(value)
    if quantity != quantity.to_integral_value():
        return 0
    return int(quantity)


def parse_timestamp(value: Any) -> datetime:
    """Naive values are stored UTC"""
    if isinstance(value, str) and value.strip():
        try:
            value = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return EPOCH
    if not isinstance(value, datetime):
        return EPOCH
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def group_rows_by_order(rows: Iterable[Mapping[str, Any]]) -> "OrderedDict[str, List[Mapping[str, Any]]]":
    """Partition rows by order id, keeping the first-seen order of ids"""
    groups: "OrderedDict[str, List[Mapping[str, Any]]]" = OrderedDict()
    for row in rows:
        order_id = row.get("order_id")
        if order_id is None:
            continue
        groups.setdefault(str(order_id), []).append(row)
    return groups


def map_order_items(rows: Iterable[Mapping[str, Any]]) -> List[OrderItem]:
    """One item per row carrying an item id; sentinel rows contribute nothing"""
    items: List[OrderItem] = []
    seen = set()
    for row in rows:
        item_id = row.get("item_id")
        if item_id is None or str(item_id) in seen:
            continue
        seen.add(str(item_id))
        items.append(OrderItem(
            id=str(item_id),
            product_id=str(row.get("product_id") or ""),
            product_name=row.get("product_name") or "",
            quantity=parse_quantity(row.get("quantity")),
            unit_price=parse_decimal(row.get("unit_price")),
            total_price=parse_decimal(row.get("total_price")),
        ))
    return items


def calculate_order_totals(items: Iterable[OrderItem]) -> Tuple[Decimal, Decimal, Decimal]:
    """(subtotal, taxes, total_amount); taxes are 0 until a tax engine exists"""
    subtotal = sum((item.total_price for item in items), ZERO)
    taxes = ZERO
    return subtotal, taxes, subtotal + taxes


def map_custody_service(row: Mapping[str, Any]) -> Optional[CustodyServiceRef]:
    custody_service_id = row.get("custody_service_id")
    if custody_service_id is None:
        return None

    fee = row.get("custody_service_fee")
    return CustodyServiceRef(
        id=str(custody_service_id),
        name=row.get("custody_service_name") or "Unknown Custody Service",
        fee=parse_decimal(fee) if fee is not None else None,
        currency=row.get("custody_service_currency"),
        payment_frequency=row.get("custody_service_payment_frequency"),
    )


def map_custodian(row: Mapping[str, Any]) -> Optional[CustodianRef]:
    custodian_id = row.get("custodian_id")
    if custodian_id is None:
        return None

    return CustodianRef(
        id=str(custodian_id),
        name=row.get("custodian_name") or "Unknown Custodian",
    )


def aggregate_order(rows: List[Mapping[str, Any]], default_currency: str = DEFAULT_CURRENCY) -> Order:
    """
    Build one Order from the rows of a single order id.

    Raises:
        PersistenceError: rows are empty or carry an unknown type/status
    """
    if not rows:
        raise PersistenceError("No rows to map")

    first = rows[0]
    order_id = str(first.get("order_id"))

    try:
        order_type = parse_order_type(first.get("order_type"))
        status = parse_order_status(first.get("order_status"))
    except OrderValidationError as e:
        raise PersistenceError(f"Corrupt order row {order_id}: {e}") from e

    items = map_order_items(rows)
    subtotal, taxes, total_amount = calculate_order_totals(items)
    custody_service = map_custody_service(first)

    return Order(
        id=order_id,
        user_id=str(first.get("user_id") or ""),
        type=order_type,
        status=status,
        order_number=first.get("order_number") or generate_order_number(order_id),
        items=items,
        currency=first.get("currency") or default_currency,
        subtotal=subtotal,
        taxes=taxes,
        total_amount=total_amount,
        custody_service=custody_service,
        custodian=map_custodian(first),
        custody_service_id=custody_service.id if custody_service else None,
        payment_status=first.get("payment_status") or "pending",
        created_at=parse_timestamp(first.get("created_at")),
        updated_at=parse_timestamp(first.get("updated_at")),
    )


def aggregate_orders(
    rows: Iterable[Mapping[str, Any]],
    default_currency: str = DEFAULT_CURRENCY,
) -> List[Order]:
    """Rebuild every order present in the row set, in first-seen order"""
    return [
        aggregate_order(group, default_currency)
        for group in group_rows_by_order(rows).values()
    ]


def aggregate_single(
    rows: Iterable[Mapping[str, Any]],
    default_currency: str = DEFAULT_CURRENCY,
) -> Optional[Order]:
    """The first order in the row set, or None if there are no rows"""
    orders = aggregate_orders(rows, default_currency)
    return orders[0] if orders else None
