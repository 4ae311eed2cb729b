"""
Order Validator

Validates raw order requests before any side effect. Validation is
fail-fast: the first violation is raised as OrderValidationError.
"""

from typing import Any, List, Mapping, Optional, Union

from pydantic import BaseModel, ValidationError

from .models import (
    OrderCreateRequest, OrderItemRequest, OrderStatus, OrderType,
    PaymentMethod, PaymentMethodType, ShippingAddress
)
from .protocols import InvalidStatusError, OrderValidationError


SHIPPING_ADDRESS_FIELDS = (
    "first_name", "last_name", "street", "city", "state", "zip_code", "country"
)


class ValidationResult(BaseModel):
    """Normalized, validated order request"""
    user_id: str
    order_type: OrderType
    items: List[OrderItemRequest]
    currency: Optional[str] = None
    shipping_address: Optional[ShippingAddress] = None
    payment_method: Optional[PaymentMethod] = None
    custody_service_id: Optional[str] = None


# ============================================================================
# Enum helpers
# ============================================================================

def is_valid_order_type(value: Any) -> bool:
    return isinstance(value, str) and value.strip().lower() in {t.value for t in OrderType}


def is_valid_order_status(value: Any) -> bool:
    return isinstance(value, str) and value.strip().lower() in {s.value for s in OrderStatus}


def parse_order_type(value: Any) -> OrderType:
    """Parse a case-insensitive order type into its canonical enum"""
    if isinstance(value, OrderType):
        return value
    if not is_valid_order_type(value):
        valid = ", ".join(t.value for t in OrderType)
        raise OrderValidationError(
            f"Invalid order type: {value}. Valid values: {valid}", field="type"
        )
    return OrderType(value.strip().lower())


def parse_order_status(value: Any) -> OrderStatus:
    """Parse a case-insensitive status name into its canonical enum"""
    if isinstance(value, OrderStatus):
        return value
    if not is_valid_order_status(value):
        raise InvalidStatusError(value)
    return OrderStatus(value.strip().lower())


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


# ============================================================================
# Validator
# ============================================================================

class OrderValidator:
    """Stateless validator for order creation requests"""

    def validate(self, request: Union[OrderCreateRequest, Mapping[str, Any]]) -> ValidationResult:
        """
        Validate an order creation request.

        Args:
            request: Request model or raw mapping

        Returns:
            ValidationResult with the order type normalized to lowercase

        Raises:
            OrderValidationError: on the first violation found
        """
        if not isinstance(request, OrderCreateRequest):
            request = self._coerce(request)

        if _blank(request.user_id):
            raise OrderValidationError("User ID is required", field="user_id")

        if _blank(request.type):
            raise OrderValidationError("Order type is required", field="type")
        if not is_valid_order_type(request.type):
            raise OrderValidationError(
                f"Invalid order type: {request.type}. Must be 'buy' or 'sell'", field="type"
            )

        if not request.items:
            raise OrderValidationError("Order must contain at least one item", field="items")

        items = []
        for index, item in enumerate(request.items, start=1):
            if _blank(item.product_id):
                raise OrderValidationError(
                    f"Item {index}: productId is required", field="product_id", item_index=index
                )
            if item.quantity is None:
                raise OrderValidationError(
                    f"Item {index}: quantity is required", field="quantity", item_index=index
                )
            if item.quantity <= 0:
                raise OrderValidationError(
                    f"Item {index}: quantity must be positive", field="quantity", item_index=index
                )
            items.append(OrderItemRequest(product_id=item.product_id.strip(), quantity=item.quantity))

        currency = None
        if request.currency is not None:
            currency = request.currency.strip().upper()
            if len(currency) != 3 or not currency.isalpha():
                raise OrderValidationError(
                    f"Invalid currency code: {request.currency}", field="currency"
                )

        if request.shipping_address is not None:
            self._validate_shipping_address(request.shipping_address)

        if request.payment_method is not None:
            self._validate_payment_method(request.payment_method)

        return ValidationResult(
            user_id=request.user_id.strip(),
            order_type=parse_order_type(request.type),
            items=items,
            currency=currency,
            shipping_address=request.shipping_address,
            payment_method=request.payment_method,
            custody_service_id=request.custody_service_id or None,
        )

    def _validate_shipping_address(self, address: ShippingAddress) -> None:
        missing = [name for name in SHIPPING_ADDRESS_FIELDS if _blank(getattr(address, name))]
        if missing:
            raise OrderValidationError(
                f"Incomplete shipping address: missing {', '.join(missing)}",
                field="shipping_address",
            )

    def _validate_payment_method(self, payment_method: PaymentMethod) -> None:
        valid = [t.value for t in PaymentMethodType]
        if payment_method.type not in valid:
            raise OrderValidationError(
                f"Invalid payment method type: {payment_method.type}. Must be one of: {', '.join(valid)}",
                field="payment_method",
            )

    def _coerce(self, raw: Mapping[str, Any]) -> OrderCreateRequest:
        """Build the request model, translating schema errors into OrderValidationError"""
        try:
            return OrderCreateRequest.model_validate(raw)
        except ValidationError as e:
            first = e.errors()[0]
            loc = first.get("loc", ())
            if len(loc) >= 3 and loc[0] == "items" and isinstance(loc[1], int):
                index = loc[1] + 1
                raise OrderValidationError(
                    f"Item {index}: invalid {loc[2]} ({first.get('msg')})",
                    field=str(loc[2]),
                    item_index=index,
                ) from e
            field = str(loc[0]) if loc else None
            raise OrderValidationError(
                f"Invalid {field or 'request'}: {first.get('msg')}", field=field
            ) from e
