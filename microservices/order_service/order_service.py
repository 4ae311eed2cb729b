"""
Order Service Business Logic

Order lifecycle: validation, product enrichment, pricing, persistence,
status transitions and user-scoped reads. All I/O goes through injected
collaborators (see protocols.py); the factory wires the real ones.
"""

from typing import Any, Mapping, Optional, Union
from datetime import datetime, timezone
from decimal import Decimal
import logging
import uuid

from core.config import OrderConfig

from .models import (
    CreateOrderResult, Order, OrderCreateRequest, OrderFilter, OrderItem,
    OrderListOptions, OrderListResponse, OrderServiceStatus, RequestContext
)
from .order_aggregator import aggregate_orders, aggregate_single, generate_order_number
from .order_status import INITIAL_STATUS, OrderStatusMachine
from .order_validator import OrderValidator, parse_order_status, parse_order_type
from .pagination import MAX_LIMIT, build_pagination, clamp_limit, clamp_page, page_offset
from .pricing import PricingCalculator, calculate_item_total
from .protocols import (
    EnrichmentError,
    EventBusProtocol,
    OrderConflictError,
    OrderNotFoundError,
    OrderRepositoryProtocol,
    OrderValidationError,
    PricingCalculatorProtocol,
    ProductEnrichmentPort,
)
from .events.publishers import publish_order_created, publish_order_status_changed


class OrderService:
    """
    Order lifecycle business logic service

    Handles order creation, status transitions and order reads.
    """

    def __init__(
        self,
        repository: OrderRepositoryProtocol,
        product_client: ProductEnrichmentPort,
        pricing_calculator: Optional[PricingCalculatorProtocol] = None,
        event_bus: Optional[EventBusProtocol] = None,
        config: Optional[OrderConfig] = None,
        validator: Optional[OrderValidator] = None,
        status_machine: Optional[OrderStatusMachine] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize Order Service

        Args:
            repository: Order repository (inject mock for testing)
            product_client: Product enrichment port
            pricing_calculator: Pricing calculator (defaults to a 0% tax calculator)
            event_bus: NATS event bus instance (optional)
            config: Order configuration
            validator: Request validator
            status_machine: Status transition policy
            logger: Logger override (defaults to the module logger)
        """
        self.config = config or OrderConfig()
        self.repository = repository
        self.product_client = product_client
        self.pricing_calculator = pricing_calculator or PricingCalculator()
        self.event_bus = event_bus
        self.validator = validator or OrderValidator()
        self.status_machine = status_machine or OrderStatusMachine()
        self.logger = logger or logging.getLogger(__name__)

        self.logger.info("OrderService initialized")

    # Order Lifecycle Operations

    async def create_order(
        self,
        request: Union[OrderCreateRequest, Mapping[str, Any]],
        context: RequestContext
    ) -> CreateOrderResult:
        """
        Create a new order

        Args:
            request: Order creation request (model or raw mapping)
            context: Authenticated caller

        Returns:
            The persisted order and its pricing breakdown

        Raises:
            OrderValidationError: malformed request
            EnrichmentError: unknown product or insufficient stock
            PersistenceError: the order could not be stored
        """
        validated = self.validator.validate(request)

        if not context.is_admin and validated.user_id != context.user_id:
            raise OrderValidationError(
                "User ID does not match the authenticated user", field="user_id"
            )

        enriched = await self.product_client.enrich(validated.items)
        for item in enriched:
            if not item.available:
                raise EnrichmentError(
                    f"Insufficient stock for {item.product_name} ({item.product_id}). "
                    f"Available: {item.available_quantity or 0}, Requested: {item.quantity}",
                    product_id=item.product_id,
                    available=item.available_quantity or 0,
                    requested=item.quantity,
                )

        pricing = self.pricing_calculator.calculate(enriched)

        order_id = str(uuid.uuid4())
        now = datetime.now(timezone.utc)
        items = []
        for item in enriched:
            total_price = calculate_item_total(item.quantity, item.unit_price)
            if item.total_price != total_price:
                self.logger.warning(
                    f"Enriched total {item.total_price} for {item.product_id} does not match "
                    f"{item.quantity} x {item.unit_price}; using {total_price}"
                )
            items.append(OrderItem(
                id=str(uuid.uuid4()),
                product_id=item.product_id,
                product_name=item.product_name,
                quantity=item.quantity,
                unit_price=item.unit_price,
                total_price=total_price,
            ))

        subtotal = sum((item.total_price for item in items), Decimal("0"))
        if pricing.subtotal != subtotal:
            self.logger.warning(
                f"Pricing subtotal {pricing.subtotal} differs from item sum {subtotal} "
                f"for order {order_id}; using item sum"
            )

        order = Order(
            id=order_id,
            user_id=validated.user_id,
            type=validated.order_type,
            status=INITIAL_STATUS,
            order_number=generate_order_number(order_id),
            items=items,
            currency=validated.currency or self.config.default_currency,
            subtotal=subtotal,
            taxes=pricing.taxes,
            total_amount=subtotal + pricing.taxes,
            custody_service_id=validated.custody_service_id,
            payment_status="pending",
            created_at=now,
            updated_at=now,
        )

        await self.repository.save(order, actor_id=context.user_id)
        self.logger.info(
            f"Order created: {order.order_number} ({order.id}) for user {order.user_id}, "
            f"{len(items)} items, total {order.total_amount} {order.currency}"
        )

        if self.event_bus:
            await publish_order_created(self.event_bus, order)

        return CreateOrderResult(order=order, pricing=pricing)

    async def get_order_by_id(self, order_id: str, context: RequestContext) -> Optional[Order]:
        """
        Get order by ID

        Non-admin callers only see their own orders; anything else reads as None.
        """
        rows = await self.repository.find_joined_rows_by_id(order_id)
        order = aggregate_single(rows, self.config.default_currency)
        if order is None:
            return None

        if not context.is_admin and order.user_id != context.user_id:
            self.logger.warning(f"User {context.user_id} attempted to read order {order_id} of another user")
            return None

        return order

    async def list_orders_by_user(
        self,
        user_id: Optional[str],
        options: Optional[OrderListOptions],
        context: RequestContext
    ) -> OrderListResponse:
        """
        List orders, newest first

        Args:
            user_id: Owner to list for; None lists every user (admin only)
            options: page, limit and optional status/type filters (None for defaults)
            context: Authenticated caller

        Raises:
            InvalidStatusError / OrderValidationError: bad status or type filter
        """
        options = options or OrderListOptions()

        if context.is_admin:
            user_id = user_id or None
        else:
            if user_id and user_id != context.user_id:
                self.logger.warning(f"User {context.user_id} attempted to list orders of {user_id}")
            user_id = context.user_id

        order_filter = OrderFilter(
            user_id=user_id,
            status=parse_order_status(options.status) if options.status else None,
            type=parse_order_type(options.type) if options.type else None,
        )

        page = clamp_page(options.page)
        limit = options.limit if options.limit is not None else self.config.default_page_size
        limit = clamp_limit(limit, min(self.config.max_page_size, MAX_LIMIT))

        total = await self.repository.count_by_filter(order_filter)
        rows = await self.repository.find_joined_rows_by_filter(
            order_filter, limit, page_offset(page, limit)
        )
        orders = aggregate_orders(rows, self.config.default_currency)

        return OrderListResponse(
            orders=orders,
            pagination=build_pagination(page, limit, total),
        )

    async def update_order_status(
        self,
        order_id: str,
        new_status: str,
        context: RequestContext
    ) -> Order:
        """
        Move an order to a new status

        Returns:
            The re-read order

        Raises:
            InvalidStatusError: unknown status name (nothing is read or written)
            OrderNotFoundError: order missing or not visible to the caller
            InvalidTransitionError: transition not allowed from the current status
            OrderConflictError: status changed concurrently
        """
        target = parse_order_status(new_status)

        order = await self.get_order_by_id(order_id, context)
        if order is None:
            raise OrderNotFoundError(order_id)

        current = order.status
        self.status_machine.validate_transition(current, target)

        updated = await self.repository.update_status(
            order.id, current.value, target.value, actor_id=context.user_id
        )
        if not updated:
            self.logger.warning(f"Status update conflict on order {order.id} (expected {current.value})")
            raise OrderConflictError(order.id, current.value)

        refreshed = await self.get_order_by_id(order.id, context)
        if refreshed is None:
            raise OrderNotFoundError(order_id)

        self.logger.info(f"Order {order.id} status: {current.value} -> {target.value}")

        if self.event_bus:
            await publish_order_status_changed(
                self.event_bus,
                order_id=order.id,
                user_id=order.user_id,
                old_status=current.value,
                new_status=target.value,
                changed_by=context.user_id,
            )

        return refreshed

    async def health_check(self) -> OrderServiceStatus:
        """Check service health"""
        try:
            database_connected = bool(await self.repository.health_check())
        except Exception as e:
            self.logger.error(f"Health check failed: {e}")
            database_connected = False

        return OrderServiceStatus(
            status="operational" if database_connected else "degraded",
            database_connected=database_connected,
            timestamp=datetime.now(timezone.utc),
            details={"events_enabled": self.event_bus is not None},
        )
