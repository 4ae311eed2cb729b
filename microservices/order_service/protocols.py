"""
Order Service Protocols (Interfaces)

These interfaces define contracts for dependency injection.
NO import-time I/O dependencies - safe to import anywhere.
"""
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, runtime_checkable

# Import only models (no I/O dependencies)
from .models import (
    EnrichedItem, Order, OrderFilter, OrderItemRequest, PricingBreakdown
)


# ============================================================================
# Custom Exceptions - defined here to avoid importing repository
# ============================================================================

class OrderServiceError(Exception):
    """Base exception for order service errors"""
    pass


class OrderValidationError(OrderServiceError):
    """Malformed or incomplete order request"""

    def __init__(self, message: str, field: Optional[str] = None, item_index: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.field = field
        self.item_index = item_index


class InvalidStatusError(OrderValidationError):
    """Status name is not a recognized order status"""

    def __init__(self, status: Any):
        super().__init__(f"Invalid order status: {status}", field="status")
        self.status = status


class EnrichmentError(OrderServiceError):
    """Unknown product or insufficient stock"""

    def __init__(
        self,
        message: str,
        product_id: Optional[str] = None,
        available: Optional[int] = None,
        requested: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.product_id = product_id
        self.available = available
        self.requested = requested


class OrderNotFoundError(OrderServiceError):
    """Order not found error"""

    def __init__(self, order_id: str):
        super().__init__(f"Order not found: {order_id}")
        self.order_id = order_id


class InvalidTransitionError(OrderServiceError):
    """Status change disallowed by the state machine"""

    def __init__(self, current_status: str, target_status: str):
        super().__init__(f"Invalid status transition from {current_status} to {target_status}")
        self.current_status = current_status
        self.target_status = target_status


class PersistenceError(OrderServiceError):
    """Storage failure"""
    pass


class OrderConflictError(PersistenceError):
    """Stored status changed between validation and write"""

    def __init__(self, order_id: str, expected_status: str):
        super().__init__(
            f"Order {order_id} was modified concurrently (expected status {expected_status})"
        )
        self.order_id = order_id
        self.expected_status = expected_status


# ============================================================================
# Repository Protocol
# ============================================================================

@runtime_checkable
class OrderRepositoryProtocol(Protocol):
    """
    Interface for Order Repository.

    Implementations must provide these methods.
    Used for dependency injection to enable testing.
    """

    async def save(self, order: Order, actor_id: Optional[str] = None) -> None:
        """Persist order header and items as one atomic unit"""
        ...

    async def find_joined_rows_by_id(self, order_id: str) -> List[Dict[str, Any]]:
        """Joined order/item/custody rows for one order (empty if missing)"""
        ...

    async def find_joined_rows_by_filter(
        self,
        order_filter: OrderFilter,
        limit: int,
        offset: int
    ) -> List[Dict[str, Any]]:
        """Joined rows for one page of orders matching the filter"""
        ...

    async def count_by_filter(self, order_filter: OrderFilter) -> int:
        """Number of distinct orders matching the filter"""
        ...

    async def update_status(
        self,
        order_id: str,
        expected_status: str,
        new_status: str,
        actor_id: Optional[str] = None
    ) -> bool:
        """Set new_status only if the stored status still equals expected_status"""
        ...

    async def health_check(self) -> bool:
        """True if the backing store is reachable"""
        ...


# ============================================================================
# Collaborator Protocols
# ============================================================================

@runtime_checkable
class ProductEnrichmentPort(Protocol):
    """Resolves (product_id, quantity) pairs into priced, named line data"""

    async def enrich(self, items: Sequence[OrderItemRequest]) -> List[EnrichedItem]:
        """Enrich items; raises EnrichmentError for missing/unavailable products"""
        ...


@runtime_checkable
class PricingCalculatorProtocol(Protocol):
    """Computes subtotal/taxes/total for enriched items"""

    def calculate(self, items: Sequence[EnrichedItem]) -> PricingBreakdown:
        """Calculate the pricing breakdown"""
        ...


# ============================================================================
# Event Bus Protocol
# ============================================================================

@runtime_checkable
class EventBusProtocol(Protocol):
    """Interface for Event Bus - no I/O imports"""

    async def publish_event(self, event: Any) -> None:
        """Publish an event"""
        ...


JoinedRow = Mapping[str, Any]
