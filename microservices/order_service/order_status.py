"""
Order Status Machine

Finite state machine over an order's life:

    pending -> confirmed -> processing -> shipped -> delivered -> completed

Sell orders skip shipping (processing -> completed). Any non-terminal
state can be cancelled. completed and cancelled are terminal, and
re-applying the current status is rejected.
"""

from typing import Any, Dict, FrozenSet, Mapping, Optional

from .models import OrderStatus
from .order_validator import is_valid_order_status, parse_order_status
from .protocols import InvalidTransitionError


INITIAL_STATUS = OrderStatus.PENDING

DEFAULT_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({
        OrderStatus.CONFIRMED, OrderStatus.PROCESSING, OrderStatus.CANCELLED,
    }),
    OrderStatus.CONFIRMED: frozenset({
        OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.CANCELLED,
    }),
    OrderStatus.PROCESSING: frozenset({
        OrderStatus.SHIPPED, OrderStatus.COMPLETED, OrderStatus.CANCELLED,
    }),
    OrderStatus.SHIPPED: frozenset({
        OrderStatus.DELIVERED, OrderStatus.CANCELLED,
    }),
    OrderStatus.DELIVERED: frozenset({
        OrderStatus.COMPLETED,
    }),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


class OrderStatusMachine:
    """Validates order status transitions against a transition table"""

    def __init__(self, transitions: Optional[Mapping[OrderStatus, FrozenSet[OrderStatus]]] = None):
        self.transitions = dict(transitions or DEFAULT_TRANSITIONS)

    def allowed_transitions(self, current: Any) -> FrozenSet[OrderStatus]:
        return self.transitions.get(parse_order_status(current), frozenset())

    def is_terminal(self, status: Any) -> bool:
        return not self.allowed_transitions(status)

    def can_transition(self, current: Any, target: Any) -> bool:
        """True if target is a known status reachable from current"""
        if not (is_valid_order_status(current) and is_valid_order_status(target)):
            return False
        return parse_order_status(target) in self.allowed_transitions(current)

    def validate_transition(self, current: Any, target: Any) -> OrderStatus:
        """
        Validate a transition and return the canonical target status.

        Raises:
            InvalidStatusError: target (or current) is not a known status
            InvalidTransitionError: transition not allowed
        """
        current_status = parse_order_status(current)
        target_status = parse_order_status(target)
        if target_status not in self.allowed_transitions(current_status):
            raise InvalidTransitionError(current_status.value, target_status.value)
        return target_status
