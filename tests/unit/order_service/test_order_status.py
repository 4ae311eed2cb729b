"""
Order Status Machine - Unit Tests
"""

import pytest

from microservices.order_service.models import OrderStatus
from microservices.order_service.order_status import (
    DEFAULT_TRANSITIONS,
    INITIAL_STATUS,
    OrderStatusMachine,
)
from microservices.order_service.protocols import InvalidStatusError, InvalidTransitionError

pytestmark = [pytest.mark.unit]


@pytest.fixture
def machine():
    return OrderStatusMachine()


def test_initial_status():
    assert INITIAL_STATUS == OrderStatus.PENDING


def test_every_status_has_an_entry():
    assert set(DEFAULT_TRANSITIONS) == set(OrderStatus)


@pytest.mark.parametrize("current,target", [
    ("pending", "confirmed"),
    ("pending", "cancelled"),
    ("confirmed", "processing"),
    ("processing", "shipped"),
    ("processing", "completed"),
    ("shipped", "delivered"),
    ("delivered", "completed"),
    ("PENDING", "Confirmed"),
])
def test_allowed(machine, current, target):
    assert machine.can_transition(current, target)
    assert machine.validate_transition(current, target) == OrderStatus(target.lower())


@pytest.mark.parametrize("current,target", [
    ("pending", "pending"),
    ("pending", "delivered"),
    ("shipped", "pending"),
    ("delivered", "cancelled"),
    ("completed", "cancelled"),
    ("cancelled", "pending"),
])
def test_disallowed(machine, current, target):
    assert not machine.can_transition(current, target)
    with pytest.raises(InvalidTransitionError) as exc_info:
        machine.validate_transition(current, target)
    assert exc_info.value.current_status == current
    assert exc_info.value.target_status == target


@pytest.mark.parametrize("status", ["completed", "cancelled"])
def test_terminal(machine, status):
    assert machine.is_terminal(status)
    assert machine.allowed_transitions(status) == frozenset()


def test_pending_is_not_terminal(machine):
    assert not machine.is_terminal("pending")


def test_unknown_status(machine):
    assert not machine.can_transition("pending", "bogus")
    assert not machine.can_transition("bogus", "pending")
    with pytest.raises(InvalidStatusError):
        machine.validate_transition("pending", "bogus")


def test_custom_table():
    machine = OrderStatusMachine({
        OrderStatus.PENDING: frozenset({OrderStatus.COMPLETED}),
    })

    assert machine.can_transition("pending", "completed")
    assert not machine.can_transition("pending", "confirmed")
    assert machine.is_terminal("shipped")
