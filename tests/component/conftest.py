"""
Component Test Layer Configuration (Layer 3)

Structure:
    tests/component/
    └── order_service/   OrderService with mocked repository, catalog and event bus

Usage:
    pytest tests/component -v
    pytest tests/component -m component -v
"""
import os
import sys
from decimal import Decimal

import pytest

# Set testing environment BEFORE any imports
os.environ["ENV"] = "testing"
os.environ["ENVIRONMENT"] = "testing"
os.environ["NATS_ENABLED"] = "false"

# Add project root
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from tests.component.order_service.mocks import (
    MockEventBus,
    MockOrderRepository,
    MockProductClient,
)


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure custom markers"""
    config.addinivalue_line(
        "markers", "component: marks tests as component tests"
    )


# =============================================================================
# Repository / Collaborator Mocks
# =============================================================================

@pytest.fixture
def mock_repo() -> MockOrderRepository:
    """Create a fresh MockOrderRepository"""
    return MockOrderRepository()


@pytest.fixture
def mock_product_client() -> MockProductClient:
    """Catalog with one gold bar (p1) in stock"""
    client = MockProductClient()
    client.set_product("p1", name="Gold Bar 1oz", price=Decimal("100.00"), stock_quantity=100)
    return client


@pytest.fixture
def mock_event_bus() -> MockEventBus:
    """Mock NATS event bus"""
    return MockEventBus()
