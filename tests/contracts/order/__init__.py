"""
Order Service Contracts

Test data factory and joined-row builders for order_service testing.
"""

from .data_contract import (
    OrderTestDataFactory,
    order_to_rows,
)

__all__ = [
    "OrderTestDataFactory",
    "order_to_rows",
]
