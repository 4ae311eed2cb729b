"""
Order Service

Bullion order lifecycle engine providing:
- Order creation with product enrichment, stock checks and pricing
- Status transitions guarded by a state machine and compare-and-swap writes
- Order aggregation from joined order/item/custody rows
- User-scoped order reads and paginated listings
"""

__version__ = "1.0.0"
__service__ = "order_service"
