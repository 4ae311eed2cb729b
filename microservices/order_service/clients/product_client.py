"""
Product Service Client for Order Service

HTTP implementation of ProductEnrichmentPort: resolves (product_id, quantity)
pairs against the product catalog and checks stock.
"""

import httpx
import logging
from decimal import Decimal, InvalidOperation
from typing import Optional, Dict, Any, List, Sequence

from ..models import EnrichedItem, OrderItemRequest
from ..pricing import calculate_item_total
from ..protocols import EnrichmentError, OrderServiceError

logger = logging.getLogger(__name__)


class ProductClient:
    """Client for product_service"""

    def __init__(self, base_url: str, timeout: float = 30.0, client: Optional[httpx.AsyncClient] = None):
        """
        Initialize Product Service client

        Args:
            base_url: Product service base URL
            timeout: Request timeout in seconds
            client: Pre-built httpx client (tests inject a MockTransport)
        """
        self.base_url = base_url.rstrip('/')
        self.client = client or httpx.AsyncClient(timeout=timeout)
        logger.info(f"ProductClient initialized with base_url: {self.base_url}")

    async def close(self):
        """Close HTTP client"""
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def get_product(self, product_id: str) -> Optional[Dict[str, Any]]:
        """
        Get product by ID

        Returns:
            Product payload, or None if the product does not exist

        Raises:
            OrderServiceError: product service unreachable or failing
        """
        try:
            response = await self.client.get(f"{self.base_url}/api/v1/products/{product_id}")
            if response.status_code == 404:
                return None
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Failed to get product {product_id}: {e.response.status_code}")
            raise OrderServiceError(
                f"Product service error for {product_id}: {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Error getting product {product_id}: {e}")
            raise OrderServiceError(f"Product service unavailable: {e}") from e

    async def enrich(self, items: Sequence[OrderItemRequest]) -> List[EnrichedItem]:
        """
        Enrich order items with product name, price and availability

        Raises:
            EnrichmentError: first missing product, malformed catalog entry or insufficient stock
        """
        enriched: List[EnrichedItem] = []

        for item in items:
            product = await self.get_product(item.product_id)
            if not product:
                raise EnrichmentError(
                    f"Product not found: {item.product_id}",
                    product_id=item.product_id,
                    requested=item.quantity,
                )

            product_name = product.get("name") or f"Product {item.product_id}"
            try:
                stock_quantity = int(product.get("stock_quantity") or 0)
                unit_price = Decimal(str(product.get("price") or "0"))
            except (InvalidOperation, TypeError, ValueError) as e:
                logger.error(f"Malformed catalog entry for product {item.product_id}: {e}")
                raise EnrichmentError(
                    f"Malformed catalog data for {product_name} ({item.product_id})",
                    product_id=item.product_id,
                    requested=item.quantity,
                ) from e
            if not unit_price.is_finite() or unit_price < 0:
                raise EnrichmentError(
                    f"Invalid price for {product_name} ({item.product_id}): {unit_price}",
                    product_id=item.product_id,
                    requested=item.quantity,
                )

            if stock_quantity < item.quantity:
                raise EnrichmentError(
                    f"Insufficient stock for {product_name} ({item.product_id}). "
                    f"Available: {stock_quantity}, Requested: {item.quantity}",
                    product_id=item.product_id,
                    available=stock_quantity,
                    requested=item.quantity,
                )

            enriched.append(EnrichedItem(
                product_id=item.product_id,
                product_name=product_name,
                quantity=item.quantity,
                unit_price=unit_price,
                total_price=calculate_item_total(item.quantity, unit_price),
                available=True,
                available_quantity=stock_quantity,
                currency=product.get("currency"),
            ))

        logger.debug(f"Enriched {len(enriched)} order items")
        return enriched
