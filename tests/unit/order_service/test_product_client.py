"""
Product Client - Unit Tests

ProductClient against an httpx.MockTransport catalog.
"""

from decimal import Decimal

import httpx
import pytest
import pytest_asyncio

from microservices.order_service.clients import ProductClient
from microservices.order_service.models import OrderItemRequest
from microservices.order_service.protocols import EnrichmentError, OrderServiceError

pytestmark = [pytest.mark.unit, pytest.mark.asyncio]

CATALOG = {
    "p1": {"id": "p1", "name": "Gold Bar 1oz", "price": "1850.25", "stock_quantity": 10, "currency": "CHF"},
    "p2": {"id": "p2", "name": "Silver Coin", "price": "31.10", "stock_quantity": 2, "currency": "CHF"},
    "bad-price": {"id": "bad-price", "name": "Platinum Bar", "price": "call us", "stock_quantity": 5},
    "bad-stock": {"id": "bad-stock", "name": "Palladium Coin", "price": "990.00", "stock_quantity": "plenty"},
    "nan-price": {"id": "nan-price", "name": "Gold Coin", "price": "NaN", "stock_quantity": 5},
}


def catalog_handler(request: httpx.Request) -> httpx.Response:
    product_id = request.url.path.rsplit("/", 1)[-1]
    if product_id == "broken":
        return httpx.Response(500, json={"detail": "boom"})
    product = CATALOG.get(product_id)
    if product is None:
        return httpx.Response(404, json={"detail": "not found"})
    return httpx.Response(200, json=product)


@pytest_asyncio.fixture
async def client():
    http = httpx.AsyncClient(transport=httpx.MockTransport(catalog_handler))
    product_client = ProductClient("http://products.test/", client=http)
    yield product_client
    await product_client.close()


async def test_enrich_prices_items(client):
    enriched = await client.enrich([
        OrderItemRequest(product_id="p1", quantity=2),
        OrderItemRequest(product_id="p2", quantity=1),
    ])

    assert [item.product_name for item in enriched] == ["Gold Bar 1oz", "Silver Coin"]
    assert enriched[0].unit_price == Decimal("1850.25")
    assert enriched[0].total_price == Decimal("3700.50")
    assert enriched[0].available_quantity == 10
    assert all(item.available for item in enriched)


async def test_insufficient_stock(client):
    with pytest.raises(EnrichmentError) as exc_info:
        await client.enrich([OrderItemRequest(product_id="p2", quantity=5)])

    error = exc_info.value
    assert str(error) == "Insufficient stock for Silver Coin (p2). Available: 2, Requested: 5"
    assert (error.product_id, error.available, error.requested) == ("p2", 2, 5)


async def test_unknown_product(client):
    with pytest.raises(EnrichmentError) as exc_info:
        await client.enrich([OrderItemRequest(product_id="missing", quantity=1)])

    assert exc_info.value.product_id == "missing"


@pytest.mark.parametrize("product_id", ["bad-price", "bad-stock", "nan-price"])
async def test_malformed_catalog_entry(client, product_id):
    with pytest.raises(EnrichmentError) as exc_info:
        await client.enrich([OrderItemRequest(product_id=product_id, quantity=1)])

    assert exc_info.value.product_id == product_id
    assert exc_info.value.requested == 1


async def test_get_product_404_is_none(client):
    assert await client.get_product("missing") is None


async def test_server_error(client):
    with pytest.raises(OrderServiceError):
        await client.get_product("broken")


async def test_transport_error():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    http = httpx.AsyncClient(transport=httpx.MockTransport(refuse))
    async with ProductClient("http://products.test", client=http) as client:
        with pytest.raises(OrderServiceError, match="unavailable"):
            await client.get_product("p1")
