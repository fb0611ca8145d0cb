"""
HTTP tests for the storefront API (FastAPI app over httpx ASGITransport).

Covers status codes and JSON shapes of the products, orders and payment
routes, including authentication and error bodies.
"""

from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app import app
from enums.payment_method import PaymentMethod
from utils.payment_gateways import MockGateway, default_gateways
from web.dependencies import get_session

SELLER_ID = "seller_1"
BUYER_ID = "buyer_1"


@pytest_asyncio.fixture
async def client(test_session_maker):
    async def override_get_session():
        async with test_session_maker() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client
    app.dependency_overrides.clear()


@pytest.fixture
def always_approve(monkeypatch):
    """Make the MOCK gateway deterministic for HTTP tests."""

    def gateways():
        registry = default_gateways()
        registry[PaymentMethod.MOCK] = MockGateway(delay_seconds=0, success_rate=1.0)
        return registry

    monkeypatch.setattr("utils.payment_gateways.default_gateways", gateways)


@pytest.fixture
def always_decline(monkeypatch):
    def gateways():
        registry = default_gateways()
        registry[PaymentMethod.MOCK] = MockGateway(delay_seconds=0, success_rate=0.0)
        return registry

    monkeypatch.setattr("utils.payment_gateways.default_gateways", gateways)


async def create_order(client, auth_headers, product_id: int, quantity: int = 2, price: float = 10.00):
    return await client.post(
        "/api/orders",
        json={
            "items": [{"productId": product_id, "quantity": quantity, "price": price}],
            "totalAmount": price * quantity,
        },
        headers=auth_headers(BUYER_ID),
    )


class TestHealth:

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}


class TestProductsApi:

    @pytest.mark.asyncio
    async def test_list_is_public_and_camel_cased(self, client, make_product):
        await make_product(name="Mug", price="12.50", stock=3, category="kitchen")

        response = await client.get("/api/products")

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 1
        assert body["pageSize"] == 12
        assert body["totalPages"] == 1
        item = body["items"][0]
        assert item["name"] == "Mug"
        assert item["price"] == 12.5
        assert item["userId"] == SELLER_ID
        assert "createdAt" in item

    @pytest.mark.asyncio
    async def test_list_query_parameters(self, client, make_product):
        await make_product(name="Mug", price="12.50", stock=3, category="kitchen")
        await make_product(name="Lamp", price="30.00", stock=0, category="office")
        await make_product(name="Pen", price="1.00", stock=50, category="office")

        response = await client.get(
            "/api/products",
            params={"categories": ["office"], "inStock": "true", "sortBy": "price", "sortOrder": "desc"}
        )

        assert response.status_code == 200
        assert [p["name"] for p in response.json()["items"]] == ["Pen"]

    @pytest.mark.asyncio
    async def test_invalid_query_is_bad_request(self, client):
        response = await client.get("/api/products", params={"sortBy": "popularity"})
        assert response.status_code == 400
        assert "error" in response.json()

    @pytest.mark.asyncio
    async def test_create_requires_auth(self, client):
        response = await client.post("/api/products", json={"name": "Mug", "description": "d", "price": 1})
        assert response.status_code == 401
        assert response.json() == {"error": "Authentication required"}

    @pytest.mark.asyncio
    async def test_invalid_token_rejected(self, client):
        response = await client.post(
            "/api/products",
            json={"name": "Mug", "description": "d", "price": 1},
            headers={"Authorization": "Bearer user_1.123.deadbeef"}
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_create_update_delete(self, client, auth_headers):
        created = await client.post(
            "/api/products",
            json={"name": "Mug", "description": "Ceramic", "price": 9.99, "stock": 4, "image": ""},
            headers=auth_headers(SELLER_ID)
        )
        assert created.status_code == 201
        product = created.json()
        assert product["image"] is None
        assert product["userId"] == SELLER_ID

        forbidden = await client.put(
            f"/api/products/{product['id']}",
            json={"name": "Hacked", "description": "x", "price": 0.01},
            headers=auth_headers("intruder")
        )
        assert forbidden.status_code == 403
        assert forbidden.json() == {"error": "Not authorized to update this product"}

        updated = await client.put(
            f"/api/products/{product['id']}",
            json={"name": "Big Mug", "description": "Ceramic", "price": 11, "stock": 2},
            headers=auth_headers(SELLER_ID)
        )
        assert updated.status_code == 200
        assert updated.json()["name"] == "Big Mug"

        deleted = await client.delete(f"/api/products/{product['id']}", headers=auth_headers(SELLER_ID))
        assert deleted.status_code == 204

        missing = await client.get(f"/api/products/{product['id']}")
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_negative_price_rejected(self, client, auth_headers):
        response = await client.post(
            "/api/products",
            json={"name": "Mug", "description": "d", "price": -1},
            headers=auth_headers(SELLER_ID)
        )
        assert response.status_code == 400
        assert "price" in response.json()["error"]


class TestOrdersApi:

    @pytest.mark.asyncio
    async def test_create_order(self, client, auth_headers, make_product, fetch_product):
        product = await make_product(name="Mug", price="10.00", stock=5, image="https://img.example/mug.png")

        response = await create_order(client, auth_headers, product.id)

        assert response.status_code == 201
        order = response.json()
        assert order["status"] == "PENDING"
        assert order["totalAmount"] == 20.0
        assert order["userId"] == BUYER_ID
        assert order["orderItems"][0]["product"] == {
            "id": product.id, "name": "Mug", "image": "https://img.example/mug.png"
        }
        assert (await fetch_product(product.id)).stock == 3

    @pytest.mark.asyncio
    async def test_float_summed_total_is_accepted(self, client, auth_headers, make_product):
        """3 x 0.1 summed in floating point arrives as 0.30000000000000004."""
        product = await make_product(price="0.10", stock=5)

        response = await create_order(client, auth_headers, product.id, quantity=3, price=0.1)

        assert response.status_code == 201
        assert response.json()["totalAmount"] == 0.3

    @pytest.mark.asyncio
    async def test_create_order_requires_auth(self, client, make_product):
        product = await make_product()
        response = await client.post(
            "/api/orders", json={"items": [{"productId": product.id, "quantity": 1, "price": 10}], "totalAmount": 10}
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_empty_items(self, client, auth_headers):
        response = await client.post("/api/orders", json={"items": [], "totalAmount": 10},
                                     headers=auth_headers(BUYER_ID))
        assert response.status_code == 400
        assert response.json() == {"error": "Order items are required"}

    @pytest.mark.asyncio
    async def test_insufficient_stock(self, client, auth_headers, make_product, fetch_product):
        product = await make_product(name="Mug", price="10.00", stock=1)

        response = await create_order(client, auth_headers, product.id, quantity=2)

        assert response.status_code == 400
        assert response.json()["error"].startswith("Insufficient stock for Mug")
        assert (await fetch_product(product.id)).stock == 1

    @pytest.mark.asyncio
    async def test_unknown_product(self, client, auth_headers):
        response = await create_order(client, auth_headers, 9999)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_list_and_get(self, client, auth_headers, make_product):
        product = await make_product(price="10.00", stock=5)
        created = (await create_order(client, auth_headers, product.id, quantity=1)).json()

        listed = await client.get("/api/orders", headers=auth_headers(BUYER_ID))
        assert listed.status_code == 200
        assert [o["id"] for o in listed.json()] == [created["id"]]

        fetched = await client.get(f"/api/orders/{created['id']}", headers=auth_headers(BUYER_ID))
        assert fetched.status_code == 200

        foreign = await client.get(f"/api/orders/{created['id']}", headers=auth_headers("someone_else"))
        assert foreign.status_code == 404


class TestPaymentApi:

    @pytest.mark.asyncio
    async def test_successful_payment(self, client, auth_headers, make_product, always_approve):
        product = await make_product(price="10.00", stock=5)
        order = (await create_order(client, auth_headers, product.id)).json()

        response = await client.post(
            "/api/payment",
            json={"orderId": order["id"], "amount": 20.00, "paymentMethod": "MOCK"},
            headers=auth_headers(BUYER_ID)
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Payment processed successfully"
        assert body["orderId"] == order["id"]
        assert body["paymentId"].startswith("mock_payment_")
        assert body["order"]["status"] == "PAID"

    @pytest.mark.asyncio
    async def test_declined_payment(self, client, auth_headers, make_product, always_decline):
        product = await make_product(price="10.00", stock=5)
        order = (await create_order(client, auth_headers, product.id)).json()

        response = await client.post(
            "/api/payment",
            json={"orderId": order["id"], "amount": 20.00, "paymentMethod": "MOCK"},
            headers=auth_headers(BUYER_ID)
        )

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Mock payment failed", "orderId": order["id"]}

    @pytest.mark.asyncio
    async def test_already_paid(self, client, auth_headers, make_product, always_approve):
        product = await make_product(price="10.00", stock=5)
        order = (await create_order(client, auth_headers, product.id)).json()
        payload = {"orderId": order["id"], "amount": 20.00, "paymentMethod": "STRIPE"}

        first = await client.post("/api/payment", json=payload, headers=auth_headers(BUYER_ID))
        second = await client.post("/api/payment", json=payload, headers=auth_headers(BUYER_ID))

        assert first.status_code == 200
        assert first.json()["paymentId"].startswith("stripe_payment_")
        assert second.status_code == 400
        assert second.json() == {"error": "Order is already paid"}

    @pytest.mark.asyncio
    async def test_amount_mismatch(self, client, auth_headers, make_product):
        product = await make_product(price="10.00", stock=5)
        order = (await create_order(client, auth_headers, product.id)).json()

        response = await client.post(
            "/api/payment",
            json={"orderId": order["id"], "amount": 19.99, "paymentMethod": "MOCK"},
            headers=auth_headers(BUYER_ID)
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Amount mismatch"}

    @pytest.mark.asyncio
    async def test_invalid_method(self, client, auth_headers, make_product):
        product = await make_product(price="10.00", stock=5)
        order = (await create_order(client, auth_headers, product.id)).json()

        response = await client.post(
            "/api/payment",
            json={"orderId": order["id"], "amount": 20.00, "paymentMethod": "CASH"},
            headers=auth_headers(BUYER_ID)
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid payment method"}

    @pytest.mark.asyncio
    async def test_missing_fields(self, client, auth_headers):
        response = await client.post("/api/payment", json={"paymentMethod": "MOCK"}, headers=auth_headers(BUYER_ID))
        assert response.status_code == 400
        assert response.json() == {"error": "Valid order ID and amount are required"}

    @pytest.mark.asyncio
    async def test_unknown_order(self, client, auth_headers):
        response = await client.post(
            "/api/payment",
            json={"orderId": 31337, "amount": 20.00, "paymentMethod": "MOCK"},
            headers=auth_headers(BUYER_ID)
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_internal_fault_is_opaque(self, client, auth_headers, make_product, monkeypatch):
        product = await make_product(price="10.00", stock=5)
        order = (await create_order(client, auth_headers, product.id)).json()

        class BrokenGateway(MockGateway):
            async def charge(self, order_id: int, amount: Decimal):
                raise ConnectionError("gateway host unreachable: 10.0.0.7")

        monkeypatch.setattr(
            "utils.payment_gateways.default_gateways",
            lambda: {PaymentMethod.MOCK: BrokenGateway(delay_seconds=0)}
        )

        response = await client.post(
            "/api/payment",
            json={"orderId": order["id"], "amount": 20.00, "paymentMethod": "MOCK"},
            headers=auth_headers(BUYER_ID)
        )

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Payment processing failed"}
