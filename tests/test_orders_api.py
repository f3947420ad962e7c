"""
HTTP layer: status codes and error bodies for /api/v1/orders.
"""

from decimal import Decimal

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.exc import OperationalError

from laundry.main import create_app
from laundry.models import Invoice
from laundry.services.order_service import OrderService

from conftest import make_token


ORDERS = "/api/v1/orders"


def order_payload(seed, **overrides) -> dict:
    payload = {
        "customer_id": seed.customer_id,
        "items": [
            {"service_id": seed.shirt_id, "quantity": 2, "rate": "100.00"},
            {"service_id": seed.saree_id, "quantity": 1, "rate": "50.00"},
        ],
        "discount_percentage": 10,
        "tax_percentage": 5,
        "advance_paid": "100.00",
        "due_date": "2026-11-02",
    }
    payload.update(overrides)
    return payload


async def _failing_insert_items(self, order, items):
    raise OperationalError("INSERT INTO order_items", {}, Exception("disk I/O error"))


# ============================================================================
# Auth
# ============================================================================


class TestAuth:

    async def test_invalid_token_rejected(self, client, seed):
        response = await client.get(ORDERS, headers={"Authorization": "Bearer not-a-token"})
        assert response.status_code == 401

    async def test_refresh_token_rejected(self, client, seed, settings):
        token = make_token(settings, token_type="refresh")
        response = await client.get(ORDERS, headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401


# ============================================================================
# Create / read
# ============================================================================


class TestCreateAndGet:

    async def test_create_returns_201(self, client, seed, auth_headers):
        response = await client.post(ORDERS, json=order_payload(seed), headers=auth_headers)

        assert response.status_code == 201
        body = response.json()
        assert body["order_number"].startswith("ORD")
        assert body["status"] == "pending"
        assert body["payment_status"] == "partial"
        assert body["created_by"] == "user-1"
        assert Decimal(body["total_amount"]) == Decimal("236.25")
        assert Decimal(body["remaining_amount"]) == Decimal("136.25")
        assert Decimal(body["balance_due"]) == Decimal("136.25")
        assert body["customer"]["name"] == "Asha Verma"
        assert [i["service_name"] for i in body["items"]] == ["Shirt Wash", "Saree Dry Clean"]

    async def test_get_round_trip(self, client, seed, auth_headers):
        created = (await client.post(ORDERS, json=order_payload(seed), headers=auth_headers)).json()

        response = await client.get(f"{ORDERS}/{created['id']}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["order_number"] == created["order_number"]
        assert len(response.json()["items"]) == 2

    async def test_get_missing_is_404(self, client, seed, auth_headers):
        response = await client.get(f"{ORDERS}/99999", headers=auth_headers)
        assert response.status_code == 404
        assert response.json()["detail"] == "Order not found"

    async def test_unknown_customer_is_400(self, client, seed, auth_headers):
        response = await client.post(ORDERS, json=order_payload(seed, customer_id=99999), headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "Customer not found"

    @pytest.mark.parametrize("overrides", [
        {"items": []},
        {"items": [{"service_id": 1, "quantity": 0, "rate": "10.00"}]},
        {"items": [{"service_id": 1, "quantity": 1, "rate": "0"}]},
        {"discount_percentage": 101},
        {"tax_percentage": -1},
        {"advance_paid": "-5"},
        {"advance_paid": "100.005"},
        {"discount_percentage": "10.555"},
        {"tax_percentage": "5.125"},
        {"priority": "whenever"},
        {"due_date": "02/11/2026"},
    ])
    async def test_invalid_payload_rejected(self, client, seed, auth_headers, overrides):
        response = await client.post(ORDERS, json=order_payload(seed, **overrides), headers=auth_headers)
        assert response.status_code == 422

    async def test_list_and_search(self, client, seed, auth_headers):
        await client.post(ORDERS, json=order_payload(seed), headers=auth_headers)
        await client.post(ORDERS, json=order_payload(seed, customer_id=seed.other_customer_id), headers=auth_headers)

        listing = (await client.get(ORDERS, headers=auth_headers)).json()
        assert listing["total"] == 2
        assert listing["pages"] == 1

        found = await client.get(f"{ORDERS}/search", params={"q": "Ravi"}, headers=auth_headers)
        assert found.status_code == 200
        assert [o["customer"]["name"] for o in found.json()] == ["Ravi Kumar"]

    async def test_empty_search_is_400(self, client, seed, auth_headers):
        response = await client.get(f"{ORDERS}/search", params={"q": "  "}, headers=auth_headers)
        assert response.status_code == 400

    async def test_calculate_preview(self, client, seed, auth_headers):
        payload = {
            "items": [
                {"service_id": seed.shirt_id, "quantity": 2, "rate": "100.00"},
                {"service_id": seed.saree_id, "quantity": 1, "rate": "50.00"},
            ],
            "discount_percentage": 10,
            "tax_percentage": 5,
            "advance_paid": "300",
        }
        response = await client.post(f"{ORDERS}/calculate", json=payload, headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert Decimal(body["total_amount"]) == Decimal("236.25")
        assert Decimal(body["remaining_amount"]) == Decimal("-63.75")
        assert body["payment_status"] == "paid"

        listing = (await client.get(ORDERS, headers=auth_headers)).json()
        assert listing["total"] == 0


# ============================================================================
# Update / status / delete
# ============================================================================


class TestModify:

    async def test_update_items(self, client, seed, auth_headers):
        created = (await client.post(ORDERS, json=order_payload(seed), headers=auth_headers)).json()

        response = await client.put(
            f"{ORDERS}/{created['id']}",
            json={"items": [{"service_id": seed.shirt_id, "quantity": 3, "rate": "100.00"}]},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert Decimal(response.json()["total_amount"]) == Decimal("283.50")
        assert len(response.json()["items"]) == 1

    async def test_update_null_status_rejected(self, client, seed, auth_headers):
        created = (await client.post(ORDERS, json=order_payload(seed), headers=auth_headers)).json()

        response = await client.put(f"{ORDERS}/{created['id']}", json={"status": None}, headers=auth_headers)
        assert response.status_code == 422

    async def test_update_missing_is_404(self, client, seed, auth_headers):
        response = await client.put(f"{ORDERS}/99999", json={"notes": "x"}, headers=auth_headers)
        assert response.status_code == 404

    async def test_status_change(self, client, seed, auth_headers):
        created = (await client.post(ORDERS, json=order_payload(seed), headers=auth_headers)).json()

        response = await client.patch(
            f"{ORDERS}/{created['id']}/status", json={"status": "in_progress"}, headers=auth_headers
        )
        assert response.status_code == 200
        assert response.json()["status"] == "in_progress"

        missing = await client.patch(f"{ORDERS}/99999/status", json={"status": "completed"}, headers=auth_headers)
        assert missing.status_code == 404

    async def test_delete(self, client, seed, auth_headers):
        created = (await client.post(ORDERS, json=order_payload(seed), headers=auth_headers)).json()

        response = await client.delete(f"{ORDERS}/{created['id']}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["order_id"] == created["id"]

        again = await client.delete(f"{ORDERS}/{created['id']}", headers=auth_headers)
        assert again.status_code == 404

    async def test_delete_invoiced_is_409(self, client, seed, auth_headers, session_factory):
        created = (await client.post(ORDERS, json=order_payload(seed), headers=auth_headers)).json()
        async with session_factory() as session:
            session.add(Invoice(
                order_id=created["id"],
                invoice_number="INV-0001",
                subtotal=Decimal(created["subtotal"]),
                total_amount=Decimal(created["total_amount"]),
            ))
            await session.commit()

        response = await client.delete(f"{ORDERS}/{created['id']}", headers=auth_headers)

        assert response.status_code == 409
        assert response.json() == {
            "detail": "Cannot delete order that has invoices. Cancel the order instead.",
            "retryable": False,
        }
        assert (await client.get(f"{ORDERS}/{created['id']}", headers=auth_headers)).status_code == 200


# ============================================================================
# Persistence errors
# ============================================================================


class TestPersistenceErrors:

    async def test_production_hides_details(self, client, seed, auth_headers, monkeypatch):
        monkeypatch.setattr(OrderService, "_insert_items", _failing_insert_items)

        response = await client.post(ORDERS, json=order_payload(seed), headers=auth_headers)

        assert response.status_code == 500
        assert response.json() == {"detail": "Internal Server Error"}

    async def test_debug_exposes_details(self, settings, engine, seed, monkeypatch):
        monkeypatch.setattr(OrderService, "_insert_items", _failing_insert_items)
        debug_settings = settings.model_copy(update={"DEBUG": True})
        app = create_app(debug_settings)

        try:
            async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
                response = await client.post(
                    ORDERS,
                    json=order_payload(seed),
                    headers={"Authorization": f"Bearer {make_token(debug_settings)}"},
                )
        finally:
            await app.state.engine.dispose()

        assert response.status_code == 500
        body = response.json()
        assert body["detail"] == "Order creation failed: Database error"
        assert "disk I/O error" in body["error"]
        assert body["type"] == "OperationalError"

        listing_app = create_app(settings)
        try:
            async with AsyncClient(transport=ASGITransport(app=listing_app), base_url="http://test") as client:
                listing = await client.get(ORDERS, headers={"Authorization": f"Bearer {make_token(settings)}"})
        finally:
            await listing_app.state.engine.dispose()
        assert listing.json()["total"] == 0


class TestHealth:

    async def test_health(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["checks"]["database"] == "connected"

    def test_module_app_exposes_order_routes(self):
        from laundry.main import app

        paths = {route.path for route in app.routes}
        assert f"{ORDERS}/{{order_id}}" in paths
        assert "/health" in paths


class TestAmountPrecision:

    async def test_update_rejects_sub_cent_advance(self, client, seed, auth_headers):
        created = (await client.post(ORDERS, json=order_payload(seed), headers=auth_headers)).json()

        response = await client.put(
            f"{ORDERS}/{created['id']}", json={"advance_paid": "100.005"}, headers=auth_headers
        )

        assert response.status_code == 422
        stored = (await client.get(f"{ORDERS}/{created['id']}", headers=auth_headers)).json()
        assert Decimal(stored["advance_paid"]) == Decimal("100.00")

    async def test_calculate_rejects_sub_cent_percentage(self, client, seed, auth_headers):
        payload = {
            "items": [{"service_id": seed.shirt_id, "quantity": 1, "rate": "1000.00"}],
            "discount_percentage": "10.555",
        }
        response = await client.post(f"{ORDERS}/calculate", json=payload, headers=auth_headers)
        assert response.status_code == 422
