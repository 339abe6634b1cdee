"""
Tests for the order, dispatch, production and payment endpoints

Exercises the HTTP surface end to end: acting user header, error code
mapping and response shapes.
"""
from datetime import datetime, timedelta

import pytest
from sqlalchemy.exc import OperationalError

from sunkool.services import order_service

pytestmark = pytest.mark.api


def _create_order(client, headers, customer_id, **payload):
    response = client.post(
        "/api/v1/orders/",
        json={"customer_id": customer_id, **payload},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


def _add_item(client, headers, order_id, inventory_item_id, quantity, unit_price="100.00"):
    response = client.post(
        f"/api/v1/orders/{order_id}/items",
        json={"inventory_item_id": inventory_item_id, "quantity": quantity, "unit_price": unit_price},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


class TestOrderEndpoints:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_create_requires_user_header(self, client, customer):
        response = client.post("/api/v1/orders/", json={"customer_id": customer.id})

        assert response.status_code == 401
        assert response.json()["error"] == "NOT_AUTHENTICATED"

    def test_non_integer_user_header(self, client, customer):
        response = client.post(
            "/api/v1/orders/", json={"customer_id": customer.id}, headers={"X-User-Id": "alice"}
        )
        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"

    def test_create_and_fetch(self, client, user_headers, customer, inventory_item):
        order = _create_order(client, user_headers, customer.id, sales_order_number="AMZ-1")
        assert order["internal_order_number"] == "SK01"
        assert order["order_status"] == "Pending"
        assert order["created_by"] == 1

        _add_item(client, user_headers, order["id"], inventory_item.id, 4)

        response = client.get(f"/api/v1/orders/{order['id']}")
        assert response.status_code == 200
        data = response.json()
        assert data["order_status"] == "Approved"
        assert data["customer"]["name"] == "Cool Breeze Traders"
        assert [item["quantity"] for item in data["items"]] == [4]

    def test_list_filters_by_status(self, client, user_headers, customer, inventory_item):
        first = _create_order(client, user_headers, customer.id)
        _create_order(client, user_headers, customer.id)
        _add_item(client, user_headers, first["id"], inventory_item.id, 1)

        response = client.get("/api/v1/orders/", params={"order_status": "Approved"})
        assert response.status_code == 200
        assert [o["id"] for o in response.json()] == [first["id"]]

    def test_missing_order_is_404(self, client):
        response = client.get("/api/v1/orders/999")

        assert response.status_code == 404
        body = response.json()
        assert body["error"] == "NOT_FOUND"
        assert body["details"]["resource"] == "Order"
        assert "timestamp" in body

    def test_invalid_transition_is_422(self, client, user_headers, customer):
        order = _create_order(client, user_headers, customer.id)

        response = client.post(
            f"/api/v1/orders/{order['id']}/status", json={"status": "Delivered"}, headers=user_headers
        )
        assert response.status_code == 422
        assert response.json()["error"] == "INVALID_TRANSITION"

        allowed = client.get(f"/api/v1/orders/{order['id']}/allowed-statuses")
        assert allowed.json() == ["Approved", "Cancelled"]

    def test_request_body_validation(self, client, user_headers):
        response = client.post("/api/v1/orders/", json={}, headers=user_headers)

        assert response.status_code == 422
        body = response.json()
        assert body["error"] == "VALIDATION_ERROR"
        assert body["details"]["errors"][0]["field"] == "customer_id"

    def test_events_timeline(self, client, user_headers, customer, inventory_item):
        order = _create_order(client, user_headers, customer.id)
        _add_item(client, user_headers, order["id"], inventory_item.id, 2)

        response = client.get(f"/api/v1/orders/{order['id']}/events")
        assert response.status_code == 200
        types = {event["event_type"] for event in response.json()}
        assert types == {"created", "item_added", "status_change"}

    def test_database_error_is_500(self, client, monkeypatch):
        def broken(*args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("connection lost"))

        monkeypatch.setattr(order_service, "list_orders", broken)

        response = client.get("/api/v1/orders/")
        assert response.status_code == 500
        assert response.json()["error"] == "DATABASE_ERROR"

    def test_delete_order(self, client, user_headers, customer):
        order = _create_order(client, user_headers, customer.id)

        response = client.delete(f"/api/v1/orders/{order['id']}", headers=user_headers)
        assert response.status_code == 200
        assert client.get(f"/api/v1/orders/{order['id']}").status_code == 404


class TestLineEndpoints:

    def test_update_and_remove_item(self, client, user_headers, customer, inventory_item):
        order = _create_order(client, user_headers, customer.id)
        line = _add_item(client, user_headers, order["id"], inventory_item.id, 4)

        response = client.patch(
            f"/api/v1/orders/items/{line['id']}", json={"quantity": 7}, headers=user_headers
        )
        assert response.status_code == 200
        assert response.json()["quantity"] == 7

        response = client.delete(f"/api/v1/orders/items/{line['id']}", headers=user_headers)
        assert response.status_code == 200

    def test_remove_dispatched_item_is_422(self, client, user_headers, customer, inventory_item):
        order = _create_order(client, user_headers, customer.id)
        line = _add_item(client, user_headers, order["id"], inventory_item.id, 4)
        client.post(
            f"/api/v1/orders/{order['id']}/dispatches",
            json={"dispatch_type": "partial", "lines": [{"order_item_id": line["id"], "quantity": 2}]},
            headers=user_headers,
        )

        response = client.delete(f"/api/v1/orders/items/{line['id']}", headers=user_headers)
        assert response.status_code == 422
        body = response.json()
        assert body["error"] == "ITEM_HAS_DISPATCHES"
        assert body["details"]["dispatched_quantity"] == 2


class TestDispatchEndpoints:

    @pytest.fixture
    def order_with_line(self, client, user_headers, customer, inventory_item):
        order = _create_order(client, user_headers, customer.id)
        line = _add_item(client, user_headers, order["id"], inventory_item.id, 10)
        return order, line

    def test_dispatch_and_return(self, client, user_headers, order_with_line):
        order, line = order_with_line

        response = client.post(
            f"/api/v1/orders/{order['id']}/dispatches",
            json={"dispatch_type": "full", "lines": [{"order_item_id": line["id"], "quantity": 10}]},
            headers=user_headers,
        )
        assert response.status_code == 201
        dispatch = response.json()
        assert dispatch["shipment_status"] == "ready"
        assert dispatch["items"][0]["quantity"] == 10

        response = client.post(
            f"/api/v1/orders/{order['id']}/returns",
            json={"lines": [{"order_item_id": line["id"], "quantity": 3}]},
            headers=user_headers,
        )
        assert response.status_code == 201
        assert response.json()["items"][0]["quantity"] == -3

        balances = client.get(f"/api/v1/orders/{order['id']}/balances").json()
        assert balances[0]["dispatched_quantity"] == 7
        assert balances[0]["remaining_quantity"] == 3

        status = client.get(f"/api/v1/orders/items/{line['id']}/dispatch-status").json()
        assert status["dispatch_count"] == 2

    def test_over_dispatch_is_422(self, client, user_headers, order_with_line):
        order, line = order_with_line

        response = client.post(
            f"/api/v1/orders/{order['id']}/dispatches",
            json={"dispatch_type": "partial", "lines": [{"order_item_id": line["id"], "quantity": 11}]},
            headers=user_headers,
        )
        assert response.status_code == 422
        assert response.json()["error"] == "EXCEEDS_ORDERED_QUANTITY"
        assert client.get(f"/api/v1/orders/{order['id']}/dispatches").json() == []

    def test_empty_dispatch_is_400(self, client, user_headers, order_with_line):
        order, _ = order_with_line

        response = client.post(
            f"/api/v1/orders/{order['id']}/dispatches",
            json={"dispatch_type": "partial", "lines": []},
            headers=user_headers,
        )
        assert response.status_code == 400
        assert response.json()["error"] == "NO_ITEMS_TO_DISPATCH"

    def test_shipment_status_delivers_order(self, client, user_headers, order_with_line):
        order, line = order_with_line
        dispatch = client.post(
            f"/api/v1/orders/{order['id']}/dispatches",
            json={"dispatch_type": "full", "lines": [{"order_item_id": line["id"], "quantity": 10}]},
            headers=user_headers,
        ).json()

        response = client.patch(
            f"/api/v1/dispatches/{dispatch['id']}/status", json={"status": "delivered"}, headers=user_headers
        )
        assert response.status_code == 200
        assert response.json()["shipment_status"] == "delivered"
        assert client.get(f"/api/v1/orders/{order['id']}").json()["order_status"] == "Delivered"


class TestProductionEndpoints:

    def test_partial_record_lifecycle(self, client, user_headers, customer, inventory_item):
        order = _create_order(client, user_headers, customer.id)
        line = _add_item(client, user_headers, order["id"], inventory_item.id, 10)

        response = client.post(
            f"/api/v1/orders/{order['id']}/production-records",
            json={"production_type": "partial", "selected_quantities": {str(line["id"]): 4}},
            headers=user_headers,
        )
        assert response.status_code == 201
        record = response.json()
        assert record["production_code"] == "SK01A"
        assert record["selected_quantities"] == {str(line["id"]): 4}

        remaining = client.get(f"/api/v1/orders/{order['id']}/production-remaining").json()
        assert remaining == {str(line["id"]): 6}

        for status in ("in_production", "completed"):
            response = client.patch(
                f"/api/v1/production-records/{record['id']}/status",
                json={"status": status},
                headers=user_headers,
            )
            assert response.status_code == 200

        response = client.delete(f"/api/v1/production-records/{record['id']}", headers=user_headers)
        assert response.status_code == 422
        assert response.json()["error"] == "INVALID_STATE"

    def test_second_full_record_is_422(self, client, user_headers, customer, inventory_item):
        order = _create_order(client, user_headers, customer.id)
        _add_item(client, user_headers, order["id"], inventory_item.id, 10)
        url = f"/api/v1/orders/{order['id']}/production-records"

        assert client.post(url, json={"production_type": "full"}, headers=user_headers).status_code == 201
        response = client.post(url, json={"production_type": "full"}, headers=user_headers)
        assert response.status_code == 422
        assert response.json()["error"] == "FULL_PRODUCTION_ALREADY_EXISTS"


class TestPaymentEndpoints:

    def test_payment_before_dispatch_is_422(self, client, user_headers, customer):
        order = _create_order(client, user_headers, customer.id)

        response = client.patch(
            f"/api/v1/orders/{order['id']}/payment-status", json={"status": "complete"}, headers=user_headers
        )
        assert response.status_code == 422
        assert response.json()["error"] == "PAYMENT_REQUIRES_DISPATCH"

    def test_followups_and_payment_record(self, client, user_headers, customer, inventory_item):
        order = _create_order(client, user_headers, customer.id, cash_discount=True)
        line = _add_item(client, user_headers, order["id"], inventory_item.id, 2)

        followups = client.get(f"/api/v1/orders/{order['id']}/payment-followups").json()
        assert len(followups) == 14
        created_on = datetime.fromisoformat(order["created_at"]).date()
        assert followups[0]["followup_date"] == (created_on + timedelta(days=1)).isoformat()

        response = client.patch(
            f"/api/v1/payment-followups/{followups[0]['id']}",
            json={"payment_received": True},
            headers=user_headers,
        )
        assert response.status_code == 200
        assert response.json()["payment_received"] is True

        client.post(
            f"/api/v1/orders/{order['id']}/dispatches",
            json={"dispatch_type": "full", "lines": [{"order_item_id": line["id"], "quantity": 2}]},
            headers=user_headers,
        )
        response = client.post(
            f"/api/v1/orders/{order['id']}/payments",
            json={"amount": "200.00", "payment_method": "cash"},
            headers=user_headers,
        )
        assert response.status_code == 201
        payment = response.json()

        payments = client.get(f"/api/v1/orders/{order['id']}/payments").json()
        assert [p["id"] for p in payments] == [payment["id"]]

        response = client.delete(f"/api/v1/payments/{payment['id']}", headers=user_headers)
        assert response.status_code == 200

    def test_payment_date_year_validated(self, client, user_headers, customer):
        order = _create_order(client, user_headers, customer.id)

        response = client.post(
            f"/api/v1/orders/{order['id']}/payments",
            json={"amount": "10", "payment_date": "1999-12-31"},
            headers=user_headers,
        )
        assert response.status_code == 422
        assert response.json()["error"] == "VALIDATION_ERROR"
