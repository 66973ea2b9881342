"""Tests for the FastAPI endpoints."""

import json

import pytest
from fastapi.testclient import TestClient

from motormind.app import create_app


@pytest.fixture
def client(settings, oracle, store):
    return TestClient(create_app(settings=settings, oracle=oracle, store=store))


def test_welcome(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"message": "Welcome to MotorMind"}


class TestAgentEndpoint:
    def test_allocated_result(self, client, oracle, store, find_item):
        unit = find_item("Hero Super Splendor", "Jodhpur")
        oracle.queue(
            json.dumps({"Model": "Hero Super Splendor", "location": "Jodhpur", "Color": "Blue", "deliveryDays": 10}),
            json.dumps({"model": unit.model, "location": unit.location, "color": "Blue", "eta": "1 day", "uuid": unit.id}),
        )

        response = client.post("/api/agent", json={"message": "hero super splendor in jodhpur, blue, 10 days"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"] == {
            "kind": "allocated",
            "payload": {
                "model": "Hero Super Splendor",
                "location": "Jodhpur",
                "color": "Blue",
                "deliveryDays": 1,
                "uuid": unit.id,
            },
        }
        assert store.get(unit.id).stock == unit.stock - 1

    def test_conversational_result(self, client, oracle):
        oracle.queue("{}", "Tell me the bike you want, I will find it.")
        body = client.post("/api/agent", json={"message": "hey"}).json()
        assert body["data"] == {"kind": "conversational", "payload": "Tell me the bike you want, I will find it."}

    def test_missing_message_is_rejected(self, client, oracle):
        response = client.post("/api/agent", json={"text": "hi"})
        assert response.status_code == 400
        assert response.json()["success"] is False
        assert oracle.calls == []

    def test_empty_oracle_reply(self, client, oracle):
        oracle.queue("")
        response = client.post("/api/agent", json={"message": "hero splendor"})
        assert response.status_code == 502
        assert response.json() == {
            "error": "No response received from AI during extract_request",
            "success": False,
        }


class TestVehicleEndpoints:
    def test_list(self, client, store):
        response = client.get("/api/vehicles")
        assert response.status_code == 200
        assert len(response.json()) == len(store)

    def test_create_get_update_delete(self, client):
        created = client.post(
            "/api/vehicles",
            json={"model": "Ather 450X", "location": "Bangalore", "stock": 5, "price": 145000, "color": "Grey", "type": "ELECTRIC"},
        ).json()
        assert created["success"] is True
        vehicle_id = created["vehicle"]["id"]
        assert created["vehicle"]["type"] == "ELECTRIC"

        fetched = client.get(f"/api/vehicles/{vehicle_id}").json()
        assert fetched["vehicle"]["model"] == "Ather 450X"

        updated = client.post(
            f"/api/vehicles/{vehicle_id}",
            json={"model": "Ather 450 Apex", "location": "Bangalore", "stock": 2, "price": 190000, "color": "Blue"},
        ).json()
        assert updated["vehicle"]["model"] == "Ather 450 Apex"
        assert updated["vehicle"]["stock"] == 2

        deleted = client.get(f"/api/delete/vehicles/{vehicle_id}").json()
        assert deleted["vehicle"]["id"] == vehicle_id

        missing = client.get(f"/api/vehicles/{vehicle_id}")
        assert missing.status_code == 404
        assert missing.json()["success"] is False

    def test_delete_verb(self, client, find_item):
        unit = find_item("Honda Activa 6G", "Kota")
        assert client.delete(f"/api/vehicles/{unit.id}").status_code == 200
        assert client.delete(f"/api/vehicles/{unit.id}").status_code == 404

    def test_invalid_type_is_rejected(self, client):
        response = client.post(
            "/api/vehicles",
            json={"model": "X", "location": "Y", "stock": 1, "price": 1, "color": "Z", "type": "TRUCK"},
        )
        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_negative_stock_is_rejected(self, client):
        response = client.post(
            "/api/vehicles",
            json={"model": "X", "location": "Y", "stock": -1, "price": 1, "color": "Z", "type": "BIKE"},
        )
        assert response.status_code == 400


class TestBuyEndpoint:
    def test_buy_last_unit_then_out_of_stock(self, client, find_item):
        unit = find_item("Hero Super Splendor", "Jaipur")

        first = client.post("/api/buy", json={"id": unit.id})
        assert first.status_code == 200
        assert first.json()["vehicle"]["stock"] == 0

        second = client.post("/api/buy", json={"id": unit.id})
        assert second.status_code == 409
        assert second.json() == {"error": f"Vehicle with id {unit.id} is out of stock", "success": False}

    def test_buy_unknown_unit(self, client):
        response = client.post("/api/buy", json={"id": "nope"})
        assert response.status_code == 404
        assert response.json()["error"] == "Vehicle with id nope not found"
