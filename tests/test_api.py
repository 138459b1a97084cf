import time
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient


def parse_ts(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def create(client: TestClient, **fields) -> dict:
    payload = {
        "tenantId": "t_wis",
        "customer": {"name": "Lê Thảo Vy", "phone": "0988 246 810"},
        "from": "Kho Tân Bình, HCM",
        "to": "Q.1, HCM",
        "items": [{"name": "Thùng sữa 24 hộp", "qty": 1}],
        "price": 45000,
    }
    payload.update(fields)
    response = client.post("/api/orders", json=payload)
    assert response.status_code == 201
    return response.json()


class TestHealthAndCatalog:
    """Tests for the health probe and tenant catalog."""

    def test_health(self, client: TestClient):
        before = int(time.time() * 1000)
        response = client.get("/api/health")

        assert response.status_code == 200
        data = response.json()
        assert data["ok"] is True
        assert data["ts"] >= before

    def test_tenants(self, client: TestClient):
        response = client.get("/api/tenants")

        assert response.status_code == 200
        assert [t["id"] for t in response.json()] == ["t_wis", "t_cafe", "t_fnb"]


class TestOrderEndpoints:
    """Tests for the REST order surface."""

    def test_create_returns_camel_case_order(self, client: TestClient):
        order = create(client)

        assert order["tenantId"] == "t_wis"
        assert order["from"] == "Kho Tân Bình, HCM"
        assert order["to"] == "Q.1, HCM"
        assert order["status"] == "Created"
        assert order["code"] == "WL-10001"
        assert order["driver"] is None
        assert order["items"] == [{"name": "Thùng sữa 24 hộp", "qty": 1}]
        assert order["price"] == 45000
        assert isinstance(order["price"], int)
        assert [e["status"] for e in order["timeline"]] == ["Created"]
        assert parse_ts(order["eta"]) - parse_ts(order["createdAt"]) == timedelta(hours=4)

    def test_create_without_body_stores_nulls(self, client: TestClient):
        response = client.post("/api/orders")

        assert response.status_code == 201
        order = response.json()
        assert order["tenantId"] is None
        assert order["customer"] is None
        assert order["status"] == "Created"

    def test_list_filters_by_tenant(self, client: TestClient):
        wis = create(client)
        cafe = create(client, tenantId="t_cafe")

        all_ids = [o["id"] for o in client.get("/api/orders").json()]
        wis_ids = [o["id"] for o in client.get("/api/orders", params={"tenantId": "t_wis"}).json()]

        assert all_ids == [cafe["id"], wis["id"]]
        assert wis_ids == [wis["id"]]

    def test_get_and_track(self, client: TestClient):
        order = create(client)

        assert client.get(f"/api/orders/{order['id']}").json()["id"] == order["id"]
        assert client.get("/api/orders/track/wl-10001").json()["id"] == order["id"]
        assert client.get("/api/orders/track/WL-0").status_code == 404

    def test_advance(self, client: TestClient):
        order = create(client)

        response = client.patch(f"/api/orders/{order['id']}/status")

        assert response.status_code == 200
        assert response.json()["status"] == "Assigned"
        assert len(response.json()["timeline"]) == 2

    def test_assign_with_and_without_body(self, client: TestClient):
        first = create(client)
        second = create(client)

        auto = client.patch(f"/api/orders/{first['id']}/assign").json()
        manual = client.patch(
            f"/api/orders/{second['id']}/assign",
            json={"name": "Le Hoang Cuong", "plate": "59C-246.80"},
        ).json()

        assert auto["status"] == "Assigned"
        assert set(auto["driver"]) == {"id", "name", "plate"}
        assert manual["driver"]["name"] == "Le Hoang Cuong"
        assert manual["timeline"][-1]["note"].startswith("Driver Le Hoang Cuong")

    def test_driver_view(self, client: TestClient):
        order = create(client)
        create(client)
        client.patch(f"/api/orders/{order['id']}/assign", json={"name": "Tran Thi Binh", "plate": "51F-678.90"})

        response = client.get("/api/orders", params={"tenantId": "t_wis", "driver": "binh"})

        assert [o["id"] for o in response.json()] == [order["id"]]

    def test_delete(self, client: TestClient):
        order = create(client)

        response = client.delete(f"/api/orders/{order['id']}")
        assert response.status_code == 200
        assert response.json() == {"ok": True}
        assert client.get("/api/orders").json() == []

        again = client.delete(f"/api/orders/{order['id']}")
        assert again.status_code == 404

    @pytest.mark.parametrize(
        "method,path",
        [
            ("PATCH", "/api/orders/missing/status"),
            ("PATCH", "/api/orders/missing/assign"),
            ("DELETE", "/api/orders/missing"),
            ("GET", "/api/orders/missing"),
        ],
    )
    def test_not_found(self, client: TestClient, method, path):
        response = client.request(method, path)

        assert response.status_code == 404
        assert response.json() == {"error": "Not found"}

    def test_kpis(self, client: TestClient):
        order = create(client)
        create(client)
        for _ in range(5):
            client.patch(f"/api/orders/{order['id']}/status")

        data = client.get("/api/kpis", params={"tenantId": "t_wis"}).json()

        assert data == {"tenantId": "t_wis", "total": 2, "delivered": 1, "outForDelivery": 0, "active": 1}


class TestRealtimeSocket:
    """Tests for the websocket room channel."""

    @staticmethod
    def join(ws, tenant_id):
        ws.send_json({"event": "join", "data": {"tenantId": tenant_id}})
        ws.send_json({"event": "ping"})
        assert ws.receive_json()["event"] == "pong"

    def test_joined_client_receives_order_events(self, client: TestClient):
        with client.websocket_connect("/ws") as ws:
            self.join(ws, "t_wis")

            order = create(client)
            assert ws.receive_json() == {"event": "order.created", "data": {"id": order["id"]}}

            client.patch(f"/api/orders/{order['id']}/status")
            assert ws.receive_json() == {"event": "order.updated", "data": {"id": order["id"]}}

            client.delete(f"/api/orders/{order['id']}")
            assert ws.receive_json() == {"event": "order.deleted", "data": {"id": order["id"]}}

    def test_events_stay_in_their_tenant_room(self, client: TestClient):
        with client.websocket_connect("/ws") as ws:
            self.join(ws, "t_cafe")

            create(client, tenantId="t_wis")
            cafe = create(client, tenantId="t_cafe")

            assert ws.receive_json()["data"] == {"id": cafe["id"]}

    def test_unknown_tenant_and_bad_frames_are_ignored(self, client: TestClient, broadcaster):
        with client.websocket_connect("/ws") as ws:
            ws.send_text("not json")
            ws.send_bytes(b"\x00\x01")
            ws.send_json({"event": "dance"})
            ws.send_json({"event": "join", "data": {"tenantId": {"nested": True}}})
            self.join(ws, "t_secret")

            assert broadcaster.room_size("t_secret") == 0
            assert all(broadcaster.room_size(t) == 0 for t in ("t_wis", "t_cafe", "t_fnb"))

    def test_disconnect_leaves_rooms(self, client: TestClient, broadcaster):
        with client.websocket_connect("/ws") as ws:
            self.join(ws, "t_fnb")
            assert broadcaster.room_size("t_fnb") == 1

        create(client, tenantId="t_fnb")
        assert broadcaster.room_size("t_fnb") == 0
