"""
订单 API：认证、状态码映射、审计日志
"""
import asyncio
from decimal import Decimal

import pytest

from oms.services.auth_service import AuthService

ORDER_PAYLOAD = {
    "shipping_address": "上海市浦东新区世纪大道 1 号",
    "billing_address": "上海市浦东新区世纪大道 1 号",
    "payment_method": "alipay",
    "notes": None,
    "items": [
        {"product_name": "键盘", "product_code": "KB-01", "quantity": 2, "price": "10.00", "discount": "0"},
        {"product_name": "鼠标", "product_code": "MS-01", "quantity": 1, "price": "5.00", "discount": "1.00"},
    ],
}


async def register_and_login(client, username):
    resp = await client.post(
        "/api/v1/auth/register",
        json={"username": username, "email": f"{username}@example.com", "password": "secret123"},
    )
    assert resp.status_code == 201
    resp = await client.post("/api/v1/auth/login", data={"username": username, "password": "secret123"})
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


@pytest.fixture
async def alice_headers(client):
    return await register_and_login(client, "alice")


@pytest.fixture
async def bob_headers(client):
    return await register_and_login(client, "bob")


async def create_order(client, headers, payload=ORDER_PAYLOAD):
    resp = await client.post("/api/v1/orders", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


async def test_create_and_get_order(client, alice_headers):
    created = await create_order(client, alice_headers)

    assert created["status"] == "PENDING"
    assert created["username"] == "alice"
    assert Decimal(created["total_amount"]) == Decimal("24.00")
    assert [Decimal(i["subtotal"]) for i in created["items"]] == [Decimal("20.00"), Decimal("4.00")]

    resp = await client.get(f"/api/v1/orders/{created['id']}", headers=alice_headers)
    assert resp.status_code == 200
    assert resp.json()["order_number"] == created["order_number"]

    resp = await client.get(f"/api/v1/orders/by-number/{created['order_number']}", headers=alice_headers)
    assert resp.status_code == 200
    assert resp.json()["id"] == created["id"]


async def test_list_and_count(client, alice_headers):
    first = await create_order(client, alice_headers)
    second = await create_order(client, alice_headers)
    await client.post(f"/api/v1/orders/{first['id']}/cancel", headers=alice_headers)

    resp = await client.get("/api/v1/orders", headers=alice_headers)
    assert [o["id"] for o in resp.json()] == [second["id"], first["id"]]

    resp = await client.get("/api/v1/orders", params={"status": "CANCELLED"}, headers=alice_headers)
    assert [o["id"] for o in resp.json()] == [first["id"]]

    resp = await client.get("/api/v1/orders/count", headers=alice_headers)
    assert resp.json() == {"total": 2}


async def test_update_then_cancel(client, alice_headers):
    created = await create_order(client, alice_headers)
    payload = dict(ORDER_PAYLOAD, notes="请放门口", items=[
        {"product_name": "显示器", "quantity": 1, "price": "899.00"},
    ])

    resp = await client.put(f"/api/v1/orders/{created['id']}", json=payload, headers=alice_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert Decimal(body["total_amount"]) == Decimal("899.00")
    assert body["notes"] == "请放门口"
    assert len(body["items"]) == 1

    resp = await client.post(f"/api/v1/orders/{created['id']}/cancel", headers=alice_headers)
    assert resp.status_code == 200
    assert resp.json()["status"] == "CANCELLED"
    assert resp.json()["cancelled_at"] is not None

    resp = await client.post(f"/api/v1/orders/{created['id']}/cancel", headers=alice_headers)
    assert resp.status_code == 400
    assert "已取消" in resp.json()["detail"]

    resp = await client.put(f"/api/v1/orders/{created['id']}", json=payload, headers=alice_headers)
    assert resp.status_code == 400


async def test_other_user_gets_403(client, alice_headers, bob_headers):
    created = await create_order(client, alice_headers)

    resp = await client.get(f"/api/v1/orders/{created['id']}", headers=bob_headers)
    assert resp.status_code == 403
    resp = await client.put(f"/api/v1/orders/{created['id']}", json=ORDER_PAYLOAD, headers=bob_headers)
    assert resp.status_code == 403
    resp = await client.post(f"/api/v1/orders/{created['id']}/cancel", headers=bob_headers)
    assert resp.status_code == 403


async def test_missing_order_gets_404(client, alice_headers):
    resp = await client.get("/api/v1/orders/999", headers=alice_headers)
    assert resp.status_code == 404
    assert "request_id" in resp.json()


async def test_empty_items_rejected(client, alice_headers):
    resp = await client.post("/api/v1/orders", json=dict(ORDER_PAYLOAD, items=[]), headers=alice_headers)
    assert resp.status_code == 422


async def test_non_positive_quantity_rejected(client, alice_headers):
    payload = dict(ORDER_PAYLOAD, items=[{"product_name": "键盘", "quantity": 0, "price": "10.00"}])
    resp = await client.post("/api/v1/orders", json=payload, headers=alice_headers)
    assert resp.status_code == 422


async def test_requires_token(client):
    resp = await client.get("/api/v1/orders")
    assert resp.status_code == 401


async def test_invalid_token(client):
    resp = await client.get("/api/v1/orders", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


async def test_token_for_unknown_user_gets_404(client):
    token = AuthService(None).create_access_token({"sub": "ghost"})
    resp = await client.get("/api/v1/orders", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 404


async def test_duplicate_username_conflict(client, alice_headers):
    resp = await client.post(
        "/api/v1/auth/register",
        json={"username": "alice", "email": "other@example.com", "password": "secret123"},
    )
    assert resp.status_code == 409


async def test_concurrent_registration_of_same_username(client):
    payload = {"username": "carol", "email": "carol@example.com", "password": "secret123"}

    responses = await asyncio.gather(
        client.post("/api/v1/auth/register", json=payload),
        client.post("/api/v1/auth/register", json=payload),
    )

    assert sorted(r.status_code for r in responses) == [201, 409]
    loser = next(r for r in responses if r.status_code == 409)
    assert loser.json()["detail"] in ("用户名已存在", "邮箱已存在")


async def test_wrong_password(client, alice_headers):
    resp = await client.post("/api/v1/auth/login", data={"username": "alice", "password": "wrong-pass"})
    assert resp.status_code == 401


async def test_audit_logs_record_order_actions(client, alice_headers):
    created = await create_order(client, alice_headers)
    await client.post(f"/api/v1/orders/{created['id']}/cancel", headers=alice_headers)

    resp = await client.get("/api/v1/audit-logs", headers=alice_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == 2
    assert {item["action"] for item in body["items"]} == {"create_order", "cancel_order"}
    assert all(item["resource_id"] == str(created["id"]) for item in body["items"])

    resp = await client.get("/api/v1/audit-logs", params={"action": "cancel_order"}, headers=alice_headers)
    assert resp.json()["total"] == 1


async def test_request_id_is_echoed(client):
    resp = await client.get("/", headers={"X-Request-ID": "req-123"})
    assert resp.headers["X-Request-ID"] == "req-123"


async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["dependencies"]["database"]["ok"] is True


async def test_order_history(client, alice_headers, bob_headers):
    created = await create_order(client, alice_headers)
    other = await create_order(client, alice_headers)
    payload = dict(ORDER_PAYLOAD, items=[{"product_name": "显示器", "quantity": 1, "price": "899.00"}])
    await client.put(f"/api/v1/orders/{created['id']}", json=payload, headers=alice_headers)
    await client.post(f"/api/v1/orders/{created['id']}/cancel", headers=alice_headers)

    resp = await client.get(f"/api/v1/orders/{created['id']}/history", headers=alice_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == 3
    assert [item["action"] for item in body["items"]] == ["cancel_order", "update_order", "create_order"]
    assert all(item["resource_id"] == str(created["id"]) for item in body["items"])

    resp = await client.get(
        "/api/v1/audit-logs",
        params={"resource_type": "order", "resource_id": str(other["id"])},
        headers=alice_headers,
    )
    assert resp.json()["total"] == 1
    assert resp.json()["items"][0]["action"] == "create_order"


async def test_order_history_of_other_users_order(client, alice_headers, bob_headers):
    created = await create_order(client, alice_headers)

    resp = await client.get(f"/api/v1/orders/{created['id']}/history", headers=bob_headers)
    assert resp.status_code == 403
    resp = await client.get("/api/v1/orders/999/history", headers=alice_headers)
    assert resp.status_code == 404
