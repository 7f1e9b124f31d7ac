# tests/test_api.py
from unittest.mock import patch

from tests.conftest import ADMIN_ID, USER_ID, auth_headers


def _create(client, headers, **overrides):
     body = {"quantity": 10, "unitPrice": "5,000", "source": "Realm A"}
     body.update(overrides)
     return client.post("/api/payments", json=body, headers=headers)


def test_health(client):
     body = client.get("/health").json()
     assert body["status"] == "ok"
     assert body["store"] is True
     assert set(body["cache"]) == {"seller_info", "user_role", "payment_list"}


def test_health_reports_unreachable_store(client, services):
     with patch.object(services.store.backend, "ping", return_value=False):
          body = client.get("/health").json()
     assert body["status"] == "degraded"
     assert body["store"] is False


def test_missing_token(client):
     response = client.get("/api/payments")
     assert response.status_code == 401
     body = response.json()
     assert body["success"] is False
     assert body["error"]["code"] == "UNAUTHORIZED"


def test_invalid_token(client):
     response = client.get("/api/payments", headers={"Authorization": "Bearer nonsense"})
     assert response.status_code == 403


def test_payment_lifecycle(client, admin_headers):
     created = _create(client, admin_headers)
     assert created.status_code == 201
     unique_id = created.json()["uniqueId"]
     assert created.json()["total"] == "50000"

     payment = client.get(f"/api/payments/{unique_id}", headers=admin_headers).json()
     assert payment["ownerId"] == ADMIN_ID
     assert payment["total"] == "50,000"
     assert payment["paidFlag"] is False
     assert "rowIndex" not in payment

     updated = client.put(f"/api/payments/{unique_id}", json={"quantity": 20}, headers=admin_headers)
     assert updated.status_code == 200
     assert updated.json()["changes"]["total"] == {"old": 50000, "new": 100000}

     paid = client.put(f"/api/payments/{unique_id}/paid", json={"paid": True}, headers=admin_headers)
     assert paid.json()["paidFlag"] is True

     listed = client.get("/api/payments", headers=admin_headers).json()
     assert [p["uniqueId"] for p in listed] == [unique_id]

     deleted = client.delete(f"/api/payments/{unique_id}", headers=admin_headers)
     assert deleted.status_code == 200
     assert client.get(f"/api/payments/{unique_id}", headers=admin_headers).status_code == 404

     logs = client.get(f"/api/payments/{unique_id}/logs", headers=admin_headers).json()
     assert logs["paymentId"] == unique_id
     assert [entry["action"] for entry in logs["logs"]] == ["create", "edit", "edit", "delete"]
     assert logs["logs"][2]["changes"] == {"columnQ": {"old": False, "new": True}}
     assert logs["logs"][0]["actor"] == "Boss"


def test_create_validation_error_body(client, user_headers):
     response = _create(client, user_headers, quantity="ten")
     assert response.status_code == 400
     error = response.json()["error"]
     assert error["code"] == "VALIDATION_ERROR"
     assert error["field"] == "quantity"


def test_create_missing_quantity(client, user_headers):
     response = client.post("/api/payments", json={"unitPrice": 1}, headers=user_headers)
     assert response.status_code == 400
     assert response.json()["error"]["field"] == "quantity"


def test_create_out_of_range_quantity(client, user_headers):
     response = _create(client, user_headers, quantity="12345678901234567890", unitPrice="123456789")
     assert response.status_code == 400
     error = response.json()["error"]
     assert error["code"] == "VALIDATION_ERROR"
     assert error["field"] == "quantity"


def test_sub_cent_price_survives_read(client, user_headers):
     created = _create(client, user_headers, quantity=100000, unitPrice="0.0035").json()
     assert created["total"] == "350"
     payment = client.get(f"/api/payments/{created['uniqueId']}", headers=user_headers).json()
     assert payment["unitPrice"] == "0.0035"
     assert payment["total"] == "350"


def test_not_found_body(client, user_headers):
     response = client.put("/api/payments/000000000000", json={"note": "x"}, headers=user_headers)
     assert response.status_code == 404
     assert response.json()["error"]["code"] == "NOT_FOUND"


def test_paid_flag_requires_admin(client, user_headers):
     unique_id = _create(client, user_headers).json()["uniqueId"]
     response = client.put(f"/api/payments/{unique_id}/paid", json={"paid": True}, headers=user_headers)
     assert response.status_code == 403
     assert client.delete(f"/api/payments/{unique_id}", headers=user_headers).status_code == 403


def test_users_admin_only(client, admin_headers, user_headers):
     assert client.get("/api/users", headers=user_headers).status_code == 403

     created = client.post("/api/users", json={"discordId": "333", "role": "User"}, headers=admin_headers)
     assert created.status_code == 201
     assert created.json()["role"] == "User"

     promoted = client.put("/api/users/333", json={"role": "Admin"}, headers=admin_headers)
     assert promoted.json()["role"] == "Admin"

     bad_role = client.put("/api/users/333", json={"role": "Owner"}, headers=admin_headers)
     assert bad_role.status_code == 400

     assert client.delete("/api/users/333", headers=admin_headers).status_code == 204
     assert client.delete(f"/api/users/{ADMIN_ID}", headers=admin_headers).status_code == 400


def test_duplicate_user_conflict(client, admin_headers):
     response = client.post("/api/users", json={"discordId": ADMIN_ID}, headers=admin_headers)
     assert response.status_code == 409
     assert response.json()["error"]["code"] == "CONFLICT"


def test_login_and_me(client, services, user_headers):
     services.users.update_credentials(USER_ID, username="seller", password="hunter22")

     response = client.post("/api/auth/login", json={"username": "seller", "password": "hunter22"})
     assert response.status_code == 200
     token = response.json()["token"]
     assert response.json()["user"]["discordId"] == USER_ID

     me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
     assert me.json()["nickname"] == "Seller"

     wrong = client.post("/api/auth/login", json={"username": "seller", "password": "nope"})
     assert wrong.status_code == 401


@patch("routers.auth.discord_oauth.exchange_code")
def test_discord_callback_first_user_is_admin(mock_exchange, client):
     mock_exchange.return_value = {"discordId": "777", "username": "first", "nickname": "First"}
     response = client.get("/api/auth/discord/callback", params={"code": "abc"})
     assert response.status_code == 200
     assert response.json()["user"]["role"] == "Admin"


@patch("routers.auth.discord_oauth.exchange_code")
def test_discord_callback_unknown_user_forbidden(mock_exchange, client, admin_headers):
     mock_exchange.return_value = {"discordId": "888", "username": "x", "nickname": "X"}
     response = client.get("/api/auth/discord/callback", params={"code": "abc"})
     assert response.status_code == 403


def test_seller_profile(client, user_headers, admin_headers):
     assert client.get(f"/api/sellers/{USER_ID}", headers=user_headers).status_code == 404

     saved = client.put(f"/api/sellers/{USER_ID}", json={"card": "6037", "paypalWallet": "p@x"}, headers=user_headers)
     assert saved.json()["paypalWallet"] == "p@x"

     other = client.put(f"/api/sellers/{ADMIN_ID}", json={"card": "1"}, headers=user_headers)
     assert other.status_code == 403

     assert client.get(f"/api/sellers/{USER_ID}", headers=admin_headers).json()["card"] == "6037"


def test_payment_info(client):
     options = client.get("/api/payment-info").json()
     assert options["dueDateInfo"] == {"title": "Due Date", "hours": 24}


def test_analytics(client, admin_headers, user_headers):
     unique_id = _create(client, admin_headers).json()["uniqueId"]
     client.put(f"/api/payments/{unique_id}/paid", json={"paid": True}, headers=admin_headers)
     _create(client, admin_headers, quantity=1)

     overview = client.get("/api/analytics/overview", headers=admin_headers).json()
     assert overview == {"totalPayments": 2, "paidPayments": 1, "unpaidPayments": 1, "totalRevenue": 50000}
     assert client.get("/api/analytics/status", headers=admin_headers).json() == {"paid": 1, "unpaid": 1}
     assert client.get("/api/analytics/timeline", params={"groupBy": "month"}, headers=admin_headers).status_code == 200
     assert client.get("/api/analytics/timeline", params={"groupBy": "year"}, headers=admin_headers).status_code == 400
     assert client.get("/api/analytics/overview", headers=user_headers).status_code == 403


def test_demoted_admin_loses_access(client, services, admin_headers):
     services.users.create_user("999", "User")
     services.users.update_role(ADMIN_ID, "User")
     assert client.get("/api/users", headers=admin_headers).status_code == 403


def test_token_for_unknown_user(client):
     response = client.get("/api/auth/me", headers=auth_headers("nobody"))
     assert response.status_code == 404
