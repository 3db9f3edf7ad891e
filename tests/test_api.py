# tests/test_api.py
"""End-to-end tests through the FastAPI app with the store swapped for in-memory SQLite."""

API = "/api/v1"


def register(client, headers, name="Ana", cpf="123.456.789-01", room="Room 1", **extra):
    return client.post(f"{API}/visitors", json={"name": name, "cpf": cpf, "room": room, **extra}, headers=headers)


class TestAuthEndpoints:
    def test_register_then_login(self, client):
        resp = client.post(f"{API}/auth/register",
                           json={"email": "desk@example.com", "password": "secret123", "name": "Front Desk"})
        assert resp.status_code == 201
        assert resp.json()["operator"]["email"] == "desk@example.com"

        resp = client.post(f"{API}/auth/login", json={"email": "desk@example.com", "password": "secret123"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["token_type"] == "bearer"

        me = client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
        assert me.status_code == 200
        assert me.json()["name"] == "Front Desk"

    def test_bad_login(self, client, operator):
        resp = client.post(f"{API}/auth/login", json={"email": "desk@example.com", "password": "wrong-pass"})
        assert resp.status_code == 401
        assert resp.json()["error"]["kind"] == "AuthError"

    def test_duplicate_sign_up(self, client, operator):
        resp = client.post(f"{API}/auth/register", json={"email": "desk@example.com", "password": "secret123"})
        assert resp.status_code == 409
        assert resp.json()["error"]["kind"] == "ConflictError"

    def test_logout(self, client, auth_headers):
        resp = client.post(f"{API}/auth/logout", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json() == {"status": "logged_out"}


class TestAuthRequired:
    def test_missing_token(self, client):
        resp = client.get(f"{API}/visitors")
        assert resp.status_code == 401
        assert resp.json() == {"error": {"kind": "AuthError", "message": "Not authorized"}}

    def test_invalid_token(self, client):
        resp = client.post(f"{API}/visitors", json={"name": "Ana", "cpf": "12345678901", "room": "Room 1"},
                           headers={"Authorization": "Bearer not-a-token"})
        assert resp.status_code == 401


class TestVisitorEndpoints:
    def test_full_visit_cycle(self, client, auth_headers):
        resp = register(client, auth_headers)
        assert resp.status_code == 201
        first = resp.json()["visitor"]
        assert first["cpf"] == "12345678901"
        assert first["check_out_at"] is None

        resp = client.post(f"{API}/visitors/{first['id']}/checkout", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json()["visitor"]["check_out_at"] is not None

        resp = client.post(f"{API}/visitors/{first['id']}/checkout", headers=auth_headers)
        assert resp.status_code == 409
        assert resp.json()["error"]["kind"] == "AlreadyCheckedOutError"

        resp = client.post(f"{API}/visitors/{first['id']}/checkin", headers=auth_headers)
        assert resp.status_code == 201
        second = resp.json()["visitor"]
        assert second["id"] != first["id"]
        assert second["room"] == "Room 1"

        resp = client.delete(f"{API}/visitors/{second['id']}", headers=auth_headers)
        assert resp.status_code == 409
        assert resp.json()["error"]["kind"] == "ActiveVisitorError"

        resp = client.delete(f"{API}/visitors/{first['id']}", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json()["deleted_visitor"]["id"] == first["id"]

        resp = client.delete(f"{API}/visitors/{first['id']}", headers=auth_headers)
        assert resp.status_code == 404
        assert resp.json()["error"]["kind"] == "NotFoundError"

    def test_room_cap(self, client, auth_headers):
        for cpf in ("11111111111", "22222222222", "33333333333"):
            assert register(client, auth_headers, cpf=cpf, room="Room 2").status_code == 201

        resp = register(client, auth_headers, name="Fourth", cpf="44444444444", room="Room 2")
        assert resp.status_code == 409
        error = resp.json()["error"]
        assert error["kind"] == "CapacityError"
        assert "Room 2" in error["message"]

        rooms = {r["room"]: r for r in client.get(f"{API}/rooms", headers=auth_headers).json()}
        assert rooms["Room 2"]["active_count"] == 3
        assert rooms["Room 2"]["is_full"] is True

    def test_validation_errors_use_envelope(self, client, auth_headers):
        resp = register(client, auth_headers, cpf="123")
        assert resp.status_code == 400
        assert resp.json()["error"]["kind"] == "ValidationError"

        resp = client.post(f"{API}/visitors", json={"name": "Ana"}, headers=auth_headers)
        assert resp.status_code == 400
        error = resp.json()["error"]
        assert error["kind"] == "ValidationError"
        assert "CPF" in error["message"]

        resp = register(client, auth_headers, birth_date="not-a-date")
        assert resp.status_code == 400

    def test_missing_fields_are_audited(self, client, auth_headers, operator):
        resp = client.post(f"{API}/visitors", json={"cpf": "12345678901", "room": "Room 1"}, headers=auth_headers)
        assert resp.status_code == 400
        assert resp.json()["error"] == {"kind": "ValidationError", "message": "Name is required"}

        page = client.get(f"{API}/audit-logs", params={"action": "create_visitor"}, headers=auth_headers).json()
        assert page["total"] == 1
        assert page["entries"][0]["actor_id"] == operator.id
        assert "rejected" in page["entries"][0]["detail"]

    def test_list_search_and_history(self, client, auth_headers):
        first = register(client, auth_headers, cpf="12345678901", room="Room 1").json()["visitor"]
        register(client, auth_headers, name="Bruno", cpf="98765432100", room="Room 3")
        client.post(f"{API}/visitors/{first['id']}/checkout", headers=auth_headers)

        all_visits = client.get(f"{API}/visitors", headers=auth_headers).json()["visitors"]
        active = client.get(f"{API}/visitors", params={"active_only": True}, headers=auth_headers).json()["visitors"]
        assert len(all_visits) == 2
        assert [v["name"] for v in active] == ["Bruno"]

        found = client.get(f"{API}/visitors/search", params={"cpf": "12345"}, headers=auth_headers).json()
        assert [v["id"] for v in found["visitors"]] == [first["id"]]

        resp = client.get(f"{API}/visitors/search", headers=auth_headers)
        assert resp.status_code == 400

        history = client.get(f"{API}/visitors/history", headers=auth_headers).json()
        assert history["total"] == 2
        assert history["active"] == 1
        assert history["completed"] == 1
        statuses = {h["name"]: h["status"] for h in history["history"]}
        assert statuses == {"Ana": "Checkout", "Bruno": "Active"}


class TestAuditLogEndpoint:
    def test_actions_are_logged_with_origin(self, client, auth_headers, operator):
        register(client, {**auth_headers, "X-Forwarded-For": "203.0.113.9", "User-Agent": "front-desk"})
        register(client, auth_headers, cpf="1")

        resp = client.get(f"{API}/audit-logs", params={"action": "create_visitor"}, headers=auth_headers)
        assert resp.status_code == 200
        page = resp.json()
        assert page["total"] == 2
        assert page["has_more"] is False
        rejected, created = page["entries"]
        assert "rejected" in rejected["detail"]
        assert created["detail"] == "Visitor created in Room 1"
        assert created["actor_id"] == operator.id
        assert created["ip_address"] == "203.0.113.9"
        assert created["user_agent"] == "front-desk"

    def test_pagination_and_self_audit(self, client, auth_headers, operator):
        for cpf in ("11111111111", "22222222222", "33333333333"):
            register(client, auth_headers, cpf=cpf, room="Room 4")

        page = client.get(f"{API}/audit-logs", params={"actor_id": operator.id, "limit": 2},
                          headers=auth_headers).json()
        assert page["limit"] == 2
        assert len(page["entries"]) == 2
        assert page["has_more"] is True

        page = client.get(f"{API}/audit-logs", params={"action": "view_system_logs"}, headers=auth_headers).json()
        assert page["total"] == 1


class TestHealth:
    def test_health_reports_database(self, client):
        body = client.get(f"{API}/health").json()
        assert body["status"] == "ok"
        assert body["database"] == "ok"
        assert body["rooms_full"] == 0
