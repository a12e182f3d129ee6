class TestUsersApi:
    def test_register(self, client):
        response = client.post("/users", json={"email": "mia@example.com", "name": "Mia Chen"})

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["email"] == "mia@example.com"
        assert data["kindnessScore"] == 0

    def test_register_is_idempotent_on_email(self, client):
        first = client.post("/users", json={"email": "mia@example.com", "name": "Mia Chen"})
        second = client.post("/users", json={"email": "mia@example.com", "name": "Mia C."})

        assert second.status_code == 201
        assert second.json()["data"]["id"] == first.json()["data"]["id"]

    def test_invalid_email(self, client):
        response = client.post("/users", json={"email": "not-an-email", "name": "Mia"})

        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_me(self, client, user, auth):
        response = client.get("/users/me", headers=auth)

        assert response.status_code == 200
        assert response.json()["data"]["id"] == user.id
        assert response.json()["data"]["name"] == user.name

    def test_me_requires_auth(self, client):
        response = client.get("/users/me")

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "X-User-Id"


class TestHealthApi:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "database": "up"}

    def test_request_id_header(self, client):
        response = client.get("/health", headers={"X-Request-Id": "abc-123"})

        assert response.headers["X-Request-Id"] == "abc-123"
