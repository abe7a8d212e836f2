"""Tests for the users API routes."""

import uuid

import pytest
from fastapi.testclient import TestClient

from app.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter
from app.adapters.users.in_memory import InMemoryUserRepository
from app.core.app_factory import create_app
from app.core.errors import ConflictAppError


@pytest.fixture
def repository() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def users_client(repository: InMemoryUserRepository) -> TestClient:
    """Client with a roomy limiter so tests exercise the users logic only."""
    limiter = InMemorySlidingWindowRateLimiter(limit=1_000, window_ms=60_000)
    return TestClient(create_app(rate_limiter=limiter, user_repository=repository))


class TestCreateUser:
    def test_creates_user(self, users_client, auth_headers, repository) -> None:
        response = users_client.post(
            "/v1/users",
            json={"email": "ada@example.com", "name": "Ada"},
            headers=auth_headers,
        )

        assert response.status_code == 201
        user = response.json()["user"]
        assert user["email"] == "ada@example.com"
        assert user["name"] == "Ada"
        uuid.UUID(user["id"])
        assert "created_at" in user
        assert len(repository) == 1

    def test_duplicate_email_returns_409(self, users_client, auth_headers) -> None:
        body = {"email": "ada@example.com", "name": "Ada"}
        users_client.post("/v1/users", json=body, headers=auth_headers)

        response = users_client.post(
            "/v1/users",
            json={"email": "ADA@example.com", "name": "Other"},
            headers=auth_headers,
        )

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "email_taken"

    @pytest.mark.parametrize(
        "body",
        [
            {"email": "not-an-email", "name": "Ada"},
            {"email": "ada@example.com", "name": ""},
            {"email": "ada@example.com", "name": "x" * 101},
            {"name": "Ada"},
        ],
    )
    def test_invalid_body_returns_400(self, users_client, auth_headers, body) -> None:
        response = users_client.post("/v1/users", json=body, headers=auth_headers)

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "invalid_request"
        assert error["details"]["context"]["issues"]

    def test_malformed_json_returns_400(self, users_client, auth_headers, repository) -> None:
        response = users_client.post(
            "/v1/users",
            content=b"{not json",
            headers={**auth_headers, "Content-Type": "application/json"},
        )

        assert response.status_code == 400
        issues = response.json()["error"]["details"]["context"]["issues"]
        assert issues[0]["loc"][0] == "body"
        assert len(repository) == 0

    def test_requires_api_key(self, users_client) -> None:
        response = users_client.post(
            "/v1/users",
            json={"email": "ada@example.com", "name": "Ada"},
            headers={"X-Request-ID": "req-401"},
        )

        assert response.status_code == 401
        error = response.json()["error"]
        assert error["code"] == "missing_api_key"
        assert error["request_id"] == "req-401"

    def test_rejects_unknown_api_key(self, users_client) -> None:
        response = users_client.post(
            "/v1/users",
            json={"email": "ada@example.com", "name": "Ada"},
            headers={"X-API-Key": "wrong"},
        )

        assert response.status_code == 403
        error = response.json()["error"]
        assert error["code"] == "invalid_api_key"
        assert "request_id" in error

    def test_missing_key_checked_before_body(self, users_client, repository) -> None:
        response = users_client.post("/v1/users", content=b"{not json")

        assert response.status_code == 401
        assert len(repository) == 0


class TestListUsers:
    @pytest.fixture(autouse=True)
    def _seed(self, repository: InMemoryUserRepository) -> None:
        self.ada = repository.create(email="ada@example.com", name="Ada")
        self.alan = repository.create(email="alan@example.com", name="Alan")

    def test_lists_all_users(self, users_client, auth_headers) -> None:
        response = users_client.get("/v1/users", headers=auth_headers)

        assert response.status_code == 200
        emails = [u["email"] for u in response.json()["users"]]
        assert emails == ["ada@example.com", "alan@example.com"]

    def test_filters_by_email(self, users_client, auth_headers) -> None:
        response = users_client.get("/v1/users", params={"email": "alan@example.com"}, headers=auth_headers)

        users = response.json()["users"]
        assert [u["name"] for u in users] == ["Alan"]

    def test_filters_by_id(self, users_client, auth_headers) -> None:
        response = users_client.get("/v1/users", params={"id": str(self.ada.id)}, headers=auth_headers)

        users = response.json()["users"]
        assert [u["id"] for u in users] == [str(self.ada.id)]

    def test_no_match_returns_empty_list(self, users_client, auth_headers) -> None:
        response = users_client.get(
            "/v1/users",
            params={"id": str(uuid.uuid4()), "email": "ada@example.com"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json() == {"users": []}

    @pytest.mark.parametrize("params", [{"id": "not-a-uuid"}, {"email": "nope"}])
    def test_invalid_query_returns_400(self, users_client, auth_headers, params) -> None:
        response = users_client.get("/v1/users", params=params, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "invalid_request"


class TestInMemoryUserRepository:
    def test_create_rejects_duplicate_email_case_insensitively(self, repository) -> None:
        repository.create(email="ada@example.com", name="Ada")

        with pytest.raises(ConflictAppError):
            repository.create(email="Ada@Example.com", name="Ada")

    def test_find_without_filters_returns_insertion_order(self, repository) -> None:
        first = repository.create(email="a@example.com", name="A")
        second = repository.create(email="b@example.com", name="B")

        assert repository.find() == [first, second]
