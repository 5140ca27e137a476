"""Tests for the global exception-to-status mapping."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from pydantic import BaseModel, Field
from sqlalchemy.exc import OperationalError

from tunecrate.api import register_exception_handlers
from tunecrate.domain.exceptions import (
    AuthorizationError,
    ConfigurationError,
    DomainException,
    DuplicateAccountError,
    EntityNotFoundException,
    InvalidCredentialsError,
    StorageFailureError,
    ValidationError,
)


class Payload(BaseModel):
    count: int = Field(ge=0)
    secret: str | None = None


RAISERS = {
    "validation": ValidationError("likes must be an array"),
    "not-found": EntityNotFoundException("Track", 9),
    "duplicate": DuplicateAccountError("a@x.io"),
    "credentials": InvalidCredentialsError(),
    "forbidden": AuthorizationError(),
    "db-failure": StorageFailureError("Could not save track"),
    "bucket-failure": StorageFailureError("rejected (500)", backend="object_storage"),
    "misconfigured": ConfigurationError("db not initialized"),
    "domain": DomainException("something odd"),
    "sqlalchemy": OperationalError("SELECT 1", {}, Exception("locked")),
    "value": ValueError("password cannot be longer than 72 bytes"),
    "unexpected": OverflowError("Python int too large to convert to SQLite INTEGER"),
}


@pytest.fixture
def client() -> TestClient:
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/raise/{name}")
    async def raise_named(name: str) -> None:
        raise RAISERS[name]

    @app.post("/payload")
    async def payload(body: Payload) -> dict:
        return body.model_dump()

    # Unhandled errors are re-raised after the response is sent, keep the response
    return TestClient(app, raise_server_exceptions=False)


@pytest.mark.parametrize(
    ("name", "status_code", "code"),
    [
        ("validation", 400, "validation_error"),
        ("not-found", 404, "not_found"),
        ("duplicate", 409, "already_exists"),
        ("credentials", 401, "invalid_credentials"),
        ("forbidden", 403, "forbidden"),
        ("db-failure", 500, "storage_failure"),
        ("bucket-failure", 502, "storage_failure"),
        ("misconfigured", 503, "configuration_error"),
        ("domain", 500, "domain_error"),
        ("sqlalchemy", 500, "storage_failure"),
        ("value", 400, "validation_error"),
    ],
)
def test_status_mapping(client: TestClient, name, status_code, code) -> None:
    response = client.get(f"/raise/{name}")

    assert response.status_code == status_code
    assert response.json()["error"] == code


def test_body_carries_message(client: TestClient) -> None:
    assert client.get("/raise/forbidden").json() == {
        "error": "forbidden",
        "detail": "Forbidden. Invalid admin password.",
    }


def test_database_details_are_not_leaked(client: TestClient) -> None:
    body = client.get("/raise/sqlalchemy").json()

    assert "locked" not in str(body)


def test_request_validation_is_400_without_input_echo(client: TestClient) -> None:
    response = client.post("/payload", json={"count": -1, "secret": "hunter2"})

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "validation_error"
    assert "hunter2" not in response.text
    assert all("input" not in error for error in body["detail"])


def test_unexpected_exception_is_json_500_without_details(client: TestClient) -> None:
    response = client.get("/raise/unexpected")

    assert response.status_code == 500
    assert response.json() == {
        "error": "internal_error",
        "detail": "Internal server error",
    }
    assert "SQLite" not in response.text


def test_unknown_route_uses_error_body(client: TestClient) -> None:
    response = client.get("/does-not-exist")

    assert response.status_code == 404
    assert response.json() == {"error": "not_found", "detail": "Not Found"}


def test_wrong_method_uses_error_body(client: TestClient) -> None:
    response = client.delete("/payload")

    assert response.status_code == 405
    assert response.json()["error"] == "method_not_allowed"
    assert "POST" in response.headers["allow"]
