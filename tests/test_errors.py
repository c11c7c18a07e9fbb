"""Tests for the JSON error translator and handlers."""

from __future__ import annotations

import pytest
from itsdangerous import BadSignature, SignatureExpired
from pydantic import BaseModel, Field, ValidationError
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import MethodNotAllowed, NotFound

from daybook.errors import (
    AuthenticationFailed,
    PermissionDenied,
    ResourceNotFound,
    ValidationFailed,
    translate_exception,
)


class _Sample(BaseModel):
    name: str = Field(min_length=2)
    age: int


def _validation_error() -> ValidationError:
    with pytest.raises(ValidationError) as info:
        _Sample.model_validate({"name": "x", "age": "old"})
    return info.value


@pytest.mark.parametrize(
    ("exc", "expected"),
    [
        (ValidationFailed("bad input"), (400, "bad input")),
        (AuthenticationFailed("who are you"), (401, "who are you")),
        (PermissionDenied("not yours"), (403, "not yours")),
        (ResourceNotFound("gone"), (404, "gone")),
        (SignatureExpired("old"), (401, "Token expired")),
        (BadSignature("tampered"), (401, "Invalid token")),
        (NotFound(), (404, "Route not found")),
        (RuntimeError("boom"), (500, "Internal Server Error")),
    ],
)
def test_translate_exception(exc, expected):
    assert translate_exception(exc) == expected


def test_translate_unique_violation_names_the_column():
    sqlite_exc = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed: user.email"))
    postgres_detail = (
        'duplicate key value violates unique constraint "ix_user_username"\n'
        "DETAIL:  Key (username)=(ada) already exists."
    )
    postgres_exc = IntegrityError("INSERT", {}, Exception(postgres_detail))
    opaque_exc = IntegrityError("INSERT", {}, Exception("constraint failed"))

    assert translate_exception(sqlite_exc) == (400, "email already exists")
    assert translate_exception(postgres_exc) == (400, "username already exists")
    assert translate_exception(opaque_exc) == (400, "Resource already exists")


def test_translate_pydantic_error_lists_each_field():
    status, message = translate_exception(_validation_error())

    assert status == 400
    assert message.startswith("Validation Error: ")
    assert "name: " in message
    assert "age: " in message


def test_translate_method_not_allowed_keeps_description():
    status, message = translate_exception(MethodNotAllowed(valid_methods=["GET"]))

    assert status == 405
    assert "not allowed" in message


def test_unknown_route_returns_json_404(client):
    response = client.get("/nope")

    assert response.status_code == 404
    assert response.get_json() == {
        "success": False,
        "error": "Route not found",
        "message": "Cannot GET /nope",
    }


def test_wrong_method_returns_json_405(client):
    response = client.delete("/health")

    assert response.status_code == 405
    assert response.get_json()["success"] is False
    assert "GET" in response.headers["Allow"]


def test_unexpected_error_includes_stack_in_dev_mode(app):
    app.config["DAYBOOK_CONFIG"].DEV_MODE = True

    @app.get("/explode")
    def explode():
        raise RuntimeError("kaboom")

    response = app.test_client().get("/explode")

    assert response.status_code == 500
    body = response.get_json()
    assert body["error"] == "Internal Server Error"
    assert "RuntimeError: kaboom" in body["stack"]


def test_client_errors_carry_stack_only_in_dev_mode(app):
    client = app.test_client()

    quiet = client.get("/api/auth/me")
    app.config["DAYBOOK_CONFIG"].DEV_MODE = True
    verbose = client.get("/api/auth/me")

    assert quiet.get_json() == {"success": False, "error": "Access denied. No token provided."}
    assert verbose.status_code == 401
    assert "AuthenticationFailed" in verbose.get_json()["stack"]


def test_unexpected_error_hides_stack_outside_dev_mode(app):
    assert app.config["DAYBOOK_CONFIG"].DEV_MODE is False

    @app.get("/explode")
    def explode():
        raise RuntimeError("kaboom")

    response = app.test_client().get("/explode")

    assert response.status_code == 500
    assert response.get_json() == {"success": False, "error": "Internal Server Error"}


def test_malformed_json_body_is_a_validation_error(client, auth_headers):
    response = client.post(
        "/api/tasks/habits",
        data="{not json",
        headers={**auth_headers, "Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.get_json()["error"].startswith("Validation Error:")
