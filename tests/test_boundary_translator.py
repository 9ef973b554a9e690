from __future__ import annotations

import logging

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from digitalis.bootstrap.exception_handlers import register_exception_handlers
from digitalis.errors import (
    AccessDenied,
    AuthenticationRequired,
    DependencyUnavailable,
    FeatureNotImplemented,
    InputInvalid,
    UnsupportedOperation,
    Violation,
    http_error,
)
from digitalis.observability import register_observability
from digitalis.problem_details import DispositionTable

FAILURES = {
    "not-implemented": lambda: NotImplementedError("export"),
    "feature-off": lambda: FeatureNotImplemented("mail delivery is not configured"),
    "anonymous": lambda: AuthenticationRequired(reason="identity_required"),
    "forbidden": lambda: AccessDenied("missing scope documents:write"),
    "invalid": lambda: InputInvalid(
        [
            Violation(field="title", message="title must not be empty", rule="required"),
            Violation(field="body", message="body must not be empty", rule="required"),
        ]
    ),
    "dependency": lambda: DependencyUnavailable("mailer", "mail delivery failed"),
    "downstream": lambda: httpx.ConnectError("connection refused"),
    "unsupported": lambda: UnsupportedOperation("bulk export is not supported"),
    "crash": lambda: ZeroDivisionError("division by zero"),
    "missing": lambda: http_error(404, "NOT_FOUND", "Not Found"),
}


def _build_app(table: DispositionTable | None = None) -> FastAPI:
    api = FastAPI()
    register_exception_handlers(api, logger=logging.getLogger("test.boundary"), table=table)
    register_observability(api)

    @api.get("/fail/{name}")
    async def fail(name: str):
        raise FAILURES[name]()

    @api.get("/items/{item_id}")
    async def get_item(item_id: int):
        return {"id": item_id}

    return api


def _assert_error_contract(response, *, status: int, code: str) -> dict:
    assert response.status_code == status
    payload = response.json()
    assert payload["code"] == code
    assert payload["message"]
    assert payload["error"] == payload["message"]
    assert payload["request_id"]
    assert response.headers["X-Request-Id"] == payload["request_id"]
    return payload


@pytest.mark.parametrize(
    ("name", "status", "code"),
    [
        ("not-implemented", 501, "NOT_IMPLEMENTED"),
        ("feature-off", 501, "NOT_IMPLEMENTED"),
        ("anonymous", 401, "UNAUTHORIZED"),
        ("forbidden", 403, "FORBIDDEN"),
        ("dependency", 503, "SERVICE_UNAVAILABLE"),
        ("downstream", 503, "SERVICE_UNAVAILABLE"),
        ("crash", 500, "INTERNAL_ERROR"),
        ("missing", 404, "NOT_FOUND"),
    ],
)
def test_failures_map_to_structured_responses(name, status, code):
    with TestClient(_build_app()) as client:
        response = client.get(f"/fail/{name}")

    _assert_error_contract(response, status=status, code=code)


def test_access_denied_carries_reason():
    with TestClient(_build_app()) as client:
        payload = _assert_error_contract(client.get("/fail/forbidden"), status=403, code="FORBIDDEN")

    assert payload["details"] == {"reason": "missing scope documents:write"}


def test_input_invalid_lists_every_violation():
    with TestClient(_build_app()) as client:
        payload = _assert_error_contract(client.get("/fail/invalid"), status=400, code="VALIDATION_ERROR")

    assert payload["violations"] == [
        {"field": "title", "message": "title must not be empty", "rule": "required"},
        {"field": "body", "message": "body must not be empty", "rule": "required"},
    ]


def test_internal_errors_do_not_leak_failure_text():
    with TestClient(_build_app()) as client:
        payload = _assert_error_contract(client.get("/fail/crash"), status=500, code="INTERNAL_ERROR")

    assert payload["message"] == "Internal Server Error"
    assert "division" not in str(payload)


def test_request_validation_errors_are_bad_requests_with_violations():
    with TestClient(_build_app()) as client:
        payload = _assert_error_contract(client.get("/items/abc"), status=400, code="VALIDATION_ERROR")

    assert payload["violations"][0]["field"] == "item_id"


def test_unsupported_operation_is_rethrown_to_the_server():
    with TestClient(_build_app()) as client:
        with pytest.raises(UnsupportedOperation, match="bulk export is not supported"):
            client.get("/fail/unsupported")


def test_rethrown_failure_is_never_a_structured_body():
    with TestClient(_build_app(), raise_server_exceptions=False) as client:
        response = client.get("/fail/unsupported")

    assert response.status_code == 500
    assert response.headers["content-type"].startswith("text/plain")
    assert "UNSUPPORTED_OPERATION" not in response.text


def test_custom_table_order_decides_precedence():
    table = DispositionTable().map_to_status(NotImplementedError, 501).map_to_status(Exception, 500)

    with TestClient(_build_app(table)) as client:
        assert client.get("/fail/feature-off").status_code == 501
        assert client.get("/fail/forbidden").status_code == 500
        assert client.get("/fail/unsupported").status_code == 500
