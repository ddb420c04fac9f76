import pytest
from django.test import RequestFactory
from rest_framework.exceptions import NotFound, ValidationError

from clinic_core.common.api.exceptions import (
    ConflictError,
    TenantIsolationError,
    api_exception_handler,
    build_error_envelope,
)


def _handle(exc):
    request = RequestFactory().get("/api/v1/anything/")
    return api_exception_handler(exc, {"request": request, "view": None})


def test_build_error_envelope_shape():
    body = build_error_envelope(code="conflict", message="Conflict.", details={"x": 1})

    assert set(body["error"].keys()) == {"code", "message", "details", "request_id"}
    assert body["error"]["details"] == {"x": 1}
    assert body["error"]["request_id"]


def test_field_validation_error_keeps_details():
    resp = _handle(ValidationError({"vaccines": ["Select at least one vaccine."]}))

    assert resp.status_code == 400
    assert resp.data["error"]["code"] == "validation_error"
    assert resp.data["error"]["message"] == "vaccines: Select at least one vaccine."
    assert resp.data["error"]["details"] == {"vaccines": ["Select at least one vaccine."]}


def test_bare_validation_message_becomes_message():
    resp = _handle(ValidationError("Missing scope header. Provide X-Tenant-Id."))

    assert resp.status_code == 400
    assert resp.data["error"]["message"] == "Missing scope header. Provide X-Tenant-Id."


def test_tenant_isolation_is_404_with_own_code():
    resp = _handle(TenantIsolationError())

    assert resp.status_code == 404
    assert resp.data["error"]["code"] == "tenant_isolation_violation"
    assert resp.data["error"]["message"] == "Resource not found for this tenant."


def test_plain_not_found_code():
    resp = _handle(NotFound("Tenant not found."))

    assert resp.status_code == 404
    assert resp.data["error"]["code"] == "not_found"


def test_conflict_is_409():
    resp = _handle(ConflictError("Could not allocate a budget number. Please retry."))

    assert resp.status_code == 409
    assert resp.data["error"]["code"] == "conflict"


@pytest.mark.django_db
def test_unhandled_exception_becomes_500_envelope():
    resp = _handle(RuntimeError("boom"))

    assert resp.status_code == 500
    assert resp.data["error"]["code"] == "server_error"
    assert resp.data["error"]["message"] == "Unexpected server error."


def test_field_keyed_isolation_error_names_the_field():
    resp = _handle(TenantIsolationError({"price_table": "Price table 9 not found for this tenant."}))

    assert resp.status_code == 404
    assert resp.data["error"]["message"] == "price_table: Price table 9 not found for this tenant."
    assert resp.data["error"]["details"] == {"price_table": "Price table 9 not found for this tenant."}


def test_nested_errors_fall_back_to_generic_message():
    resp = _handle(ValidationError({"line_items": {"0": ["discount must be between 0 and list_price."]}}))

    assert resp.data["error"]["message"] == "Request failed."
    assert resp.data["error"]["details"]["line_items"]["0"] == ["discount must be between 0 and list_price."]
