import sys
import os
import base64
import json

import pytest

# Ensure layer package is importable in tests (adds layer path)
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
LAYER = os.path.join(ROOT, "lambda", "layers", "base", "python")
sys.path.insert(0, LAYER)

from adminlib import helpers, responses, validators
from adminlib.errors import ConflictError, ValidationError


def test_now_iso():
    s = helpers.now_iso()
    assert isinstance(s, str)
    assert s.endswith("+00:00")


def test_get_header_ignores_case():
    event = {"headers": {"AUTHORIZATION": "Bearer x"}}
    assert helpers.get_header(event, "Authorization") == "Bearer x"
    assert helpers.get_header({"headers": None}, "Authorization") is None


def test_get_method_supports_http_api_events():
    assert helpers.get_method({"httpMethod": "post"}) == "POST"
    assert helpers.get_method({"requestContext": {"http": {"method": "OPTIONS"}}}) == "OPTIONS"
    assert helpers.get_method({}) == ""


def test_missing_fields():
    assert validators.missing_fields({"userId": "u-1"}, ["userId"]) == []
    assert validators.missing_fields({"userId": ""}, ["userId"]) == ["userId"]
    assert validators.missing_fields({"userId": 42}, ["userId"]) == ["userId"]
    assert validators.missing_fields(["userId"], ["userId"]) == ["userId"]


def test_parse_json_body_decodes_base64():
    raw = base64.b64encode(json.dumps({"userId": "u-1"}).encode()).decode()
    event = {"body": raw, "isBase64Encoded": True}
    assert validators.parse_json_body(event) == {"userId": "u-1"}


def test_parse_json_body_rejects_missing_body():
    with pytest.raises(TypeError):
        validators.parse_json_body({"body": None})


def test_error_response_includes_extra_fields():
    resp = responses.error_response(ConflictError("blocked", cannotDelete=True, reason="owner"))
    assert resp["statusCode"] == 400
    assert json.loads(resp["body"]) == {"error": "blocked", "cannotDelete": True, "reason": "owner"}


def test_json_response_keeps_non_ascii_text():
    resp = responses.error_response(ValidationError("autenticación"))
    assert "autenticación" in resp["body"]


def test_preflight_response_has_no_content_type():
    resp = responses.preflight_response()
    assert resp == {"statusCode": 200, "headers": responses.CORS_HEADERS, "body": ""}
    assert "Content-Type" not in resp["headers"]


def test_error_message_can_also_be_a_body_field():
    error = ConflictError("blocked", reason="owner", message="details for the UI")
    assert error.message == "blocked"
    assert error.to_body() == {"error": "blocked", "reason": "owner", "message": "details for the UI"}


def test_env_float(monkeypatch):
    monkeypatch.setenv("BACKEND_TIMEOUT_SECONDS", "2.5")
    assert helpers.env_float("BACKEND_TIMEOUT_SECONDS", 10) == 2.5
    monkeypatch.setenv("BACKEND_TIMEOUT_SECONDS", "ten")
    assert helpers.env_float("BACKEND_TIMEOUT_SECONDS", 10) == 10
    monkeypatch.delenv("BACKEND_TIMEOUT_SECONDS")
    assert helpers.env_float("BACKEND_TIMEOUT_SECONDS", 10) == 10
