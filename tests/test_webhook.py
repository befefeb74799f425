"""
Purchase webhook tests.

The handler is tested directly and through the FastAPI app.
"""

import json

import pytest
from fastapi.testclient import TestClient

from guidedbook.access import ProfileStore, extract_token, handle_purchase_webhook, validate_token
from guidedbook.config import DEFAULT_CATALOG_PATH, Settings
from webhook_server import create_app


TOKEN = "s3cret-Token"


def approved(email="ana@example.com", **extra):
    body = {"event": "PURCHASE_APPROVED", "data": {"buyer": {"email": email, "name": "Ana"}}}
    body.update(extra)
    return body


@pytest.fixture
def profiles(tmp_path):
    return ProfileStore(tmp_path / "accounts.db")


def call(body, profiles, headers=None, method="POST", token=TOKEN):
    body_text = body if isinstance(body, str) else json.dumps(body)
    return handle_purchase_webhook(method, body_text, headers or {}, token, profiles, request_id="abc123")


class TestExtractToken:
    """Test token lookup order."""

    def test_body_hottok_first(self):
        assert extract_token({"hottok": "a", "token": "b"}, {"Authorization": "Bearer c"}) == ("a", "body.hottok")

    def test_body_token_second(self):
        assert extract_token({"token": "b"}, {"Authorization": "Bearer c"}) == ("b", "body.token")

    def test_authorization_header_prefixes_stripped(self):
        assert extract_token({}, {"Authorization": "Bearer c"})[0] == "c"
        assert extract_token({}, {"authorization": "Token d"})[0] == "d"

    def test_hotmart_header(self):
        assert extract_token({}, {"X-Hotmart-Hottok": "e"}) == ("e", "header.x-hotmart-hottok")

    def test_any_body_key_containing_token(self):
        assert extract_token({"event": "x", "my_token_field": "f"}, {}) == ("f", "body.my_token_field")

    def test_not_found(self):
        assert extract_token({"event": "x"}, {}) == (None, "not_found")

    def test_non_object_body(self):
        assert extract_token([1, 2], {}) == (None, "not_found")


class TestValidateToken:
    """Test token comparison."""

    def test_whitespace_ignored(self):
        assert validate_token("  abc \n", "abc")
        assert validate_token("abc", " abc ")

    def test_case_sensitive(self):
        assert not validate_token("ABC", "abc")


class TestHandlePurchaseWebhook:
    """Test status codes and access granting."""

    def test_missing_token(self, profiles):
        result = call(approved(), profiles)
        assert result.status == 401
        assert result.payload["request_id"] == "abc123"

    def test_wrong_token(self, profiles):
        assert call(approved(hottok="nope"), profiles).status == 401

    def test_token_case_matters(self, profiles):
        assert call(approved(hottok=TOKEN.upper()), profiles).status == 401

    def test_token_whitespace_ignored(self, profiles):
        assert call(approved(hottok=f"  {TOKEN}  "), profiles).status == 200

    def test_invalid_json(self, profiles):
        result = call("{not json", profiles)
        assert result.status == 400
        assert result.payload["error"].startswith("Invalid JSON")

    def test_non_post(self, profiles):
        assert call(approved(hottok=TOKEN), profiles, method="GET").status == 405

    def test_options_ok(self, profiles):
        assert call("", profiles, method="OPTIONS").status == 200

    def test_missing_configuration(self, profiles):
        assert call(approved(hottok=TOKEN), profiles, token=None).status == 500

    def test_other_event_ignored(self, profiles):
        result = call({"event": "PURCHASE_REFUNDED", "hottok": TOKEN}, profiles)
        assert result.status == 200
        assert result.payload["message"] == "Ignored event: PURCHASE_REFUNDED"
        assert profiles.find_user_by_email("ana@example.com") is None

    def test_missing_email(self, profiles):
        result = call({"event": "PURCHASE_APPROVED", "hottok": TOKEN, "data": {"buyer": {}}}, profiles)
        assert result.status == 400

    def test_blank_email(self, profiles):
        result = call(approved(email="   ", hottok=TOKEN), profiles)
        assert result.status == 400
        assert profiles.find_user_by_email("") is None

    def test_malformed_payload(self, profiles):
        result = call({"event": "PURCHASE_APPROVED", "hottok": TOKEN, "data": "oops"}, profiles)
        assert result.status == 400

    def test_new_buyer_gets_access(self, profiles):
        result = call(approved(hottok=TOKEN), profiles)
        assert result.status == 200
        payload = result.payload
        assert payload["access_granted"] is True
        assert payload["email"] == "ana@example.com"
        assert payload["event_type"] == "PURCHASE_APPROVED"
        assert payload["request_id"] == "abc123"
        assert "processed_at" in payload
        assert profiles.get_profile(payload["user_id"]).has_access is True

    def test_existing_user_reused(self, profiles):
        account = profiles.create_user("ana@example.com", password="segredo")
        first = call(approved(hottok=TOKEN), profiles)
        second = call(approved(hottok=TOKEN), profiles)
        assert first.payload["user_id"] == account.id
        assert second.payload["user_id"] == account.id

    def test_token_from_header(self, profiles):
        result = call(approved(), profiles, headers={"X-Hotmart-Hottok": TOKEN})
        assert result.status == 200


class TestWebhookApp:
    """Test the FastAPI wrapper."""

    @pytest.fixture
    def client(self, tmp_path, profiles):
        settings = Settings(data_dir=tmp_path, catalog_path=DEFAULT_CATALOG_PATH, webhook_token=TOKEN)
        return TestClient(create_app(settings, profiles))

    def test_post_grants_access(self, client, profiles):
        response = client.post("/hotmart-webhook", content=json.dumps(approved(hottok=TOKEN)))
        assert response.status_code == 200
        user_id = response.json()["user_id"]
        assert profiles.get_profile(user_id).has_access is True

    def test_bearer_header(self, client):
        response = client.post(
            "/hotmart-webhook",
            content=json.dumps(approved()),
            headers={"Authorization": f"Bearer {TOKEN}"},
        )
        assert response.status_code == 200

    def test_wrong_token(self, client):
        response = client.post("/hotmart-webhook", content=json.dumps(approved(hottok="x")))
        assert response.status_code == 401

    def test_get_not_allowed(self, client):
        assert client.get("/hotmart-webhook").status_code == 405

    def test_invalid_json(self, client):
        assert client.post("/hotmart-webhook", content="{oops").status_code == 400

    def test_unconfigured_token(self, tmp_path):
        settings = Settings(data_dir=tmp_path, catalog_path=DEFAULT_CATALOG_PATH)
        client = TestClient(create_app(settings))
        response = client.post("/hotmart-webhook", content=json.dumps(approved(hottok=TOKEN)))
        assert response.status_code == 500
