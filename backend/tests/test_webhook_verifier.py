"""Tests for Svix signature verification."""

import base64
import time

import pytest

from app.services.errors import AuthenticationError
from app.services.webhook_verifier import WebhookVerifier
from tests.conftest import WEBHOOK_SECRET, sign_webhook


@pytest.fixture
def verifier():
    return WebhookVerifier(WEBHOOK_SECRET, tolerance_seconds=300)


class TestVerify:
    def test_valid_signature_returns_payload(self, verifier):
        body, headers = sign_webhook({"type": "user.created", "data": {"id": "user_1"}})
        payload = verifier.verify(body, headers)
        assert payload == {"type": "user.created", "data": {"id": "user_1"}}

    def test_any_matching_signature_is_accepted(self, verifier):
        body, headers = sign_webhook({"type": "user.created", "data": {}})
        headers["svix-signature"] = f"v1,bm90LWEtc2lnbmF0dXJl {headers['svix-signature']}"
        assert verifier.verify(body, headers)["type"] == "user.created"

    @pytest.mark.parametrize("missing", ["svix-id", "svix-timestamp", "svix-signature"])
    def test_missing_header_rejected(self, verifier, missing):
        body, headers = sign_webhook({"type": "user.created", "data": {}})
        del headers[missing]
        with pytest.raises(AuthenticationError, match="Missing svix headers"):
            verifier.verify(body, headers)

    def test_tampered_body_rejected(self, verifier):
        body, headers = sign_webhook({"type": "user.created", "data": {"id": "user_1"}})
        with pytest.raises(AuthenticationError, match="No matching signature"):
            verifier.verify(body.replace(b"user_1", b"user_2"), headers)

    def test_wrong_secret_rejected(self, verifier):
        other_secret = "whsec_" + base64.b64encode(b"some-other-key").decode()
        body, headers = sign_webhook({"type": "user.created", "data": {}}, secret=other_secret)
        with pytest.raises(AuthenticationError):
            verifier.verify(body, headers)

    def test_unknown_signature_version_ignored(self, verifier):
        body, headers = sign_webhook({"type": "user.created", "data": {}})
        headers["svix-signature"] = headers["svix-signature"].replace("v1,", "v2,")
        with pytest.raises(AuthenticationError):
            verifier.verify(body, headers)

    def test_old_timestamp_rejected(self, verifier):
        body, headers = sign_webhook(
            {"type": "user.created", "data": {}}, timestamp=int(time.time()) - 301
        )
        with pytest.raises(AuthenticationError, match="too old"):
            verifier.verify(body, headers)

    def test_future_timestamp_rejected(self, verifier):
        body, headers = sign_webhook(
            {"type": "user.created", "data": {}}, timestamp=int(time.time()) + 301
        )
        with pytest.raises(AuthenticationError, match="too new"):
            verifier.verify(body, headers)

    def test_non_numeric_timestamp_rejected(self, verifier):
        body, headers = sign_webhook({"type": "user.created", "data": {}})
        headers["svix-timestamp"] = "yesterday"
        with pytest.raises(AuthenticationError, match="Invalid svix-timestamp"):
            verifier.verify(body, headers)

    def test_invalid_json_rejected(self, verifier):
        body, headers = sign_webhook(b"not json")
        with pytest.raises(AuthenticationError, match="not valid JSON"):
            verifier.verify(body, headers)

    def test_json_array_rejected(self, verifier):
        body, headers = sign_webhook(b"[1, 2, 3]")
        with pytest.raises(AuthenticationError, match="JSON object"):
            verifier.verify(body, headers)


class TestSecretDecoding:
    def test_prefixed_secret_is_base64_decoded(self):
        verifier = WebhookVerifier("whsec_" + base64.b64encode(b"key").decode())
        assert verifier.key == b"key"

    def test_non_base64_secret_used_verbatim(self):
        assert WebhookVerifier("plain secret!").key == b"plain secret!"
