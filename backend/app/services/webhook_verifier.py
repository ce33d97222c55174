"""Svix signature verification for Clerk webhook deliveries."""

import base64
import binascii
import hashlib
import hmac
import json
import time
from collections.abc import Mapping
from typing import Any

from app.services.errors import AuthenticationError

SECRET_PREFIX = "whsec_"
SIGNATURE_VERSION = "v1"


class WebhookVerifier:
    """Checks ``svix-id``/``svix-timestamp``/``svix-signature`` against the shared secret.

    The signed content is ``"{svix-id}.{svix-timestamp}.{body}"`` and each
    signature is the base64 HMAC-SHA256 of that content. The signature header
    may carry several space-separated ``v1,<signature>`` entries (during secret
    rotation); any one matching is enough.
    """

    def __init__(self, secret: str, tolerance_seconds: int = 300):
        self.key = self._decode_secret(secret)
        self.tolerance_seconds = tolerance_seconds

    @staticmethod
    def _decode_secret(secret: str) -> bytes:
        if secret.startswith(SECRET_PREFIX):
            secret = secret[len(SECRET_PREFIX) :]
        try:
            return base64.b64decode(secret, validate=True)
        except (binascii.Error, ValueError):
            return secret.encode()

    def sign(self, msg_id: str, timestamp: int, body: bytes) -> str:
        """Compute the ``v1`` signature for a delivery."""
        content = f"{msg_id}.{timestamp}.".encode() + body
        digest = hmac.new(self.key, content, hashlib.sha256).digest()
        return base64.b64encode(digest).decode()

    def verify(self, body: bytes, headers: Mapping[str, str]) -> dict[str, Any]:
        """Verify a delivery and return its decoded JSON payload.

        Raises:
            AuthenticationError: If a header is missing, the timestamp is
                outside the tolerance window, no signature matches, or the
                body is not a JSON object.
        """
        msg_id = headers.get("svix-id")
        msg_timestamp = headers.get("svix-timestamp")
        msg_signature = headers.get("svix-signature")
        if not msg_id or not msg_timestamp or not msg_signature:
            raise AuthenticationError("Missing svix headers")

        try:
            timestamp = int(msg_timestamp)
        except ValueError as exc:
            raise AuthenticationError("Invalid svix-timestamp header") from exc

        now = int(time.time())
        if timestamp < now - self.tolerance_seconds:
            raise AuthenticationError("Message timestamp too old")
        if timestamp > now + self.tolerance_seconds:
            raise AuthenticationError("Message timestamp too new")

        expected = self.sign(msg_id, timestamp, body)
        for entry in msg_signature.split(" "):
            version, _, signature = entry.partition(",")
            if version != SIGNATURE_VERSION:
                continue
            if hmac.compare_digest(expected, signature):
                break
        else:
            raise AuthenticationError("No matching signature found")

        try:
            payload = json.loads(body)
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise AuthenticationError("Webhook body is not valid JSON") from exc

        if not isinstance(payload, dict):
            raise AuthenticationError("Webhook body must be a JSON object")
        return payload
