import hashlib
import hmac
import json
import os
import time

import pytest

# Must be set before orders_service.database is imported
os.environ.setdefault("DATABASE_URL", "sqlite:///./test_app_default.db")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")

WEBHOOK_SECRET = "whsec_test_secret"


def sign(body: bytes, secret: str = WEBHOOK_SECRET, timestamp=None) -> str:
    timestamp = int(time.time()) if timestamp is None else timestamp
    signed = f"{timestamp}.".encode("utf-8") + body
    digest = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={digest}"


@pytest.fixture
def signed_event():
    """Build a raw Stripe event body and a valid Stripe-Signature header for it."""
    def _build(event_type, obj=None, event_id="evt_test", created=None):
        event = {
            "id": event_id,
            "object": "event",
            "type": event_type,
            "created": created if created is not None else int(time.time()),
            "data": {"object": obj or {}},
        }
        body = json.dumps(event).encode("utf-8")
        return body, sign(body)
    return _build
