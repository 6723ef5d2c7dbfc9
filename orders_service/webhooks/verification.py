"""Stripe webhook signature verification.

The signature is computed over the raw request body, so this must run on the
bytes exactly as received and before any JSON parsing. A missing secret
rejects every delivery rather than accepting unsigned writes.
"""

import json
import logging
from typing import Any, Dict, Optional

import stripe
from pydantic import BaseModel, Field, ValidationError

from orders_service.errors import InvalidPayload, InvalidSignature

logger = logging.getLogger(__name__)

SIGNATURE_TOLERANCE = 300  # seconds, Stripe's own default


class EventData(BaseModel):
    object: Dict[str, Any] = Field(default_factory=dict)


class StripeEvent(BaseModel):
    id: Optional[str] = None
    type: str
    created: Optional[int] = None
    data: EventData = Field(default_factory=EventData)

    @property
    def object(self) -> Dict[str, Any]:
        return self.data.object


def verify_event(payload: bytes, signature: Optional[str], secret: Optional[str],
                 tolerance: int = SIGNATURE_TOLERANCE) -> StripeEvent:
    """Check ``signature`` against ``payload`` and return the parsed event.

    Raises InvalidSignature if the header is missing or does not match, and
    InvalidPayload if the signed body is not an event envelope.
    """
    if not secret:
        logger.warning("STRIPE_WEBHOOK_SECRET not set, rejecting webhook")
        raise InvalidSignature("webhook secret is not configured")
    if not signature:
        raise InvalidSignature("missing Stripe-Signature header")

    try:
        body = payload.decode("utf-8")
    except UnicodeDecodeError as exc:
        # Stripe signs UTF-8 JSON, so no valid signature covers these bytes
        raise InvalidSignature("body is not UTF-8") from exc

    try:
        stripe.WebhookSignature.verify_header(body, signature, secret, tolerance)
    except stripe.SignatureVerificationError as exc:
        raise InvalidSignature(str(exc)) from exc

    try:
        return StripeEvent.model_validate(json.loads(body))
    except (ValueError, ValidationError) as exc:
        raise InvalidPayload("body is not a Stripe event") from exc
