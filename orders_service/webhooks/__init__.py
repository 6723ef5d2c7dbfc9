"""Stripe webhook intake: signature check, dispatch, order reconciliation."""

from orders_service.webhooks.dispatcher import dispatch
from orders_service.webhooks.verification import StripeEvent, verify_event

__all__ = ["StripeEvent", "dispatch", "verify_event"]
