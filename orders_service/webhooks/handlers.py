"""Order reconciliation handlers, one per Stripe event type.

Each handler takes the verified event and an ``OrderStore`` and returns a
short outcome string. At most one order is written per event.
"""

import logging

from orders_service.errors import MalformedEvent
from orders_service.models import PaymentStatus
from orders_service.store import OrderStore
from orders_service.webhooks.verification import StripeEvent

logger = logging.getLogger(__name__)


def _object_id(value):
    # Stripe sends either the id or the expanded object
    if isinstance(value, dict):
        return value.get("id")
    return value


def handle_checkout_completed(event: StripeEvent, store: OrderStore) -> str:
    session = event.object
    order_id = (session.get("metadata") or {}).get("order_id")
    if not order_id:
        raise MalformedEvent(f"checkout session {session.get('id')} has no order_id in metadata")

    payment_intent_id = _object_id(session.get("payment_intent"))
    if store.mark_paid(order_id, payment_intent_id, event.created):
        logger.info("Order %s marked as paid", order_id)
        return "paid"
    return "noop"


def handle_payment_succeeded(event: StripeEvent, store: OrderStore) -> str:
    # checkout.session.completed is the authoritative transition
    logger.info("PaymentIntent %s succeeded", event.object.get("id"))
    return "logged"


def handle_payment_failed(event: StripeEvent, store: OrderStore) -> str:
    intent_id = event.object.get("id")
    logger.warning("PaymentIntent %s failed", intent_id)
    if not intent_id:
        raise MalformedEvent("payment_intent.payment_failed without an intent id")

    order_id = store.mark_by_payment_intent(intent_id, PaymentStatus.FAILED, event.created)
    if order_id is None:
        logger.info("No order for failed PaymentIntent %s", intent_id)
        return "noop"
    logger.info("Order %s marked as failed", order_id)
    return "failed"


def handle_charge_refunded(event: StripeEvent, store: OrderStore) -> str:
    charge = event.object
    intent_id = _object_id(charge.get("payment_intent"))
    if not intent_id:
        raise MalformedEvent(f"charge {charge.get('id')} has no payment_intent")

    order_id = store.mark_by_payment_intent(intent_id, PaymentStatus.REFUNDED, event.created)
    logger.info("Charge %s refunded", charge.get("id"))
    if order_id is None:
        return "noop"
    logger.info("Order %s marked as refunded", order_id)
    return "refunded"


HANDLERS = {
    "checkout.session.completed": handle_checkout_completed,
    "payment_intent.succeeded": handle_payment_succeeded,
    "payment_intent.payment_failed": handle_payment_failed,
    "charge.refunded": handle_charge_refunded,
}
