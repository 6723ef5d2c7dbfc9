import os
from decimal import Decimal, ROUND_HALF_UP
import stripe

from orders_service import config

stripe.api_key = os.getenv("STRIPE_SECRET_KEY")


CENT = Decimal("0.01")


def round_money(amount) -> Decimal:
    """Round to whole cents, half up, the way Stripe amounts are charged."""
    return Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def to_cents(amount) -> int:
    return int(round_money(amount) * 100)


def _line_item(name: str, description: str, amount: Decimal, quantity: int = 1, images=None):
    product_data = {"name": name, "description": description}
    if images:
        product_data["images"] = images
    return {
        "price_data": {
            "currency": "usd",
            "product_data": product_data,
            "unit_amount": to_cents(amount),
        },
        "quantity": quantity,
    }


def build_line_items(order):
    line_items = [
        _line_item(
            f"{item.product_name} - {item.product_size}",
            item.photo_filename or item.photo_id,
            item.unit_price,
            item.quantity,
            [item.photo_url] if item.photo_url else None,
        )
        for item in order.items
    ]
    if order.shipping_cost > 0:
        line_items.append(_line_item("Shipping", "Standard shipping", order.shipping_cost))
    if order.tax > 0:
        line_items.append(_line_item("Sales Tax", "Applicable sales tax", order.tax))
    return line_items


def create_checkout_session(order):
    base_url = config.public_url()
    return stripe.checkout.Session.create(
        payment_method_types=["card"],
        line_items=build_line_items(order),
        mode="payment",
        success_url=f"{base_url}/order/success?session_id={{CHECKOUT_SESSION_ID}}&order_id={order.id}",
        cancel_url=f"{base_url}/checkout",
        customer_email=order.customer_email,
        metadata={"order_id": order.id, "gallery_id": order.gallery_id or ""},
        shipping_address_collection={"allowed_countries": ["US"]},
        idempotency_key=order.id,
    )


def refund_payment(payment_intent_id: str):
    return stripe.Refund.create(
        payment_intent=payment_intent_id,
        idempotency_key=f"refund-{payment_intent_id}",
    )
