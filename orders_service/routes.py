import logging
from decimal import Decimal
from typing import List, Optional

import stripe
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from orders_service import config
from orders_service.auth import verify_token
from orders_service.database import SessionLocal
from orders_service.errors import StoreWriteFailure
from orders_service.models import Order, OrderItem, PaymentStatus, new_order_id
from orders_service.store import OrderStore
from orders_service.stripe_service import create_checkout_session, refund_payment, round_money

logger = logging.getLogger(__name__)

router = APIRouter()


class CheckoutItem(BaseModel):
    photo_id: str
    product_name: str
    product_size: str
    quantity: int = Field(gt=0)
    price: Decimal = Field(ge=0)
    photo_url: Optional[str] = None
    photo_filename: Optional[str] = None


class CustomerInfo(BaseModel):
    name: str
    email: str
    phone: Optional[str] = None


class ShippingInfo(BaseModel):
    address1: str
    address2: Optional[str] = None
    city: str
    state: str
    zip: str
    country: str = "US"


class CheckoutRequest(BaseModel):
    items: List[CheckoutItem]
    customer: CustomerInfo
    shipping: ShippingInfo
    gallery_id: Optional[str] = None


def _order_summary(order: Order):
    return {
        "id": order.id,
        "gallery_id": order.gallery_id,
        "customer_email": order.customer_email,
        "payment_status": order.payment_status,
        "fulfillment_status": order.fulfillment_status,
        "stripe_payment_intent_id": order.stripe_payment_intent_id,
        "subtotal": order.subtotal,
        "tax": order.tax,
        "shipping_cost": order.shipping_cost,
        "total": order.total,
        "items": [
            {
                "photo_id": item.photo_id,
                "product_name": item.product_name,
                "product_size": item.product_size,
                "quantity": item.quantity,
                "unit_price": item.unit_price,
                "total_price": item.total_price,
            }
            for item in order.items
        ],
    }


@router.post("/checkout")
def checkout(request: CheckoutRequest):
    if not request.items:
        raise HTTPException(status_code=400, detail="Cart is empty")

    subtotal = sum((item.price * item.quantity for item in request.items), Decimal("0"))
    tax = round_money(subtotal * config.tax_rate())
    shipping_cost = config.shipping_cost()

    # Built detached; nothing touches the database until Stripe has answered
    order = Order(
        id=new_order_id(),
        gallery_id=request.gallery_id,
        customer_name=request.customer.name,
        customer_email=request.customer.email,
        customer_phone=request.customer.phone,
        shipping_address_line1=request.shipping.address1,
        shipping_address_line2=request.shipping.address2,
        shipping_city=request.shipping.city,
        shipping_state=request.shipping.state,
        shipping_zip=request.shipping.zip,
        shipping_country=request.shipping.country,
        subtotal=subtotal,
        tax=tax,
        shipping_cost=shipping_cost,
        total=subtotal + tax + shipping_cost,
        payment_status=PaymentStatus.PENDING.value,
        fulfillment_status="pending",
        items=[
            OrderItem(
                photo_id=item.photo_id,
                product_name=item.product_name,
                product_size=item.product_size,
                quantity=item.quantity,
                unit_price=item.price,
                total_price=item.price * item.quantity,
                photo_url=item.photo_url,
                photo_filename=item.photo_filename,
            )
            for item in request.items
        ],
    )
    order_id = order.id

    try:
        session = create_checkout_session(order)
    except stripe.StripeError:
        logger.exception("Checkout session creation failed for order %s", order_id)
        raise HTTPException(status_code=502, detail="Checkout failed")

    order.stripe_session_id = session.id
    db = SessionLocal()
    try:
        db.add(order)
        db.commit()
    finally:
        db.close()

    logger.info("Order %s created with checkout session %s", order_id, session.id)
    return {"session_id": session.id, "order_id": order_id, "checkout_url": session.url}


@router.get("/orders/{order_id}")
def get_order(order_id: str, auth=Depends(verify_token)):
    db = SessionLocal()
    try:
        order = db.get(Order, order_id)
        if order is None:
            raise HTTPException(status_code=404, detail="Order not found")
        return _order_summary(order)
    finally:
        db.close()


@router.post("/orders/{order_id}/refund")
def refund(order_id: str, auth=Depends(verify_token)):
    db = SessionLocal()
    try:
        order = db.get(Order, order_id)
        if order is None:
            raise HTTPException(status_code=404, detail="Order not found")
        if order.payment_status != PaymentStatus.PAID.value or not order.stripe_payment_intent_id:
            return {"message": "Nothing to refund"}
        payment_intent_id = order.stripe_payment_intent_id
        # end the read before the Stripe call
        db.rollback()

        try:
            refund_payment(payment_intent_id)
        except stripe.StripeError:
            logger.exception("Refund failed for order %s", order_id)
            raise HTTPException(status_code=502, detail="Refund failed")

        # charge.refunded will set the same status again
        try:
            OrderStore(db).update_payment(order_id, PaymentStatus.REFUNDED)
        except StoreWriteFailure:
            logger.exception("Refund issued for order %s but status was not saved", order_id)
            return JSONResponse({"status": "refund_pending"}, status_code=202)
    finally:
        db.close()

    logger.info("Order %s refunded", order_id)
    return {"status": "refunded"}
