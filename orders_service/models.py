import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Integer, Numeric, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from orders_service.database import Base


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


def new_order_id():
    return uuid.uuid4().hex


def _utcnow():
    return datetime.now(timezone.utc)


class Order(Base):
    __tablename__ = "orders"

    id = Column(String, primary_key=True, default=new_order_id)
    gallery_id = Column(String, index=True)

    customer_name = Column(String, nullable=False)
    customer_email = Column(String, nullable=False)
    customer_phone = Column(String)

    shipping_address_line1 = Column(String, nullable=False)
    shipping_address_line2 = Column(String)
    shipping_city = Column(String, nullable=False)
    shipping_state = Column(String, nullable=False)
    shipping_zip = Column(String, nullable=False)
    shipping_country = Column(String, nullable=False, default="US")

    subtotal = Column(Numeric(10, 2), nullable=False, default=0)
    tax = Column(Numeric(10, 2), nullable=False, default=0)
    shipping_cost = Column(Numeric(10, 2), nullable=False, default=0)
    total = Column(Numeric(10, 2), nullable=False, default=0)

    payment_status = Column(String, nullable=False, default=PaymentStatus.PENDING.value)  # pending | paid | failed | refunded
    fulfillment_status = Column(String, nullable=False, default="pending")

    stripe_session_id = Column(String)                                      # Checkout Session ID
    stripe_payment_intent_id = Column(String, unique=True, index=True)      # set when paid
    last_event_created = Column(Integer)                                    # epoch of last applied webhook event

    created_at = Column(DateTime(timezone=True), default=_utcnow)

    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(String, ForeignKey("orders.id"), nullable=False, index=True)
    photo_id = Column(String, nullable=False)
    product_name = Column(String, nullable=False)
    product_size = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    total_price = Column(Numeric(10, 2), nullable=False)
    photo_url = Column(String)
    photo_filename = Column(String)

    order = relationship("Order", back_populates="items")
