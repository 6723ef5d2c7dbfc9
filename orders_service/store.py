import logging
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from orders_service.errors import DataIntegrityError, StoreWriteFailure
from orders_service.models import Order, PaymentStatus

logger = logging.getLogger(__name__)


class OrderStore:
    """Point reads and writes against the ``orders`` table.

    The webhook flow only ever touches ``payment_status``,
    ``stripe_payment_intent_id`` and ``last_event_created`` of rows the
    checkout flow already created. Every write is a single UPDATE keyed by
    order id, so applying it twice leaves the row in the same state.
    """

    def __init__(self, db, reject_stale: bool = False):
        self.db = db
        self.reject_stale = reject_stale

    def find_order_id_by_payment_intent(self, payment_intent_id: str) -> Optional[str]:
        try:
            rows = (
                self.db.query(Order.id)
                .filter(Order.stripe_payment_intent_id == payment_intent_id)
                .limit(2)
                .all()
            )
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StoreWriteFailure(f"lookup by payment intent {payment_intent_id} failed") from exc

        if len(rows) > 1:
            raise DataIntegrityError(f"several orders share payment intent {payment_intent_id}")
        return rows[0].id if rows else None

    def update_payment(self, order_id: str, status: PaymentStatus,
                       payment_intent_id: Optional[str] = None,
                       event_created: Optional[int] = None) -> bool:
        """Set the payment status of one order. Returns False if no row changed."""
        values = {Order.payment_status: status.value}
        if payment_intent_id is not None:
            values[Order.stripe_payment_intent_id] = payment_intent_id
        if event_created is not None:
            values[Order.last_event_created] = event_created

        query = self.db.query(Order).filter(Order.id == order_id)
        if self.reject_stale and event_created is not None:
            query = query.filter(or_(
                Order.last_event_created.is_(None),
                Order.last_event_created <= event_created,
            ))

        try:
            updated = query.update(values, synchronize_session=False)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StoreWriteFailure(f"failed to set order {order_id} to {status.value}") from exc

        if not updated:
            logger.warning("No order updated for %s (missing or newer event already applied)", order_id)
            return False
        return True

    def mark_paid(self, order_id: str, payment_intent_id: Optional[str],
                  event_created: Optional[int] = None) -> bool:
        return self.update_payment(order_id, PaymentStatus.PAID, payment_intent_id, event_created)

    def mark_by_payment_intent(self, payment_intent_id: str, status: PaymentStatus,
                               event_created: Optional[int] = None) -> Optional[str]:
        """Set the status of the order paid with ``payment_intent_id``.

        Returns the order id, or None when no order matches.
        """
        order_id = self.find_order_id_by_payment_intent(payment_intent_id)
        if order_id is None:
            return None
        self.update_payment(order_id, status, event_created=event_created)
        return order_id
