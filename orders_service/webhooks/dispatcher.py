import logging

from orders_service.errors import (
    DataIntegrityError,
    MalformedEvent,
    StoreWriteFailure,
    UnhandledEventType,
)
from orders_service.store import OrderStore
from orders_service.webhooks.handlers import HANDLERS
from orders_service.webhooks.verification import StripeEvent

logger = logging.getLogger(__name__)


def dispatch(event: StripeEvent, store: OrderStore, handlers=None) -> str:
    """Run the handler registered for ``event.type`` and return its outcome.

    Failures the provider cannot fix by redelivering are logged here and
    reported as an outcome; anything else propagates to the caller.
    """
    registry = HANDLERS if handlers is None else handlers
    try:
        handler = registry.get(event.type)
        if handler is None:
            raise UnhandledEventType(event.type)
        return handler(event, store)
    except UnhandledEventType:
        logger.info("Unhandled event type: %s", event.type)
        return "ignored"
    except MalformedEvent as exc:
        logger.error("Malformed %s event %s: %s", event.type, event.id, exc)
        return "malformed"
    except DataIntegrityError as exc:
        logger.error("Data integrity error on %s event %s: %s", event.type, event.id, exc)
        return "integrity_error"
    except StoreWriteFailure as exc:
        logger.error("Failed to update order for %s event %s: %s", event.type, event.id, exc,
                     exc_info=exc.__cause__)
        return "store_write_failed"
