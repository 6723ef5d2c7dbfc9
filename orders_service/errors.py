"""Failure taxonomy for webhook processing.

``InvalidSignature`` and ``InvalidPayload`` reject the request with a 400.
Everything else below is logged and the delivery is still acknowledged, so
the provider does not keep redelivering an event we can never apply.
"""


class WebhookError(Exception):
    """Base class for webhook processing failures."""


class InvalidSignature(WebhookError):
    """Signature header missing or not produced with the shared secret."""


class InvalidPayload(WebhookError):
    """Body verified but is not a Stripe event envelope."""


class MalformedEvent(WebhookError):
    """Event lacks the identifier the handler needs to find its order."""


class StoreWriteFailure(WebhookError):
    """The order store rejected a read or write."""


class DataIntegrityError(WebhookError):
    """More than one order carries the same payment intent."""


class UnhandledEventType(WebhookError):
    """No handler is registered for the event type."""
