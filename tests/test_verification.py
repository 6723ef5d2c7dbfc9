import json
import time

import pytest

from orders_service.errors import InvalidPayload, InvalidSignature
from orders_service.webhooks.verification import verify_event

from conftest import WEBHOOK_SECRET, sign

BODY = json.dumps({
    "id": "evt_1",
    "type": "checkout.session.completed",
    "created": 1700000000,
    "data": {"object": {"id": "cs_1", "metadata": {"order_id": "ord_1"}, "payment_intent": "pi_1"}},
}).encode("utf-8")


def test_valid_signature_returns_event():
    event = verify_event(BODY, sign(BODY), WEBHOOK_SECRET)

    assert event.type == "checkout.session.completed"
    assert event.id == "evt_1"
    assert event.object["metadata"]["order_id"] == "ord_1"


def test_verification_is_deterministic():
    header = sign(BODY)
    first = verify_event(BODY, header, WEBHOOK_SECRET)
    second = verify_event(BODY, header, WEBHOOK_SECRET)
    assert first == second


@pytest.mark.parametrize("position", [0, 10, len(BODY) // 2, len(BODY) - 1])
def test_single_byte_body_mutation_rejected(position):
    header = sign(BODY)
    tampered = bytearray(BODY)
    tampered[position] = (tampered[position] + 1) % 128
    with pytest.raises(InvalidSignature):
        verify_event(bytes(tampered), header, WEBHOOK_SECRET)


def test_single_char_signature_mutation_rejected():
    header = sign(BODY)
    last = header[-1]
    mutated = header[:-1] + ("0" if last != "0" else "1")
    with pytest.raises(InvalidSignature):
        verify_event(BODY, mutated, WEBHOOK_SECRET)


def test_wrong_secret_rejected():
    with pytest.raises(InvalidSignature):
        verify_event(BODY, sign(BODY, secret="whsec_other"), WEBHOOK_SECRET)


def test_missing_header_rejected():
    with pytest.raises(InvalidSignature):
        verify_event(BODY, None, WEBHOOK_SECRET)


def test_missing_secret_rejects_everything():
    with pytest.raises(InvalidSignature):
        verify_event(BODY, sign(BODY), None)


def test_garbage_header_rejected():
    with pytest.raises(InvalidSignature):
        verify_event(BODY, "not-a-stripe-header", WEBHOOK_SECRET)


def test_old_timestamp_rejected():
    stale = sign(BODY, timestamp=int(time.time()) - 3600)
    with pytest.raises(InvalidSignature):
        verify_event(BODY, stale, WEBHOOK_SECRET)


def test_signed_non_event_body_is_invalid_payload():
    body = b'["not", "an", "event"]'
    with pytest.raises(InvalidPayload):
        verify_event(body, sign(body), WEBHOOK_SECRET)


def test_signed_body_without_type_is_invalid_payload():
    body = b'{"id": "evt_2", "data": {"object": {}}}'
    with pytest.raises(InvalidPayload):
        verify_event(body, sign(body), WEBHOOK_SECRET)


def test_non_utf8_body_mutation_is_invalid_signature():
    header = sign(BODY)
    tampered = bytearray(BODY)
    tampered[10] = 0xFF
    with pytest.raises(InvalidSignature):
        verify_event(bytes(tampered), header, WEBHOOK_SECRET)
