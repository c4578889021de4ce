import uuid

import pytest

from leasehub.core.payment_gateway import simulate_charge, synthesize_transaction_id
from leasehub.core.security import create_access_token, decode_access_token, get_password_hash, verify_password
from leasehub.core.session import Identity
from leasehub.api.v1.leases.workflow import idempotency_key_for


def test_password_hash_round_trip():
    hashed = get_password_hash("correct horse")
    assert hashed != "correct horse"
    assert verify_password("correct horse", hashed)
    assert not verify_password("wrong horse", hashed)


def test_verify_password_tolerates_garbage_hash():
    assert verify_password("anything", "not-a-bcrypt-hash") is False


def test_access_token_carries_payload():
    token = create_access_token({"sub": "abc", "role": "lessee"})
    payload = decode_access_token(token)
    assert payload["sub"] == "abc"
    assert "exp" in payload
    assert decode_access_token(token + "x") is None


def test_identity_from_payload():
    user_id = uuid.uuid4()
    identity = Identity.from_payload({"sub": str(user_id), "email": "a@b.c", "name": "A", "role": "admin"})
    assert identity.user_id == user_id
    assert identity.is_admin
    assert identity.owns(user_id)
    assert not identity.owns(uuid.uuid4())
    assert Identity.from_payload({"sub": "not-a-uuid"}) is None


def test_idempotency_key_is_scoped_to_user_and_vehicle():
    user, vehicle = uuid.uuid4(), uuid.uuid4()
    key = idempotency_key_for(user, vehicle, "nonce")
    assert len(key) == 64
    assert key == idempotency_key_for(user, vehicle, "nonce")
    assert key != idempotency_key_for(uuid.uuid4(), vehicle, "nonce")
    assert key != idempotency_key_for(user, vehicle, "other")


def test_synthesized_transaction_id_format():
    transaction_id = synthesize_transaction_id()
    prefix, millis = transaction_id.split("_")
    assert prefix == "SIM"
    assert millis.isdigit() and len(millis) >= 13


async def test_simulated_charge_defaults():
    result = await simulate_charge(300, delay_seconds=0)
    assert result.amount == 300
    assert result.payment_method == "Simulated Card"
    assert result.transaction_id.startswith("SIM_TRANS_")
    assert result.status == "succeeded"


async def test_simulated_charge_rejects_non_positive_amount():
    with pytest.raises(ValueError):
        await simulate_charge(0, delay_seconds=0)


async def test_send_email_skips_when_mail_is_not_configured():
    from leasehub.core.email import send_email

    assert await send_email("someone@example.com", "Hi", "body") is False


async def test_email_notifier_counts_deliveries(monkeypatch):
    from leasehub.core import notifier as notifier_module

    outcomes = iter([True, False])

    async def fake_send(to_email, to_name):
        return next(outcomes)

    monkeypatch.setattr(notifier_module, "mail_enabled", lambda: True)
    monkeypatch.setattr(notifier_module, "send_welcome_email", fake_send)
    email_notifier = notifier_module.EmailNotifier()
    assert await email_notifier.send_welcome("a@example.com", "A") is True
    assert await email_notifier.send_welcome("b@example.com", "B") is False
    assert (email_notifier.sent_count, email_notifier.failed_count) == (1, 1)
    assert email_notifier.skipped_count == 0


async def test_email_notifier_skips_when_mail_is_not_configured(monkeypatch):
    from leasehub.core import notifier as notifier_module

    async def unexpected_send(to_email, to_name):
        raise AssertionError("mail must not be attempted without a server")

    monkeypatch.setattr(notifier_module, "send_welcome_email", unexpected_send)
    email_notifier = notifier_module.EmailNotifier()
    assert await email_notifier.send_welcome("quiet@example.com", "Q") is False
    assert (email_notifier.sent_count, email_notifier.skipped_count, email_notifier.failed_count) == (0, 1, 0)


def test_transaction_prefix_names_the_recording_path():
    from leasehub.core.payment_gateway import CHECKOUT_TRANSACTION_PREFIX, RECORDED_TRANSACTION_PREFIX

    assert synthesize_transaction_id(CHECKOUT_TRANSACTION_PREFIX).startswith("SIM_TRANS_")
    recorded = synthesize_transaction_id(RECORDED_TRANSACTION_PREFIX)
    assert recorded.startswith("SIM_") and not recorded.startswith("SIM_TRANS_")
