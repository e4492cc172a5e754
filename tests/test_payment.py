from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from trip_planner import config
from trip_planner.errors import PaymentError
from trip_planner.modules.payment import payment_gateway as pg
from trip_planner.modules.payment.payment_gateway import PaymentGateway, razorpay_signature, to_minor_units


@pytest.fixture
def gateway(store):
    return PaymentGateway(store)


@pytest.fixture(autouse=True)
def razorpay_secret(monkeypatch):
    monkeypatch.setattr(config, "RAZORPAY_KEY_SECRET", "rzp_secret")
    pg.reset_paypal_token()
    yield
    pg.reset_paypal_token()


def _json_response(payload):
    resp = MagicMock()
    resp.json.return_value = payload
    resp.raise_for_status.return_value = None
    return resp


def test_to_minor_units_rounds_half_up():
    assert to_minor_units(12.345) == 1235
    assert to_minor_units("99.99") == 9999
    assert to_minor_units(100) == 10000


def test_unsupported_method_fails_without_raising(gateway, audit):
    result = gateway.process_payment({"amount": 10, "paymentMethod": "cash", "paymentDetails": {}})
    assert result == {"success": False, "message": "Unsupported payment method: cash"}
    assert audit.read("payments")[0]["event_type"] == "payment_failed"


def test_stripe_success_is_persisted(gateway, store, audit):
    intent = SimpleNamespace(id="pi_123", status="succeeded", client_secret="cs_123")
    with patch("stripe.PaymentIntent.create", return_value=intent) as create:
        result = gateway.process_payment({
            "userId": "user-1",
            "amount": 49.99,
            "currency": "USD",
            "paymentMethod": "stripe",
            "paymentDetails": {"token": "pm_card_visa"},
        })

    assert create.call_args.kwargs["amount"] == 4999
    assert create.call_args.kwargs["currency"] == "usd"
    assert result["success"] is True
    assert result["paymentId"] == "pi_123"
    assert result["status"] == "completed"
    assert store.get("payments", "pi_123")["userId"] == "user-1"
    assert audit.read("payments")[0]["event_type"] == "payment_processed"


def test_stripe_requires_action_returns_client_secret(gateway):
    intent = SimpleNamespace(id="pi_3ds", status="requires_action", client_secret="cs_3ds")
    with patch("stripe.PaymentIntent.create", return_value=intent):
        result = gateway.process_payment({"amount": 10, "paymentMethod": "stripe", "paymentDetails": {}})
    assert result["status"] == "requires_action"
    assert result["clientSecret"] == "cs_3ds"


def test_stripe_other_status_fails(gateway):
    intent = SimpleNamespace(id="pi_x", status="canceled", client_secret=None)
    with patch("stripe.PaymentIntent.create", return_value=intent):
        result = gateway.process_payment({"amount": 10, "paymentMethod": "stripe", "paymentDetails": {}})
    assert result["success"] is False
    assert result["message"] == "Payment failed with status: canceled"


def test_razorpay_valid_signature_and_captured(gateway):
    details = {
        "orderId": "order_1",
        "paymentId": "pay_1",
        "signature": razorpay_signature("order_1", "pay_1"),
    }
    with patch("trip_planner.modules.payment.payment_gateway.requests.request",
               return_value=_json_response({"id": "pay_1", "status": "captured"})) as request:
        result = gateway.process_payment({"amount": 2500, "currency": "INR", "paymentMethod": "razorpay", "paymentDetails": details})

    assert request.call_args.args == ("GET", "https://api.razorpay.com/v1/payments/pay_1")
    assert result["success"] is True
    assert result["status"] == "completed"


def test_razorpay_bad_signature(gateway):
    details = {"orderId": "order_1", "paymentId": "pay_1", "signature": "forged"}
    with patch("trip_planner.modules.payment.payment_gateway.requests.request") as request:
        result = gateway.process_payment({"amount": 2500, "paymentMethod": "razorpay", "paymentDetails": details})
    request.assert_not_called()
    assert result == {"success": False, "message": "Invalid payment signature"}


def test_razorpay_not_captured(gateway):
    details = {"orderId": "o", "paymentId": "p", "signature": razorpay_signature("o", "p")}
    with patch("trip_planner.modules.payment.payment_gateway.requests.request",
               return_value=_json_response({"id": "p", "status": "authorized"})):
        result = gateway.process_payment({"amount": 1, "paymentMethod": "razorpay", "paymentDetails": details})
    assert result["message"] == "Payment not captured. Status: authorized"


def test_paypal_returns_approval_url_and_caches_token(gateway):
    token = _json_response({"access_token": "A21"})
    payment = _json_response({
        "id": "PAY-1",
        "links": [{"rel": "self", "href": "x"}, {"rel": "approval_url", "href": "https://paypal.example/approve"}],
    })
    with patch("trip_planner.modules.payment.payment_gateway.requests.post",
               side_effect=[token, payment, payment]) as post:
        first = gateway.process_payment({"amount": 20, "paymentMethod": "paypal", "paymentDetails": {}})
        gateway.process_payment({"amount": 20, "paymentMethod": "paypal", "paymentDetails": {}})

    assert first["status"] == "pending"
    assert first["approvalUrl"] == "https://paypal.example/approve"
    # one token request for two payments
    assert post.call_count == 3
    assert post.call_args.kwargs["headers"]["Authorization"] == "Bearer A21"


def test_create_razorpay_order(gateway):
    with patch("trip_planner.modules.payment.payment_gateway.requests.request",
               return_value=_json_response({"id": "order_9", "amount": 150050, "currency": "INR", "receipt": "r"})) as request:
        order = gateway.create_razorpay_order(1500.5)
    assert request.call_args.kwargs["json"]["amount"] == 150050
    assert order["orderId"] == "order_9"


def test_create_stripe_intent_failure_raises(gateway):
    with patch("stripe.PaymentIntent.create", side_effect=RuntimeError("boom")):
        with pytest.raises(PaymentError):
            gateway.create_stripe_payment_intent(10)


def test_refunds(gateway, audit):
    refund = SimpleNamespace(id="re_1", status="succeeded", amount=500)
    with patch("stripe.Refund.create", return_value=refund) as create:
        result = gateway.refund_payment("pi_1", "stripe", 5)
    assert create.call_args.kwargs == {"payment_intent": "pi_1", "reason": "requested_by_customer", "amount": 500}
    assert result == {"refundId": "re_1", "status": "succeeded", "amount": 5.0}

    paypal = gateway.refund_payment("PAY-1", "paypal", 20)
    assert paypal["status"] == "completed"
    assert paypal["amount"] == 20
    assert [r["event_type"] for r in audit.read("payments")] == ["refund_processed", "refund_processed"]


def test_refund_unsupported_method(gateway):
    with pytest.raises(PaymentError):
        gateway.refund_payment("x", "bitcoin")


def test_paypal_status_is_simulated(gateway):
    assert gateway.get_payment_status("PAY-1", "paypal")["status"] == "completed"


def test_razorpay_webhook_marks_payment(gateway, store, audit):
    store.set("payments", "pay_7", {"status": "pending"})
    gateway.handle_razorpay_webhook({"event": "payment.captured", "payload": {"payment": {"entity": {"id": "pay_7"}}}})
    assert store.get("payments", "pay_7")["status"] == "completed"
    assert audit.read("webhooks")[0]["event_type"] == "payment_completed"


def test_stripe_webhook_bad_signature(gateway):
    with patch("stripe.Webhook.construct_event", side_effect=ValueError("bad sig")):
        with pytest.raises(PaymentError):
            gateway.handle_stripe_webhook(b"{}", "t=1,v1=bad")


def test_stripe_webhook_failed_payment(gateway, store):
    store.set("payments", "pi_9", {"status": "pending"})
    event = {"type": "payment_intent.payment_failed", "data": {"object": {"id": "pi_9"}}}
    with patch("stripe.Webhook.construct_event", return_value=event):
        assert gateway.handle_stripe_webhook(b"{}", "sig") == {"received": True}
    assert store.get("payments", "pi_9")["status"] == "failed"
