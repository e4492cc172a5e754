"""
modules/payment/payment_gateway.py
-----------------------------------
Payment processing across three providers.

  stripe    official `stripe` SDK (PaymentIntent, Refund, Webhook)
  paypal    REST v1 payments API, OAuth client-credentials token cached per process
  razorpay  REST v1 with HTTP basic auth; HMAC-SHA256 signature check on capture

Amounts are passed around in major units (rupees, dollars) and converted with
`to_minor_units` at the provider boundary.

`process_payment` never raises: any failure comes back as
    {"success": False, "message": "..."}
The narrower helpers (orders, intents, refunds, status) raise PaymentError.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import threading
from decimal import ROUND_HALF_UP, Decimal

import requests
import stripe

from trip_planner import config
from trip_planner.db import get_store, new_id, now_iso
from trip_planner.errors import PaymentError
from trip_planner.modules.observability.logger import get_audit_logger

logger = logging.getLogger(__name__)

SUPPORTED_METHODS = ("stripe", "paypal", "razorpay")

_PAYPAL_BASE_URLS = {
    "sandbox": "https://api-m.sandbox.paypal.com",
    "live": "https://api-m.paypal.com",
}

_paypal_token_lock = threading.Lock()
_paypal_token_cache: dict[str, str] = {}   # key: "token", value: access_token


def to_minor_units(amount) -> int:
    """12.345 -> 1235 (half-up, like the providers' own dashboards)."""
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(amount) -> float | None:
    return amount / 100 if amount else None


def _stripe():
    stripe.api_key = config.STRIPE_SECRET_KEY
    return stripe


# ── PayPal REST ────────────────────────────────────────────────────────────────

def _paypal_base_url() -> str:
    return _PAYPAL_BASE_URLS.get(config.PAYPAL_MODE, _PAYPAL_BASE_URLS["sandbox"])


def _paypal_token() -> str:
    with _paypal_token_lock:
        cached = _paypal_token_cache.get("token", "")
        if cached:
            return cached

        resp = requests.post(
            f"{_paypal_base_url()}/v1/oauth2/token",
            data={"grant_type": "client_credentials"},
            auth=(config.PAYPAL_CLIENT_ID, config.PAYPAL_CLIENT_SECRET),
            headers={"Accept": "application/json"},
            timeout=config.PAYMENT_REQUEST_TIMEOUT,
        )
        resp.raise_for_status()
        token = resp.json().get("access_token", "")
        if not token:
            raise PaymentError("PayPal authentication failed: no access_token")
        _paypal_token_cache["token"] = token
        return token


def reset_paypal_token() -> None:
    with _paypal_token_lock:
        _paypal_token_cache.clear()


def _paypal_post(path: str, body: dict) -> dict:
    resp = requests.post(
        f"{_paypal_base_url()}/{path.lstrip('/')}",
        json=body,
        headers={"Authorization": f"Bearer {_paypal_token()}", "Content-Type": "application/json"},
        timeout=config.PAYMENT_REQUEST_TIMEOUT,
    )
    resp.raise_for_status()
    return resp.json()


# ── Razorpay REST ──────────────────────────────────────────────────────────────

def _razorpay_request(method: str, path: str, body: dict | None = None) -> dict:
    resp = requests.request(
        method,
        f"{config.RAZORPAY_BASE_URL.rstrip('/')}/{path.lstrip('/')}",
        json=body,
        auth=(config.RAZORPAY_KEY_ID, config.RAZORPAY_KEY_SECRET),
        timeout=config.PAYMENT_REQUEST_TIMEOUT,
    )
    resp.raise_for_status()
    return resp.json()


def razorpay_signature(order_id: str, payment_id: str) -> str:
    return hmac.new(
        config.RAZORPAY_KEY_SECRET.encode(),
        f"{order_id}|{payment_id}".encode(),
        hashlib.sha256,
    ).hexdigest()


def _method(payment_method: str | None) -> str:
    method = (payment_method or "").lower()
    if method not in SUPPORTED_METHODS:
        raise PaymentError(f"Unsupported payment method: {payment_method}")
    return method


class PaymentGateway:

    def __init__(self, store=None) -> None:
        self._store = store

    @property
    def store(self):
        return self._store or get_store()

    # ── per-provider capture ─────────────────────────────────────────────

    def _process_stripe(self, amount, currency: str, details: dict) -> dict:
        intent = _stripe().PaymentIntent.create(
            amount=to_minor_units(amount),
            currency=currency.lower(),
            payment_method=details.get("token"),
            confirmation_method="manual",
            confirm=True,
            customer=details.get("customerId"),
            metadata={"source": "ai-trip-planner"},
        )
        if intent.status == "succeeded":
            return {"paymentId": intent.id, "transactionId": intent.id, "status": "completed"}
        if intent.status == "requires_action":
            return {
                "paymentId": intent.id,
                "transactionId": intent.id,
                "status": "requires_action",
                "clientSecret": intent.client_secret,
            }
        raise PaymentError(f"Payment failed with status: {intent.status}")

    def _process_paypal(self, amount, currency: str, details: dict) -> dict:
        payment = _paypal_post("v1/payments/payment", {
            "intent": "sale",
            "payer": {"payment_method": "paypal"},
            "redirect_urls": {
                "return_url": details.get("returnUrl"),
                "cancel_url": details.get("cancelUrl"),
            },
            "transactions": [{
                "amount": {"total": str(amount), "currency": currency.upper()},
                "description": "AI Trip Planner Booking",
            }],
        })
        approval = next((link["href"] for link in payment.get("links") or [] if link.get("rel") == "approval_url"), None)
        return {
            "paymentId": payment["id"],
            "transactionId": payment["id"],
            "status": "pending",
            "approvalUrl": approval,
        }

    def _process_razorpay(self, amount, currency: str, details: dict) -> dict:
        order_id = details.get("orderId")
        payment_id = details.get("paymentId")
        signature = details.get("signature") or ""
        if not hmac.compare_digest(razorpay_signature(order_id or "", payment_id or ""), signature):
            raise PaymentError("Invalid payment signature")

        payment = _razorpay_request("GET", f"payments/{payment_id}")
        if payment.get("status") != "captured":
            raise PaymentError(f"Payment not captured. Status: {payment.get('status')}")
        return {"paymentId": payment["id"], "transactionId": payment["id"], "status": "completed"}

    # ── public API ───────────────────────────────────────────────────────

    def process_payment(self, data: dict) -> dict:
        amount = data.get("amount")
        currency = data.get("currency") or "USD"
        payment_method = data.get("paymentMethod")
        details = data.get("paymentDetails") or {}

        try:
            method = _method(payment_method)
            handler = {
                "stripe": self._process_stripe,
                "paypal": self._process_paypal,
                "razorpay": self._process_razorpay,
            }[method]
            result = handler(amount, currency, details)
        except Exception as exc:
            logger.error("Payment processing error (%s): %s", payment_method, exc)
            get_audit_logger().log("payments", "payment_failed", {
                "userId": data.get("userId"), "paymentMethod": payment_method, "error": str(exc),
            })
            return {"success": False, "message": str(exc)}

        record = {
            "id": result["paymentId"],
            "userId": data.get("userId"),
            "amount": amount,
            "currency": currency,
            "paymentMethod": payment_method,
            "status": result["status"],
            "transactionId": result["transactionId"],
            "createdAt": now_iso(),
        }
        try:
            self.store.set("payments", record["id"], record)
        except Exception as exc:
            logger.error("Failed to persist payment %s: %s", record["id"], exc)
        get_audit_logger().log("payments", "payment_processed", record)

        extras = {k: v for k, v in result.items() if k not in ("paymentId", "transactionId", "status")}
        return {
            "success": True,
            "paymentId": result["paymentId"],
            "transactionId": result["transactionId"],
            "status": result["status"],
            "amount": amount,
            "currency": currency,
            "paymentMethod": payment_method,
            **extras,
        }

    def create_razorpay_order(self, amount, currency: str = "INR") -> dict:
        try:
            order = _razorpay_request("POST", "orders", {
                "amount": to_minor_units(amount),
                "currency": currency.upper(),
                "receipt": f"order_{new_id()}",
                "payment_capture": 1,
            })
        except Exception as exc:
            logger.error("Razorpay order creation error: %s", exc)
            raise PaymentError(f"Failed to create Razorpay order: {exc}") from exc
        return {
            "orderId": order.get("id"),
            "amount": order.get("amount"),
            "currency": order.get("currency"),
            "receipt": order.get("receipt"),
        }

    def create_stripe_payment_intent(self, amount, currency: str = "USD") -> dict:
        try:
            intent = _stripe().PaymentIntent.create(
                amount=to_minor_units(amount),
                currency=currency.lower(),
                metadata={"source": "ai-trip-planner"},
            )
        except Exception as exc:
            logger.error("Stripe payment intent creation error: %s", exc)
            raise PaymentError(f"Failed to create Stripe payment intent: {exc}") from exc
        return {"clientSecret": intent.client_secret, "paymentIntentId": intent.id}

    def refund_payment(
        self,
        payment_id: str,
        payment_method: str,
        amount=None,
        reason: str = "requested_by_customer",
    ) -> dict:
        method = _method(payment_method)
        minor = to_minor_units(amount) if amount else None
        try:
            if method == "stripe":
                params = {"payment_intent": payment_id, "reason": reason}
                if minor:
                    params["amount"] = minor
                refund = _stripe().Refund.create(**params)
                refund_id, status, refunded = refund.id, refund.status, getattr(refund, "amount", None)
            elif method == "razorpay":
                body = {"notes": {"reason": reason}}
                if minor:
                    body["amount"] = minor
                refund = _razorpay_request("POST", f"payments/{payment_id}/refund", body)
                refund_id, status, refunded = refund.get("id"), refund.get("status"), refund.get("amount")
            else:
                # PayPal refunds are settled manually from the merchant dashboard
                refund_id, status, refunded = f"refund_{new_id()}", "completed", None
        except Exception as exc:
            logger.error("Refund error (%s %s): %s", method, payment_id, exc)
            raise PaymentError(f"Refund failed: {exc}") from exc

        result = {
            "refundId": refund_id,
            "status": status,
            "amount": from_minor_units(refunded) if refunded else amount,
        }
        get_audit_logger().log("payments", "refund_processed", {"paymentId": payment_id, "paymentMethod": method, **result})
        return result

    def get_payment_status(self, payment_id: str, payment_method: str) -> dict:
        method = _method(payment_method)
        try:
            if method == "stripe":
                intent = _stripe().PaymentIntent.retrieve(payment_id)
                return {
                    "paymentId": intent.id,
                    "status": intent.status,
                    "amount": from_minor_units(getattr(intent, "amount", None)),
                    "currency": getattr(intent, "currency", None),
                }
            if method == "razorpay":
                payment = _razorpay_request("GET", f"payments/{payment_id}")
                return {
                    "paymentId": payment.get("id"),
                    "status": payment.get("status"),
                    "amount": from_minor_units(payment.get("amount")),
                    "currency": payment.get("currency"),
                }
        except Exception as exc:
            logger.error("Get payment status error (%s %s): %s", method, payment_id, exc)
            raise PaymentError(f"Failed to get payment status: {exc}") from exc
        return {"paymentId": payment_id, "status": "completed", "amount": None, "currency": None}

    # ── webhooks ─────────────────────────────────────────────────────────

    def handle_stripe_webhook(self, payload: bytes, signature: str | None) -> dict:
        try:
            event = stripe.Webhook.construct_event(payload, signature, config.STRIPE_WEBHOOK_SECRET)
        except Exception as exc:
            logger.error("Stripe webhook error: %s", exc)
            raise PaymentError(f"Webhook signature verification failed: {exc}") from exc

        event_type = event["type"]
        payment = event["data"]["object"]
        if event_type == "payment_intent.succeeded":
            self._mark(payment["id"], "completed", "stripe")
        elif event_type == "payment_intent.payment_failed":
            self._mark(payment["id"], "failed", "stripe")
        else:
            logger.info("Unhandled Stripe event type: %s", event_type)
        return {"received": True}

    def handle_razorpay_webhook(self, payload: dict) -> dict:
        event_type = (payload or {}).get("event")
        entity = (((payload or {}).get("payload") or {}).get("payment") or {}).get("entity") or {}
        if event_type == "payment.captured":
            self._mark(entity.get("id"), "completed", "razorpay")
        elif event_type == "payment.failed":
            self._mark(entity.get("id"), "failed", "razorpay")
        else:
            logger.info("Unhandled Razorpay event: %s", event_type)
        return {"received": True}

    def _mark(self, payment_id: str | None, status: str, provider: str) -> None:
        logger.info("Payment %s %s via %s webhook", payment_id, status, provider)
        get_audit_logger().log("webhooks", f"payment_{status}", {"paymentId": payment_id, "provider": provider})
        if payment_id and self.store.get("payments", payment_id) is not None:
            self.store.update("payments", payment_id, {"status": status, "updatedAt": now_iso()})


payment_gateway = PaymentGateway()
