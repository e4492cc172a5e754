"""
api/routes/payment.py
---------------------
    POST /api/payment/process              (auth)
    POST /api/payment/razorpay/order       (auth)
    POST /api/payment/stripe/intent        (auth)
    POST /api/payment/refund               (auth)
    GET  /api/payment/status/{id}?paymentMethod=   (auth)
    GET  /api/payment/{id}/status?paymentMethod=   (auth)
    POST /api/payment/stripe/webhook       raw body, Stripe-Signature header
    POST /api/payment/razorpay/webhook
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Request
from pydantic import BaseModel

from trip_planner.api.deps import require_user
from trip_planner.auth import AuthUser
from trip_planner.modules.payment.payment_gateway import payment_gateway

router = APIRouter()


class ProcessPaymentRequest(BaseModel):
    amount: Optional[float] = None
    currency: str = "USD"
    paymentMethod: Optional[str] = None
    paymentDetails: Optional[dict] = None


class OrderRequest(BaseModel):
    amount: Optional[float] = None
    currency: Optional[str] = None


class RefundRequest(BaseModel):
    paymentId: Optional[str] = None
    paymentMethod: Optional[str] = None
    amount: Optional[float] = None
    reason: str = "requested_by_customer"


@router.post("/process", summary="Charge a payment")
def process(req: ProcessPaymentRequest, user: AuthUser = Depends(require_user)) -> dict:
    if not req.amount or not req.paymentMethod or not req.paymentDetails:
        raise HTTPException(status_code=400, detail="Missing required fields: amount, paymentMethod, paymentDetails")

    result = payment_gateway.process_payment({**req.model_dump(), "userId": user.id})
    if not result["success"]:
        raise HTTPException(status_code=400, detail=f"Payment failed: {result['message']}")
    return {"success": True, "payment": result, "message": "Payment processed successfully"}


@router.post("/razorpay/order", summary="Create a Razorpay order")
def razorpay_order(req: OrderRequest, user: AuthUser = Depends(require_user)) -> dict:
    if not req.amount:
        raise HTTPException(status_code=400, detail="Amount is required")
    order = payment_gateway.create_razorpay_order(req.amount, req.currency or "INR")
    return {"success": True, "order": order}


@router.post("/stripe/intent", summary="Create a Stripe PaymentIntent")
def stripe_intent(req: OrderRequest, user: AuthUser = Depends(require_user)) -> dict:
    if not req.amount:
        raise HTTPException(status_code=400, detail="Amount is required")
    intent = payment_gateway.create_stripe_payment_intent(req.amount, req.currency or "USD")
    return {"success": True, "paymentIntent": intent}


@router.post("/refund", summary="Refund a payment")
def refund(req: RefundRequest, user: AuthUser = Depends(require_user)) -> dict:
    if not req.paymentId or not req.paymentMethod:
        raise HTTPException(status_code=400, detail="Missing required fields: paymentId, paymentMethod")
    result = payment_gateway.refund_payment(req.paymentId, req.paymentMethod, req.amount, req.reason)
    return {"success": True, "refund": result, "message": "Refund processed successfully"}


def _status(payment_id: str, payment_method: Optional[str]) -> dict:
    if not payment_method:
        raise HTTPException(status_code=400, detail="Payment method is required")
    return {"success": True, "payment": payment_gateway.get_payment_status(payment_id, payment_method)}


@router.get("/status/{payment_id}", summary="Payment status")
def status(payment_id: str, paymentMethod: Optional[str] = None, user: AuthUser = Depends(require_user)) -> dict:
    return _status(payment_id, paymentMethod)


@router.get("/{payment_id}/status", summary="Payment status")
def status_alt(payment_id: str, paymentMethod: Optional[str] = None, user: AuthUser = Depends(require_user)) -> dict:
    return _status(payment_id, paymentMethod)


@router.post("/stripe/webhook", summary="Stripe webhook")
async def stripe_webhook(request: Request) -> dict:
    payload = await request.body()
    return payment_gateway.handle_stripe_webhook(payload, request.headers.get("stripe-signature"))


@router.post("/razorpay/webhook", summary="Razorpay webhook")
def razorpay_webhook(payload: dict = Body(...)) -> dict:
    return payment_gateway.handle_razorpay_webhook(payload)
