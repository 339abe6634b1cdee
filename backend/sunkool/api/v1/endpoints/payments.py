"""
Payment endpoints: payment status, follow-up calendar and payment records
"""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from sunkool.api.v1.deps import get_current_user_id
from sunkool.db.session import get_db
from sunkool.schemas.common import MessageResponse
from sunkool.schemas.order import OrderResponse
from sunkool.schemas.payment import (
    OrderPaymentCreate,
    OrderPaymentResponse,
    PaymentFollowupResponse,
    PaymentFollowupUpdate,
    PaymentStatusUpdate,
)
from sunkool.services import payment_service

router = APIRouter(tags=["payments"])


@router.patch("/orders/{order_id}/payment-status", response_model=OrderResponse)
def update_payment_status(
    order_id: int,
    request: PaymentStatusUpdate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    return payment_service.update_payment_status(
        db,
        order_id,
        request.status,
        paid_amount=request.paid_amount,
        remaining_amount=request.remaining_amount,
        payment_date=request.payment_date,
        invoice_number=request.invoice_number,
        user_id=user_id,
    )


# ============================================================================
# Follow-ups
# ============================================================================

@router.get("/orders/{order_id}/payment-followups", response_model=List[PaymentFollowupResponse])
def list_order_followups(order_id: int, db: Session = Depends(get_db)):
    return payment_service.list_payment_followups(db, order_id)


@router.get("/payment-followups/due", response_model=List[PaymentFollowupResponse])
def list_due_followups(
    on_date: Optional[date] = Query(None, description="Defaults to today"),
    db: Session = Depends(get_db),
):
    return payment_service.list_due_followups(db, on_date)


@router.patch("/payment-followups/{followup_id}", response_model=PaymentFollowupResponse)
def update_followup(
    followup_id: int,
    request: PaymentFollowupUpdate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    return payment_service.update_payment_followup(
        db,
        followup_id,
        payment_received=request.payment_received,
        payment_date=request.payment_date,
        notes=request.notes,
    )


# ============================================================================
# Payment records
# ============================================================================

@router.get("/orders/{order_id}/payments", response_model=List[OrderPaymentResponse])
def list_order_payments(order_id: int, db: Session = Depends(get_db)):
    return payment_service.list_order_payments(db, order_id)


@router.post("/orders/{order_id}/payments", response_model=OrderPaymentResponse, status_code=201)
def add_order_payment(
    order_id: int,
    request: OrderPaymentCreate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    return payment_service.add_order_payment(
        db,
        order_id,
        amount=request.amount,
        payment_date=request.payment_date,
        payment_method=request.payment_method,
        reference=request.reference,
        notes=request.notes,
        created_by=user_id,
    )


@router.delete("/payments/{payment_id}", response_model=MessageResponse)
def delete_order_payment(
    payment_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    payment_service.delete_order_payment(db, payment_id)
    return {"message": f"Payment {payment_id} deleted"}
