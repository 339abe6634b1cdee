"""
Payment Service

Payment status on the order, the cash-discount follow-up calendar and
individual payment records.

Business rules:
- Follow-ups are generated once, for cash-discount orders only: one per day
  for PAYMENT_FOLLOWUP_DAYS days starting the day after the order date
- An order can only be marked paid (fully or partially) once goods have
  been dispatched
- Payment records require the order to be dispatched by status or to have
  at least one dispatch
"""
from datetime import date, timedelta
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from sqlalchemy.orm import Session

from sunkool.core.settings import settings
from sunkool.core.status_config import (
    DISPATCHED_ORDER_STATUSES,
    PAYMENT_UPDATE_TO_STATUS,
    PaymentStatus,
    PaymentUpdate,
)
from sunkool.db.session import atomic
from sunkool.exceptions import (
    AuthenticationError,
    NotFoundError,
    PaymentRequiresDispatchError,
    ValidationError,
)
from sunkool.logging_config import get_logger
from sunkool.models.dispatch import Dispatch
from sunkool.models.order import Order
from sunkool.models.payment import OrderPayment, PaymentFollowup
from sunkool.services.event_service import record_order_event
from sunkool.services.order_helpers import get_order_or_404, lock_order

logger = get_logger(__name__)


def _to_amount(value, field: str) -> Optional[Decimal]:
    if value is None:
        return None
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field} must be a number", field=field, value=value)
    if amount < 0:
        raise ValidationError(f"{field} cannot be negative", field=field, value=value)
    return amount


# =============================================================================
# Follow-up calendar
# =============================================================================

def schedule_payment_followups(
    db: Session,
    order: Order,
    start: Optional[date] = None,
) -> List[PaymentFollowup]:
    """
    Generate the follow-up calendar for a cash-discount order.

    Does nothing for orders without a cash discount or when follow-ups
    already exist. Does not commit.

    Args:
        db: Database session
        order: The newly created order
        start: Order creation day (defaults to today); the first follow-up is the day after
    """
    if not order.cash_discount:
        return []

    existing = db.query(PaymentFollowup).filter(PaymentFollowup.order_id == order.id).count()
    if existing:
        return []

    start = start or date.today()
    followups = [
        PaymentFollowup(
            order_id=order.id,
            followup_date=start + timedelta(days=offset),
            payment_received=False,
        )
        for offset in range(1, settings.PAYMENT_FOLLOWUP_DAYS + 1)
    ]
    db.add_all(followups)

    logger.info(
        "Payment follow-ups scheduled",
        extra={
            "order_id": order.id,
            "count": len(followups),
            "first_date": str(followups[0].followup_date),
        },
    )
    return followups


def list_payment_followups(db: Session, order_id: int) -> List[PaymentFollowup]:
    get_order_or_404(db, order_id)
    return (
        db.query(PaymentFollowup)
        .filter(PaymentFollowup.order_id == order_id)
        .order_by(PaymentFollowup.followup_date.asc())
        .all()
    )


def list_due_followups(db: Session, on_date: Optional[date] = None) -> List[PaymentFollowup]:
    """Outstanding follow-ups due on or before `on_date` across all orders."""
    on_date = on_date or date.today()
    return (
        db.query(PaymentFollowup)
        .join(Order, Order.id == PaymentFollowup.order_id)
        .filter(
            PaymentFollowup.payment_received.is_(False),
            PaymentFollowup.followup_date <= on_date,
            Order.payment_status != PaymentStatus.PAID.value,
        )
        .order_by(PaymentFollowup.followup_date.asc(), PaymentFollowup.id.asc())
        .all()
    )


def update_payment_followup(
    db: Session,
    followup_id: int,
    payment_received: bool,
    payment_date: Optional[date] = None,
    notes: Optional[str] = None,
) -> PaymentFollowup:
    with atomic(db):
        followup = db.query(PaymentFollowup).filter(PaymentFollowup.id == followup_id).first()
        if not followup:
            raise NotFoundError("Payment followup", followup_id)

        followup.payment_received = payment_received
        if payment_date is not None:
            followup.payment_date = payment_date
        elif not payment_received:
            followup.payment_date = None
        if notes is not None:
            followup.notes = notes or None

    db.refresh(followup)
    logger.info(
        "Payment follow-up updated",
        extra={
            "followup_id": followup.id,
            "order_id": followup.order_id,
            "payment_received": payment_received,
        },
    )
    return followup


# =============================================================================
# Order payment status
# =============================================================================

def update_payment_status(
    db: Session,
    order_id: int,
    status: str,
    *,
    paid_amount=None,
    remaining_amount=None,
    payment_date: Optional[date] = None,
    invoice_number: Optional[str] = None,
    user_id: Optional[int] = None,
) -> Order:
    """
    Update the payment status of an order.

    Args:
        status: complete, partial or pending
        paid_amount: Amount received so far (partial only)
        remaining_amount: Amount still due (partial only)

    For a partial payment a missing amount is derived from the order total.

    Raises:
        ValidationError: Unknown status, or partial amounts cannot be determined
        PaymentRequiresDispatchError: complete/partial before any dispatch
    """
    try:
        update = PaymentUpdate(status)
    except ValueError:
        raise ValidationError(
            f"Invalid payment status '{status}'. Must be one of: "
            f"{', '.join(s.value for s in PaymentUpdate)}",
            field="status",
            value=status,
        )

    paid = _to_amount(paid_amount, "paid_amount")
    remaining = _to_amount(remaining_amount, "remaining_amount")

    with atomic(db):
        order = lock_order(db, order_id)

        if update != PaymentUpdate.PENDING and order.order_status not in DISPATCHED_ORDER_STATUSES:
            raise PaymentRequiresDispatchError(order.id, current_status=order.order_status)

        old_status = order.payment_status
        new_status = PAYMENT_UPDATE_TO_STATUS[update]

        if update == PaymentUpdate.PARTIAL:
            total = Decimal(str(order.total_price or 0))
            if paid is None and remaining is not None and total > 0:
                paid = total - remaining
            elif remaining is None and paid is not None and total > 0:
                remaining = total - paid
            if paid is None or remaining is None:
                raise ValidationError(
                    "Partial payment requires the paid and remaining amounts",
                    field="paid_amount",
                )
            if paid < 0 or remaining < 0:
                raise ValidationError(
                    "Partial payment amounts exceed the order total",
                    details={"total_price": str(total), "paid": str(paid), "remaining": str(remaining)},
                )
            order.partial_payment_amount = paid
            order.remaining_payment_amount = remaining
        else:
            order.partial_payment_amount = None
            order.remaining_payment_amount = None

        order.payment_status = new_status.value
        if payment_date is not None:
            order.payment_date = payment_date
        if invoice_number is not None:
            order.invoice_number = invoice_number or None

        record_order_event(
            db,
            order_id=order.id,
            event_type="payment_updated",
            title=f"Payment status changed to {new_status.value}",
            old_value=old_status,
            new_value=new_status.value,
            user_id=user_id,
        )

    db.refresh(order)
    logger.info(
        f"Order {order.internal_order_number} payment: {old_status} -> {new_status.value}",
        extra={
            "order_id": order.id,
            "payment_status": new_status.value,
            "partial_payment_amount": str(order.partial_payment_amount) if order.partial_payment_amount is not None else None,
        },
    )
    return order


# =============================================================================
# Payment records
# =============================================================================

def list_order_payments(db: Session, order_id: int) -> List[OrderPayment]:
    get_order_or_404(db, order_id)
    return (
        db.query(OrderPayment)
        .filter(OrderPayment.order_id == order_id)
        .order_by(OrderPayment.payment_date.desc(), OrderPayment.id.desc())
        .all()
    )


def add_order_payment(
    db: Session,
    order_id: int,
    amount,
    payment_date: Optional[date] = None,
    payment_method: Optional[str] = None,
    reference: Optional[str] = None,
    notes: Optional[str] = None,
    created_by: Optional[int] = None,
) -> OrderPayment:
    """
    Record money received against an order.

    Raises:
        AuthenticationError: No acting user
        ValidationError: Amount is missing or not positive
        PaymentRequiresDispatchError: Nothing has been dispatched yet
    """
    if created_by is None:
        raise AuthenticationError()

    value = _to_amount(amount, "amount")
    if value is None or value <= 0:
        raise ValidationError("Amount must be greater than 0", field="amount", value=amount)

    with atomic(db):
        order = lock_order(db, order_id)

        has_dispatched_status = order.order_status in DISPATCHED_ORDER_STATUSES
        has_dispatch_records = (
            db.query(Dispatch.id).filter(Dispatch.order_id == order.id).first() is not None
        )
        if not has_dispatched_status and not has_dispatch_records:
            raise PaymentRequiresDispatchError(
                order.id, current_status=order.order_status, action="add payment record"
            )

        payment = OrderPayment(
            order_id=order.id,
            amount=value,
            payment_date=payment_date or date.today(),
            payment_method=payment_method or None,
            reference=reference or None,
            notes=notes or None,
            created_by=created_by,
        )
        db.add(payment)

        record_order_event(
            db,
            order_id=order.id,
            event_type="payment_recorded",
            title=f"Payment of {value} recorded",
            description=reference,
            user_id=created_by,
        )

    db.refresh(payment)
    logger.info(
        "Payment recorded",
        extra={"order_id": order_id, "payment_id": payment.id, "amount": str(value)},
    )
    return payment


def delete_order_payment(db: Session, payment_id: int) -> int:
    """Delete a payment record. Returns the order id it belonged to."""
    with atomic(db):
        payment = db.query(OrderPayment).filter(OrderPayment.id == payment_id).first()
        if not payment:
            raise NotFoundError("Payment record", payment_id)
        order_id = payment.order_id
        db.delete(payment)

    logger.info("Payment record deleted", extra={"order_id": order_id, "payment_id": payment_id})
    return order_id
