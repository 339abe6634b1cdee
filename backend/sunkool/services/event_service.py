"""
Event Service

Helper for recording order activity timeline entries.
"""
from typing import List, Optional
from sqlalchemy.orm import Session

from sunkool.models.order_event import OrderEvent
from sunkool.services.order_helpers import get_order_or_404


def record_order_event(
    db: Session,
    order_id: int,
    event_type: str,
    title: str,
    description: Optional[str] = None,
    old_value: Optional[str] = None,
    new_value: Optional[str] = None,
    user_id: Optional[int] = None,
) -> OrderEvent:
    """
    Record an activity event for an order.

    Args:
        db: Database session
        order_id: ID of the order
        event_type: Type of event (status_change, dispatched, returned, etc.)
        title: Short description of the event
        description: Detailed description (optional)
        old_value: Previous value for status changes
        new_value: New value for status changes
        user_id: ID of user who triggered the event

    Returns:
        The created OrderEvent instance
    """
    event = OrderEvent(
        order_id=order_id,
        user_id=user_id,
        event_type=event_type,
        title=title,
        description=description,
        old_value=old_value,
        new_value=new_value,
    )
    db.add(event)
    # Don't commit - let the calling function handle the transaction
    return event


def list_order_events(db: Session, order_id: int, limit: int = 100) -> List[OrderEvent]:
    """Timeline for an order, newest first."""
    get_order_or_404(db, order_id)
    return (
        db.query(OrderEvent)
        .filter(OrderEvent.order_id == order_id)
        .order_by(OrderEvent.created_at.desc(), OrderEvent.id.desc())
        .limit(limit)
        .all()
    )
