"""
Order Status Management Service

Applies order status changes. Manual changes are validated against
ORDER_STATUS_TRANSITIONS; automatic changes made by the dispatch and item
workflows bypass the table.

Neither method commits - the caller owns the transaction.
"""
from typing import Optional
from datetime import datetime
from sqlalchemy.orm import Session

from sunkool.core.status_config import (
    OrderStatus,
    get_allowed_order_transitions,
    parse_order_status,
    validate_order_transition,
)
from sunkool.models.order import Order
from sunkool.services.event_service import record_order_event
from sunkool.logging_config import get_logger

logger = get_logger(__name__)


class OrderStatusService:
    """
    Manages order status transitions.

    Responsibilities:
    - Validate manual status transitions (prevent invalid state changes)
    - Apply automatic transitions driven by items, dispatches and deliveries
    - Record every change on the order timeline
    """

    def allowed_transitions(self, order: Order):
        return get_allowed_order_transitions(order.order_status)

    def transition(
        self,
        db: Session,
        order: Order,
        new_status: str,
        user_id: Optional[int] = None,
    ) -> Order:
        """
        Apply a manual status change.

        Args:
            db: Database session
            order: Order to update (should be locked by the caller)
            new_status: Requested status value
            user_id: Acting user

        Raises:
            ValidationError: If new_status is not a known status
            InvalidTransitionError: If the table does not allow the change
        """
        target = parse_order_status(new_status)
        validate_order_transition(order.order_status, target.value)
        return self._apply(db, order, target, user_id, automatic=False)

    def set_automatic_status(
        self,
        db: Session,
        order: Order,
        new_status: OrderStatus,
        user_id: Optional[int] = None,
        reason: Optional[str] = None,
    ) -> Order:
        """Apply a workflow-driven status change without consulting the table."""
        if order.order_status == new_status.value:
            return order
        return self._apply(db, order, new_status, user_id, automatic=True, reason=reason)

    def _apply(
        self,
        db: Session,
        order: Order,
        new_status: OrderStatus,
        user_id: Optional[int],
        automatic: bool,
        reason: Optional[str] = None,
    ) -> Order:
        old_status = order.order_status
        order.order_status = new_status.value
        order.updated_at = datetime.utcnow()

        record_order_event(
            db,
            order_id=order.id,
            event_type="status_change",
            title=f"Status changed to {new_status.value}",
            description=reason,
            old_value=old_status,
            new_value=new_status.value,
            user_id=user_id,
        )

        logger.info(
            f"Order {order.internal_order_number}: {old_status} -> {new_status.value}",
            extra={
                "order_id": order.id,
                "old_status": old_status,
                "new_status": new_status.value,
                "automatic": automatic,
            },
        )
        return order


# Singleton instance
order_status_service = OrderStatusService()
