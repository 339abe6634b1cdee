"""
Order Service

Order creation, order lines and order-level reads.

Line edits go through the quantity ledger: a line can never be reduced
below, or removed while holding, units that are already with the customer.
"""
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from sunkool.core.status_config import OrderStatus, PaymentStatus
from sunkool.db.session import atomic
from sunkool.exceptions import AuthenticationError, NotFoundError, ValidationError
from sunkool.logging_config import get_logger
from sunkool.models.catalog import Customer, InventoryItem
from sunkool.models.dispatch import Dispatch, DispatchItem
from sunkool.models.order import Order, OrderItem
from sunkool.services import quantity_ledger
from sunkool.services.event_service import record_order_event
from sunkool.services.order_helpers import (
    get_order_item_or_404,
    get_order_or_404,
    lock_order,
    recalculate_order_total,
)
from sunkool.services.order_numbering import reserve_order_number
from sunkool.services.order_status import order_status_service
from sunkool.services.payment_service import schedule_payment_followups

logger = get_logger(__name__)


def _get_active_customer(db: Session, customer_id: int) -> Customer:
    customer = (
        db.query(Customer)
        .filter(Customer.id == customer_id, Customer.is_active.is_(True))
        .first()
    )
    if not customer:
        raise NotFoundError("Customer", customer_id)
    return customer


def _validate_quantity(quantity: int) -> None:
    if quantity is None or quantity <= 0:
        raise ValidationError("Quantity must be greater than 0", field="quantity", value=quantity)


# =============================================================================
# Orders
# =============================================================================

def create_order(
    db: Session,
    customer_id: int,
    sales_order_number: Optional[str] = None,
    cash_discount: bool = False,
    created_by: Optional[int] = None,
) -> Order:
    """
    Create an order with the next internal order number.

    The order starts Pending with payment Pending and a zero total. For
    cash-discount orders the follow-up calendar is generated after the order
    is committed; a failure there is logged and does not fail the order.

    Raises:
        AuthenticationError: No acting user
        NotFoundError: Customer missing or inactive
    """
    if created_by is None:
        raise AuthenticationError()

    with atomic(db):
        _get_active_customer(db, customer_id)
        order_number = reserve_order_number(db)
        order = Order(
            customer_id=customer_id,
            internal_order_number=order_number,
            sales_order_number=sales_order_number or None,
            cash_discount=cash_discount,
            order_status=OrderStatus.PENDING.value,
            payment_status=PaymentStatus.PENDING.value,
            total_price=0,
            created_by=created_by,
        )
        db.add(order)
        db.flush()
        record_order_event(
            db,
            order_id=order.id,
            event_type="created",
            title=f"Order {order_number} created",
            new_value=OrderStatus.PENDING.value,
            user_id=created_by,
        )

    db.refresh(order)
    logger.info(
        f"Order {order.internal_order_number} created",
        extra={
            "order_id": order.id,
            "customer_id": customer_id,
            "cash_discount": cash_discount,
            "created_by": created_by,
        },
    )

    if order.cash_discount:
        try:
            with atomic(db):
                schedule_payment_followups(db, order, start=order.created_at.date())
        except SQLAlchemyError as e:
            logger.error(
                "Failed to create payment follow-ups",
                extra={"order_id": order.id, "error": str(e)},
            )

    return order


def get_order_details(db: Session, order_id: int) -> Order:
    """Order with customer, lines and their inventory items loaded."""
    order = (
        db.query(Order)
        .options(
            joinedload(Order.customer),
            joinedload(Order.items).joinedload(OrderItem.inventory_item),
        )
        .filter(Order.id == order_id)
        .first()
    )
    if not order:
        raise NotFoundError("Order", order_id)
    return order


def list_orders(
    db: Session,
    order_status: Optional[str] = None,
    payment_status: Optional[str] = None,
    customer_id: Optional[int] = None,
    skip: int = 0,
    limit: int = 100,
) -> List[Order]:
    """Orders newest first, optionally filtered."""
    query = db.query(Order).options(joinedload(Order.customer))
    if order_status:
        query = query.filter(Order.order_status == order_status)
    if payment_status:
        query = query.filter(Order.payment_status == payment_status)
    if customer_id:
        query = query.filter(Order.customer_id == customer_id)
    return (
        query.order_by(Order.created_at.desc(), Order.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )


def update_order(
    db: Session,
    order_id: int,
    *,
    sales_order_number: Optional[str] = None,
    customer_id: Optional[int] = None,
    cash_discount: Optional[bool] = None,
    order_status: Optional[str] = None,
    user_id: Optional[int] = None,
) -> Order:
    """
    Update order header fields.

    A status change is validated against the manual transition table.
    The internal order number is never changed.
    """
    with atomic(db):
        order = lock_order(db, order_id)

        if order_status is not None:
            order_status_service.transition(db, order, order_status, user_id=user_id)
        if sales_order_number is not None:
            order.sales_order_number = sales_order_number or None
        if customer_id is not None and customer_id != order.customer_id:
            _get_active_customer(db, customer_id)
            order.customer_id = customer_id
        if cash_discount is not None:
            order.cash_discount = cash_discount

    db.refresh(order)
    return order


def update_order_status(db: Session, order_id: int, new_status: str, user_id: Optional[int] = None) -> Order:
    """Manual status change, validated against the transition table."""
    with atomic(db):
        order = lock_order(db, order_id)
        order_status_service.transition(db, order, new_status, user_id=user_id)

    db.refresh(order)
    return order


def delete_order(db: Session, order_id: int) -> None:
    """Delete an order, its dispatches first and then everything it owns."""
    with atomic(db):
        order = lock_order(db, order_id)
        dispatches = db.query(Dispatch).filter(Dispatch.order_id == order.id).all()
        for dispatch in dispatches:
            db.delete(dispatch)
        db.flush()
        db.expire(order, ["dispatches"])
        order_number = order.internal_order_number
        db.delete(order)

    logger.info(
        f"Order {order_number} deleted",
        extra={"order_id": order_id, "dispatches_removed": len(dispatches)},
    )


# =============================================================================
# Order lines
# =============================================================================

def add_item_to_order(
    db: Session,
    order_id: int,
    inventory_item_id: int,
    quantity: int,
    unit_price=None,
    user_id: Optional[int] = None,
) -> OrderItem:
    """
    Add an inventory item to an order.

    Adding an item that is already on the order increases that line. A
    Pending order moves to Approved once it has items.
    """
    _validate_quantity(quantity)

    with atomic(db):
        inventory_item = db.query(InventoryItem).filter(InventoryItem.id == inventory_item_id).first()
        if not inventory_item:
            raise NotFoundError("Inventory item", inventory_item_id)

        order = lock_order(db, order_id)

        line = (
            db.query(OrderItem)
            .filter(OrderItem.order_id == order.id, OrderItem.inventory_item_id == inventory_item_id)
            .first()
        )
        if line:
            line.quantity += quantity
            if unit_price is not None:
                line.unit_price = unit_price
            event_type = "item_updated"
        else:
            line = OrderItem(
                order_id=order.id,
                inventory_item_id=inventory_item_id,
                quantity=quantity,
                unit_price=unit_price or 0,
            )
            db.add(line)
            event_type = "item_added"
        db.flush()
        db.refresh(order)

        record_order_event(
            db,
            order_id=order.id,
            event_type=event_type,
            title=f"{inventory_item.item_name} x{quantity}",
            new_value=str(line.quantity),
            user_id=user_id,
        )

        if order.order_status == OrderStatus.PENDING.value:
            order_status_service.set_automatic_status(
                db, order, OrderStatus.APPROVED, user_id=user_id, reason="Items added to order"
            )
        recalculate_order_total(order)

    db.refresh(line)
    logger.info(
        "Item added to order",
        extra={"order_id": order_id, "order_item_id": line.id, "quantity": line.quantity},
    )
    return line


def update_item_quantity(
    db: Session,
    order_item_id: int,
    quantity: int,
    user_id: Optional[int] = None,
) -> OrderItem:
    """
    Change the ordered quantity of a line.

    Raises:
        ValidationError: Quantity not positive
        QuantityBelowDispatchedError: Below the net dispatched quantity
    """
    _validate_quantity(quantity)

    item = get_order_item_or_404(db, order_item_id)
    with atomic(db):
        order = lock_order(db, item.order_id)
        db.refresh(item)
        quantity_ledger.validate_quantity_change(db, item, quantity)

        old_quantity = item.quantity
        item.quantity = quantity
        recalculate_order_total(order)
        record_order_event(
            db,
            order_id=order.id,
            event_type="item_updated",
            title="Item quantity changed",
            old_value=str(old_quantity),
            new_value=str(quantity),
            user_id=user_id,
        )

    db.refresh(item)
    logger.info(
        "Order item quantity updated",
        extra={"order_item_id": item.id, "old_quantity": old_quantity, "new_quantity": quantity},
    )
    return item


def remove_item(db: Session, order_item_id: int, user_id: Optional[int] = None) -> int:
    """
    Remove a line from its order. Returns the order id.

    Raises:
        ItemHasDispatchesError: Units are still with the customer; a return
            dispatch has to bring them back first
    """
    item = get_order_item_or_404(db, order_item_id)
    with atomic(db):
        order = lock_order(db, item.order_id)
        quantity_ledger.validate_item_removal(db, item)

        # Dispatch history netting to zero stays; the ORM nulls its line reference
        removed_quantity = item.quantity
        db.delete(item)
        db.flush()
        db.refresh(order)
        recalculate_order_total(order)
        record_order_event(
            db,
            order_id=order.id,
            event_type="item_removed",
            title="Item removed from order",
            old_value=str(removed_quantity),
            user_id=user_id,
        )

    logger.info("Order item removed", extra={"order_id": order.id, "order_item_id": order_item_id})
    return order.id


def get_order_item_dispatch_status(db: Session, order_item_id: int) -> dict:
    """Dispatch history and net dispatched quantity for one line."""
    item = get_order_item_or_404(db, order_item_id)
    rows = (
        db.query(DispatchItem, Dispatch)
        .join(Dispatch, Dispatch.id == DispatchItem.dispatch_id)
        .filter(DispatchItem.order_item_id == item.id)
        .order_by(Dispatch.dispatch_date.asc(), Dispatch.id.asc())
        .all()
    )
    total = sum(dispatch_item.quantity for dispatch_item, _ in rows)
    return {
        "order_item_id": item.id,
        "ordered_quantity": item.quantity,
        "has_been_dispatched": total > 0,
        "total_dispatched": total,
        "remaining_quantity": item.quantity - total,
        "dispatch_count": len(rows),
        "dispatch_details": [
            {
                "dispatch_id": dispatch.id,
                "dispatch_type": dispatch.dispatch_type,
                "dispatch_date": dispatch.dispatch_date,
                "shipment_status": dispatch.shipment_status,
                "quantity": dispatch_item.quantity,
            }
            for dispatch_item, dispatch in rows
        ],
    }


def get_order_balances(db: Session, order_id: int) -> List[dict]:
    order = get_order_or_404(db, order_id)
    return quantity_ledger.order_line_balances(db, order)
