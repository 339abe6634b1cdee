"""
Order Helpers - lookups and locking shared by the order services

Use these helpers instead of repeating `db.query(Order).filter(...).first()`
plus a not-found check in every service.
"""
from decimal import Decimal
from sqlalchemy.orm import Session

from sunkool.exceptions import NotFoundError
from sunkool.models.order import Order, OrderItem


def lock_order(db: Session, order_id: int) -> Order:
    """
    Load an order with SELECT ... FOR UPDATE.

    The row lock is held until the surrounding transaction ends, so every
    quantity check made after this call sees the latest committed ledger and
    concurrent writers for the same order queue behind it.

    Raises:
        NotFoundError: If the order does not exist
    """
    order = (
        db.query(Order)
        .filter(Order.id == order_id)
        .with_for_update()
        .first()
    )
    if not order:
        raise NotFoundError("Order", order_id)
    return order


def get_order_or_404(db: Session, order_id: int) -> Order:
    order = db.query(Order).filter(Order.id == order_id).first()
    if not order:
        raise NotFoundError("Order", order_id)
    return order


def get_order_item_or_404(db: Session, order_item_id: int, order_id: int = None) -> OrderItem:
    """Fetch an order line, optionally requiring it to belong to `order_id`."""
    query = db.query(OrderItem).filter(OrderItem.id == order_item_id)
    if order_id is not None:
        query = query.filter(OrderItem.order_id == order_id)
    item = query.first()
    if not item:
        raise NotFoundError("Order item", order_item_id)
    return item


def recalculate_order_total(order: Order) -> Decimal:
    """Recompute total_price from the order lines and store it on the order."""
    total = sum((Decimal(str(item.unit_price or 0)) * item.quantity for item in order.items), Decimal("0"))
    order.total_price = total
    return total
