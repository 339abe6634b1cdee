"""
Quantity Ledger

Cumulative dispatch and production figures per order line, and the checks
that keep them inside the ordered quantity.

All figures are read from persisted rows. Callers that validate before a
write must hold the order lock (see order_helpers.lock_order) and flush any
pending rows first.

Rules:
- dispatched_net = signed sum of dispatch item quantities (returns are negative)
- 0 <= dispatched_net <= ordered quantity, always
- produced_net = full records count the whole line, partial records their
  selected quantity; capped at the ordered quantity
"""
from typing import Dict, List

from sqlalchemy import func
from sqlalchemy.orm import Session

from sunkool.core.status_config import DispatchType, ProductionType
from sunkool.exceptions import (
    ExceedsDispatchedQuantityError,
    ExceedsOrderedQuantityError,
    ExceedsRemainingToProduceError,
    ItemHasDispatchesError,
    QuantityBelowDispatchedError,
)
from sunkool.models.dispatch import Dispatch, DispatchItem
from sunkool.models.order import Order, OrderItem
from sunkool.models.production_record import ProductionRecord


# =============================================================================
# Dispatch figures
# =============================================================================

def dispatched_net(db: Session, order_item_id: int) -> int:
    """Net quantity with the customer: forward dispatches minus returns."""
    total = (
        db.query(func.coalesce(func.sum(DispatchItem.quantity), 0))
        .filter(DispatchItem.order_item_id == order_item_id)
        .scalar()
    )
    return int(total or 0)


def dispatched_net_by_item(db: Session, order_id: int) -> Dict[int, int]:
    """dispatched_net for every line of an order in one query"""
    rows = (
        db.query(DispatchItem.order_item_id, func.sum(DispatchItem.quantity))
        .join(Dispatch, Dispatch.id == DispatchItem.dispatch_id)
        .filter(Dispatch.order_id == order_id, DispatchItem.order_item_id.isnot(None))
        .group_by(DispatchItem.order_item_id)
        .all()
    )
    return {order_item_id: int(total or 0) for order_item_id, total in rows}


def remaining_to_dispatch(db: Session, order_item: OrderItem) -> int:
    return order_item.quantity - dispatched_net(db, order_item.id)


def forward_dispatched_total(db: Session, order_id: int) -> int:
    """Units shipped to the current lines of an order by non-return dispatches"""
    total = (
        db.query(func.coalesce(func.sum(DispatchItem.quantity), 0))
        .join(Dispatch, Dispatch.id == DispatchItem.dispatch_id)
        .filter(
            Dispatch.order_id == order_id,
            Dispatch.dispatch_type != DispatchType.RETURN.value,
            DispatchItem.order_item_id.isnot(None),
        )
        .scalar()
    )
    return int(total or 0)


# =============================================================================
# Production figures
# =============================================================================

def _produced_from_records(order_item: OrderItem, records: List[ProductionRecord]) -> int:
    produced = 0
    for record in records:
        if record.production_type == ProductionType.FULL.value:
            produced += order_item.quantity
        else:
            produced += record.selected_quantity_for(order_item.id)
    return min(produced, order_item.quantity)


def _order_records(db: Session, order_id: int) -> List[ProductionRecord]:
    return db.query(ProductionRecord).filter(ProductionRecord.order_id == order_id).all()


def produced_net(db: Session, order_item: OrderItem) -> int:
    return _produced_from_records(order_item, _order_records(db, order_item.order_id))


def remaining_to_produce(db: Session, order_item: OrderItem) -> int:
    return max(order_item.quantity - produced_net(db, order_item), 0)


def remaining_to_produce_by_item(db: Session, order: Order) -> Dict[int, int]:
    """{order_item_id: remaining_to_produce} for every line of an order"""
    records = _order_records(db, order.id)
    return {
        item.id: max(item.quantity - _produced_from_records(item, records), 0)
        for item in order.items
    }


def order_line_balances(db: Session, order: Order) -> List[dict]:
    """Per-line summary of ordered, dispatched and produced quantities."""
    dispatched = dispatched_net_by_item(db, order.id)
    records = _order_records(db, order.id)
    balances = []
    for item in order.items:
        net = dispatched.get(item.id, 0)
        produced = _produced_from_records(item, records)
        balances.append({
            "order_item_id": item.id,
            "inventory_item_id": item.inventory_item_id,
            "item_name": item.inventory_item.item_name if item.inventory_item else None,
            "ordered_quantity": item.quantity,
            "dispatched_quantity": net,
            "remaining_quantity": item.quantity - net,
            "produced_quantity": produced,
            "remaining_to_produce": max(item.quantity - produced, 0),
        })
    return balances


# =============================================================================
# Validation
# =============================================================================

def validate_quantity_change(db: Session, order_item: OrderItem, new_quantity: int) -> None:
    """A line may never be reduced below what has already been dispatched."""
    net = dispatched_net(db, order_item.id)
    if new_quantity < net:
        raise QuantityBelowDispatchedError(order_item.id, requested=new_quantity, dispatched=net)


def validate_item_removal(db: Session, order_item: OrderItem) -> None:
    net = dispatched_net(db, order_item.id)
    if net > 0:
        raise ItemHasDispatchesError(order_item.id, dispatched=net)


def validate_dispatch_quantity(db: Session, order_item: OrderItem, quantity: int, pending: int = 0) -> int:
    """
    Check a forward dispatch line against the ordered quantity.

    Args:
        pending: Units for the same line already accepted earlier in the
            same request but not yet written

    Returns:
        The cumulative figure the line was checked against
    """
    already = dispatched_net(db, order_item.id) + pending
    if already + quantity > order_item.quantity:
        raise ExceedsOrderedQuantityError(
            order_item.id,
            requested=quantity,
            already_dispatched=already,
            ordered=order_item.quantity,
        )
    return already


def validate_return_quantity(db: Session, order_item: OrderItem, quantity: int, pending: int = 0) -> int:
    """A return may not take back more than is currently with the customer."""
    available = dispatched_net(db, order_item.id) - pending
    if quantity > available:
        raise ExceedsDispatchedQuantityError(order_item.id, requested=quantity, dispatched=available)
    return available


def validate_production_quantity(db: Session, order_item: OrderItem, quantity: int) -> int:
    remaining = remaining_to_produce(db, order_item)
    if quantity > remaining:
        raise ExceedsRemainingToProduceError(order_item.id, requested=quantity, remaining=remaining)
    return remaining
