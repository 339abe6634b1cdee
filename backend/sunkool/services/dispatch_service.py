"""
Dispatch Service

Creates forward dispatches and returns against the quantity ledger and keeps
the order status in step with what has been shipped.

Each operation is one unit of work: the order row is locked first, every
line is validated against the current cumulative figures, then the header,
its items and the resulting status change are committed together. Any
failure leaves no dispatch rows behind.
"""
from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session, joinedload, selectinload

from sunkool.core.status_config import (
    DispatchType,
    OrderStatus,
    ShipmentStatus,
    validate_shipment_transition,
)
from sunkool.db.session import atomic
from sunkool.exceptions import (
    InvalidStateError,
    NoItemsToDispatchError,
    NotFoundError,
    ValidationError,
)
from sunkool.logging_config import get_logger
from sunkool.models.dispatch import Dispatch, DispatchItem
from sunkool.models.order import Order, OrderItem
from sunkool.models.production_record import ProductionRecord
from sunkool.schemas.dispatch import DispatchLine
from sunkool.services import quantity_ledger
from sunkool.services.event_service import record_order_event
from sunkool.services.order_helpers import get_order_or_404, lock_order
from sunkool.services.order_status import order_status_service

logger = get_logger(__name__)


def _order_lines(db: Session, order: Order) -> Dict[int, OrderItem]:
    items = db.query(OrderItem).filter(OrderItem.order_id == order.id).all()
    return {item.id: item for item in items}


def _resolve_line(order_items: Dict[int, OrderItem], line: DispatchLine) -> OrderItem:
    order_item = order_items.get(line.order_item_id)
    if order_item is None:
        raise NotFoundError("Order item", line.order_item_id)
    if line.quantity is None or line.quantity <= 0:
        raise ValidationError(
            "Dispatch quantity must be greater than 0",
            field="quantity",
            value=line.quantity,
            details={"order_item_id": str(line.order_item_id)},
        )
    return order_item


def _dispatched_status(db: Session, order: Order, dispatch_type: DispatchType) -> OrderStatus:
    """Order status after a forward dispatch has been written (and flushed)."""
    if dispatch_type == DispatchType.FULL:
        return OrderStatus.DISPATCHED

    total_ordered = sum(item.quantity for item in order.items)
    total_dispatched = quantity_ledger.forward_dispatched_total(db, order.id)
    if total_dispatched >= total_ordered:
        return OrderStatus.DISPATCHED
    return OrderStatus.PARTIAL_DISPATCH


def create_dispatch(
    db: Session,
    order_id: int,
    dispatch_type: str,
    lines: Iterable[DispatchLine],
    notes: Optional[str] = None,
    courier_company_id: Optional[int] = None,
    tracking_id: Optional[str] = None,
    production_record_id: Optional[int] = None,
    dispatch_date: Optional[date] = None,
    created_by: Optional[int] = None,
) -> Dispatch:
    """
    Create a full or partial dispatch.

    Args:
        db: Database session
        order_id: Order being shipped
        dispatch_type: "full" or "partial"
        lines: Order item ids and quantities to ship
        production_record_id: Production batch the goods came from (optional)

    Returns:
        The committed Dispatch with its items

    Raises:
        NoItemsToDispatchError: No lines given
        NotFoundError: Order, order item or production record not found
        ValidationError: Bad dispatch type or non-positive quantity
        ExceedsOrderedQuantityError: A line would ship more than was ordered
    """
    lines = list(lines or [])
    if not lines:
        raise NoItemsToDispatchError()

    try:
        kind = DispatchType(dispatch_type)
    except ValueError:
        kind = None
    if kind not in (DispatchType.FULL, DispatchType.PARTIAL):
        raise ValidationError(
            "Dispatch type must be 'full' or 'partial'",
            field="dispatch_type",
            value=dispatch_type,
        )

    with atomic(db):
        order = lock_order(db, order_id)
        order_items = _order_lines(db, order)

        if production_record_id is not None:
            record = (
                db.query(ProductionRecord)
                .filter(ProductionRecord.id == production_record_id, ProductionRecord.order_id == order.id)
                .first()
            )
            if not record:
                raise NotFoundError("Production record", production_record_id)

        # Lines for the same item in one request are checked cumulatively
        pending: Dict[int, int] = defaultdict(int)
        for line in lines:
            order_item = _resolve_line(order_items, line)
            quantity_ledger.validate_dispatch_quantity(
                db, order_item, line.quantity, pending=pending[order_item.id]
            )
            pending[order_item.id] += line.quantity

        dispatch = Dispatch(
            order_id=order.id,
            dispatch_type=kind.value,
            dispatch_date=dispatch_date or date.today(),
            shipment_status=ShipmentStatus.READY.value,
            courier_company_id=courier_company_id,
            tracking_id=tracking_id or None,
            production_record_id=production_record_id,
            notes=notes or None,
            created_by=created_by,
        )
        for line in lines:
            dispatch.items.append(
                DispatchItem(
                    order_item_id=line.order_item_id,
                    inventory_item_id=order_items[line.order_item_id].inventory_item_id,
                    quantity=line.quantity,
                )
            )
        db.add(dispatch)
        db.flush()

        total = sum(line.quantity for line in lines)
        record_order_event(
            db,
            order_id=order.id,
            event_type="dispatched",
            title=f"{kind.value.capitalize()} dispatch of {total} units",
            description=notes,
            user_id=created_by,
        )

        new_status = _dispatched_status(db, order, kind)
        order_status_service.set_automatic_status(
            db, order, new_status, user_id=created_by, reason=f"Dispatch #{dispatch.id}"
        )

    db.refresh(dispatch)
    logger.info(
        "Dispatch created",
        extra={
            "dispatch_id": dispatch.id,
            "order_id": order_id,
            "dispatch_type": kind.value,
            "line_count": len(lines),
            "quantity": total,
            "order_status": new_status.value,
        },
    )
    return dispatch


def create_return_dispatch(
    db: Session,
    order_id: int,
    lines: Iterable[DispatchLine],
    notes: Optional[str] = None,
    created_by: Optional[int] = None,
) -> Dispatch:
    """
    Record goods coming back from the customer.

    Return items are stored with negative quantities. The order status is
    left as it is.

    Raises:
        NoItemsToDispatchError: No lines given
        ExceedsDispatchedQuantityError: Returning more than is with the customer
    """
    lines = list(lines or [])
    if not lines:
        raise NoItemsToDispatchError("No items to return")

    with atomic(db):
        order = lock_order(db, order_id)
        order_items = _order_lines(db, order)

        pending: Dict[int, int] = defaultdict(int)
        for line in lines:
            order_item = _resolve_line(order_items, line)
            quantity_ledger.validate_return_quantity(
                db, order_item, line.quantity, pending=pending[order_item.id]
            )
            pending[order_item.id] += line.quantity

        dispatch = Dispatch(
            order_id=order.id,
            dispatch_type=DispatchType.RETURN.value,
            dispatch_date=date.today(),
            shipment_status=ShipmentStatus.RETURNED.value,
            notes=notes or "Return dispatch",
            created_by=created_by,
        )
        for line in lines:
            dispatch.items.append(
                DispatchItem(
                    order_item_id=line.order_item_id,
                    inventory_item_id=order_items[line.order_item_id].inventory_item_id,
                    quantity=-line.quantity,
                )
            )
        db.add(dispatch)
        db.flush()

        total = sum(line.quantity for line in lines)
        record_order_event(
            db,
            order_id=order.id,
            event_type="returned",
            title=f"Return of {total} units",
            description=notes,
            user_id=created_by,
        )

    db.refresh(dispatch)
    logger.info(
        "Return dispatch created",
        extra={"dispatch_id": dispatch.id, "order_id": order_id, "quantity": total},
    )
    return dispatch


def update_dispatch_status(
    db: Session,
    dispatch_id: int,
    status: str,
    user_id: Optional[int] = None,
) -> Dispatch:
    """
    Move a shipment forward (ready -> picked_up -> delivered).

    When the last forward dispatch of an order is delivered the order itself
    becomes Delivered, unless it has been cancelled.

    Raises:
        NotFoundError: Dispatch not found
        ValidationError: Unknown status
        InvalidStateError: The dispatch is a return
        InvalidTransitionError: The status would move backwards
    """
    try:
        target = ShipmentStatus(status)
    except ValueError:
        target = None
    if target is None or target == ShipmentStatus.RETURNED:
        raise ValidationError(
            "Shipment status must be one of: ready, picked_up, delivered",
            field="status",
            value=status,
        )

    dispatch = db.query(Dispatch).filter(Dispatch.id == dispatch_id).first()
    if not dispatch:
        raise NotFoundError("Dispatch", dispatch_id)

    with atomic(db):
        order = lock_order(db, dispatch.order_id)
        db.refresh(dispatch)

        if dispatch.is_return:
            raise InvalidStateError(
                "Return dispatches have no shipment status to update",
                current_state=dispatch.shipment_status,
            )

        old_status = dispatch.shipment_status
        if old_status == target.value:
            return dispatch
        validate_shipment_transition(old_status, target.value)

        dispatch.shipment_status = target.value
        db.flush()

        record_order_event(
            db,
            order_id=order.id,
            event_type="shipment_status",
            title=f"Dispatch #{dispatch.id} {target.value.replace('_', ' ')}",
            old_value=old_status,
            new_value=target.value,
            user_id=user_id,
        )

        if target == ShipmentStatus.DELIVERED and order.order_status != OrderStatus.CANCELLED.value:
            undelivered = (
                db.query(Dispatch.id)
                .filter(
                    Dispatch.order_id == order.id,
                    Dispatch.dispatch_type != DispatchType.RETURN.value,
                    Dispatch.shipment_status != ShipmentStatus.DELIVERED.value,
                )
                .first()
            )
            if undelivered is None:
                order_status_service.set_automatic_status(
                    db, order, OrderStatus.DELIVERED, user_id=user_id,
                    reason="All dispatches delivered",
                )

    db.refresh(dispatch)
    logger.info(
        f"Dispatch {dispatch.id}: {old_status} -> {target.value}",
        extra={"dispatch_id": dispatch.id, "order_id": dispatch.order_id},
    )
    return dispatch


def get_dispatch(db: Session, dispatch_id: int) -> Dispatch:
    dispatch = (
        db.query(Dispatch)
        .options(selectinload(Dispatch.items))
        .filter(Dispatch.id == dispatch_id)
        .first()
    )
    if not dispatch:
        raise NotFoundError("Dispatch", dispatch_id)
    return dispatch


def list_order_dispatches(db: Session, order_id: int) -> List[Dispatch]:
    """Dispatches of an order, newest first, with items and production record."""
    get_order_or_404(db, order_id)
    return (
        db.query(Dispatch)
        .options(selectinload(Dispatch.items), joinedload(Dispatch.production_record))
        .filter(Dispatch.order_id == order_id)
        .order_by(Dispatch.dispatch_date.desc(), Dispatch.created_at.desc(), Dispatch.id.desc())
        .all()
    )
