"""
Production Service

Production records are batch manufacturing instructions for an order.

Business rules:
- A full record covers every line; once one exists no further records can
  be created for the order
- Partial records select quantities per line; together they may never
  exceed what is left to produce
- Numbers run 1, 2, 3 ... per order and are assigned under the order lock
- Status moves one step at a time: pending -> in_production -> completed
- Completed records cannot be deleted
"""
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from sunkool.core.settings import settings
from sunkool.core.status_config import (
    DELETABLE_PRODUCTION_STATUSES,
    ProductionStatus,
    ProductionType,
    validate_production_transition,
)
from sunkool.db.session import atomic
from sunkool.exceptions import (
    ExceedsRemainingToProduceError,
    FullProductionAlreadyExistsError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from sunkool.logging_config import get_logger
from sunkool.models.order import OrderItem
from sunkool.models.production_record import ProductionRecord
from sunkool.services import quantity_ledger
from sunkool.services.event_service import record_order_event
from sunkool.services.order_helpers import get_order_or_404, lock_order

logger = get_logger(__name__)


def _get_record_or_404(db: Session, record_id: int) -> ProductionRecord:
    record = db.query(ProductionRecord).filter(ProductionRecord.id == record_id).first()
    if not record:
        raise NotFoundError("Production record", record_id)
    return record


def _validate_selection(
    db: Session,
    order_items: Dict[int, OrderItem],
    selected_quantities: Optional[Dict[int, int]],
) -> Dict[str, int]:
    """Check a partial selection and return it keyed by string ids for storage."""
    if not selected_quantities:
        raise ValidationError(
            "Select at least one item for a partial production record",
            field="selected_quantities",
        )

    selection: Dict[str, int] = {}
    for raw_id, quantity in selected_quantities.items():
        order_item_id = int(raw_id)
        order_item = order_items.get(order_item_id)
        if order_item is None:
            raise NotFoundError("Order item", order_item_id)
        if quantity is None or quantity <= 0:
            raise ValidationError(
                "Production quantity must be greater than 0",
                field="selected_quantities",
                value=quantity,
                details={"order_item_id": str(order_item_id)},
            )
        quantity_ledger.validate_production_quantity(db, order_item, quantity)
        selection[str(order_item_id)] = quantity
    return selection


def create_production_record(
    db: Session,
    order_id: int,
    production_type: str,
    selected_quantities: Optional[Dict[int, int]] = None,
    pdf_file_name: Optional[str] = None,
    pdf_file_url: Optional[str] = None,
    pdf_file_size: Optional[int] = None,
    created_by: Optional[int] = None,
) -> ProductionRecord:
    """
    Create the next production record for an order.

    Args:
        db: Database session
        order_id: Order being produced
        production_type: "full" or "partial"
        selected_quantities: {order_item_id: quantity} for partial records
        pdf_file_name / pdf_file_url / pdf_file_size: Document reference from
            the document service

    Raises:
        FullProductionAlreadyExistsError: The order already has a full record
        ExceedsRemainingToProduceError: Selection exceeds what is left, or
            nothing is left for a full record
        ValidationError: Unknown type or empty/non-positive selection
    """
    try:
        kind = ProductionType(production_type)
    except ValueError:
        raise ValidationError(
            "Production type must be 'full' or 'partial'",
            field="production_type",
            value=production_type,
        )

    with atomic(db):
        order = lock_order(db, order_id)

        full_record = (
            db.query(ProductionRecord)
            .filter(
                ProductionRecord.order_id == order.id,
                ProductionRecord.production_type == ProductionType.FULL.value,
            )
            .first()
        )
        if full_record:
            raise FullProductionAlreadyExistsError(order.id, production_number=full_record.production_number)

        order_items = {item.id: item for item in order.items}
        if kind == ProductionType.PARTIAL:
            selection = _validate_selection(db, order_items, selected_quantities)
        else:
            remaining = quantity_ledger.remaining_to_produce_by_item(db, order)
            if not any(remaining.values()):
                raise ExceedsRemainingToProduceError(
                    message="Nothing left to produce for this order",
                    requested=order.total_quantity,
                    remaining=0,
                )
            selection = None

        last_number = (
            db.query(func.max(ProductionRecord.production_number))
            .filter(ProductionRecord.order_id == order.id)
            .scalar()
        )
        record = ProductionRecord(
            order_id=order.id,
            production_number=(last_number or 0) + 1,
            production_type=kind.value,
            selected_quantities=selection,
            status=ProductionStatus.PENDING.value,
            pdf_file_name=pdf_file_name,
            pdf_file_url=pdf_file_url,
            pdf_file_size=pdf_file_size,
            created_by=created_by,
        )
        db.add(record)
        db.flush()

        record_order_event(
            db,
            order_id=order.id,
            event_type="production_created",
            title=f"Production record {record.production_code} created",
            new_value=kind.value,
            user_id=created_by,
        )

    db.refresh(record)
    logger.info(
        f"Production record {record.production_code} created",
        extra={
            "order_id": order_id,
            "production_record_id": record.id,
            "production_number": record.production_number,
            "production_type": kind.value,
        },
    )
    return record


def update_production_record_status(
    db: Session,
    record_id: int,
    status: str,
    user_id: Optional[int] = None,
) -> ProductionRecord:
    """
    Advance a production record one step.

    Completing a record assigns the order an invoice number when it has none.
    """
    try:
        target = ProductionStatus(status)
    except ValueError:
        raise ValidationError(
            f"Invalid production status '{status}'",
            field="status",
            value=status,
        )

    record = _get_record_or_404(db, record_id)
    with atomic(db):
        order = lock_order(db, record.order_id)
        db.refresh(record)

        old_status = record.status
        validate_production_transition(old_status, target.value)
        record.status = target.value

        if target == ProductionStatus.COMPLETED and not order.invoice_number:
            order.invoice_number = f"{settings.INVOICE_NUMBER_PREFIX}{order.internal_order_number}"

        record_order_event(
            db,
            order_id=order.id,
            event_type="production_status",
            title=f"Production record {record.production_code} {target.value.replace('_', ' ')}",
            old_value=old_status,
            new_value=target.value,
            user_id=user_id,
        )

    db.refresh(record)
    logger.info(
        f"Production record {record.production_code}: {old_status} -> {target.value}",
        extra={"production_record_id": record.id, "order_id": record.order_id},
    )
    return record


def delete_production_record(db: Session, record_id: int) -> int:
    """Delete a record that is not completed yet. Returns the order id."""
    record = _get_record_or_404(db, record_id)
    with atomic(db):
        lock_order(db, record.order_id)
        db.refresh(record)
        if record.status not in DELETABLE_PRODUCTION_STATUSES:
            raise InvalidStateError(
                "Completed production records cannot be deleted",
                current_state=record.status,
                allowed_states=[s.value for s in ProductionStatus if s in DELETABLE_PRODUCTION_STATUSES],
            )
        order_id = record.order_id
        db.delete(record)

    logger.info(
        "Production record deleted",
        extra={"production_record_id": record_id, "order_id": order_id},
    )
    return order_id


def list_production_records(db: Session, order_id: int) -> List[ProductionRecord]:
    get_order_or_404(db, order_id)
    return (
        db.query(ProductionRecord)
        .filter(ProductionRecord.order_id == order_id)
        .order_by(ProductionRecord.production_number.asc())
        .all()
    )


def remaining_for_order(db: Session, order_id: int) -> Dict[int, int]:
    """{order_item_id: remaining_to_produce} for every line of the order."""
    order = get_order_or_404(db, order_id)
    return quantity_ledger.remaining_to_produce_by_item(db, order)
