"""
Order Numbering

Internal order numbers look like SK01 ... SK99, SK100 ... The numeric part is
zero-padded while it fits the configured width and printed as-is afterwards.

reserve_order_number() is the write path: it increments a locked counter row
inside the caller's transaction. scan_next_order_number() derives the next
value from the orders table and is only used to seed the counter.
"""
import re
from typing import Iterable, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from sunkool.core.settings import settings
from sunkool.exceptions import ConcurrencyError
from sunkool.logging_config import get_logger
from sunkool.models.order import Order
from sunkool.models.order_number_counter import OrderNumberCounter

logger = get_logger(__name__)


def format_order_number(value: int, prefix: Optional[str] = None, pad_width: Optional[int] = None) -> str:
    """
    Format a sequence value as an order number.

    >>> format_order_number(7)
    'SK07'
    >>> format_order_number(100)
    'SK100'
    """
    prefix = prefix if prefix is not None else settings.ORDER_NUMBER_PREFIX
    pad_width = pad_width or settings.ORDER_NUMBER_PAD_WIDTH
    if value < 10 ** pad_width:
        return f"{prefix}{value:0{pad_width}d}"
    return f"{prefix}{value}"


def parse_order_number(value: Optional[str], prefix: Optional[str] = None) -> Optional[int]:
    """Numeric part of an order number, or None if it is malformed or not positive."""
    if not value:
        return None
    prefix = prefix if prefix is not None else settings.ORDER_NUMBER_PREFIX
    match = re.fullmatch(rf"{re.escape(prefix)}(\d+)", value.strip())
    if not match:
        return None
    number = int(match.group(1))
    return number if number > 0 else None


def next_order_number_from(existing: Iterable[Optional[str]], prefix: Optional[str] = None) -> str:
    """Next order number after the highest valid one in `existing`."""
    numbers = [n for n in (parse_order_number(v, prefix) for v in existing) if n is not None]
    return format_order_number(max(numbers, default=0) + 1, prefix)


def scan_next_order_number(db: Session) -> str:
    """
    Next order number computed from the orders table.

    Falls back to the first sequence value if the table cannot be read.
    """
    try:
        rows = db.query(Order.internal_order_number).all()
    except SQLAlchemyError as e:
        logger.error(
            "Failed to read existing order numbers, falling back to first value",
            extra={"error": str(e)},
        )
        return format_order_number(1)
    return next_order_number_from(row[0] for row in rows)


def reserve_order_number(db: Session) -> str:
    """
    Reserve the next order number.

    Locks the counter row (SELECT ... FOR UPDATE) so concurrent order
    creation serializes here. The reservation becomes durable when the caller
    commits; a rolled back transaction releases the number again.
    """
    prefix = settings.ORDER_NUMBER_PREFIX
    counter = (
        db.query(OrderNumberCounter)
        .filter(OrderNumberCounter.prefix == prefix)
        .with_for_update()
        .first()
    )
    if counter is None:
        seed = parse_order_number(scan_next_order_number(db)) - 1
        counter = OrderNumberCounter(prefix=prefix, last_value=seed)
        db.add(counter)
        try:
            db.flush()
        except IntegrityError:
            # Another transaction seeded the same prefix first
            raise ConcurrencyError(
                "Order number counter was initialised concurrently, retry the request",
                details={"prefix": prefix},
            )
        logger.info("Seeded order number counter", extra={"prefix": prefix, "last_value": seed})

    counter.last_value += 1
    db.flush()
    return format_order_number(counter.last_value)
