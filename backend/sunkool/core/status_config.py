"""Status Configuration and Transition Rules

This module defines valid status values and allowed transitions for
Orders, Dispatches and Production Records. Status transitions are validated
to prevent invalid state changes.
"""
from enum import Enum
from typing import Dict, List, Set

from sunkool.exceptions import InvalidTransitionError, ValidationError


# =============================================================================
# Order Status
# =============================================================================

class OrderStatus(str, Enum):
    """Valid status values for Orders"""
    PENDING = "Pending"
    APPROVED = "Approved"
    IN_PRODUCTION = "In Production"
    PARTIAL_DISPATCH = "Partial Dispatch"
    DISPATCHED = "Dispatched"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


# Allowed manual transitions: current_status -> set of allowed next statuses
ORDER_STATUS_TRANSITIONS: Dict[str, Set[str]] = {
    OrderStatus.PENDING: {
        OrderStatus.APPROVED,
        OrderStatus.CANCELLED,
    },
    OrderStatus.APPROVED: {
        OrderStatus.IN_PRODUCTION,
        OrderStatus.PENDING,
        OrderStatus.CANCELLED,
    },
    OrderStatus.IN_PRODUCTION: {
        OrderStatus.PARTIAL_DISPATCH,
        OrderStatus.DISPATCHED,
        OrderStatus.APPROVED,
        OrderStatus.CANCELLED,
    },
    OrderStatus.PARTIAL_DISPATCH: {
        OrderStatus.IN_PRODUCTION,
        OrderStatus.DISPATCHED,
        OrderStatus.CANCELLED,
    },
    OrderStatus.DISPATCHED: {
        OrderStatus.DELIVERED,
        OrderStatus.PARTIAL_DISPATCH,
        OrderStatus.CANCELLED,
    },
    OrderStatus.DELIVERED: {
        OrderStatus.CANCELLED,
    },
    OrderStatus.CANCELLED: set(),  # Terminal
}

# Payment may only be recorded once goods have left the building
DISPATCHED_ORDER_STATUSES: Set[str] = {
    OrderStatus.PARTIAL_DISPATCH,
    OrderStatus.DISPATCHED,
    OrderStatus.DELIVERED,
}


def get_allowed_order_transitions(current_status: str) -> List[str]:
    """Get allowed next statuses for an order, in table order"""
    allowed = ORDER_STATUS_TRANSITIONS.get(current_status, set())
    return [s.value for s in OrderStatus if s in allowed]


def is_valid_order_transition(current_status: str, new_status: str) -> bool:
    """Check if a manual order status transition is valid"""
    allowed = ORDER_STATUS_TRANSITIONS.get(current_status, set())
    return new_status in allowed


def parse_order_status(value: str) -> OrderStatus:
    """Reject any status outside the known set at the boundary"""
    try:
        return OrderStatus(value)
    except ValueError:
        raise ValidationError(
            f"Unknown order status '{value}'. Valid values: "
            f"{', '.join(s.value for s in OrderStatus)}",
            field="order_status",
            value=value,
        )


# =============================================================================
# Payment Status
# =============================================================================

class PaymentStatus(str, Enum):
    """Stored payment status values for Orders"""
    PENDING = "Pending"
    PARTIAL = "Partial"
    PAID = "Paid"


class PaymentUpdate(str, Enum):
    """Payment status values accepted from callers"""
    COMPLETE = "complete"
    PARTIAL = "partial"
    PENDING = "pending"


PAYMENT_UPDATE_TO_STATUS: Dict[str, PaymentStatus] = {
    PaymentUpdate.COMPLETE: PaymentStatus.PAID,
    PaymentUpdate.PARTIAL: PaymentStatus.PARTIAL,
    PaymentUpdate.PENDING: PaymentStatus.PENDING,
}


# =============================================================================
# Dispatch Type & Shipment Status
# =============================================================================

class DispatchType(str, Enum):
    """Valid dispatch types"""
    FULL = "full"
    PARTIAL = "partial"
    RETURN = "return"


class ShipmentStatus(str, Enum):
    """Valid shipment status values for Dispatches"""
    READY = "ready"
    PICKED_UP = "picked_up"
    DELIVERED = "delivered"
    RETURNED = "returned"  # Set on return dispatches only


SHIPMENT_STATUS_TRANSITIONS: Dict[str, Set[str]] = {
    ShipmentStatus.READY: {
        ShipmentStatus.PICKED_UP,
        ShipmentStatus.DELIVERED,
    },
    ShipmentStatus.PICKED_UP: {
        ShipmentStatus.DELIVERED,
    },
    ShipmentStatus.DELIVERED: set(),  # Terminal
    ShipmentStatus.RETURNED: set(),  # Terminal
}


def is_valid_shipment_transition(current_status: str, new_status: str) -> bool:
    """Shipment status only moves forward"""
    if current_status == new_status:
        return True
    return new_status in SHIPMENT_STATUS_TRANSITIONS.get(current_status, set())


# =============================================================================
# Production Record Type & Status
# =============================================================================

class ProductionType(str, Enum):
    """Valid production record types"""
    FULL = "full"
    PARTIAL = "partial"


class ProductionStatus(str, Enum):
    """Valid status values for Production Records"""
    PENDING = "pending"
    IN_PRODUCTION = "in_production"
    COMPLETED = "completed"


PRODUCTION_STATUS_TRANSITIONS: Dict[str, Set[str]] = {
    ProductionStatus.PENDING: {ProductionStatus.IN_PRODUCTION},
    ProductionStatus.IN_PRODUCTION: {ProductionStatus.COMPLETED},
    ProductionStatus.COMPLETED: set(),  # Terminal
}

DELETABLE_PRODUCTION_STATUSES: Set[str] = {
    ProductionStatus.PENDING,
    ProductionStatus.IN_PRODUCTION,
}


def is_valid_production_transition(current_status: str, new_status: str) -> bool:
    """Production records advance one step at a time"""
    return new_status in PRODUCTION_STATUS_TRANSITIONS.get(current_status, set())


# =============================================================================
# Validation Helpers
# =============================================================================

def validate_order_transition(current: str, new: str) -> None:
    """Validate and raise error if a manual order transition is invalid"""
    if not is_valid_order_transition(current, new):
        raise InvalidTransitionError(
            "order", current, new, get_allowed_order_transitions(current)
        )


def validate_shipment_transition(current: str, new: str) -> None:
    """Validate and raise error if a shipment status would move backwards"""
    if not is_valid_shipment_transition(current, new):
        allowed = [s.value for s in ShipmentStatus if s in SHIPMENT_STATUS_TRANSITIONS.get(current, set())]
        raise InvalidTransitionError("shipment", current, new, allowed)


def validate_production_transition(current: str, new: str) -> None:
    """Validate and raise error if a production record transition is invalid"""
    if not is_valid_production_transition(current, new):
        allowed = [s.value for s in ProductionStatus if s in PRODUCTION_STATUS_TRANSITIONS.get(current, set())]
        raise InvalidTransitionError("production record", current, new, allowed)
