"""
Sunkool Orders - Custom Exception Hierarchy

Provides structured, typed exceptions with error codes for consistent
error handling across the order fulfillment core.

Usage:
    from sunkool.exceptions import NotFoundError, ExceedsOrderedQuantityError

    raise NotFoundError("Order", order_id)

    raise ExceedsOrderedQuantityError(
        order_item_id, requested=4, already_dispatched=7, ordered=10
    )
"""
from typing import Any, Dict, List, Optional


class SunkoolException(Exception):
    """
    Base exception for all order fulfillment errors.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code (e.g., "NOT_FOUND", "VALIDATION_ERROR")
        status_code: HTTP status code to return
        details: Additional context for the caller
    """

    error_code: str = "SUNKOOL_ERROR"
    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API response."""
        result = {
            "error": self.error_code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


# ===================
# 400 Bad Request Errors
# ===================


class ValidationError(SunkoolException):
    """Raised when input validation fails."""

    error_code = "VALIDATION_ERROR"
    status_code = 400

    def __init__(
        self,
        message: str = "Validation failed",
        *,
        field: Optional[str] = None,
        value: Any = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        details = details or {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)
        super().__init__(message, details=details)


class NoItemsToDispatchError(ValidationError):
    """Raised when a dispatch or return is submitted without lines."""

    error_code = "NO_ITEMS_TO_DISPATCH"

    def __init__(self, message: str = "No items to dispatch"):
        super().__init__(message, field="lines")


# ===================
# 401 Unauthorized Errors
# ===================


class AuthenticationError(SunkoolException):
    """Raised when the acting user is unknown."""

    error_code = "NOT_AUTHENTICATED"
    status_code = 401

    def __init__(
        self,
        message: str = "User not authenticated",
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details=details)


# ===================
# 404 Not Found Errors
# ===================


class NotFoundError(SunkoolException):
    """Raised when a resource is not found."""

    error_code = "NOT_FOUND"
    status_code = 404

    def __init__(
        self,
        resource: str = "Resource",
        resource_id: Any = None,
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        details = details or {}
        details["resource"] = resource
        if resource_id is not None:
            details["resource_id"] = str(resource_id)
        message = f"{resource} not found"
        if resource_id is not None:
            message = f"{resource} with ID {resource_id} not found"
        super().__init__(message, details=details)


# ===================
# 409 Conflict Errors
# ===================


class ConflictError(SunkoolException):
    """Raised when there's a resource conflict."""

    error_code = "CONFLICT"
    status_code = 409

    def __init__(
        self,
        message: str = "Resource conflict",
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details=details)


class ConcurrencyError(ConflictError):
    """Raised when concurrent modification is detected."""

    error_code = "CONCURRENCY_ERROR"

    def __init__(
        self,
        message: str = "Resource was modified by another user",
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details=details)


# ===================
# 422 Unprocessable Entity Errors
# ===================


class InvalidStateError(SunkoolException):
    """Raised when an operation is invalid for the current state."""

    error_code = "INVALID_STATE"
    status_code = 422

    def __init__(
        self,
        message: str = "Operation not allowed in current state",
        *,
        current_state: Optional[str] = None,
        allowed_states: Optional[list] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        details = details or {}
        if current_state:
            details["current_state"] = current_state
        if allowed_states:
            details["allowed_states"] = allowed_states
        super().__init__(message, details=details)


class InvalidTransitionError(InvalidStateError):
    """Raised when a requested status transition is not in the transition table."""

    error_code = "INVALID_TRANSITION"

    def __init__(self, entity: str, current: str, requested: str, allowed: List[str]):
        self.entity = entity
        self.current = current
        self.requested = requested
        self.allowed = allowed
        super().__init__(
            f"Invalid {entity} status transition: cannot change from \"{current}\" "
            f"to \"{requested}\". Valid next statuses: {', '.join(allowed) if allowed else 'None'}",
            current_state=current,
            details={"entity": entity, "requested": requested, "allowed": list(allowed)},
        )


class BusinessRuleError(SunkoolException):
    """Raised when a business rule is violated."""

    error_code = "BUSINESS_RULE_ERROR"
    status_code = 422

    def __init__(
        self,
        message: str = "Business rule violation",
        *,
        rule: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        details = details or {}
        if rule:
            details["rule"] = rule
        super().__init__(message, details=details)


class QuantityBelowDispatchedError(BusinessRuleError):
    """Raised when an order line would drop below what has already shipped."""

    error_code = "QUANTITY_BELOW_DISPATCHED"

    def __init__(self, order_item_id: Any, *, requested: int, dispatched: int):
        super().__init__(
            f"Cannot reduce quantity to {requested}. Already dispatched: {dispatched} units. "
            f"New quantity must be at least {dispatched}.",
            details={
                "order_item_id": str(order_item_id),
                "requested": requested,
                "dispatched": dispatched,
            },
        )


class ItemHasDispatchesError(BusinessRuleError):
    """Raised when deleting an order line that has net dispatched units."""

    error_code = "ITEM_HAS_DISPATCHES"

    def __init__(self, order_item_id: Any, *, dispatched: int):
        self.dispatched_quantity = dispatched
        super().__init__(
            f"Cannot delete this item - {dispatched} units have already been dispatched. "
            f"To remove this item, first create a return dispatch for the dispatched units, "
            f"then try deleting again.",
            details={
                "order_item_id": str(order_item_id),
                "dispatched_quantity": dispatched,
                "can_create_return": True,
            },
        )


class ExceedsOrderedQuantityError(BusinessRuleError):
    """Raised when a forward dispatch would ship more than was ordered."""

    error_code = "EXCEEDS_ORDERED_QUANTITY"

    def __init__(self, order_item_id: Any, *, requested: int, already_dispatched: int, ordered: int):
        remaining = ordered - already_dispatched
        super().__init__(
            f"Cannot dispatch {requested} units for this item. Already dispatched: "
            f"{already_dispatched}, Order quantity: {ordered}. Remaining available: {remaining}",
            details={
                "order_item_id": str(order_item_id),
                "requested": requested,
                "already_dispatched": already_dispatched,
                "ordered": ordered,
                "remaining": remaining,
            },
        )


class ExceedsDispatchedQuantityError(BusinessRuleError):
    """Raised when a return exceeds what was actually sent."""

    error_code = "EXCEEDS_DISPATCHED_QUANTITY"

    def __init__(self, order_item_id: Any, *, requested: int, dispatched: int):
        super().__init__(
            f"Cannot return {requested} units. Only {dispatched} units were dispatched.",
            details={
                "order_item_id": str(order_item_id),
                "requested": requested,
                "dispatched": dispatched,
            },
        )


class ExceedsRemainingToProduceError(BusinessRuleError):
    """Raised when a production selection exceeds what is left to produce."""

    error_code = "EXCEEDS_REMAINING_TO_PRODUCE"

    def __init__(self, order_item_id: Any = None, *, requested: int = 0, remaining: int = 0,
                 message: Optional[str] = None):
        details: Dict[str, Any] = {"requested": requested, "remaining": remaining}
        if order_item_id is not None:
            details["order_item_id"] = str(order_item_id)
        super().__init__(
            message or (
                f"Cannot produce {requested} units for this item. "
                f"Remaining to produce: {remaining}"
            ),
            details=details,
        )


class FullProductionAlreadyExistsError(BusinessRuleError):
    """Raised when an order already has a full production record."""

    error_code = "FULL_PRODUCTION_ALREADY_EXISTS"

    def __init__(self, order_id: Any, *, production_number: int):
        super().__init__(
            f"A full production record (#{production_number}) already exists for this order. "
            f"No further production records can be created.",
            details={"order_id": str(order_id), "production_number": production_number},
        )


class PaymentRequiresDispatchError(BusinessRuleError):
    """Raised when payment is recorded before goods have been dispatched."""

    error_code = "PAYMENT_REQUIRES_DISPATCH"

    def __init__(self, order_id: Any, *, current_status: str, action: str = "mark order as paid"):
        super().__init__(
            f"Cannot {action}. Order must be dispatched first. Current status: \"{current_status}\"",
            details={"order_id": str(order_id), "current_status": current_status},
        )


# ===================
# 500 Internal Server Errors
# ===================


class DatabaseError(SunkoolException):
    """Raised when a database operation fails."""

    error_code = "DATABASE_ERROR"
    status_code = 500

    def __init__(
        self,
        message: str = "Database operation failed",
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details=details)
