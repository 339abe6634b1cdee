"""
Common Response Schemas

Standardized error responses and the operation result envelope used by
callers that prefer a value over an exception.
"""
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from sunkool.exceptions import SunkoolException


# ============================================================================
# Error Response Models
# ============================================================================

class ErrorResponse(BaseModel):
    """
    Standardized error response for all API errors.

    Error Codes:
        - VALIDATION_ERROR / NO_ITEMS_TO_DISPATCH: Bad input (400)
        - NOT_AUTHENTICATED: No acting user (401)
        - NOT_FOUND: Order, item, dispatch or record not found (404)
        - CONCURRENCY_ERROR: Concurrent modification detected (409)
        - INVALID_STATE / INVALID_TRANSITION: Not allowed in the current status (422)
        - QUANTITY_BELOW_DISPATCHED, ITEM_HAS_DISPATCHES, EXCEEDS_ORDERED_QUANTITY,
          EXCEEDS_DISPATCHED_QUANTITY, EXCEEDS_REMAINING_TO_PRODUCE,
          FULL_PRODUCTION_ALREADY_EXISTS, PAYMENT_REQUIRES_DISPATCH: Ledger rules (422)
        - DATABASE_ERROR / INTERNAL_ERROR: Unexpected failure (500)

    Example:
        {
            "error": "EXCEEDS_ORDERED_QUANTITY",
            "message": "Cannot dispatch 4 units for this item. Already dispatched: 7, ...",
            "details": {"order_item_id": "12", "requested": 4, "already_dispatched": 7, "ordered": 10},
            "timestamp": "2026-03-02T10:30:00Z"
        }
    """
    error: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error context")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="When the error occurred (UTC)")


class MessageResponse(BaseModel):
    """Simple message response for deletes and similar operations."""
    message: str = Field(..., description="Operation result message")


class StatusResponse(BaseModel):
    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(default_factory=datetime.utcnow)


# ============================================================================
# Operation Result Envelope
# ============================================================================

class OperationResult(BaseModel):
    """
    Uniform result of a service operation.

    ok=True carries the operation's return value in `data`; ok=False carries
    the error code, message and details of the domain error that stopped it.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    ok: bool
    data: Any = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def success(cls, data: Any = None) -> "OperationResult":
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, exc: SunkoolException) -> "OperationResult":
        return cls(ok=False, error=exc.message, error_code=exc.error_code, details=dict(exc.details))


def run_operation(fn: Callable[..., Any], *args, **kwargs) -> OperationResult:
    """
    Call a service function and wrap the outcome.

    Domain errors become failure results with their own error code. Anything
    else (database errors, bugs) propagates unchanged.

    Usage:
        result = run_operation(dispatch_service.create_dispatch, db, order_id, "partial", lines)
        if not result.ok:
            show(result.error)
    """
    try:
        return OperationResult.success(fn(*args, **kwargs))
    except SunkoolException as e:
        return OperationResult.failure(e)
