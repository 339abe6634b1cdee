"""
Payment Pydantic Schemas
"""
from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime, date
from decimal import Decimal


# ============================================================================
# Request Schemas
# ============================================================================

class PaymentStatusUpdate(BaseModel):
    """Update the payment status of an order"""
    status: str = Field(..., description="complete, partial or pending")
    paid_amount: Optional[Decimal] = Field(None, ge=0, description="Received so far (partial)")
    remaining_amount: Optional[Decimal] = Field(None, ge=0, description="Still due (partial)")
    payment_date: Optional[date] = None
    invoice_number: Optional[str] = Field(None, max_length=50)


class PaymentFollowupUpdate(BaseModel):
    payment_received: bool
    payment_date: Optional[date] = None
    notes: Optional[str] = Field(None, max_length=1000)


class OrderPaymentCreate(BaseModel):
    """Record a payment against an order"""
    amount: Decimal = Field(..., description="Payment amount (positive)")
    payment_date: Optional[date] = Field(None, description="Defaults to today")
    payment_method: Optional[str] = Field(
        None, description="cash, cheque, upi, bank_transfer, other"
    )
    reference: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = Field(None, max_length=1000)

    @field_validator("payment_date")
    @classmethod
    def validate_payment_date(cls, v: Optional[date]) -> Optional[date]:
        """Reject obviously mistyped years"""
        if v is not None and (v.year < 2000 or v.year > 2099):
            raise ValueError("Payment date must be between year 2000 and 2099")
        return v


# ============================================================================
# Response Schemas
# ============================================================================

class PaymentFollowupResponse(BaseModel):
    id: int
    order_id: int
    followup_date: date
    payment_received: bool
    payment_date: Optional[date] = None
    notes: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class OrderPaymentResponse(BaseModel):
    """Payment record response"""
    id: int
    order_id: int
    amount: Decimal
    payment_date: date
    payment_method: Optional[str] = None
    reference: Optional[str] = None
    notes: Optional[str] = None
    created_by: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True
