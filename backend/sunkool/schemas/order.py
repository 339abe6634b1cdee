"""
Order Pydantic Schemas
"""
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime, date
from decimal import Decimal


# ============================================================================
# Request Schemas
# ============================================================================

class OrderCreate(BaseModel):
    """Create a new order (the internal order number is assigned automatically)"""
    customer_id: int = Field(..., description="Customer placing the order")
    sales_order_number: Optional[str] = Field(None, max_length=100, description="Order number from another platform")
    cash_discount: bool = Field(False, description="Generate the payment follow-up calendar")


class OrderUpdate(BaseModel):
    """Update order header fields"""
    sales_order_number: Optional[str] = Field(None, max_length=100)
    customer_id: Optional[int] = None
    cash_discount: Optional[bool] = None
    order_status: Optional[str] = Field(None, description="Target status, validated against the transition table")


class OrderStatusUpdate(BaseModel):
    status: str = Field(..., description="Target order status")


class OrderItemCreate(BaseModel):
    """Add an inventory item to an order"""
    inventory_item_id: int
    quantity: int = Field(..., description="Quantity to add (merged into an existing line)")
    unit_price: Optional[Decimal] = Field(None, ge=0)


class OrderItemQuantityUpdate(BaseModel):
    quantity: int = Field(..., description="New ordered quantity")


# ============================================================================
# Response Schemas
# ============================================================================

class CustomerSummary(BaseModel):
    id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None

    class Config:
        from_attributes = True


class OrderItemResponse(BaseModel):
    """Order line response"""
    id: int
    order_id: int
    inventory_item_id: int
    quantity: int
    unit_price: Decimal
    created_at: datetime

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    """Order header response"""
    id: int
    internal_order_number: str
    sales_order_number: Optional[str] = None
    customer_id: int
    cash_discount: bool
    order_status: str
    payment_status: str
    partial_payment_amount: Optional[Decimal] = None
    remaining_payment_amount: Optional[Decimal] = None
    payment_date: Optional[date] = None
    invoice_number: Optional[str] = None
    total_price: Decimal
    created_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class OrderDetailResponse(OrderResponse):
    """Order with customer and lines"""
    customer: Optional[CustomerSummary] = None
    items: List[OrderItemResponse] = []


class LineBalance(BaseModel):
    """Ordered, dispatched and produced figures for one order line"""
    order_item_id: int
    inventory_item_id: Optional[int] = None
    item_name: Optional[str] = None
    ordered_quantity: int
    dispatched_quantity: int
    remaining_quantity: int
    produced_quantity: int
    remaining_to_produce: int


class DispatchHistoryEntry(BaseModel):
    dispatch_id: int
    dispatch_type: str
    dispatch_date: date
    shipment_status: str
    quantity: int


class OrderItemDispatchStatus(BaseModel):
    order_item_id: int
    ordered_quantity: int
    has_been_dispatched: bool
    total_dispatched: int
    remaining_quantity: int
    dispatch_count: int
    dispatch_details: List[DispatchHistoryEntry] = []


class OrderEventResponse(BaseModel):
    """Activity timeline entry"""
    id: int
    order_id: int
    user_id: Optional[int] = None
    event_type: str
    title: str
    description: Optional[str] = None
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
