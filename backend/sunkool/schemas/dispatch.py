"""
Dispatch Pydantic Schemas
"""
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime, date


class DispatchLine(BaseModel):
    """One order line in a dispatch or return request"""
    order_item_id: int
    quantity: int = Field(..., description="Units to ship (or return); must be positive")


class DispatchCreate(BaseModel):
    """Create a full or partial dispatch"""
    dispatch_type: str = Field(..., description="full or partial")
    lines: List[DispatchLine] = Field(default_factory=list)
    notes: Optional[str] = Field(None, max_length=2000)
    courier_company_id: Optional[int] = None
    tracking_id: Optional[str] = Field(None, max_length=255)
    production_record_id: Optional[int] = None
    dispatch_date: Optional[date] = None


class ReturnDispatchCreate(BaseModel):
    """Record a return"""
    lines: List[DispatchLine] = Field(default_factory=list)
    notes: Optional[str] = Field(None, max_length=2000)


class ShipmentStatusUpdate(BaseModel):
    status: str = Field(..., description="ready, picked_up or delivered")


class DispatchItemResponse(BaseModel):
    id: int
    order_item_id: Optional[int] = None
    inventory_item_id: Optional[int] = None
    quantity: int

    class Config:
        from_attributes = True


class DispatchResponse(BaseModel):
    """Dispatch with its items"""
    id: int
    order_id: int
    dispatch_type: str
    dispatch_date: date
    shipment_status: str
    courier_company_id: Optional[int] = None
    tracking_id: Optional[str] = None
    production_record_id: Optional[int] = None
    notes: Optional[str] = None
    created_by: Optional[int] = None
    created_at: datetime
    items: List[DispatchItemResponse] = []

    class Config:
        from_attributes = True
