"""
Production Record Pydantic Schemas
"""
from pydantic import BaseModel, Field
from typing import Optional, Dict
from datetime import datetime


class ProductionRecordCreate(BaseModel):
    """Create a production record; the document is generated by the caller"""
    production_type: str = Field(..., description="full or partial")
    selected_quantities: Optional[Dict[int, int]] = Field(
        None, description="{order_item_id: quantity}, partial records only"
    )
    pdf_file_name: Optional[str] = Field(None, max_length=255)
    pdf_file_url: Optional[str] = Field(None, max_length=1024)
    pdf_file_size: Optional[int] = Field(None, ge=0)


class ProductionStatusUpdate(BaseModel):
    status: str = Field(..., description="in_production or completed")


class ProductionRecordResponse(BaseModel):
    id: int
    order_id: int
    production_number: int
    production_code: str
    production_type: str
    selected_quantities: Optional[Dict[str, int]] = None
    status: str
    pdf_file_name: Optional[str] = None
    pdf_file_url: Optional[str] = None
    pdf_file_size: Optional[int] = None
    created_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
