"""
Production record endpoints
"""
from typing import Dict, List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from sunkool.api.v1.deps import get_current_user_id
from sunkool.db.session import get_db
from sunkool.schemas.common import MessageResponse
from sunkool.schemas.production import (
    ProductionRecordCreate,
    ProductionRecordResponse,
    ProductionStatusUpdate,
)
from sunkool.services import production_service

router = APIRouter(tags=["production"])


@router.get("/orders/{order_id}/production-records", response_model=List[ProductionRecordResponse])
def list_production_records(order_id: int, db: Session = Depends(get_db)):
    return production_service.list_production_records(db, order_id)


@router.get("/orders/{order_id}/production-remaining", response_model=Dict[int, int])
def get_remaining_to_produce(order_id: int, db: Session = Depends(get_db)):
    return production_service.remaining_for_order(db, order_id)


@router.post(
    "/orders/{order_id}/production-records",
    response_model=ProductionRecordResponse,
    status_code=201,
)
def create_production_record(
    order_id: int,
    request: ProductionRecordCreate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    return production_service.create_production_record(
        db,
        order_id,
        production_type=request.production_type,
        selected_quantities=request.selected_quantities,
        pdf_file_name=request.pdf_file_name,
        pdf_file_url=request.pdf_file_url,
        pdf_file_size=request.pdf_file_size,
        created_by=user_id,
    )


@router.patch("/production-records/{record_id}/status", response_model=ProductionRecordResponse)
def update_production_record_status(
    record_id: int,
    request: ProductionStatusUpdate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    return production_service.update_production_record_status(db, record_id, request.status, user_id=user_id)


@router.delete("/production-records/{record_id}", response_model=MessageResponse)
def delete_production_record(
    record_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    production_service.delete_production_record(db, record_id)
    return {"message": f"Production record {record_id} deleted"}
