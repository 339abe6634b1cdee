"""
Dispatch endpoints
"""
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from sunkool.api.v1.deps import get_current_user_id
from sunkool.db.session import get_db
from sunkool.schemas.dispatch import (
    DispatchCreate,
    DispatchResponse,
    ReturnDispatchCreate,
    ShipmentStatusUpdate,
)
from sunkool.services import dispatch_service

router = APIRouter(tags=["dispatches"])


@router.get("/orders/{order_id}/dispatches", response_model=List[DispatchResponse])
def list_order_dispatches(order_id: int, db: Session = Depends(get_db)):
    return dispatch_service.list_order_dispatches(db, order_id)


@router.post("/orders/{order_id}/dispatches", response_model=DispatchResponse, status_code=201)
def create_dispatch(
    order_id: int,
    request: DispatchCreate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    return dispatch_service.create_dispatch(
        db,
        order_id,
        dispatch_type=request.dispatch_type,
        lines=request.lines,
        notes=request.notes,
        courier_company_id=request.courier_company_id,
        tracking_id=request.tracking_id,
        production_record_id=request.production_record_id,
        dispatch_date=request.dispatch_date,
        created_by=user_id,
    )


@router.post("/orders/{order_id}/returns", response_model=DispatchResponse, status_code=201)
def create_return_dispatch(
    order_id: int,
    request: ReturnDispatchCreate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    return dispatch_service.create_return_dispatch(
        db, order_id, lines=request.lines, notes=request.notes, created_by=user_id
    )


@router.get("/dispatches/{dispatch_id}", response_model=DispatchResponse)
def get_dispatch(dispatch_id: int, db: Session = Depends(get_db)):
    return dispatch_service.get_dispatch(db, dispatch_id)


@router.patch("/dispatches/{dispatch_id}/status", response_model=DispatchResponse)
def update_dispatch_status(
    dispatch_id: int,
    request: ShipmentStatusUpdate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    return dispatch_service.update_dispatch_status(db, dispatch_id, request.status, user_id=user_id)
