"""
Order endpoints: orders, lines, status, balances and timeline
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from sunkool.api.v1.deps import get_current_user_id
from sunkool.db.session import get_db
from sunkool.schemas.common import MessageResponse
from sunkool.schemas.order import (
    LineBalance,
    OrderCreate,
    OrderDetailResponse,
    OrderEventResponse,
    OrderItemCreate,
    OrderItemDispatchStatus,
    OrderItemQuantityUpdate,
    OrderItemResponse,
    OrderResponse,
    OrderStatusUpdate,
    OrderUpdate,
)
from sunkool.services import event_service, order_service
from sunkool.services.order_status import order_status_service

router = APIRouter(prefix="/orders", tags=["orders"])


@router.get("/", response_model=List[OrderResponse])
def list_orders(
    order_status: Optional[str] = Query(None),
    payment_status: Optional[str] = Query(None),
    customer_id: Optional[int] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
):
    return order_service.list_orders(
        db,
        order_status=order_status,
        payment_status=payment_status,
        customer_id=customer_id,
        skip=skip,
        limit=limit,
    )


@router.post("/", response_model=OrderResponse, status_code=201)
def create_order(
    request: OrderCreate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    return order_service.create_order(
        db,
        customer_id=request.customer_id,
        sales_order_number=request.sales_order_number,
        cash_discount=request.cash_discount,
        created_by=user_id,
    )


@router.get("/{order_id}", response_model=OrderDetailResponse)
def get_order(order_id: int, db: Session = Depends(get_db)):
    return order_service.get_order_details(db, order_id)


@router.patch("/{order_id}", response_model=OrderResponse)
def update_order(
    order_id: int,
    request: OrderUpdate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    return order_service.update_order(
        db,
        order_id,
        sales_order_number=request.sales_order_number,
        customer_id=request.customer_id,
        cash_discount=request.cash_discount,
        order_status=request.order_status,
        user_id=user_id,
    )


@router.delete("/{order_id}", response_model=MessageResponse)
def delete_order(
    order_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    order_service.delete_order(db, order_id)
    return {"message": f"Order {order_id} deleted"}


@router.post("/{order_id}/status", response_model=OrderResponse)
def update_order_status(
    order_id: int,
    request: OrderStatusUpdate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    return order_service.update_order_status(db, order_id, request.status, user_id=user_id)


@router.get("/{order_id}/allowed-statuses", response_model=List[str])
def get_allowed_statuses(order_id: int, db: Session = Depends(get_db)):
    order = order_service.get_order_details(db, order_id)
    return order_status_service.allowed_transitions(order)


@router.get("/{order_id}/balances", response_model=List[LineBalance])
def get_order_balances(order_id: int, db: Session = Depends(get_db)):
    return order_service.get_order_balances(db, order_id)


@router.get("/{order_id}/events", response_model=List[OrderEventResponse])
def list_order_events(
    order_id: int,
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
):
    return event_service.list_order_events(db, order_id, limit=limit)


# ============================================================================
# Order lines
# ============================================================================

@router.post("/{order_id}/items", response_model=OrderItemResponse, status_code=201)
def add_item(
    order_id: int,
    request: OrderItemCreate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    return order_service.add_item_to_order(
        db,
        order_id,
        inventory_item_id=request.inventory_item_id,
        quantity=request.quantity,
        unit_price=request.unit_price,
        user_id=user_id,
    )


@router.patch("/items/{order_item_id}", response_model=OrderItemResponse)
def update_item_quantity(
    order_item_id: int,
    request: OrderItemQuantityUpdate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    return order_service.update_item_quantity(db, order_item_id, request.quantity, user_id=user_id)


@router.delete("/items/{order_item_id}", response_model=MessageResponse)
def remove_item(
    order_item_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    order_service.remove_item(db, order_item_id, user_id=user_id)
    return {"message": f"Order item {order_item_id} removed"}


@router.get("/items/{order_item_id}/dispatch-status", response_model=OrderItemDispatchStatus)
def get_item_dispatch_status(order_item_id: int, db: Session = Depends(get_db)):
    return order_service.get_order_item_dispatch_status(db, order_item_id)
