"""
Dispatch Model

A dispatch is one shipment against an order: full, partial, or a return.
Returns are stored as dispatch items with negative quantities so the signed
sum per order item is the net quantity with the customer.
"""
from sqlalchemy import Column, Integer, String, DateTime, Date, ForeignKey, Text
from sqlalchemy.orm import relationship
from datetime import datetime, date

from sunkool.db.base import Base


class Dispatch(Base):
    """Dispatch header"""
    __tablename__ = "dispatches"

    id = Column(Integer, primary_key=True, index=True)

    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    production_record_id = Column(
        Integer, ForeignKey("production_records.id", ondelete="SET NULL"), nullable=True, index=True
    )
    courier_company_id = Column(Integer, nullable=True)  # Courier catalog lives outside the core
    created_by = Column(Integer, nullable=True)

    # full, partial, return
    dispatch_type = Column(String(20), nullable=False, index=True)
    dispatch_date = Column(Date, nullable=False, default=date.today)

    # ready, picked_up, delivered (forward); returned (return dispatches)
    shipment_status = Column(String(20), nullable=False, default="ready", index=True)
    tracking_id = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    order = relationship("Order", back_populates="dispatches")
    production_record = relationship("ProductionRecord")
    items = relationship("DispatchItem", back_populates="dispatch", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Dispatch {self.id} {self.dispatch_type} order={self.order_id}>"

    @property
    def is_return(self) -> bool:
        return self.dispatch_type == "return"

    @property
    def total_quantity(self) -> int:
        return sum(item.quantity for item in self.items)


class DispatchItem(Base):
    """Dispatch line - positive for forward shipments, negative for returns"""
    __tablename__ = "dispatch_items"

    id = Column(Integer, primary_key=True, index=True)

    dispatch_id = Column(Integer, ForeignKey("dispatches.id", ondelete="CASCADE"), nullable=False, index=True)
    # Nulled when a fully returned line is removed; the history row keeps its inventory item
    order_item_id = Column(Integer, ForeignKey("order_items.id", ondelete="SET NULL"), nullable=True, index=True)
    inventory_item_id = Column(Integer, ForeignKey("inventory_items.id"), nullable=True)

    quantity = Column(Integer, nullable=False)

    dispatch = relationship("Dispatch", back_populates="items")
    order_item = relationship("OrderItem", back_populates="dispatch_items")

    def __repr__(self):
        return f"<DispatchItem dispatch={self.dispatch_id} item={self.order_item_id} qty={self.quantity}>"
