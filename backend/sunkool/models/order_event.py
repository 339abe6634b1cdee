"""
Order Event Model

Tracks activity history for orders - status changes, dispatches, returns,
production and payment updates. Provides an audit trail for the order page.
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship
from datetime import datetime

from sunkool.db.base import Base


class OrderEvent(Base):
    """Order Event - Activity log entry for an order"""
    __tablename__ = "order_events"

    id = Column(Integer, primary_key=True, index=True)

    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, nullable=True, index=True)

    # status_change, item_added, item_updated, item_removed, dispatched, returned,
    # shipment_status, production_created, production_status, payment_updated,
    # payment_recorded
    event_type = Column(String(50), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    # For status changes
    old_value = Column(String(100), nullable=True)
    new_value = Column(String(100), nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    order = relationship("Order", back_populates="events")

    def __repr__(self):
        return f"<OrderEvent {self.event_type} for order={self.order_id}>"
