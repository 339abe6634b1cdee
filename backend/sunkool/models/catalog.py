"""
Catalog lookup models

Customers and inventory items are maintained by the management screens;
the order core only reads them to validate references.
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Boolean
from sqlalchemy.orm import relationship
from datetime import datetime

from sunkool.db.base import Base


class Customer(Base):
    """Customer placing orders"""
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    orders = relationship("Order", back_populates="customer")

    def __repr__(self):
        return f"<Customer {self.name}>"


class InventoryItem(Base):
    """Inventory item or sub-item (sub-items point at their parent)"""
    __tablename__ = "inventory_items"

    id = Column(Integer, primary_key=True, index=True)
    sr_no = Column(Integer, nullable=True, index=True)
    item_name = Column(String(255), nullable=False)
    parent_item_id = Column(Integer, ForeignKey("inventory_items.id", ondelete="CASCADE"), nullable=True, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    parent = relationship("InventoryItem", remote_side=[id], backref="sub_items")

    def __repr__(self):
        return f"<InventoryItem #{self.sr_no} {self.item_name}>"

    @property
    def is_sub_item(self) -> bool:
        return self.parent_item_id is not None
