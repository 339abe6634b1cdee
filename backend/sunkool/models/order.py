"""
Order Model

Customer orders and their lines. Status values come from
sunkool.core.status_config.OrderStatus.
"""
from sqlalchemy import Column, Integer, String, Numeric, DateTime, Date, ForeignKey, Boolean
from sqlalchemy.orm import relationship
from datetime import datetime

from sunkool.db.base import Base


class Order(Base):
    """Order - placed by a customer, produced in batches and dispatched in shipments"""
    __tablename__ = "orders"

    # Primary Key
    id = Column(Integer, primary_key=True, index=True)

    # Foreign Keys
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="RESTRICT"), nullable=False, index=True)
    created_by = Column(Integer, nullable=True)  # Acting user id from the identity layer

    # Order Identification
    internal_order_number = Column(String(20), unique=True, nullable=False, index=True)  # SK01
    sales_order_number = Column(String(100), nullable=True, index=True)  # From other platforms

    cash_discount = Column(Boolean, nullable=False, default=False)

    # Status
    # Pending -> Approved -> In Production -> Partial Dispatch <-> Dispatched -> Delivered
    # Cancelled is reachable from every non-terminal state
    order_status = Column(String(50), nullable=False, default="Pending", index=True)

    # Payment
    payment_status = Column(String(20), nullable=False, default="Pending", index=True)
    # Pending, Partial, Paid
    partial_payment_amount = Column(Numeric(12, 2), nullable=True)
    remaining_payment_amount = Column(Numeric(12, 2), nullable=True)
    payment_date = Column(Date, nullable=True)
    invoice_number = Column(String(50), nullable=True)

    total_price = Column(Numeric(12, 2), nullable=False, default=0)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    customer = relationship("Customer", back_populates="orders")
    items = relationship(
        "OrderItem", back_populates="order", cascade="all, delete-orphan", order_by="OrderItem.id"
    )
    dispatches = relationship(
        "Dispatch", back_populates="order", cascade="all, delete-orphan", order_by="Dispatch.id"
    )
    production_records = relationship(
        "ProductionRecord", back_populates="order", cascade="all, delete-orphan",
        order_by="ProductionRecord.production_number",
    )
    payment_followups = relationship(
        "PaymentFollowup", back_populates="order", cascade="all, delete-orphan",
        order_by="PaymentFollowup.followup_date",
    )
    payments = relationship(
        "OrderPayment", back_populates="order", cascade="all, delete-orphan",
        order_by="OrderPayment.payment_date.desc()",
    )
    events = relationship(
        "OrderEvent", back_populates="order", cascade="all, delete-orphan", order_by="OrderEvent.id"
    )

    def __repr__(self):
        return f"<Order {self.internal_order_number} - {self.order_status}>"

    @property
    def total_quantity(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def is_paid(self) -> bool:
        return self.payment_status == "Paid"


class OrderItem(Base):
    """
    Order Item - one line of an order

    References an inventory item (or sub-item) and the ordered quantity.
    The quantity may never drop below what has already been dispatched.
    """
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)

    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    inventory_item_id = Column(Integer, ForeignKey("inventory_items.id"), nullable=False, index=True)

    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False, default=0)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    order = relationship("Order", back_populates="items")
    inventory_item = relationship("InventoryItem")
    dispatch_items = relationship("DispatchItem", back_populates="order_item")

    def __repr__(self):
        return f"<OrderItem {self.id} order={self.order_id} qty={self.quantity}>"

    @property
    def line_total(self):
        return (self.unit_price or 0) * self.quantity
