"""
Payment Models

PaymentFollowup rows form the reminder calendar generated for cash-discount
orders. OrderPayment rows record money actually received against an order.
"""
from sqlalchemy import Column, Integer, String, Numeric, DateTime, Date, ForeignKey, Text, Boolean
from sqlalchemy.orm import relationship
from datetime import datetime, date

from sunkool.db.base import Base


class PaymentFollowup(Base):
    """One day of the cash-discount follow-up calendar"""
    __tablename__ = "payment_followups"

    id = Column(Integer, primary_key=True, index=True)

    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)

    followup_date = Column(Date, nullable=False, index=True)
    payment_received = Column(Boolean, nullable=False, default=False)
    payment_date = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    order = relationship("Order", back_populates="payment_followups")

    def __repr__(self):
        return f"<PaymentFollowup order={self.order_id} {self.followup_date} received={self.payment_received}>"


class OrderPayment(Base):
    """
    Payment record for an order.

    Multiple records per order support instalments; amounts are always positive.
    """
    __tablename__ = "order_payments"

    id = Column(Integer, primary_key=True, index=True)

    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    created_by = Column(Integer, nullable=True)

    amount = Column(Numeric(12, 2), nullable=False)
    payment_date = Column(Date, nullable=False, default=date.today, index=True)
    payment_method = Column(String(50), nullable=True)  # cash, cheque, upi, bank_transfer, other
    reference = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    order = relationship("Order", back_populates="payments")

    def __repr__(self):
        return f"<OrderPayment {self.id} - {self.amount} ({self.payment_method})>"
