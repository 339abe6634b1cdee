"""
Order Number Counter

Single row per prefix holding the last reserved internal order number.
The row is locked with SELECT ... FOR UPDATE while a number is reserved.
"""
from sqlalchemy import Column, Integer, String, DateTime
from datetime import datetime

from sunkool.db.base import Base


class OrderNumberCounter(Base):
    __tablename__ = "order_number_counters"

    prefix = Column(String(10), primary_key=True)
    last_value = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<OrderNumberCounter {self.prefix}={self.last_value}>"
