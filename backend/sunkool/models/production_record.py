"""
Production Record Model

A production record is a batch manufacturing instruction covering all
(full) or part (partial) of an order's lines. Numbers run per order.
"""
import string

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime

from sunkool.db.base import Base


class ProductionRecord(Base):
    """Production Record - one production batch for an order"""
    __tablename__ = "production_records"
    __table_args__ = (
        UniqueConstraint("order_id", "production_number", name="uq_production_records_order_number"),
    )

    id = Column(Integer, primary_key=True, index=True)

    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    created_by = Column(Integer, nullable=True)

    production_number = Column(Integer, nullable=False)  # 1-based, per order
    production_type = Column(String(20), nullable=False)  # full, partial
    # {"<order_item_id>": quantity} - partial records only
    selected_quantities = Column(JSON, nullable=True)

    # pending -> in_production -> completed
    status = Column(String(20), nullable=False, default="pending", index=True)

    # Document produced by the document service
    pdf_file_name = Column(String(255), nullable=True)
    pdf_file_url = Column(String(1024), nullable=True)
    pdf_file_size = Column(Integer, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    order = relationship("Order", back_populates="production_records")

    def __repr__(self):
        return f"<ProductionRecord {self.production_code} ({self.production_type}, {self.status})>"

    def selected_quantity_for(self, order_item_id: int) -> int:
        """Quantity this record selects for a line (JSON keys are strings)"""
        if not self.selected_quantities:
            return 0
        return int(self.selected_quantities.get(str(order_item_id), 0) or 0)

    @property
    def production_code(self) -> str:
        """SK01 for a full record, SK01A / SK01B ... for partial ones"""
        base = self.order.internal_order_number if self.order else f"ORD-{self.order_id}"
        if self.production_type == "full":
            return base
        letters = string.ascii_uppercase
        n = self.production_number
        suffix = ""
        while n > 0:
            n, rem = divmod(n - 1, len(letters))
            suffix = letters[rem] + suffix
        return f"{base}{suffix}"
