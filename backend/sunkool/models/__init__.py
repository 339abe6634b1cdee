"""Database models"""
from sunkool.models.catalog import Customer, InventoryItem
from sunkool.models.order import Order, OrderItem
from sunkool.models.dispatch import Dispatch, DispatchItem
from sunkool.models.production_record import ProductionRecord
from sunkool.models.payment import PaymentFollowup, OrderPayment
from sunkool.models.order_event import OrderEvent
from sunkool.models.order_number_counter import OrderNumberCounter

__all__ = [
    # Catalog lookups
    "Customer",
    "InventoryItem",
    # Orders
    "Order",
    "OrderItem",
    "OrderNumberCounter",
    # Dispatch
    "Dispatch",
    "DispatchItem",
    # Production
    "ProductionRecord",
    # Payments
    "PaymentFollowup",
    "OrderPayment",
    # Activity Timeline
    "OrderEvent",
]
