"""
Integration tests for orders and order lines
"""
from decimal import Decimal

import pytest

from sunkool.core.status_config import PaymentStatus
from sunkool.exceptions import (
    AuthenticationError,
    InvalidTransitionError,
    ItemHasDispatchesError,
    NotFoundError,
    QuantityBelowDispatchedError,
    ValidationError,
)
from sunkool.models.dispatch import Dispatch, DispatchItem
from sunkool.models.order import Order, OrderItem
from sunkool.models.order_event import OrderEvent
from sunkool.schemas.common import run_operation
from sunkool.schemas.dispatch import DispatchLine
from sunkool.services import dispatch_service, event_service, order_service
from tests.factories import create_test_customer, create_test_order

pytestmark = pytest.mark.integration


class TestCreateOrder:

    def test_new_order_defaults(self, db, customer):
        order = order_service.create_order(db, customer.id, sales_order_number="AMZ-991", created_by=3)

        assert order.internal_order_number == "SK01"
        assert order.order_status == "Pending"
        assert order.payment_status == PaymentStatus.PENDING
        assert Decimal(order.total_price) == Decimal("0")
        assert order.sales_order_number == "AMZ-991"
        assert order.created_by == 3

        events = event_service.list_order_events(db, order.id)
        assert [e.event_type for e in events] == ["created"]

    def test_numbers_continue_after_existing_orders(self, db, customer):
        for n in range(1, 10):
            create_test_order(db, customer=customer, internal_order_number=f"SK{n:02d}")
        db.commit()

        order = order_service.create_order(db, customer.id, created_by=1)
        assert order.internal_order_number == "SK10"

    def test_requires_acting_user(self, db, customer):
        with pytest.raises(AuthenticationError):
            order_service.create_order(db, customer.id)

    def test_inactive_customer_rejected(self, db):
        customer = create_test_customer(db, is_active=False)
        db.commit()

        with pytest.raises(NotFoundError):
            order_service.create_order(db, customer.id, created_by=1)
        assert db.query(Order).count() == 0


class TestOrderStatus:

    def test_manual_transition(self, db, customer):
        order = order_service.create_order(db, customer.id, created_by=1)

        updated = order_service.update_order_status(db, order.id, "Approved", user_id=2)
        assert updated.order_status == "Approved"

    def test_invalid_transition_rejected(self, db, customer):
        order = order_service.create_order(db, customer.id, created_by=1)

        with pytest.raises(InvalidTransitionError) as exc:
            order_service.update_order_status(db, order.id, "Delivered")
        assert exc.value.details["allowed"] == ["Approved", "Cancelled"]
        db.refresh(order)
        assert order.order_status == "Pending"

    def test_unknown_status_rejected(self, db, customer):
        order = order_service.create_order(db, customer.id, created_by=1)
        with pytest.raises(ValidationError):
            order_service.update_order_status(db, order.id, "Shipped")

    def test_update_header_fields(self, db, customer):
        order = order_service.create_order(db, customer.id, created_by=1)
        other = create_test_customer(db)
        db.commit()

        updated = order_service.update_order(
            db, order.id, sales_order_number="FK-12", customer_id=other.id, cash_discount=True
        )
        assert updated.sales_order_number == "FK-12"
        assert updated.customer_id == other.id
        assert updated.cash_discount is True
        assert updated.internal_order_number == "SK01"


class TestOrderItems:

    def test_first_item_approves_pending_order(self, db, customer, inventory_item):
        order = order_service.create_order(db, customer.id, created_by=1)

        line = order_service.add_item_to_order(db, order.id, inventory_item.id, 5, unit_price=Decimal("200"))
        db.refresh(order)

        assert line.quantity == 5
        assert order.order_status == "Approved"
        assert Decimal(order.total_price) == Decimal("1000")

    def test_same_item_merges_into_line(self, db, customer, inventory_item):
        order = order_service.create_order(db, customer.id, created_by=1)
        order_service.add_item_to_order(db, order.id, inventory_item.id, 5, unit_price=Decimal("200"))
        line = order_service.add_item_to_order(db, order.id, inventory_item.id, 3)

        assert line.quantity == 8
        assert db.query(OrderItem).filter_by(order_id=order.id).count() == 1
        db.refresh(order)
        assert Decimal(order.total_price) == Decimal("1600")

    def test_approved_order_keeps_status(self, db, inventory_item, second_inventory_item):
        order = create_test_order(db, lines=[{"item": inventory_item, "quantity": 1}], order_status="In Production")
        db.commit()

        order_service.add_item_to_order(db, order.id, second_inventory_item.id, 2)
        db.refresh(order)
        assert order.order_status == "In Production"

    def test_missing_inventory_item(self, db, customer):
        order = order_service.create_order(db, customer.id, created_by=1)
        with pytest.raises(NotFoundError) as exc:
            order_service.add_item_to_order(db, order.id, 404, 1)
        assert exc.value.details["resource"] == "Inventory item"

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_quantity_must_be_positive(self, db, customer, inventory_item, quantity):
        order = order_service.create_order(db, customer.id, created_by=1)
        with pytest.raises(ValidationError):
            order_service.add_item_to_order(db, order.id, inventory_item.id, quantity)

    def test_quantity_cannot_drop_below_dispatched(self, db, inventory_item):
        order = create_test_order(db, lines=[{"item": inventory_item, "quantity": 10}])
        db.commit()
        line = order.items[0]
        dispatch_service.create_dispatch(db, order.id, "partial", [DispatchLine(order_item_id=line.id, quantity=6)])

        with pytest.raises(QuantityBelowDispatchedError):
            order_service.update_item_quantity(db, line.id, 5)

        updated = order_service.update_item_quantity(db, line.id, 6)
        assert updated.quantity == 6

    def test_item_with_dispatches_cannot_be_removed(self, db, inventory_item):
        order = create_test_order(db, lines=[{"item": inventory_item, "quantity": 10}])
        db.commit()
        line = order.items[0]
        dispatch_service.create_dispatch(db, order.id, "partial", [DispatchLine(order_item_id=line.id, quantity=4)])

        with pytest.raises(ItemHasDispatchesError) as exc:
            order_service.remove_item(db, line.id)
        assert exc.value.details["dispatched_quantity"] == 4

    def test_fully_returned_item_can_be_removed(self, db, inventory_item, second_inventory_item):
        order = create_test_order(db, lines=[
            {"item": inventory_item, "quantity": 10, "unit_price": Decimal("100")},
            {"item": second_inventory_item, "quantity": 2, "unit_price": Decimal("50")},
        ])
        db.commit()
        line = order.items[0]
        dispatch_service.create_dispatch(db, order.id, "partial", [DispatchLine(order_item_id=line.id, quantity=4)])
        dispatch_service.create_return_dispatch(db, order.id, [DispatchLine(order_item_id=line.id, quantity=4)])

        assert order_service.remove_item(db, line.id) == order.id

        db.refresh(order)
        assert len(order.items) == 1
        assert Decimal(order.total_price) == Decimal("100")
        # History rows survive with their line reference cleared
        assert db.query(DispatchItem).count() == 2
        assert db.query(DispatchItem).filter(DispatchItem.order_item_id.is_(None)).count() == 2

    def test_dispatch_status_for_line(self, db, inventory_item):
        order = create_test_order(db, lines=[{"item": inventory_item, "quantity": 10}])
        db.commit()
        line = order.items[0]
        dispatch_service.create_dispatch(db, order.id, "partial", [DispatchLine(order_item_id=line.id, quantity=6)])
        dispatch_service.create_return_dispatch(db, order.id, [DispatchLine(order_item_id=line.id, quantity=1)])

        status = order_service.get_order_item_dispatch_status(db, line.id)
        assert status["total_dispatched"] == 5
        assert status["remaining_quantity"] == 5
        assert status["has_been_dispatched"] is True
        assert [d["quantity"] for d in status["dispatch_details"]] == [6, -1]


class TestDeleteOrder:

    def test_removes_dispatches_and_lines(self, db, inventory_item):
        order = create_test_order(db, lines=[{"item": inventory_item, "quantity": 10}])
        db.commit()
        line = order.items[0]
        dispatch_service.create_dispatch(db, order.id, "partial", [DispatchLine(order_item_id=line.id, quantity=3)])

        order_service.delete_order(db, order.id)

        assert db.query(Order).count() == 0
        assert db.query(OrderItem).count() == 0
        assert db.query(Dispatch).count() == 0
        assert db.query(OrderEvent).count() == 0

    def test_missing_order(self, db):
        with pytest.raises(NotFoundError):
            order_service.delete_order(db, 1)


class TestRunOperation:

    def test_success_envelope(self, db, customer):
        result = run_operation(order_service.create_order, db, customer.id, created_by=1)

        assert result.ok is True
        assert result.data.internal_order_number == "SK01"
        assert result.error is None

    def test_failure_envelope(self, db, inventory_item):
        order = create_test_order(db, lines=[{"item": inventory_item, "quantity": 10}])
        db.commit()

        result = run_operation(
            dispatch_service.create_dispatch,
            db,
            order.id,
            "partial",
            [DispatchLine(order_item_id=order.items[0].id, quantity=11)],
        )

        assert result.ok is False
        assert result.error_code == "EXCEEDS_ORDERED_QUANTITY"
        assert "Remaining available: 10" in result.error
        assert result.details["requested"] == 11
        assert db.query(Dispatch).count() == 0
