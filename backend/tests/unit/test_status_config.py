"""
Unit tests for status values and transition tables
"""
import pytest

from sunkool.core.status_config import (
    ORDER_STATUS_TRANSITIONS,
    OrderStatus,
    ShipmentStatus,
    get_allowed_order_transitions,
    is_valid_order_transition,
    is_valid_production_transition,
    is_valid_shipment_transition,
    parse_order_status,
    validate_order_transition,
    validate_production_transition,
    validate_shipment_transition,
)
from sunkool.exceptions import InvalidTransitionError, ValidationError


EXPECTED_ORDER_TRANSITIONS = {
    "Pending": {"Approved", "Cancelled"},
    "Approved": {"In Production", "Pending", "Cancelled"},
    "In Production": {"Partial Dispatch", "Dispatched", "Approved", "Cancelled"},
    "Partial Dispatch": {"In Production", "Dispatched", "Cancelled"},
    "Dispatched": {"Delivered", "Partial Dispatch", "Cancelled"},
    "Delivered": {"Cancelled"},
    "Cancelled": set(),
}


class TestOrderTransitions:
    """Every (current, new) pair against the transition table"""

    @pytest.mark.parametrize("current", [s.value for s in OrderStatus])
    @pytest.mark.parametrize("new", [s.value for s in OrderStatus])
    def test_transition_pair(self, current, new):
        expected = new in EXPECTED_ORDER_TRANSITIONS[current]
        assert is_valid_order_transition(current, new) is expected

    def test_table_covers_every_status(self):
        assert set(ORDER_STATUS_TRANSITIONS) == set(OrderStatus)

    def test_cancelled_is_terminal(self):
        assert get_allowed_order_transitions("Cancelled") == []

    def test_allowed_transitions_follow_declaration_order(self):
        assert get_allowed_order_transitions("In Production") == [
            "Approved", "Partial Dispatch", "Dispatched", "Cancelled",
        ]

    def test_validate_raises_with_allowed_list(self):
        with pytest.raises(InvalidTransitionError) as exc:
            validate_order_transition("Pending", "Delivered")
        assert exc.value.error_code == "INVALID_TRANSITION"
        assert exc.value.details["allowed"] == ["Approved", "Cancelled"]
        assert '"Pending"' in exc.value.message
        assert '"Delivered"' in exc.value.message

    def test_unknown_current_status_allows_nothing(self):
        assert is_valid_order_transition("Shipped", "Delivered") is False


class TestParseOrderStatus:

    def test_known_value(self):
        assert parse_order_status("Partial Dispatch") is OrderStatus.PARTIAL_DISPATCH

    @pytest.mark.parametrize("value", ["pending", "Shipped", ""])
    def test_unknown_value_rejected(self, value):
        with pytest.raises(ValidationError) as exc:
            parse_order_status(value)
        assert exc.value.details["field"] == "order_status"

    def test_enum_members_compare_as_strings(self):
        assert OrderStatus.DISPATCHED == "Dispatched"
        assert "Dispatched" in {OrderStatus.DISPATCHED}


class TestShipmentTransitions:

    @pytest.mark.parametrize("current,new", [
        ("ready", "picked_up"),
        ("ready", "delivered"),
        ("picked_up", "delivered"),
        ("ready", "ready"),
    ])
    def test_forward_moves_allowed(self, current, new):
        assert is_valid_shipment_transition(current, new)

    @pytest.mark.parametrize("current,new", [
        ("delivered", "ready"),
        ("delivered", "picked_up"),
        ("picked_up", "ready"),
        ("returned", "delivered"),
    ])
    def test_backward_moves_rejected(self, current, new):
        with pytest.raises(InvalidTransitionError):
            validate_shipment_transition(current, new)

    def test_returned_only_set_on_returns(self):
        assert not is_valid_shipment_transition(ShipmentStatus.READY.value, ShipmentStatus.RETURNED.value)


class TestProductionTransitions:

    def test_one_step_at_a_time(self):
        assert is_valid_production_transition("pending", "in_production")
        assert is_valid_production_transition("in_production", "completed")
        assert not is_valid_production_transition("pending", "completed")

    def test_completed_is_terminal(self):
        with pytest.raises(InvalidTransitionError) as exc:
            validate_production_transition("completed", "pending")
        assert exc.value.details["allowed"] == []
