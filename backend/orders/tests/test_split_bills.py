"""
Split Bill Service Tests

A split set is created and voided as a whole: either every SplitBill row of
a request is written or none is.
"""
import pytest
from decimal import Decimal

from core_backend.exceptions import InvalidStateError, ValidationError
from orders.models import SplitBill, SplitBillItem
from orders.services import OrderDiscountService, OrderItemService, OrderService, SplitBillService
from payments.services import PaymentService


def starter_and_main(order):
    return order.items.get(unit_price=Decimal("100.00")), order.items.get(unit_price=Decimal("200.00"))


@pytest.fixture
def seated_service_order(service_outlet, service_table, service_menu):
    """
    40.00 and 10.00 on seat 1, 25.00 on seat 2 at 5% tax + 5% service:
    subtotal 75.00, tax 3.75, service 3.75, total 82.50.
    """
    mezze, wrap, lemonade = service_menu
    return OrderService.create_order(
        outlet=service_outlet,
        table=service_table,
        items=[
            {"menu_item_id": mezze.id, "seat_number": 1},
            {"menu_item_id": wrap.id, "seat_number": 2},
            {"menu_item_id": lemonade.id, "seat_number": 1},
        ],
        created_by="server-3",
    )


@pytest.mark.django_db
class TestCreateSplitSet:

    def test_equal_split(self, open_order):
        splits = SplitBillService.create_split_set(open_order.id, "EQUAL", 3)

        assert [split.total for split in splits] == [Decimal("110.00")] * 3
        assert SplitBill.objects.filter(order=open_order, is_void=False).count() == 3
        assert sum(split.total for split in splits) == open_order.total

    def test_split_by_seat(self, seated_service_order):
        assert seated_service_order.total == Decimal("82.50")

        splits = SplitBillService.create_split_set(
            seated_service_order.id, "BY_SEAT", [{"seat_numbers": [1]}, {"seat_numbers": [2]}]
        )

        assert [split.total for split in splits] == [Decimal("55.00"), Decimal("27.50")]
        assert [split.service_charge for split in splits] == [Decimal("2.50"), Decimal("1.25")]
        assert SplitBillItem.objects.filter(split_bill=splits[0]).count() == 2
        assert SplitBillItem.objects.filter(split_bill=splits[1]).count() == 1

    def test_split_by_item_records_members(self, open_order):
        starter, main = starter_and_main(open_order)

        splits = SplitBillService.create_split_set(
            open_order.id, "BY_ITEM", [{"item_ids": [str(main.id)]}, {"item_ids": [str(starter.id)]}]
        )

        assert splits[0].items.get().order_item == main
        assert splits[0].total == Decimal("220.00")
        assert splits[1].total == Decimal("110.00")

    def test_invalid_item_leaves_no_splits(self, open_order):
        starter, main = starter_and_main(open_order)

        with pytest.raises(ValidationError):
            SplitBillService.create_split_set(
                open_order.id,
                "BY_ITEM",
                [{"item_ids": [str(starter.id)]}, {"item_ids": ["not-an-item"]}],
            )

        assert SplitBill.objects.count() == 0
        assert SplitBillItem.objects.count() == 0

    def test_void_items_are_not_split(self, open_order):
        starter, main = starter_and_main(open_order)
        OrderItemService.void_item(open_order.id, main.id, reason="86'd")

        with pytest.raises(ValidationError, match="not an active item"):
            SplitBillService.create_split_set(
                open_order.id, "BY_ITEM", [{"item_ids": [str(starter.id)]}, {"item_ids": [str(main.id)]}]
            )

    def test_custom_split_must_match_total(self, open_order):
        with pytest.raises(ValidationError, match="totals 330.00"):
            SplitBillService.create_split_set(open_order.id, "CUSTOM", [{"amount": "100"}, {"amount": "200"}])

        assert SplitBill.objects.count() == 0

    def test_split_twice_rejected(self, open_order):
        SplitBillService.create_split_set(open_order.id, "EQUAL", 2)

        with pytest.raises(InvalidStateError, match="already has a split set"):
            SplitBillService.create_split_set(open_order.id, "EQUAL", 3)

    def test_split_after_payment_rejected(self, open_order):
        PaymentService.record_payment(open_order.id, "CASH", Decimal("30.00"), processed_by="cashier-1")

        with pytest.raises(InvalidStateError, match="already has payments"):
            SplitBillService.create_split_set(open_order.id, "EQUAL", 2)

    def test_split_void_order_rejected(self, open_order):
        OrderService.void_order(open_order.id, reason="Walkout", voided_by="manager-1")

        with pytest.raises(InvalidStateError):
            SplitBillService.create_split_set(open_order.id, "EQUAL", 2)


@pytest.mark.django_db
class TestSplitSetLocksOrder:
    """While a split set is active, nothing that moves the totals is allowed"""

    def test_add_item_rejected(self, open_order, dessert):
        SplitBillService.create_split_set(open_order.id, "EQUAL", 2)

        with pytest.raises(InvalidStateError, match="active split set"):
            OrderItemService.add_item(open_order.id, {"menu_item_id": dessert.id})

    def test_discount_rejected(self, open_order):
        SplitBillService.create_split_set(open_order.id, "EQUAL", 2)

        with pytest.raises(InvalidStateError, match="active split set"):
            OrderDiscountService.apply_discount(open_order.id, "Comp", "FLAT", "5", applied_by="manager-1")


@pytest.mark.django_db
class TestVoidSplitSet:

    def test_void_then_split_again(self, open_order, dessert):
        SplitBillService.create_split_set(open_order.id, "EQUAL", 3)

        voided = SplitBillService.void_split_set(open_order.id, voided_by="server-1")
        OrderItemService.add_item(open_order.id, {"menu_item_id": dessert.id})
        splits = SplitBillService.create_split_set(open_order.id, "EQUAL", 2)

        open_order.refresh_from_db()
        assert voided == 3
        assert SplitBill.objects.filter(order=open_order, is_void=True).count() == 3
        assert sum(split.total for split in splits) == open_order.total
        assert [split.split_number for split in splits] == [1, 2]

    def test_void_without_split_set(self, open_order):
        with pytest.raises(InvalidStateError, match="no split set"):
            SplitBillService.void_split_set(open_order.id)

    def test_void_after_split_paid_rejected(self, open_order):
        first, second = SplitBillService.create_split_set(open_order.id, "EQUAL", 2)
        PaymentService.record_payment(
            open_order.id, "CARD", first.total, processed_by="cashier-1", split_bill_id=first.id
        )

        with pytest.raises(InvalidStateError, match="paid splits"):
            SplitBillService.void_split_set(open_order.id)
