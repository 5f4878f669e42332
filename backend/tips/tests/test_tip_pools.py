"""
Tip Pool Tests

A pool's allocations must sum to its total within the rounding tolerance;
a pool that does not balance writes nothing.
"""
import pytest
from datetime import date
from decimal import Decimal

from core_backend.exceptions import InvalidStateError, ValidationError
from tips.models import TipAllocation, TipPool
from tips.services import TipPoolService


SERVICE_DATE = date(2026, 3, 14)


@pytest.mark.django_db
class TestDistributeTips:

    def test_distribute_by_amount(self, outlet):
        pool = TipPoolService.distribute_tips(
            outlet,
            SERVICE_DATE,
            Decimal("300.00"),
            [
                {"employee_id": "server-1", "amount": "150.00"},
                {"employee_id": "server-2", "amount": "100.00"},
                {"employee_id": "busser-1", "amount": "50.00"},
            ],
            shift_type="DINNER",
            created_by="manager-1",
        )

        assert pool.status == TipPool.PoolStatus.DISTRIBUTED
        assert pool.distributed_at is not None
        assert pool.allocations.count() == 3
        assert sum(a.amount for a in pool.allocations.all()) == Decimal("300.00")

    def test_mismatched_total_writes_nothing(self, outlet):
        with pytest.raises(ValidationError, match="Allocations total 290.00 but the pool holds 300.00"):
            TipPoolService.distribute_tips(
                outlet,
                SERVICE_DATE,
                Decimal("300.00"),
                [
                    {"employee_id": "server-1", "amount": "150.00"},
                    {"employee_id": "server-2", "amount": "140.00"},
                ],
            )

        assert TipPool.objects.count() == 0
        assert TipAllocation.objects.count() == 0

    def test_one_cent_tolerance(self, outlet):
        pool = TipPoolService.distribute_tips(
            outlet,
            SERVICE_DATE,
            Decimal("100.00"),
            [{"employee_id": "server-1", "amount": "33.33"}, {"employee_id": "server-2", "amount": "66.66"}],
        )

        assert pool.total_tips == Decimal("100.00")

    def test_duplicate_employee_rejected(self, outlet):
        with pytest.raises(ValidationError, match="more than once"):
            TipPoolService.distribute_tips(
                outlet,
                SERVICE_DATE,
                Decimal("20.00"),
                [{"employee_id": "server-1", "amount": "10.00"}, {"employee_id": "server-1", "amount": "10.00"}],
            )

    def test_negative_allocation_rejected(self, outlet):
        with pytest.raises(ValidationError, match="cannot be negative"):
            TipPoolService.distribute_tips(
                outlet,
                SERVICE_DATE,
                Decimal("20.00"),
                [{"employee_id": "server-1", "amount": "30.00"}, {"employee_id": "server-2", "amount": "-10.00"}],
            )

    def test_empty_allocations_rejected(self, outlet):
        with pytest.raises(ValidationError, match="at least one allocation"):
            TipPoolService.distribute_tips(outlet, SERVICE_DATE, Decimal("20.00"), [])

    def test_pools_are_immutable(self, outlet):
        pool = TipPoolService.distribute_tips(
            outlet, SERVICE_DATE, Decimal("10.00"), [{"employee_id": "server-1", "amount": "10.00"}]
        )

        pool.total_tips = Decimal("99.00")
        with pytest.raises(InvalidStateError):
            pool.save()
        with pytest.raises(InvalidStateError):
            pool.allocations.get().delete()


class TestAllocateByShare:
    """Percent shares become cent-exact amounts"""

    def test_even_three_way(self):
        allocations = TipPoolService.allocate_by_share(
            Decimal("100.00"),
            [
                {"employee_id": "a", "share_percent": "33.33"},
                {"employee_id": "b", "share_percent": "33.33"},
                {"employee_id": "c", "share_percent": "33.34"},
            ],
        )

        amounts = [a["amount"] for a in allocations]
        assert sum(amounts) == Decimal("100.00")
        assert amounts == [Decimal("33.33"), Decimal("33.33"), Decimal("33.34")]

    def test_weights_need_not_total_100(self):
        allocations = TipPoolService.allocate_by_share(
            Decimal("10.00"),
            [{"employee_id": "a", "share_percent": "1"}, {"employee_id": "b", "share_percent": "1"},
             {"employee_id": "c", "share_percent": "1"}],
        )

        assert [a["amount"] for a in allocations] == [Decimal("3.34"), Decimal("3.33"), Decimal("3.33")]

    def test_all_zero_rejected(self):
        with pytest.raises(ValidationError, match="must not all be zero"):
            TipPoolService.allocate_by_share(Decimal("10.00"), [{"employee_id": "a", "share_percent": "0"}])

    def test_negative_share_rejected(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            TipPoolService.allocate_by_share(Decimal("10.00"), [{"employee_id": "a", "share_percent": "-5"}])
