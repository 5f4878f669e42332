"""
Shared test fixtures for all backend tests.

This module provides reusable pytest fixtures for common test objects
like outlets, tables, menu items, terminals, orders and shifts.
"""
import pytest
from decimal import Decimal

from outlets.models import Outlet, Table
from menu.models import MenuItem
from terminals.models import Terminal
from orders.models import OrderItem


# ============================================================================
# OUTLET FIXTURES
# ============================================================================

@pytest.fixture
def outlet(db):
    """Outlet with 10% tax and no service charge"""
    return Outlet.objects.create(
        name='Harbour Grill',
        code='HG01',
        tax_rate=Decimal('10.00'),
        service_charge_rate=Decimal('0.00'),
    )


@pytest.fixture
def service_outlet(db):
    """Outlet with 5% tax and 5% service charge"""
    return Outlet.objects.create(
        name='Rooftop Lounge',
        code='RL01',
        tax_rate=Decimal('5.00'),
        service_charge_rate=Decimal('5.00'),
    )


@pytest.fixture
def other_outlet(db):
    return Outlet.objects.create(
        name='Garden Cafe',
        code='GC01',
        tax_rate=Decimal('8.00'),
        service_charge_rate=Decimal('0.00'),
    )


# ============================================================================
# TABLE FIXTURES
# ============================================================================

@pytest.fixture
def table(outlet):
    return Table.objects.create(outlet=outlet, table_number='T1', capacity=4, section='Main')


@pytest.fixture
def second_table(outlet):
    return Table.objects.create(outlet=outlet, table_number='T2', capacity=2, section='Main')


@pytest.fixture
def service_table(service_outlet):
    return Table.objects.create(outlet=service_outlet, table_number='R1', capacity=6)


@pytest.fixture
def other_outlet_table(other_outlet):
    return Table.objects.create(outlet=other_outlet, table_number='G1', capacity=4)


# ============================================================================
# MENU FIXTURES
# ============================================================================

@pytest.fixture
def starter(outlet):
    """Menu item priced 100.00"""
    return MenuItem.objects.create(
        outlet=outlet, name='Seafood Platter', price=Decimal('100.00'), default_course_type='APPETIZER'
    )


@pytest.fixture
def main_course(outlet):
    """Menu item priced 200.00"""
    return MenuItem.objects.create(outlet=outlet, name='Ribeye Steak', price=Decimal('200.00'))


@pytest.fixture
def dessert(outlet):
    """Menu item priced 12.50"""
    return MenuItem.objects.create(
        outlet=outlet, name='Creme Brulee', price=Decimal('12.50'), default_course_type='DESSERT'
    )


@pytest.fixture
def unavailable_item(outlet):
    return MenuItem.objects.create(
        outlet=outlet, name='Lobster Thermidor', price=Decimal('95.00'), is_available=False
    )


@pytest.fixture
def other_outlet_menu_item(other_outlet):
    return MenuItem.objects.create(outlet=other_outlet, name='Garden Salad', price=Decimal('9.00'))


@pytest.fixture
def service_menu(service_outlet):
    """Three dishes at the service-charge outlet: 40.00, 25.00 and 10.00"""
    return [
        MenuItem.objects.create(outlet=service_outlet, name='Mezze', price=Decimal('40.00')),
        MenuItem.objects.create(outlet=service_outlet, name='Falafel Wrap', price=Decimal('25.00')),
        MenuItem.objects.create(outlet=service_outlet, name='Mint Lemonade', price=Decimal('10.00')),
    ]


# ============================================================================
# TERMINAL FIXTURES
# ============================================================================

@pytest.fixture
def terminal(outlet):
    return Terminal.objects.create(outlet=outlet, name='Front Till', device_id='till-001')


@pytest.fixture
def second_terminal(outlet):
    return Terminal.objects.create(outlet=outlet, name='Bar Till', device_id='till-002')


@pytest.fixture
def other_outlet_terminal(other_outlet):
    return Terminal.objects.create(outlet=other_outlet, name='Garden Till', device_id='till-101')


# ============================================================================
# ORDER FIXTURES
# ============================================================================

@pytest.fixture
def open_order(outlet, table, starter, main_course):
    """
    Dine-in order with a 100.00 starter and a 200.00 main at 10% tax:
    subtotal 300.00, tax 30.00, total 330.00.
    """
    from orders.services import OrderService

    return OrderService.create_order(
        outlet=outlet,
        table=table,
        items=[
            {'menu_item_id': starter.id, 'quantity': 1, 'seat_number': 1},
            {'menu_item_id': main_course.id, 'quantity': 1, 'seat_number': 2},
        ],
        created_by='server-1',
    )


@pytest.fixture
def serve_all():
    """Move every live item of an order to SERVED."""
    from orders.services import KitchenService

    def _serve(order):
        for item in order.items.filter(is_void=False).exclude(status=OrderItem.ItemStatus.SERVED):
            KitchenService.transition_item(order.id, item.id, OrderItem.ItemStatus.SERVED)
        order.refresh_from_db()
        return order

    return _serve


# ============================================================================
# SHIFT FIXTURES
# ============================================================================

@pytest.fixture
def open_shift(outlet, terminal):
    """Open shift for cashier-1 with a 500.00 float"""
    from shifts.services import ShiftService

    return ShiftService.open_shift(outlet, terminal, 'cashier-1', opening_float=Decimal('500.00'))
