"""
Order API Tests

Covers the HTTP surface of the order ledger: every write goes through a
service-backed action and ledger errors come back in the error envelope.
"""
import uuid

import pytest
from decimal import Decimal
from rest_framework import status

from orders.models import Order, OrderItem


@pytest.fixture
def create_payload(outlet, table, starter, main_course):
    return {
        'outlet_id': str(outlet.id),
        'table_id': str(table.id),
        'created_by': 'server-1',
        'guest_count': 2,
        'items': [
            {'menu_item_id': str(starter.id), 'quantity': 1, 'seat_number': 1},
            {'menu_item_id': str(main_course.id), 'quantity': 1, 'seat_number': 2},
        ],
    }


@pytest.mark.django_db
class TestOrderCreateAPI:

    def test_create_order(self, api_client, create_payload, table):
        response = api_client.post('/api/orders/', create_payload, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['status'] == Order.OrderStatus.OPEN
        assert response.data['subtotal'] == '300.00'
        assert response.data['tax_amount'] == '30.00'
        assert response.data['total'] == '330.00'
        assert response.data['table_number'] == 'T1'
        assert len(response.data['items']) == 2

    def test_missing_outlet_is_field_error(self, api_client, create_payload):
        del create_payload['outlet_id']

        response = api_client.post('/api/orders/', create_payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'outlet_id' in response.data

    def test_occupied_table_rejected(self, api_client, create_payload, open_order):
        response = api_client.post('/api/orders/', create_payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error']['code'] == 'validation_error'

    def test_unknown_order_is_404(self, api_client):
        response = api_client.post(f'/api/orders/{uuid.uuid4()}/close/', {}, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['error']['code'] == 'not_found'
        assert response.data['error']['detail']['entity'] == 'Order'

    def test_orders_cannot_be_deleted(self, api_client, open_order):
        response = api_client.delete(f'/api/orders/{open_order.id}/')

        assert response.status_code == status.HTTP_405_METHOD_NOT_ALLOWED
        assert Order.objects.filter(pk=open_order.pk).exists()

    def test_list_filters_by_status(self, api_client, open_order):
        response = api_client.get('/api/orders/', {'status': 'OPEN'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert response.data['results'][0]['order_number'] == open_order.order_number


@pytest.mark.django_db
class TestOrderItemAPI:

    def test_add_item(self, api_client, open_order, dessert):
        response = api_client.post(
            f'/api/orders/{open_order.id}/items/',
            {'menu_item_id': str(dessert.id), 'quantity': 2, 'seat_number': 1},
            format='json',
        )

        open_order.refresh_from_db()
        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['total_price'] == '25.00'
        assert open_order.subtotal == Decimal('325.00')

    def test_patch_quantity(self, api_client, open_order, starter):
        item = open_order.items.get(menu_item=starter)

        response = api_client.patch(
            f'/api/orders/{open_order.id}/items/{item.id}/', {'quantity': 3}, format='json'
        )

        open_order.refresh_from_db()
        assert response.status_code == status.HTTP_200_OK
        assert response.data['quantity'] == 3
        assert open_order.total == Decimal('550.00')

    def test_delete_voids_item(self, api_client, open_order, main_course):
        item = open_order.items.get(menu_item=main_course)

        response = api_client.delete(
            f'/api/orders/{open_order.id}/items/{item.id}/',
            {'reason': 'Guest changed mind', 'voided_by': 'server-1'},
            format='json',
        )

        open_order.refresh_from_db()
        assert response.status_code == status.HTTP_200_OK
        assert response.data['is_void'] is True
        assert OrderItem.objects.filter(pk=item.pk).exists()
        assert open_order.total == Decimal('110.00')

    def test_status_transition(self, api_client, open_order, starter):
        item = open_order.items.get(menu_item=starter)

        response = api_client.post(
            f'/api/orders/{open_order.id}/items/{item.id}/status/',
            {'status': 'SENT', 'performed_by': 'server-1'},
            format='json',
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == OrderItem.ItemStatus.SENT
        assert response.data['sent_to_kitchen_at'] is not None

    def test_backward_transition_is_conflict(self, api_client, open_order, starter, serve_all):
        serve_all(open_order)
        item = open_order.items.get(menu_item=starter)

        response = api_client.post(
            f'/api/orders/{open_order.id}/items/{item.id}/status/', {'status': 'SENT'}, format='json'
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['error']['code'] == 'invalid_state'

    def test_fire_course(self, api_client, open_order):
        response = api_client.post(f'/api/orders/{open_order.id}/fire/', {}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert {item['status'] for item in response.data} == {OrderItem.ItemStatus.SENT}


@pytest.mark.django_db
class TestBillingAPI:

    def test_percentage_discount(self, api_client, open_order):
        response = api_client.post(
            f'/api/orders/{open_order.id}/discounts/',
            {'name': 'Regulars', 'discount_type': 'PERCENTAGE', 'value': '10', 'applied_by': 'manager-1'},
            format='json',
        )

        open_order.refresh_from_db()
        assert response.status_code == status.HTTP_201_CREATED
        assert open_order.discount == Decimal('30.00')

    def test_equal_split_and_split_payment(self, api_client, open_order):
        response = api_client.post(
            f'/api/orders/{open_order.id}/splits/',
            {'split_type': 'EQUAL', 'number_of_splits': 2},
            format='json',
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert [split['total'] for split in response.data] == ['165.00', '165.00']

        response = api_client.post(
            f'/api/orders/{open_order.id}/payments/',
            {
                'method': 'CARD',
                'amount': '165.00',
                'processed_by': 'cashier-1',
                'split_bill_id': response.data[0]['id'],
            },
            format='json',
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['order']['payment_status'] == Order.PaymentStatus.PARTIALLY_PAID
        assert response.data['order']['split_bills'][0]['is_paid'] is True

    def test_item_edit_blocked_while_split(self, api_client, open_order, dessert):
        api_client.post(
            f'/api/orders/{open_order.id}/splits/', {'split_type': 'EQUAL', 'number_of_splits': 3}, format='json'
        )

        response = api_client.post(
            f'/api/orders/{open_order.id}/items/', {'menu_item_id': str(dessert.id)}, format='json'
        )

        assert response.status_code == status.HTTP_409_CONFLICT

        response = api_client.post(f'/api/orders/{open_order.id}/void-splits/', {}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['voided'] == 3

    def test_pay_serve_and_close(self, api_client, open_order, open_shift, serve_all):
        response = api_client.post(
            f'/api/orders/{open_order.id}/close/', {'closed_by': 'server-1'}, format='json'
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['error']['code'] == 'invalid_state'

        serve_all(open_order)
        response = api_client.post(
            f'/api/orders/{open_order.id}/payments/',
            {
                'method': 'CASH',
                'amount': '330.00',
                'tip_amount': '20.00',
                'processed_by': 'cashier-1',
                'shift_id': str(open_shift.id),
            },
            format='json',
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['payment']['amount'] == '330.00'
        assert response.data['order']['payment_status'] == Order.PaymentStatus.PAID

        response = api_client.post(
            f'/api/orders/{open_order.id}/close/', {'closed_by': 'server-1'}, format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == Order.OrderStatus.CLOSED
        assert response.data['closed_at'] is not None

        payments = api_client.get(f'/api/orders/{open_order.id}/payments/')
        assert len(payments.data) == 1

    def test_item_changes_refused_after_payment(self, api_client, open_order, main_course):
        api_client.post(
            f'/api/orders/{open_order.id}/payments/',
            {'method': 'CASH', 'amount': '330.00', 'processed_by': 'cashier-1'},
            format='json',
        )
        item = open_order.items.get(menu_item=main_course)

        response = api_client.delete(
            f'/api/orders/{open_order.id}/items/{item.id}/', {'reason': 'Comped'}, format='json'
        )

        open_order.refresh_from_db()
        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['error']['code'] == 'invalid_state'
        assert response.data['error']['detail']['current_state'] == Order.PaymentStatus.PAID
        assert open_order.total == Decimal('330.00')

    def test_void_needs_reason(self, api_client, open_order):
        response = api_client.post(f'/api/orders/{open_order.id}/void/', {'voided_by': 'manager-1'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'reason' in response.data

    def test_void_frees_table(self, api_client, open_order, table):
        response = api_client.post(
            f'/api/orders/{open_order.id}/void/',
            {'reason': 'Walked out', 'voided_by': 'manager-1'},
            format='json',
        )

        table.refresh_from_db()
        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == Order.OrderStatus.VOID
        assert table.current_order_id is None
