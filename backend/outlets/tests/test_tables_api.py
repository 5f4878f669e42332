"""
Table API Tests
"""
import pytest
from rest_framework import status

from outlets.models import Table


@pytest.mark.django_db
class TestTableAPI:

    def test_list_shows_current_order(self, api_client, open_order):
        response = api_client.get('/api/tables/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['results'][0]['status'] == Table.TableStatus.OCCUPIED
        assert response.data['results'][0]['current_order_number'] == open_order.order_number

    def test_set_status(self, api_client, table):
        response = api_client.post(
            f'/api/tables/{table.id}/set-status/', {'status': 'CLEANING', 'changed_by': 'host-1'}, format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == Table.TableStatus.CLEANING

    def test_status_is_read_only_on_patch(self, api_client, table):
        response = api_client.patch(f'/api/tables/{table.id}/', {'status': 'OCCUPIED', 'capacity': 6}, format='json')

        table.refresh_from_db()
        assert response.status_code == status.HTTP_200_OK
        assert table.capacity == 6
        assert table.status == Table.TableStatus.AVAILABLE

    def test_freeing_table_with_open_order_is_conflict(self, api_client, open_order, table):
        response = api_client.post(f'/api/tables/{table.id}/set-status/', {'status': 'AVAILABLE'}, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['error']['code'] == 'invalid_state'
