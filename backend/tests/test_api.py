"""
HTTP API tests.

Verifies:
- Token auth: header, query-string fallback, logout revokes
- Role policies on ledger, approval, users and reports
- Receive/issue and project endpoints book their paired ledger rows
- Error mapping (400 validation, 403 policy, 404 unknown ids)
"""

import pytest


@pytest.fixture
def cement(client, manager_headers):
    response = client.post('/api/inventory/items', json={
        'name': 'Cement', 'unit': 'ton', 'quantity': 450, 'min': 100,
    }, headers=manager_headers)
    assert response.status_code == 201
    return response.json['item']


@pytest.fixture
def nile_view(client, manager_headers):
    response = client.post('/api/projects', json={
        'name': 'Nile View', 'location': 'Giza', 'floors': 12, 'units': 48,
    }, headers=manager_headers)
    assert response.status_code == 201
    return response.json['project']


class TestSystem:

    def test_ping(self, client):
        response = client.get('/api/ping')
        assert response.status_code == 200
        assert response.json == {'status': 'ok'}

    def test_health(self, client, db_session):
        response = client.get('/api/health')
        assert response.status_code == 200
        assert response.json['status'] == 'healthy'
        assert set(response.json['checks']) == {'database', 'entity_store'}


class TestAuth:

    def test_login_returns_token(self, client, users):
        response = client.post('/api/auth/login', json={
            'username': 'manager', 'password': 'Password123!',
        })
        assert response.status_code == 200
        assert response.json['token']
        assert response.json['user']['role'] == 'manager'

    def test_login_by_email(self, login):
        assert login('accountant@example.com') is not None

    def test_bad_password(self, client, users):
        response = client.post('/api/auth/login', json={
            'username': 'manager', 'password': 'wrong-password',
        })
        assert response.status_code == 401

    def test_missing_fields(self, client, users):
        response = client.post('/api/auth/login', json={'username': 'manager'})
        assert response.status_code == 400

    def test_me(self, client, employee_headers):
        response = client.get('/api/auth/me', headers=employee_headers)
        assert response.status_code == 200
        assert response.json['user']['username'] == 'employee'

    @pytest.mark.parametrize('path', ['/api/auth/me', '/api/data', '/api/inventory/items', '/api/projects'])
    def test_requires_token(self, client, db_session, path):
        response = client.get(path)
        assert response.status_code == 401

    def test_invalid_token(self, client, db_session):
        response = client.get('/api/auth/me', headers={'Authorization': 'Bearer not-a-token'})
        assert response.status_code == 401

    def test_query_string_token(self, client, login):
        token = login('manager')
        response = client.get(f'/api/auth/me?token={token}')
        assert response.status_code == 200

    def test_logout_revokes(self, client, login):
        token = login('manager')
        assert client.post('/api/auth/logout', headers={'Authorization': f'Bearer {token}'}).status_code == 200
        assert client.get('/api/auth/me', headers={'Authorization': f'Bearer {token}'}).status_code == 401


class TestUsers:

    def test_manager_lists_users(self, client, manager_headers):
        response = client.get('/api/users', headers=manager_headers)
        assert response.status_code == 200
        assert {u['username'] for u in response.json['users']} == {'manager', 'accountant', 'employee'}

    @pytest.mark.parametrize('headers', ['accountant_headers', 'employee_headers'])
    def test_others_denied(self, client, headers, request):
        response = client.get('/api/users', headers=request.getfixturevalue(headers))
        assert response.status_code == 403
        assert response.json['required_policy'] == 'can_manage_users'


class TestTransactions:

    ENTRY = {'date': '2025-01-15', 'type': 'expense', 'description': 'office rent', 'amount': 1500}

    @pytest.mark.parametrize(
        'headers,approved',
        [('manager_headers', True), ('accountant_headers', True), ('employee_headers', False)],
    )
    def test_manual_entry_approval(self, client, headers, approved, request):
        response = client.post('/api/transactions', json=self.ENTRY, headers=request.getfixturevalue(headers))
        assert response.status_code == 201
        assert response.json['transaction']['approved'] is approved

    def test_manager_approves_pending(self, client, employee_headers, manager_headers, accountant_headers):
        tx = client.post('/api/transactions', json=self.ENTRY, headers=employee_headers).json['transaction']

        denied = client.post(f"/api/transactions/{tx['id']}/approve", headers=accountant_headers)
        assert denied.status_code == 403

        response = client.post(f"/api/transactions/{tx['id']}/approve", headers=manager_headers)
        assert response.status_code == 200
        assert response.json['transaction']['approved'] is True
        assert response.json['transaction']['approvedBy'] is not None

    def test_approve_unknown(self, client, manager_headers):
        response = client.post('/api/transactions/missing/approve', headers=manager_headers)
        assert response.status_code == 404

    @pytest.mark.parametrize(
        'payload',
        [
            {'date': '2025-01-15', 'type': 'expense', 'description': 'x', 'amount': 0},
            {'date': '2025-01-15', 'type': 'gift', 'description': 'x', 'amount': 1},
            {'date': 'tomorrow', 'type': 'expense', 'description': 'x', 'amount': 1},
            {'type': 'expense', 'description': 'x', 'amount': 1},
        ],
    )
    def test_rejects_bad_entry(self, client, manager_headers, payload):
        response = client.post('/api/transactions', json=payload, headers=manager_headers)
        assert response.status_code == 400

    def test_listing_requires_ledger_role(self, client, employee_headers, accountant_headers):
        assert client.get('/api/transactions', headers=employee_headers).status_code == 403
        assert client.get('/api/transactions', headers=accountant_headers).status_code == 200

    def test_list_filters_and_summary(self, client, manager_headers):
        client.post('/api/transactions', json=self.ENTRY, headers=manager_headers)
        client.post('/api/transactions', json={
            'date': '2025-02-01', 'type': 'revenue', 'description': 'unit sale', 'amount': 5000,
        }, headers=manager_headers)

        listed = client.get('/api/transactions?from=2025-01-01&to=2025-01-31', headers=manager_headers)
        assert [t['description'] for t in listed.json['transactions']] == ['office rent']

        summary = client.get('/api/transactions/summary', headers=manager_headers)
        assert summary.json == {'revenue': 5000, 'expense': 1500, 'net': 3500}

    def test_bad_range(self, client, manager_headers):
        response = client.get('/api/transactions?from=2025-02-01&to=2025-01-01', headers=manager_headers)
        assert response.status_code == 400

    def test_delete(self, client, manager_headers, employee_headers):
        tx = client.post('/api/transactions', json=self.ENTRY, headers=manager_headers).json['transaction']
        assert client.delete(f"/api/transactions/{tx['id']}", headers=employee_headers).status_code == 403
        response = client.delete(f"/api/transactions/{tx['id']}", headers=manager_headers)
        assert response.status_code == 200
        assert response.json == {'deleted': tx['id']}


class TestInventory:

    def test_issue_to_tower_a(self, client, manager_headers, cement):
        response = client.post('/api/inventory/issue', json={
            'itemId': cement['id'], 'qty': 500, 'unitPrice': 1000, 'project': 'Tower A', 'date': '2025-01-10',
        }, headers=manager_headers)
        assert response.status_code == 201
        body = response.json
        assert body['item']['quantity'] == 0
        assert body['item']['lowStock'] is True
        assert body['movement']['total'] == 500000
        assert body['transaction']['description'] == 'issue of Cement to project Tower A (500 ton × 1000)'
        assert body['notifications'] == [{'level': 'warning', 'message': 'low stock: Cement'}]

    def test_employee_receipt_is_pending(self, client, employee_headers, cement):
        response = client.post('/api/inventory/receive', json={
            'item_id': cement['id'], 'qty': 20, 'unit_price': 950.5, 'supplier': 'Suez Cement',
        }, headers=employee_headers)
        assert response.status_code == 201
        assert response.json['item']['quantity'] == 470
        assert response.json['transaction']['approved'] is False
        assert response.json['notifications'][0]['level'] == 'success'

    def test_receive_rejects_zero_qty(self, client, manager_headers, cement):
        response = client.post('/api/inventory/receive', json={
            'item_id': cement['id'], 'qty': 0, 'unit_price': 1, 'supplier': 'X',
        }, headers=manager_headers)
        assert response.status_code == 400
        movements = client.get('/api/inventory/movements', headers=manager_headers)
        assert movements.json['movements'] == []

    def test_receive_unknown_item(self, client, manager_headers):
        response = client.post('/api/inventory/receive', json={
            'item_id': 'missing', 'qty': 1, 'unit_price': 1, 'supplier': 'X',
        }, headers=manager_headers)
        assert response.status_code == 404

    def test_low_filter(self, client, manager_headers, cement):
        client.post('/api/inventory/items', json={
            'name': 'Sand', 'unit': 'm3', 'quantity': 10, 'min': 50,
        }, headers=manager_headers)
        response = client.get('/api/inventory/items?low=true', headers=manager_headers)
        assert [i['name'] for i in response.json['items']] == ['Sand']

    def test_movements_by_item(self, client, manager_headers, cement):
        client.post('/api/inventory/receive', json={
            'item_id': cement['id'], 'qty': 1, 'unit_price': 1, 'supplier': 'X',
        }, headers=manager_headers)
        response = client.get(f"/api/inventory/movements?item_id={cement['id']}", headers=manager_headers)
        assert len(response.json['movements']) == 1
        assert response.json['movements'][0]['kind'] == 'in'

    def test_delete_item(self, client, manager_headers, cement):
        response = client.delete(f"/api/inventory/items/{cement['id']}", headers=manager_headers)
        assert response.status_code == 200
        assert client.get('/api/inventory/items', headers=manager_headers).json['items'] == []


class TestProjects:

    def test_sale_and_delete_restore_ledger(self, client, manager_headers, nile_view):
        response = client.post(f"/api/projects/{nile_view['id']}/sales", json={
            'unitNo': 'A1', 'buyer': 'Ali', 'price': 200000, 'date': '2025-02-01',
        }, headers=manager_headers)
        assert response.status_code == 201
        tx = response.json['transaction']
        assert tx['type'] == 'revenue'
        assert tx['description'] == 'sale of unit A1 of project Nile View to Ali'

        sale_id = response.json['sale']['id']
        assert client.delete(f'/api/projects/sales/{sale_id}', headers=manager_headers).status_code == 200
        ledger = client.get('/api/transactions', headers=manager_headers).json['transactions']
        assert ledger == []

    def test_cost_and_summary(self, client, manager_headers, nile_view):
        response = client.post(f"/api/projects/{nile_view['id']}/costs", json={
            'type': 'construction', 'amount': 120000, 'note': 'foundations',
        }, headers=manager_headers)
        assert response.status_code == 201
        assert response.json['transaction']['description'] == 'construction cost for project Nile View'

        costs = client.get(f"/api/projects/{nile_view['id']}/costs", headers=manager_headers)
        assert [c['note'] for c in costs.json['costs']] == ['foundations']

        summary = client.get(f"/api/projects/{nile_view['id']}", headers=manager_headers)
        assert summary.status_code == 200
        assert summary.json['totalCosts'] == 120000
        assert summary.json['profit'] == -120000

    def test_bad_cost_type(self, client, manager_headers, nile_view):
        response = client.post(f"/api/projects/{nile_view['id']}/costs", json={
            'type': 'marketing', 'amount': 10,
        }, headers=manager_headers)
        assert response.status_code == 400

    def test_unknown_project(self, client, manager_headers):
        assert client.get('/api/projects/missing', headers=manager_headers).status_code == 404

    def test_delete_project_cascades(self, client, manager_headers, nile_view):
        client.post(f"/api/projects/{nile_view['id']}/costs", json={
            'type': 'operation', 'amount': 10,
        }, headers=manager_headers)
        response = client.delete(f"/api/projects/{nile_view['id']}", headers=manager_headers)
        assert response.status_code == 200

        data = client.get('/api/data', headers=manager_headers).json
        assert data['projects'] == []
        assert data['projectCosts'] == []
        assert data['transactions'] == []


class TestReports:

    def test_profit_loss(self, client, manager_headers):
        client.post('/api/transactions', json={
            'date': '2025-01-05', 'type': 'revenue', 'description': 'sale', 'amount': 200000,
        }, headers=manager_headers)
        response = client.get('/api/reports/profit-loss?from=2025-01-01&to=2025-01-31', headers=manager_headers)
        assert response.status_code == 200
        assert response.json['kind'] == 'profit-loss'
        assert response.json['rows'][0] == ['Total revenue', '200,000 EGP']
        assert response.json['from'] == '2025-01-01'

    def test_employee_denied(self, client, employee_headers):
        assert client.get('/api/reports/revenue', headers=employee_headers).status_code == 403

    def test_unknown_kind(self, client, accountant_headers):
        assert client.get('/api/reports/balance-sheet', headers=accountant_headers).status_code == 400

    def test_project_report_requires_id(self, client, accountant_headers):
        assert client.get('/api/reports/project', headers=accountant_headers).status_code == 400

    def test_unknown_project(self, client, accountant_headers):
        response = client.get('/api/reports/project?project_id=missing', headers=accountant_headers)
        assert response.status_code == 404


class TestData:

    def test_collections(self, client, employee_headers):
        response = client.get('/api/data', headers=employee_headers)
        assert response.status_code == 200
        assert set(response.json) == {
            'transactions', 'inventory', 'movements', 'projects', 'projectCosts', 'projectSales',
        }
