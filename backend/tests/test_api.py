"""
HTTP API tests.

Exercises the JSON surface end to end through the Flask test client:
auth, purchase, inventory, send, claim preview, partner redemption and sync.
"""

import pytest

from cadeau.models import Account, GiftTransaction, STATUS_REDEEMED
from cadeau.services import partner_service


TEST_PASSWORD = "Password123"


def _purchase(client, headers, gift_type_id, quantity):
    return client.post('/api/gifts/purchase', headers=headers,
                       json={'items': [{'gift_type_id': gift_type_id, 'quantity': quantity}]})


def _send(client, headers, gift_type_id, **extra):
    return client.post('/api/gifts/send', headers=headers, json={'gift_type_id': gift_type_id, **extra})


class TestAuthRequired:
    @pytest.mark.parametrize("method,path", [
        ('post', '/api/gifts/purchase'),
        ('get', '/api/gifts/inventory'),
        ('post', '/api/gifts/send'),
        ('get', '/api/gifts/sent'),
        ('post', '/api/gifts/sync'),
        ('post', '/api/auth/logout'),
        ('get', '/api/auth/me'),
    ])
    def test_missing_token(self, client, db_session, method, path):
        response = getattr(client, method)(path, json={})
        assert response.status_code == 401

    def test_unknown_token(self, client, db_session):
        response = client.get('/api/gifts/inventory', headers={'Authorization': 'Bearer not-a-token'})
        assert response.status_code == 401

    def test_missing_or_unknown_partner_key(self, client, db_session):
        assert client.get('/api/partners/stats').status_code == 401
        response = client.post('/api/partners/redeem', headers={'X-Partner-Key': 'nope'}, json={'code': 'x'})
        assert response.status_code == 401


class TestAccounts:
    def test_register_returns_token(self, client, db_session):
        response = client.post('/api/auth/register', json={
            'email': 'New@Example.com', 'name': 'Nieuw', 'password': 'Welkom123',
        })

        assert response.status_code == 201
        data = response.get_json()
        assert data['account']['email'] == 'new@example.com'
        me = client.get('/api/auth/me', headers={'Authorization': f"Bearer {data['token']}"})
        assert me.get_json()['account']['name'] == 'Nieuw'

    def test_duplicate_email(self, client, account):
        response = client.post('/api/auth/register', json={
            'email': account.email, 'name': 'Dubbel', 'password': 'Welkom123',
        })
        assert response.status_code == 409

    @pytest.mark.parametrize("password", ['short1', 'allletters', '12345678'])
    def test_weak_password(self, client, db_session, password):
        response = client.post('/api/auth/register', json={
            'email': 'weak@example.com', 'name': 'Zwak', 'password': password,
        })
        assert response.status_code == 400

    def test_login(self, client, account):
        response = client.post('/api/auth/login', json={'email': account.email, 'password': TEST_PASSWORD})

        assert response.status_code == 200
        assert response.get_json()['token']

    def test_login_wrong_password(self, client, account):
        response = client.post('/api/auth/login', json={'email': account.email, 'password': 'Wrong1234'})
        assert response.status_code == 401

    def test_logout_revokes_token(self, client, auth_headers):
        assert client.post('/api/auth/logout', headers=auth_headers).status_code == 200
        assert client.get('/api/auth/me', headers=auth_headers).status_code == 401

    def test_demo_login_is_idempotent(self, client, db_session):
        first = client.post('/api/auth/demo-login')
        second = client.post('/api/auth/demo-login')

        assert first.status_code == second.status_code == 200
        assert first.get_json()['account']['id'] == second.get_json()['account']['id']
        assert db_session.query(Account).count() == 1


class TestCatalogAndPurchase:
    def test_types_lists_active_only(self, client, catalog):
        response = client.get('/api/gifts/types')

        assert response.status_code == 200
        names = [gt['name'] for gt in response.get_json()['gift_types']]
        assert names == ['Biertje', 'Koffie', 'Bioscoopkaartje']

    def test_purchase_and_inventory(self, client, auth_headers, catalog):
        response = _purchase(client, auth_headers, catalog['beer'].id, 3)

        assert response.status_code == 201
        assert response.get_json()['total_amount'] == '10.50'

        inventory = client.get('/api/gifts/inventory', headers=auth_headers).get_json()['inventory']
        assert [(line['name'], line['quantity']) for line in inventory] == [('Biertje', 3)]

    def test_inactive_item(self, client, auth_headers, catalog):
        response = _purchase(client, auth_headers, catalog['retired'].id, 1)

        assert response.status_code == 400
        assert response.get_json()['error'] == 'invalid_item'
        assert response.get_json()['category'] == 'bad_request'

    def test_zero_quantity(self, client, auth_headers, catalog):
        response = _purchase(client, auth_headers, catalog['beer'].id, 0)
        assert response.status_code == 400
        assert response.get_json()['error'] == 'invalid_item'

    @pytest.mark.parametrize("body", [
        {},
        {'items': []},
        {'items': 'beer'},
        {'items': [{'gift_type_id': 1}]},
        {'items': [{'gift_type_id': 1, 'quantity': 2.5}]},
        {'items': [{'gift_type_id': 1, 'quantity': '1e3'}]},
    ])
    def test_malformed_body(self, client, auth_headers, catalog, body):
        response = client.post('/api/gifts/purchase', headers=auth_headers, json=body)
        assert response.status_code == 400


class TestSendAndClaim:
    def test_send_returns_code_qr_and_link(self, client, auth_headers, stocked):
        response = _send(client, auth_headers, stocked['beer'].id,
                         receiver_email='bram@example.com', message='Proost!')

        assert response.status_code == 201
        data = response.get_json()
        assert data['status'] == 'issued'
        assert data['redemption_code'].startswith('CADEAU-')
        assert data['qr_code'].startswith('data:image/png;base64,')
        assert data['claim_url'].endswith(data['transaction_id'])

    def test_send_without_units(self, client, auth_headers, catalog):
        response = _send(client, auth_headers, catalog['cinema'].id)

        assert response.status_code == 409
        assert response.get_json()['error'] == 'insufficient_balance'

    def test_send_rejects_bad_email(self, client, auth_headers, stocked):
        response = _send(client, auth_headers, stocked['beer'].id, receiver_email='not-an-email')
        assert response.status_code == 400

    def test_send_rejects_long_message(self, client, auth_headers, stocked):
        response = _send(client, auth_headers, stocked['beer'].id, message='x' * 501)
        assert response.status_code == 400

    def test_claim_preview(self, client, auth_headers, stocked):
        sent = _send(client, auth_headers, stocked['beer'].id, message='Proost!').get_json()

        response = client.get(f"/api/gifts/claim/{sent['transaction_id']}")

        assert response.status_code == 200
        gift = response.get_json()['gift']
        assert gift['name'] == 'Biertje'
        assert gift['status'] == 'issued'
        assert gift['sender_name'] == 'Anna'
        assert gift['qr_code'].startswith('data:image/png;base64,')

    def test_claim_unknown(self, client, db_session):
        response = client.get('/api/gifts/claim/CADEAU-0000-0000-0000-0000')

        assert response.status_code == 404
        assert response.get_json()['category'] == 'dead_code'

    def test_claim_after_redemption_is_gone(self, client, auth_headers, partner_headers, stocked):
        sent = _send(client, auth_headers, stocked['beer'].id).get_json()
        client.post('/api/partners/redeem', headers=partner_headers, json={'code': sent['redemption_code']})

        response = client.get(f"/api/gifts/claim/{sent['redemption_code']}")

        assert response.status_code == 410
        assert response.get_json()['error'] == 'already_redeemed'

    def test_sent_history(self, client, auth_headers, stocked):
        sent = _send(client, auth_headers, stocked['beer'].id).get_json()

        history = client.get('/api/gifts/sent', headers=auth_headers).get_json()['sent_gifts']

        assert [entry['transaction_id'] for entry in history] == [sent['transaction_id']]
        assert 'redemption_code' not in history[0]


class TestPartnerRedemption:
    def test_redeem_once(self, client, db_session, auth_headers, partner_headers, partner, stocked):
        partner_row, _ = partner
        sent = _send(client, auth_headers, stocked['beer'].id).get_json()

        first = client.post('/api/partners/redeem', headers=partner_headers, json={'code': sent['redemption_code']})
        second = client.post('/api/partners/redeem', headers=partner_headers, json={'code': sent['redemption_code']})

        assert first.status_code == 200
        assert first.get_json()['transaction']['status'] == STATUS_REDEEMED
        assert first.get_json()['gift']['name'] == 'Biertje'
        assert second.status_code == 410
        assert second.get_json()['category'] == 'dead_code'

        tx = db_session.get(GiftTransaction, sent['transaction_id'])
        assert tx.partner_id == partner_row.id

    def test_redeem_unknown_code(self, client, partner_headers):
        response = client.post('/api/partners/redeem', headers=partner_headers,
                               json={'code': 'CADEAU-0000-0000-0000-0000'})
        assert response.status_code == 404

    def test_redeem_requires_code(self, client, partner_headers):
        response = client.post('/api/partners/redeem', headers=partner_headers, json={})
        assert response.status_code == 400

    def test_pending_partner_is_forbidden(self, client, db_session):
        _, api_key = partner_service.create_partner(
            business_name="Bakkerij Zuid", owner_name="Lotte", email="lotte@zuid.example",
        )

        response = client.post('/api/partners/redeem', headers={'X-Partner-Key': api_key},
                               json={'code': 'CADEAU-0000-0000-0000-0000'})
        assert response.status_code == 403

    def test_stats(self, client, auth_headers, partner_headers, stocked):
        for gift in ('beer', 'beer', 'coffee'):
            sent = _send(client, auth_headers, stocked[gift].id).get_json()
            client.post('/api/partners/redeem', headers=partner_headers, json={'code': sent['redemption_code']})

        stats = client.get('/api/partners/stats', headers=partner_headers).get_json()['stats']

        assert stats['total_redemptions'] == 3
        assert stats['total_value'] == '9.75'
        assert [(row['name'], row['count']) for row in stats['by_gift_type']] == [('Biertje', 2), ('Koffie', 1)]
        assert len(stats['recent']) == 3


class TestSync:
    def test_sync_records_device_and_returns_state(self, client, db_session, account, auth_headers, stocked):
        _send(client, auth_headers, stocked['coffee'].id)

        response = client.post('/api/gifts/sync', headers=auth_headers, json={'device_id': 'iphone-keyboard-1'})

        assert response.status_code == 200
        data = response.get_json()
        assert [(line['name'], line['quantity']) for line in data['inventory']] == [('Biertje', 3)]
        assert len(data['recent_sent']) == 1
        assert data['sync_time'].endswith('Z')
        assert db_session.get(Account, account.id).device_id == 'iphone-keyboard-1'


class TestSystem:
    def test_health(self, client, db_session):
        response = client.get('/health')

        assert response.status_code == 200
        data = response.get_json()
        assert data['status'] == 'OK'
        assert data['checks']['database']['status'] == 'healthy'

    def test_demo_endpoints(self, client, db_session):
        assert client.get('/api/demo/status').status_code == 200
        assert client.get('/api/demo/sample-purchase').status_code == 200

    def test_unknown_route(self, client, db_session):
        response = client.get('/api/nope')

        assert response.status_code == 404
        assert response.get_json()['error'] == 'Not found'
