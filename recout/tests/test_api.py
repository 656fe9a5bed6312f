import json
from unittest import mock

import pytest

from recout.services import RecoveryServiceError


def login(client, username='admin', password='123'):
    return client.post('/api/login', json={'username': username, 'password': password})


@pytest.fixture
def logged_in(client):
    r = login(client)
    assert r.status_code == 200
    return client


@pytest.mark.parametrize('method, path', [
    ('get', '/api/me'),
    ('get', '/api/dashboard'),
    ('get', '/api/employees'),
    ('post', '/api/production/start'),
    ('post', '/api/recovery'),
])
def test_routes_require_login(client, method, path):
    r = getattr(client, method)(path)
    assert r.status_code == 401
    assert r.get_json()['ok'] is False


def test_login_and_me_hide_password(client):
    r = login(client, ' Admin ', '123')
    assert r.status_code == 200
    user = r.get_json()['user']
    assert user['username'] == 'admin'
    assert 'password' not in user

    me = client.get('/api/me').get_json()
    assert me['user']['name'] == 'Administrador'


def test_login_failures(client):
    assert login(client, 'admin', 'nope').status_code == 401
    assert login(client, '', '').status_code == 400


def test_self_registration_then_login(client):
    r = client.post('/api/register', json={'name': 'Carlos', 'username': 'carlos', 'password': 'c0'})
    assert r.status_code == 201
    assert r.get_json()['employee']['sector'] == 'Triagem'

    assert login(client, 'CARLOS', 'c0').status_code == 200
    assert client.post('/api/register', json={'name': 'Carlos', 'username': 'c2', 'password': 'x'}).status_code == 409


def test_register_client_validation(logged_in):
    body = {'name': 'Malharia Sul', 'doc': '12.345.678/0001-90', 'contact': '(11) 99999-0000'}
    assert logged_in.post('/api/clients', json=body).status_code == 201

    dup = logged_in.post('/api/clients', json=body)
    assert dup.status_code == 409
    assert dup.get_json()['ok'] is False

    assert logged_in.post('/api/clients', json={}).status_code == 400


def test_production_flow(logged_in):
    logged_in.post('/api/clients', json={'name': 'Malharia Sul', 'doc': '1'})
    r = logged_in.post('/api/products', json={'name': 'Camiseta Polo', 'client': 'Malharia Sul'})
    assert r.status_code == 201
    assert r.get_json()['product']['code'] == '1001'
    assert logged_in.get('/api/products').get_json()['nextCode'] == '1002'

    r = logged_in.post('/api/production/start')
    assert r.status_code == 409
    assert r.get_json()['session']['state'] == 'idle'

    assert logged_in.post('/api/production/part', json={'code': '9999'}).status_code == 404
    r = logged_in.post('/api/production/part', json={'code': '1001'})
    assert r.get_json()['session']['clientName'] == 'Malharia Sul'

    r = logged_in.post('/api/production/start')
    assert r.status_code == 200
    assert r.get_json()['session']['state'] == 'running'
    assert logged_in.get('/api/dashboard').get_json()['live'][0]['partCode'] == '1001'

    r = logged_in.post('/api/production/advance', json={'nextSector': 'Costura'})
    assert r.status_code == 200
    assert r.get_json()['session']['state'] == 'finished'
    assert logged_in.post('/api/production/advance').status_code == 409

    ledger = logged_in.get('/api/production').get_json()['production']
    assert [(e['status'], e['currentSector']) for e in ledger] == [('finished', 'Costura')]

    r = logged_in.post('/api/production/reset')
    assert r.get_json()['session']['state'] == 'idle'
    assert len(logged_in.get('/api/production').get_json()['production']) == 1


def test_sector_selection(logged_in):
    r = logged_in.post('/api/production/sector', json={'kind': 'next', 'name': 'Bordado'})
    assert r.get_json()['session']['nextSector'] == 'Bordado'
    r = logged_in.post('/api/production/sector', json={'kind': 'current', 'name': 'Corte'})
    assert r.get_json()['session']['currentSector'] == 'Corte'


def test_sector_crud(logged_in):
    r = logged_in.post('/api/sectors', json={'name': 'Lavanderia', 'manager': 'Rita'})
    assert r.status_code == 201
    sector_id = r.get_json()['sector']['id']

    r = logged_in.put(f'/api/sectors/{sector_id}', json={'name': 'Lavagem', 'manager': 'Rita'})
    assert r.get_json()['sector']['name'] == 'Lavagem'

    logged_in.delete(f'/api/sectors/{sector_id}')
    names = [s['name'] for s in logged_in.get('/api/sectors').get_json()['sectors']]
    assert 'Lavagem' not in names


def test_dashboard_and_report_shape(logged_in):
    data = logged_in.get('/api/dashboard').get_json()
    assert set(data) >= {'ok', 'generatedAt', 'totalDaily', 'live', 'sectors'}
    assert {s['name'] for s in data['sectors']} >= {'Triagem', 'Expedição'}

    ranking = logged_in.get('/api/reports/monthly').get_json()['ranking']
    assert ranking[0]['name'] == 'Administrador'


def test_recovery_route(logged_in, container):
    container._recovery_service = mock.Mock()
    container._recovery_service.generate_plan.return_value = '# Plano'

    assert logged_in.post('/api/recovery', json={'description': '  '}).status_code == 400

    r = logged_in.post('/api/recovery', json={'description': 'Um painel'})
    assert r.get_json() == {'ok': True, 'plan': '# Plano'}

    container._recovery_service.generate_plan.side_effect = RecoveryServiceError('Falha')
    r = logged_in.post('/api/recovery', json={'description': 'Um painel'})
    assert r.status_code == 502
    assert r.get_json()['error'] == 'Falha'


def test_logout_ends_session(logged_in):
    assert logged_in.post('/api/logout').status_code == 200
    assert logged_in.get('/api/me').status_code == 401


def test_security_headers(client):
    r = client.get('/api/me')
    assert r.headers['X-Frame-Options'] == 'DENY'
    assert r.headers['X-Content-Type-Options'] == 'nosniff'


def test_login_is_bound_to_the_client_cookie(app, logged_in):
    other = app.test_client()
    r = other.get('/api/me')
    assert r.status_code == 401
    assert other.get('/api/dashboard').status_code == 401

    assert logged_in.get('/api/me').status_code == 200


def test_later_login_replaces_the_operator(app, logged_in):
    logged_in.post('/api/register', json={'name': 'Carlos', 'username': 'carlos', 'password': 'c0'})

    other = app.test_client()
    assert login(other, 'carlos', 'c0').status_code == 200
    assert other.get('/api/me').get_json()['user']['name'] == 'Carlos'

    assert logged_in.get('/api/me').status_code == 401


def test_dashboard_stream_sends_snapshots(app, logged_in):
    app.config['DASHBOARD_INTERVAL'] = 0.01

    r = logged_in.get('/api/dashboard/stream?events=2')
    assert r.status_code == 200
    assert r.mimetype == 'text/event-stream'

    events = [chunk for chunk in r.get_data(as_text=True).split('\n\n') if chunk.startswith('data: ')]
    assert len(events) == 2
    snapshot = json.loads(events[0][len('data: '):])
    assert set(snapshot) >= {'generatedAt', 'totalDaily', 'live', 'sectors'}
