def _log(client, **overrides):
    body = {'type': 'sleep', 'date': '2024-01-01T08:00:00Z', 'description': '7 hours', 'userId': 'u1'}
    body.update(overrides)
    return client.post('/api/health-logs', json=body)


def test_list_requires_user_id(client):
    resp = client.get('/api/health-logs')
    assert resp.status_code == 400
    assert resp.get_json() == {'error': 'User ID is required'}
    assert client.get('/api/health-logs?userId=%20').status_code == 400


def test_create_returns_201_with_generated_fields(client):
    resp = _log(client, severity=3, metadata={'source': 'watch'})
    assert resp.status_code == 201
    created = resp.get_json()
    assert created['id']
    assert created['createdAt']
    assert created['userId'] == 'u1'
    assert created['metadata'] == {'source': 'watch'}


def test_create_validates_body(client):
    resp = client.post('/api/health-logs', json={'type': 'sleep', 'date': '2024-01-01', 'severity': 11})
    assert resp.status_code == 400
    paths = {tuple(d['path']) for d in resp.get_json()['details']}
    assert ('description',) in paths
    assert ('severity',) in paths

    resp = client.post('/api/health-logs', json=['not', 'an', 'object'])
    assert resp.status_code == 400
    assert resp.get_json()['details'] == [{'path': [], 'message': 'Expected a JSON object', 'code': 'type_error'}]


def test_list_is_newest_first_and_filters_by_type(client):
    _log(client, date='2024-01-01T08:00:00Z', description='older')
    _log(client, type='mood', date='2024-03-01T08:00:00Z', description='happy')
    _log(client, date='2024-02-01T08:00:00Z', description='newer')
    _log(client, userId='someone-else', description='not mine')

    logs = client.get('/api/health-logs?userId=u1').get_json()
    assert [log['description'] for log in logs] == ['happy', 'newer', 'older']

    sleep = client.get('/api/health-logs?userId=u1&type=sleep').get_json()
    assert [log['description'] for log in sleep] == ['newer', 'older']


def test_delete_returns_204_then_404(client):
    log_id = _log(client).get_json()['id']
    resp = client.delete(f'/api/health-logs/{log_id}')
    assert resp.status_code == 204
    assert resp.data == b''

    resp = client.delete(f'/api/health-logs/{log_id}')
    assert resp.status_code == 404
    assert resp.get_json() == {'error': 'Health log not found'}
    assert client.get('/api/health-logs?userId=u1').get_json() == []


def test_trends_requires_user_and_reports_failures(client, provider):
    assert client.get('/api/health/trends').status_code == 400

    provider.error = 'Perplexity analysis error: HTTP 401: bad key'
    resp = client.get('/api/health/trends?userId=u1')
    assert resp.status_code == 500
    assert resp.get_json() == {'error': 'Perplexity analysis error: HTTP 401: bad key'}


def test_trends_with_no_logs_still_dispatches(client, provider):
    resp = client.get('/api/health/trends?userId=nobody')
    assert resp.status_code == 200
    assert resp.get_json()['logCount'] == 0
    assert provider.calls == [('analyze', {'logs': []}, 'health_trends')]


def test_unknown_route_is_json_404(client):
    resp = client.get('/api/does-not-exist')
    assert resp.status_code == 404
    assert 'error' in resp.get_json()
